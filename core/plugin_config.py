"""Optimize-imports plugin configuration.

Holds the set of barrel packages eligible for rewriting. The set comes from
built-in defaults, an optional YAML/JSON config file and the
``OPTIMIZE_IMPORTS_PACKAGES`` environment variable (``.env`` files are
honoured via python-dotenv). Parsing follows a strict/non-strict split:
strict mode raises ``ConfigValidationError``, non-strict mode logs and falls
back to defaults.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable, Optional

import yaml
from dotenv import load_dotenv

logger = logging.getLogger(__name__)

PACKAGES_ENV_VAR = "OPTIMIZE_IMPORTS_PACKAGES"
CONFIG_PATH_ENV_VAR = "OPTIMIZE_IMPORTS_CONFIG"

DEFAULT_OPTIMIZE_PACKAGES: tuple[str, ...] = (
    "lucide-react",
    "date-fns",
    "lodash-es",
    "ramda",
    "antd",
    "react-bootstrap",
    "ahooks",
    "@ant-design/icons",
    "@headlessui/react",
    "@headlessui-float/react",
    "@heroicons/react/20/solid",
    "@heroicons/react/24/solid",
    "@heroicons/react/24/outline",
    "@visx/visx",
    "@tremor/react",
    "rxjs",
    "@mui/material",
    "@mui/icons-material",
    "recharts",
    "react-use",
    "effect",
    "@effect/schema",
    "@effect/platform",
    "@material-ui/core",
    "@material-ui/icons",
    "@tabler/icons-react",
    "react-icons/ai",
    "react-icons/fa",
    "react-icons/md",
    "radix-ui",
)
"""Well-known barrel packages rewritten when no explicit list is given."""


class ConfigValidationError(RuntimeError):
    """Raised when strict configuration validation fails."""


def _env_flag(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def resolve_strict_config_validation(default: bool = False) -> bool:
    """Resolve strict validation mode from ``STRICT_CONFIG_VALIDATION`` env."""
    return _env_flag("STRICT_CONFIG_VALIDATION", default=default)


def normalize_package_names(
    names: Iterable[Any],
    strict: bool = False,
) -> tuple[str, ...]:
    """Strip, validate and de-duplicate package names, keeping first-seen order."""
    result: list[str] = []
    seen: set[str] = set()
    for raw in names:
        name = str(raw).strip() if raw is not None else ""
        if not name or any(ch.isspace() for ch in name) or name.startswith("."):
            msg = f"Invalid package name in optimize list: {raw!r}"
            if strict:
                raise ConfigValidationError(msg)
            logger.warning("%s; ignoring", msg)
            continue
        if name not in seen:
            seen.add(name)
            result.append(name)
    return tuple(result)


@dataclass(frozen=True)
class OptimizeImportsConfig:
    """Ordered, de-duplicated set of barrel package names.

    The set can grow through :meth:`with_packages` but never shrink.
    """

    packages: tuple[str, ...] = field(default=DEFAULT_OPTIMIZE_PACKAGES)

    def __post_init__(self) -> None:
        object.__setattr__(self, "packages", normalize_package_names(self.packages))

    def __contains__(self, package_name: object) -> bool:
        return package_name in self.packages

    def __len__(self) -> int:
        return len(self.packages)

    def with_packages(self, names: Iterable[str]) -> OptimizeImportsConfig:
        """Return a config extended with ``names`` (existing order is kept)."""
        return OptimizeImportsConfig(packages=self.packages + tuple(names))


def parse_packages_env(raw: str) -> list[str]:
    """Parse a comma separated package list (JSON array also accepted)."""
    text = raw.strip()
    if not text:
        return []
    if text.startswith("["):
        try:
            parsed = json.loads(text)
        except json.JSONDecodeError:
            logger.warning("Invalid %s JSON; ignoring", PACKAGES_ENV_VAR)
            return []
        if not isinstance(parsed, list):
            logger.warning("%s must be a JSON array; ignoring", PACKAGES_ENV_VAR)
            return []
        return [str(item) for item in parsed]
    return [part.strip() for part in text.split(",") if part.strip()]


def load_config_file(path: str, strict: bool = False) -> dict[str, Any]:
    """Load a YAML or JSON config file.

    In non-strict mode this returns an empty dict on read/parse failures.
    In strict mode this raises ``ConfigValidationError``.
    """
    config_path = Path(path)
    try:
        text = config_path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        msg = f"Optimize-imports config not found: {path}"
        if strict:
            raise ConfigValidationError(msg) from exc
        logger.warning("%s; continuing with defaults", msg)
        return {}

    try:
        if config_path.suffix.lower() == ".json":
            payload = json.loads(text)
        else:
            payload = yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        msg = f"Failed to parse optimize-imports config at {path}: {exc}"
        if strict:
            raise ConfigValidationError(msg) from exc
        logger.warning("%s; continuing with defaults", msg)
        return {}

    if payload is None:
        return {}

    if not isinstance(payload, dict):
        msg = f"Unexpected config payload type: {type(payload).__name__}"
        if strict:
            raise ConfigValidationError(msg)
        logger.warning("%s; continuing with defaults", msg)
        return {}

    return payload


def load_optimize_config(
    path: Optional[str] = None,
    strict: Optional[bool] = None,
) -> OptimizeImportsConfig:
    """Build the plugin configuration from defaults, file and environment.

    Args:
        path: Optional YAML/JSON file with ``optimize_packages`` (list) and
            ``include_defaults`` (bool, default true). Falls back to the
            ``OPTIMIZE_IMPORTS_CONFIG`` env var when omitted.
        strict: Strict validation; defaults to ``STRICT_CONFIG_VALIDATION``.

    Returns:
        The merged configuration. File packages come after the defaults and
        environment packages come last.
    """
    load_dotenv()
    if strict is None:
        strict = resolve_strict_config_validation(default=False)
    if path is None:
        path = os.getenv(CONFIG_PATH_ENV_VAR) or None

    payload = load_config_file(path, strict=strict) if path else {}

    include_defaults = payload.get("include_defaults", True)
    if not isinstance(include_defaults, bool):
        msg = "include_defaults must be a boolean"
        if strict:
            raise ConfigValidationError(msg)
        logger.warning("%s; using true", msg)
        include_defaults = True

    file_packages = payload.get("optimize_packages", [])
    if not isinstance(file_packages, list):
        msg = "optimize_packages must be a list"
        if strict:
            raise ConfigValidationError(msg)
        logger.warning("%s; ignoring", msg)
        file_packages = []

    env_packages = parse_packages_env(os.getenv(PACKAGES_ENV_VAR, ""))

    names: list[Any] = list(DEFAULT_OPTIMIZE_PACKAGES) if include_defaults else []
    names.extend(file_packages)
    names.extend(env_packages)

    config = OptimizeImportsConfig(packages=normalize_package_names(names, strict=strict))
    logger.debug("Loaded optimize-imports config with %d packages", len(config))
    return config

"""
Default resolution and read capabilities for barrel packages.

Hosts normally inject their own resolver; these helpers cover the common
case of a ``node_modules`` tree on disk.
"""

import json
import logging
import os
from typing import Any, Callable, Optional

from barrel.config import (
    ENTRY_EXPORT_CONDITIONS,
    ENTRY_MANIFEST_FIELDS,
    FALLBACK_ENTRY_FILE,
    NODE_MODULES_DIR,
    PACKAGE_MANIFEST,
)

logger = logging.getLogger(__name__)


def _pick_export_target(value: Any) -> Optional[str]:
    """Pick an ESM-flavoured target out of a package.json ``exports`` value."""
    if isinstance(value, str):
        return value
    if isinstance(value, list):
        for item in value:
            target = _pick_export_target(item)
            if target:
                return target
        return None
    if isinstance(value, dict):
        for condition in ENTRY_EXPORT_CONDITIONS:
            if condition in value:
                target = _pick_export_target(value[condition])
                if target:
                    return target
    return None


def entry_from_manifest(manifest: dict) -> str:
    """Return the entry file declared by a parsed package.json, relative to it.

    Order: ``exports["."]`` (``import`` → ``module`` → ``default``), then the
    ``module`` and ``main`` fields, then ``index.js``.
    """
    exports = manifest.get("exports")
    root_export: Any = None
    if isinstance(exports, (str, list)):
        root_export = exports
    elif isinstance(exports, dict):
        if "." in exports:
            root_export = exports["."]
        elif not any(str(key).startswith(".") for key in exports):
            # Condition map for the package root only
            root_export = exports

    target = _pick_export_target(root_export)
    if target:
        return target

    for field in ENTRY_MANIFEST_FIELDS:
        value = manifest.get(field)
        if isinstance(value, str) and value.strip():
            return value.strip()

    return FALLBACK_ENTRY_FILE


def _existing_file(candidate: str) -> Optional[str]:
    for path in (candidate, candidate + ".js", os.path.join(candidate, FALLBACK_ENTRY_FILE)):
        if os.path.isfile(path):
            return os.path.abspath(path)
    return None


def find_package_dir(package_name: str, root: str) -> Optional[str]:
    """Walk up from ``root`` to the first ``node_modules/<package_name>`` with a manifest."""
    current = os.path.abspath(root)
    while True:
        candidate = os.path.join(current, NODE_MODULES_DIR, *package_name.split("/"))
        if os.path.isfile(os.path.join(candidate, PACKAGE_MANIFEST)):
            return candidate
        parent = os.path.dirname(current)
        if parent == current:
            return None
        current = parent


def resolve_package_entry(package_name: str, root: str) -> Optional[str]:
    """Resolve the absolute entry file of an installed package.

    Args:
        package_name: Bare package name, optionally scoped (``@scope/name``).
        root: Directory to start the ``node_modules`` lookup from.

    Returns:
        Absolute path of the entry file, or None when the package is absent,
        its manifest is unreadable, or the declared entry does not exist.
    """
    package_dir = find_package_dir(package_name, root)
    if package_dir is None:
        logger.debug("Package %s not found under %s", package_name, root)
        return None

    manifest_path = os.path.join(package_dir, PACKAGE_MANIFEST)
    try:
        with open(manifest_path, "r", encoding="utf-8") as f:
            manifest = json.load(f)
    except (OSError, ValueError) as e:
        logger.warning("Cannot load %s: %s", manifest_path, e)
        return None

    if not isinstance(manifest, dict):
        logger.warning("Unexpected manifest payload in %s", manifest_path)
        return None

    entry = entry_from_manifest(manifest)
    resolved = _existing_file(os.path.normpath(os.path.join(package_dir, entry)))
    if resolved is None:
        logger.debug("Declared entry %s of %s does not exist", entry, package_name)
    return resolved


def make_entry_resolver(root: str) -> Callable[[str], Optional[str]]:
    """Bind :func:`resolve_package_entry` to a project root."""

    def resolve(package_name: str) -> Optional[str]:
        return resolve_package_entry(package_name, root)

    return resolve


def read_text_file(path: str) -> Optional[str]:
    """Read a UTF-8 text file, returning None if it cannot be read."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            return f.read()
    except (OSError, UnicodeDecodeError) as e:
        logger.debug("Cannot read %s: %s", path, e)
        return None

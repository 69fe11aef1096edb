"""Core shared configuration and logging utilities."""

from core.structured_logging import (
    configure_structured_logging,
    get_build_id,
    get_module,
    get_phase,
    module_scope,
    phase_scope,
    set_build_id,
)
from core.plugin_config import (
    DEFAULT_OPTIMIZE_PACKAGES,
    ConfigValidationError,
    OptimizeImportsConfig,
    load_config_file,
    load_optimize_config,
    normalize_package_names,
    parse_packages_env,
    resolve_strict_config_validation,
)

__all__ = [
    "configure_structured_logging",
    "get_build_id",
    "get_module",
    "get_phase",
    "module_scope",
    "phase_scope",
    "set_build_id",
    "DEFAULT_OPTIMIZE_PACKAGES",
    "ConfigValidationError",
    "OptimizeImportsConfig",
    "load_config_file",
    "load_optimize_config",
    "normalize_package_names",
    "parse_packages_env",
    "resolve_strict_config_validation",
]

"""
Host-facing optimize-imports plugin.

Wraps :class:`~rewrite.engine.RewriteEngine` behind the single entry point a
build host calls for every module, and guarantees that nothing raised while
optimizing ever reaches the host.
"""

import logging
import os
from typing import Iterable, Optional, Tuple

from barrel.cache import ExportMapCache
from barrel.export_map import ReadFile, ResolveEntry
from barrel.resolution import make_entry_resolver, read_text_file
from core.plugin_config import OptimizeImportsConfig, load_optimize_config
from core.structured_logging import module_scope
from rewrite.engine import RewriteEngine, TransformResult

logger = logging.getLogger(__name__)

PLUGIN_NAME = "optimize-imports"


class OptimizeImportsPlugin:
    """Build-host plugin rewriting barrel imports into direct sub-module imports."""

    name = PLUGIN_NAME
    # Runs after JSX/TS lowering in the host's normal order
    enforce = None

    def __init__(
        self,
        config: OptimizeImportsConfig,
        resolve_entry: ResolveEntry,
        read_file: ReadFile,
        cache: Optional[ExportMapCache] = None,
    ):
        self._config = config
        self._resolve_entry = resolve_entry
        self._read_file = read_file
        self._cache = cache
        self._engine = self._make_engine()

    def _make_engine(self) -> RewriteEngine:
        return RewriteEngine(
            packages=self._config.packages,
            resolve_entry=self._resolve_entry,
            read_file=self._read_file,
            cache=self._cache,
        )

    @property
    def config(self) -> OptimizeImportsConfig:
        return self._config

    @property
    def packages(self) -> Tuple[str, ...]:
        return self._config.packages

    def add_packages(self, names: Iterable[str]) -> None:
        """Extend the eligible package set. Packages are never removed."""
        self._config = self._config.with_packages(names)
        self._engine = self._make_engine()
        logger.debug("Optimize-imports package set now has %d entries", len(self._config))

    def transform(self, code: str, module_id: str) -> Optional[TransformResult]:
        """Host entry point: rewritten code and map, or None for no change."""
        with module_scope(module_id):
            try:
                return self._engine.transform(code, module_id)
            except Exception:
                logger.error("Optimize-imports transform failed for %s", module_id, exc_info=True)
                return None


def create_optimize_imports_plugin(
    config: Optional[OptimizeImportsConfig] = None,
    root: Optional[str] = None,
    resolve_entry: Optional[ResolveEntry] = None,
    read_file: Optional[ReadFile] = None,
    cache: Optional[ExportMapCache] = None,
) -> OptimizeImportsPlugin:
    """Create the plugin with default capabilities where none are given.

    Args:
        config: Package set; loaded via :func:`load_optimize_config` if omitted.
        root: Project root for ``node_modules`` lookup (defaults to cwd).
        resolve_entry: Custom entry resolver, overriding ``root``.
        read_file: Custom file reader.
        cache: Export map cache; defaults to the process-wide cache.

    Example:
        >>> plugin = create_optimize_imports_plugin(root="/path/to/app")
        >>> result = plugin.transform(code, "/path/to/app/src/page.tsx")
    """
    if config is None:
        config = load_optimize_config()
    if resolve_entry is None:
        resolve_entry = make_entry_resolver(os.path.abspath(root or os.getcwd()))
    if read_file is None:
        read_file = read_text_file
    return OptimizeImportsPlugin(
        config=config,
        resolve_entry=resolve_entry,
        read_file=read_file,
        cache=cache,
    )

"""
Rewrite layer.

Rewrites consumer imports from barrel packages into direct sub-module
imports, with source maps, behind a host plugin surface.
"""

from rewrite.splice import SourceSplicer, encode_vlq
from rewrite.engine import (
    BarrelImport,
    ImportedName,
    ImportKind,
    RewriteEngine,
    TransformResult,
    find_barrel_imports,
    resolve_binding_source,
    rewrite_import,
)
from rewrite.plugin import (
    PLUGIN_NAME,
    OptimizeImportsPlugin,
    create_optimize_imports_plugin,
)
from rewrite.batch import (
    OptimizeStats,
    discover_source_files,
    iter_optimize_directory,
    optimize_file,
    write_run_report,
)

__all__ = [
    # Splicing
    "SourceSplicer",
    "encode_vlq",
    # Engine
    "BarrelImport",
    "ImportedName",
    "ImportKind",
    "RewriteEngine",
    "TransformResult",
    "find_barrel_imports",
    "resolve_binding_source",
    "rewrite_import",
    # Host surface
    "PLUGIN_NAME",
    "OptimizeImportsPlugin",
    "create_optimize_imports_plugin",
    # Batch
    "OptimizeStats",
    "discover_source_files",
    "iter_optimize_directory",
    "optimize_file",
    "write_run_report",
]

"""
Barrel export map layer.

Tree-sitter-based inspection of a barrel package's entry file: which of its
exported names can be redirected to the sub-module that defines them.
"""

from barrel.models import ExportBinding, ExportMap, UNUSABLE
from barrel.parser import create_parser, parse_bytes, parse_source, count_error_nodes
from barrel.specifiers import SpecifierParseError, parse_specifiers
from barrel.cache import DEFAULT_CACHE, ExportMapCache
from barrel.export_map import (
    assemble_export_map,
    build_export_map,
    export_map_from_source,
)
from barrel.resolution import (
    make_entry_resolver,
    read_text_file,
    resolve_package_entry,
)

__all__ = [
    # Data models
    "ExportBinding",
    "ExportMap",
    "UNUSABLE",
    # Low-level parsing
    "create_parser",
    "parse_bytes",
    "parse_source",
    "count_error_nodes",
    "SpecifierParseError",
    "parse_specifiers",
    # Caching
    "DEFAULT_CACHE",
    "ExportMapCache",
    # Export map construction
    "assemble_export_map",
    "build_export_map",
    "export_map_from_source",
    # Default capabilities
    "make_entry_resolver",
    "read_text_file",
    "resolve_package_entry",
]

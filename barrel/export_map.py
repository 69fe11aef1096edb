"""
Barrel export map builder.

Resolves a package's entry file, reads and parses it once, and records for
each exported name where it really comes from. Every failure degrades to a
``None`` result; nothing raises out of :func:`build_export_map`.
"""

import logging
from typing import Callable, Dict, Iterable, Optional

from barrel.cache import DEFAULT_CACHE, ExportMapCache
from barrel.models import UNUSABLE, CachedExportMap, ExportBinding, ExportMap
from barrel.specifiers import (
    ImportBinding,
    SpecifierParseError,
    StatementForm,
    StatementKind,
    parse_specifiers,
)

logger = logging.getLogger(__name__)

ResolveEntry = Callable[[str], Optional[str]]
ReadFile = Callable[[str], Optional[str]]


def assemble_export_map(forms: Iterable[StatementForm], entry_path: str) -> ExportMap:
    """Assemble an :class:`ExportMap` from classified statement forms.

    Imports are collected first (they are hoisted, so an ``export { X }``
    may precede ``import X``). Exports are then applied in textual order;
    a repeated exported name keeps its last declaration. Wildcard
    re-exports and local exports that do not name an imported binding are
    skipped.

    Args:
        forms: Statement forms in textual order.
        entry_path: Resolved path of the barrel entry file.

    Returns:
        The immutable export map.
    """
    forms = list(forms)
    imports: Dict[str, ImportBinding] = {}
    for form in forms:
        if form.kind is StatementKind.IMPORT_BINDING:
            imports[form.local_name] = form

    bindings: Dict[str, ExportBinding] = {}
    for form in forms:
        kind = form.kind
        if kind is StatementKind.NAMESPACE_REEXPORT:
            bindings[form.exported_name] = ExportBinding.namespace(form.source)
        elif kind is StatementKind.NAMED_REEXPORT:
            bindings[form.exported_name] = ExportBinding.named(form.source, form.original_name)
        elif kind is StatementKind.LOCAL_EXPORT:
            imported = imports.get(form.local_name)
            if imported is None:
                logger.debug(
                    "Skipping export of local %r in %s: not an imported binding",
                    form.local_name,
                    entry_path,
                )
                continue
            if imported.is_namespace:
                bindings[form.exported_name] = ExportBinding.namespace(imported.source)
            else:
                bindings[form.exported_name] = ExportBinding.named(
                    imported.source, imported.original_name
                )
        elif kind is StatementKind.WILDCARD_REEXPORT:
            logger.debug(
                "Ignoring wildcard re-export of %r in %s", form.source, entry_path
            )
        # IMPORT_BINDING and anything unrecognized contribute nothing

    return ExportMap(bindings, entry_path)


def export_map_from_source(source_text: str, entry_path: str) -> ExportMap:
    """Build an export map straight from source text, without caching.

    Raises:
        SpecifierParseError: If the text is not valid module syntax.
    """
    return assemble_export_map(parse_specifiers(source_text, entry_path), entry_path)


def _build_uncached(package_name: str, entry_path: str, read_file: ReadFile) -> CachedExportMap:
    try:
        source_text = read_file(entry_path)
    except Exception:
        logger.warning(
            "Reading barrel entry %s for %s raised", entry_path, package_name, exc_info=True
        )
        source_text = None

    if source_text is None:
        logger.warning("Cannot read barrel entry %s for %s", entry_path, package_name)
        return UNUSABLE

    try:
        export_map = export_map_from_source(source_text, entry_path)
    except SpecifierParseError as e:
        logger.warning("Cannot parse barrel entry for %s: %s", package_name, e)
        return UNUSABLE

    logger.info(
        "Built export map for %s from %s (%d names)",
        package_name,
        entry_path,
        len(export_map),
    )
    return export_map


def build_export_map(
    package_name: str,
    resolve_entry: ResolveEntry,
    read_file: ReadFile,
    cache: Optional[ExportMapCache] = None,
) -> Optional[ExportMap]:
    """Build (or fetch from cache) the export map of a barrel package.

    Args:
        package_name: Package whose entry file should be inspected.
        resolve_entry: Returns the absolute entry file path, or None.
        read_file: Returns the entry file's text, or None if unreadable.
        cache: Cache to use; defaults to the process-wide cache.

    Returns:
        The export map, or None when the entry cannot be resolved, read or
        parsed. Unresolvable packages are not cached; unreadable and
        unparseable entries are cached as unusable under their path.

    Example:
        >>> export_map = build_export_map(
        ...     "ui-kit",
        ...     lambda name: "/fake/ui-kit/index.js",
        ...     lambda path: 'export { Button } from "./button";',
        ... )
        >>> export_map["Button"].original_name
        'Button'
    """
    if cache is None:
        cache = DEFAULT_CACHE

    try:
        entry_path = resolve_entry(package_name)
    except Exception:
        logger.warning("Resolving entry for %s raised", package_name, exc_info=True)
        entry_path = None

    if not entry_path:
        logger.debug("No resolvable entry for %s; skipping", package_name)
        return None

    result = cache.get_or_build(
        entry_path,
        lambda: _build_uncached(package_name, entry_path, read_file),
    )
    if result is UNUSABLE:
        return None
    return result

"""
Rewrite engine for barrel imports.

Finds top-level imports from configured barrel packages in a consumer
module and redirects each imported binding to the sub-module that really
defines it, as recorded in the package's export map. Bindings that cannot
be located (wildcard-only names, unknown names, namespace imports of the
barrel itself) keep importing from the barrel.
"""

import json
import logging
import os
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple, Union

from tree_sitter import Node, Tree

from barrel.cache import ExportMapCache
from barrel.config import (
    DEFAULT_EXPORT_NAME,
    IDENTIFIER_NODE,
    IMPORT_ATTRIBUTE,
    IMPORT_CLAUSE,
    IMPORT_SPECIFIER,
    IMPORT_STATEMENT,
    NAMED_IMPORTS,
    NAMESPACE_IMPORT,
    STRING_NODE,
    TYPE_ONLY_KEYWORDS,
    VIRTUAL_MODULE_PREFIX,
)
from barrel.export_map import ReadFile, ResolveEntry, build_export_map
from barrel.models import ExportBinding, ExportMap
from barrel.parser import count_error_nodes, node_text, parse_source
from barrel.specifiers import module_name_text
from rewrite.splice import SourceSplicer

logger = logging.getLogger(__name__)


class ImportKind(Enum):
    DEFAULT = "default"
    NAMESPACE = "namespace"
    NAMED = "named"


@dataclass(frozen=True)
class ImportedName:
    """One binding of a consumer import statement.

    Attributes:
        kind: Default, namespace or named import.
        imported_name: Name imported from the barrel (named imports only).
        local_name: Local binding created in the consumer module.
        text: Source text of the specifier, reused when it is kept.
        is_type: TypeScript ``type`` modifier on the specifier.
    """

    kind: ImportKind
    imported_name: Optional[str]
    local_name: str
    text: str
    is_type: bool = False


@dataclass(frozen=True)
class BarrelImport:
    """A top-level import statement whose source is a configured barrel package.

    ``start``/``end`` are character offsets of the whole statement.
    """

    package: str
    source_literal: str
    start: int
    end: int
    specifiers: Tuple[ImportedName, ...]


@dataclass(frozen=True)
class TransformResult:
    """Rewritten module text and its Source Map v3 payload."""

    code: str
    map: Dict[str, Any]

    def to_dict(self) -> Dict[str, Any]:
        return {"code": self.code, "map": self.map}


def is_virtual_module(module_path: str) -> bool:
    """Check for a host-synthesised module id (not a real file)."""
    return module_path.startswith(VIRTUAL_MODULE_PREFIX)


def _char_offset_converter(source_text: str, source_bytes: bytes) -> Callable[[int], int]:
    """Map tree-sitter byte offsets onto ``source_text`` character offsets."""
    if len(source_text) == len(source_bytes):
        return lambda offset: offset
    return lambda offset: len(source_bytes[:offset].decode("utf-8", errors="replace"))


def _has_type_modifier(node: Node) -> bool:
    return any(not child.is_named and child.type in TYPE_ONLY_KEYWORDS for child in node.children)


def _collect_specifiers(clause: Node) -> List[ImportedName]:
    specifiers: List[ImportedName] = []
    for child in clause.named_children:
        if child.type == IDENTIFIER_NODE:
            specifiers.append(
                ImportedName(
                    kind=ImportKind.DEFAULT,
                    imported_name=DEFAULT_EXPORT_NAME,
                    local_name=node_text(child),
                    text=node_text(child),
                )
            )
        elif child.type == NAMESPACE_IMPORT:
            local = next((c for c in child.named_children if c.type == IDENTIFIER_NODE), None)
            if local is not None:
                specifiers.append(
                    ImportedName(
                        kind=ImportKind.NAMESPACE,
                        imported_name=None,
                        local_name=node_text(local),
                        text=node_text(child),
                    )
                )
        elif child.type == NAMED_IMPORTS:
            for spec in child.named_children:
                if spec.type != IMPORT_SPECIFIER:
                    continue
                name_node = spec.child_by_field_name("name")
                if name_node is None:
                    continue
                imported = module_name_text(name_node)
                alias_node = spec.child_by_field_name("alias")
                local = node_text(alias_node) if alias_node is not None else imported
                specifiers.append(
                    ImportedName(
                        kind=ImportKind.NAMED,
                        imported_name=imported,
                        local_name=local,
                        text=node_text(spec),
                        is_type=_has_type_modifier(spec),
                    )
                )
    return specifiers


def find_barrel_imports(
    tree: Tree,
    packages: Iterable[str],
    to_char: Callable[[int], int] = lambda offset: offset,
) -> List[BarrelImport]:
    """Collect top-level imports whose source is one of ``packages``.

    Side-effect imports (``import "pkg"``), type-only imports and imports
    carrying attributes (``with { ... }``) are skipped.
    """
    wanted = set(packages)
    found: List[BarrelImport] = []
    for statement in tree.root_node.named_children:
        if statement.type != IMPORT_STATEMENT:
            continue
        source_node = statement.child_by_field_name("source")
        if source_node is None or source_node.type != STRING_NODE:
            continue
        package = module_name_text(source_node)
        if package not in wanted:
            continue
        if _has_type_modifier(statement):
            continue
        if any(child.type == IMPORT_ATTRIBUTE for child in statement.children):
            continue
        clause = next((c for c in statement.children if c.type == IMPORT_CLAUSE), None)
        if clause is None:
            continue
        specifiers = _collect_specifiers(clause)
        if not specifiers:
            continue
        found.append(
            BarrelImport(
                package=package,
                source_literal=node_text(source_node),
                start=to_char(statement.start_byte),
                end=to_char(statement.end_byte),
                specifiers=tuple(specifiers),
            )
        )
    return found


def resolve_binding_source(source: str, entry_path: str) -> str:
    """Make a binding source importable from any consumer.

    Relative sources are written relative to the barrel entry file, so they
    are resolved against its directory. Bare specifiers pass through.
    """
    if source in (".", "..") or source.startswith(("./", "../")):
        base = os.path.dirname(entry_path)
        return os.path.normpath(os.path.join(base, source)).replace(os.sep, "/")
    return source


def _export_name_literal(name: str) -> str:
    """Render a module export name, quoting it when it is not an identifier."""
    return name if name.isidentifier() else json.dumps(name)


def _lookup_binding(spec: ImportedName, export_map: ExportMap) -> Optional[ExportBinding]:
    if spec.is_type or spec.kind is ImportKind.NAMESPACE:
        return None
    return export_map.get(spec.imported_name)


class _NamedGroup:
    """Named imports that share one rewritten target module."""

    def __init__(self, target: str):
        self.target = target
        self.items: List[str] = []

    def render(self) -> str:
        return f"import {{ {', '.join(self.items)} }} from {json.dumps(self.target)};"


def _render_kept(barrel_import: BarrelImport, kept: List[ImportedName]) -> str:
    parts: List[str] = []
    named: List[str] = []
    for spec in kept:
        if spec.kind is ImportKind.NAMED:
            named.append(spec.text)
        else:
            parts.append(spec.text)
    if named:
        parts.append("{ " + ", ".join(named) + " }")
    return f"import {', '.join(parts)} from {barrel_import.source_literal};"


def rewrite_import(barrel_import: BarrelImport, export_map: ExportMap) -> Optional[str]:
    """Render the replacement text for one barrel import statement.

    Returns:
        Replacement statements joined on one line, or None when no binding
        of the statement could be redirected.
    """
    rewritten: List[Union[str, _NamedGroup]] = []
    groups: Dict[str, _NamedGroup] = {}
    kept: List[ImportedName] = []

    for spec in barrel_import.specifiers:
        binding = _lookup_binding(spec, export_map)
        if binding is None:
            kept.append(spec)
            continue

        target = resolve_binding_source(binding.source, export_map.entry_path)
        if binding.is_namespace:
            rewritten.append(f"import * as {spec.local_name} from {json.dumps(target)};")
        elif binding.original_name == DEFAULT_EXPORT_NAME:
            rewritten.append(f"import {spec.local_name} from {json.dumps(target)};")
        else:
            group = groups.get(target)
            if group is None:
                group = groups[target] = _NamedGroup(target)
                rewritten.append(group)
            if binding.original_name == spec.local_name:
                group.items.append(spec.local_name)
            else:
                group.items.append(
                    f"{_export_name_literal(binding.original_name)} as {spec.local_name}"
                )

    if not rewritten:
        return None

    statements: List[str] = []
    if kept:
        statements.append(_render_kept(barrel_import, kept))
    for item in rewritten:
        statements.append(item if isinstance(item, str) else item.render())

    logger.debug(
        "Redirected %d of %d bindings imported from %s",
        len(barrel_import.specifiers) - len(kept),
        len(barrel_import.specifiers),
        barrel_import.package,
    )
    # Single line keeps the line numbers of the following code unchanged
    return " ".join(statements)


class RewriteEngine:
    """Rewrites barrel imports of one module at a time.

    Holds no mutable state of its own; export maps are shared through the
    cache, so one engine may serve concurrent ``transform`` calls.
    """

    def __init__(
        self,
        packages: Iterable[str],
        resolve_entry: ResolveEntry,
        read_file: ReadFile,
        cache: Optional[ExportMapCache] = None,
    ):
        self._packages = tuple(packages)
        self._resolve_entry = resolve_entry
        self._read_file = read_file
        self._cache = cache

    @property
    def packages(self) -> Tuple[str, ...]:
        return self._packages

    def mentioned_packages(self, source_text: str) -> List[str]:
        """Cheap textual prefilter: packages appearing as a quoted string."""
        return [
            package
            for package in self._packages
            if f'"{package}"' in source_text or f"'{package}'" in source_text
        ]

    def transform(self, source_text: str, module_path: str) -> Optional[TransformResult]:
        """Rewrite barrel imports in ``source_text``.

        Args:
            source_text: Consumer module source.
            module_path: Module id; virtual ids (``"\\0..."``) are never touched.

        Returns:
            The rewritten code and source map, or None when nothing changed.
        """
        if is_virtual_module(module_path):
            return None

        candidates = self.mentioned_packages(source_text)
        if not candidates:
            return None

        source_bytes = source_text.encode("utf-8")
        tree = parse_source(source_text, module_path)
        if tree.root_node.has_error:
            logger.debug(
                "Skipping %s: %d syntax error nodes", module_path, count_error_nodes(tree)
            )
            return None

        imports = find_barrel_imports(
            tree, candidates, _char_offset_converter(source_text, source_bytes)
        )
        if not imports:
            return None

        export_maps: Dict[str, Optional[ExportMap]] = {}
        for barrel_import in imports:
            if barrel_import.package not in export_maps:
                export_maps[barrel_import.package] = build_export_map(
                    barrel_import.package,
                    self._resolve_entry,
                    self._read_file,
                    cache=self._cache,
                )

        splicer = SourceSplicer(source_text)
        for barrel_import in imports:
            export_map = export_maps[barrel_import.package]
            if export_map is None:
                continue
            replacement = rewrite_import(barrel_import, export_map)
            if replacement is not None:
                splicer.overwrite(barrel_import.start, barrel_import.end, replacement)

        if not splicer.has_changed():
            return None

        logger.debug("Rewrote barrel imports in %s", module_path)
        return TransformResult(
            code=splicer.to_string(),
            map=splicer.generate_map(
                source=module_path,
                file=os.path.basename(module_path),
            ),
        )

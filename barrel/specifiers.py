"""
Classification of a barrel module's top-level import/export statements.

Each recognized statement becomes one variant of a closed set of tagged
records (:class:`StatementKind`). The export map builder dispatches on the
tag and ignores anything it does not know.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple, Union

from tree_sitter import Node, Tree

from barrel.config import (
    DEFAULT_EXPORT_NAME,
    EXPORT_CLAUSE,
    EXPORT_SPECIFIER,
    EXPORT_STATEMENT,
    IDENTIFIER_NODE,
    IMPORT_CLAUSE,
    IMPORT_SPECIFIER,
    IMPORT_STATEMENT,
    NAMED_IMPORTS,
    NAMESPACE_EXPORT,
    NAMESPACE_IMPORT,
    STRING_NODE,
    TYPE_ONLY_KEYWORDS,
    WILDCARD_TOKEN,
)
from barrel.parser import count_error_nodes, node_text, parse_source

logger = logging.getLogger(__name__)


class SpecifierParseError(ValueError):
    """Raised when module source text is not valid module syntax."""


class StatementKind(Enum):
    NAMESPACE_REEXPORT = "namespace_reexport"
    NAMED_REEXPORT = "named_reexport"
    WILDCARD_REEXPORT = "wildcard_reexport"
    IMPORT_BINDING = "import_binding"
    LOCAL_EXPORT = "local_export"


@dataclass(frozen=True)
class NamespaceReexport:
    """``export * as name from "source"``"""

    exported_name: str
    source: str
    kind: StatementKind = StatementKind.NAMESPACE_REEXPORT


@dataclass(frozen=True)
class NamedReexport:
    """``export { original as exported } from "source"``"""

    exported_name: str
    original_name: str
    source: str
    kind: StatementKind = StatementKind.NAMED_REEXPORT


@dataclass(frozen=True)
class WildcardReexport:
    """``export * from "source"``; contributes nothing to an export map."""

    source: str
    kind: StatementKind = StatementKind.WILDCARD_REEXPORT


@dataclass(frozen=True)
class ImportBinding:
    """One local binding introduced by a top-level import.

    ``original_name`` is None for namespace imports.
    """

    local_name: str
    source: str
    is_namespace: bool
    original_name: Optional[str] = None
    kind: StatementKind = StatementKind.IMPORT_BINDING


@dataclass(frozen=True)
class LocalExport:
    """``export { local as exported }`` without a ``from`` clause."""

    local_name: str
    exported_name: str
    kind: StatementKind = StatementKind.LOCAL_EXPORT


StatementForm = Union[
    NamespaceReexport,
    NamedReexport,
    WildcardReexport,
    ImportBinding,
    LocalExport,
]


def module_name_text(node: Node) -> str:
    """Return an identifier or string-literal module export name, unquoted."""
    text = node_text(node)
    if node.type == STRING_NODE:
        return text[1:-1]
    return text


def _is_type_only(node: Node) -> bool:
    """Check for a TypeScript ``type``/``typeof`` modifier among direct children."""
    for child in node.children:
        if not child.is_named and child.type in TYPE_ONLY_KEYWORDS:
            return True
    return False


def _first_child_of_type(node: Node, node_type: str) -> Optional[Node]:
    for child in node.children:
        if child.type == node_type:
            return child
    return None


def _statement_source(node: Node) -> Optional[str]:
    source_node = node.child_by_field_name("source")
    if source_node is None or source_node.type != STRING_NODE:
        return None
    return module_name_text(source_node)


def _specifier_names(specifier: Node) -> Optional[Tuple[str, str]]:
    """Return ``(name, alias-or-name)`` for an import/export specifier."""
    name_node = specifier.child_by_field_name("name")
    if name_node is None:
        return None
    name = module_name_text(name_node)
    alias_node = specifier.child_by_field_name("alias")
    alias = module_name_text(alias_node) if alias_node is not None else name
    if not name or not alias:
        return None
    return name, alias


def classify_import(node: Node) -> List[ImportBinding]:
    """Turn one ``import_statement`` into the local bindings it introduces.

    Side-effect imports, type-only imports and import forms without a
    ``from`` clause (``import x = require(...)``) introduce nothing.
    """
    if node.type != IMPORT_STATEMENT or _is_type_only(node):
        return []
    source = _statement_source(node)
    clause = _first_child_of_type(node, IMPORT_CLAUSE)
    if source is None or clause is None:
        return []

    bindings: List[ImportBinding] = []
    for child in clause.named_children:
        if child.type == IDENTIFIER_NODE:
            bindings.append(
                ImportBinding(
                    local_name=node_text(child),
                    source=source,
                    is_namespace=False,
                    original_name=DEFAULT_EXPORT_NAME,
                )
            )
        elif child.type == NAMESPACE_IMPORT:
            local = _first_child_of_type(child, IDENTIFIER_NODE)
            if local is not None:
                bindings.append(
                    ImportBinding(
                        local_name=node_text(local),
                        source=source,
                        is_namespace=True,
                    )
                )
        elif child.type == NAMED_IMPORTS:
            for specifier in child.named_children:
                if specifier.type != IMPORT_SPECIFIER or _is_type_only(specifier):
                    continue
                names = _specifier_names(specifier)
                if names is None:
                    continue
                original, local = names
                bindings.append(
                    ImportBinding(
                        local_name=local,
                        source=source,
                        is_namespace=False,
                        original_name=original,
                    )
                )
    return bindings


def classify_export(node: Node) -> List[StatementForm]:
    """Turn one ``export_statement`` into re-export forms.

    Declarations (``export const``, ``export function``, ``export default``)
    and type-only exports yield nothing: they cannot be redirected to a
    sub-module.
    """
    if node.type != EXPORT_STATEMENT or _is_type_only(node):
        return []

    clause = _first_child_of_type(node, EXPORT_CLAUSE)
    source = _statement_source(node)

    if source is None:
        if clause is None:
            return []
        forms: List[StatementForm] = []
        for specifier in clause.named_children:
            if specifier.type != EXPORT_SPECIFIER or _is_type_only(specifier):
                continue
            names = _specifier_names(specifier)
            if names is not None:
                forms.append(LocalExport(local_name=names[0], exported_name=names[1]))
        return forms

    namespace = _first_child_of_type(node, NAMESPACE_EXPORT)
    if namespace is not None:
        # `* as <name>`: the name is the last child, possibly the bare `default` token
        name_node = namespace.children[-1]
        if name_node.type == "as" or name_node.type == WILDCARD_TOKEN:
            return []
        return [NamespaceReexport(exported_name=module_name_text(name_node), source=source)]

    if clause is not None:
        forms = []
        for specifier in clause.named_children:
            if specifier.type != EXPORT_SPECIFIER or _is_type_only(specifier):
                continue
            names = _specifier_names(specifier)
            if names is not None:
                original, exported = names
                forms.append(
                    NamedReexport(
                        exported_name=exported,
                        original_name=original,
                        source=source,
                    )
                )
        return forms

    if _first_child_of_type(node, WILDCARD_TOKEN) is not None:
        return [WildcardReexport(source=source)]

    return []


def extract_statement_forms(tree: Tree) -> List[StatementForm]:
    """Collect statement forms from the top level of a parsed module, in order."""
    forms: List[StatementForm] = []
    for statement in tree.root_node.named_children:
        if statement.type == IMPORT_STATEMENT:
            forms.extend(classify_import(statement))
        elif statement.type == EXPORT_STATEMENT:
            forms.extend(classify_export(statement))
    return forms


def parse_specifiers(source_text: str, path: Optional[str] = None) -> List[StatementForm]:
    """Parse module source text and classify its top-level statements.

    Args:
        source_text: Full text of the module.
        path: Module path, used only to pick the grammar.

    Returns:
        Statement forms in textual order.

    Raises:
        SpecifierParseError: If the text contains any syntax error.
    """
    tree = parse_source(source_text, path)
    if tree.root_node.has_error:
        raise SpecifierParseError(
            f"Module {path or '<source>'} contains syntax errors "
            f"({count_error_nodes(tree)} error nodes)"
        )
    forms = extract_statement_forms(tree)
    logger.debug("Classified %d statement forms in %s", len(forms), path or "<source>")
    return forms

"""
Tree-sitter parser initialization and source parsing utilities.

This module provides functions to initialize JavaScript/TypeScript parsers
and parse module source text.
"""

import logging
import os
from typing import Optional

import tree_sitter_javascript as tsjs
import tree_sitter_typescript as tsts
from tree_sitter import Language, Node, Parser, Tree

from barrel.config import (
    LANGUAGE_JAVASCRIPT,
    LANGUAGE_TSX,
    LANGUAGE_TYPESCRIPT,
    TSX_EXTENSIONS,
    TYPESCRIPT_EXTENSIONS,
)

# Configure logging
logger = logging.getLogger(__name__)

# Module-level language constants
JAVASCRIPT_LANGUAGE = Language(tsjs.language())
TYPESCRIPT_LANGUAGE = Language(tsts.language_typescript())
TSX_LANGUAGE = Language(tsts.language_tsx())

_LANGUAGES = {
    LANGUAGE_JAVASCRIPT: JAVASCRIPT_LANGUAGE,
    LANGUAGE_TYPESCRIPT: TYPESCRIPT_LANGUAGE,
    LANGUAGE_TSX: TSX_LANGUAGE,
}


def language_for_path(path: Optional[str]) -> str:
    """Pick the grammar name for a module path based on its extension.

    Unknown or missing extensions fall back to JavaScript, which also
    accepts JSX.

    Example:
        >>> language_for_path("/src/app/page.tsx")
        'tsx'
    """
    if not path:
        return LANGUAGE_JAVASCRIPT
    # Strip query suffixes some hosts append to module ids (``?v=123``)
    clean = path.split("?", 1)[0]
    ext = os.path.splitext(clean)[1].lower()
    if ext in TSX_EXTENSIONS:
        return LANGUAGE_TSX
    if ext in TYPESCRIPT_EXTENSIONS:
        return LANGUAGE_TYPESCRIPT
    return LANGUAGE_JAVASCRIPT


def create_parser(language: str = LANGUAGE_JAVASCRIPT) -> Parser:
    """Create and configure a tree-sitter parser.

    Args:
        language: One of ``javascript``, ``typescript`` or ``tsx``.

    Returns:
        A Parser instance configured with the requested grammar.

    Raises:
        ValueError: If the language name is unknown.

    Example:
        >>> parser = create_parser()
        >>> tree = parser.parse(b"export { a } from './a';")
    """
    try:
        grammar = _LANGUAGES[language]
    except KeyError:
        raise ValueError(
            f"Unknown language {language!r}. Expected one of: {sorted(_LANGUAGES)}"
        ) from None
    parser = Parser(grammar)
    logger.debug("Created tree-sitter %s parser", language)
    return parser


def parse_bytes(source: bytes, language: str = LANGUAGE_JAVASCRIPT) -> Tree:
    """Parse raw bytes of module source code.

    Args:
        source: UTF-8 encoded bytes of JavaScript/TypeScript source code.
        language: Grammar to parse with.

    Returns:
        A Tree object representing the parsed AST. Syntax errors do not
        raise; they surface as ERROR/MISSING nodes in the tree.

    Raises:
        TypeError: If source is not bytes.

    Example:
        >>> tree = parse_bytes(b"export * from './utils';")
        >>> tree.root_node.type
        'program'
    """
    if not isinstance(source, bytes):
        raise TypeError(f"Source must be bytes, got {type(source).__name__}")

    parser = create_parser(language)
    tree = parser.parse(source)

    if tree.root_node.has_error:
        logger.debug("Parsed tree contains syntax errors")

    logger.debug("Parsed %d bytes of %s code", len(source), language)
    return tree


def parse_source(text: str, path: Optional[str] = None) -> Tree:
    """Parse module source text, choosing the grammar from ``path``."""
    return parse_bytes(text.encode("utf-8"), language_for_path(path))


def count_error_nodes(tree: Tree) -> int:
    """Count ERROR and MISSING nodes in a parsed tree."""
    count = 0
    stack = [tree.root_node]
    while stack:
        node = stack.pop()
        if node.is_error or node.is_missing:
            count += 1
        stack.extend(node.children)
    return count


def node_text(node: Node) -> str:
    """Decode the source text covered by a node."""
    return node.text.decode("utf-8") if node.text else ""

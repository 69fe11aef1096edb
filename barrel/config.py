"""
Configuration constants for barrel export map construction.

Defines the tree-sitter node type strings for the JavaScript and TypeScript
module syntax we inspect, plus the markers shared by the builder and the
rewrite engine.
"""

from typing import Set

# Prefix used by build hosts for synthetic (non-file) module ids
VIRTUAL_MODULE_PREFIX: str = "\0"

# Name under which a module's default export is re-exported
DEFAULT_EXPORT_NAME: str = "default"

# Top-level statement node types
IMPORT_STATEMENT: str = "import_statement"
EXPORT_STATEMENT: str = "export_statement"

# Import statement internals
IMPORT_CLAUSE: str = "import_clause"
NAMESPACE_IMPORT: str = "namespace_import"
NAMED_IMPORTS: str = "named_imports"
IMPORT_SPECIFIER: str = "import_specifier"
IMPORT_ATTRIBUTE: str = "import_attribute"

# Export statement internals
EXPORT_CLAUSE: str = "export_clause"
EXPORT_SPECIFIER: str = "export_specifier"
NAMESPACE_EXPORT: str = "namespace_export"
WILDCARD_TOKEN: str = "*"

# Leaf node types
IDENTIFIER_NODE: str = "identifier"
STRING_NODE: str = "string"

# TypeScript type-only modifiers (`import type`, `export { type X }`)
TYPE_ONLY_KEYWORDS: Set[str] = {
    "type",
    "typeof",
}

# Source file extensions, grouped by the grammar that parses them
JAVASCRIPT_EXTENSIONS: Set[str] = {
    ".js",
    ".mjs",
    ".cjs",
    ".jsx",
}

TYPESCRIPT_EXTENSIONS: Set[str] = {
    ".ts",
    ".mts",
    ".cts",
}

TSX_EXTENSIONS: Set[str] = {
    ".tsx",
}

SOURCE_EXTENSIONS: Set[str] = JAVASCRIPT_EXTENSIONS | TYPESCRIPT_EXTENSIONS | TSX_EXTENSIONS

# Grammar names accepted by the parser factory
LANGUAGE_JAVASCRIPT: str = "javascript"
LANGUAGE_TYPESCRIPT: str = "typescript"
LANGUAGE_TSX: str = "tsx"

# package.json resolution
PACKAGE_MANIFEST: str = "package.json"
NODE_MODULES_DIR: str = "node_modules"
ENTRY_EXPORT_CONDITIONS: tuple = (
    "import",
    "module",
    "default",
)
ENTRY_MANIFEST_FIELDS: tuple = (
    "module",
    "main",
)
FALLBACK_ENTRY_FILE: str = "index.js"

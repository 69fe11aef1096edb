"""
Unit tests for parser.py

Tests tree-sitter parser initialization, grammar selection and byte parsing.
"""

import unittest

from barrel.parser import (
    count_error_nodes,
    create_parser,
    language_for_path,
    parse_bytes,
    parse_source,
)


class TestParserInitialization(unittest.TestCase):
    """Test parser creation and initialization."""

    def test_create_parser(self):
        parser = create_parser()
        self.assertIsNotNone(parser)
        self.assertIsNotNone(parser.language)

    def test_create_typescript_parsers(self):
        self.assertIsNotNone(create_parser("typescript").language)
        self.assertIsNotNone(create_parser("tsx").language)

    def test_unknown_language(self):
        with self.assertRaises(ValueError):
            create_parser("cobol")


class TestLanguageForPath(unittest.TestCase):
    def test_extensions(self):
        self.assertEqual(language_for_path("/a/b.js"), "javascript")
        self.assertEqual(language_for_path("/a/b.jsx"), "javascript")
        self.assertEqual(language_for_path("/a/b.mjs"), "javascript")
        self.assertEqual(language_for_path("/a/b.ts"), "typescript")
        self.assertEqual(language_for_path("/a/b.mts"), "typescript")
        self.assertEqual(language_for_path("/a/b.tsx"), "tsx")

    def test_query_suffix_and_missing_path(self):
        self.assertEqual(language_for_path("/a/b.tsx?v=12"), "tsx")
        self.assertEqual(language_for_path(None), "javascript")
        self.assertEqual(language_for_path("/a/noext"), "javascript")


class TestParseBytes(unittest.TestCase):
    """Test parsing raw bytes of module code."""

    def test_parse_reexports(self):
        tree = parse_bytes(b'export * as A from "a";\nexport { b } from "./b";')
        self.assertEqual(tree.root_node.type, "program")
        self.assertFalse(tree.root_node.has_error)
        self.assertEqual(len(tree.root_node.named_children), 2)

    def test_parse_empty(self):
        tree = parse_bytes(b"")
        self.assertEqual(tree.root_node.type, "program")
        self.assertEqual(len(tree.root_node.children), 0)

    def test_parse_invalid_type(self):
        with self.assertRaises(TypeError):
            parse_bytes("not bytes")

    def test_parse_with_errors(self):
        tree = parse_bytes(b"export { unclosed")
        self.assertTrue(tree.root_node.has_error)
        self.assertGreater(count_error_nodes(tree), 0)

    def test_count_error_nodes_clean(self):
        tree = parse_bytes(b"const x = 1;")
        self.assertEqual(count_error_nodes(tree), 0)


class TestParseSource(unittest.TestCase):
    def test_jsx_in_javascript(self):
        tree = parse_source("const el = <div className='x'>hi</div>;", "/app/page.jsx")
        self.assertFalse(tree.root_node.has_error)

    def test_typescript_annotations(self):
        tree = parse_source("const n: number = 1;", "/app/util.ts")
        self.assertFalse(tree.root_node.has_error)

    def test_tsx(self):
        tree = parse_source("const C = (p: { a: string }) => <b>{p.a}</b>;", "/app/c.tsx")
        self.assertFalse(tree.root_node.has_error)

    def test_non_ascii_source(self):
        tree = parse_source('export { Ünïcode } from "./ü";')
        self.assertFalse(tree.root_node.has_error)


if __name__ == "__main__":
    unittest.main()

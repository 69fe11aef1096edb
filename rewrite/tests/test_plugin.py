"""
Tests for the optimize-imports plugin against an on-disk node_modules fixture.
"""

import os
import unittest
from unittest import mock

from barrel.cache import ExportMapCache
from core.plugin_config import OptimizeImportsConfig
from rewrite.engine import RewriteEngine
from rewrite.plugin import PLUGIN_NAME, create_optimize_imports_plugin

FIXTURE_APP = os.path.join(os.path.dirname(os.path.abspath(__file__)), "fixtures", "app")
UI_KIT_ESM = os.path.join(FIXTURE_APP, "node_modules", "ui-kit", "esm")
ICONS_DIR = os.path.join(FIXTURE_APP, "node_modules", "@acme", "icons")


def fixture_plugin(packages=("ui-kit", "@acme/icons", "broken-kit")):
    return create_optimize_imports_plugin(
        config=OptimizeImportsConfig(packages=packages),
        root=FIXTURE_APP,
        cache=ExportMapCache(),
    )


class TestPluginShape(unittest.TestCase):
    def test_name_and_order(self):
        plugin = fixture_plugin()
        self.assertEqual(plugin.name, PLUGIN_NAME)
        self.assertIsNone(plugin.enforce)

    def test_add_packages_only_grows(self):
        plugin = fixture_plugin(packages=("ui-kit",))
        self.assertIsNone(plugin.transform('import { Check } from "@acme/icons";', "/app/a.js"))

        plugin.add_packages(["@acme/icons", "ui-kit"])
        self.assertEqual(plugin.packages, ("ui-kit", "@acme/icons"))
        result = plugin.transform('import { Check } from "@acme/icons";', "/app/a.js")
        self.assertIsNotNone(result)
        self.assertIn(os.path.join(ICONS_DIR, "icons", "check.js"), result.code)

    def test_default_config_loaded_when_omitted(self):
        with mock.patch.dict(os.environ, {"OPTIMIZE_IMPORTS_PACKAGES": "ui-kit"}, clear=False):
            with mock.patch("core.plugin_config.load_dotenv"):
                plugin = create_optimize_imports_plugin(root=FIXTURE_APP, cache=ExportMapCache())
        self.assertIn("ui-kit", plugin.config)
        self.assertIn("lodash-es", plugin.config)


class TestPluginTransform(unittest.TestCase):
    def setUp(self):
        self.plugin = fixture_plugin()

    def _read(self, *parts):
        with open(os.path.join(FIXTURE_APP, *parts), "r", encoding="utf-8") as f:
            return f.read()

    def test_rewrites_fixture_page(self):
        code = self._read("src", "page.jsx")
        module_id = os.path.join(FIXTURE_APP, "src", "page.jsx")

        result = self.plugin.transform(code, module_id)

        self.assertIsNotNone(result)
        first_line, second_line = result.code.split("\n")[:2]
        self.assertEqual(
            first_line,
            'import { cn } from "ui-kit"; '
            f'import {{ Button }} from "{UI_KIT_ESM}/button.js"; '
            'import * as Dialog from "@ui-kit/dialog"; '
            f'import Card from "{UI_KIT_ESM}/card.js";',
        )
        self.assertEqual(
            second_line,
            f'import Check from "{ICONS_DIR}/icons/check.js"; '
            f'import Close from "{ICONS_DIR}/icons/x.js";',
        )
        self.assertEqual(result.code.count("\n"), code.count("\n"))
        self.assertEqual(result.map["sources"], [module_id])

    def test_import_table_bindings(self):
        code = 'import { Tooltip, formatDate, VERSION } from "ui-kit";'
        result = self.plugin.transform(code, "/app/x.js")
        self.assertEqual(
            result.code,
            'import { VERSION } from "ui-kit"; '
            'import * as Tooltip from "@ui-kit/tooltip"; '
            f'import {{ formatDate }} from "{UI_KIT_ESM}/format/date.js";',
        )

    def test_plain_module_untouched(self):
        code = self._read("src", "components", "plain.js")
        self.assertIsNone(self.plugin.transform(code, os.path.join(FIXTURE_APP, "src", "components", "plain.js")))

    def test_broken_barrel_left_alone(self):
        self.assertIsNone(self.plugin.transform('import { Widget } from "broken-kit";', "/app/w.js"))

    def test_missing_package_left_alone(self):
        plugin = fixture_plugin(packages=("not-installed",))
        self.assertIsNone(plugin.transform('import { A } from "not-installed";', "/app/a.js"))

    def test_engine_failure_is_contained(self):
        with mock.patch.object(RewriteEngine, "transform", side_effect=RuntimeError("boom")):
            with self.assertLogs("rewrite.plugin", level="ERROR") as logs:
                result = self.plugin.transform('import { Button } from "ui-kit";', "/app/a.js")
        self.assertIsNone(result)
        self.assertIn("/app/a.js", logs.output[0])


if __name__ == "__main__":
    unittest.main()

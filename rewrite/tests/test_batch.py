"""Tests for the batch tree optimizer."""

import json
import os
import shutil
import tempfile
import unittest

from barrel.cache import ExportMapCache
from core.plugin_config import OptimizeImportsConfig
from rewrite.batch import (
    OptimizeStats,
    discover_source_files,
    iter_optimize_directory,
    optimize_file,
    write_run_report,
)
from rewrite.plugin import create_optimize_imports_plugin

FIXTURE_APP = os.path.join(os.path.dirname(os.path.abspath(__file__)), "fixtures", "app")
FIXTURE_SRC = os.path.join(FIXTURE_APP, "src")


def fixture_plugin():
    return create_optimize_imports_plugin(
        config=OptimizeImportsConfig(packages=("ui-kit", "@acme/icons")),
        root=FIXTURE_APP,
        cache=ExportMapCache(),
    )


class TestDiscoverSourceFiles(unittest.TestCase):
    def test_skips_node_modules(self) -> None:
        files = discover_source_files(FIXTURE_APP)
        self.assertTrue(files)
        self.assertFalse(any("node_modules" in path for path in files))
        self.assertIn(os.path.join(FIXTURE_SRC, "page.jsx"), files)

    def test_skips_declarations_and_hidden(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            for rel in ("a.ts", "types.d.ts", ".cache/b.js", "dist/c.js", "readme.md", "d.tsx"):
                path = os.path.join(tmp, rel)
                os.makedirs(os.path.dirname(path), exist_ok=True)
                with open(path, "w", encoding="utf-8") as f:
                    f.write("")
            files = [os.path.relpath(p, tmp) for p in discover_source_files(tmp)]
        self.assertEqual(files, ["a.ts", "d.tsx"])


class TestOptimizeDirectory(unittest.TestCase):
    def setUp(self) -> None:
        self.out_dir = tempfile.mkdtemp()

    def tearDown(self) -> None:
        shutil.rmtree(self.out_dir, ignore_errors=True)

    def test_mirror_output(self) -> None:
        stats = OptimizeStats()
        rewritten = list(
            iter_optimize_directory(fixture_plugin(), FIXTURE_SRC, output_dir=self.out_dir, stats=stats)
        )

        self.assertEqual(rewritten, [os.path.join(self.out_dir, "page.jsx")])
        self.assertEqual(stats.to_dict(), {"files_scanned": 2, "files_rewritten": 1, "files_failed": 0})
        # Unchanged files are copied through
        with open(os.path.join(self.out_dir, "components", "plain.js"), encoding="utf-8") as f:
            copied = f.read()
        with open(os.path.join(FIXTURE_SRC, "components", "plain.js"), encoding="utf-8") as f:
            self.assertEqual(copied, f.read())
        with open(rewritten[0], encoding="utf-8") as f:
            self.assertNotIn('from "@acme/icons"', f.read())

    def test_write_maps(self) -> None:
        list(iter_optimize_directory(fixture_plugin(), FIXTURE_SRC, output_dir=self.out_dir, write_maps=True))
        map_path = os.path.join(self.out_dir, "page.jsx.map")
        with open(map_path, encoding="utf-8") as f:
            payload = json.load(f)
        self.assertEqual(payload["version"], 3)
        self.assertEqual(payload["file"], "page.jsx")
        with open(os.path.join(self.out_dir, "page.jsx"), encoding="utf-8") as f:
            self.assertIn("//# sourceMappingURL=page.jsx.map", f.read())
        self.assertFalse(os.path.exists(os.path.join(self.out_dir, "components", "plain.js.map")))

    def test_in_place(self) -> None:
        work = os.path.join(self.out_dir, "src")
        shutil.copytree(FIXTURE_SRC, work)
        target = os.path.join(work, "page.jsx")
        self.assertTrue(optimize_file(fixture_plugin(), target, target))
        with open(target, encoding="utf-8") as f:
            self.assertNotIn('from "@acme/icons"', f.read())

    def test_missing_source_dir(self) -> None:
        with self.assertRaises(FileNotFoundError):
            list(iter_optimize_directory(fixture_plugin(), os.path.join(self.out_dir, "missing")))

    def test_unreadable_file_counted_as_failure(self) -> None:
        work = os.path.join(self.out_dir, "src")
        os.makedirs(work)
        with open(os.path.join(work, "bad.js"), "wb") as f:
            f.write(b"\xff\xfe import")
        stats = OptimizeStats()
        rewritten = list(
            iter_optimize_directory(fixture_plugin(), work, output_dir=os.path.join(self.out_dir, "o"), stats=stats)
        )
        self.assertEqual(rewritten, [])
        self.assertEqual(stats.files_failed, 1)


class TestRunReport(unittest.TestCase):
    def test_write_run_report(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = write_run_report({"stats": {"files_scanned": 1}}, build_id="abc123", output_dir=tmp)
            self.assertEqual(os.path.basename(path), "abc123.json")
            with open(path, encoding="utf-8") as f:
                payload = json.load(f)
        self.assertEqual(payload["build_id"], "abc123")
        self.assertIn("timestamp_utc", payload)
        self.assertEqual(payload["stats"], {"files_scanned": 1})


if __name__ == "__main__":
    unittest.main()

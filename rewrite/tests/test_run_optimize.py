"""End-to-end tests for the run_optimize command line."""

import json
import os
import shutil
import tempfile
import unittest
from unittest import mock

import run_optimize

FIXTURE_APP = os.path.join(os.path.dirname(os.path.abspath(__file__)), "fixtures", "app")


class TestRunOptimize(unittest.TestCase):
    def setUp(self) -> None:
        self.tmp = tempfile.mkdtemp()
        self.addCleanup(shutil.rmtree, self.tmp, True)
        env_patch = mock.patch.dict(
            os.environ,
            {"OPTIMIZE_IMPORTS_PACKAGES": "", "OPTIMIZE_IMPORTS_CONFIG": "", "STRICT_CONFIG_VALIDATION": ""},
        )
        env_patch.start()
        self.addCleanup(env_patch.stop)
        # Logging setup is process-wide; keep test runner handlers untouched
        logging_patch = mock.patch.object(run_optimize, "configure_structured_logging")
        logging_patch.start()
        self.addCleanup(logging_patch.stop)

    def _config(self, packages) -> str:
        path = os.path.join(self.tmp, "optimize.json")
        with open(path, "w", encoding="utf-8") as f:
            json.dump({"include_defaults": False, "optimize_packages": packages}, f)
        return path

    def test_output_dir_run(self) -> None:
        out_dir = os.path.join(self.tmp, "out")
        report_dir = os.path.join(self.tmp, "reports")
        code = run_optimize.main(
            [
                "--source-dir", os.path.join(FIXTURE_APP, "src"),
                "--root", FIXTURE_APP,
                "--config", self._config(["ui-kit"]),
                "--package", "@acme/icons",
                "--output-dir", out_dir,
                "--report-dir", report_dir,
            ]
        )
        self.assertEqual(code, 0)
        reports = os.listdir(report_dir)
        self.assertEqual(len(reports), 1)
        with open(os.path.join(report_dir, reports[0]), encoding="utf-8") as f:
            report = json.load(f)
        self.assertEqual(report["packages"], ["ui-kit", "@acme/icons"])
        self.assertEqual(report["stats"]["files_rewritten"], 1)
        self.assertTrue(os.path.isfile(os.path.join(out_dir, "components", "plain.js")))

    def test_strict_config_error(self) -> None:
        code = run_optimize.main(
            [
                "--source-dir", os.path.join(FIXTURE_APP, "src"),
                "--config", os.path.join(self.tmp, "missing.yml"),
                "--strict-config",
                "--output-dir", os.path.join(self.tmp, "out"),
                "--report-dir", os.path.join(self.tmp, "reports"),
            ]
        )
        self.assertEqual(code, 2)

    def test_missing_source_dir(self) -> None:
        code = run_optimize.main(
            [
                "--source-dir", os.path.join(self.tmp, "nope"),
                "--config", self._config(["ui-kit"]),
                "--output-dir", os.path.join(self.tmp, "out"),
                "--report-dir", os.path.join(self.tmp, "reports"),
            ]
        )
        self.assertEqual(code, 1)

    def test_output_target_required(self) -> None:
        with self.assertRaises(SystemExit):
            run_optimize.parse_args(["--source-dir", "src"])


if __name__ == "__main__":
    unittest.main()

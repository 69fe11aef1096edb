#!/usr/bin/env python3
"""
Batch barrel-import optimizer for a JavaScript/TypeScript source tree.

Rewrites imports from barrel packages (``import { Button } from "ui-kit"``)
into direct sub-module imports, resolving packages from the project's
``node_modules``.

Usage:
    python run_optimize.py --source-dir ./src --output-dir out/src
    python run_optimize.py --source-dir ./src --in-place --package my-icons
    python run_optimize.py --source-dir ./src --output-dir out/src --config optimize.yml --write-maps
"""

import argparse
import logging
import os
import sys
import time

from core.plugin_config import ConfigValidationError, load_optimize_config
from core.structured_logging import configure_structured_logging, phase_scope, set_build_id
from rewrite.batch import OptimizeStats, iter_optimize_directory, write_run_report
from rewrite.plugin import create_optimize_imports_plugin

logger = logging.getLogger(__name__)


def parse_args(argv=None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Barrel import optimizer",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  python run_optimize.py --source-dir ./src --output-dir out/src\n"
            "  python run_optimize.py --source-dir ./src --in-place --package my-icons\n"
        ),
    )

    parser.add_argument(
        "--source-dir",
        required=True,
        help="Directory containing the JavaScript/TypeScript sources to optimize.",
    )
    parser.add_argument(
        "--root",
        default=None,
        help="Project root used for node_modules lookup. Default: current directory.",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="YAML/JSON config file with optimize_packages / include_defaults.",
    )
    parser.add_argument(
        "--package",
        action="append",
        default=[],
        help="Additional barrel package to optimize (repeatable).",
    )
    target = parser.add_mutually_exclusive_group(required=True)
    target.add_argument(
        "--output-dir",
        help="Write optimized files into this mirror directory.",
    )
    target.add_argument(
        "--in-place",
        action="store_true",
        default=False,
        help="Rewrite files in place.",
    )
    parser.add_argument(
        "--write-maps",
        action="store_true",
        default=False,
        help="Emit .map files for rewritten outputs.",
    )
    parser.add_argument(
        "--report-dir",
        default="output/optimize_reports",
        help="Directory for the JSON run report. Default: output/optimize_reports",
    )
    parser.add_argument(
        "--strict-config",
        action="store_true",
        default=None,
        help="Fail on invalid configuration instead of falling back to defaults.",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        default=False,
        help="Enable debug logging.",
    )

    return parser.parse_args(argv)


def main(argv=None) -> int:
    """Main entry point."""
    args = parse_args(argv)
    configure_structured_logging(logging.DEBUG if args.verbose else logging.INFO)
    build_id = set_build_id()

    try:
        with phase_scope("config"):
            config = load_optimize_config(args.config, strict=args.strict_config)
            if args.package:
                config = config.with_packages(args.package)
            logger.info("Optimizing imports from %d barrel packages", len(config))

        plugin = create_optimize_imports_plugin(config=config, root=args.root)
        stats = OptimizeStats()

        with phase_scope("rewrite"):
            t0 = time.time()
            rewritten = list(
                iter_optimize_directory(
                    plugin,
                    args.source_dir,
                    output_dir=None if args.in_place else args.output_dir,
                    write_maps=args.write_maps,
                    stats=stats,
                )
            )
            elapsed = time.time() - t0

        report_path = write_run_report(
            {
                "source_dir": os.path.abspath(args.source_dir),
                "packages": list(config.packages),
                "rewritten_files": rewritten,
                "stats": stats.to_dict(),
                "elapsed_seconds": round(elapsed, 3),
            },
            build_id=build_id,
            output_dir=args.report_dir,
        )
        logger.info("Finished in %.2fs: %s (report: %s)", elapsed, stats, report_path)

    except ConfigValidationError as e:
        logger.error("Configuration error: %s", e)
        return 2
    except FileNotFoundError as e:
        logger.error("File error: %s", e)
        return 1
    except Exception as e:
        logger.error("Optimization failed: %s", e, exc_info=True)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())

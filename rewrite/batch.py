"""
Batch driver for optimizing a whole source tree.

Walks JavaScript/TypeScript sources, pushes each through the plugin and
writes rewritten files (optionally with ``.map`` files) to an output tree.
"""

import json
import logging
import os
from datetime import datetime, timezone
from typing import Any, Dict, Iterator, List, Optional

from barrel.config import NODE_MODULES_DIR, SOURCE_EXTENSIONS
from rewrite.plugin import OptimizeImportsPlugin

logger = logging.getLogger(__name__)

SKIPPED_DIRECTORIES = {
    NODE_MODULES_DIR,
    "dist",
    "build",
    "out",
    "coverage",
    "__pycache__",
}


class OptimizeStats:
    """Statistics for a batch optimization run."""

    def __init__(self):
        self.files_scanned = 0
        self.files_rewritten = 0
        self.files_failed = 0

    def to_dict(self) -> Dict[str, int]:
        """Convert stats to dictionary."""
        return {
            "files_scanned": self.files_scanned,
            "files_rewritten": self.files_rewritten,
            "files_failed": self.files_failed,
        }

    def __str__(self) -> str:
        return (
            f"OptimizeStats(scanned={self.files_scanned}, "
            f"rewritten={self.files_rewritten}, failed={self.files_failed})"
        )


def discover_source_files(directory: str) -> List[str]:
    """Recursively discover JavaScript/TypeScript source files.

    Hidden directories, ``node_modules`` and common build output
    directories are skipped. Declaration files (``.d.ts``) are ignored.

    Returns:
        Sorted absolute paths.
    """
    directory = os.path.abspath(directory)
    found = []
    for root, dirs, files in os.walk(directory):
        dirs[:] = [d for d in dirs if not d.startswith(".") and d not in SKIPPED_DIRECTORIES]
        for name in files:
            if name.endswith(".d.ts"):
                continue
            if os.path.splitext(name)[1] in SOURCE_EXTENSIONS:
                found.append(os.path.join(root, name))
    logger.info("Found %d source files in %s", len(found), directory)
    return sorted(found)


def _write_text(path: str, text: str) -> None:
    os.makedirs(os.path.dirname(os.path.abspath(path)), exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        f.write(text)


def optimize_file(
    plugin: OptimizeImportsPlugin,
    file_path: str,
    output_path: str,
    write_map: bool = False,
) -> bool:
    """Optimize one file and write the result to ``output_path``.

    Unchanged files are copied through when ``output_path`` differs from
    the input. Returns True if the file was rewritten.

    Raises:
        OSError: If the input cannot be read or the output cannot be written.
    """
    with open(file_path, "r", encoding="utf-8") as f:
        code = f.read()

    result = plugin.transform(code, os.path.abspath(file_path))
    if result is None:
        if os.path.abspath(output_path) != os.path.abspath(file_path):
            _write_text(output_path, code)
        return False

    code_out = result.code
    if write_map:
        map_path = output_path + ".map"
        _write_text(map_path, json.dumps(result.map))
        code_out += f"\n//# sourceMappingURL={os.path.basename(map_path)}\n"
    _write_text(output_path, code_out)
    return True


def iter_optimize_directory(
    plugin: OptimizeImportsPlugin,
    source_dir: str,
    output_dir: Optional[str] = None,
    write_maps: bool = False,
    stats: Optional[OptimizeStats] = None,
) -> Iterator[str]:
    """Optimize every source file under ``source_dir``, yielding rewritten paths.

    Args:
        plugin: Configured plugin.
        source_dir: Tree to scan.
        output_dir: Mirror tree for outputs; None rewrites files in place.
        write_maps: Whether to emit ``.map`` files next to rewritten outputs.
        stats: Optional stats object updated as files are processed.

    Raises:
        FileNotFoundError: If ``source_dir`` does not exist.
    """
    source_dir = os.path.abspath(source_dir)
    if not os.path.isdir(source_dir):
        raise FileNotFoundError(f"Source directory not found: {source_dir}")
    if stats is None:
        stats = OptimizeStats()

    for file_path in discover_source_files(source_dir):
        relative = os.path.relpath(file_path, source_dir)
        target = file_path if output_dir is None else os.path.join(output_dir, relative)
        stats.files_scanned += 1
        try:
            rewritten = optimize_file(plugin, file_path, target, write_map=write_maps)
        except (OSError, UnicodeDecodeError) as e:
            logger.error("Cannot optimize %s: %s", relative, e)
            stats.files_failed += 1
            continue
        if rewritten:
            stats.files_rewritten += 1
            logger.info("Rewrote barrel imports in %s", relative)
            yield target

    logger.info("Optimization complete: %s", stats)


def write_run_report(
    report: Dict[str, Any],
    build_id: str,
    output_dir: str = "output/optimize_reports",
) -> str:
    """Write a JSON run report named after the build id and return its path."""
    os.makedirs(output_dir, exist_ok=True)
    payload = dict(report)
    payload.setdefault("build_id", build_id)
    payload.setdefault("timestamp_utc", datetime.now(timezone.utc).isoformat())
    path = os.path.join(output_dir, f"{build_id}.json")
    with open(path, "w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2, sort_keys=True)
    return path

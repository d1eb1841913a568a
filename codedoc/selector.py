"""Selection of key modules, top files and the shallow directory histogram."""

from __future__ import annotations

import posixpath
from typing import Dict, List, Sequence

from .models import FileRecord

PRIORITY_BASENAMES = frozenset(
    {
        "main.go",
        "main.py",
        "index.js",
        "app.py",
        "server.js",
        "Makefile",
        "package.json",
        "requirements.txt",
        "go.mod",
    }
)

MODULE_MIN_FILES = 3
MODULE_LIMIT = 10
TOP_FILE_LIMIT = 10
MAX_DEPTH = 2


def _depth(directory: str) -> int:
    return directory.count("/")


def _parent_dir(relative_path: str) -> str:
    return posixpath.dirname(relative_path)


def identify_key_modules(
    files: Sequence[FileRecord],
    *,
    min_files: int = MODULE_MIN_FILES,
    max_depth: int = MAX_DEPTH,
    limit: int = MODULE_LIMIT,
) -> List[str]:
    """Return shallow directories holding at least ``min_files`` files directly.

    Order is first discovery in traversal order; the list is capped at ``limit``.
    """
    direct_counts: Dict[str, int] = {}
    for record in files:
        directory = _parent_dir(record.relative_path)
        if directory:
            direct_counts[directory] = direct_counts.get(directory, 0) + 1

    modules = [
        directory
        for directory, count in direct_counts.items()
        if _depth(directory) <= max_depth and count >= min_files
    ]
    return modules[:limit]


def select_top_files(files: Sequence[FileRecord], limit: int = TOP_FILE_LIMIT) -> List[FileRecord]:
    """Pick canonical entrypoint/manifest files first, then fill with other non-test files."""
    priority: List[FileRecord] = []
    regular: List[FileRecord] = []
    for record in files:
        if record.is_test:
            continue
        if posixpath.basename(record.relative_path) in PRIORITY_BASENAMES:
            priority.append(record)
        else:
            regular.append(record)

    selected = priority[:limit]
    remaining = limit - len(selected)
    if remaining > 0:
        selected.extend(regular[:remaining])
    return selected


def module_files(module: str, files: Sequence[FileRecord]) -> List[FileRecord]:
    """Return every file that lives under ``module`` (recursively)."""
    prefix = f"{module}/"
    return [record for record in files if record.relative_path.startswith(prefix)]


def directory_histogram(
    files: Sequence[FileRecord],
    *,
    max_depth: int = MAX_DEPTH,
    min_files: int = 2,
    limit: int = 10,
) -> List[tuple[str, int]]:
    """Count files recursively under every ancestor directory, shallow ones only."""
    counts: Dict[str, int] = {}
    for record in files:
        directory = _parent_dir(record.relative_path)
        if not directory:
            continue
        parts = directory.split("/")
        for index in range(len(parts)):
            ancestor = "/".join(parts[: index + 1])
            counts[ancestor] = counts.get(ancestor, 0) + 1

    entries = [
        (directory, count)
        for directory, count in counts.items()
        if _depth(directory) <= max_depth and count >= min_files
    ]
    return entries[:limit]


__all__ = [
    "PRIORITY_BASENAMES",
    "directory_histogram",
    "identify_key_modules",
    "module_files",
    "select_top_files",
]

"""Repository walking, language classification and scan-set building."""

from __future__ import annotations

import hashlib
import os
import stat
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Set

from .cancellation import CancellationToken, is_cancelled
from .config import DEFAULT_CACHE_DIR
from .errors import ConfigurationError, ScanReadError
from .logging import get_logger
from .models import FileRecord, LanguageStat, ScanSet

MAX_FILE_SIZE = 1024 * 1024

DEFAULT_IGNORE_PATTERNS: tuple[str, ...] = (
    ".git",
    ".hg",
    ".svn",
    "vendor",
    "node_modules",
    "dist",
    "build",
    ".venv",
    "__pycache__",
    ".pytest_cache",
    ".mypy_cache",
    DEFAULT_CACHE_DIR,
    "*.min.js",
    "*.min.css",
)

UNKNOWN_LANGUAGE = "unknown"

_LANGUAGE_BY_BASENAME = {
    "makefile": "makefile",
    "gnumakefile": "makefile",
    "cmakelists.txt": "cmake",
    "package.json": "json",
    "tsconfig.json": "json",
    "go.mod": "go",
    "go.sum": "go",
    "cargo.toml": "rust",
    "cargo.lock": "rust",
    "requirements.txt": "python",
    "setup.py": "python",
    "pipfile": "python",
}

_LANGUAGE_BY_SUFFIX = {
    ".go": "go",
    ".py": "python",
    ".pyi": "python",
    ".js": "javascript",
    ".jsx": "javascript",
    ".mjs": "javascript",
    ".cjs": "javascript",
    ".ts": "typescript",
    ".tsx": "typescript",
    ".java": "java",
    ".c": "c",
    ".h": "c",
    ".cpp": "cpp",
    ".cc": "cpp",
    ".hpp": "cpp",
    ".hh": "cpp",
    ".rs": "rust",
    ".rb": "ruby",
    ".php": "php",
    ".cs": "csharp",
    ".swift": "swift",
    ".kt": "kotlin",
    ".kts": "kotlin",
    ".scala": "scala",
    ".r": "r",
    ".jl": "julia",
    ".m": "objc",
    ".mm": "objc",
    ".pl": "perl",
    ".sh": "shell",
    ".bash": "shell",
    ".zsh": "shell",
    ".fish": "shell",
    ".ps1": "powershell",
    ".bat": "batch",
    ".cmd": "batch",
    ".lua": "lua",
    ".dart": "dart",
    ".elm": "elm",
    ".clj": "clojure",
    ".ex": "elixir",
    ".exs": "elixir",
    ".erl": "erlang",
    ".hrl": "erlang",
    ".fs": "fsharp",
    ".fsx": "fsharp",
    ".fsi": "fsharp",
    ".ml": "ocaml",
    ".mli": "ocaml",
    ".vim": "vim",
    ".yaml": "yaml",
    ".yml": "yaml",
    ".json": "json",
    ".toml": "toml",
    ".xml": "xml",
    ".html": "html",
    ".htm": "html",
    ".css": "css",
    ".scss": "scss",
    ".sass": "sass",
    ".less": "less",
    ".sql": "sql",
    ".md": "markdown",
    ".markdown": "markdown",
    ".rst": "rst",
    ".tex": "latex",
    ".dockerfile": "dockerfile",
    ".makefile": "makefile",
    ".cmake": "cmake",
    ".gradle": "gradle",
    ".proto": "protobuf",
    ".graphql": "graphql",
    ".vue": "vue",
    ".svelte": "svelte",
}

# Short names accepted in language filters.
_LANGUAGE_ALIASES = {
    "py": "python",
    "js": "javascript",
    "ts": "typescript",
    "md": "markdown",
    "yml": "yaml",
    "sh": "shell",
    "bash": "shell",
    "golang": "go",
    "rs": "rust",
    "rb": "ruby",
    "c++": "cpp",
    "c#": "csharp",
    "cs": "csharp",
    "kt": "kotlin",
    "docker": "dockerfile",
    "make": "makefile",
}

_TEST_DIRECTORIES = {"test", "tests", "__tests__", "spec"}
_TEST_INFIXES = ("_test.", ".test.", "_spec.", ".spec.")

logger = get_logger("scanner")


def detect_language(path: str) -> str:
    """Classify a file by name: special basenames, then extension, then unknown."""
    base = os.path.basename(path).lower()
    if base == "dockerfile" or base.startswith("dockerfile."):
        return "dockerfile"
    if base in _LANGUAGE_BY_BASENAME:
        return _LANGUAGE_BY_BASENAME[base]
    suffix = os.path.splitext(base)[1]
    return _LANGUAGE_BY_SUFFIX.get(suffix, UNKNOWN_LANGUAGE)


def is_test_file(relative_path: str) -> bool:
    """Return True when the file name or one of its directories marks it as a test."""
    parts = relative_path.replace("\\", "/").split("/")
    base = parts[-1].lower()
    if base.startswith("test_") or base == "conftest.py":
        return True
    if any(marker in base for marker in _TEST_INFIXES):
        return True
    return any(part.lower() in _TEST_DIRECTORIES for part in parts[:-1])


def normalize_languages(languages: Iterable[str]) -> Set[str]:
    """Lower-case a language filter and expand short aliases."""
    normalized: Set[str] = set()
    for language in languages:
        key = language.strip().lower()
        if not key:
            continue
        normalized.add(_LANGUAGE_ALIASES.get(key, key))
    return normalized


def count_lines(content: bytes) -> int:
    """Count lines as newline separators plus one; empty content has none."""
    if not content:
        return 0
    return content.count(b"\n") + 1


def identity_hash(relative_path: str, size: int, mtime_ns: int) -> str:
    """Fingerprint a file from its path, size and modification instant."""
    digest = hashlib.sha256()
    digest.update(relative_path.encode("utf-8"))
    digest.update(b"\0")
    digest.update(str(size).encode("ascii"))
    digest.update(b"\0")
    digest.update(str(mtime_ns).encode("ascii"))
    return digest.hexdigest()


def _matches_any(name: str, patterns: Sequence[str]) -> bool:
    return any(fnmatchcase(name, pattern) for pattern in patterns)


def should_ignore_dir(rel_dir: str, patterns: Sequence[str] = DEFAULT_IGNORE_PATTERNS) -> bool:
    """Return True when any segment of a directory path matches an ignore pattern."""
    return any(_matches_any(part, patterns) for part in rel_dir.split("/") if part)


def _iter_candidate_files(
    root: Path,
    patterns: Sequence[str],
    cancel: Optional[CancellationToken],
) -> Iterator[tuple[Path, str]]:
    for dirpath, dirnames, filenames in os.walk(root):
        if is_cancelled(cancel):
            return
        current_dir = Path(dirpath)
        rel_dir = current_dir.relative_to(root).as_posix() if current_dir != root else ""

        kept_dirs = []
        for name in sorted(dirnames):
            rel_path = f"{rel_dir}/{name}" if rel_dir else name
            if should_ignore_dir(rel_path, patterns):
                logger.debug("Pruning ignored directory %s", rel_path)
                continue
            kept_dirs.append(name)
        dirnames[:] = kept_dirs

        for filename in sorted(filenames):
            if _matches_any(filename, patterns):
                continue
            rel_path = f"{rel_dir}/{filename}" if rel_dir else filename
            yield current_dir / filename, rel_path


def _read_record(path: Path, rel_path: str) -> Optional[FileRecord]:
    try:
        stat_result = path.stat()
    except OSError as exc:
        raise ScanReadError(rel_path, str(exc)) from exc

    if not stat.S_ISREG(stat_result.st_mode):
        return None
    if stat_result.st_size > MAX_FILE_SIZE:
        return None

    try:
        content = path.read_bytes()
    except OSError as exc:
        raise ScanReadError(rel_path, str(exc)) from exc

    return FileRecord(
        path=str(path),
        relative_path=rel_path,
        size=stat_result.st_size,
        lines=count_lines(content),
        language=detect_language(rel_path),
        is_test=is_test_file(rel_path),
        hash=identity_hash(rel_path, stat_result.st_size, stat_result.st_mtime_ns),
    )


def _calculate_percentages(stats: Dict[str, LanguageStat], total_lines: int) -> None:
    if total_lines == 0:
        return
    for stat_entry in stats.values():
        stat_entry.percentage = stat_entry.lines / total_lines * 100


class RepoScanner:
    """Walks a repository to produce an ordered, bounded scan set."""

    def __init__(self, ignore_patterns: Sequence[str] = DEFAULT_IGNORE_PATTERNS) -> None:
        self.ignore_patterns = tuple(ignore_patterns)

    def scan(
        self,
        root: str,
        max_files: int,
        include_tests: bool = False,
        languages: Iterable[str] = (),
        *,
        extra_ignores: Iterable[str] = (),
        cancel: Optional[CancellationToken] = None,
    ) -> ScanSet:
        """Return the scan set for ``root``, stopping once ``max_files`` records are kept."""
        root_path = Path(root).expanduser().resolve()
        if not root_path.exists():
            raise ConfigurationError(f"Repository path not found: {root}")
        if not root_path.is_dir():
            raise ConfigurationError(f"Repository path is not a directory: {root}")
        if not os.access(root_path, os.R_OK | os.X_OK):
            raise ConfigurationError(f"Repository path is not readable: {root}")
        if max_files <= 0:
            raise ConfigurationError("max_files must be positive")

        patterns = self.ignore_patterns + tuple(p for p in extra_ignores if p)
        language_filter = normalize_languages(languages)
        result = ScanSet(root=str(root_path), name=root_path.name or str(root_path))

        for path, rel_path in _iter_candidate_files(root_path, patterns, cancel):
            if is_cancelled(cancel):
                break
            try:
                record = _read_record(path, rel_path)
            except ScanReadError as exc:
                logger.debug("Skipping unreadable file: %s", exc)
                continue
            if record is None:
                continue
            if language_filter and record.language not in language_filter:
                continue
            if record.is_test and not include_tests:
                continue

            result.files.append(record)
            result.total_lines += record.lines
            stat_entry = result.language_stats.setdefault(record.language, LanguageStat())
            stat_entry.file_count += 1
            stat_entry.lines += record.lines

            if len(result.files) >= max_files:
                result.truncated = True
                logger.debug("Reached max file limit (%d); stopping traversal", max_files)
                break

        result.cancelled = is_cancelled(cancel)
        _calculate_percentages(result.language_stats, result.total_lines)
        logger.info(
            "Scanned %d files (%d lines) under %s", result.total_files, result.total_lines, root_path
        )
        return result


def ignore_patterns_for(cache_dir: Path, root: Path, exclude_paths: Iterable[str] = ()) -> List[str]:
    """Extra ignore patterns so a custom cache directory and configured excludes are pruned."""
    patterns = [pattern.strip().strip("/") for pattern in exclude_paths if pattern.strip().strip("/")]
    try:
        relative = cache_dir.resolve().relative_to(root.resolve())
    except ValueError:
        return patterns
    if relative.parts:
        patterns.append(relative.parts[-1])
    return patterns


__all__ = [
    "DEFAULT_IGNORE_PATTERNS",
    "MAX_FILE_SIZE",
    "RepoScanner",
    "UNKNOWN_LANGUAGE",
    "count_lines",
    "detect_language",
    "identity_hash",
    "ignore_patterns_for",
    "is_test_file",
    "normalize_languages",
    "should_ignore_dir",
]

"""Bounded per-file context extraction and secret redaction."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

from .errors import ScanReadError
from .logging import get_logger
from .models import ContextSlice, FileRecord

HEADER_LOOKAHEAD = 50
REDACTION_MASK = "[REDACTED]"

_DEFAULT_MARKERS: Tuple[str, ...] = ("func ", "class ", "def ", "interface ")

_DECLARATION_MARKERS: Dict[str, Tuple[str, ...]] = {
    "python": ("def ", "class ", "async def "),
    "go": ("func ", "interface ", "struct {"),
    "javascript": ("function ", "class ", "=> {"),
    "typescript": ("function ", "class ", "interface ", "=> {"),
    "java": ("class ", "interface ", "enum ", "record "),
    "kotlin": ("fun ", "class ", "interface ", "object "),
    "csharp": ("class ", "interface ", "struct ", "record "),
    "rust": ("fn ", "struct ", "enum ", "trait ", "impl "),
    "ruby": ("def ", "class ", "module "),
    "php": ("function ", "class ", "interface ", "trait "),
    "swift": ("func ", "class ", "struct ", "protocol "),
    "scala": ("def ", "class ", "object ", "trait "),
    "shell": ("function ", "() {"),
}

# Ordered so vendor-specific tokens are masked before the generic long-run rule.
_SECRET_PATTERNS: Tuple[Tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"sk-[A-Za-z0-9_\-]{20,}"), REDACTION_MASK),
    (re.compile(r"ghp_[A-Za-z0-9]{36}"), REDACTION_MASK),
    (re.compile(r"\bAKIA[0-9A-Z]{16}\b"), REDACTION_MASK),
    (re.compile(r"xox[bpoa]-[A-Za-z0-9\-]{10,}"), REDACTION_MASK),
    (
        re.compile(
            r"(?i)((?:api[_-]?key|api[_-]?secret|access[_-]?token|auth[_-]?token|"
            r"private[_-]?key|secret|password|passwd|pwd)[ \t]*[:=][ \t]*)"
            r"([\"']?)[^\s\"']+([\"']?)"
        ),
        rf"\1\2{REDACTION_MASK}\3",
    ),
    (re.compile(r"\b[A-Za-z0-9]{40,}\b"), REDACTION_MASK),
)

logger = get_logger("budget")


def declaration_markers(language: Optional[str]) -> Tuple[str, ...]:
    if language and language in _DECLARATION_MARKERS:
        return _DECLARATION_MARKERS[language] + _DEFAULT_MARKERS
    return _DEFAULT_MARKERS


def extract_key_lines(
    lines: Sequence[str], max_lines: int, language: Optional[str] = None
) -> List[str]:
    """Compress ``lines`` to at most ``max_lines`` using a header plus stride sample.

    The header is every line from the top until the first declaration marker
    (inclusive) or ``HEADER_LOOKAHEAD`` lines. The remaining budget is filled
    by taking every ``stride``-th line after the header. The result is a pure
    function of its inputs.
    """
    if len(lines) <= max_lines:
        return list(lines)

    markers = declaration_markers(language)
    result: List[str] = []
    for index, line in enumerate(lines):
        if index >= HEADER_LOOKAHEAD or len(result) >= max_lines:
            break
        result.append(line)
        if any(marker in line for marker in markers):
            break

    header_lines = len(result)
    remaining = max_lines - header_lines
    if remaining > 0:
        stride = max(1, (len(lines) - header_lines) // remaining)
        for index in range(header_lines, len(lines), stride):
            if len(result) >= max_lines:
                break
            result.append(lines[index])
    return result


def redact_line(line: str) -> str:
    for pattern, replacement in _SECRET_PATTERNS:
        line = pattern.sub(replacement, line)
    return line


def redact_secrets(lines: Sequence[str]) -> List[str]:
    """Mask credential-like substrings without changing line count or order."""
    return [redact_line(line) for line in lines]


def split_lines(text: str) -> List[str]:
    """Split on newlines so the count matches the scanner's line counting."""
    if not text:
        return []
    return text.split("\n")


def build_context_slice(record: FileRecord, max_lines: int, redact: bool = True) -> ContextSlice:
    """Read ``record`` from disk and return its bounded context slice."""
    try:
        raw = Path(record.path).read_bytes()
    except OSError as exc:
        raise ScanReadError(record.relative_path, str(exc)) from exc

    lines = split_lines(raw.decode("utf-8", errors="replace"))
    sampled = len(lines) > max_lines
    if sampled:
        lines = extract_key_lines(lines, max_lines, record.language)
        logger.debug(
            "Sampled %s down to %d lines (cap %d)", record.relative_path, len(lines), max_lines
        )
    if redact:
        lines = redact_secrets(lines)

    return ContextSlice(
        path=record.relative_path,
        language=record.language,
        total_lines=record.lines,
        size=record.size,
        lines=tuple(lines),
        sampled=sampled,
    )


__all__ = [
    "HEADER_LOOKAHEAD",
    "REDACTION_MASK",
    "build_context_slice",
    "declaration_markers",
    "extract_key_lines",
    "redact_secrets",
    "split_lines",
]

"""Tests for codedoc.budget."""

from __future__ import annotations

from pathlib import Path

import pytest

from codedoc.budget import (
    HEADER_LOOKAHEAD,
    REDACTION_MASK,
    build_context_slice,
    extract_key_lines,
    redact_secrets,
    split_lines,
)
from codedoc.errors import ScanReadError
from codedoc.models import FileRecord


def _record_for(path: Path, relative_path: str, language: str = "python") -> FileRecord:
    content = path.read_bytes()
    return FileRecord(
        path=str(path),
        relative_path=relative_path,
        size=len(content),
        lines=content.count(b"\n") + 1 if content else 0,
        language=language,
        is_test=False,
        hash="abc123",
    )


def test_small_input_is_returned_unchanged() -> None:
    lines = [f"line {index}" for index in range(5)]

    assert extract_key_lines(lines, 1000) == lines


def test_long_input_without_marker_uses_header_then_stride() -> None:
    lines = [f"row {index}" for index in range(2500)]

    result = extract_key_lines(lines, 1000)

    assert len(result) == 1000
    assert result[:HEADER_LOOKAHEAD] == lines[:HEADER_LOOKAHEAD]
    assert result[HEADER_LOOKAHEAD : HEADER_LOOKAHEAD + 3] == ["row 50", "row 52", "row 54"]
    assert result[-1] == "row 1948"


def test_header_stops_at_first_declaration() -> None:
    lines = ["import os", "", "def main():"] + [f"    step({index})" for index in range(200)]

    result = extract_key_lines(lines, 20, "python")

    assert result[:3] == ["import os", "", "def main():"]
    assert len(result) == 20
    stride = (len(lines) - 3) // 17
    assert result[3] == lines[3]
    assert result[4] == lines[3 + stride]


def test_extraction_is_deterministic() -> None:
    lines = [f"value = {index}" for index in range(777)]

    assert extract_key_lines(lines, 100) == extract_key_lines(lines, 100)


def test_tiny_cap_never_exceeds_budget() -> None:
    lines = [f"row {index}" for index in range(300)]

    assert len(extract_key_lines(lines, 5)) == 5


def test_redaction_masks_credentials_and_keeps_line_count() -> None:
    lines = [
        'API_KEY = "abcdef123"',
        'client = Client("sk-abcdefghijklmnopqrstuvwxyz123456")',
        "token: ghp_" + "a" * 36,
        "plain = 42",
    ]

    redacted = redact_secrets(lines)

    assert len(redacted) == len(lines)
    assert redacted[0] == f'API_KEY = "{REDACTION_MASK}"'
    assert redacted[1] == f'client = Client("{REDACTION_MASK}")'
    assert "ghp_" not in redacted[2]
    assert redacted[3] == "plain = 42"


def test_split_lines_matches_scanner_line_count() -> None:
    assert split_lines("") == []
    assert split_lines("a\nb\n") == ["a", "b", ""]


def test_build_context_slice_renders_header_and_content(tmp_path: Path) -> None:
    source = tmp_path / "app.py"
    source.write_text('password = "hunter2"\nprint("ok")', encoding="utf-8")
    record = _record_for(source, "app.py")

    context = build_context_slice(record, 1000)
    rendered = context.render()

    assert context.sampled is False
    assert rendered.startswith("File: app.py\nLanguage: python\nTotal lines: 2\n")
    assert "Content sample:\n" in rendered
    assert "hunter2" not in rendered
    assert 'print("ok")' in rendered


def test_build_context_slice_can_skip_redaction(tmp_path: Path) -> None:
    source = tmp_path / "settings.py"
    source.write_text('password = "hunter2"', encoding="utf-8")

    context = build_context_slice(_record_for(source, "settings.py"), 10, redact=False)

    assert context.lines == ('password = "hunter2"',)


def test_build_context_slice_samples_large_files(tmp_path: Path) -> None:
    source = tmp_path / "big.txt"
    source.write_text("\n".join(f"row {index}" for index in range(500)), encoding="utf-8")

    context = build_context_slice(_record_for(source, "big.txt", "unknown"), 100)

    assert context.sampled is True
    assert len(context.lines) == 100


def test_build_context_slice_raises_for_vanished_file(tmp_path: Path) -> None:
    source = tmp_path / "gone.py"
    source.write_text("x = 1", encoding="utf-8")
    record = _record_for(source, "gone.py")
    source.unlink()

    with pytest.raises(ScanReadError) as excinfo:
        build_context_slice(record, 10)

    assert excinfo.value.path == "gone.py"

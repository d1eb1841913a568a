"""Tests for codedoc.failsafe."""

from __future__ import annotations

from codedoc.failsafe import (
    CLONE_STEP,
    DOCUMENTATION_STEP,
    default_quickstart,
    failure_summary,
    placeholder_summary,
)
from codedoc.models import BuildTool, DetectionResult, SummaryKind


def test_placeholder_is_labelled_by_kind() -> None:
    assert placeholder_summary(SummaryKind.MODULE) == "[module summary placeholder - dry run mode]"


def test_failure_summary_includes_condensed_reason() -> None:
    assert failure_summary(SummaryKind.ARCHITECTURE) == (
        "[architecture summary unavailable - generation failed]"
    )
    assert failure_summary(SummaryKind.ARCHITECTURE, "  timed   out ") == (
        "[architecture summary unavailable - generation failed: timed out]"
    )


def test_default_quickstart_without_tools_points_to_docs() -> None:
    assert default_quickstart(DetectionResult()) == [CLONE_STEP, DOCUMENTATION_STEP]


def test_default_quickstart_follows_detected_tools() -> None:
    detection = DetectionResult(
        build_tools=[
            BuildTool(type="npm", file="package.json", scripts=["build", "start"]),
            BuildTool(type="make", file="Makefile", scripts=["test"]),
            BuildTool(type="cargo", file="Cargo.toml"),
            BuildTool(type="pip", file="requirements.txt", scripts=["pip install -r requirements.txt"]),
            BuildTool(type="pip", file="setup.py", scripts=["pip install -r requirements.txt"]),
        ]
    )

    assert default_quickstart(detection) == [
        CLONE_STEP,
        "Install dependencies: npm install",
        "Build the project: npm run build",
        "Start the application: npm start",
        "Run tests: make test",
        "Build the project: cargo build",
        "Run tests: cargo test",
        "Run the application: cargo run",
        "Install dependencies: pip install -r requirements.txt",
    ]


def test_make_without_known_targets_falls_back_to_docs() -> None:
    detection = DetectionResult(build_tools=[BuildTool(type="make", file="Makefile", scripts=["lint"])])

    assert default_quickstart(detection) == [CLONE_STEP, DOCUMENTATION_STEP]

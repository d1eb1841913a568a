"""Fail-safe stand-ins used when no generator is attached or a stage fails."""

from __future__ import annotations

from typing import List

from .models import BuildTool, DetectionResult, SummaryKind

CLONE_STEP = "Clone the repository"
DOCUMENTATION_STEP = "Check documentation for setup instructions"


def placeholder_summary(kind: SummaryKind) -> str:
    """Return the fixed, labelled stand-in emitted in no-generation mode."""
    return f"[{kind.value} summary placeholder - dry run mode]"


def failure_summary(kind: SummaryKind, reason: str | None = None) -> str:
    """Return the stand-in for a unit whose generation call failed."""
    cleaned_reason = _format_reason(reason)
    if cleaned_reason:
        return f"[{kind.value} summary unavailable - generation failed: {cleaned_reason}]"
    return f"[{kind.value} summary unavailable - generation failed]"


def default_quickstart(detection: DetectionResult) -> List[str]:
    """Derive setup steps from detected build tools; never returns an empty list."""
    steps: List[str] = [CLONE_STEP]
    for tool in detection.build_tools:
        helper = _STEP_BUILDERS.get(tool.type)
        if helper is None:
            continue
        for step in helper(tool):
            if step not in steps:
                steps.append(step)

    if len(steps) == 1:
        steps.append(DOCUMENTATION_STEP)
    return steps


def _npm_steps(tool: BuildTool) -> List[str]:
    steps = ["Install dependencies: npm install"]
    if "build" in tool.scripts:
        steps.append("Build the project: npm run build")
    if "test" in tool.scripts:
        steps.append("Run tests: npm test")
    if "start" in tool.scripts:
        steps.append("Start the application: npm start")
    return steps


def _go_steps(tool: BuildTool) -> List[str]:
    return [
        "Download dependencies: go mod download",
        "Build the project: go build",
        "Run tests: go test ./...",
    ]


def _make_steps(tool: BuildTool) -> List[str]:
    steps = []
    if "build" in tool.scripts:
        steps.append("Build the project: make build")
    if "test" in tool.scripts:
        steps.append("Run tests: make test")
    if "run" in tool.scripts:
        steps.append("Run the application: make run")
    return steps


def _pip_steps(tool: BuildTool) -> List[str]:
    command = tool.scripts[0] if tool.scripts else "pip install -r requirements.txt"
    return [f"Install dependencies: {command}"]


def _cargo_steps(tool: BuildTool) -> List[str]:
    return [
        "Build the project: cargo build",
        "Run tests: cargo test",
        "Run the application: cargo run",
    ]


def _compose_steps(tool: BuildTool) -> List[str]:
    return ["Start services: docker-compose up"]


_STEP_BUILDERS = {
    "npm": _npm_steps,
    "go": _go_steps,
    "make": _make_steps,
    "pip": _pip_steps,
    "cargo": _cargo_steps,
    "docker-compose": _compose_steps,
}


def _format_reason(reason: str | None) -> str | None:
    if not reason:
        return None
    cleaned = " ".join(reason.strip().split())
    if not cleaned:
        return None
    return cleaned[:200] + ("…" if len(cleaned) > 200 else "")


__all__ = [
    "CLONE_STEP",
    "DOCUMENTATION_STEP",
    "default_quickstart",
    "failure_summary",
    "placeholder_summary",
]

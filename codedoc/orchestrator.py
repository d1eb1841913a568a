"""Sequences the architecture, module, file and quickstart summarisation stages."""

from __future__ import annotations

import posixpath
import re
from dataclasses import dataclass
from typing import Dict, List, Optional

from .budget import build_context_slice
from .cancellation import CancellationToken, is_cancelled
from .errors import GenerationError, ScanReadError
from .failsafe import default_quickstart, failure_summary
from .llm.base import Generator
from .llm.rate_limiter import RateLimiter
from .logging import get_logger
from .models import (
    CacheEntry,
    Constraints,
    DetectionResult,
    FileRecord,
    FileSummary,
    GenerationResult,
    ScanSet,
    SummarizeRequest,
    SummaryKind,
    SummaryReport,
)
from .selector import directory_histogram, identify_key_modules, module_files, select_top_files
from .stores.summary_cache import SummaryCache, derive_cache_key

_BULLET = re.compile(r"^(?:[-*•]|\d+[.)])\s+(?P<body>\S.*)$")

MODULE_SAMPLE_FILES = 10
QUICKSTART_SCRIPT_SAMPLE = 3


@dataclass
class SummaryOptions:
    """Per-run budgets for context size and generated output."""

    max_lines_per_file: int = 1000
    redact_secrets: bool = True
    architecture_words: int = 180
    module_words: int = 80
    file_words: int = 120
    function_bullets: int = 8
    quickstart_bullets: int = 8


class _RunCancelled(Exception):
    """Unwinds the active stage once the cancellation token fires."""


def parse_bullets(text: str, limit: int) -> List[str]:
    """Extract at most ``limit`` bullet bodies from a generated response.

    Only lines opening with ``-``, ``*``, ``•``, ``N.`` or ``N)`` followed by
    whitespace count; everything else in the response is ignored.
    """
    bullets: List[str] = []
    for raw_line in text.splitlines():
        if len(bullets) >= limit:
            break
        match = _BULLET.match(raw_line.strip())
        if match:
            bullets.append(match.group("body").strip())
    return bullets


class Orchestrator:
    """Drives every generation unit through the cache and rate limiter.

    Stages run once, in order. A failing unit degrades to a placeholder or is
    omitted; it never aborts the run.
    """

    def __init__(
        self,
        generator: Generator,
        *,
        cache: SummaryCache | None = None,
        rate_limiter: RateLimiter | None = None,
        options: SummaryOptions | None = None,
    ) -> None:
        self.generator = generator
        self.cache = cache
        self.rate_limiter = rate_limiter
        self.options = options or SummaryOptions()
        self.logger = get_logger("orchestrator")

    def run(
        self,
        scan_set: ScanSet,
        detection: DetectionResult,
        options: SummaryOptions | None = None,
        *,
        cancel: Optional[CancellationToken] = None,
    ) -> SummaryReport:
        """Run all four stages and return the (possibly partial) report."""
        opts = options or self.options
        report = SummaryReport()
        try:
            self._summarize_architecture(scan_set, detection, opts, report, cancel)
            self._summarize_modules(scan_set, opts, report, cancel)
            self._summarize_files(scan_set, opts, report, cancel)
            self._generate_quickstart(scan_set, detection, opts, report, cancel)
        except _RunCancelled:
            self.logger.info("Run cancelled; returning partial summaries")
            report.cancelled = True
        self.logger.info(
            "Summaries complete: %d generation calls, %d cache hits",
            report.generation_calls,
            report.cache_hits,
        )
        return report

    # ------------------------------------------------------------------
    # Generation gate

    def _generate(
        self,
        request: SummarizeRequest,
        report: SummaryReport,
        cancel: Optional[CancellationToken],
    ) -> GenerationResult:
        if is_cancelled(cancel):
            raise _RunCancelled()

        key = derive_cache_key(request)
        use_cache = self.cache is not None and self.generator.cacheable
        if use_cache:
            entry = self.cache.get(key)
            if entry is not None:
                report.cache_hits += 1
                self.logger.debug("Cache hit for %s (%s)", request.kind.value, key)
                return GenerationResult(text=entry.summary, cached=True, tokens=entry.tokens)
            self.logger.debug("Cache miss for %s (%s)", request.kind.value, key)

        if self.generator.outbound and self.rate_limiter is not None:
            self.rate_limiter.wait()
            if is_cancelled(cancel):
                raise _RunCancelled()

        report.generation_calls += 1
        result = self.generator.summarize(request)

        if use_cache and not result.placeholder:
            try:
                self.cache.put(
                    key,
                    CacheEntry(key=key, summary=result.text, tokens=result.tokens),
                    kind=request.kind.value,
                )
            except OSError as exc:
                self.logger.warning("Unable to write cache entry %s: %s", key, exc)
        return result

    # ------------------------------------------------------------------
    # Stages

    def _summarize_architecture(
        self,
        scan_set: ScanSet,
        detection: DetectionResult,
        opts: SummaryOptions,
        report: SummaryReport,
        cancel: Optional[CancellationToken],
    ) -> None:
        request = SummarizeRequest(
            kind=SummaryKind.ARCHITECTURE,
            context=build_architecture_context(scan_set, detection),
            constraints=Constraints(max_words=opts.architecture_words),
        )
        try:
            result = self._generate(request, report, cancel)
        except GenerationError as exc:
            self.logger.warning("Architecture summary failed: %s", exc)
            report.architecture_summary = failure_summary(SummaryKind.ARCHITECTURE, str(exc))
            return
        report.architecture_summary = result.text

    def _summarize_modules(
        self,
        scan_set: ScanSet,
        opts: SummaryOptions,
        report: SummaryReport,
        cancel: Optional[CancellationToken],
    ) -> None:
        modules = identify_key_modules(scan_set.files)
        self.logger.debug("Summarising %d key modules", len(modules))
        for module in modules:
            request = SummarizeRequest(
                kind=SummaryKind.MODULE,
                context=build_module_context(module, scan_set.files),
                constraints=Constraints(max_words=opts.module_words),
            )
            try:
                result = self._generate(request, report, cancel)
            except GenerationError as exc:
                self.logger.warning("Module summary for %s failed: %s", module, exc)
                continue
            report.module_summaries[module] = result.text

    def _summarize_files(
        self,
        scan_set: ScanSet,
        opts: SummaryOptions,
        report: SummaryReport,
        cancel: Optional[CancellationToken],
    ) -> None:
        for record in select_top_files(scan_set.files):
            summary = self._summarize_file(record, opts, report, cancel)
            if summary is not None:
                report.file_summaries[record.relative_path] = summary

    def _summarize_file(
        self,
        record: FileRecord,
        opts: SummaryOptions,
        report: SummaryReport,
        cancel: Optional[CancellationToken],
    ) -> Optional[FileSummary]:
        if is_cancelled(cancel):
            raise _RunCancelled()
        try:
            context = build_context_slice(
                record, opts.max_lines_per_file, redact=opts.redact_secrets
            ).render()
        except ScanReadError as exc:
            self.logger.debug("Skipping file summary: %s", exc)
            return None

        summary_request = SummarizeRequest(
            kind=SummaryKind.FILE,
            context=context,
            constraints=Constraints(max_words=opts.file_words),
            cache_key=record.hash,
        )
        functions_request = SummarizeRequest(
            kind=SummaryKind.FUNCTION,
            context=context,
            constraints=Constraints(max_bullets=opts.function_bullets),
            cache_key=f"{record.hash}-functions",
        )
        try:
            summary = self._generate(summary_request, report, cancel)
            functions = self._generate(functions_request, report, cancel)
        except GenerationError as exc:
            self.logger.warning("File summary for %s failed: %s", record.relative_path, exc)
            return None

        if functions.placeholder:
            bullets = [functions.text]
        else:
            bullets = parse_bullets(functions.text, opts.function_bullets)
        return FileSummary(
            path=record.relative_path,
            summary=summary.text,
            functions=bullets,
            cached=summary.cached,
            tokens=summary.tokens + functions.tokens,
        )

    def _generate_quickstart(
        self,
        scan_set: ScanSet,
        detection: DetectionResult,
        opts: SummaryOptions,
        report: SummaryReport,
        cancel: Optional[CancellationToken],
    ) -> None:
        request = SummarizeRequest(
            kind=SummaryKind.QUICKSTART,
            context=build_quickstart_context(scan_set, detection),
            constraints=Constraints(max_bullets=opts.quickstart_bullets),
        )
        try:
            result = self._generate(request, report, cancel)
        except GenerationError as exc:
            self.logger.warning("Quickstart generation failed; using defaults: %s", exc)
            report.quickstart_steps = default_quickstart(detection)
            return

        if result.placeholder:
            report.quickstart_steps = [result.text]
            return
        steps = parse_bullets(result.text, opts.quickstart_bullets)
        if not steps:
            self.logger.warning("Quickstart response had no bullet steps; using defaults")
            steps = default_quickstart(detection)
        report.quickstart_steps = steps


# ----------------------------------------------------------------------
# Context builders


def build_architecture_context(scan_set: ScanSet, detection: DetectionResult) -> str:
    parts = [
        f"Repository: {scan_set.name}",
        f"Total files: {scan_set.total_files}",
        f"Total lines: {scan_set.total_lines}",
        "",
        "Languages:",
    ]
    ordered_stats = sorted(
        scan_set.language_stats.items(), key=lambda item: (-item[1].lines, item[0])
    )
    for language, stat in ordered_stats:
        parts.append(
            f"- {language}: {stat.percentage:.1f}% ({stat.file_count} files, {stat.lines} lines)"
        )

    if detection.frameworks:
        parts.extend(["", "Frameworks detected:"])
        parts.extend(f"- {fw.name} ({fw.language})" for fw in detection.frameworks)
    if detection.build_tools:
        parts.extend(["", "Build tools:"])
        parts.extend(f"- {tool.type} ({tool.file})" for tool in detection.build_tools)
    if detection.entrypoints:
        parts.extend(["", "Entrypoints:"])
        parts.extend(f"- {entry.type}: {entry.path}" for entry in detection.entrypoints)

    parts.extend(["", "Key directories:"])
    parts.extend(
        f"- /{directory} ({count} files)" for directory, count in directory_histogram(scan_set.files)
    )
    return "\n".join(parts)


def build_module_context(module: str, files: List[FileRecord]) -> str:
    members = module_files(module, files)
    language_counts: Dict[str, int] = {}
    for record in members:
        language_counts[record.language] = language_counts.get(record.language, 0) + 1

    parts = [
        f"Module: {module}",
        f"Files: {len(members)}",
        f"Lines: {sum(record.lines for record in members)}",
        "Languages:",
    ]
    parts.extend(f"- {language}: {count} files" for language, count in language_counts.items())
    parts.extend(["", "Key files:"])
    parts.extend(
        f"- {posixpath.basename(record.relative_path)} ({record.lines} lines)"
        for record in members[:MODULE_SAMPLE_FILES]
    )
    return "\n".join(parts)


def build_quickstart_context(scan_set: ScanSet, detection: DetectionResult) -> str:
    parts = [f"Project: {scan_set.name}"]
    if detection.build_tools:
        parts.extend(["", "Build tools found:"])
        for tool in detection.build_tools:
            parts.append(f"- {tool.type}: {tool.file}")
            if tool.scripts:
                parts.append(f"  Scripts: {', '.join(tool.scripts[:QUICKSTART_SCRIPT_SAMPLE])}")
    if detection.entrypoints:
        parts.extend(["", "Entrypoints:"])
        parts.extend(f"- {entry.description}: {entry.command}" for entry in detection.entrypoints)
    return "\n".join(parts)


__all__ = [
    "Orchestrator",
    "SummaryOptions",
    "build_architecture_context",
    "build_module_context",
    "build_quickstart_context",
    "parse_bullets",
]

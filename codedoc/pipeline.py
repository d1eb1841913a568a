"""End-to-end scan, detect and summarise entry point."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .cancellation import CancellationToken
from .config import CodedocConfig, load_config
from .detector import Detector
from .errors import ConfigurationError
from .llm import Generator, NoOpGenerator, RateLimiter, build_generator
from .logging import configure_logging, get_logger
from .models import DetectionResult, ScanSet, SummaryReport
from .orchestrator import Orchestrator, SummaryOptions
from .repo_scanner import RepoScanner, ignore_patterns_for
from .stores import SummaryCache

logger = get_logger("pipeline")


@dataclass
class PipelineResult:
    """Everything a renderer needs to produce the final report."""

    scan: ScanSet
    detection: DetectionResult
    report: SummaryReport


def generate_summaries(
    root: str | Path,
    config: CodedocConfig | None = None,
    *,
    generator: Generator | None = None,
    detector: Detector | None = None,
    cancel: Optional[CancellationToken] = None,
    verbose: bool | None = None,
    log_file: str | Path | None = None,
) -> PipelineResult:
    """Scan ``root`` and produce summaries for it.

    Configuration errors and missing credentials are raised before any file is
    read. A supplied ``generator`` replaces provider selection, except in dry
    runs, which always use the placeholder generator. Passing ``verbose`` or
    ``log_file`` installs the codedoc log handlers for this run.
    """
    if verbose is not None or log_file is not None:
        configure_logging(verbose=bool(verbose), log_file=log_file)

    repo_path = Path(root).expanduser().resolve()
    if not repo_path.is_dir():
        raise ConfigurationError(f"Repository root {repo_path} is not a directory")
    config = (config or load_config(repo_path)).validate()

    if config.dry_run:
        generator = NoOpGenerator()
    elif generator is None:
        generator = build_generator(config.llm)
    logger.info("Using %s for %s", type(generator).__name__, repo_path)

    scan = RepoScanner().scan(
        str(repo_path),
        config.max_files,
        include_tests=config.include_tests,
        languages=config.languages,
        extra_ignores=ignore_patterns_for(config.cache_path, repo_path, config.exclude_paths),
        cancel=cancel,
    )
    detection = (detector or Detector()).detect(scan)

    orchestrator = Orchestrator(
        generator,
        cache=SummaryCache(config.cache_path, force=config.cache.force),
        rate_limiter=RateLimiter(config.llm.max_qps),
        options=SummaryOptions(
            max_lines_per_file=config.max_lines_per_file,
            redact_secrets=config.redact_secrets,
        ),
    )
    report = orchestrator.run(scan, detection, cancel=cancel)
    if scan.cancelled:
        report.cancelled = True
    return PipelineResult(scan=scan, detection=detection, report=report)


__all__ = ["PipelineResult", "generate_summaries"]

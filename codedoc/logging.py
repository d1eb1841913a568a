"""Logger hierarchy shared by codedoc components."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List

ROOT_LOGGER = "codedoc"
CONSOLE_FORMAT = "[codedoc] %(levelname)s %(message)s"
FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def get_logger(component: str | None = None) -> logging.Logger:
    """Return ``codedoc.<component>``, or the hierarchy root when no component is named."""
    return logging.getLogger(f"{ROOT_LOGGER}.{component}" if component else ROOT_LOGGER)


def configure_logging(
    *, verbose: bool = False, log_file: str | Path | None = None
) -> logging.Logger:
    """Route codedoc records to stderr and, when given, to ``log_file``.

    Handlers from an earlier call are closed and replaced, so a process that
    runs the pipeline repeatedly emits each record once.
    """
    level = logging.DEBUG if verbose else logging.INFO
    root = get_logger()
    root.setLevel(level)
    root.propagate = False
    _replace_handlers(root, _build_handlers(level, log_file))
    return root


def _build_handlers(level: int, log_file: str | Path | None) -> List[logging.Handler]:
    console = logging.StreamHandler()
    console.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    handlers: List[logging.Handler] = [console]
    if log_file is not None:
        path = Path(log_file).expanduser()
        path.parent.mkdir(parents=True, exist_ok=True)
        sink = logging.FileHandler(path, encoding="utf-8")
        sink.setFormatter(logging.Formatter(FILE_FORMAT))
        handlers.append(sink)
    for handler in handlers:
        handler.setLevel(level)
    return handlers


def _replace_handlers(logger: logging.Logger, handlers: List[logging.Handler]) -> None:
    for existing in list(logger.handlers):
        logger.removeHandler(existing)
        existing.close()
    for handler in handlers:
        logger.addHandler(handler)


__all__ = ["configure_logging", "get_logger"]

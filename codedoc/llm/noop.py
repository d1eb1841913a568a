"""Placeholder generator used in no-generation (dry run) mode."""

from __future__ import annotations

from ..failsafe import placeholder_summary
from ..models import GenerationResult, SummarizeRequest
from .base import Generator


class NoOpGenerator(Generator):
    """Returns a labelled placeholder per kind; no network access, no cache writes."""

    cacheable = False
    outbound = False

    def summarize(self, request: SummarizeRequest) -> GenerationResult:
        return GenerationResult(
            text=placeholder_summary(request.kind),
            cached=False,
            tokens=0,
            placeholder=True,
        )


__all__ = ["NoOpGenerator"]

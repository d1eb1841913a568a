"""Exception hierarchy shared by the scan, budget and generation stages."""

from __future__ import annotations


class CodedocError(RuntimeError):
    """Base class for all codedoc failures."""


class ConfigurationError(CodedocError):
    """Raised for invalid roots, budgets or configuration files before scanning starts."""


class ScanReadError(CodedocError):
    """Raised when a file vanished or could not be read during a scan or content read."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"Unable to read {path}: {reason}")
        self.path = path
        self.reason = reason


class GenerationError(CodedocError):
    """Raised by generators when a summary could not be produced."""

    transient = False


class TransientGenerationError(GenerationError):
    """Timeouts, rate limiting and server-side failures."""

    transient = True


class CredentialsError(GenerationError):
    """Raised when a generator is constructed without usable credentials."""


__all__ = [
    "CodedocError",
    "ConfigurationError",
    "CredentialsError",
    "GenerationError",
    "ScanReadError",
    "TransientGenerationError",
]

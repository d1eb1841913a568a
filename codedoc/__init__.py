"""Repository scanning and budgeted summarisation pipeline."""

from .errors import (
    CodedocError,
    ConfigurationError,
    CredentialsError,
    GenerationError,
    ScanReadError,
    TransientGenerationError,
)
from .models import DetectionResult, FileRecord, ScanSet, SummaryReport
from .pipeline import PipelineResult, generate_summaries

__version__ = "0.1.0"

__all__ = [
    "CodedocError",
    "ConfigurationError",
    "CredentialsError",
    "DetectionResult",
    "FileRecord",
    "GenerationError",
    "PipelineResult",
    "ScanReadError",
    "ScanSet",
    "SummaryReport",
    "TransientGenerationError",
    "generate_summaries",
]

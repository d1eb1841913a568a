"""Core data models shared across codedoc components."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


@dataclass(frozen=True)
class FileRecord:
    """Metadata for a single scanned file."""

    path: str
    relative_path: str
    size: int
    lines: int
    language: str
    is_test: bool
    hash: str


@dataclass
class LanguageStat:
    """Aggregate counts for one language tag."""

    file_count: int = 0
    lines: int = 0
    percentage: float = 0.0


@dataclass
class ScanSet:
    """Ordered result of a repository walk."""

    root: str
    name: str
    files: List[FileRecord] = field(default_factory=list)
    total_lines: int = 0
    language_stats: Dict[str, LanguageStat] = field(default_factory=dict)
    truncated: bool = False
    cancelled: bool = False

    @property
    def total_files(self) -> int:
        return len(self.files)


@dataclass(frozen=True)
class ContextSlice:
    """Bounded excerpt of a file handed to the generation stage."""

    path: str
    language: str
    total_lines: int
    size: int
    lines: Tuple[str, ...]
    sampled: bool = False

    def render(self) -> str:
        header = (
            f"File: {self.path}\n"
            f"Language: {self.language}\n"
            f"Total lines: {self.total_lines}\n"
            f"Size: {self.size} bytes\n"
        )
        return header + "\nContent sample:\n" + "\n".join(self.lines)


class SummaryKind(str, Enum):
    """Kinds of summaries requested from a generator."""

    ARCHITECTURE = "architecture"
    MODULE = "module"
    FILE = "file"
    FUNCTION = "function"
    QUICKSTART = "quickstart"


@dataclass(frozen=True)
class Constraints:
    """Numeric output bounds passed to a generator."""

    max_words: Optional[int] = None
    max_bullets: Optional[int] = None


@dataclass(frozen=True)
class SummarizeRequest:
    """A single generation unit."""

    kind: SummaryKind
    context: str
    constraints: Constraints = field(default_factory=Constraints)
    cache_key: Optional[str] = None


@dataclass
class GenerationResult:
    """Outcome of one generation unit; never null."""

    text: str
    cached: bool = False
    tokens: int = 0
    placeholder: bool = False


@dataclass
class CacheEntry:
    """Persisted generation result."""

    key: str
    summary: str
    reused: bool = False
    tokens: int = 0


@dataclass
class Entrypoint:
    """Executable entrypoint discovered by the detector."""

    type: str
    path: str
    command: str
    description: str


@dataclass
class Framework:
    """Framework usage inferred from file content."""

    name: str
    language: str
    files: List[str] = field(default_factory=list)


@dataclass
class BuildTool:
    """Build tooling manifest and the scripts or targets it exposes."""

    type: str
    file: str
    scripts: List[str] = field(default_factory=list)


@dataclass
class Endpoint:
    """HTTP route reported by an endpoint extractor."""

    method: str
    path: str
    handler: str
    file: str


@dataclass
class DataModel:
    """Data model reported by a model extractor."""

    name: str
    fields: List[str]
    file: str


@dataclass
class DetectionResult:
    """Descriptive facts about the repository, folded into prompt contexts."""

    entrypoints: List[Entrypoint] = field(default_factory=list)
    frameworks: List[Framework] = field(default_factory=list)
    build_tools: List[BuildTool] = field(default_factory=list)
    endpoints: List[Endpoint] = field(default_factory=list)
    models: List[DataModel] = field(default_factory=list)


@dataclass
class FileSummary:
    """Role summary and key declarations for a top file."""

    path: str
    summary: str
    functions: List[str] = field(default_factory=list)
    cached: bool = False
    tokens: int = 0


@dataclass
class SummaryReport:
    """Output record consumed by the report renderer."""

    architecture_summary: str = ""
    module_summaries: Dict[str, str] = field(default_factory=dict)
    file_summaries: Dict[str, FileSummary] = field(default_factory=dict)
    quickstart_steps: List[str] = field(default_factory=list)
    generation_calls: int = 0
    cache_hits: int = 0
    cancelled: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

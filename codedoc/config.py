"""Configuration loading for codedoc (.codedoc.yml)."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

from .errors import ConfigurationError

CONFIG_FILENAME = ".codedoc.yml"
DEFAULT_CACHE_DIR = ".codedoc-cache"

_PROVIDERS = {"anthropic", "local", "none"}


@dataclass
class LLMConfig:
    """Generation provider settings."""

    provider: str = "anthropic"
    model: Optional[str] = None
    base_url: Optional[str] = None
    api_key: Optional[str] = None
    max_qps: float = 2.0
    request_timeout: float = 60.0
    max_tokens: int = 1000
    temperature: Optional[float] = 0.2


@dataclass
class CacheConfig:
    """Summary cache location and bypass flag."""

    dir: str = DEFAULT_CACHE_DIR
    force: bool = False


@dataclass
class CodedocConfig:
    """Represents the settings defined in .codedoc.yml."""

    root: Path
    max_files: int = 200
    max_lines_per_file: int = 1000
    include_tests: bool = False
    languages: List[str] = field(default_factory=list)
    redact_secrets: bool = True
    dry_run: bool = False
    exclude_paths: List[str] = field(default_factory=list)
    cache: CacheConfig = field(default_factory=CacheConfig)
    llm: LLMConfig = field(default_factory=LLMConfig)

    @property
    def cache_path(self) -> Path:
        path = Path(self.cache.dir).expanduser()
        if not path.is_absolute():
            path = self.root / path
        return path

    def validate(self) -> "CodedocConfig":
        """Raise ConfigurationError for budgets that cannot drive a run."""
        if self.max_files <= 0:
            raise ConfigurationError("max_files must be positive")
        if self.max_lines_per_file <= 0:
            raise ConfigurationError("max_lines_per_file must be positive")
        if self.llm.max_qps <= 0:
            raise ConfigurationError("llm.max_qps must be positive")
        if self.llm.request_timeout <= 0:
            raise ConfigurationError("llm.request_timeout must be positive")
        if self.llm.max_tokens <= 0:
            raise ConfigurationError("llm.max_tokens must be positive")
        if self.llm.provider not in _PROVIDERS:
            choices = ", ".join(sorted(_PROVIDERS))
            raise ConfigurationError(
                f"Unknown llm.provider '{self.llm.provider}' (expected one of: {choices})"
            )
        return self


def load_config(config_path: Path) -> CodedocConfig:
    """Load configuration from disk, falling back to defaults when absent."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return _apply_env_overrides(CodedocConfig(root=root))

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigurationError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    config = CodedocConfig(root=root)

    max_files = _as_int(data.get("max_files"))
    if max_files is not None:
        config.max_files = max_files
    max_lines = _as_int(data.get("max_lines_per_file"))
    if max_lines is not None:
        config.max_lines_per_file = max_lines
    include_tests = _as_bool(data.get("include_tests"))
    if include_tests is not None:
        config.include_tests = include_tests
    redact = _as_bool(data.get("redact_secrets"))
    if redact is not None:
        config.redact_secrets = redact
    dry_run = _as_bool(data.get("dry_run"))
    if dry_run is not None:
        config.dry_run = dry_run
    config.languages = _as_str_list(data.get("languages"))
    config.exclude_paths = _as_str_list(data.get("exclude_paths"))

    cache_data = _as_dict(data.get("cache"))
    if cache_data:
        cache_dir = _as_str(cache_data.get("dir"))
        if cache_dir:
            config.cache.dir = cache_dir
        config.cache.force = _as_bool(cache_data.get("force")) or False

    llm_data = _as_dict(data.get("llm"))
    if llm_data:
        llm = config.llm
        provider = _as_str(llm_data.get("provider"))
        if provider:
            llm.provider = provider.strip().lower()
        llm.model = _as_str(llm_data.get("model"))
        llm.base_url = _as_str(llm_data.get("base_url"))
        llm.api_key = _as_str(llm_data.get("api_key"))
        max_qps = _as_float(llm_data.get("max_qps"))
        if max_qps is not None:
            llm.max_qps = max_qps
        timeout = _as_float(llm_data.get("request_timeout"))
        if timeout is not None:
            llm.request_timeout = timeout
        max_tokens = _as_int(llm_data.get("max_tokens"))
        if max_tokens is not None:
            llm.max_tokens = max_tokens
        if "temperature" in llm_data:
            llm.temperature = _as_float(llm_data.get("temperature"))

    return _apply_env_overrides(config)


def _apply_env_overrides(config: CodedocConfig) -> CodedocConfig:
    model = os.getenv("CODEDOC_LLM_MODEL")
    if model:
        config.llm.model = model
    base_url = os.getenv("CODEDOC_LLM_BASE_URL")
    if base_url:
        config.llm.base_url = base_url
    provider = os.getenv("CODEDOC_LLM_PROVIDER")
    if provider:
        config.llm.provider = provider.strip().lower()
    return config


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    if config_path.name != CONFIG_FILENAME:
        return (config_path.parent / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigurationError(f"Failed to read {path.name}: {exc}") from exc
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded or {}


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float, bool)) else None


def _as_float(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [part.strip() for part in value.split(",") if part.strip()]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float, bool))]
    return []


__all__ = [
    "CONFIG_FILENAME",
    "DEFAULT_CACHE_DIR",
    "CacheConfig",
    "CodedocConfig",
    "LLMConfig",
    "load_config",
]

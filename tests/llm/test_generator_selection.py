"""Tests for generator selection and the placeholder generator."""

from __future__ import annotations

import pytest

from codedoc.config import LLMConfig
from codedoc.errors import CredentialsError
from codedoc.llm import (
    AnthropicGenerator,
    LocalRunnerGenerator,
    NoOpGenerator,
    build_generator,
    estimate_tokens,
)
from codedoc.models import SummarizeRequest, SummaryKind


@pytest.mark.parametrize("kind", list(SummaryKind))
def test_noop_returns_labelled_placeholder(kind: SummaryKind) -> None:
    result = NoOpGenerator().summarize(SummarizeRequest(kind=kind, context="ignored"))

    assert result.text == f"[{kind.value} summary placeholder - dry run mode]"
    assert result.placeholder is True
    assert result.tokens == 0


def test_noop_opts_out_of_cache_and_pacing() -> None:
    generator = NoOpGenerator()

    assert generator.cacheable is False
    assert generator.outbound is False


def test_dry_run_never_requires_credentials(monkeypatch) -> None:
    monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
    monkeypatch.delenv("CODEDOC_LLM_API_KEY", raising=False)

    assert isinstance(build_generator(LLMConfig(), dry_run=True), NoOpGenerator)
    assert isinstance(build_generator(LLMConfig(provider="none")), NoOpGenerator)
    with pytest.raises(CredentialsError):
        build_generator(LLMConfig())


def test_build_generator_selects_configured_provider() -> None:
    hosted = build_generator(LLMConfig(api_key="k", model="claude-x", max_tokens=500))
    local = build_generator(
        LLMConfig(provider="local", model="llama3", base_url="http://localhost:11434/v1")
    )

    assert isinstance(hosted, AnthropicGenerator)
    assert hosted.model == "claude-x"
    assert hosted.max_tokens == 500
    assert isinstance(local, LocalRunnerGenerator)
    assert local.model == "llama3"


def test_estimate_tokens_uses_four_characters_per_token() -> None:
    assert estimate_tokens("") == 0
    assert estimate_tokens("abcdefgh") == 2

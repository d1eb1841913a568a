"""Tests for the Anthropic messages generator."""

from __future__ import annotations

import pytest

from codedoc.errors import CredentialsError, GenerationError
from codedoc.llm.anthropic import AnthropicGenerator
from codedoc.llm.base import HTTPRequest
from codedoc.models import Constraints, SummarizeRequest, SummaryKind


@pytest.fixture(autouse=True)
def _clear_keys(monkeypatch) -> None:
    monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
    monkeypatch.delenv("CODEDOC_LLM_API_KEY", raising=False)


def test_missing_key_fails_at_construction() -> None:
    with pytest.raises(CredentialsError, match="ANTHROPIC_API_KEY"):
        AnthropicGenerator()


def test_key_is_read_from_environment(monkeypatch) -> None:
    monkeypatch.setenv("ANTHROPIC_API_KEY", "env-key")

    assert AnthropicGenerator().api_key == "env-key"


def test_summarize_posts_messages_request() -> None:
    captured: list[HTTPRequest] = []

    def transport(request: HTTPRequest):
        captured.append(request)
        return {"content": [{"type": "text", "text": "- parse() - reads input\n"}]}

    generator = AnthropicGenerator("secret", transport=transport)
    result = generator.summarize(
        SummarizeRequest(
            kind=SummaryKind.FUNCTION,
            context="File: app.py",
            constraints=Constraints(max_bullets=8),
            cache_key="abc-functions",
        )
    )

    assert result.text == "- parse() - reads input"
    assert result.cached is False
    request = captured[0]
    assert request.url == "https://api.anthropic.com/v1/messages"
    assert request.headers == {"x-api-key": "secret", "anthropic-version": "2023-06-01"}
    assert request.timeout == 60.0
    assert request.payload["model"] == "claude-3-haiku-20240307"
    assert request.payload["max_tokens"] == 1000
    assert request.payload["temperature"] == 0.2
    assert isinstance(request.payload["system"], str)
    message = request.payload["messages"][0]
    assert message["role"] == "user"
    assert "at most 8 bullets" in message["content"]
    assert "File: app.py" in message["content"]


def test_custom_base_url_and_model() -> None:
    urls = []

    def transport(request: HTTPRequest):
        urls.append((request.url, request.payload["model"]))
        return {"content": [{"text": "ok"}]}

    generator = AnthropicGenerator(
        "secret", model="claude-other", base_url="https://proxy.local/", transport=transport
    )
    generator.summarize(SummarizeRequest(kind=SummaryKind.ARCHITECTURE, context="Repository: x"))

    assert urls == [("https://proxy.local/v1/messages", "claude-other")]


def test_empty_content_is_a_generation_error() -> None:
    generator = AnthropicGenerator("secret", transport=lambda request: {"content": []})

    with pytest.raises(GenerationError):
        generator.summarize(SummarizeRequest(kind=SummaryKind.MODULE, context="Module: x"))

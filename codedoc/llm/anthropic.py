"""Generator backed by the Anthropic messages API."""

from __future__ import annotations

from typing import Optional

from ..errors import CredentialsError, GenerationError
from ..models import GenerationResult, SummarizeRequest
from ..prompting import PromptBuilder
from .base import (
    Generator,
    HTTPRequest,
    Transport,
    estimate_tokens,
    first_env_value,
    urllib_transport,
)


class AnthropicGenerator(Generator):
    """Sends one messages request per summary unit."""

    DEFAULT_MODEL = "claude-3-haiku-20240307"
    DEFAULT_BASE_URL = "https://api.anthropic.com"
    API_VERSION = "2023-06-01"
    ENV_API_KEY_KEYS = ("ANTHROPIC_API_KEY", "CODEDOC_LLM_API_KEY")

    def __init__(
        self,
        api_key: str | None = None,
        *,
        model: str | None = None,
        base_url: str | None = None,
        max_tokens: int = 1000,
        temperature: Optional[float] = 0.2,
        request_timeout: float = 60.0,
        prompt_builder: PromptBuilder | None = None,
        transport: Transport | None = None,
    ) -> None:
        resolved_key = api_key or first_env_value(self.ENV_API_KEY_KEYS)
        if not resolved_key:
            raise CredentialsError("ANTHROPIC_API_KEY not set")
        self.api_key = resolved_key
        self.model = model or self.DEFAULT_MODEL
        self.base_url = (base_url or self.DEFAULT_BASE_URL).rstrip("/")
        self.max_tokens = max_tokens
        self.temperature = temperature
        self.request_timeout = request_timeout
        self.prompt_builder = prompt_builder or PromptBuilder()
        self._transport = transport or urllib_transport

    def summarize(self, request: SummarizeRequest) -> GenerationResult:
        system, user = self.prompt_builder.build(request)
        payload: dict[str, object] = {
            "model": self.model,
            "system": system,
            "messages": [{"role": "user", "content": user}],
            "max_tokens": self.max_tokens,
        }
        if self.temperature is not None:
            payload["temperature"] = self.temperature

        response = self._transport(
            HTTPRequest(
                url=f"{self.base_url}/v1/messages",
                payload=payload,
                headers={
                    "x-api-key": self.api_key,
                    "anthropic-version": self.API_VERSION,
                },
                timeout=self.request_timeout,
            )
        )
        text = _extract_text(response)
        if not text:
            raise GenerationError("Generation service returned an empty response")
        return GenerationResult(
            text=text,
            cached=False,
            tokens=estimate_tokens(system + user + text),
        )


def _extract_text(payload: object) -> str:
    if not isinstance(payload, dict):
        return ""
    content = payload.get("content")
    if not isinstance(content, list):
        return ""
    for block in content:
        if isinstance(block, dict) and isinstance(block.get("text"), str):
            return block["text"].strip()
    return ""


__all__ = ["AnthropicGenerator"]

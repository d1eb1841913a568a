"""Generator for OpenAI-compatible local model runners (Model Runner / Ollama)."""

from __future__ import annotations

import ipaddress
from typing import Optional
from urllib.parse import urlparse

from ..errors import ConfigurationError, GenerationError
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


class LocalRunnerGenerator(Generator):
    """Executes prompts against a chat-completions endpoint on the local machine."""

    DEFAULT_MODEL = "ai/smollm2:360M-Q4_K_M"
    DEFAULT_BASE_URL = "http://localhost:12434/engines/v1"
    ENV_MODEL_KEYS = ("CODEDOC_LLM_MODEL", "MODEL_RUNNER_MODEL", "OPENAI_MODEL")
    ENV_BASE_URL_KEYS = ("CODEDOC_LLM_BASE_URL", "MODEL_RUNNER_BASE_URL", "OPENAI_BASE_URL")
    ENV_API_KEY_KEYS = ("CODEDOC_LLM_API_KEY", "MODEL_RUNNER_API_KEY", "OPENAI_API_KEY")

    def __init__(
        self,
        model: str | None = None,
        *,
        base_url: str | None = None,
        api_key: str | None = None,
        temperature: Optional[float] = 0.2,
        max_tokens: Optional[int] = None,
        request_timeout: float = 60.0,
        prompt_builder: PromptBuilder | None = None,
        transport: Transport | None = None,
    ) -> None:
        self.model = model or first_env_value(self.ENV_MODEL_KEYS) or self.DEFAULT_MODEL
        self.base_url = self._ensure_local_url(
            base_url or first_env_value(self.ENV_BASE_URL_KEYS) or self.DEFAULT_BASE_URL
        )
        self.api_key = api_key or first_env_value(self.ENV_API_KEY_KEYS)
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.request_timeout = request_timeout
        self.prompt_builder = prompt_builder or PromptBuilder()
        self._transport = transport or urllib_transport

    def summarize(self, request: SummarizeRequest) -> GenerationResult:
        system, user = self.prompt_builder.build(request)
        payload: dict[str, object] = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system},
                {"role": "user", "content": user},
            ],
        }
        if self.temperature is not None:
            payload["temperature"] = self.temperature
        if self.max_tokens is not None:
            payload["max_tokens"] = self.max_tokens

        headers = {}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"

        response = self._transport(
            HTTPRequest(
                url=f"{self.base_url}/chat/completions",
                payload=payload,
                headers=headers,
                timeout=self.request_timeout,
            )
        )
        content = _extract_content(response)
        if not content:
            raise GenerationError("Local runner returned an empty response")
        return GenerationResult(
            text=content,
            cached=False,
            tokens=estimate_tokens(system + user + content),
        )

    @classmethod
    def _ensure_local_url(cls, url: str) -> str:
        normalized = url.rstrip("/")
        host = urlparse(normalized).hostname
        if host is None or cls._is_local_host(host):
            return normalized
        raise ConfigurationError(
            f"Remote base_url '{url}' is not permitted for the local runner; use the anthropic provider."
        )

    @staticmethod
    def _is_local_host(host: str) -> bool:
        lowered = host.lower()
        if lowered in {"localhost", "0.0.0.0", "model-runner.docker.internal"}:
            return True
        if lowered.endswith(".local") or lowered.endswith(".localdomain"):
            return True
        try:
            return ipaddress.ip_address(lowered).is_loopback
        except ValueError:
            return False


def _extract_content(payload: object) -> str:
    if not isinstance(payload, dict):
        return ""
    choices = payload.get("choices")
    if not isinstance(choices, list) or not choices:
        return ""
    first = choices[0]
    if not isinstance(first, dict):
        return ""
    message = first.get("message")
    if isinstance(message, dict) and isinstance(message.get("content"), str):
        return message["content"].strip()
    text = first.get("text")
    if isinstance(text, str):
        return text.strip()
    return ""


__all__ = ["LocalRunnerGenerator"]

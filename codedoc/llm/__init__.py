"""Generator variants and startup selection."""

from __future__ import annotations

from ..config import LLMConfig
from .anthropic import AnthropicGenerator
from .base import Generator, HTTPRequest, estimate_tokens, urllib_transport
from .local import LocalRunnerGenerator
from .noop import NoOpGenerator
from .rate_limiter import RateLimiter


def build_generator(config: LLMConfig, *, dry_run: bool = False) -> Generator:
    """Select the generator variant once, before any stage runs.

    Raises CredentialsError when the hosted provider has no API key; dry runs
    never construct a networked generator.
    """
    if dry_run or config.provider == "none":
        return NoOpGenerator()
    if config.provider == "local":
        return LocalRunnerGenerator(
            config.model,
            base_url=config.base_url,
            api_key=config.api_key,
            temperature=config.temperature,
            max_tokens=config.max_tokens,
            request_timeout=config.request_timeout,
        )
    return AnthropicGenerator(
        config.api_key,
        model=config.model,
        base_url=config.base_url,
        max_tokens=config.max_tokens,
        temperature=config.temperature,
        request_timeout=config.request_timeout,
    )


__all__ = [
    "AnthropicGenerator",
    "Generator",
    "HTTPRequest",
    "LocalRunnerGenerator",
    "NoOpGenerator",
    "RateLimiter",
    "build_generator",
    "estimate_tokens",
    "urllib_transport",
]

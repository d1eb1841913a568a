"""Prompt rendering for generation requests."""

from .builder import SYSTEM_PROMPT, PromptBuilder

__all__ = ["PromptBuilder", "SYSTEM_PROMPT"]

"""Builds generation prompts from per-kind Jinja2 templates."""

from __future__ import annotations

from pathlib import Path
from typing import Tuple

from jinja2 import Environment, FileSystemLoader, TemplateNotFound

from ..models import SummarizeRequest

SYSTEM_PROMPT = (
    "You are a senior software engineer writing concise internal documentation. "
    "Stay grounded in the provided context and never invent files, commands or tools."
)

_DEFAULT_TEMPLATE = "default.j2"


class PromptBuilder:
    """Renders the system and user prompt for a summarize request."""

    def __init__(self, templates_dir: Path | None = None, *, system_prompt: str = SYSTEM_PROMPT) -> None:
        default_dir = Path(__file__).with_name("templates")
        directories = [str(templates_dir)] if templates_dir else []
        if str(default_dir) not in directories:
            directories.append(str(default_dir))
        self.system_prompt = system_prompt
        self._env = Environment(
            loader=FileSystemLoader(directories),
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=False,
        )

    def build(self, request: SummarizeRequest) -> Tuple[str, str]:
        """Return ``(system, user)`` prompts for ``request``."""
        try:
            template = self._env.get_template(f"{request.kind.value}.j2")
        except TemplateNotFound:
            template = self._env.get_template(_DEFAULT_TEMPLATE)
        user = template.render(
            context=request.context,
            max_words=request.constraints.max_words,
            max_bullets=request.constraints.max_bullets,
        )
        return self.system_prompt, user.strip()


__all__ = ["PromptBuilder", "SYSTEM_PROMPT"]

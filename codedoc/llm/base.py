"""Generator abstraction and the shared JSON-over-HTTP transport."""

from __future__ import annotations

import http.client
import json
import os
import socket
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Callable, Dict, Mapping, Sequence
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from ..errors import GenerationError, TransientGenerationError
from ..models import GenerationResult, SummarizeRequest

_TRANSIENT_STATUS_CODES = {408, 409, 425, 429, 500, 502, 503, 504, 529}


class Generator(ABC):
    """Capability to turn a summarize request into text.

    ``cacheable`` tells the orchestrator whether results should be read from
    and written to the summary cache; ``outbound`` whether calls reach a
    service and must be paced. Placeholder generators opt out of both.
    """

    cacheable: bool = True
    outbound: bool = True

    @abstractmethod
    def summarize(self, request: SummarizeRequest) -> GenerationResult:
        """Return the generated summary or raise GenerationError."""


@dataclass
class HTTPRequest:
    """JSON POST issued by a hosted or local generator."""

    url: str
    payload: Dict[str, object]
    headers: Dict[str, str] = field(default_factory=dict)
    timeout: float = 60.0


Transport = Callable[[HTTPRequest], Mapping[str, object]]


def urllib_transport(request: HTTPRequest) -> Mapping[str, object]:
    """POST ``request.payload`` as JSON and decode the JSON response."""
    data = json.dumps(request.payload).encode("utf-8")
    headers = {"Content-Type": "application/json", **request.headers}
    http_request = Request(request.url, data=data, headers=headers, method="POST")

    try:
        with urlopen(http_request, timeout=request.timeout) as response:  # type: ignore[arg-type]
            raw = response.read()
    except HTTPError as exc:
        detail = exc.read().decode("utf-8", errors="ignore") if hasattr(exc, "read") else ""
        message = detail.strip() or str(exc.reason)
        if exc.code == 429:
            raise TransientGenerationError("Generation service rate limited the request") from exc
        if exc.code in _TRANSIENT_STATUS_CODES:
            raise TransientGenerationError(
                f"Generation service failed with status {exc.code}: {message}"
            ) from exc
        if exc.code in {401, 403}:
            raise GenerationError(f"Generation service rejected credentials ({exc.code})") from exc
        raise GenerationError(f"Generation service failed with status {exc.code}: {message}") from exc
    except (URLError, TimeoutError, socket.timeout) as exc:
        reason = getattr(exc, "reason", exc)
        raise TransientGenerationError(f"Generation service unreachable: {reason}") from exc
    except (http.client.HTTPException, OSError) as exc:
        raise TransientGenerationError(f"Generation service connection failed: {exc!r}") from exc

    try:
        payload = json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise GenerationError("Generation service returned invalid JSON") from exc
    if not isinstance(payload, dict):
        raise GenerationError("Generation service returned an unexpected payload")
    return payload


def estimate_tokens(text: str) -> int:
    """Rough token estimate: four characters per token."""
    return len(text) // 4


def first_env_value(keys: Sequence[str]) -> str | None:
    """Return the first non-empty environment variable among ``keys``."""
    for key in keys:
        value = os.getenv(key)
        if value:
            return value
    return None


__all__ = [
    "Generator",
    "HTTPRequest",
    "Transport",
    "estimate_tokens",
    "first_env_value",
    "urllib_transport",
]

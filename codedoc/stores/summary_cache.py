"""Content-addressed persistent cache for generation results."""

from __future__ import annotations

import hashlib
import json
import re
from datetime import UTC, datetime
from pathlib import Path
from typing import Optional

from ..logging import get_logger
from ..models import CacheEntry, SummarizeRequest

_CACHE_VERSION = 1
_UNSAFE_KEY_CHARS = re.compile(r"[^A-Za-z0-9._-]")

logger = get_logger("cache")


def safe_key(key: str) -> str:
    """Map an arbitrary key onto a filesystem-safe file stem.

    Keys that are already safe are returned unchanged. Any other key gets a
    short digest of its original text appended, so distinct keys never share
    a file.
    """
    cleaned = _UNSAFE_KEY_CHARS.sub("_", key.strip()).lstrip(".")
    if not cleaned:
        raise ValueError("cache key must contain at least one safe character")
    if cleaned != key:
        digest = hashlib.sha256(key.encode("utf-8")).hexdigest()[:12]
        cleaned = f"{cleaned}-{digest}"
    return cleaned


def derive_cache_key(request: SummarizeRequest) -> str:
    """Return the explicit key, or a digest of the request's kind, context and bounds."""
    if request.cache_key:
        return safe_key(request.cache_key)
    structure = {
        "kind": request.kind.value,
        "context_sha256": hashlib.sha256(request.context.encode("utf-8")).hexdigest(),
        "max_words": request.constraints.max_words,
        "max_bullets": request.constraints.max_bullets,
    }
    canonical = json.dumps(structure, sort_keys=True, separators=(",", ":"))
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


class SummaryCache:
    """Stores one JSON document per key under ``root``.

    A forced cache never reports hits but still records fresh results. Entries
    that cannot be read or parsed are treated as misses. The directory is not
    locked, so only one run per cache root should be active at a time.
    """

    def __init__(self, root: Path, *, force: bool = False) -> None:
        self.root = Path(root)
        self.force = force

    def path_for(self, key: str) -> Path:
        return self.root / f"{safe_key(key)}.json"

    def get(self, key: str) -> Optional[CacheEntry]:
        if self.force:
            return None
        path = self.path_for(key)
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
            logger.debug("Ignoring unreadable cache entry %s: %s", path.name, exc)
            return None
        return _entry_from_payload(data, safe_key(key))

    def put(self, key: str, entry: CacheEntry, *, kind: str | None = None) -> None:
        """Persist ``entry``; raises OSError when the directory or file cannot be written."""
        payload = {
            "version": _CACHE_VERSION,
            "key": safe_key(key),
            "summary": entry.summary,
            "tokens": entry.tokens,
            "kind": kind,
            "updated_at": datetime.now(UTC).isoformat().replace("+00:00", "Z"),
        }
        self.root.mkdir(parents=True, exist_ok=True)
        self.path_for(key).write_text(
            json.dumps(payload, indent=2, sort_keys=True), encoding="utf-8"
        )


def _entry_from_payload(payload: object, key: str) -> Optional[CacheEntry]:
    if not isinstance(payload, dict) or payload.get("version") != _CACHE_VERSION:
        return None
    if payload.get("key") != key:
        return None
    summary = payload.get("summary")
    tokens = payload.get("tokens", 0)
    if not isinstance(summary, str):
        return None
    if not isinstance(tokens, int) or isinstance(tokens, bool):
        tokens = 0
    return CacheEntry(key=key, summary=summary, reused=True, tokens=tokens)


__all__ = ["SummaryCache", "derive_cache_key", "safe_key"]

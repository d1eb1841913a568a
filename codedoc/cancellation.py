"""Cooperative cancellation for scans and generation runs."""

from __future__ import annotations

import threading
import time
from typing import Callable, Optional


class CancellationToken:
    """Combines a manual cancel flag with an optional monotonic deadline.

    The pipeline polls :attr:`cancelled` before each traversal step and each
    outbound generation call; whatever was accumulated before that point is
    returned as a valid partial result.
    """

    def __init__(
        self,
        deadline: Optional[float] = None,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._deadline = deadline
        self._clock = clock
        self._event = threading.Event()

    @classmethod
    def with_timeout(
        cls, seconds: float, *, clock: Callable[[], float] = time.monotonic
    ) -> "CancellationToken":
        return cls(deadline=clock() + seconds, clock=clock)

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        if self._event.is_set():
            return True
        if self._deadline is not None and self._clock() >= self._deadline:
            self._event.set()
            return True
        return False


def is_cancelled(token: Optional[CancellationToken]) -> bool:
    return token is not None and token.cancelled


__all__ = ["CancellationToken", "is_cancelled"]

"""Minimum-interval pacing for outbound generation calls."""

from __future__ import annotations

import time
from typing import Callable, Optional

from ..errors import ConfigurationError
from ..logging import get_logger

logger = get_logger("llm.rate_limiter")


class RateLimiter:
    """Blocks until ``1 / max_qps`` seconds have passed since the previous call."""

    def __init__(
        self,
        max_qps: float,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if max_qps <= 0:
            raise ConfigurationError("max_qps must be positive")
        self.min_interval = 1.0 / max_qps
        self._clock = clock
        self._sleep = sleep
        self._last_call: Optional[float] = None

    def wait(self) -> float:
        """Sleep as needed and return the number of seconds slept."""
        slept = 0.0
        if self._last_call is not None:
            elapsed = self._clock() - self._last_call
            if elapsed < self.min_interval:
                slept = self.min_interval - elapsed
                logger.debug("Rate limiting: sleeping %.3fs", slept)
                self._sleep(slept)
        self._last_call = self._clock()
        return slept


__all__ = ["RateLimiter"]

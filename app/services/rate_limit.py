from __future__ import annotations

import time
from collections import defaultdict, deque
from dataclasses import dataclass
from typing import Callable, Deque, Dict


@dataclass
class RateLimitResult:
    allowed: bool
    retry_after: float


class RateLimiter:
    """Sliding-window limiter keyed by client and action."""

    def __init__(
        self,
        max_calls: int,
        period_seconds: float,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.max_calls = max_calls
        self.period_seconds = period_seconds
        self._clock = clock
        self._calls: Dict[str, Deque[float]] = defaultdict(deque)
        self._last_sweep = self._clock()

    @property
    def tracked_keys(self) -> int:
        return len(self._calls)

    def _expire(self, window: Deque[float], now: float) -> None:
        while window and now - window[0] > self.period_seconds:
            window.popleft()

    def _sweep(self, now: float) -> None:
        # Drop keys whose window has emptied, at most once per period.
        if now - self._last_sweep < self.period_seconds:
            return
        self._last_sweep = now
        for key in list(self._calls):
            self._expire(self._calls[key], now)
            if not self._calls[key]:
                del self._calls[key]

    def allow(self, client: str, action: str) -> RateLimitResult:
        now = self._clock()
        self._sweep(now)
        window = self._calls[f"{client}:{action}"]
        self._expire(window, now)
        if len(window) >= self.max_calls:
            retry_after = self.period_seconds - (now - window[0])
            return RateLimitResult(False, max(retry_after, 0))
        window.append(now)
        return RateLimitResult(True, 0)

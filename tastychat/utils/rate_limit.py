"""Sliding-window rate limiting shared by the LLM budget and message-rate guardrail."""

import time
from collections import defaultdict
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime

from pydantic import BaseModel, Field


class RateLimitResult(BaseModel):
    """Outcome of a rate-limit check."""

    allowed: bool = Field(..., description="Whether the call may proceed")
    limit: int = Field(..., description="Maximum calls in the window")
    remaining: int = Field(..., description="Calls left in the window after this one")
    reset_at: datetime = Field(..., description="When the oldest call leaves the window")


@dataclass
class RateLimitWindow:
    """Timestamps of calls still inside the window."""

    requests: list[float] = field(default_factory=list)


class SlidingWindowRateLimiter:
    """In-memory sliding window limiter keyed by an arbitrary string.

    Process-local. Calls are pruned lazily on each access.
    """

    def __init__(
        self,
        window_seconds: int = 3600,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize the rate limiter.

        Args:
            window_seconds: Size of the sliding window in seconds
            clock: Source of epoch seconds, replaceable in tests
        """
        self._window_seconds = window_seconds
        self._clock = clock
        self._windows: dict[str, RateLimitWindow] = defaultdict(RateLimitWindow)

    @property
    def window_seconds(self) -> int:
        return self._window_seconds

    def _prune(self, key: str, now: float) -> RateLimitWindow:
        window = self._windows[key]
        window_start = now - self._window_seconds
        window.requests = [ts for ts in window.requests if ts > window_start]
        return window

    def check(self, key: str, limit: int) -> RateLimitResult:
        """Record a call for `key` if it fits under `limit`.

        A refused call is not recorded.
        """
        now = self._clock()
        window = self._prune(key, now)

        current_count = len(window.requests)
        allowed = current_count < limit
        if allowed:
            window.requests.append(now)

        oldest = window.requests[0] if window.requests else now
        return RateLimitResult(
            allowed=allowed,
            limit=limit,
            remaining=max(0, limit - len(window.requests)),
            reset_at=datetime.fromtimestamp(oldest + self._window_seconds, tz=UTC),
        )

    def record(self, key: str) -> int:
        """Record a call unconditionally and return the count now in the window."""
        now = self._clock()
        window = self._prune(key, now)
        window.requests.append(now)
        return len(window.requests)

    def count(self, key: str) -> int:
        """Calls currently inside the window for `key`."""
        return len(self._prune(key, self._clock()).requests)

    def reset(self, key: str) -> None:
        """Forget all calls for `key`."""
        self._windows.pop(key, None)

"""In-memory sliding-window limiter for credential attempts."""

import time
from collections import defaultdict
from typing import Callable


class RateLimiter:
    """Sliding window rate limiter keyed by an identifier such as an email address."""

    def __init__(
        self,
        max_attempts: int = 5,
        window_seconds: int = 300,
        clock: Callable[[], float] = time.time,
    ):
        self.max_attempts = max_attempts
        self.window_seconds = window_seconds
        self._clock = clock
        self._attempts: dict[str, list[float]] = defaultdict(list)

    def _prune(self, key: str) -> list[float]:
        cutoff = self._clock() - self.window_seconds
        recent = [t for t in self._attempts.get(key, ()) if t > cutoff]
        if recent:
            self._attempts[key] = recent
        else:
            self._attempts.pop(key, None)
        return recent

    def is_rate_limited(self, key: str) -> bool:
        """Return True once ``key`` has used up its attempts in the current window."""
        return len(self._prune(key)) >= self.max_attempts

    def record_attempt(self, key: str) -> None:
        """Record a failed attempt for ``key``."""
        self._prune(key)
        self._attempts[key].append(self._clock())

        # Bounded cleanup so abandoned keys do not accumulate
        if len(self._attempts) > 10000:
            for stale in list(self._attempts.keys())[:100]:
                self._prune(stale)

    def reset(self, key: str) -> None:
        """Forget every attempt for ``key``."""
        self._attempts.pop(key, None)

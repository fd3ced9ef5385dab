"""In-memory sliding window throttle for credential endpoints."""

from __future__ import annotations

import time
from collections import defaultdict, deque
from threading import Lock
from typing import Callable, Deque, Protocol


class RateLimiter(Protocol):
    def allow(self, key: str) -> bool: ...

    def reset(self, key: str) -> None: ...


class SlidingWindowRateLimiter:
    """Thread-safe per-key limiter for a single process."""

    def __init__(
        self,
        max_requests: int,
        window_seconds: int,
        *,
        timer: Callable[[], float] = time.monotonic,
    ) -> None:
        self._max_requests = max_requests
        self._window = window_seconds
        self._timer = timer
        self._attempts: defaultdict[str, Deque[float]] = defaultdict(deque)
        self._lock = Lock()
        self._next_sweep = timer() + window_seconds

    def _sweep(self, now: float) -> None:
        # Keys whose newest attempt has left the window carry no state.
        stale = [
            key
            for key, attempts in self._attempts.items()
            if not attempts or now - attempts[-1] >= self._window
        ]
        for key in stale:
            del self._attempts[key]
        self._next_sweep = now + self._window

    def allow(self, key: str) -> bool:
        """Record an attempt for ``key`` and report whether it is within the limit."""
        now = self._timer()
        with self._lock:
            if now >= self._next_sweep:
                self._sweep(now)
            attempts = self._attempts[key]
            while attempts and now - attempts[0] >= self._window:
                attempts.popleft()
            if len(attempts) >= self._max_requests:
                return False
            attempts.append(now)
            return True

    def reset(self, key: str) -> None:
        with self._lock:
            self._attempts.pop(key, None)

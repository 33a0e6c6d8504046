"""Fixed-window rate limiting keyed by client identifier."""

from __future__ import annotations

import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol

from models import RateLimitEntry


class RateLimitStore(Protocol):
    """Key-value store for rate limit entries with per-key expiry.

    ``now`` is the caller's clock reading; stores with native TTLs may
    ignore it.
    """

    def get(self, key: str, *, now: float) -> RateLimitEntry | None: ...

    def set(self, key: str, entry: RateLimitEntry, *, expires_at: float, now: float) -> None: ...


class InMemoryRateLimitStore:
    """Process-local store; entries are lost on restart.

    Multi-instance deployments need a shared store implementing the same
    ``get``/``set`` interface.
    """

    def __init__(self) -> None:
        self._entries: dict[str, tuple[RateLimitEntry, float]] = {}

    def get(self, key: str, *, now: float) -> RateLimitEntry | None:
        stored = self._entries.get(key)
        if stored is None:
            return None
        entry, expires_at = stored
        if now >= expires_at:
            self._entries.pop(key, None)
            return None
        return entry

    def set(self, key: str, entry: RateLimitEntry, *, expires_at: float, now: float) -> None:
        self._purge_expired(now)
        self._entries[key] = (entry, expires_at)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def _purge_expired(self, now: float) -> None:
        expired = [key for key, (_, expires_at) in self._entries.items() if now >= expires_at]
        for key in expired:
            del self._entries[key]


@dataclass(frozen=True)
class RateLimitDecision:
    """Outcome of a single limiter hit."""

    allowed: bool
    entry: RateLimitEntry


class FixedWindowRateLimiter:
    """Counter that resets at fixed window boundaries.

    Bursts straddling a window boundary can admit up to twice the quota.
    """

    def __init__(
        self,
        store: RateLimitStore,
        *,
        window_seconds: float,
        max_requests: int,
        clock: Callable[[], float] = time.time,
        lock: threading.Lock | None = None,
    ) -> None:
        if window_seconds <= 0:
            raise ValueError("window_seconds must be > 0")
        if max_requests < 1:
            raise ValueError("max_requests must be >= 1")

        self._store = store
        self._window_seconds = window_seconds
        self._max_requests = max_requests
        self._clock = clock
        self._lock = lock or threading.Lock()

    def hit(self, key: str) -> RateLimitDecision:
        """Count one request for ``key`` and report whether it is admitted."""
        now = self._clock()
        with self._lock:
            entry = self._store.get(key, now=now)
            if entry is None or now >= entry.window_reset_at:
                fresh = RateLimitEntry(count=1, window_reset_at=now + self._window_seconds)
                self._store.set(key, fresh, expires_at=fresh.window_reset_at, now=now)
                return RateLimitDecision(allowed=True, entry=fresh)

            if entry.count >= self._max_requests:
                return RateLimitDecision(allowed=False, entry=entry)

            bumped = RateLimitEntry(count=entry.count + 1, window_reset_at=entry.window_reset_at)
            self._store.set(key, bumped, expires_at=bumped.window_reset_at, now=now)
            return RateLimitDecision(allowed=True, entry=bumped)

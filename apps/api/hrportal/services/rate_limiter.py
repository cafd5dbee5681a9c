"""
Fixed-window attempt counter used to throttle logins.

The counter state lives in a ``RateLimitStore``. ``InMemoryRateLimitStore``
keeps it in process memory, so limits are per running instance;
``RedisRateLimitStore`` shares them between instances.
"""

import math
import threading
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Dict, Optional

import redis


@dataclass
class RateLimitEntry:
    count: int
    reset_at: float


@dataclass
class RateLimitResult:
    success: bool
    remaining: int
    reset_at: float
    retry_after: Optional[int] = None


class RateLimitStore(ABC):
    """Storage for per-key windows. ``hit`` must be atomic per key."""

    @abstractmethod
    def hit(self, key: str, window_seconds: float, now: float) -> RateLimitEntry:
        """Count one attempt, opening a fresh window if none is live, and return the updated entry."""

    @abstractmethod
    def get(self, key: str, now: float) -> Optional[RateLimitEntry]:
        """Return the live entry for ``key`` or None."""

    @abstractmethod
    def delete(self, key: str) -> None:
        ...


class InMemoryRateLimitStore(RateLimitStore):

    def __init__(self):
        self._entries: Dict[str, RateLimitEntry] = {}
        self._lock = threading.Lock()

    def hit(self, key: str, window_seconds: float, now: float) -> RateLimitEntry:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None or now > entry.reset_at:
                entry = RateLimitEntry(count=1, reset_at=now + window_seconds)
                self._entries[key] = entry
            else:
                entry.count += 1
            self._purge(now)
            return RateLimitEntry(entry.count, entry.reset_at)

    def get(self, key: str, now: float) -> Optional[RateLimitEntry]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None or now > entry.reset_at:
                return None
            return RateLimitEntry(entry.count, entry.reset_at)

    def delete(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def _purge(self, now: float) -> None:
        expired = [k for k, e in self._entries.items() if now > e.reset_at]
        for k in expired:
            del self._entries[k]

    def __len__(self) -> int:
        return len(self._entries)


class RedisRateLimitStore(RateLimitStore):
    """
    Windows shared between instances through Redis.

    Uses the key's TTL as the window, so ``now`` is only used to turn the TTL
    back into a ``reset_at`` on the caller's clock.
    """

    def __init__(self, client: "redis.Redis", prefix: str = "ratelimit:"):
        self._client = client
        self._prefix = prefix

    @classmethod
    def from_url(cls, url: str, prefix: str = "ratelimit:") -> "RedisRateLimitStore":
        return cls(redis.Redis.from_url(url, decode_responses=True), prefix)

    def hit(self, key: str, window_seconds: float, now: float) -> RateLimitEntry:
        name = self._prefix + key
        pipe = self._client.pipeline()
        pipe.incr(name)
        pipe.pttl(name)
        count, ttl_ms = pipe.execute()
        if ttl_ms is None or ttl_ms < 0:
            # first hit of a window, or a key left without expiry
            ttl_ms = int(window_seconds * 1000)
            self._client.pexpire(name, ttl_ms)
        return RateLimitEntry(count=int(count), reset_at=now + ttl_ms / 1000)

    def get(self, key: str, now: float) -> Optional[RateLimitEntry]:
        name = self._prefix + key
        pipe = self._client.pipeline()
        pipe.get(name)
        pipe.pttl(name)
        count, ttl_ms = pipe.execute()
        if count is None or ttl_ms is None or ttl_ms < 0:
            return None
        return RateLimitEntry(count=int(count), reset_at=now + ttl_ms / 1000)

    def delete(self, key: str) -> None:
        self._client.delete(self._prefix + key)


class RateLimiter:
    """
    Check-and-count limiter over a ``RateLimitStore``.

    Example:
        >>> limiter = RateLimiter(InMemoryRateLimitStore())
        >>> limiter.check("login:a@example.com", window_seconds=900, max_attempts=5).success
        True
    """

    def __init__(self, store: RateLimitStore, clock: Callable[[], float] = time.monotonic):
        self._store = store
        self._clock = clock

    def check(self, key: str, window_seconds: float, max_attempts: int) -> RateLimitResult:
        """Count an attempt for ``key`` and report whether it is within the limit."""
        now = self._clock()
        entry = self._store.hit(key, window_seconds, now)

        if entry.count > max_attempts:
            return RateLimitResult(
                success=False,
                remaining=0,
                reset_at=entry.reset_at,
                retry_after=max(1, math.ceil(entry.reset_at - now)),
            )
        return RateLimitResult(
            success=True,
            remaining=max_attempts - entry.count,
            reset_at=entry.reset_at,
        )

    def status(self, key: str, window_seconds: float, max_attempts: int) -> RateLimitResult:
        """Report the state of ``key`` without counting an attempt."""
        now = self._clock()
        entry = self._store.get(key, now)
        if entry is None:
            return RateLimitResult(success=True, remaining=max_attempts, reset_at=now + window_seconds)

        limited = entry.count >= max_attempts
        return RateLimitResult(
            success=not limited,
            remaining=max(0, max_attempts - entry.count),
            reset_at=entry.reset_at,
            retry_after=max(1, math.ceil(entry.reset_at - now)) if limited else None,
        )

    def reset(self, key: str) -> None:
        self._store.delete(key)

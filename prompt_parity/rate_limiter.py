"""
Fixed-window request rate limiting behind an injectable store.

The store is the only shared mutable resource of the engine. It is constructed
once at process start and passed by reference into the service; the in-memory
implementation serializes every read-modify-write under a lock.
"""

import logging
import threading
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Dict, Optional, Tuple

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RateLimitDecision:
    allowed: bool
    remaining: int
    reset_at: datetime

    def to_dict(self) -> Dict[str, object]:
        return {
            "allowed": self.allowed,
            "remaining": self.remaining,
            "resetAt": self.reset_at.isoformat(),
        }


@dataclass(frozen=True)
class RateLimitPreset:
    max_requests: int
    window_seconds: float


RATE_LIMIT_PRESETS: Dict[str, RateLimitPreset] = {
    "strict": RateLimitPreset(max_requests=10, window_seconds=60),
    "standard": RateLimitPreset(max_requests=30, window_seconds=60),
    "generous": RateLimitPreset(max_requests=100, window_seconds=60),
    "ai_calls": RateLimitPreset(max_requests=5, window_seconds=60),
}


class RateLimitStore(ABC):
    """Key -> counter map with atomic acquire semantics."""

    @abstractmethod
    def acquire(
        self,
        key: str,
        max_requests: int,
        window_seconds: float,
        now: float,
    ) -> Tuple[bool, int, float]:
        """
        Count one request for key if the window still has room.

        Returns:
            (allowed, remaining, reset time as epoch seconds)
        """

    @abstractmethod
    def purge_expired(self, now: float) -> int:
        """Drop expired windows; returns how many were removed."""


class InMemoryRateLimitStore(RateLimitStore):
    """
    Process-local store; safe under concurrent access from many threads.

    Expired windows are swept from inside acquire() at most once per
    purge_interval seconds.
    """

    def __init__(self, purge_interval: float = 60.0):
        if purge_interval < 0:
            raise ValueError("purge_interval must not be negative")
        self.purge_interval = purge_interval
        self._records: Dict[str, Tuple[int, float]] = {}
        self._next_purge: Optional[float] = None
        self._lock = threading.Lock()

    def acquire(
        self,
        key: str,
        max_requests: int,
        window_seconds: float,
        now: float,
    ) -> Tuple[bool, int, float]:
        with self._lock:
            if self._next_purge is None or now >= self._next_purge:
                removed = self._purge_locked(now)
                if removed:
                    logger.debug("Purged %d expired rate limit windows", removed)
                self._next_purge = now + self.purge_interval

            record = self._records.get(key)
            if record is None or now > record[1]:
                reset_time = now + window_seconds
                self._records[key] = (1, reset_time)
                return True, max_requests - 1, reset_time

            count, reset_time = record
            if count >= max_requests:
                return False, 0, reset_time

            count += 1
            self._records[key] = (count, reset_time)
            return True, max_requests - count, reset_time

    def purge_expired(self, now: float) -> int:
        with self._lock:
            return self._purge_locked(now)

    def _purge_locked(self, now: float) -> int:
        expired = [key for key, (_, reset_time) in self._records.items() if reset_time < now]
        for key in expired:
            del self._records[key]
        return len(expired)

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)


class RateLimiter:
    """check(identifier) must run before any model invocation."""

    def __init__(
        self,
        store: RateLimitStore,
        max_requests: int = 5,
        window_seconds: float = 60.0,
        clock: Callable[[], float] = time.time,
    ):
        if max_requests <= 0:
            raise ValueError("max_requests must be positive")
        self.store = store
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.clock = clock

    @classmethod
    def from_preset(cls, store: RateLimitStore, preset: str, **kwargs) -> "RateLimiter":
        config = RATE_LIMIT_PRESETS[preset]
        return cls(store, config.max_requests, config.window_seconds, **kwargs)

    def check(self, identifier: str) -> RateLimitDecision:
        allowed, remaining, reset_time = self.store.acquire(
            identifier or "unknown", self.max_requests, self.window_seconds, self.clock()
        )
        if not allowed:
            logger.info("Rate limit reached for %s", identifier)
        return RateLimitDecision(
            allowed=allowed,
            remaining=remaining,
            reset_at=datetime.fromtimestamp(reset_time, tz=timezone.utc),
        )

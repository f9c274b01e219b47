"""
Sliding-window rate limiting for public submissions.

Supports an in-memory limiter for single-process runs and tests and a
Redis-backed implementation so several instances share one window.
"""

from __future__ import annotations

import logging
import threading
import time
import uuid
from collections import deque
from dataclasses import dataclass, field
from typing import Callable, Optional, Protocol

import redis
from redis import exceptions as redis_exceptions

logger = logging.getLogger(__name__)


class RateLimiter(Protocol):
    """Counts hits per key and reports whether the key is still allowed."""

    def hit(self, key: str) -> bool:
        ...


@dataclass
class InMemoryRateLimiter:
    """
    Process-local sliding window log.

    Keys whose window has emptied are dropped, and idle keys are swept at
    most once per window, so memory tracks recently active addresses only.
    """

    limit: int = 3
    window_seconds: float = 15 * 60
    clock: Callable[[], float] = time.monotonic
    hits: dict[str, deque] = field(default_factory=dict)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)
    _last_sweep: Optional[float] = field(default=None, repr=False, compare=False)

    def _prune(self, window: deque, now: float) -> None:
        while window and now - window[0] >= self.window_seconds:
            window.popleft()

    def _sweep(self, now: float) -> None:
        if self._last_sweep is not None and now - self._last_sweep < self.window_seconds:
            return
        self._last_sweep = now
        for key in list(self.hits):
            self._prune(self.hits[key], now)
            if not self.hits[key]:
                del self.hits[key]

    def hit(self, key: str) -> bool:
        with self._lock:
            now = self.clock()
            self._sweep(now)
            window = self.hits.get(key)
            if window is not None:
                self._prune(window, now)
            if window and len(window) >= self.limit:
                return False
            if not window:
                window = self.hits[key] = deque()
            window.append(now)
            return True

    def reset(self) -> None:
        with self._lock:
            self.hits.clear()
            self._last_sweep = None


@dataclass
class RedisRateLimiter:
    """Redis-backed sliding window using one sorted set per key."""

    url: str
    limit: int = 3
    window_seconds: float = 15 * 60
    key_prefix: str = "portfolio:contact"

    def __post_init__(self):
        self.client = redis.Redis.from_url(self.url)

    def hit(self, key: str) -> bool:
        redis_key = f"{self.key_prefix}:{key}"
        now = time.time()
        try:
            pipe = self.client.pipeline()
            pipe.zremrangebyscore(redis_key, 0, now - self.window_seconds)
            pipe.zcard(redis_key)
            _, count = pipe.execute()
            if count >= self.limit:
                return False
            pipe = self.client.pipeline()
            pipe.zadd(redis_key, {f"{now}:{uuid.uuid4().hex}": now})
            pipe.expire(redis_key, int(self.window_seconds) + 1)
            pipe.execute()
            return True
        except redis_exceptions.ConnectionError:
            # Managed Redis drops idle connections. Reconnect and let the
            # request through rather than failing the submission.
            logger.warning("Rate limiter lost its Redis connection; allowing %s", key)
            self.client = redis.Redis.from_url(self.url)
            return True

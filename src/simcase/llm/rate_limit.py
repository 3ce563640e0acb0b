from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import Callable, Mapping, Optional

from simcase import config
from simcase import logger as logger_mod

from .errors import RateLimitExceeded

log = logger_mod.get_logger()


@dataclass
class _Bucket:
    tokens: float
    updated: float


class TokenBucketLimiter:
    """Per-identity token bucket.

    Each identity starts with ``capacity`` tokens and regains them at a steady
    ``capacity / refill_period_s`` per second. Pass the limiter to whatever
    handles requests; it holds no module-level state, so tests and alternate
    (e.g. shared) limiters can be swapped in.
    """

    def __init__(
        self,
        capacity: int = config.RATE_LIMIT_MAX_REQUESTS,
        refill_period_s: float = config.RATE_LIMIT_WINDOW_S,
        *,
        clock: Callable[[], float] = time.monotonic,
    ):
        if capacity < 1:
            raise ValueError("capacity must be >= 1")
        if refill_period_s <= 0:
            raise ValueError("refill_period_s must be > 0")

        self.capacity = capacity
        self.refill_period_s = refill_period_s
        self._rate = capacity / refill_period_s
        self._clock = clock
        self._buckets: dict[str, _Bucket] = {}
        self._last_sweep = clock()
        self._lock = threading.Lock()

    def _tokens(self, key: str, now: float) -> float:
        bucket = self._buckets.get(key)
        if bucket is None:
            return float(self.capacity)
        elapsed = max(0.0, now - bucket.updated)
        return min(float(self.capacity), bucket.tokens + elapsed * self._rate)

    def _sweep(self, now: float) -> None:
        # A full bucket is indistinguishable from a missing one; drop them.
        if now - self._last_sweep < self.refill_period_s:
            return
        full = [k for k in self._buckets if self._tokens(k, now) >= self.capacity]
        for k in full:
            del self._buckets[k]
        self._last_sweep = now

    def allow(self, key: str) -> bool:
        with self._lock:
            now = self._clock()
            self._sweep(now)
            tokens = self._tokens(key, now)
            if tokens < 1:
                return False
            self._buckets[key] = _Bucket(tokens=tokens - 1, updated=now)
            return True

    def check(self, key: str) -> None:
        if not self.allow(key):
            log.warning(f"Rate limit exceeded for client {key}")
            raise RateLimitExceeded(key)

    def remaining(self, key: str) -> int:
        with self._lock:
            return int(self._tokens(key, self._clock()))

    def reset(self, key: Optional[str] = None) -> None:
        with self._lock:
            if key is None:
                self._buckets.clear()
            else:
                self._buckets.pop(key, None)


def client_identity(headers: Mapping[str, str]) -> str:
    """Pick the rate-limit key for a request from its proxy headers."""

    lowered = {k.lower(): v for k, v in headers.items()}
    forwarded = (lowered.get("x-forwarded-for") or "").split(",")[0].strip()
    if forwarded:
        return forwarded
    real_ip = (lowered.get("x-real-ip") or "").strip()
    return real_ip or "unknown"

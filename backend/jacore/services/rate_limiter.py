"""Sliding-window rate limiting for the authentication endpoints."""

from __future__ import annotations

import logging
import threading
import time
from collections import deque
from typing import Deque, Dict, Tuple

from jacore.core.exceptions import RateLimitExceededError

logger = logging.getLogger(__name__)

MINUTE = 60
HOUR = 3600


class InMemoryRateLimiter:
    """Per-process limiter keyed by endpoint scope and client key.

    Each hit is counted against a per-minute and a per-hour window. State
    lives in memory, so limits apply per worker process.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._hits: Dict[Tuple[str, int, str], Deque[float]] = {}

    def allow(self, scope: str, key: str, limit: int, window_seconds: int) -> bool:
        now = time.time()
        cutoff = now - window_seconds

        with self._lock:
            hits = self._hits.setdefault((scope, window_seconds, key), deque())
            while hits and hits[0] < cutoff:
                hits.popleft()

            if len(hits) >= limit:
                return False

            hits.append(now)
            return True

    def hit(self, scope: str, key: str, per_minute: int, per_hour: int) -> None:
        """
        Record an attempt for ``key`` on ``scope``

        Raises:
            RateLimitExceededError: If either window is exhausted
        """
        if not self.allow(scope, key, per_minute, MINUTE):
            logger.warning(f"Rate limit hit on {scope} for {key} (per minute)")
            raise RateLimitExceededError("Too many attempts. Please wait a minute.")
        if not self.allow(scope, key, per_hour, HOUR):
            logger.warning(f"Rate limit hit on {scope} for {key} (per hour)")
            raise RateLimitExceededError("Too many attempts. Please try again later.")

    def reset(self, scope: str, key: str) -> None:
        """Forget the attempts of ``key`` on ``scope``"""
        with self._lock:
            for window in (MINUTE, HOUR):
                self._hits.pop((scope, window, key), None)


rate_limiter = InMemoryRateLimiter()

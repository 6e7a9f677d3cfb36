"""Safety helpers for log hygiene, client identity and rate limiting."""
from __future__ import annotations

import math
import time
from collections import deque
from threading import Lock
from typing import Deque, Dict, Mapping, Optional


def truncate(value: str, limit: int) -> str:
    """Return ``value`` limited to ``limit`` characters."""

    if limit <= 0:
        return ""
    return value[:limit]


def sanitize_for_log(value: str, *, limit: int = 256) -> str:
    """Return a printable, single-line, length-limited string safe for logging."""

    sanitized = " ".join(value.split())
    sanitized = "".join(ch for ch in sanitized if ch.isprintable())
    return truncate(sanitized, limit)


def client_identity(headers: Optional[Mapping[str, str]], remote_addr: Optional[str]) -> str:
    """Return the key used to rate limit a caller.

    The first ``X-Forwarded-For`` hop wins over the socket address.
    """

    if headers is not None:
        forwarded_for = headers.get("X-Forwarded-For", "") or ""
        first = forwarded_for.split(",", 1)[0].strip()
        if first:
            return first
    return remote_addr or "global"


class RateLimiter:
    """In-memory sliding window rate limiter."""

    def __init__(self, max_requests: int, window_seconds: float) -> None:
        if max_requests < 0:
            raise ValueError("max_requests must be non-negative")
        if window_seconds <= 0:
            raise ValueError("window_seconds must be positive")

        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._events: Dict[str, Deque[float]] = {}
        self._lock = Lock()

    def allow(self, identity: str, *, now: float | None = None) -> bool:
        """Record a request for ``identity`` and return whether it is allowed."""

        if self.max_requests == 0:
            return False
        timestamp = time.monotonic() if now is None else now
        with self._lock:
            events = self._prune(identity, timestamp)
            if len(events) >= self.max_requests:
                return False
            events.append(timestamp)
            self._events[identity] = events
            return True

    def retry_after(self, identity: str, *, now: float | None = None) -> int:
        """Return whole seconds until ``identity`` may send another request."""

        timestamp = time.monotonic() if now is None else now
        with self._lock:
            events = self._prune(identity, timestamp)
            if self.max_requests and len(events) < self.max_requests:
                return 0
            if not events:
                return math.ceil(self.window_seconds)
            return max(1, math.ceil(events[0] + self.window_seconds - timestamp))

    def _prune(self, identity: str, timestamp: float) -> Deque[float]:
        events = self._events.get(identity)
        if events is None:
            return deque()
        cutoff = timestamp - self.window_seconds
        while events and events[0] <= cutoff:
            events.popleft()
        if not events:
            del self._events[identity]
        return events

# jewelry_api/core/rate_limit.py
import logging
import math
import threading
import time
from collections import defaultdict, deque

from fastapi import Depends, Request

from jewelry_api.core.config import Settings, get_settings
from jewelry_api.core.errors import RateLimitError

logger = logging.getLogger(__name__)


class RateLimiter:
    """
    Sliding-window limiter keyed by client IP, used as a route dependency:

        login_limiter = RateLimiter("login", max_requests=5, window_seconds=900)

        @router.post("/login", dependencies=[Depends(login_limiter)])

    State lives in process memory, so limits are per worker process.
    """

    def __init__(
        self,
        name: str,
        max_requests: int,
        window_seconds: int,
        message: str | None = None,
    ):
        self.name = name
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.message = message
        self._hits: dict[str, deque[float]] = defaultdict(deque)
        self._lock = threading.Lock()
        self._last_sweep = float("-inf")

    def __call__(
        self,
        request: Request,
        settings: Settings = Depends(get_settings),
    ) -> None:
        if not settings.RATE_LIMIT_ENABLED:
            return
        key = request.client.host if request.client else "unknown"
        self.hit(key)

    def hit(self, key: str, now: float | None = None) -> None:
        """
        Record one request for `key`.

        Raises:
            RateLimitError(429): if the window is already full.
        """
        now = time.monotonic() if now is None else now
        window_start = now - self.window_seconds

        with self._lock:
            # at most one full sweep per window keeps idle keys from piling up
            if now - self._last_sweep >= self.window_seconds:
                self._sweep(window_start)
                self._last_sweep = now

            hits = self._hits[key]
            while hits and hits[0] <= window_start:
                hits.popleft()

            if len(hits) >= self.max_requests:
                retry_after = max(1, math.ceil(hits[0] + self.window_seconds - now))
                logger.warning("Rate limit '%s' exceeded for %s", self.name, key)
                raise RateLimitError(retry_after, self.message)

            hits.append(now)

    def _sweep(self, window_start: float) -> None:
        """
        Drop expired hits and forget keys with nothing left in the window.

        Caller holds the lock.
        """
        for key in list(self._hits):
            hits = self._hits[key]
            while hits and hits[0] <= window_start:
                hits.popleft()
            if not hits:
                del self._hits[key]

    @property
    def tracked_keys(self) -> int:
        with self._lock:
            return len(self._hits)

    def reset(self) -> None:
        with self._lock:
            self._hits.clear()
            self._last_sweep = float("-inf")

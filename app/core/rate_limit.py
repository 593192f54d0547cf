# app/core/rate_limit.py
import logging
import threading
import time
from collections import deque
from typing import Callable

from fastapi import HTTPException, Request, status

logger = logging.getLogger(__name__)


class RateLimiter:
    """
    In-memory sliding-window rate limiter, used as a FastAPI dependency.

    Limits requests per client IP. The first address in X-Forwarded-For
    wins over the socket peer, so the limiter works behind a proxy.

    Usage:

        checkout_limiter = RateLimiter(3, 5 * 60, "Too many order attempts")

        @router.post("", dependencies=[Depends(checkout_limiter)])
        def create_order(...):
            ...
    """

    def __init__(
        self,
        max_requests: int,
        window_seconds: float,
        message: str = "Too many requests, please try again later.",
        clock: Callable[[], float] = time.monotonic,
    ):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.message = message
        self._clock = clock
        self._hits: dict[str, deque[float]] = {}
        self._lock = threading.Lock()

    @staticmethod
    def client_key(request: Request) -> str:
        forwarded_for = request.headers.get("X-Forwarded-For")
        if forwarded_for:
            return forwarded_for.split(",")[0].strip()
        return request.client.host if request.client else "unknown"

    def hit(self, key: str) -> bool:
        """
        Record a request for `key`.

        Returns False if the request exceeds the limit (and is not recorded).
        """
        now = self._clock()
        with self._lock:
            hits = self._hits.setdefault(key, deque())
            while hits and now - hits[0] >= self.window_seconds:
                hits.popleft()
            if len(hits) >= self.max_requests:
                return False
            hits.append(now)
            return True

    def reset(self) -> None:
        with self._lock:
            self._hits.clear()

    def __call__(self, request: Request) -> None:
        key = self.client_key(request)
        if not self.hit(key):
            logger.warning("Rate limit exceeded for %s on %s", key, request.url.path)
            raise HTTPException(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                detail=self.message,
                headers={"Retry-After": str(int(self.window_seconds))},
            )

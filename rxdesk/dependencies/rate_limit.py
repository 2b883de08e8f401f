"""Per-client sliding-window limits for the OTP endpoints."""
import threading
import time
from collections import defaultdict, deque

from fastapi import HTTPException, Request, status

from rxdesk.core.config import settings


class SlidingWindowLimiter:
    def __init__(self, limit: int, window_seconds: int):
        self.limit = limit
        self.window_seconds = window_seconds
        self._hits = defaultdict(deque)
        self._lock = threading.Lock()

    def allow(self, key: str, now: float | None = None) -> bool:
        now = time.monotonic() if now is None else now
        cutoff = now - self.window_seconds
        with self._lock:
            hits = self._hits[key]
            while hits and hits[0] <= cutoff:
                hits.popleft()
            if len(hits) >= self.limit:
                return False
            hits.append(now)
            return True


otp_limiter = SlidingWindowLimiter(
    settings.RATE_LIMIT_REQUESTS,
    settings.RATE_LIMIT_PERIOD_SECONDS,
)


async def rate_limit(request: Request):
    if not settings.RATE_LIMIT_ENABLED:
        return

    client = request.client.host if request.client else "unknown"
    if not otp_limiter.allow(f"{client}:{request.url.path}"):
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="Too many requests. Please slow down.",
        )

"""
In-memory rate limiting for the login and register endpoints.

Each (client IP, endpoint) pair keeps the timestamps of its recent POSTs;
once a pair has used up its allowance inside the window, further attempts
get 429 with a Retry-After header until the oldest one ages out.
"""

import logging
import time
from collections import deque
from typing import Deque, Dict, NamedTuple, Optional, Tuple

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse

from noteflow.config import get_settings

logger = logging.getLogger(__name__)


class Limit(NamedTuple):
    max_requests: int
    window_seconds: int


AUTH_LIMITS: Dict[str, Limit] = {
    "/api/auth/login": Limit(5, 60),
    "/api/auth/register": Limit(3, 300),
}

# How often idle keys are swept, in seconds
_SWEEP_INTERVAL = 60


def client_ip(request: Request) -> str:
    """First X-Forwarded-For hop, else the socket peer."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Sliding-window limiter for brute-force prone auth endpoints."""

    def __init__(self, app, limits: Optional[Dict[str, Limit]] = None):
        super().__init__(app)
        self.limits = limits if limits is not None else AUTH_LIMITS
        self._hits: Dict[Tuple[str, str], Deque[float]] = {}
        self._last_sweep = time.monotonic()

    def _match(self, path: str) -> Optional[str]:
        return next((prefix for prefix in self.limits if path.startswith(prefix)), None)

    def _sweep(self, now: float) -> None:
        if now - self._last_sweep < _SWEEP_INTERVAL:
            return
        self._last_sweep = now
        longest = max(limit.window_seconds for limit in self.limits.values())
        for key in [k for k, hits in self._hits.items() if not hits or hits[-1] <= now - longest]:
            del self._hits[key]

    def check(self, ip: str, prefix: str, now: float) -> Optional[int]:
        """Record an attempt.

        Returns:
            None if allowed, else the number of seconds until a retry can succeed.
        """
        limit = self.limits[prefix]
        hits = self._hits.setdefault((ip, prefix), deque())
        while hits and hits[0] <= now - limit.window_seconds:
            hits.popleft()
        if len(hits) >= limit.max_requests:
            return max(1, int(hits[0] + limit.window_seconds - now))
        hits.append(now)
        return None

    async def dispatch(self, request: Request, call_next):
        if request.method != "POST" or not get_settings().rate_limit_enabled:
            return await call_next(request)

        prefix = self._match(request.url.path)
        if prefix is None:
            return await call_next(request)

        now = time.monotonic()
        self._sweep(now)
        ip = client_ip(request)
        retry_after = self.check(ip, prefix, now)
        if retry_after is not None:
            logger.warning(f"Rate limit hit: {ip} on {prefix}, retry in {retry_after}s")
            return JSONResponse(
                status_code=429,
                content={"detail": f"Too many attempts. Try again in {retry_after} seconds."},
                headers={"Retry-After": str(retry_after)},
            )
        return await call_next(request)

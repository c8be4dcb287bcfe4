"""
Per-client request limiting for the YourGrocer API

Each client IP gets a sliding 60 second window of request timestamps.
"""
import logging
import time
from collections import defaultdict
from typing import Callable, Dict, List, Tuple

from fastapi import Request, status
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse

logger = logging.getLogger(__name__)

# Root, health and API docs are never limited
UNLIMITED_PATHS = {
    "/",
    "/health",
    "/docs",
    "/openapi.json",
    "/redoc",
}


class RateLimiter:
    """
    Sliding-window request counter keyed by client identifier.

    One instance per application; state is not shared between processes.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic, prune_every: int = 60):
        # {identifier: [timestamp, ...]}
        self._hits: Dict[str, List[float]] = defaultdict(list)
        self._clock = clock
        self._last_prune = clock()
        self._prune_every = prune_every

    def _prune(self, now: float, window_seconds: int) -> None:
        """Forget clients that have been idle for a whole window"""
        if now - self._last_prune < self._prune_every:
            return

        cutoff = now - window_seconds
        for identifier, hits in list(self._hits.items()):
            recent = [ts for ts in hits if ts > cutoff]
            if recent:
                self._hits[identifier] = recent
            else:
                del self._hits[identifier]

        self._last_prune = now

    def is_allowed(
        self,
        identifier: str,
        max_requests: int,
        window_seconds: int = 60
    ) -> Tuple[bool, int, int]:
        """
        Record a request for identifier if it fits in the window.

        Returns:
            (allowed, remaining, retry_after) where retry_after is 0 when allowed
        """
        now = self._clock()
        self._prune(now, window_seconds)

        recent = [ts for ts in self._hits[identifier] if ts > now - window_seconds]
        self._hits[identifier] = recent

        if len(recent) >= max_requests:
            # Oldest request in the window expires first
            retry_after = int(recent[0] + window_seconds - now) + 1 if recent else 1
            return False, 0, retry_after

        recent.append(now)
        return True, max_requests - len(recent), 0


def get_client_ip(request: Request) -> str:
    """Client address, preferring the first X-Forwarded-For hop"""
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()

    if request.client:
        return request.client.host

    return "unknown"


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    Rejects clients that exceed max_requests per window with a 429.

    Every limited response carries X-RateLimit-Limit and X-RateLimit-Remaining;
    rejections also carry Retry-After in seconds.
    """

    def __init__(self, app, limiter: RateLimiter, max_requests: int, window_seconds: int = 60):
        super().__init__(app)
        self.limiter = limiter
        self.max_requests = max_requests
        self.window_seconds = window_seconds

    async def dispatch(self, request: Request, call_next):
        if request.method == "OPTIONS" or request.url.path in UNLIMITED_PATHS:
            return await call_next(request)

        client_ip = get_client_ip(request)
        allowed, remaining, retry_after = self.limiter.is_allowed(
            identifier=f"ip:{client_ip}",
            max_requests=self.max_requests,
            window_seconds=self.window_seconds
        )
        limit_headers = {
            "X-RateLimit-Limit": str(self.max_requests),
            "X-RateLimit-Remaining": str(remaining),
        }

        if not allowed:
            logger.warning(f"Rate limit exceeded for {client_ip} on {request.method} {request.url.path}")
            # Returned rather than raised so the response still passes through CORS
            return JSONResponse(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                content={"status": "error", "message": "Rate limit exceeded. Please slow down."},
                headers={**limit_headers, "Retry-After": str(retry_after)}
            )

        response = await call_next(request)
        response.headers.update(limit_headers)
        return response

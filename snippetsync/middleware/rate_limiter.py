# snippetsync/middleware/rate_limiter.py
# Per-client rate limiting for /api routes
# Uses in-memory sliding window counter (per process)

import time
import logging
from collections import defaultdict
from typing import Dict, Tuple

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from snippetsync.exceptions import RateLimitError
from snippetsync.middleware.error_handler import create_error_response

logger = logging.getLogger(__name__)

EXEMPT_PATHS = ("/health", "/health/live", "/health/ready", "/metrics")


class SlidingWindowCounter:
    """
    Sliding window rate limiter implementation.
    More accurate than fixed window, less memory than sliding log.
    """

    def __init__(self, window_size: int = 900, max_requests: int = 100):
        self.window_size = window_size  # seconds
        self.max_requests = max_requests
        # key -> (prev_count, curr_count, window_index)
        self._counters: Dict[str, Tuple[int, int, float]] = defaultdict(lambda: (0, 0, 0.0))

    def is_allowed(self, key: str, now: float = None) -> Tuple[bool, int]:
        """
        Check if request is allowed for given key.
        Returns (is_allowed, remaining_requests).
        """
        now = time.time() if now is None else now
        prev_count, curr_count, window_start = self._counters[key]

        current_window = now // self.window_size

        if window_start < current_window - 1:
            # More than one window has passed, reset
            prev_count = 0
            curr_count = 1
            window_start = current_window
        elif window_start < current_window:
            prev_count = curr_count
            curr_count = 1
            window_start = current_window
        else:
            curr_count += 1

        # Weighted count (sliding window approximation)
        elapsed_in_window = now % self.window_size
        weight = elapsed_in_window / self.window_size
        weighted_count = prev_count * (1 - weight) + curr_count

        self._counters[key] = (prev_count, curr_count, window_start)

        remaining = max(0, int(self.max_requests - weighted_count))
        return weighted_count <= self.max_requests, remaining

    def cleanup_old_entries(self, now: float = None):
        """Drop clients idle for more than one full window."""
        now = time.time() if now is None else now
        current_window = now // self.window_size
        stale = [
            key for key, (_, _, window_start) in self._counters.items()
            if current_window - window_start > 1
        ]
        for key in stale:
            del self._counters[key]


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    FastAPI middleware limiting requests per client on /api/ paths.
    Health and metrics endpoints are never limited.
    """

    def __init__(self, app, window_seconds: int = 900, max_requests: int = 100):
        super().__init__(app)
        self.limiter = SlidingWindowCounter(window_size=window_seconds, max_requests=max_requests)
        self._last_cleanup = time.time()

    def _get_client_key(self, request: Request) -> str:
        """Extract client identifier from request."""
        forwarded = request.headers.get("X-Forwarded-For")
        if forwarded:
            # Take first IP (original client)
            return forwarded.split(",")[0].strip()

        real_ip = request.headers.get("X-Real-IP")
        if real_ip:
            return real_ip

        if request.client:
            return request.client.host

        return "unknown"

    async def dispatch(self, request: Request, call_next):
        path = request.url.path
        if path in EXEMPT_PATHS or not path.startswith("/api/"):
            return await call_next(request)

        now = time.time()
        if now - self._last_cleanup > self.limiter.window_size:
            self.limiter.cleanup_old_entries(now)
            self._last_cleanup = now

        client_key = self._get_client_key(request)
        is_allowed, remaining = self.limiter.is_allowed(client_key, now)

        if not is_allowed:
            retry_after = int(self.limiter.window_size - now % self.limiter.window_size) or 1
            logger.warning(f"Rate limit exceeded for {client_key} on {path}")
            err = RateLimitError(retry_after=retry_after)
            return create_error_response(
                error_code=err.error_code,
                message=err.message,
                status_code=err.status_code,
                details=err.details,
                headers={"Retry-After": str(retry_after), "X-RateLimit-Remaining": "0"},
            )

        response = await call_next(request)
        response.headers["X-RateLimit-Remaining"] = str(remaining)
        response.headers["X-RateLimit-Limit"] = str(self.limiter.max_requests)
        return response

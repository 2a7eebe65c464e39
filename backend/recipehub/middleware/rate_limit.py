"""
RecipeHub Backend — Rate Limiting Middleware
==============================================

What:  Per-client-IP sliding window limit on API requests.
How:   SlidingWindowLimiter keeps, per key, the timestamps of requests inside
       the last `window` seconds. A request is admitted while fewer than
       `limit` timestamps remain; otherwise the caller gets 429 with a
       Retry-After header counting down to the oldest timestamp's expiry.

       settings.rate_limit_requests / settings.rate_limit_window

State is in-process memory: each uvicorn worker limits independently.
Health checks and the API docs are never limited.
"""

import logging
import time
from collections import defaultdict
from typing import Dict, List, Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from recipehub.config import settings

logger = logging.getLogger(__name__)

# Forget idle clients after this many admitted requests
SWEEP_EVERY = 1000


class SlidingWindowLimiter:

    def __init__(self, limit: int, window: float):
        self.limit = limit
        self.window = window
        self._hits: Dict[str, List[float]] = defaultdict(list)
        self._admitted = 0

    def check(self, key: str, now: Optional[float] = None) -> Optional[int]:
        """
        Record a request for `key`.

        Returns None when admitted, or the number of seconds the client
        should wait before retrying.
        """
        now = time.time() if now is None else now
        window_start = now - self.window
        hits = [ts for ts in self._hits[key] if ts > window_start]

        if len(hits) >= self.limit:
            self._hits[key] = hits
            return int(hits[0] + self.window - now) + 1

        hits.append(now)
        self._hits[key] = hits
        self._admitted += 1
        if self._admitted % SWEEP_EVERY == 0:
            self.sweep(window_start)
        return None

    def sweep(self, window_start: float) -> None:
        idle = [key for key, hits in self._hits.items() if not hits or hits[-1] <= window_start]
        for key in idle:
            del self._hits[key]
        if idle:
            logger.debug("Dropped %d idle rate-limit entries", len(idle))


class RateLimitMiddleware(BaseHTTPMiddleware):

    EXCLUDED_PATHS = {"/health", "/docs", "/openapi.json", "/redoc"}

    def __init__(self, app, **kwargs):
        super().__init__(app, **kwargs)
        self.limiter = SlidingWindowLimiter(
            limit=settings.rate_limit_requests,
            window=settings.rate_limit_window,
        )

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in self.EXCLUDED_PATHS:
            return await call_next(request)

        client_ip = request.client.host if request.client else "unknown"
        retry_after = self.limiter.check(client_ip)
        if retry_after is None:
            return await call_next(request)

        logger.warning(
            "Rate limit exceeded for IP %s (%d requests per %ds)",
            client_ip,
            settings.rate_limit_requests,
            settings.rate_limit_window,
        )
        return JSONResponse(
            status_code=429,
            content={
                "error": "rate_limit_exceeded",
                "message": f"Too many requests. Please wait {retry_after} seconds before retrying.",
                "details": {"retry_after": retry_after},
            },
            headers={"Retry-After": str(retry_after)},
        )

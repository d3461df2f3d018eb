"""
API Middleware

Middleware for the report API:
- Request logging with a bound request id and report view
- Rate limiting, with a separate budget for report refreshes
- Cache-Control headers matching the report cache TTL
- Security headers for the dashboard
"""

import asyncio
import time
from collections import defaultdict
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
import structlog

logger = structlog.get_logger(__name__)

HEALTH_PREFIX = "/api/v1/health"
REPORTS_PREFIX = "/api/v1/reports"
REFRESH_PATH = f"{REPORTS_PREFIX}/refresh"


def report_view(path: str) -> Optional[str]:
    """Report section a path serves: 'report', 'top', 'export', ... or None"""
    if not path.startswith(REPORTS_PREFIX):
        return None
    rest = path[len(REPORTS_PREFIX):].strip("/")
    return rest.split("/", 1)[0] or "report"


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Log every request with timing.

    Health probes are logged at DEBUG; server errors at WARNING.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start_time = time.perf_counter()
        path = request.url.path
        request_id = request.headers.get("X-Request-ID", str(time.time_ns()))

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id)
        view = report_view(path)
        if view:
            structlog.contextvars.bind_contextvars(report_view=view)

        log = logger.debug if path.startswith(HEALTH_PREFIX) else logger.info
        log(
            "Request started",
            method=request.method,
            path=path,
            client=request.client.host if request.client else None,
        )

        response = await call_next(request)
        duration_ms = (time.perf_counter() - start_time) * 1000

        if response.status_code >= 500:
            log = logger.warning
        log("Request completed", status_code=response.status_code, duration_ms=round(duration_ms, 2))

        response.headers["X-Response-Time"] = f"{duration_ms:.2f}ms"
        response.headers["X-Request-ID"] = request_id
        return response


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    Sliding-window in-memory rate limiter keyed by client host.

    Report reads share one budget. ``POST /reports/refresh`` reloads the
    report from disk and has its own, smaller budget. Health probes are
    never limited.
    """

    def __init__(
        self,
        app,
        max_requests: int = 100,
        window_seconds: int = 60,
        refresh_max_requests: int = 5,
        exempt_prefixes: Sequence[str] = (HEALTH_PREFIX,),
    ):
        super().__init__(app)
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.refresh_max_requests = refresh_max_requests
        self.exempt_prefixes = tuple(exempt_prefixes)
        self._requests: Dict[Tuple[str, str], List[float]] = defaultdict(list)
        self._lock = asyncio.Lock()

    def _budget(self, request: Request) -> Tuple[str, int]:
        if request.method == "POST" and request.url.path == REFRESH_PATH:
            return "refresh", self.refresh_max_requests
        return "read", self.max_requests

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if request.url.path.startswith(self.exempt_prefixes):
            return await call_next(request)

        client_id = request.client.host if request.client else "unknown"
        budget, limit = self._budget(request)
        key = (client_id, budget)
        current_time = time.time()

        async with self._lock:
            recent = [t for t in self._requests[key] if current_time - t < self.window_seconds]
            self._requests[key] = recent

            if len(recent) >= limit:
                logger.warning("Rate limit exceeded", client=client_id, budget=budget, requests=len(recent))
                return Response(
                    content='{"error": "Rate limit exceeded"}',
                    status_code=429,
                    media_type="application/json",
                    headers={
                        "Retry-After": str(self.window_seconds),
                        "X-RateLimit-Limit": str(limit),
                        "X-RateLimit-Remaining": "0",
                    },
                )

            recent.append(current_time)
            remaining = limit - len(recent)

        response = await call_next(request)
        response.headers["X-RateLimit-Limit"] = str(limit)
        response.headers["X-RateLimit-Remaining"] = str(remaining)
        return response


class ReportCacheHeadersMiddleware(BaseHTTPMiddleware):
    """Let browsers keep successful report reads as long as the server cache does"""

    def __init__(self, app, max_age_seconds: int = 300):
        super().__init__(app)
        self.max_age_seconds = max_age_seconds

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)
        if not request.url.path.startswith(REPORTS_PREFIX):
            return response

        if request.method == "GET" and response.status_code == 200:
            response.headers["Cache-Control"] = f"private, max-age={self.max_age_seconds}"
        else:
            response.headers["Cache-Control"] = "no-store"
        return response


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add security headers to all responses"""

    def __init__(self, app, script_sources: Sequence[str] = ("https://cdn.jsdelivr.net",)):
        super().__init__(app)
        scripts = " ".join(("'self'",) + tuple(script_sources))
        self.content_security_policy = (
            f"default-src 'self'; script-src {scripts}; style-src 'self' 'unsafe-inline'"
        )

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        response.headers["Content-Security-Policy"] = self.content_security_policy
        return response

"""
Custom Middleware
=================
Rate limiting and request timing middleware.
"""

from typing import Callable, Iterable, Optional
from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
import structlog
import time

from app.core.cache import cache_service

logger = structlog.get_logger(__name__)


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    Rate limiting middleware using Redis.
    
    Limits requests per client IP on the /api routes. Paraphrase calls
    cost an LLM request each, so they are what this protects.
    """
    
    def __init__(
        self,
        app,
        requests_per_minute: int = 60,
        requests_per_hour: int = 1000,
        exclude_paths: Optional[Iterable[str]] = None,
    ):
        super().__init__(app)
        self.requests_per_minute = requests_per_minute
        self.requests_per_hour = requests_per_hour
        self.exclude_paths = set(exclude_paths or ["/health", "/docs", "/openapi.json"])
    
    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        path = request.url.path
        if path in self.exclude_paths or not path.startswith("/api") or not cache_service.is_connected:
            return await call_next(request)
        
        identifier = request.client.host if request.client else "unknown"
        
        allowed_minute, remaining_minute = await cache_service.check_rate_limit(
            f"minute:{identifier}",
            limit=self.requests_per_minute,
            window_seconds=60,
        )
        allowed_hour, remaining_hour = await cache_service.check_rate_limit(
            f"hour:{identifier}",
            limit=self.requests_per_hour,
            window_seconds=3600,
        )
        
        if not allowed_minute or not allowed_hour:
            retry_after = 60 if not allowed_minute else 3600
            logger.warning(
                "Rate limit exceeded",
                identifier=identifier,
                path=path,
            )
            return JSONResponse(
                status_code=429,
                content={
                    "message": "Too many requests. Please slow down.",
                    "retry_after": retry_after,
                },
                headers={
                    "X-RateLimit-Remaining-Minute": str(remaining_minute),
                    "X-RateLimit-Remaining-Hour": str(remaining_hour),
                    "Retry-After": str(retry_after),
                },
            )
        
        response = await call_next(request)
        response.headers["X-RateLimit-Limit-Minute"] = str(self.requests_per_minute)
        response.headers["X-RateLimit-Limit-Hour"] = str(self.requests_per_hour)
        return response


class RequestTimingMiddleware(BaseHTTPMiddleware):
    """
    Adds X-Request-Duration-Ms and logs slow requests.
    
    Paraphrase requests wait on the LLM, so "slow" is measured in seconds.
    """
    
    def __init__(self, app, slow_request_ms: float = 15000):
        super().__init__(app)
        self.slow_request_ms = slow_request_ms
    
    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start_time = time.time()
        
        response = await call_next(request)
        
        duration_ms = (time.time() - start_time) * 1000
        response.headers["X-Request-Duration-Ms"] = f"{duration_ms:.2f}"
        
        if duration_ms > self.slow_request_ms:
            logger.warning(
                "Slow request detected",
                path=request.url.path,
                method=request.method,
                status_code=response.status_code,
                duration_ms=round(duration_ms, 2),
            )
        
        return response

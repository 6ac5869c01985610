"""Custom middleware for the application."""

import logging
import time

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

import redis.asyncio as redis

from app.config import settings
from app.core.exceptions import RateLimitExceeded

logger = logging.getLogger(__name__)

# Paths that never count against the rate limit
UNLIMITED_PATHS = ("/health", "/docs", "/redoc", "/openapi.json")


def client_ip(request: Request) -> str:
    """Extract client IP from request, honouring proxy headers."""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()

    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip

    return request.client.host if request.client else "unknown"


async def _hit_window(redis_client: redis.Redis, key: str) -> tuple[int, int]:
    """Record a hit in a one-minute sliding window.

    Args:
        redis_client: Connected Redis client
        key: Sorted-set key for the caller being limited

    Returns:
        Hits already in the window before this one, and the current epoch second
    """
    current_time = int(time.time())
    window_start = current_time - 60

    async with redis_client.pipeline(transaction=True) as pipe:
        await pipe.zremrangebyscore(key, 0, window_start)
        await pipe.zcard(key)
        await pipe.zadd(key, {str(time.time_ns()): current_time})
        await pipe.expire(key, 60)
        results = await pipe.execute()

    return results[1], current_time


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Rate limiting middleware using Redis sliding window."""

    def __init__(
        self,
        app,
        requests_per_minute: int = 100,
        redis_url: str | None = None,
    ):
        """Initialize rate limiter.

        Args:
            app: ASGI application being wrapped
            requests_per_minute: Allowed requests per client IP per minute
            redis_url: Redis connection URL, defaults to the configured one
        """
        super().__init__(app)
        self.requests_per_minute = requests_per_minute
        self.redis_url = redis_url or settings.redis_url
        self._redis: redis.Redis | None = None

    async def get_redis(self) -> redis.Redis:
        """Get Redis connection."""
        if self._redis is None:
            self._redis = redis.from_url(
                self.redis_url,
                encoding="utf-8",
                decode_responses=True,
            )
        return self._redis

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        """Process request with rate limiting.

        Args:
            request: Incoming request
            call_next: Next middleware or route handler

        Returns:
            Response: Route response, or a 429 once the window is full
        """
        if request.url.path in UNLIMITED_PATHS:
            return await call_next(request)

        try:
            redis_client = await self.get_redis()
            request_count, current_time = await _hit_window(
                redis_client, f"rate_limit:{client_ip(request)}"
            )
        except redis.RedisError as e:
            # If Redis is down, allow request through
            logger.warning(f"Rate limiter unavailable: {e}")
            return await call_next(request)

        if request_count >= self.requests_per_minute:
            return JSONResponse(
                status_code=429,
                content={
                    "detail": "Too many requests. Please try again later.",
                    "retry_after": 60,
                },
                headers={
                    "Retry-After": "60",
                    "X-RateLimit-Limit": str(self.requests_per_minute),
                    "X-RateLimit-Remaining": "0",
                    "X-RateLimit-Reset": str(current_time + 60),
                },
            )

        response = await call_next(request)
        response.headers["X-RateLimit-Limit"] = str(self.requests_per_minute)
        response.headers["X-RateLimit-Remaining"] = str(
            max(0, self.requests_per_minute - request_count - 1)
        )
        response.headers["X-RateLimit-Reset"] = str(current_time + 60)
        return response


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Middleware for logging requests and response times."""

    slow_request_seconds = 1.0

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        """Time the request and tag the response with an ID.

        Args:
            request: Incoming request
            call_next: Next middleware or route handler

        Returns:
            Response: Route response with X-Request-ID and X-Response-Time headers
        """
        start_time = time.time()

        request_id = request.headers.get("X-Request-ID") or str(time.time_ns())
        request.state.request_id = request_id

        response = await call_next(request)
        duration = time.time() - start_time

        response.headers["X-Request-ID"] = request_id
        response.headers["X-Response-Time"] = f"{duration:.3f}s"

        summary = (
            f"{request.method} {request.url.path} -> {response.status_code} "
            f"in {duration:.3f}s"
        )
        if duration > self.slow_request_seconds:
            logger.warning(f"SLOW REQUEST: {summary}")
        else:
            logger.debug(summary)

        return response


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Middleware to add security headers to responses."""

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        """Add security headers to the response.

        Args:
            request: Incoming request
            call_next: Next middleware or route handler

        Returns:
            Response: Route response with hardening headers set
        """
        response = await call_next(request)

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"

        if not settings.debug:
            response.headers["Strict-Transport-Security"] = (
                "max-age=31536000; includeSubDomains"
            )

        return response


class RateLimiter:
    """Per-endpoint rate limiter used as a FastAPI dependency."""

    def __init__(
        self,
        requests_per_minute: int = 10,
        key_prefix: str = "api",
    ):
        """Initialize endpoint rate limiter.

        Args:
            requests_per_minute: Allowed calls per client IP per minute
            key_prefix: Namespace separating this endpoint's counters
        """
        self.requests_per_minute = requests_per_minute
        self.key_prefix = key_prefix
        self._redis: redis.Redis | None = None

    async def get_redis(self) -> redis.Redis:
        """Get Redis connection."""
        if self._redis is None:
            self._redis = redis.from_url(
                settings.redis_url,
                encoding="utf-8",
                decode_responses=True,
            )
        return self._redis

    async def __call__(self, request: Request) -> None:
        """Count the call against the caller's budget.

        Args:
            request: Incoming request

        Raises:
            RateLimitExceeded: If the caller is over its budget
        """
        if settings.environment == "development":
            return

        try:
            redis_client = await self.get_redis()
            request_count, _ = await _hit_window(
                redis_client, f"rate:{self.key_prefix}:{client_ip(request)}"
            )
        except redis.RedisError as e:
            logger.warning(f"Rate limiter '{self.key_prefix}' unavailable: {e}")
            return

        if request_count >= self.requests_per_minute:
            raise RateLimitExceeded()


# Pre-configured rate limiters for public endpoints
login_limiter = RateLimiter(requests_per_minute=5, key_prefix="login")
register_limiter = RateLimiter(requests_per_minute=3, key_prefix="register")
booking_limiter = RateLimiter(requests_per_minute=10, key_prefix="booking")

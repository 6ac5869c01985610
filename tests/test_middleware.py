"""Request middleware and endpoint rate limiting."""

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError
from starlette.requests import Request

from app.core import middleware
from app.core.exceptions import RateLimitExceeded
from app.core.middleware import RateLimiter, client_ip


def make_request(headers: dict[str, str] | None = None) -> Request:
    raw = [(k.lower().encode(), v.encode()) for k, v in (headers or {}).items()]
    return Request(
        {"type": "http", "method": "GET", "path": "/", "headers": raw, "client": ("10.0.0.9", 5000)}
    )


@pytest.mark.parametrize(
    "headers, expected",
    [
        ({"X-Forwarded-For": "203.0.113.7, 10.0.0.1"}, "203.0.113.7"),
        ({"X-Real-IP": "198.51.100.4"}, "198.51.100.4"),
        ({}, "10.0.0.9"),
    ],
)
def test_client_ip(headers, expected):
    assert client_ip(make_request(headers)) == expected


async def test_responses_carry_security_and_tracing_headers(client):
    response = await client.get("/health", headers={"X-Request-ID": "req-42"})

    assert response.headers["X-Content-Type-Options"] == "nosniff"
    assert response.headers["X-Frame-Options"] == "DENY"
    assert response.headers["X-Request-ID"] == "req-42"
    assert response.headers["X-Response-Time"].endswith("s")


async def test_limiter_blocks_over_budget(monkeypatch):
    monkeypatch.setattr(middleware.settings, "environment", "production")

    async def over_budget(redis_client, key):
        return 3, 0

    monkeypatch.setattr(middleware, "_hit_window", over_budget)
    limiter = RateLimiter(requests_per_minute=3, key_prefix="booking")
    limiter._redis = object()

    with pytest.raises(RateLimitExceeded):
        await limiter(make_request())


async def test_limiter_fails_open_without_redis(monkeypatch):
    monkeypatch.setattr(middleware.settings, "environment", "production")

    async def unavailable(redis_client, key):
        raise RedisConnectionError("connection refused")

    monkeypatch.setattr(middleware, "_hit_window", unavailable)
    limiter = RateLimiter(requests_per_minute=3, key_prefix="booking")
    limiter._redis = object()

    assert await limiter(make_request()) is None

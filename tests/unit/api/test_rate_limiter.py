"""Sliding-window rate limiter."""

from unittest.mock import patch

import pytest
from fastapi import HTTPException, Response
from starlette.requests import Request

from src.servemee.api.http.middleware.limiter import (
    SlidingWindowRateLimiter,
    close_rate_limiter,
    get_rate_limiter,
    rate_limit,
)
from src.servemee.runtime.config.config_data import ConfigData, RateLimiterConfig
from src.servemee.runtime.context import with_context


def _request(path: str = "/auth/login", method: str = "POST", client: str = "10.0.0.1"):
    return Request(
        {
            "type": "http",
            "method": method,
            "path": path,
            "headers": [],
            "query_string": b"",
            "client": (client, 1234),
        }
    )


class TestSlidingWindowRateLimiter:
    async def test_blocks_after_quota(self):
        limiter = SlidingWindowRateLimiter(2, 60000, per_endpoint=True, per_method=True)

        await limiter(_request(), Response())
        await limiter(_request(), Response())
        with pytest.raises(HTTPException) as exc_info:
            await limiter(_request(), Response())

        assert exc_info.value.status_code == 429
        assert "Retry-After" in exc_info.value.headers

    async def test_window_slides(self):
        limiter = SlidingWindowRateLimiter(1, 1000, per_endpoint=True, per_method=True)

        with patch("time.monotonic", return_value=100.0):
            await limiter(_request(), Response())
        with patch("time.monotonic", return_value=100.5):
            with pytest.raises(HTTPException):
                await limiter(_request(), Response())
        with patch("time.monotonic", return_value=101.5):
            await limiter(_request(), Response())

    async def test_clients_and_endpoints_are_counted_separately(self):
        limiter = SlidingWindowRateLimiter(1, 60000, per_endpoint=True, per_method=True)

        await limiter(_request(client="10.0.0.1"), Response())
        await limiter(_request(client="10.0.0.2"), Response())
        await limiter(_request(path="/auth/register"), Response())
        await limiter(_request(method="GET"), Response())

    async def test_reset(self):
        limiter = SlidingWindowRateLimiter(1, 60000, per_endpoint=False, per_method=False)
        await limiter(_request(), Response())
        limiter.reset()
        await limiter(_request(path="/other"), Response())


class TestRateLimitDependency:
    async def test_disabled_limiter_never_blocks(self):
        close_rate_limiter()
        dependency = rate_limit(requests=1)
        with with_context(ConfigData(rate_limiter=RateLimiterConfig(enabled=False))):
            for _ in range(5):
                await dependency(_request(), Response())

    async def test_shared_per_configuration(self):
        close_rate_limiter()
        assert get_rate_limiter(5, 1000, True, True) is get_rate_limiter(5, 1000, True, True)
        assert get_rate_limiter(5, 1000, True, True) is not get_rate_limiter(6, 1000, True, True)

"""In-memory rate limiting used by the HTTP layer.

Counters live in the process, so each worker enforces its own quota.
"""

from __future__ import annotations

import asyncio
import time
from collections import defaultdict, deque
from collections.abc import Awaitable, Callable
from functools import lru_cache
from typing import Any

from fastapi import HTTPException, Request, Response
from loguru import logger

from src.servemee.runtime.context import get_config

RateLimiterType = Callable[[Request, Response], Awaitable[Any]]


class SlidingWindowRateLimiter:
    """Allow ``times`` requests per client within a sliding ``milliseconds`` window."""

    def __init__(
        self, times: int, milliseconds: int, per_endpoint: bool, per_method: bool
    ) -> None:
        self._hits: defaultdict[str, deque[float]] = defaultdict(deque)
        self._lock = asyncio.Lock()
        self._times = times
        self._seconds = milliseconds / 1000
        self._per_endpoint = per_endpoint
        self._per_method = per_method
        self._last_cleanup = time.monotonic()
        self._cleanup_interval = 60.0

    async def __call__(self, request: Request, response: Response) -> None:
        key = self._make_key(request)
        await self._throttle(key)

    def _make_key(self, request: Request) -> str:
        uid = getattr(request.state, "uid", None)
        if uid is not None:
            ident = f"user:{uid}"
        else:
            xff = request.headers.get("x-forwarded-for")
            client_host = (
                xff.split(",")[0].strip()
                if xff
                else request.client.host
                if request.client
                else "anonymous"
            )
            ident = f"ip:{client_host}"

        parts = [ident]
        if self._per_method:
            parts.append(request.method)
        if self._per_endpoint:
            route = request.scope.get("route")
            template = getattr(route, "path", None)
            parts.append((template or request.url.path).rstrip("/"))
        return ":".join(parts)

    def _cleanup_old_keys(self, now: float) -> None:
        if now - self._last_cleanup < self._cleanup_interval:
            return
        self._last_cleanup = now

        stale = []
        for key, hits in self._hits.items():
            while hits and hits[0] <= now - self._seconds:
                hits.popleft()
            if not hits:
                stale.append(key)
        for key in stale:
            del self._hits[key]

    async def _throttle(self, key: str) -> None:
        now = time.monotonic()
        window_start = now - self._seconds
        async with self._lock:
            self._cleanup_old_keys(now)
            hits = self._hits[key]
            while hits and hits[0] <= window_start:
                hits.popleft()
            if len(hits) >= self._times:
                retry_after = max(0, int(self._seconds - (now - hits[0])))
                logger.warning("Rate limit exceeded", key=key, retry_after=retry_after)
                raise HTTPException(
                    status_code=429,
                    detail="Too Many Requests",
                    headers={"Retry-After": str(retry_after)},
                )
            hits.append(now)

    def reset(self) -> None:
        self._hits.clear()


@lru_cache(maxsize=100)
def get_rate_limiter(
    requests: int, window_ms: int, per_endpoint: bool, per_method: bool
) -> SlidingWindowRateLimiter:
    """Return the shared limiter for this configuration."""
    return SlidingWindowRateLimiter(requests, window_ms, per_endpoint, per_method)


def rate_limit(
    requests: int | None = None, window_ms: int | None = None
) -> RateLimiterType:
    """Return a dependency enforcing request quotas.

    Unset arguments fall back to the ``rate_limiter`` configuration, read on
    every request.
    """

    async def dependency(request: Request, response: Response) -> None:
        cfg = get_config().rate_limiter
        if not cfg.enabled:
            return
        limiter = get_rate_limiter(
            requests if requests is not None else cfg.requests,
            window_ms if window_ms is not None else cfg.window_ms,
            cfg.per_endpoint,
            cfg.per_method,
        )
        await limiter(request, response)

    return dependency


def close_rate_limiter() -> None:
    """Drop every limiter and its counters."""
    get_rate_limiter.cache_clear()
    logger.info("Cleared rate limiter state")

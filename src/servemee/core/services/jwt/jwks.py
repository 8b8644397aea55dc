from abc import ABC, abstractmethod
from typing import Any

import httpx
from cachetools import TTLCache
from fastapi import HTTPException
from loguru import logger


class JWKSCache(ABC):
    @abstractmethod
    def get_jwks(self, jwks_uri: str) -> dict[str, Any]:
        """
        Get the cached key set published at ``jwks_uri``.

        Returns:
            JWKS dictionary, empty when nothing is cached
        """
        raise NotImplementedError

    @abstractmethod
    def set_jwks(self, jwks_uri: str, jwks: dict[str, Any]) -> None:
        """Cache the key set published at ``jwks_uri``."""
        raise NotImplementedError

    @abstractmethod
    def clear_jwks_cache(self) -> None:
        """Clear the JWKS cache."""
        raise NotImplementedError


class JWKSCacheInMemory(JWKSCache):
    """Per-process key set cache.

    Google rotates the securetoken keys every few hours, so entries expire after
    ``ttl`` seconds and the next verification refetches them.
    """

    def __init__(self, ttl: int = 3600, maxsize: int = 10) -> None:
        self._cache: TTLCache[str, dict[str, Any]] = TTLCache(maxsize=maxsize, ttl=ttl)

    def get_jwks(self, jwks_uri: str) -> dict[str, Any]:
        return self._cache.get(jwks_uri, {})

    def set_jwks(self, jwks_uri: str, jwks: dict[str, Any]) -> None:
        self._cache[jwks_uri] = jwks

    def clear_jwks_cache(self) -> None:
        self._cache.clear()


class JwksService:
    def __init__(self, cache: JWKSCache, timeout: float = 5.0) -> None:
        self._cache = cache
        self._timeout = timeout

    async def fetch_jwks(self, jwks_uri: str) -> dict[str, Any]:
        if not jwks_uri:
            raise HTTPException(status_code=500, detail="No JWKS URI configured")

        jwks = self._cache.get_jwks(jwks_uri)
        if jwks:
            return jwks

        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                resp = await client.get(jwks_uri)
                resp.raise_for_status()
                jwks = resp.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.error("Failed to fetch JWKS from {}: {}", jwks_uri, exc)
            raise HTTPException(
                status_code=500, detail=f"Failed to fetch JWKS: {exc}"
            ) from exc

        self._cache.set_jwks(jwks_uri, jwks)
        logger.debug("Cached {} signing keys from {}", len(jwks.get("keys", [])), jwks_uri)
        return jwks

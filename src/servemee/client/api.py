"""Thin JSON client for the servemee backend."""

from typing import Any

import httpx
from loguru import logger

from src.servemee.client.storage import ID_TOKEN_KEY, KeyValueStorage


class ApiError(Exception):
    """A backend call failed; ``status`` is 0 when no response was received."""

    def __init__(self, message: str, status: int) -> None:
        super().__init__(message)
        self.status = status


class BackendApi:
    def __init__(
        self,
        base_url: str,
        storage: KeyValueStorage | None = None,
        timeout: float = 5.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._storage = storage
        self._timeout = timeout
        self._transport = transport

    def _headers(self, token: str | None) -> dict[str, str]:
        token = token or (self._storage.get(ID_TOKEN_KEY) if self._storage else None)
        headers = {"Content-Type": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    async def request(
        self,
        method: str,
        endpoint: str,
        *,
        json: Any = None,
        token: str | None = None,
    ) -> Any:
        """Send a request and return the decoded JSON body.

        ``token`` overrides the ID token cached in storage.
        """
        try:
            async with httpx.AsyncClient(
                base_url=self._base_url, timeout=self._timeout, transport=self._transport
            ) as client:
                response = await client.request(
                    method, endpoint, json=json, headers=self._headers(token)
                )
        except httpx.HTTPError as exc:
            logger.warning("{} {} failed: {}", method, endpoint, exc)
            raise ApiError("Network error occurred", 0) from exc

        if not response.is_success:
            try:
                body = response.json()
            except ValueError:
                body = {}
            message = (
                body.get("message") or body.get("detail")
                if isinstance(body, dict)
                else None
            )
            raise ApiError(
                str(message or f"HTTP error! status: {response.status_code}"),
                response.status_code,
            )

        try:
            return response.json()
        except ValueError as exc:
            raise ApiError("Invalid JSON in response", response.status_code) from exc

    async def get(self, endpoint: str, *, token: str | None = None) -> Any:
        return await self.request("GET", endpoint, token=token)

    async def post(self, endpoint: str, data: Any = None) -> Any:
        return await self.request("POST", endpoint, json=data)

    async def put(self, endpoint: str, data: Any = None) -> Any:
        return await self.request("PUT", endpoint, json=data)

    async def patch(self, endpoint: str, data: Any = None) -> Any:
        return await self.request("PATCH", endpoint, json=data)

    async def delete(self, endpoint: str) -> Any:
        return await self.request("DELETE", endpoint)

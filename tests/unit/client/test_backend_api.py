"""Backend JSON client error mapping."""

import httpx
import pytest

from src.servemee.client import ApiError, BackendApi, InMemoryStorage
from src.servemee.client.storage import ID_TOKEN_KEY


def _api(handler, storage=None) -> BackendApi:
    return BackendApi(
        "http://backend.test/", storage=storage, transport=httpx.MockTransport(handler)
    )


async def test_cached_token_is_sent():
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, json={"ok": True})

    api = _api(handler, InMemoryStorage({ID_TOKEN_KEY: "cached"}))

    assert await api.get("/auth/profile") == {"ok": True}
    assert seen[0].headers["Authorization"] == "Bearer cached"


async def test_explicit_token_wins():
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, json={})

    api = _api(handler, InMemoryStorage({ID_TOKEN_KEY: "cached"}))
    await api.get("/auth/profile", token="fresh")
    assert seen[0].headers["Authorization"] == "Bearer fresh"


async def test_no_token_no_header():
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, json={})

    await _api(handler).post("/auth/login", {"email": "a@example.com"})
    assert "Authorization" not in seen[0].headers
    assert seen[0].method == "POST"


@pytest.mark.parametrize(
    ("response", "message"),
    [
        (httpx.Response(409, json={"message": "Already exists"}), "Already exists"),
        (httpx.Response(401, json={"detail": "Authentication token missing"}), "Authentication token missing"),
        (httpx.Response(502, text="bad gateway"), "HTTP error! status: 502"),
    ],
)
async def test_error_messages(response, message):
    with pytest.raises(ApiError) as exc_info:
        await _api(lambda request: response).get("/x")
    assert str(exc_info.value) == message
    assert exc_info.value.status == response.status_code


async def test_network_error_has_status_zero():
    def handler(request):
        raise httpx.ConnectError("down", request=request)

    with pytest.raises(ApiError) as exc_info:
        await _api(handler).delete("/x")
    assert str(exc_info.value) == "Network error occurred"
    assert exc_info.value.status == 0

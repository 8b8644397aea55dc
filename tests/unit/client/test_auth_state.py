"""Client auth state resolution against the backend profile endpoint."""

import httpx

from src.servemee.client import (
    AuthStateStore,
    BackendApi,
    GateStatus,
    InMemoryStorage,
    RouteGuard,
    SignedInIdentity,
)
from src.servemee.client.storage import ID_TOKEN_KEY, ROLE_KEY, USER_ID_KEY

IDENTITY = SignedInIdentity(
    uid="uid-1", id_token="id-token-1", email="a@example.com", display_name="Firebase Name"
)


def _profile_handler(status: int = 200, user: dict | None = None):
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        if status != 200:
            return httpx.Response(status, json={"detail": "User not found in database"})
        return httpx.Response(200, json={"user": user, "firebaseUid": "uid-1"})

    handler.seen = seen
    return handler


def _store(handler, storage: InMemoryStorage) -> AuthStateStore:
    api = BackendApi(
        "http://backend.test", storage=storage, transport=httpx.MockTransport(handler)
    )
    return AuthStateStore(api, storage)


class TestAuthStateStore:
    def test_initial_state_is_loading(self):
        store = _store(_profile_handler(), InMemoryStorage())
        assert store.state.loading is True
        assert store.state.user is None

    async def test_profile_supplies_role_and_name(self):
        storage = InMemoryStorage()
        handler = _profile_handler(
            user={"id": "db-1", "displayName": "Backend Name", "role": "service_provider"}
        )
        store = _store(handler, storage)

        state = await store.on_identity_changed(IDENTITY)

        assert state.loading is False
        assert state.user.role == "service_provider"
        assert state.user.display_name == "Backend Name"
        assert handler.seen[0].url.path == "/auth/profile"
        assert handler.seen[0].headers["Authorization"] == "Bearer id-token-1"
        assert storage.get(ROLE_KEY) == "service_provider"
        assert storage.get(USER_ID_KEY) == "db-1"
        assert storage.get(ID_TOKEN_KEY) == "id-token-1"

    async def test_missing_backend_name_falls_back_to_firebase(self):
        store = _store(
            _profile_handler(user={"id": "db-1", "displayName": None, "role": "consumer"}),
            InMemoryStorage(),
        )
        state = await store.on_identity_changed(IDENTITY)
        assert state.user.display_name == "Firebase Name"

    async def test_profile_failure_uses_cached_role(self):
        storage = InMemoryStorage({ROLE_KEY: "consumer"})
        store = _store(_profile_handler(status=401), storage)

        state = await store.on_identity_changed(IDENTITY)

        assert state.loading is False
        assert state.user.uid == "uid-1"
        assert state.user.role == "consumer"
        assert state.user.display_name == "Firebase Name"

    async def test_profile_failure_without_cache_has_no_role(self):
        store = _store(_profile_handler(status=500), InMemoryStorage())
        state = await store.on_identity_changed(IDENTITY)
        assert state.user.role is None

    async def test_network_failure_falls_back(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("down", request=request)

        store = _store(handler, InMemoryStorage({ROLE_KEY: "consumer"}))
        state = await store.on_identity_changed(IDENTITY)
        assert state.user.role == "consumer"

    async def test_sign_out_clears_storage(self):
        storage = InMemoryStorage(
            {ROLE_KEY: "consumer", USER_ID_KEY: "db-1", ID_TOKEN_KEY: "tok", "other": "x"}
        )
        store = _store(_profile_handler(), storage)

        state = await store.on_identity_changed(None)

        assert state.user is None
        assert state.loading is False
        assert ROLE_KEY not in storage
        assert USER_ID_KEY not in storage
        assert ID_TOKEN_KEY not in storage
        assert storage.get("other") == "x"

    async def test_listeners_and_unsubscribe(self):
        store = _store(_profile_handler(user={"role": "consumer"}), InMemoryStorage())
        received = []
        unsubscribe = store.subscribe(received.append)

        await store.on_identity_changed(IDENTITY)
        unsubscribe()
        await store.on_identity_changed(None)

        assert len(received) == 1
        assert received[0].user.role == "consumer"


async def test_guard_follows_store():
    store = _store(_profile_handler(user={"role": "consumer"}), InMemoryStorage())
    navigations: list[str] = []
    guard = RouteGuard(navigations.append, allowed_roles=["service_provider"])

    detach = guard.attach(store)
    assert guard.status is GateStatus.CHECKING

    await store.on_identity_changed(IDENTITY)
    assert navigations == ["/dashboard"]

    detach()
    await store.on_identity_changed(None)
    assert navigations == ["/dashboard"]

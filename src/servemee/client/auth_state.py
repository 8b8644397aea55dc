"""Client-side authentication state.

``AuthStateStore`` is fed identity changes from the Firebase SDK
(``onAuthStateChanged``). For a signed-in identity it resolves the backend
profile to learn the user's role; when that lookup fails the last role seen
is used. Signing out clears every cached value.
"""

import asyncio
from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol

from loguru import logger

from src.servemee.client.api import ApiError, BackendApi
from src.servemee.client.storage import (
    AUTH_KEYS,
    ID_TOKEN_KEY,
    ROLE_KEY,
    USER_ID_KEY,
    KeyValueStorage,
)


class Identity(Protocol):
    """The signed-in Firebase user as the SDK reports it."""

    uid: str
    email: str | None
    display_name: str | None

    async def get_id_token(self) -> str: ...


@dataclass(frozen=True)
class SignedInIdentity:
    uid: str
    id_token: str
    email: str | None = None
    display_name: str | None = None

    async def get_id_token(self) -> str:
        return self.id_token


@dataclass(frozen=True)
class AuthUser:
    uid: str
    email: str | None
    display_name: str | None
    role: str | None


@dataclass(frozen=True)
class AuthState:
    user: AuthUser | None = None
    loading: bool = True


Listener = Callable[[AuthState], None]


class AuthStateStore:
    def __init__(self, api: BackendApi, storage: KeyValueStorage) -> None:
        self._api = api
        self._storage = storage
        self._state = AuthState()
        self._listeners: list[Listener] = []
        self._lock = asyncio.Lock()

    @property
    def state(self) -> AuthState:
        return self._state

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call ``listener`` on every state change; returns an unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _publish(self, state: AuthState) -> None:
        self._state = state
        for listener in list(self._listeners):
            listener(state)

    async def on_identity_changed(self, identity: Identity | None) -> AuthState:
        """Resolve the app user for ``identity`` (``None`` when signed out)."""
        async with self._lock:
            if identity is None:
                for key in AUTH_KEYS:
                    self._storage.remove(key)
                state = AuthState(user=None, loading=False)
            else:
                state = AuthState(user=await self._resolve(identity), loading=False)
            self._publish(state)
            return state

    async def _resolve(self, identity: Identity) -> AuthUser:
        id_token = await identity.get_id_token()
        try:
            body = await self._api.get("/auth/profile", token=id_token)
            backend_user = body["user"]
            user = AuthUser(
                uid=identity.uid,
                email=identity.email,
                display_name=backend_user.get("displayName") or identity.display_name,
                role=backend_user.get("role"),
            )
        except (ApiError, KeyError, TypeError, AttributeError) as exc:
            logger.warning("Failed to fetch user profile: {}", exc)
            return AuthUser(
                uid=identity.uid,
                email=identity.email,
                display_name=identity.display_name,
                role=self._storage.get(ROLE_KEY),
            )

        if user.role:
            self._storage.set(ROLE_KEY, user.role)
        if backend_user.get("id"):
            self._storage.set(USER_ID_KEY, str(backend_user["id"]))
        self._storage.set(ID_TOKEN_KEY, id_token)
        return user

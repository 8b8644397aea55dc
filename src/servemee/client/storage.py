"""Key/value storage for values cached between client sessions."""

from typing import Protocol

ROLE_KEY = "userRole"
USER_ID_KEY = "userId"
ID_TOKEN_KEY = "firebaseIdToken"

AUTH_KEYS = (ID_TOKEN_KEY, ROLE_KEY, USER_ID_KEY)


class KeyValueStorage(Protocol):
    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def remove(self, key: str) -> None: ...


class InMemoryStorage:
    """Process-local storage; the default when no persistent store is supplied."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def __contains__(self, key: str) -> bool:
        return key in self._data

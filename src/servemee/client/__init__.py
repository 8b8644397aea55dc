"""Client-side auth helpers: Firebase app setup, auth state and route guard."""

from .api import ApiError, BackendApi
from .auth_state import AuthState, AuthStateStore, AuthUser, SignedInIdentity
from .firebase_app import FirebaseApp, FirebaseAppRegistry, FirebaseOptions
from .route_guard import (
    GateDecision,
    GateStatus,
    RedirectReason,
    RenderDecision,
    RenderKind,
    RouteGuard,
)
from .storage import InMemoryStorage, KeyValueStorage

__all__ = [
    "ApiError",
    "AuthState",
    "AuthStateStore",
    "AuthUser",
    "BackendApi",
    "FirebaseApp",
    "FirebaseAppRegistry",
    "FirebaseOptions",
    "GateDecision",
    "GateStatus",
    "InMemoryStorage",
    "KeyValueStorage",
    "RedirectReason",
    "RenderDecision",
    "RenderKind",
    "RouteGuard",
    "SignedInIdentity",
]

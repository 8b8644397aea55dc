"""Route guard deciding whether protected content may render.

The guard moves from ``checking`` to ``authorized`` or ``redirecting`` once
the auth state has loaded, and is re-evaluated whenever the auth state or the
allowed roles change. Entering ``redirecting`` issues one navigation; the
same redirect is not repeated while it stays in effect.

Missing authentication and a role mismatch render the same way. The cause is
kept on the decision for callers and logs.
"""

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from enum import StrEnum

from loguru import logger

from src.servemee.client.auth_state import AuthState, AuthStateStore
from src.servemee.runtime.context import get_config

Navigate = Callable[[str], None]


class GateStatus(StrEnum):
    CHECKING = "checking"
    AUTHORIZED = "authorized"
    REDIRECTING = "redirecting"


class RedirectReason(StrEnum):
    UNAUTHENTICATED = "unauthenticated"
    ROLE_MISMATCH = "role_mismatch"


@dataclass(frozen=True)
class GateDecision:
    status: GateStatus
    redirect_to: str | None = None
    reason: RedirectReason | None = None


class RenderKind(StrEnum):
    LOADING = "loading"
    REDIRECTING = "redirecting"
    CONTENT = "content"


@dataclass(frozen=True)
class RenderDecision:
    kind: RenderKind
    message: str | None = None


_CHECKING = GateDecision(GateStatus.CHECKING)
_AUTHORIZED = GateDecision(GateStatus.AUTHORIZED)


class RouteGuard:
    def __init__(
        self,
        navigate: Navigate,
        allowed_roles: Sequence[str] = (),
        redirect_to: str | None = None,
        role_fallback: str | None = None,
    ) -> None:
        client_cfg = get_config().client
        self._navigate = navigate
        self._allowed_roles = tuple(allowed_roles)
        self._redirect_to = redirect_to or client_cfg.login_path
        self._role_fallback = role_fallback or client_cfg.role_fallback_path
        self._auth: AuthState | None = None
        self._decision = _CHECKING

    @property
    def decision(self) -> GateDecision:
        return self._decision

    @property
    def status(self) -> GateStatus:
        return self._decision.status

    def evaluate(self, auth: AuthState) -> GateDecision:
        """Decide for ``auth`` without side effects."""
        if auth.loading:
            return _CHECKING
        if auth.user is None:
            return GateDecision(
                GateStatus.REDIRECTING, self._redirect_to, RedirectReason.UNAUTHENTICATED
            )
        if self._allowed_roles and auth.user.role not in self._allowed_roles:
            return GateDecision(
                GateStatus.REDIRECTING, self._role_fallback, RedirectReason.ROLE_MISMATCH
            )
        return _AUTHORIZED

    def update(
        self,
        auth: AuthState | None = None,
        allowed_roles: Sequence[str] | None = None,
    ) -> GateDecision:
        """Feed new inputs and re-evaluate; navigates when a new redirect begins."""
        if auth is not None:
            self._auth = auth
        if allowed_roles is not None:
            self._allowed_roles = tuple(allowed_roles)
        if self._auth is None:
            return self._decision

        previous = self._decision
        decision = self.evaluate(self._auth)
        self._decision = decision

        if decision.status is GateStatus.REDIRECTING and decision != previous:
            logger.info(
                "Redirecting to {} ({})", decision.redirect_to, decision.reason
            )
            self._navigate(decision.redirect_to)
        return decision

    def render(self) -> RenderDecision:
        if self._auth is None or self._auth.loading:
            return RenderDecision(RenderKind.LOADING, "Checking authentication...")
        if self._decision.status is GateStatus.AUTHORIZED:
            return RenderDecision(RenderKind.CONTENT)
        return RenderDecision(RenderKind.REDIRECTING, "Redirecting...")

    def attach(self, store: AuthStateStore) -> Callable[[], None]:
        """Follow ``store``; returns a function that detaches the guard."""
        self.update(auth=store.state)
        return store.subscribe(lambda state: self.update(auth=state))

"""FastAPI dependency implementations."""

from __future__ import annotations

from collections.abc import Iterator

from fastapi import Depends, HTTPException, Request
from loguru import logger
from sqlmodel import Session

from src.servemee.api.http.app_data import ApplicationDependencies
from src.servemee.core.services import (
    FirebaseIdentityClient,
    FirebaseTokenVerifier,
    UserManagementService,
)
from src.servemee.entities.core.user import User, UserRepository, UserRole


def _app_deps(request: Request) -> ApplicationDependencies:
    return request.app.state.app_dependencies


def get_db_session(request: Request) -> Iterator[Session]:
    """Yield a database session that is closed when the request finishes."""
    session = _app_deps(request).database_service.get_session()
    try:
        yield session
    finally:
        session.close()


def get_token_verifier(request: Request) -> FirebaseTokenVerifier:
    """Get the Firebase ID token verifier."""
    return _app_deps(request).token_verifier


def get_identity_client(request: Request) -> FirebaseIdentityClient:
    """Get the Firebase REST sign-in client."""
    return _app_deps(request).identity_client


def get_user_management_service(
    db_session: Session = Depends(get_db_session),
    token_verifier: FirebaseTokenVerifier = Depends(get_token_verifier),
    identity_client: FirebaseIdentityClient = Depends(get_identity_client),
) -> UserManagementService:
    return UserManagementService(db_session, token_verifier, identity_client)


def get_bearer_token(request: Request) -> str:
    auth_header = request.headers.get("Authorization", "")
    scheme, _, token = auth_header.partition(" ")
    if scheme != "Bearer" or not token.strip():
        raise HTTPException(status_code=401, detail="Authentication token missing")
    return token.strip()


async def get_current_user(
    request: Request,
    token: str = Depends(get_bearer_token),
    db: Session = Depends(get_db_session),
    token_verifier: FirebaseTokenVerifier = Depends(get_token_verifier),
) -> User:
    """Authenticate the request with a Firebase ID token.

    Unlike login, no user is provisioned here: the token must belong to a user
    that already exists in the database.
    """
    claims = await token_verifier.verify_id_token(token)

    user = UserRepository(db).get_by_firebase_uid(claims.uid)
    if user is None:
        logger.info("Valid token for unknown user", firebase_uid=claims.uid)
        raise HTTPException(status_code=401, detail="User not found in database")
    if not user.is_active:
        raise HTTPException(status_code=403, detail="User account is disabled")

    request.state.claims = claims
    request.state.uid = claims.uid
    return user


def require_roles(*roles: UserRole):
    """Create a dependency that admits only users holding one of ``roles``."""
    allowed = frozenset(roles)

    async def dep(user: User = Depends(get_current_user)) -> User:
        if user.role not in allowed:
            logger.info(
                "Role check failed",
                user_id=user.id,
                role=str(user.role),
                required=sorted(allowed),
            )
            raise HTTPException(
                status_code=403,
                detail=f"Requires one of roles: {', '.join(sorted(allowed))}",
            )
        return user

    return dep

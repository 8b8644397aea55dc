"""Core services exports."""

# Database Service
from .database.db_session import DbSessionService

# Firebase Services
from .firebase.identity_client import FirebaseIdentityClient, SignInResult

# JWT Services
from .jwt.jwks import JWKSCache, JWKSCacheInMemory, JwksService
from .jwt.jwt_verify import FirebaseTokenVerifier

# User Services
from .user.user_management import LoginResult, UserManagementService

__all__ = [
    # JWT Services
    "FirebaseTokenVerifier",
    "JWKSCache",
    "JWKSCacheInMemory",
    "JwksService",
    # Firebase Services
    "FirebaseIdentityClient",
    "SignInResult",
    # User Services
    "LoginResult",
    "UserManagementService",
    # Database Service
    "DbSessionService",
]

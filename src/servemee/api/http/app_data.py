from dataclasses import dataclass

from src.servemee.core.services import (
    DbSessionService,
    FirebaseIdentityClient,
    FirebaseTokenVerifier,
    JWKSCacheInMemory,
    JwksService,
)


@dataclass
class ApplicationDependencies:
    jwks_cache: JWKSCacheInMemory
    jwks_service: JwksService
    token_verifier: FirebaseTokenVerifier
    identity_client: FirebaseIdentityClient
    database_service: DbSessionService

from .jwks import JWKSCache, JWKSCacheInMemory, JwksService
from .jwt_utils import JwtPreview, create_token_claims, preview_jwt
from .jwt_verify import FirebaseTokenVerifier

__all__ = [
    "FirebaseTokenVerifier",
    "JWKSCache",
    "JWKSCacheInMemory",
    "JwksService",
    "JwtPreview",
    "create_token_claims",
    "preview_jwt",
]

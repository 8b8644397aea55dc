"""Firebase ID token verification."""

import time

from authlib.jose import JoseError, JsonWebKey, jwt
from fastapi import HTTPException
from loguru import logger

from src.servemee.core.models.claims import TokenClaims
from src.servemee.core.services.jwt.jwks import JwksService
from src.servemee.core.services.jwt.jwt_utils import (
    JwtPreview,
    create_token_claims,
    preview_jwt,
)
from src.servemee.runtime.context import get_config


class FirebaseTokenVerifier:
    """Verifies ID tokens minted by Firebase Authentication for this project.

    A token is accepted when it is signed by one of the published securetoken
    keys with an allowed algorithm, was issued by
    ``https://securetoken.google.com/<project_id>`` for audience
    ``<project_id>``, is within its lifetime, and carries a non-empty ``sub``
    of at most 128 characters.
    """

    def __init__(self, jwks_service: JwksService):
        self._jwks_service = jwks_service

    async def verify_id_token(
        self, token: str, *, preview: JwtPreview | None = None
    ) -> TokenClaims:
        cfg = get_config()
        firebase = cfg.firebase
        pv = preview or preview_jwt(token)

        if pv.alg not in cfg.jwt.allowed_algorithms:
            raise HTTPException(status_code=401, detail="Disallowed JWT algorithm")
        if pv.iss != firebase.issuer:
            raise HTTPException(status_code=401, detail="Invalid issuer")

        jwks = await self._jwks_service.fetch_jwks(firebase.jwks_uri)
        keys = jwks.get("keys", [])
        if pv.kid:
            keys = [k for k in keys if k.get("kid") == pv.kid]
        if not keys:
            raise HTTPException(status_code=401, detail=f"No JWK matches kid={pv.kid}")

        claims_options = {
            "iss": {"essential": True, "values": [firebase.issuer]},
            "aud": {"essential": True, "values": [firebase.project_id]},
            "sub": {"essential": True},
            "exp": {"essential": True},
            "iat": {"essential": True},
        }
        try:
            claims = jwt.decode(
                token,
                JsonWebKey.import_key_set({"keys": keys}),
                claims_options=claims_options,
            )
            claims.validate(leeway=cfg.jwt.clock_skew)
        except (JoseError, ValueError) as exc:
            logger.debug("ID token rejected: {}", exc)
            raise HTTPException(status_code=401, detail=f"JWT error: {exc}") from exc

        now = int(time.time())
        for k in ("iat", "auth_time"):
            v = claims.get(k)
            if v is not None and int(v) > now + cfg.jwt.clock_skew:
                raise HTTPException(status_code=401, detail=f"Invalid {k} with skew")

        sub = claims.get("sub")
        if not isinstance(sub, str) or not sub:
            raise HTTPException(status_code=401, detail="Missing sub claim")
        if len(sub) > cfg.jwt.max_subject_length:
            raise HTTPException(status_code=401, detail="sub claim too long")

        return create_token_claims(token=token, claims=dict(claims))

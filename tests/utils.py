import base64
import time
from typing import Any

from authlib.jose import jwt


def oct_jwk(key: bytes, kid: str) -> dict[str, str]:
    return {
        "kty": "oct",
        "k": base64.urlsafe_b64encode(key).rstrip(b"=").decode("ascii"),
        "alg": "HS256",
        "kid": kid,
    }


def firebase_id_token(
    uid: str,
    *,
    key: bytes,
    kid: str,
    project_id: str,
    email: str | None = None,
    name: str | None = None,
    issued_at: int | None = None,
    expires_in: int = 3600,
    issuer: str | None = None,
    audience: str | None = None,
    alg: str = "HS256",
    **extra: Any,
) -> str:
    """Mint an ID token shaped like the ones Firebase Authentication issues."""
    now = issued_at if issued_at is not None else int(time.time())
    payload: dict[str, Any] = {
        "iss": issuer or f"https://securetoken.google.com/{project_id}",
        "aud": audience or project_id,
        "sub": uid,
        "user_id": uid,
        "iat": now,
        "auth_time": now,
        "exp": now + expires_in,
        "firebase": {"sign_in_provider": "password", "identities": {}},
    }
    if email is not None:
        payload["email"] = email
        payload["email_verified"] = True
    if name is not None:
        payload["name"] = name
    payload.update(extra)

    token = jwt.encode({"alg": alg, "kid": kid, "typ": "JWT"}, payload, key)
    return token.decode("ascii") if isinstance(token, bytes) else token

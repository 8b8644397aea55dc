import base64
import json
from dataclasses import dataclass
from typing import Any, Final

from fastapi import HTTPException

from src.servemee.core.models.claims import TokenClaims

# ---------------- limits ----------------
MAX_JWT_CHARS: Final = 4096
MAX_HEADER_BYTES: Final = 8 * 1024
MAX_PAYLOAD_BYTES: Final = 64 * 1024
_ALLOWED: Final = frozenset(
    "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789-_."
)  # no '='


def _split_compact_jwt(token: str) -> tuple[str, str, str]:
    if not token or len(token) > MAX_JWT_CHARS:
        raise HTTPException(status_code=401, detail="Invalid JWT size")
    if any(ch not in _ALLOWED for ch in token):
        raise HTTPException(status_code=401, detail="Invalid JWT characters")
    parts = token.split(".")
    if len(parts) != 3 or not all(parts):
        raise HTTPException(status_code=401, detail="Invalid JWT format")
    return parts[0], parts[1], parts[2]


def _b64url_json(seg: str, what: str, max_bytes: int) -> dict[str, Any]:
    pad = (-len(seg)) % 4
    try:
        raw = base64.urlsafe_b64decode((seg + "=" * pad).encode("ascii"))
    except ValueError as e:
        raise HTTPException(
            status_code=401, detail=f"Invalid base64url in {what}"
        ) from e
    if len(raw) > max_bytes:
        raise HTTPException(status_code=401, detail=f"{what} too large")
    try:
        obj = json.loads(raw.decode("utf-8"))
    except UnicodeDecodeError as e:
        raise HTTPException(status_code=401, detail=f"Non-UTF8 {what}") from e
    except json.JSONDecodeError as e:
        raise HTTPException(status_code=401, detail=f"Invalid JSON in {what}") from e
    if not isinstance(obj, dict):
        raise HTTPException(status_code=401, detail=f"{what} must be a JSON object")
    return obj


@dataclass(frozen=True)
class JwtPreview:
    header: dict[str, Any]
    claims: dict[str, Any]
    alg: str | None
    kid: str | None
    iss: str | None


def preview_jwt(token: str) -> JwtPreview:
    """Decode header and payload without verifying the signature."""
    h_seg, p_seg, _ = _split_compact_jwt(token)
    header = _b64url_json(h_seg, "JWT header", MAX_HEADER_BYTES)
    claims = _b64url_json(p_seg, "JWT payload", MAX_PAYLOAD_BYTES)
    iss = claims.get("iss")
    return JwtPreview(
        header=header,
        claims=claims,
        alg=header.get("alg"),
        kid=header.get("kid"),
        iss=iss if isinstance(iss, str) else None,
    )


# claims mapped onto TokenClaims fields; everything else lands in custom_claims
_REGISTERED = {
    "iss",
    "sub",
    "aud",
    "exp",
    "iat",
    "auth_time",
    "user_id",
    "email",
    "email_verified",
    "name",
    "picture",
    "phone_number",
    "firebase",
}


def create_token_claims(token: str, claims: dict[str, Any]) -> TokenClaims:
    """Build ``TokenClaims`` from the verified payload of a Firebase ID token."""
    firebase = claims.get("firebase") or {}
    return TokenClaims(
        raw_token=token,
        uid=claims["sub"],
        issuer=claims["iss"],
        subject=claims["sub"],
        audience=claims["aud"],
        expires_at=int(claims["exp"]),
        issued_at=int(claims["iat"]),
        auth_time=claims.get("auth_time"),
        email=claims.get("email"),
        email_verified=bool(claims.get("email_verified", False)),
        name=claims.get("name"),
        picture=claims.get("picture"),
        phone_number=claims.get("phone_number"),
        sign_in_provider=firebase.get("sign_in_provider"),
        custom_claims={k: v for k, v in claims.items() if k not in _REGISTERED},
    )

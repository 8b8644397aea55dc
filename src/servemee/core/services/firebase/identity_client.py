"""Client for the Firebase Auth (Identity Toolkit) REST API."""

import httpx
from fastapi import HTTPException
from loguru import logger
from pydantic import BaseModel, ConfigDict, Field

from src.servemee.runtime.context import get_config

# Identity Toolkit error codes -> (status, client-facing detail)
_SIGN_IN_ERRORS: dict[str, tuple[int, str]] = {
    "INVALID_LOGIN_CREDENTIALS": (401, "Invalid email or password"),
    "EMAIL_NOT_FOUND": (401, "Invalid email or password"),
    "INVALID_PASSWORD": (401, "Invalid email or password"),
    "INVALID_EMAIL": (401, "Invalid email or password"),
    "USER_DISABLED": (401, "User account is disabled"),
    "TOO_MANY_ATTEMPTS_TRY_LATER": (429, "Too many failed attempts, try again later"),
}


class SignInResult(BaseModel):
    """Successful ``accounts:signInWithPassword`` response."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id_token: str = Field(alias="idToken")
    refresh_token: str | None = Field(default=None, alias="refreshToken")
    local_id: str = Field(alias="localId")
    email: str | None = None
    expires_in: int = Field(default=3600, alias="expiresIn")


def _error_code(response: httpx.Response) -> str:
    try:
        message = response.json().get("error", {}).get("message", "")
    except ValueError:
        return ""
    # e.g. "TOO_MANY_ATTEMPTS_TRY_LATER : Access to this account has been ..."
    return str(message).split(":", 1)[0].strip()


class FirebaseIdentityClient:
    """Signs users in with email and password on behalf of a client."""

    def __init__(self, transport: httpx.AsyncBaseTransport | None = None) -> None:
        self._transport = transport

    async def sign_in_with_password(self, email: str, password: str) -> SignInResult:
        firebase = get_config().firebase
        if not firebase.api_key:
            raise HTTPException(
                status_code=500, detail="Firebase API key not configured"
            )

        payload = {"email": email, "password": password, "returnSecureToken": True}
        try:
            async with httpx.AsyncClient(
                timeout=firebase.request_timeout, transport=self._transport
            ) as client:
                response = await client.post(
                    firebase.sign_in_endpoint,
                    params={"key": firebase.api_key},
                    json=payload,
                )
        except httpx.HTTPError as exc:
            logger.error("Firebase sign-in request failed: {}", exc)
            raise HTTPException(
                status_code=503, detail="Identity provider unavailable"
            ) from exc

        if response.is_success:
            return SignInResult.model_validate(response.json())

        code = _error_code(response)
        status, detail = _SIGN_IN_ERRORS.get(code, (401, "Authentication failed"))
        logger.info("Firebase rejected sign-in: {} (HTTP {})", code or "unknown", response.status_code)
        raise HTTPException(status_code=status, detail=detail)

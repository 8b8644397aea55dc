"""Authentication and profile endpoints."""

from typing import Any

from fastapi import APIRouter, Depends, Request, status

from src.servemee.api.http.deps import (
    get_current_user,
    get_user_management_service,
    require_roles,
)
from src.servemee.api.http.middleware.limiter import rate_limit
from src.servemee.core.services import UserManagementService
from src.servemee.core.validation import (
    LoginRequest,
    RegisterUserRequest,
    UpdateProfileRequest,
)
from src.servemee.entities.core.user import User, UserRole

router = APIRouter(tags=["auth"])


def user_payload(user: User) -> dict[str, Any]:
    return user.model_dump(mode="json", by_alias=True)


@router.post("/login", dependencies=[Depends(rate_limit())])
async def login(
    payload: LoginRequest,
    service: UserManagementService = Depends(get_user_management_service),
) -> dict[str, Any]:
    """Exchange credentials (or a client-obtained ID token) for the local user."""
    result = await service.login(payload)
    return {
        "message": "Login successful!",
        "accessToken": result.access_token,
        "user": user_payload(result.user),
    }


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(
    payload: RegisterUserRequest,
    service: UserManagementService = Depends(get_user_management_service),
) -> dict[str, Any]:
    """Create the local user for a Firebase account the client just created."""
    return user_payload(service.register_user(payload))


@router.get("/profile")
async def get_profile(
    request: Request, user: User = Depends(get_current_user)
) -> dict[str, Any]:
    return {
        "message": "Successfully accessed protected profile!",
        "user": user_payload(user),
        "firebaseUid": request.state.uid,
    }


@router.patch("/profile")
async def update_profile(
    payload: UpdateProfileRequest,
    user: User = Depends(get_current_user),
    service: UserManagementService = Depends(get_user_management_service),
) -> dict[str, Any]:
    updated = service.update_profile(user, payload)
    return {"message": "Profile updated successfully!", "user": user_payload(updated)}


@router.get("/test-role-check")
async def test_role_check(
    user: User = Depends(require_roles(UserRole.CONSUMER, UserRole.SERVICE_PROVIDER)),
) -> dict[str, Any]:
    return {
        "message": f"Role check successful! Your role is: {user.role}",
        "userId": user.id,
    }


@router.get("/consumer-dashboard")
async def consumer_dashboard(
    user: User = Depends(require_roles(UserRole.CONSUMER)),
) -> dict[str, Any]:
    return {"message": "Welcome to the Consumer Dashboard!", "user": user_payload(user)}


@router.get("/service-provider-dashboard")
async def service_provider_dashboard(
    user: User = Depends(require_roles(UserRole.SERVICE_PROVIDER)),
) -> dict[str, Any]:
    return {
        "message": "Welcome to the Service Provider Dashboard!",
        "user": user_payload(user),
    }

from .dto import (
    LoginRequest,
    RegisterUserRequest,
    UpdateProfileRequest,
    validate_login,
    validate_profile_update,
    validate_registration,
)
from .errors import DtoValidationError, FieldError, field_errors
from src.servemee.core.phone import UnsupportedRegionError, is_valid_phone_number, validate_phone_number

__all__ = [
    "DtoValidationError",
    "FieldError",
    "LoginRequest",
    "RegisterUserRequest",
    "UnsupportedRegionError",
    "UpdateProfileRequest",
    "field_errors",
    "is_valid_phone_number",
    "validate_login",
    "validate_phone_number",
    "validate_profile_update",
    "validate_registration",
]

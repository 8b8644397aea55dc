"""Request DTOs for the auth and profile endpoints.

Fields are exposed in camelCase (``phoneNumber``) and also accepted by their
snake_case name. The phone region comes from the validation context when one
is passed, otherwise from the active configuration.
"""

from typing import Annotated, Any

from pydantic import (
    AfterValidator,
    BaseModel,
    ConfigDict,
    EmailStr,
    Field,
    HttpUrl,
    TypeAdapter,
    ValidationError,
    ValidationInfo,
    field_validator,
)
from pydantic.alias_generators import to_camel

from src.servemee.core.validation.errors import DtoValidationError
from src.servemee.core.phone import validate_phone_number
from src.servemee.entities.core.user.entity import UserRole
from src.servemee.runtime.context import get_config

_http_url = TypeAdapter(HttpUrl)


def _check_url(value: str) -> str:
    try:
        _http_url.validate_python(value)
    except ValidationError as e:
        raise ValueError("Must be a valid http(s) URL") from e
    return value


ProfileUrl = Annotated[str, AfterValidator(_check_url)]


def _phone_region(info: ValidationInfo) -> str:
    context = info.context or {}
    return context.get("phone_region") or get_config().profile.phone_region


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class LoginRequest(_CamelModel):
    """Credentials posted to ``/auth/login``."""

    email: EmailStr
    # Firebase rejects passwords shorter than six characters
    password: str = Field(min_length=6)
    id_token: str | None = Field(
        default=None, description="Firebase ID token obtained by the client"
    )


class RegisterUserRequest(_CamelModel):
    """Registration of a user whose Firebase account already exists."""

    firebase_uid: str = Field(min_length=1, max_length=128)
    email: EmailStr
    display_name: str | None = Field(default=None, max_length=100)
    phone_number: str | None = Field(default=None, max_length=20)
    role: UserRole

    @field_validator("phone_number")
    @classmethod
    def _valid_phone(cls, value: str | None, info: ValidationInfo) -> str | None:
        if value is None:
            return value
        return validate_phone_number(value, _phone_region(info))


class UpdateProfileRequest(_CamelModel):
    """Partial profile update.

    Only the fields below may be sent; anything else rejects the whole request.
    Every field is optional. A field sent as ``null`` clears the stored value.
    """

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="forbid"
    )

    username: str | None = Field(default=None, max_length=50)
    email: EmailStr | None = None
    phone_number: str | None = Field(default=None, max_length=20)
    profile_picture_url: ProfileUrl | None = None
    display_name: str | None = Field(default=None, max_length=100)
    full_name: str | None = Field(default=None, max_length=100)

    @field_validator("phone_number")
    @classmethod
    def _valid_phone(cls, value: str | None, info: ValidationInfo) -> str | None:
        if value is None:
            return value
        return validate_phone_number(value, _phone_region(info))

    def changes(self) -> dict[str, Any]:
        """Column values for the fields present in the request."""
        return self.model_dump(exclude_unset=True)


def _validate(model: type[BaseModel], data: Any, phone_region: str | None):
    context = {"phone_region": phone_region} if phone_region else None
    try:
        return model.model_validate(data, context=context)
    except ValidationError as e:
        raise DtoValidationError.from_pydantic(e) from e


def validate_profile_update(
    data: Any, *, phone_region: str | None = None
) -> UpdateProfileRequest:
    return _validate(UpdateProfileRequest, data, phone_region)


def validate_login(data: Any) -> LoginRequest:
    return _validate(LoginRequest, data, None)


def validate_registration(
    data: Any, *, phone_region: str | None = None
) -> RegisterUserRequest:
    return _validate(RegisterUserRequest, data, phone_region)

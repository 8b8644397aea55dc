"""Login provisioning, registration and profile updates."""

import pytest
from fastapi import HTTPException
from sqlmodel import Session

from src.servemee.core.services import UserManagementService
from src.servemee.core.validation import (
    LoginRequest,
    RegisterUserRequest,
    UpdateProfileRequest,
)
from src.servemee.entities.core.user import User, UserRepository, UserRole


@pytest.mark.usefixtures("config_context")
class TestLogin:
    async def test_first_login_provisions_consumer(
        self, user_service: UserManagementService, identity_client_fake, session: Session
    ):
        identity_client_fake.add_account("new@example.com", "secret1", "new-uid")

        result = await user_service.login(
            LoginRequest(email="new@example.com", password="secret1")
        )

        assert result.user.firebase_uid == "new-uid"
        assert result.user.role == UserRole.CONSUMER
        assert result.user.email == "new@example.com"
        assert result.access_token
        assert UserRepository(session).get_by_firebase_uid("new-uid") is not None

    async def test_repeat_login_returns_same_user(
        self, user_service, identity_client_fake, consumer_user: User
    ):
        identity_client_fake.add_account("consumer@example.com", "secret1", "consumer-uid")

        result = await user_service.login(
            LoginRequest(email="consumer@example.com", password="secret1")
        )

        assert result.user.id == consumer_user.id
        assert result.user.display_name == "Casey Consumer"

    async def test_client_id_token_skips_password_exchange(
        self, user_service, identity_client_fake, id_token_factory
    ):
        token = id_token_factory("sdk-uid", email="sdk@example.com", name="Sam")

        result = await user_service.login(
            LoginRequest(email="sdk@example.com", password="secret1", id_token=token)
        )

        assert identity_client_fake.calls == []
        assert result.access_token == token
        assert result.user.display_name == "Sam"

    async def test_token_for_other_email_rejected(self, user_service, id_token_factory):
        token = id_token_factory("uid-x", email="someone@example.com")
        with pytest.raises(HTTPException) as exc_info:
            await user_service.login(
                LoginRequest(email="me@example.com", password="secret1", id_token=token)
            )
        assert exc_info.value.status_code == 401

    async def test_bad_password_propagates(self, user_service, identity_client_fake):
        identity_client_fake.add_account("a@example.com", "secret1", "uid-a")
        with pytest.raises(HTTPException) as exc_info:
            await user_service.login(LoginRequest(email="a@example.com", password="wrong!"))
        assert exc_info.value.status_code == 401

    async def test_login_with_email_owned_by_other_uid_conflicts(
        self, user_service, id_token_factory, consumer_user
    ):
        token = id_token_factory("different-uid", email="consumer@example.com")
        with pytest.raises(HTTPException) as exc_info:
            await user_service.login(
                LoginRequest(
                    email="consumer@example.com", password="secret1", id_token=token
                )
            )
        assert exc_info.value.status_code == 409


class TestRegister:
    def _request(self, **overrides) -> RegisterUserRequest:
        data = {
            "firebase_uid": "reg-uid",
            "email": "reg@example.com",
            "display_name": "Reggie",
            "role": UserRole.SERVICE_PROVIDER,
        }
        data.update(overrides)
        return RegisterUserRequest(**data)

    def test_register_creates_user(self, user_service, session):
        user = user_service.register_user(self._request(phone_number="9876543210"))

        assert user.role == UserRole.SERVICE_PROVIDER
        stored = UserRepository(session).get_by_firebase_uid("reg-uid")
        assert stored is not None
        assert stored.phone_number == "9876543210"

    @pytest.mark.parametrize(
        ("overrides", "detail"),
        [
            ({"firebase_uid": "consumer-uid"}, "User with this Firebase UID already exists"),
            ({"email": "consumer@example.com"}, "User with this email already exists"),
            ({"phone_number": "9876543210"}, "User with this phone number already exists"),
        ],
    )
    def test_duplicates_conflict(self, user_service, consumer_user, overrides, detail):
        with pytest.raises(HTTPException) as exc_info:
            user_service.register_user(self._request(**overrides))
        assert exc_info.value.status_code == 409
        assert exc_info.value.detail == detail


class TestUpdateProfile:
    def test_only_sent_fields_change(self, user_service, consumer_user, session):
        updated = user_service.update_profile(
            consumer_user, UpdateProfileRequest(username="casey", full_name="Casey J")
        )

        assert updated.username == "casey"
        assert updated.full_name == "Casey J"
        assert updated.display_name == "Casey Consumer"
        assert updated.email == "consumer@example.com"

    def test_null_clears_value(self, user_service, consumer_user):
        updated = user_service.update_profile(
            consumer_user, UpdateProfileRequest(display_name=None)
        )
        assert updated.display_name is None

    def test_empty_update_is_noop(self, user_service, consumer_user):
        assert user_service.update_profile(consumer_user, UpdateProfileRequest()) == consumer_user

    def test_keeping_own_email_is_allowed(self, user_service, consumer_user):
        updated = user_service.update_profile(
            consumer_user, UpdateProfileRequest(email="consumer@example.com")
        )
        assert updated.email == "consumer@example.com"

    @pytest.mark.parametrize(
        ("change", "detail"),
        [
            ({"email": "provider@example.com"}, "Email is already in use"),
            ({"username": "pat"}, "Username is already in use"),
        ],
    )
    def test_taken_values_conflict(
        self, user_service, consumer_user, provider_user, session, change, detail
    ):
        UserRepository(session).update(provider_user.model_copy(update={"username": "pat"}))
        session.commit()

        with pytest.raises(HTTPException) as exc_info:
            user_service.update_profile(consumer_user, UpdateProfileRequest(**change))

        assert exc_info.value.status_code == 409
        assert exc_info.value.detail == detail
        unchanged = UserRepository(session).get(consumer_user.id)
        assert unchanged.email == "consumer@example.com"

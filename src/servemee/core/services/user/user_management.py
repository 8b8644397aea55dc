from collections.abc import Callable
from dataclasses import dataclass

from fastapi import HTTPException
from loguru import logger
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session

from src.servemee.core.models.claims import TokenClaims
from src.servemee.core.services.firebase.identity_client import FirebaseIdentityClient
from src.servemee.core.services.jwt.jwt_verify import FirebaseTokenVerifier
from src.servemee.core.validation.dto import (
    LoginRequest,
    RegisterUserRequest,
    UpdateProfileRequest,
)
from src.servemee.entities.core.user.entity import User, UserRole
from src.servemee.entities.core.user.repository import UserRepository

# unique profile columns and how conflicts on them are reported
_UNIQUE_PROFILE_FIELDS = (
    ("email", "Email", UserRepository.get_by_email),
    ("phone_number", "Phone number", UserRepository.get_by_phone_number),
    ("username", "Username", UserRepository.get_by_username),
)


@dataclass(frozen=True)
class LoginResult:
    access_token: str
    user: User
    claims: TokenClaims


class UserManagementService:
    def __init__(
        self,
        db_session: Session,
        token_verifier: FirebaseTokenVerifier,
        identity_client: FirebaseIdentityClient,
    ):
        self._db_session = db_session
        self._user_repo = UserRepository(db_session)
        self._token_verifier = token_verifier
        self._identity_client = identity_client

    def _save(self, operation: Callable[[], User], conflict_detail: str) -> User:
        """Run a repository write and commit it; uniqueness violations become 409."""
        try:
            result = operation()
            self._db_session.commit()
        except IntegrityError as e:
            self._db_session.rollback()
            logger.warning("Uniqueness conflict: {}", e.orig)
            raise HTTPException(status_code=409, detail=conflict_detail) from e
        return result

    def get_by_firebase_uid(self, firebase_uid: str) -> User | None:
        return self._user_repo.get_by_firebase_uid(firebase_uid)

    async def login(self, request: LoginRequest) -> LoginResult:
        """Authenticate with Firebase and return the local user.

        A client that already signed in with the Firebase SDK sends its ID
        token; otherwise the email/password pair is exchanged for one. The
        token is verified either way, and the user row is provisioned on the
        first login.
        """
        id_token = request.id_token
        if not id_token:
            result = await self._identity_client.sign_in_with_password(
                request.email, request.password
            )
            id_token = result.id_token

        claims = await self._token_verifier.verify_id_token(id_token)
        if claims.email and claims.email.lower() != request.email.lower():
            raise HTTPException(
                status_code=401, detail="ID token does not belong to this email"
            )

        user = self.validate_and_create_user(
            claims.uid, email=claims.email or request.email, display_name=claims.name
        )
        return LoginResult(access_token=id_token, user=user, claims=claims)

    def validate_and_create_user(
        self,
        firebase_uid: str,
        email: str | None = None,
        display_name: str | None = None,
        role: UserRole | None = None,
    ) -> User:
        """Return the user owning ``firebase_uid``, creating it on first sight."""
        user = self._user_repo.get_by_firebase_uid(firebase_uid)
        if user is not None:
            logger.info("Existing user logged in", firebase_uid=firebase_uid)
            return user

        new_user = User(
            firebase_uid=firebase_uid,
            email=email,
            display_name=display_name,
            role=role or UserRole.CONSUMER,
        )
        created = self._save(
            lambda: self._user_repo.create(new_user),
            "A user with this email already exists",
        )
        logger.info("Provisioned new user", firebase_uid=firebase_uid, user_id=created.id)
        return created

    def register_user(self, request: RegisterUserRequest) -> User:
        """Create the local row for a Firebase account created by the client."""
        if self._user_repo.get_by_firebase_uid(request.firebase_uid):
            raise HTTPException(
                status_code=409, detail="User with this Firebase UID already exists"
            )
        if self._user_repo.get_by_email(request.email):
            raise HTTPException(
                status_code=409, detail="User with this email already exists"
            )
        if request.phone_number and self._user_repo.get_by_phone_number(
            request.phone_number
        ):
            raise HTTPException(
                status_code=409, detail="User with this phone number already exists"
            )

        new_user = User(
            firebase_uid=request.firebase_uid,
            email=request.email,
            display_name=request.display_name,
            phone_number=request.phone_number,
            role=request.role,
        )
        created = self._save(
            lambda: self._user_repo.create(new_user), "User already exists"
        )
        logger.info(
            "Registered user",
            firebase_uid=request.firebase_uid,
            user_id=created.id,
            role=str(created.role),
        )
        return created

    def update_profile(self, user: User, request: UpdateProfileRequest) -> User:
        """Apply the fields present in ``request`` to ``user``."""
        changes = request.changes()
        if not changes:
            return user

        for field, label, lookup in _UNIQUE_PROFILE_FIELDS:
            value = changes.get(field)
            if value is None:
                continue
            owner = lookup(self._user_repo, value)
            if owner is not None and owner.id != user.id:
                raise HTTPException(status_code=409, detail=f"{label} is already in use")

        updated = self._save(
            lambda: self._user_repo.update(user.model_copy(update=changes)),
            "Profile conflicts with an existing user",
        )
        logger.info("Updated profile", user_id=user.id, fields=sorted(changes))
        return updated

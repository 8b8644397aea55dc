"""User repository for data access operations."""

from datetime import UTC, datetime

from sqlmodel import Session, select

from .entity import User
from .table import UserTable

# attributes a caller may change on an existing row
_MUTABLE_FIELDS = (
    "email",
    "phone_number",
    "username",
    "display_name",
    "full_name",
    "profile_picture_url",
    "role",
    "is_active",
)


class UserRepository:
    """Data-access layer for users."""

    def __init__(self, session: Session) -> None:
        self._session = session

    @staticmethod
    def _to_entity(row: UserTable | None) -> User | None:
        if row is None:
            return None
        return User.model_validate(row, from_attributes=True)

    def _first_where(self, column, value) -> User | None:
        statement = select(UserTable).where(column == value)
        return self._to_entity(self._session.exec(statement).first())

    def get(self, user_id: str) -> User | None:
        return self._to_entity(self._session.get(UserTable, user_id))

    def get_by_firebase_uid(self, firebase_uid: str) -> User | None:
        return self._first_where(UserTable.firebase_uid, firebase_uid)

    def get_by_email(self, email: str) -> User | None:
        return self._first_where(UserTable.email, email)

    def get_by_phone_number(self, phone_number: str) -> User | None:
        return self._first_where(UserTable.phone_number, phone_number)

    def get_by_username(self, username: str) -> User | None:
        return self._first_where(UserTable.username, username)

    def list_all(self) -> list[User]:
        rows = self._session.exec(select(UserTable).order_by(UserTable.created_at)).all()
        return [User.model_validate(row, from_attributes=True) for row in rows]

    def create(self, user: User) -> User:
        row = UserTable(**user.model_dump())
        self._session.add(row)
        self._session.flush()
        self._session.refresh(row)
        return User.model_validate(row, from_attributes=True)

    def update(self, user: User) -> User:
        row = self._session.get(UserTable, user.id)
        if row is None:
            raise ValueError(f"User with id {user.id} not found")

        for field in _MUTABLE_FIELDS:
            setattr(row, field, getattr(user, field))
        row.updated_at = datetime.now(UTC)

        self._session.add(row)
        self._session.flush()
        self._session.refresh(row)
        return User.model_validate(row, from_attributes=True)

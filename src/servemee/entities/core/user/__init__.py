"""User entity module.

- User: Domain entity
- UserRole: Roles a user can hold
- UserTable: Database persistence model
- UserRepository: Data access layer
"""

from .entity import User, UserRole
from .repository import UserRepository
from .table import UserTable

__all__ = ["User", "UserRole", "UserTable", "UserRepository"]

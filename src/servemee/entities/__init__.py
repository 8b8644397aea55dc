"""Entities organized by business concept.

Each entity package contains:
- entity.py: Domain model
- table.py: Database persistence model
- repository.py: Data access layer
"""

from .core.user import User, UserRepository, UserRole, UserTable

__all__ = [
    "User",
    "UserRole",
    "UserTable",
    "UserRepository",
]

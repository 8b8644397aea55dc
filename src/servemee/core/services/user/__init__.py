from .user_management import LoginResult, UserManagementService

__all__ = ["LoginResult", "UserManagementService"]

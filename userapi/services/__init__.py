"""Business services."""

from userapi.services.user_service import UserService

__all__ = ["UserService"]

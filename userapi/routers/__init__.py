"""API routers package."""

from userapi.routers import users

__all__ = ["users"]

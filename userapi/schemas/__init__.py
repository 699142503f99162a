"""Pydantic schemas package."""

from userapi.schemas.base import BaseResponse
from userapi.schemas.user import UserCreate, UserResponse, UserUpdate

__all__ = [
    "BaseResponse",
    "UserCreate",
    "UserResponse",
    "UserUpdate",
]

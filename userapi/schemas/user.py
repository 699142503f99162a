"""Pydantic schemas for users."""

from typing import Annotated

from pydantic import BaseModel, Field

from userapi.schemas.base import BaseResponse

Name = Annotated[str, Field(min_length=1, max_length=100)]
Email = Annotated[str, Field(max_length=255)] | None
Age = Annotated[int, Field(ge=0)] | None


class UserBase(BaseModel):
    """Base user schema."""

    name: Name
    email: Email = None
    age: Age = None


class UserCreate(UserBase):
    """Schema for creating a user."""


class UserUpdate(UserBase):
    """Schema for replacing a user's fields (PUT semantics)."""


class UserResponse(BaseResponse):
    """Schema for user response."""

    id: int
    name: str
    email: str | None = None
    age: int | None = None

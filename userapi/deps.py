"""Common FastAPI dependencies for consistent type annotations.

Usage:
    from userapi.deps import UserServiceDep

    async def my_endpoint(service: UserServiceDep):
        ...

Tests swap the data access layer with
``app.dependency_overrides[get_user_mapper] = lambda: fake_mapper``.
"""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from userapi.database import get_db
from userapi.mappers import SqlUserMapper, UserMapper
from userapi.services import UserService

DbSession = Annotated[AsyncSession, Depends(get_db)]


def get_user_mapper(db: DbSession) -> UserMapper:
    return SqlUserMapper(db)


def get_user_service(mapper: Annotated[UserMapper, Depends(get_user_mapper)]) -> UserService:
    return UserService(mapper)


UserServiceDep = Annotated[UserService, Depends(get_user_service)]

__all__ = ["DbSession", "UserServiceDep", "get_user_mapper", "get_user_service"]

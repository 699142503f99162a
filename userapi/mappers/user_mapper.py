"""Data access for the ``users`` table.

Every statement is built with SQLAlchemy constructs, so values always travel
as bound parameters.
"""

from typing import Any, Protocol

from sqlalchemy import delete, insert, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from userapi.logger import get_logger, log_exception
from userapi.models import User

logger = get_logger(__name__)

users_table = User.__table__


class UserMapper(Protocol):
    """Data access contract for users."""

    async def find_all(self) -> list[User]: ...

    async def find_by_id(self, user_id: int) -> User | None: ...

    async def insert(self, user: User) -> int | None:
        """Insert ``user`` and return the store-generated id, or None if no row was written."""
        ...

    async def update(self, user: User) -> int:
        """Overwrite the row keyed by ``user.id``; return rows affected."""
        ...

    async def delete_by_id(self, user_id: int) -> int: ...


def _column_values(user: User) -> dict[str, Any]:
    return {"name": user.name, "email": user.email, "age": user.age}


class SqlUserMapper:
    """UserMapper backed by an AsyncSession.

    Mutations are committed one statement at a time; a failing statement is
    rolled back and the error propagates.
    """

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def find_all(self) -> list[User]:
        result = await self.session.execute(
            select(User).order_by(User.id).execution_options(populate_existing=True)
        )
        return list(result.scalars().all())

    async def find_by_id(self, user_id: int) -> User | None:
        result = await self.session.execute(
            select(User).where(User.id == user_id).execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def insert(self, user: User) -> int | None:
        stmt = insert(users_table).values(**_column_values(user)).returning(users_table.c.id)
        try:
            result = await self.session.execute(stmt)
            new_id = result.scalar_one_or_none()
            await self.session.commit()
        except SQLAlchemyError as exc:
            await self.session.rollback()
            log_exception(logger, exc, "User insert failed", name=user.name)
            raise
        return new_id

    async def update(self, user: User) -> int:
        stmt = (
            update(users_table)
            .where(users_table.c.id == user.id)
            .values(**_column_values(user))
        )
        return await self._execute_mutation(stmt, "User update failed", user_id=user.id)

    async def delete_by_id(self, user_id: int) -> int:
        stmt = delete(users_table).where(users_table.c.id == user_id)
        return await self._execute_mutation(stmt, "User delete failed", user_id=user_id)

    async def _execute_mutation(self, stmt: Any, context: str, **extra: Any) -> int:
        try:
            result = await self.session.execute(stmt)
            await self.session.commit()
        except SQLAlchemyError as exc:
            await self.session.rollback()
            log_exception(logger, exc, context, **extra)
            raise
        return result.rowcount

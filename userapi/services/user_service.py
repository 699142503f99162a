"""User service: a thin facade over the user mapper."""

from userapi.logger import get_logger
from userapi.mappers import UserMapper
from userapi.models import User

logger = get_logger(__name__)


class UserService:
    """Forwards user operations to a UserMapper.

    Mutations report the number of rows affected; absence is reported as
    ``None`` or ``0`` rather than raised.
    """

    def __init__(self, mapper: UserMapper) -> None:
        self.mapper = mapper

    async def list(self) -> list[User]:
        users = await self.mapper.find_all()
        logger.debug("Listed users", count=len(users))
        return users

    async def get_by_id(self, user_id: int) -> User | None:
        user = await self.mapper.find_by_id(user_id)
        logger.debug("Fetched user", user_id=user_id, found=user is not None)
        return user

    async def create(self, user: User) -> int:
        """Insert ``user`` and write the generated id back onto it."""
        new_id = await self.mapper.insert(user)
        if new_id is None:
            logger.debug("User insert affected no rows")
            return 0
        user.id = new_id
        logger.debug("Created user", user_id=new_id)
        return 1

    async def update(self, user: User) -> int:
        if user.id is None:
            raise ValueError("Cannot update a user without an id")
        rows = await self.mapper.update(user)
        logger.debug("Updated user", user_id=user.id, rows=rows)
        return rows

    async def delete_by_id(self, user_id: int) -> int:
        rows = await self.mapper.delete_by_id(user_id)
        logger.debug("Deleted user", user_id=user_id, rows=rows)
        return rows

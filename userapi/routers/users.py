"""User management API router."""

from typing import Annotated

from fastapi import APIRouter, Path, Request, Response, status

from userapi.deps import UserServiceDep
from userapi.logger import get_logger
from userapi.models import User
from userapi.schemas import UserCreate, UserResponse, UserUpdate
from userapi.utils import raise_internal_error, raise_not_found

router = APIRouter(prefix="/users", tags=["users"])

logger = get_logger(__name__)

# Ids outside the INTEGER column range cannot exist in the store
MAX_USER_ID = 2**31 - 1
UserId = Annotated[int, Path(ge=1, le=MAX_USER_ID)]


@router.get("", response_model=list[UserResponse], response_model_exclude_none=True)
async def list_users(service: UserServiceDep) -> list[UserResponse]:
    """List all users."""
    users = await service.list()
    return [UserResponse.model_validate(user) for user in users]


@router.get("/{user_id}", response_model=UserResponse, response_model_exclude_none=True)
async def get_user(user_id: UserId, service: UserServiceDep) -> UserResponse:
    """Get user by ID."""
    user = await service.get_by_id(user_id)
    if user is None:
        raise_not_found("User")
    return UserResponse.model_validate(user)


@router.post(
    "",
    response_model=UserResponse,
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
)
async def create_user(
    user_data: UserCreate,
    request: Request,
    response: Response,
    service: UserServiceDep,
) -> UserResponse:
    """Create a new user; the Location header points at the new resource."""
    user = User(**user_data.model_dump())
    rows = await service.create(user)
    if rows == 0:
        logger.error("User insert affected no rows", name=user.name)
        raise_internal_error("Failed to create user")

    response.headers["Location"] = str(request.app.url_path_for("get_user", user_id=str(user.id)))
    logger.info("User created", user_id=user.id)
    return UserResponse.model_validate(user)


@router.put("/{user_id}", response_model=UserResponse, response_model_exclude_none=True)
async def update_user(user_id: UserId, user_data: UserUpdate, service: UserServiceDep) -> UserResponse:
    """Replace user details. The path id wins over any id in the body."""
    user = User(id=user_id, **user_data.model_dump())
    rows = await service.update(user)
    if rows == 0:
        raise_not_found("User")
    logger.info("User updated", user_id=user_id)
    return UserResponse.model_validate(user)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(user_id: UserId, service: UserServiceDep) -> Response:
    """Delete a user."""
    rows = await service.delete_by_id(user_id)
    if rows == 0:
        raise_not_found("User")
    logger.info("User deleted", user_id=user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

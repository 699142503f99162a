"""Data access layer."""

from userapi.mappers.user_mapper import SqlUserMapper, UserMapper

__all__ = ["SqlUserMapper", "UserMapper"]

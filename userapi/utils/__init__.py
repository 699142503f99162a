"""Utility functions and helpers."""

from .exceptions import raise_internal_error, raise_not_found

__all__ = [
    "raise_internal_error",
    "raise_not_found",
]

"""
Access policy for the shutdown tracker.

This module contains pure functions deriving a user's effective
permission level and the guards every mutating operation calls
before it touches storage or geocoding.
"""

from typing import Optional

from .errors import ShutdownPermissionError
from .models import ACCESS_LEVELS, AccessLevel, UserProfile

MUTATING_LEVELS = ("user", "admin")


def effective_level(user: Optional[UserProfile]) -> AccessLevel:
    """
    Derive the effective access level of a user.

    ``role == "admin"`` wins; otherwise the stored access level, and
    ``driver`` when that is missing or not a known level.
    """
    if user is None:
        return "driver"
    if user.role == "admin":
        return "admin"
    if user.access_level in ACCESS_LEVELS:
        return user.access_level  # type: ignore[return-value]
    return "driver"


def can_mutate(level: str) -> bool:
    return level in MUTATING_LEVELS


def can_manage_users(user: Optional[UserProfile]) -> bool:
    """Only account admins (role, not access level) manage other users."""
    return user is not None and user.role == "admin"


def require_mutate(user: Optional[UserProfile], operation: str) -> AccessLevel:
    """
    Guard for create / update / clear / delete.

    Returns:
        The caller's effective level

    Raises:
        ShutdownPermissionError: the caller is view-only
    """
    level = effective_level(user)
    if not can_mutate(level):
        who = user.email if user else "anonymous"
        raise ShutdownPermissionError(
            f"{who} ({level}) is not allowed to {operation} shutdowns"
        )
    return level


def require_user_admin(user: Optional[UserProfile], operation: str) -> None:
    """
    Guard for user administration.

    Raises:
        ShutdownPermissionError: the caller is not an account admin
    """
    if not can_manage_users(user):
        who = user.email if user else "anonymous"
        raise ShutdownPermissionError(f"{who} is not allowed to {operation}")

"""
User administration for the shutdown tracker.

Account admins list users and change their access level; the store
only ever receives ``access_level`` updates from here.
"""

from typing import List

from shutdown_tracker.core.access import effective_level, require_user_admin
from shutdown_tracker.core.errors import ShutdownValidationError
from shutdown_tracker.core.models import ACCESS_LEVELS, UserProfile
from shutdown_tracker.ports.storage import UserStorePort
from shutdown_tracker.observability import metrics
from shutdown_tracker.observability.logging_setup import get_logger

log = get_logger("shutdowns.users")


class UserAdministration:
    """Access level management, restricted to account admins"""

    def __init__(self, users: UserStorePort):
        self.users = users

    async def list_users(self, actor: UserProfile) -> List[UserProfile]:
        require_user_admin(actor, "list users")
        return await self.users.list("-created_at")

    async def set_access_level(self, actor: UserProfile, user_id: str, level: str) -> UserProfile:
        """
        Change a user's access level.

        Raises:
            ShutdownPermissionError: the actor is not an account admin
            ShutdownValidationError: unknown access level
            RecordNotFoundError: no such user
        """
        require_user_admin(actor, "change access levels")
        if level not in ACCESS_LEVELS:
            raise ShutdownValidationError(f"unknown access level {level!r}")

        updated = await self.users.update(user_id, {"access_level": level})
        metrics.access_level_changes.labels(level=level).inc()
        log.info("access level changed", user_id=user_id, level=level,
                 effective=effective_level(updated), actor=actor.email)
        return updated

"""
Storage port interfaces.

This module defines the protocols for the entity store holding
shutdown records and user profiles.
"""

from typing import Any, Dict, List, Optional, Protocol
from shutdown_tracker.core.models import ShutdownRecord, UserProfile

class ShutdownStorePort(Protocol):
    """Shutdown record store port"""

    async def list(self, order: str = "-created_at") -> List[ShutdownRecord]:
        """
        List every record.

        Args:
            order: field to sort by, "-" prefix for descending

        Returns:
            All records in the requested order
        """
        ...

    async def get(self, record_id: str) -> ShutdownRecord:
        """
        Fetch one record.

        Raises:
            RecordNotFoundError: no record with this id
        """
        ...

    async def create(self, fields: Dict[str, Any]) -> ShutdownRecord:
        """
        Persist a new record; storage assigns the id.

        Args:
            fields: record fields without ``id``

        Returns:
            The stored record
        """
        ...

    async def update(self, record_id: str, patch: Dict[str, Any]) -> ShutdownRecord:
        """
        Merge fields into an existing record.

        Raises:
            RecordNotFoundError: no record with this id
        """
        ...

    async def delete(self, record_id: str) -> None:
        """
        Remove a record for good.

        Raises:
            RecordNotFoundError: no record with this id
        """
        ...

class UserStorePort(Protocol):
    """User profile store port"""

    async def list(self, order: str = "-created_at") -> List[UserProfile]:
        ...

    async def get_by_email(self, email: str) -> Optional[UserProfile]:
        ...

    async def update(self, user_id: str, patch: Dict[str, Any]) -> UserProfile:
        """
        Update a profile (only ``access_level`` is written by the core).

        Raises:
            RecordNotFoundError: no user with this id
        """
        ...

    async def add(self, profile: UserProfile) -> UserProfile:
        """
        Register a profile; storage assigns the id.

        Returns:
            The stored profile, or the existing one for that email
        """
        ...

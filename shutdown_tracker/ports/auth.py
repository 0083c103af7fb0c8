"""
Auth port interface.

This module defines the protocol for the authentication collaborator.
"""

from typing import Optional, Protocol
from shutdown_tracker.core.models import UserProfile

class AuthPort(Protocol):
    """Authentication collaborator port"""

    async def current_user(self) -> Optional[UserProfile]:
        """
        Resolve the calling principal.

        Returns:
            The user's profile, or None when not authenticated
        """
        ...

    async def logout(self) -> str:
        """
        End the session.

        Returns:
            URL the client should follow to finish signing out
        """
        ...

    def login_url(self, return_to: str = "/") -> str:
        """URL that sends an unauthenticated client to the login page."""
        ...

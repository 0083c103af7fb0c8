"""
Header-based authentication adapter.

The service sits behind an auth proxy that signs users in and forwards
the verified email address in a request header. This adapter turns
that address into a stored user profile, registering first-time users
with no access level (view-only).
"""

from datetime import datetime, timezone
from typing import Mapping, Optional
from urllib.parse import quote

from shutdown_tracker.core.models import UserProfile
from shutdown_tracker.ports.storage import UserStorePort
from shutdown_tracker.settings import AuthConfig
from shutdown_tracker.observability.logging_setup import get_logger

log = get_logger("shutdowns.auth")


class HeaderAuth:
    """Per-request auth collaborator backed by the proxy's identity header"""

    def __init__(self, users: UserStorePort, headers: Mapping[str, str], config: AuthConfig,
                 auto_register: bool = True):
        """
        Args:
            users: user profile store (``get_by_email`` and ``add``)
            headers: incoming request headers
            config: auth section of the settings
            auto_register: create a profile for unknown but authenticated emails
        """
        self.users = users
        self.config = config
        self.auto_register = auto_register
        raw = headers.get(config.user_header) or headers.get(config.user_header.lower())
        self.email: Optional[str] = raw.strip() if raw and raw.strip() else None

    async def current_user(self) -> Optional[UserProfile]:
        if self.email is None:
            return None

        profile = await self.users.get_by_email(self.email)
        if profile is None and self.auto_register:
            profile = await self.users.add(UserProfile(
                email=self.email,
                created_at=datetime.now(timezone.utc),
            ))
            log.info("first sign-in, profile registered", email=self.email)
        return profile

    async def logout(self) -> str:
        log.info("sign-out requested", email=self.email)
        return self.config.logout_url

    def login_url(self, return_to: str = "/") -> str:
        separator = "&" if "?" in self.config.login_url else "?"
        return f"{self.config.login_url}{separator}rd={quote(return_to, safe='/')}"

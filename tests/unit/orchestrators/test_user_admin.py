"""
User administration unit tests
"""

import pytest
from unittest.mock import AsyncMock

from shutdown_tracker.core.errors import (
    RecordNotFoundError,
    ShutdownPermissionError,
    ShutdownValidationError,
)
from shutdown_tracker.core.models import UserProfile
from shutdown_tracker.orchestrators.user_admin import UserAdministration


@pytest.fixture
def users():
    store = AsyncMock()
    store.list.return_value = [UserProfile(id="u1", email="one@example.com")]

    async def update(user_id, patch):
        return UserProfile(id=user_id, email="one@example.com", **patch)

    store.update.side_effect = update
    return store


class TestUserAdministration:
    """UserAdministration tests"""

    @pytest.mark.asyncio
    async def test_admin_lists_users(self, users, account_admin):
        result = await UserAdministration(users).list_users(account_admin)
        assert [u.email for u in result] == ["one@example.com"]
        users.list.assert_awaited_once_with("-created_at")

    @pytest.mark.asyncio
    async def test_access_level_admin_is_not_account_admin(self, users):
        level_admin = UserProfile(email="lvl@example.com", access_level="admin")
        with pytest.raises(ShutdownPermissionError):
            await UserAdministration(users).list_users(level_admin)
        users.list.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_set_access_level(self, users, account_admin):
        updated = await UserAdministration(users).set_access_level(account_admin, "u1", "user")
        assert updated.access_level == "user"
        users.update.assert_awaited_once_with("u1", {"access_level": "user"})

    @pytest.mark.asyncio
    async def test_unknown_level_rejected(self, users, account_admin):
        with pytest.raises(ShutdownValidationError):
            await UserAdministration(users).set_access_level(account_admin, "u1", "root")
        users.update.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_editor_cannot_change_levels(self, users, editor):
        with pytest.raises(ShutdownPermissionError):
            await UserAdministration(users).set_access_level(editor, "u1", "admin")
        users.update.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_missing_user(self, users, account_admin):
        users.update.side_effect = RecordNotFoundError("nope", kind="user")
        with pytest.raises(RecordNotFoundError, match="user nope not found"):
            await UserAdministration(users).set_access_level(account_admin, "nope", "driver")

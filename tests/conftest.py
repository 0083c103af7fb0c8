"""
Test configuration and fixtures.

This module provides the pytest configuration and the fixtures shared
by the unit tests: users at each access level, sample records and
mocked ports.
"""

import pytest
import inspect
import tempfile
import os
from datetime import datetime, timezone
from unittest.mock import AsyncMock

from shutdown_tracker.settings import Settings
from shutdown_tracker.core.models import ActivityEntry, ShutdownRecord, UserProfile

FIXED_NOW = datetime(2025, 1, 15, 12, 0, tzinfo=timezone.utc)


def make_record(**overrides) -> ShutdownRecord:
    """Build a circle record, overriding any field."""
    data = {
        "id": "rec-1",
        "title": "200km radius of Regina",
        "geometry_type": "circle",
        "center_lat": 50.45,
        "center_lng": -104.61,
        "radius_km": 200.0,
        "reason": "weather",
        "action": "shutdown_all",
        "status": "active",
        "region": "Saskatchewan",
        "notes": "",
        "created_by": "owner@example.com",
        "created_at": FIXED_NOW,
        "activity_log": (
            ActivityEntry(action="created", user="owner@example.com", timestamp=FIXED_NOW,
                          details="Created shutdown: 200km radius of Regina"),
        ),
    }
    data.update(overrides)
    return ShutdownRecord(**data)


def make_line(**overrides) -> ShutdownRecord:
    data = {
        "id": "line-1",
        "title": "Regina to Saskatoon",
        "geometry_type": "line",
        "center_lat": None,
        "center_lng": None,
        "radius_km": None,
        "coordinates": [[50.45, -104.61], [52.13, -106.67]],
        "from_city": "Regina",
        "to_city": "Saskatoon",
    }
    data.update(overrides)
    return make_record(**data)


@pytest.fixture
def temp_db_path():
    """Temporary database file path"""
    with tempfile.NamedTemporaryFile(suffix='.db', delete=False) as f:
        temp_path = f.name
    yield temp_path
    if os.path.exists(temp_path):
        os.unlink(temp_path)


@pytest.fixture
def sample_settings():
    """Settings for tests"""
    settings = Settings()
    settings.observability.service_name = "test-service"
    settings.observability.build_version = "1.0.0"
    settings.observability.log_level = "INFO"
    settings.observability.http_port = 8080
    return settings


@pytest.fixture
def editor():
    """User with the "user" access level (may mutate)"""
    return UserProfile(id="u-editor", email="editor@example.com", access_level="user")


@pytest.fixture
def driver():
    """View-only user"""
    return UserProfile(id="u-driver", email="driver@example.com", access_level="driver")


@pytest.fixture
def account_admin():
    """Account admin (role wins over access level)"""
    return UserProfile(id="u-admin", email="admin@example.com", role="admin", access_level="driver")


@pytest.fixture
def circle_record():
    return make_record()


@pytest.fixture
def line_record():
    return make_line()


@pytest.fixture
def mock_store():
    """Shutdown store whose create/update echo a record back"""
    store = AsyncMock()

    async def create(fields):
        return ShutdownRecord(id="new-1", **fields)

    store.create.side_effect = create
    store.list.return_value = []
    return store


@pytest.fixture
def mock_geocoder():
    return AsyncMock()


# pytest configuration
def pytest_configure(config):
    config.addinivalue_line(
        "markers", "slow: slow test marker"
    )
    config.addinivalue_line(
        "markers", "integration: integration test marker"
    )


def pytest_collection_modifyitems(config, items):
    for item in items:
        # async tests get the asyncio marker
        if inspect.iscoroutinefunction(getattr(item, "function", None)):
            item.add_marker(pytest.mark.asyncio)

        if "integration" in item.name:
            item.add_marker(pytest.mark.integration)

"""
HTTP surface unit tests

Runs the FastAPI app through TestClient with mocked store, geocoder and
user store behind the real lifecycle controller.
"""

import pytest
from unittest.mock import AsyncMock
from fastapi.testclient import TestClient

from shutdown_tracker.api.app import create_app
from shutdown_tracker.core.errors import RecordNotFoundError
from shutdown_tracker.core.models import ShutdownRecord, UserProfile
from shutdown_tracker.orchestrators.lifecycle import ShutdownLifecycle
from shutdown_tracker.orchestrators.user_admin import UserAdministration
from conftest import FIXED_NOW, make_line, make_record

EDITOR = {"X-Forwarded-Email": "editor@example.com"}
DRIVER = {"X-Forwarded-Email": "driver@example.com"}
ADMIN = {"X-Forwarded-Email": "admin@example.com"}

PROFILES = {
    "editor@example.com": UserProfile(id="u-editor", email="editor@example.com", access_level="user"),
    "driver@example.com": UserProfile(id="u-driver", email="driver@example.com", access_level="driver"),
    "admin@example.com": UserProfile(id="u-admin", email="admin@example.com", role="admin"),
}


@pytest.fixture
def records():
    return [
        make_record(id="c1", region="Manitoba", created_by="editor@example.com"),
        make_record(id="c2", status="cleared", cleared_by="x@example.com", cleared_at=FIXED_NOW,
                    region="Alberta"),
        make_line(id="l1", action="caution"),
        make_record(id="bad", geometry_type="hexagon", region=None),
    ]


@pytest.fixture
def store(records):
    store = AsyncMock()
    store.list.return_value = records
    by_id = {r.id: r for r in records}

    async def get(record_id):
        if record_id not in by_id:
            raise RecordNotFoundError(record_id)
        return by_id[record_id]

    async def create(fields):
        return ShutdownRecord(id="new-1", **fields)

    async def update(record_id, patch):
        return ShutdownRecord.model_validate({**dict(by_id[record_id]), **patch})

    async def delete(record_id):
        if record_id not in by_id:
            raise RecordNotFoundError(record_id)

    store.get.side_effect = get
    store.create.side_effect = create
    store.update.side_effect = update
    store.delete.side_effect = delete
    return store


@pytest.fixture
def geocoder():
    geocoder = AsyncMock()
    geocoder.invoke.return_value = {
        "city_name": "Winnipeg", "province": "Manitoba", "latitude": 49.9, "longitude": -97.14,
    }
    return geocoder


@pytest.fixture
def users():
    users = AsyncMock()

    async def get_by_email(email):
        return PROFILES.get(email)

    async def update(user_id, patch):
        return UserProfile(id=user_id, email="driver@example.com", **patch)

    users.get_by_email.side_effect = get_by_email
    users.list.return_value = list(PROFILES.values())
    users.update.side_effect = update
    return users


@pytest.fixture
def client(sample_settings, store, geocoder, users):
    lifecycle = ShutdownLifecycle(store, geocoder, clock=lambda: FIXED_NOW)
    app = create_app(sample_settings, lifecycle, UserAdministration(users), users)
    return TestClient(app)


class TestObservabilityEndpoints:
    """health / ready / info / metrics"""

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"
        assert response.json()["service"] == "test-service"

    def test_ready(self, client):
        assert client.get("/ready").json()["status"] == "ready"

    def test_info(self, client):
        data = client.get("/info").json()
        assert data["version"] == "1.0.0"
        assert data["classification_scheme"] == "action"

    def test_metrics(self, client):
        response = client.get("/metrics")
        assert response.status_code == 200
        assert "shutdown_mutations_total" in response.text

    def test_metrics_disabled(self, sample_settings, store, geocoder, users):
        sample_settings.observability.metrics_enabled = False
        app = create_app(sample_settings, ShutdownLifecycle(store, geocoder),
                         UserAdministration(users), users)
        assert TestClient(app).get("/metrics").status_code == 503


class TestViews:
    """list / map / regions"""

    def test_unauthenticated(self, client):
        response = client.get("/shutdowns")
        assert response.status_code == 401
        assert response.headers["location"].startswith("/oauth2/start?rd=")

    def test_list_with_styles(self, client):
        response = client.get("/shutdowns", params={"selected_id": "c1"}, headers=DRIVER)
        assert response.status_code == 200
        data = response.json()

        assert [i["record"]["id"] for i in data["items"]] == ["c1", "c2", "l1", "bad"]
        assert data["summary"] == {"active": 3, "total": 4}
        assert data["filtered"] is False
        assert data["regions"] == ["Alberta", "Manitoba", "Saskatchewan"]

        selected = data["items"][0]
        assert selected["style"] == {"color": "#EF4444", "fill_opacity": 0.7, "weight": 4}
        assert selected["badge"] == "Shutdown All"
        assert data["items"][1]["style"]["color"] == "#9CA3AF"
        assert data["items"][2]["style"]["fill_opacity"] is None
        assert data["items"][3]["renderable"] is False

    def test_list_filters(self, client):
        data = client.get("/shutdowns", params={"status": "active", "region": "Manitoba"},
                          headers=DRIVER).json()
        assert [i["record"]["id"] for i in data["items"]] == ["c1"]
        assert data["filtered"] is True

    def test_mine_only(self, client):
        data = client.get("/shutdowns", params={"mine_only": "true"}, headers=EDITOR).json()
        assert [i["record"]["id"] for i in data["items"]] == ["c1"]

    def test_map_shows_active_renderable(self, client):
        data = client.get("/shutdowns/map", headers=DRIVER).json()
        assert [i["record"]["id"] for i in data["items"]] == ["c1", "l1"]
        assert data["bounds"] == [50.45, -106.67, 52.13, -104.61]

    def test_regions(self, client):
        assert client.get("/shutdowns/regions", headers=DRIVER).json() == [
            "Alberta", "Manitoba", "Saskatchewan",
        ]

    def test_get_missing(self, client):
        assert client.get("/shutdowns/nope", headers=DRIVER).status_code == 404


class TestMutations:
    """create / update / clear / delete"""

    def test_create(self, client):
        response = client.post("/shutdowns", json={"city": "Winnipeg", "radius_km": 200}, headers=EDITOR)
        assert response.status_code == 201
        data = response.json()
        assert data["title"] == "200km radius of Winnipeg"
        assert data["activity_log"][0]["action"] == "created"

    def test_driver_forbidden(self, client, store):
        response = client.post("/shutdowns", json={"city": "Winnipeg"}, headers=DRIVER)
        assert response.status_code == 403
        store.create.assert_not_awaited()

    def test_create_validation_error(self, client):
        response = client.post("/shutdowns", json={"city": "Winnipeg", "radius_km": -1}, headers=EDITOR)
        assert response.status_code == 422

    def test_create_geocoding_error(self, client, geocoder):
        geocoder.invoke.return_value = {}
        response = client.post("/shutdowns", json={"city": "Atlantis"}, headers=EDITOR)
        assert response.status_code == 502

    def test_update(self, client):
        response = client.patch("/shutdowns/c1", json={"title": "New", "reason": "accident"}, headers=EDITOR)
        assert response.status_code == 200
        assert response.json()["activity_log"][-1]["details"] == "Updated title, reason"

    def test_update_driver_forbidden(self, client, store):
        response = client.patch("/shutdowns/c1", json={"title": "New"}, headers=DRIVER)
        assert response.status_code == 403
        store.update.assert_not_awaited()

    @pytest.mark.parametrize("record_id", ["c1", "nope"])
    def test_driver_refused_before_any_read(self, client, store, record_id):
        responses = [
            client.patch(f"/shutdowns/{record_id}", json={"title": "New"}, headers=DRIVER),
            client.post(f"/shutdowns/{record_id}/clear", headers=DRIVER),
            client.delete(f"/shutdowns/{record_id}", params={"confirm": "true"}, headers=DRIVER),
        ]
        assert [r.status_code for r in responses] == [403, 403, 403]
        store.get.assert_not_awaited()
        store.update.assert_not_awaited()
        store.delete.assert_not_awaited()

    def test_update_missing(self, client):
        response = client.patch("/shutdowns/nope", json={"title": "New"}, headers=EDITOR)
        assert response.status_code == 404

    def test_clear(self, client):
        response = client.post("/shutdowns/c1/clear", headers=EDITOR)
        assert response.status_code == 200
        assert response.json()["status"] == "cleared"

    def test_clear_twice_rejected(self, client):
        assert client.post("/shutdowns/c2/clear", headers=EDITOR).status_code == 422

    def test_delete_needs_confirmation(self, client, store):
        assert client.delete("/shutdowns/c1", headers=EDITOR).status_code == 422
        store.delete.assert_not_awaited()

    def test_delete(self, client, store):
        assert client.delete("/shutdowns/c1", params={"confirm": "true"}, headers=EDITOR).status_code == 204
        store.delete.assert_awaited_once_with("c1")

    def test_delete_missing(self, client):
        response = client.delete("/shutdowns/nope", params={"confirm": "true"}, headers=EDITOR)
        assert response.status_code == 404


class TestUsersAndAuth:
    """user administration and auth passthrough"""

    def test_me(self, client):
        data = client.get("/auth/me", headers=ADMIN).json()
        assert data["effective_level"] == "admin"
        assert data["can_mutate"] is True
        assert data["can_manage_users"] is True

    def test_me_driver(self, client):
        data = client.get("/auth/me", headers=DRIVER).json()
        assert data["effective_level"] == "driver"
        assert data["can_mutate"] is False

    def test_logout(self, client):
        assert client.post("/auth/logout", headers=EDITOR).json() == {"redirect_url": "/oauth2/sign_out"}

    def test_list_users_admin_only(self, client):
        assert client.get("/users", headers=EDITOR).status_code == 403
        assert len(client.get("/users", headers=ADMIN).json()) == 3

    def test_set_access_level(self, client, users):
        response = client.patch("/users/u-driver", json={"access_level": "user"}, headers=ADMIN)
        assert response.status_code == 200
        assert response.json()["access_level"] == "user"
        users.update.assert_awaited_once_with("u-driver", {"access_level": "user"})

    def test_set_unknown_access_level(self, client):
        response = client.patch("/users/u-driver", json={"access_level": "root"}, headers=ADMIN)
        assert response.status_code == 422

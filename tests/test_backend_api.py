from datetime import timedelta

import pytest
from django.utils import timezone
from rest_framework.test import APIClient

from analytics.models import AdminSession, VisitorLocation

pytestmark = pytest.mark.django_db

ADMIN_PASSWORD = "test-admin-password"


@pytest.fixture(autouse=True)
def admin_password(settings):
    settings.ADMIN_PASSWORD = ADMIN_PASSWORD


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def admin_api(api_client):
    response = api_client.post("/api/admin/login", {"password": ADMIN_PASSWORD}, format="json")
    api_client.credentials(HTTP_AUTHORIZATION=f"Bearer {response.json()['token']}")
    return api_client


def ping(api_client, visitor_id="visitor-1", zone="stare-miasto"):
    return api_client.post(
        "/api/location",
        {"visitorId": visitor_id, "latitude": 50.0614, "longitude": 19.9372, "zone": zone},
        format="json",
    )


def test_location_ping_is_stored(api_client):
    response = ping(api_client)

    assert response.status_code == 200
    assert response.json() == {"success": True}

    location = VisitorLocation.objects.get()
    assert location.visitor_id == "visitor-1"
    assert location.zone == "stare-miasto"


def test_location_ping_without_zone(api_client):
    response = api_client.post(
        "/api/location",
        {"visitorId": "visitor-2", "latitude": 50.0, "longitude": 19.9},
        format="json",
    )
    assert response.status_code == 200
    assert VisitorLocation.objects.get().zone is None


def test_location_ping_missing_fields(api_client):
    response = api_client.post("/api/location", {"visitorId": "visitor-1"}, format="json")

    assert response.status_code == 400
    assert response.json()["error"] == "Missing required fields"
    assert VisitorLocation.objects.count() == 0


def test_admin_login(api_client):
    wrong = api_client.post("/api/admin/login", {"password": "nope"}, format="json")
    assert wrong.status_code == 401
    assert wrong.json() == {"error": "Invalid password"}

    missing = api_client.post("/api/admin/login", {}, format="json")
    assert missing.status_code == 401

    right = api_client.post("/api/admin/login", {"password": ADMIN_PASSWORD}, format="json")
    assert right.status_code == 200
    body = right.json()
    assert len(body["token"]) == 64
    assert "expiresAt" in body

    session = AdminSession.objects.get(token=body["token"])
    assert session.is_valid()
    assert session.expires_at > timezone.now() + timedelta(hours=23)


def test_login_removes_expired_sessions(api_client):
    AdminSession.objects.create(token="stale", expires_at=timezone.now() - timedelta(hours=1))
    AdminSession.objects.create(token="still-valid", expires_at=timezone.now() + timedelta(hours=1))

    response = api_client.post("/api/admin/login", {"password": ADMIN_PASSWORD}, format="json")
    assert response.status_code == 200

    tokens = set(AdminSession.objects.values_list("token", flat=True))
    assert tokens == {"still-valid", response.json()["token"]}


@pytest.mark.parametrize("path", ["/api/admin/locations", "/api/admin/stats"])
def test_admin_endpoints_require_token(api_client, path):
    assert api_client.get(path).status_code == 401

    api_client.credentials(HTTP_AUTHORIZATION="Bearer not-a-real-token")
    assert api_client.get(path).status_code == 401


def test_expired_token_is_rejected(api_client):
    AdminSession.objects.create(token="expired", expires_at=timezone.now() - timedelta(minutes=1))
    api_client.credentials(HTTP_AUTHORIZATION="Bearer expired")

    assert api_client.get("/api/admin/stats").status_code == 401


def test_admin_locations_newest_first(admin_api):
    ping(admin_api, "visitor-1")
    ping(admin_api, "visitor-2", zone="kazimierz")

    response = admin_api.get("/api/admin/locations")
    assert response.status_code == 200

    locations = response.json()["locations"]
    assert [loc["visitorId"] for loc in locations] == ["visitor-2", "visitor-1"]
    assert set(locations[0]) == {"id", "visitorId", "latitude", "longitude", "zone", "createdAt"}


def test_admin_locations_skip_old_pings(admin_api):
    ping(admin_api, "visitor-1")
    VisitorLocation.objects.update(created_at=timezone.now() - timedelta(hours=25))
    ping(admin_api, "visitor-2")

    locations = admin_api.get("/api/admin/locations").json()["locations"]
    assert [loc["visitorId"] for loc in locations] == ["visitor-2"]


def test_admin_stats(admin_api):
    ping(admin_api, "visitor-1", zone="stare-miasto")
    ping(admin_api, "visitor-1", zone="stare-miasto")
    ping(admin_api, "visitor-2", zone=None)

    response = admin_api.get("/api/admin/stats")
    assert response.status_code == 200
    assert response.json() == {
        "totalLocations": 3,
        "uniqueVisitors": 2,
        "zoneStats": {"stare-miasto": 2, "unknown": 1},
    }

import httpx
import pytest
from fastapi.testclient import TestClient

from darkbars.core.config import Settings
from darkbars.main import app
from darkbars.routers import bars
from darkbars.routers.bars import get_backend, get_fallback_capability
from darkbars.schemas.common import BackendResponse
from darkbars.services.backend import VenueBackend
from darkbars.services.location import IpGeolocation
from darkbars.services.normalizer import NO_RESULTS_MESSAGE
from darkbars.services.permissions import PermissionMonitor


class FakeBackend(VenueBackend):
    name = "fake"

    def __init__(self, payload):
        super().__init__(Settings())
        self.payload = payload
        self.calls = []

    async def fetch_venues(self, coord):
        self.calls.append(coord)
        return BackendResponse(payload=self.payload)


@pytest.fixture
def client():
    app.state.permissions = PermissionMonitor()
    app.dependency_overrides[get_fallback_capability] = lambda: None
    yield TestClient(app)
    app.dependency_overrides.clear()


def _use_backend(payload):
    backend = FakeBackend(payload)
    app.dependency_overrides[get_backend] = lambda: backend
    return backend


def test_root(client):
    r = client.get("/")
    assert r.status_code == 200
    assert r.json()["message"] == "OK"


def test_search_with_browser_fix(client):
    backend = _use_backend([{"name": "The Crow", "vibe_tags": ["Goth", "Dive"], "address": "13 Raven St",
                             "rating": 0, "opening_hours": "8PM-2AM"}])
    r = client.post("/bars/search", json={"latitude": 51.5, "longitude": -0.12})
    assert r.status_code == 200
    body = r.json()
    assert body["status"] == "ok"
    card = body["venues"][0]
    assert card["rating"] == "0.0"
    assert card["vibe_tags"] == ["Goth", "Dive"]
    assert card["directions_url"].endswith("The%20Crow%2C%2013%20Raven%20St")
    assert backend.calls[0].latitude == 51.5


def test_search_empty(client):
    _use_backend([])
    body = client.post("/bars/search", json={"latitude": 1, "longitude": 2}).json()
    assert body == {"status": "empty", "venues": [], "sources": [], "message": NO_RESULTS_MESSAGE}


def test_browser_reported_permission_denied(client):
    backend = _use_backend([])
    body = client.post("/bars/search", json={"geolocation_error": 1}).json()
    assert body["status"] == "error"
    assert body["error"]["category"] == "PermissionDenied"
    assert backend.calls == []


def test_no_fix_and_no_fallback_is_unsupported(client):
    _use_backend([])
    body = client.post("/bars/search", json={}).json()
    assert body["error"]["category"] == "GeolocationUnsupported"


def test_geolocation_not_supported_flag(client):
    _use_backend([])
    body = client.post("/bars/search", json={"latitude": 1, "longitude": 2, "geolocation_supported": False}).json()
    assert body["error"]["category"] == "GeolocationUnsupported"


def test_half_a_coordinate_is_rejected(client):
    _use_backend([])
    assert client.post("/bars/search", json={"latitude": 1}).status_code == 422


def test_permission_mirror(client):
    r = client.get("/bars/permission")
    assert r.json() == {"state": "prompt", "trigger_enabled": True, "busy": False}

    r = client.put("/bars/permission", json={"state": "denied"})
    assert r.json()["trigger_enabled"] is False

    backend = _use_backend([{"name": "never"}])
    body = client.post("/bars/search", json={"latitude": 1, "longitude": 2}).json()
    assert body["error"]["category"] == "PermissionDenied"
    assert backend.calls == []

    client.put("/bars/permission", json={"state": "granted"})
    body = client.post("/bars/search", json={"latitude": 1, "longitude": 2}).json()
    assert body["status"] == "ok"


def test_permission_mirror_disabled(client):
    app.state.permissions = None
    r = client.put("/bars/permission", json={"state": "denied"})
    assert r.json() == {"state": None, "trigger_enabled": True, "busy": False}
    _use_backend([])
    assert client.post("/bars/search", json={"latitude": 1, "longitude": 2}).json()["status"] == "empty"


def test_invalid_permission_state(client):
    assert client.put("/bars/permission", json={"state": "maybe"}).status_code == 422


def test_ip_fallback_locates_the_caller(client, monkeypatch):
    lookups = []

    def handler(request):
        lookups.append(str(request.url))
        return httpx.Response(200, json={"latitude": 45.5, "longitude": -73.57})

    monkeypatch.setattr(bars.settings, "ip_geolocation_url", "https://ip.example/{ip}/json/")
    monkeypatch.setattr(bars, "IpGeolocation", lambda url: IpGeolocation(url, transport=httpx.MockTransport(handler)))
    app.dependency_overrides.pop(bars.get_fallback_capability)
    backend = _use_backend([])

    body = client.post("/bars/search", json={}, headers={"X-Forwarded-For": "203.0.113.7, 10.0.0.1"}).json()

    assert body["status"] == "empty"
    assert lookups == ["https://ip.example/203.0.113.7/json/"]
    assert backend.calls[0].latitude == 45.5


def test_ip_fallback_without_proxy_header_uses_peer_address(client, monkeypatch):
    lookups = []

    def handler(request):
        lookups.append(str(request.url))
        return httpx.Response(200, json={"latitude": 1.0, "longitude": 2.0})

    monkeypatch.setattr(bars.settings, "ip_geolocation_url", "https://ip.example/{ip}/json/")
    monkeypatch.setattr(bars, "IpGeolocation", lambda url: IpGeolocation(url, transport=httpx.MockTransport(handler)))
    app.dependency_overrides.pop(bars.get_fallback_capability)
    _use_backend([])

    client.post("/bars/search", json={})

    # TestClient reports its peer as "testclient"
    assert lookups == ["https://ip.example/testclient/json/"]

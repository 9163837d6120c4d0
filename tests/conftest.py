"""
Configuración de pytest para tests
"""
import json
from datetime import datetime, timedelta

import httpx
import pytest
from fastapi import Depends
from fastapi.testclient import TestClient
from jose import jwt

from careconnect.client import MarketplaceClient
from careconnect.config import get_settings
from careconnect.middleware.rate_limit import limiter
from careconnect.security import get_bearer_token, get_marketplace_client
from careconnect.utils import resolve_id_candidates

MARKETPLACE_URL = "http://marketplace.test/api"


class FakeMarketplace:
    """API del marketplace en memoria, servida con httpx.MockTransport"""

    def __init__(self):
        self.bookings = {}
        self.caregivers = []
        self.profile = {"_id": "parent-1", "name": "Paula Reyes", "role": "parent"}
        self.jobs = []
        self.children = []
        self.calls = []
        self.fail = set()  # prefijos de ruta que responden 500

    def add_booking(self, **fields):
        self.bookings[fields["_id"]] = dict(fields)
        return self.bookings[fields["_id"]]

    def handler(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path.removeprefix("/api")
        self.calls.append((request.method, path))
        for prefix in self.fail:
            if path.startswith(prefix):
                return httpx.Response(500, json={"success": False, "error": "Server error"})

        parts = path.strip("/").split("/")
        method = request.method

        if method == "GET" and path == "/bookings/my":
            return httpx.Response(200, json={"success": True, "bookings": list(self.bookings.values())})
        if parts[0] == "bookings" and len(parts) >= 2:
            booking = self.bookings.get(parts[1])
            if booking is None:
                return httpx.Response(404, json={"success": False, "error": "Booking not found"})
            if method == "GET" and len(parts) == 2:
                return httpx.Response(200, json={"success": True, "booking": booking})
            if method == "PATCH" and parts[2:] == ["status"]:
                booking["status"] = json.loads(request.content)["status"]
                return httpx.Response(200, json={"success": True, "booking": booking})
            if method == "DELETE" and len(parts) == 2:
                booking["status"] = "cancelled"
                return httpx.Response(200, json={"success": True, "message": "Booking cancelled successfully"})
        if method == "GET" and path == "/caregivers":
            return httpx.Response(200, json={"success": True, "data": {"caregivers": self.caregivers}})
        if method == "GET" and parts[0] == "caregivers" and len(parts) == 2:
            for c in self.caregivers:
                if parts[1] in resolve_id_candidates(c):
                    return httpx.Response(200, json={"success": True, "data": c})
            return httpx.Response(404, json={"success": False, "error": "Caregiver not found"})
        if method == "GET" and path == "/auth/profile":
            return httpx.Response(200, json={"success": True, "data": self.profile})
        if method == "GET" and path == "/jobs/my":
            return httpx.Response(200, json={"success": True, "data": {"jobs": self.jobs}})
        if method == "GET" and path == "/children":
            return httpx.Response(200, json={"success": True, "data": {"children": self.children}})
        return httpx.Response(404, json={"success": False, "error": "Not found"})


@pytest.fixture
def marketplace():
    return FakeMarketplace()


@pytest.fixture
def marketplace_client(marketplace):
    """Cliente directo (sin FastAPI) contra el marketplace falso"""
    http = httpx.AsyncClient(transport=httpx.MockTransport(marketplace.handler), base_url=MARKETPLACE_URL)
    return MarketplaceClient(token="test-token", http=http)


@pytest.fixture
def app_with_fakes(marketplace):
    """App con el marketplace falso y sin rate limiting"""
    from careconnect.main import app

    async def _client(token: str = Depends(get_bearer_token)):
        http = httpx.AsyncClient(transport=httpx.MockTransport(marketplace.handler), base_url=MARKETPLACE_URL)
        client = MarketplaceClient(token=token, http=http)
        try:
            yield client
        finally:
            await client.aclose()

    limiter.enabled = False
    app.dependency_overrides[get_marketplace_client] = _client
    yield app
    app.dependency_overrides.clear()
    limiter.enabled = True


@pytest.fixture
def client(app_with_fakes):
    """Fixture para cliente de test de FastAPI"""
    return TestClient(app_with_fakes)


@pytest.fixture
def auth_headers():
    """Token firmado igual que lo firma el marketplace"""
    token = jwt.encode(
        {"id": "parent-1", "role": "parent", "exp": datetime.utcnow() + timedelta(hours=1)},
        get_settings().jwt_secret,
        algorithm="HS256",
    )
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def featured_caregivers():
    return [
        {"_id": "c1", "name": "Maria Santos", "rating": 4.9, "reviewCount": 31, "hourlyRate": 350, "role": "caregiver"},
        {"_id": "c2", "name": "Bea Cruz", "userId": {"_id": "u2"}, "profileImage": "bea.png", "role": "caregiver"},
    ]

"""
Shared test helpers: in-memory fakes for the external collaborators and a
TestCase that runs the app against a fresh SQLite database.
"""

import os
import unittest
from typing import Dict, List, Optional

from fastapi.testclient import TestClient

from seva.config import settings
from seva.core.exceptions import AuthenticationException, EmailRelayException
from seva.identity.application import IIdentityProvider
from seva.identity.domain import AuthUser
from seva.infrastructure.storage import IBlobStorage
from seva.main import app
from seva.site.application import IEmailRelay

TEST_TOKEN = "test-token"
TEST_UID = "admin-1"
TEST_EMAIL = "admin@seva.test"
TEST_PASSWORD = "correct-horse"

AUTH_HEADERS = {"Authorization": f"Bearer {TEST_TOKEN}"}


class FakeIdentityProvider(IIdentityProvider):
    """Accepts one account and one token."""

    def __init__(self):
        self.reset_requests: List[str] = []

    def _user(self) -> AuthUser:
        return AuthUser(uid=TEST_UID, email=TEST_EMAIL, id_token=TEST_TOKEN, display_name="Admin")

    async def sign_in(self, email: str, password: str) -> AuthUser:
        if email != TEST_EMAIL:
            raise AuthenticationException("Authentication failed", "auth/user-not-found")
        if password != TEST_PASSWORD:
            raise AuthenticationException("Authentication failed", "auth/wrong-password")
        return self._user()

    async def send_password_reset(self, email: str) -> None:
        self.reset_requests.append(email)

    async def lookup(self, id_token: str) -> AuthUser:
        if id_token != TEST_TOKEN:
            raise AuthenticationException("Session expired. Please sign in again.", "auth/invalid-id-token")
        return self._user()

    async def close(self) -> None:
        pass


class FakeBlobStorage(IBlobStorage):

    def __init__(self):
        self.objects: Dict[str, bytes] = {}

    async def upload(self, path: str, content: bytes, content_type: str) -> str:
        self.objects[path] = content
        return f"https://storage.test/{path}"

    async def close(self) -> None:
        pass


class FakeEmailRelay(IEmailRelay):

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.sent: List[Dict[str, str]] = []
        self.is_configured = True

    async def send(self, template_params: Dict[str, str]) -> None:
        if self.fail:
            raise EmailRelayException("unexpected status 500", {"status_code": 500})
        self.sent.append(template_params)

    async def close(self) -> None:
        pass


def _database_path() -> Optional[str]:
    prefix = "sqlite+aiosqlite:///"
    if settings.database_url.startswith(prefix):
        return settings.database_url[len(prefix):]
    return None


class ApiTestCase(unittest.TestCase):
    """
    Starts the application (lifespan included) on an empty database and
    swaps the external collaborators for fakes.
    """

    def setUp(self):
        self._remove_database()
        self._client_cm = TestClient(app)
        self.client = self._client_cm.__enter__()
        self.identity = FakeIdentityProvider()
        self.storage = FakeBlobStorage()
        self.relay = FakeEmailRelay()
        app.state.identity_provider = self.identity
        app.state.blob_storage = self.storage
        app.state.email_relay = self.relay

    def tearDown(self):
        self._client_cm.__exit__(None, None, None)
        self._remove_database()

    @staticmethod
    def _remove_database():
        path = _database_path()
        if path and os.path.exists(path):
            os.remove(path)

    # ---- request helpers ----

    def get(self, url: str, **kwargs):
        return self.client.get(url, headers=AUTH_HEADERS, **kwargs)

    def post(self, url: str, json=None, **kwargs):
        return self.client.post(url, json=json, headers=AUTH_HEADERS, **kwargs)

    def patch(self, url: str, json=None, **kwargs):
        return self.client.patch(url, json=json, headers=AUTH_HEADERS, **kwargs)

    def put(self, url: str, json=None, **kwargs):
        return self.client.put(url, json=json, headers=AUTH_HEADERS, **kwargs)

    def delete(self, url: str, **kwargs):
        return self.client.delete(url, headers=AUTH_HEADERS, **kwargs)

    def assertStatus(self, response, expected: int):
        self.assertEqual(response.status_code, expected, response.text)
        return response.json() if response.headers.get("content-type", "").startswith("application/json") else None

    # ---- fixtures ----

    def create_staff(self, name: str = "Ravi Kumar", phone: str = "9876543210", **fields) -> dict:
        payload = {"name": name, "phone": phone, **fields}
        return self.assertStatus(self.post("/staff", payload), 201)

    def create_team(self, name: str = "Ghat Sweepers", **fields) -> dict:
        return self.assertStatus(self.post("/teams", {"name": name, **fields}), 201)

    def create_facility(self, code: str = "T7", **fields) -> dict:
        payload = {"code": code, "type": "toilet", "zone": "North", "lat": 25.43, "lng": 81.88, **fields}
        return self.assertStatus(self.post("/facilities", payload), 201)

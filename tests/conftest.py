import os

# Keep the rotating error log out of the test run
os.environ.setdefault("ERROR_LOG_FILE", "")

import uuid
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from app.core.config import Settings
from app.main import create_app
from app.services.notification_service import Mailer

TEST_SECRET = "test-jwt-secret-0123456789abcdefghijklmnop"
ADMIN_LOGIN = {"email": "admin@nova.test", "password": "s3cret-pass"}


class InMemoryBookingStore:
    """Dict-backed stand-in for BookingStore with the same query semantics."""

    def __init__(self):
        self.rows = {}
        self._clock = datetime(2024, 1, 1, tzinfo=timezone.utc)

    def _tick(self):
        self._clock += timedelta(seconds=1)
        return self._clock

    @staticmethod
    def _matches(row, filters):
        return all(row.get(k) == v for k, v in (filters or {}).items())

    async def insert(self, row):
        now = self._tick()
        stored = {**row, "id": str(uuid.uuid4()), "created_at": now, "updated_at": now}
        self.rows[stored["id"]] = stored
        return dict(stored)

    async def find(self, filters=None, newest_first=False):
        found = [dict(r) for r in self.rows.values() if self._matches(r, filters)]
        if newest_first:
            found.sort(key=lambda r: r["created_at"], reverse=True)
        return found

    async def find_by_id(self, booking_id):
        row = self.rows.get(booking_id)
        return dict(row) if row else None

    async def search(self, term, fields, filters=None):
        needle = term.casefold()
        return [
            dict(r) for r in self.rows.values()
            if self._matches(r, filters) and any(needle in str(r.get(f, "")).casefold() for f in fields)
        ]

    async def update_by_id(self, booking_id, changes):
        if booking_id in self.rows:
            self.rows[booking_id].update(changes, updated_at=self._tick())

    async def delete_by_id(self, booking_id):
        self.rows.pop(booking_id, None)

    async def count(self, filters=None):
        return sum(1 for r in self.rows.values() if self._matches(r, filters))


class RecordingMailer(Mailer):
    def __init__(self, fail: bool = False):
        self.sent = []
        self.fail = fail

    def send(self, to_email, subject, html):
        if self.fail:
            raise ConnectionError("SMTP server unreachable")
        self.sent.append((to_email, subject, html))
        return True


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        JWT_SECRET=TEST_SECRET,
        ADMIN_LOGIN_EMAIL=ADMIN_LOGIN["email"],
        ADMIN_LOGIN_PASSWORD=ADMIN_LOGIN["password"],
        ADMIN_EMAIL="owner@nova.test",
        ERROR_LOG_FILE="",
    )


@pytest.fixture
def store():
    return InMemoryBookingStore()


@pytest.fixture
def mailer():
    return RecordingMailer()


@pytest.fixture
def app(settings, store, mailer):
    return create_app(settings=settings, store=store, mailer=mailer)


@pytest.fixture
def client(app):
    return TestClient(app, raise_server_exceptions=False)


@pytest.fixture
def auth_headers(client):
    response = client.post("/admin/login", json=ADMIN_LOGIN)
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.json()['token']}"}


@pytest.fixture
def ana():
    return {
        "name": "Ana",
        "email": "a@x.com",
        "phone": "555",
        "service": "Oil Change",
        "date": "2024-05-01",
    }

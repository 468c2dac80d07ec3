from __future__ import annotations

import os
from datetime import date, timedelta

import pytest
from fastapi.testclient import TestClient

# Settings are read at import time and SECRET_KEY has no default
os.environ.setdefault("SECRET_KEY", "test-secret-key")

from modernband.api import deps
from modernband.main import app
from modernband.services.backend_client import BackendError
from modernband.services.session_store import SessionStore
from modernband.services.wizard import WizardStore


def future_date(days: int = 60) -> date:
    return date.today() + timedelta(days=days)


class FakeBackend:
    """Stands in for BackendClient; records calls and serves canned data."""

    def __init__(self):
        self.calls: list[tuple] = []
        self.bookings: list[dict] = []
        self.employees: list[dict] = []
        self.fail_with: BackendError | None = None
        self.admin = {"username": "admin", "name": "Admin", "email": "admin@modernband.in", "id": "a1"}
        self._next_id = 1

    def _maybe_fail(self):
        if self.fail_with:
            raise self.fail_with

    def create_booking(self, payload: dict) -> dict:
        self.calls.append(("create_booking", payload))
        self._maybe_fail()
        booking = {**payload, "id": f"MB-{self._next_id:04d}", "createdAt": "2026-10-18T10:00:00Z"}
        self._next_id += 1
        self.bookings.append(booking)
        return {"message": "Booking created", "booking": booking}

    def get_booking(self, booking_id=None, contact_number=None) -> dict:
        self.calls.append(("get_booking", booking_id, contact_number))
        self._maybe_fail()
        if booking_id:
            for b in self.bookings:
                if b["id"] == booking_id:
                    return {"booking": b}
            raise BackendError("Booking not found", status_code=404)
        matches = [b for b in reversed(self.bookings) if b.get("phone") == contact_number]
        return {"bookings": matches}

    def list_bookings(self):
        self.calls.append(("list_bookings",))
        self._maybe_fail()
        return {"bookings": list(self.bookings)}

    def delete_booking(self, booking_id: str):
        self.calls.append(("delete_booking", booking_id))
        self.bookings = [b for b in self.bookings if b["id"] != booking_id]
        return {"message": "deleted", "id": booking_id}

    def delete_past_bookings(self):
        self.calls.append(("delete_past_bookings",))
        today = date.today().isoformat()
        before = len(self.bookings)
        self.bookings = [b for b in self.bookings if str(b.get("date", ""))[:10] >= today]
        return {"message": "deleted", "deleted_count": before - len(self.bookings)}

    def admin_login(self, username: str, password: str):
        self.calls.append(("admin_login", username))
        if username == self.admin["username"] and password == "secret":
            return {"admin": self.admin}
        raise BackendError("Invalid credentials", status_code=401)

    def update_admin(self, admin: dict, token=None):
        self.calls.append(("update_admin", admin))
        return {"message": "Admin updated"}

    def list_employees(self, token=None):
        self.calls.append(("list_employees",))
        return {"employees": list(self.employees)}

    def get_employee(self, username: str, token=None):
        self.calls.append(("get_employee", username))
        for e in self.employees:
            if e["username"] == username:
                return {"employee": e}
        raise BackendError("Employee not found", status_code=404)

    def save_employee(self, employee: dict, token=None):
        self.calls.append(("save_employee", employee))
        self.employees.append({**employee, "payments": []})
        return {"message": "Employee saved", "employee": employee}

    def delete_employee(self, username: str, token=None):
        self.calls.append(("delete_employee", username))
        return {"message": "deleted"}

    def add_payment(self, username: str, payment: dict, token=None):
        self.calls.append(("add_payment", username, payment))
        return {"message": "Payment added", "payment": {"id": "p1", **payment}}

    def delete_payment(self, username: str, payment_id: str, token=None):
        self.calls.append(("delete_payment", username, payment_id))
        return {"message": "deleted"}


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def client(backend):
    store = WizardStore(ttl_seconds=3600)
    sessions = SessionStore(expire_minutes=30)
    app.dependency_overrides[deps.get_backend] = lambda: backend
    app.dependency_overrides[deps.get_wizard_store] = lambda: store
    app.dependency_overrides[deps.get_session_store] = lambda: sessions
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def admin_headers(client):
    r = client.post("/api/v1/auth/login", json={"username": "admin", "password": "secret"})
    assert r.status_code == 200, r.text
    return {"Authorization": f"Bearer {r.json()['access_token']}"}

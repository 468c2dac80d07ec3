import logging
from dataclasses import dataclass
from typing import Any
from urllib.parse import quote

import requests

from modernband.core.config import settings

logger = logging.getLogger(__name__)


@dataclass
class BackendConfig:
    base_url: str           # e.g. http://localhost:8081/api
    timeout: int = 20


class BackendError(RuntimeError):
    """Backend call failed. `status_code` is None for network failures."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


def _error_message(r: requests.Response) -> str:
    try:
        data = r.json()
    except ValueError:
        return f"HTTP error {r.status_code}"
    if isinstance(data, dict) and data.get("error"):
        return str(data["error"])
    return f"HTTP error {r.status_code}"


class BackendClient:
    """Thin wrapper over the booking backend's JSON API."""

    def __init__(self, cfg: BackendConfig):
        self.cfg = cfg

    def _headers(self, token: str | None) -> dict:
        headers = {"Content-Type": "application/json", "Accept": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    def request(self, method: str, path: str, payload: dict | None = None,
                params: dict | None = None, token: str | None = None) -> Any:
        url = path if path.startswith("http") else f"{self.cfg.base_url}{path}"
        logger.debug("backend request %s %s", method.upper(), url)
        try:
            r = requests.request(
                method=method.upper(),
                url=url,
                json=payload,
                params=params,
                headers=self._headers(token),
                timeout=self.cfg.timeout,
            )
        except requests.RequestException as e:
            logger.warning("backend unreachable", extra={"path": path, "reason": str(e)})
            raise BackendError(f"Could not reach booking service: {e}") from e

        if not r.ok:
            msg = _error_message(r)
            logger.warning("backend error", extra={"path": path, "status": r.status_code, "reason": msg})
            raise BackendError(msg, status_code=r.status_code)

        if "application/json" in (r.headers.get("content-type") or ""):
            try:
                return r.json()
            except ValueError as e:
                logger.warning("backend sent malformed json", extra={"path": path, "status": r.status_code})
                raise BackendError("Invalid response from server", status_code=r.status_code) from e
        return r.text

    # ---- bookings ----
    def create_booking(self, payload: dict) -> dict:
        """POST /book. Returns {"message": ..., "booking": {...}}."""
        return self.request("POST", "/book", payload=payload)

    def get_booking(self, booking_id: str | None = None, contact_number: str | None = None) -> dict:
        params = {}
        if booking_id:
            params["booking_id"] = booking_id
        elif contact_number:
            params["contact_number"] = contact_number
        return self.request("GET", "/booking", params=params or None)

    def list_bookings(self) -> Any:
        return self.request("GET", "/bookings")

    def delete_booking(self, booking_id: str) -> dict:
        return self.request("DELETE", f"/bookings/{quote(booking_id, safe='')}")

    def delete_past_bookings(self) -> dict:
        return self.request("DELETE", "/bookings/past")

    # ---- admin ----
    def admin_login(self, username: str, password: str) -> dict:
        return self.request("POST", "/signin", payload={"username": username, "password": password})

    def update_admin(self, admin: dict, token: str | None = None) -> dict:
        return self.request("POST", "/admin", payload=admin, token=token)

    # ---- employees ----
    def list_employees(self, token: str | None = None) -> dict:
        return self.request("GET", "/employees", token=token)

    def get_employee(self, username: str, token: str | None = None) -> dict:
        return self.request("GET", f"/employees/{quote(username, safe='')}", token=token)

    def save_employee(self, employee: dict, token: str | None = None) -> dict:
        return self.request("POST", "/employees", payload=employee, token=token)

    def delete_employee(self, username: str, token: str | None = None) -> dict:
        return self.request("DELETE", f"/employees/{quote(username, safe='')}", token=token)

    def add_payment(self, username: str, payment: dict, token: str | None = None) -> dict:
        return self.request("POST", f"/employees/{quote(username, safe='')}/payments", payload=payment, token=token)

    def delete_payment(self, username: str, payment_id: str, token: str | None = None) -> dict:
        return self.request(
            "DELETE",
            f"/employees/{quote(username, safe='')}/payments/{quote(str(payment_id), safe='')}",
            token=token,
        )

    def check_health(self) -> Any:
        return self.request("GET", "/health")


def client_from_settings() -> BackendClient:
    return BackendClient(BackendConfig(
        base_url=settings.API_URL,
        timeout=settings.API_TIMEOUT_SECONDS,
    ))

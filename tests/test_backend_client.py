import pytest
import requests

from modernband.services import backend_client
from modernband.services.backend_client import BackendClient, BackendConfig, BackendError


class FakeResponse:
    def __init__(self, status_code=200, body=None, content_type="application/json", text=""):
        self.status_code = status_code
        self._body = body
        self.headers = {"content-type": content_type}
        self.text = text

    @property
    def ok(self):
        return 200 <= self.status_code < 300

    def json(self):
        if self._body is None:
            raise ValueError("no json")
        return self._body


class Recorder(list):
    pass


@pytest.fixture
def api(monkeypatch):
    recorded = Recorder()
    recorded.responses = []

    def fake_request(**kwargs):
        recorded.append(kwargs)
        result = recorded.responses.pop(0)
        if isinstance(result, Exception):
            raise result
        return result

    monkeypatch.setattr(backend_client.requests, "request", fake_request)
    client = BackendClient(BackendConfig(base_url="http://backend.test/api", timeout=5))
    return client, recorded


def test_create_booking_posts_json(api):
    client, rec = api
    rec.responses.append(FakeResponse(201, {"message": "ok", "booking": {"id": "MB-7"}}))
    out = client.create_booking({"name": "Riya"})
    assert out["booking"]["id"] == "MB-7"
    call = rec[0]
    assert call["method"] == "POST"
    assert call["url"] == "http://backend.test/api/book"
    assert call["json"] == {"name": "Riya"}
    assert call["timeout"] == 5


def test_error_field_becomes_message(api):
    client, rec = api
    rec.responses.append(FakeResponse(400, {"error": "Date already booked"}))
    with pytest.raises(BackendError) as exc:
        client.create_booking({})
    assert str(exc.value) == "Date already booked"
    assert exc.value.status_code == 400


def test_generic_message_when_body_unreadable(api):
    client, rec = api
    rec.responses.append(FakeResponse(503, None, content_type="text/html"))
    with pytest.raises(BackendError) as exc:
        client.list_bookings()
    assert str(exc.value) == "HTTP error 503"


def test_network_failure_wrapped(api):
    client, rec = api
    rec.responses.append(requests.ConnectionError("refused"))
    with pytest.raises(BackendError) as exc:
        client.list_bookings()
    assert exc.value.status_code is None
    assert "refused" in str(exc.value)


def test_lookup_prefers_booking_id(api):
    client, rec = api
    rec.responses += [FakeResponse(200, {"booking": {}}), FakeResponse(200, {"bookings": []})]
    client.get_booking(booking_id="MB-1", contact_number="9876543210")
    client.get_booking(contact_number="9876543210")
    assert rec[0]["params"] == {"booking_id": "MB-1"}
    assert rec[1]["params"] == {"contact_number": "9876543210"}


def test_non_json_response_returned_as_text(api):
    client, rec = api
    rec.responses.append(FakeResponse(200, None, content_type="text/plain", text="OK"))
    assert client.check_health() == "OK"


def test_token_sent_as_bearer_and_ids_quoted(api):
    client, rec = api
    rec.responses.append(FakeResponse(200, {"message": "deleted"}))
    client.delete_payment("ram kumar", "p/1", token="tkn")
    call = rec[0]
    assert call["url"] == "http://backend.test/api/employees/ram%20kumar/payments/p%2F1"
    assert call["headers"]["Authorization"] == "Bearer tkn"


def test_malformed_json_body_becomes_backend_error(api):
    client, rec = api
    rec.responses.append(FakeResponse(200, None, text="{oops"))
    with pytest.raises(BackendError) as exc:
        client.list_bookings()
    assert str(exc.value) == "Invalid response from server"
    assert exc.value.status_code == 200


def test_public_calls_carry_no_credentials(api):
    client, rec = api
    rec.responses += [FakeResponse(200, {"booking": {}}), FakeResponse(201, {"booking": {}}),
                      FakeResponse(200, {"employee": {}})]
    client.get_booking(booking_id="MB-1")
    client.create_booking({"name": "Riya"})
    client.get_employee("ramu")
    assert all("Authorization" not in call["headers"] for call in rec)

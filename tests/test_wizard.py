from datetime import date, timedelta

import pytest

from modernband.schemas.booking import PackageType, TimeSlot
from modernband.services.backend_client import BackendError
from modernband.services.wizard import (
    BookingWizard,
    IncompleteDraft,
    WizardError,
    WizardNotFound,
    WizardStore,
)

TODAY = date(2026, 10, 18)

PERSONAL = {"name": "Riya Sharma", "email": "riya@example.com", "phone": "9876543210"}
EVENT = {"packageType": PackageType.BARAAT, "date": TODAY + timedelta(days=45), "venue": "Lawns", "city": "Jaipur"}
PAYMENT = {"amount": 30000, "advancePayment": 10000}


class StubGateway:
    def __init__(self, error: BackendError | None = None):
        self.error = error
        self.payloads = []

    def create_booking(self, payload):
        self.payloads.append(payload)
        if self.error:
            raise self.error
        return {"message": "ok", "booking": {**payload, "id": "MB-1", "createdAt": "2026-10-18T10:00:00Z"}}


def make_wizard() -> BookingWizard:
    return BookingWizard(today=lambda: TODAY)


def filled_to_confirmation() -> BookingWizard:
    w = make_wizard()
    for values in (PERSONAL, EVENT, {}, PAYMENT):
        w.update(values)
        assert w.advance(), w.errors
    assert w.show_confirmation
    return w


def test_advance_blocked_until_step_valid():
    w = make_wizard()
    w.update({"name": "Jo", "email": "x", "phone": "12345"})
    assert w.advance() is False
    assert w.step == 1
    assert set(w.errors) == {"email", "phone"}
    assert w.step_valid[1] is False

    w.update({"email": "jo@example.com", "phone": "1234567890"})
    assert w.advance() is True
    assert w.step == 2
    assert w.step_valid[1] is True
    assert w.errors == {}


def test_later_step_fields_not_checked_early():
    w = make_wizard()
    w.update({**PERSONAL, "amount": -100})
    assert w.advance() is True


def test_retreat_is_linear_and_stops_at_one():
    w = make_wizard()
    assert w.retreat() == 1
    w.update(PERSONAL)
    w.advance()
    w.update({"venue": "x"})  # step 2 invalid; retreat ignores validity
    assert w.retreat() == 1
    assert w.retreat() == 1


def test_last_step_opens_confirmation_instead_of_moving():
    w = filled_to_confirmation()
    assert w.step == 4
    assert w.status == "active"
    w.retreat()
    assert w.step == 3
    assert w.show_confirmation is False


def test_submit_requires_confirmation():
    w = make_wizard()
    with pytest.raises(WizardError):
        w.submit(StubGateway())


def test_successful_submit_records_booking():
    w = filled_to_confirmation()
    gateway = StubGateway()
    record = w.submit(gateway)
    assert record.id == "MB-1"
    assert w.status == "submitted"
    assert w.record is record
    assert w.show_confirmation is False
    payload = gateway.payloads[0]
    assert payload["date"] == (TODAY + timedelta(days=45)).isoformat()
    assert payload["DoliForVidai"] is False
    assert payload["packageType"] == "Baraat Band Package"
    with pytest.raises(WizardError):
        w.update({"name": "Other"})


def test_failed_submit_keeps_draft_and_reports_error():
    w = filled_to_confirmation()
    before = w.draft.model_dump()
    with pytest.raises(BackendError):
        w.submit(StubGateway(BackendError("Could not reach booking service: timeout")))
    assert w.draft.model_dump() == before
    assert w.submit_error == "Could not reach booking service: timeout"
    assert w.submitting is False
    assert w.status == "active"
    # Retry with the same draft
    assert w.submit(StubGateway()).id == "MB-1"
    assert w.submit_error is None


def test_invalid_backend_response_is_a_submission_error():
    class NoId(StubGateway):
        def create_booking(self, payload):
            return {"message": "ok"}

    w = filled_to_confirmation()
    with pytest.raises(BackendError, match="Invalid response"):
        w.submit(NoId())
    assert w.submit_error == "Invalid response from server"


def test_second_submit_while_in_flight_rejected():
    w = filled_to_confirmation()
    w.submitting = True
    with pytest.raises(WizardError):
        w.submit(StubGateway())


def test_submit_revalidates_whole_draft():
    w = filled_to_confirmation()
    w.draft = w.draft.model_copy(update={"phone": "12"})
    with pytest.raises(IncompleteDraft) as exc:
        w.submit(StubGateway())
    assert exc.value.errors == {"phone": "Invalid phone number"}


def test_stale_options_kept_in_draft_but_not_sent():
    w = make_wizard()
    w.update(PERSONAL)
    w.advance()
    w.update(EVENT)
    w.advance()
    w.update({"numberOfPeople": 12, "numberOfLights": 8, "bandTime": TimeSlot.CUSTOM, "customTimeSlot": "5PM"})
    w.advance()
    # Back to event details and switch package
    w.retreat()
    w.retreat()
    w.update({"packageType": PackageType.FULL_WEDDING})
    assert w.draft.numberOfPeople == 12
    w.advance()
    w.advance()
    w.update(PAYMENT)
    assert w.advance()
    gateway = StubGateway()
    w.submit(gateway)
    sent = gateway.payloads[0]
    assert sent["numberOfPeople"] is None
    assert sent["numberOfLights"] is None
    assert sent["bandTime"] is None
    assert sent["customTimeSlot"] == ""


def test_patch_can_clear_optional_number():
    w = make_wizard()
    w.update({"numberOfLights": 4})
    w.update({"numberOfLights": None, "name": None})
    assert w.draft.numberOfLights is None
    assert w.draft.name == ""


def test_store_expires_idle_wizards():
    now = [0.0]
    store = WizardStore(ttl_seconds=60, clock=lambda: now[0])
    w = store.create()
    now[0] = 30
    assert store.get(w.id) is w
    now[0] = 100
    with pytest.raises(WizardNotFound):
        store.get(w.id)


def test_edit_after_confirmation_needs_fresh_review():
    w = filled_to_confirmation()
    w.update({"amount": 1, "advancePayment": 999999})
    assert w.show_confirmation is False
    gateway = StubGateway()
    with pytest.raises(WizardError):
        w.submit(gateway)
    assert gateway.payloads == []

    assert w.advance()
    assert w.submit(gateway).id == "MB-1"
    assert gateway.payloads[0]["amount"] == 1


def test_empty_patch_keeps_confirmation_open():
    w = filled_to_confirmation()
    w.update({})
    assert w.show_confirmation is True


def test_unexpected_gateway_error_leaves_wizard_retryable():
    class Exploding(StubGateway):
        def create_booking(self, payload):
            raise ValueError("boom")

    w = filled_to_confirmation()
    with pytest.raises(ValueError):
        w.submit(Exploding())
    assert w.submitting is False
    assert w.submit_error == "Booking could not be submitted"
    assert w.status == "active"

    w.update({"customization": "Extra dhol player"})
    assert w.advance()
    assert w.submit(StubGateway()).id == "MB-1"


def test_malformed_backend_json_is_a_submission_error(monkeypatch):
    from modernband.services import backend_client
    from modernband.services.backend_client import BackendClient, BackendConfig

    class BadJson:
        status_code = 201
        ok = True
        headers = {"content-type": "application/json"}
        text = "{not json"

        def json(self):
            raise ValueError("Expecting property name")

    monkeypatch.setattr(backend_client.requests, "request", lambda **kw: BadJson())
    w = filled_to_confirmation()
    with pytest.raises(BackendError, match="Invalid response"):
        w.submit(BackendClient(BackendConfig(base_url="http://backend.test/api")))
    assert w.submitting is False
    assert w.submit_error == "Invalid response from server"
    w.update({"name": "Riya S"})

"""Four-step booking wizard: Personal Info, Event Details, Features, Payment.

Navigation is linear. `advance` validates the current step before moving;
on the last step it opens the confirmation instead. `submit` is only allowed
with the confirmation open and hands the frozen payload to the gateway.
"""
from __future__ import annotations

import logging
import threading
import time
import uuid
from datetime import date
from typing import Callable, Protocol

from pydantic import ValidationError

from modernband.schemas.booking import BookingDraft, BookingRecord, DraftPatch
from modernband.services import booking_form
from modernband.services.backend_client import BackendError
from modernband.services.pricing import PriceSummary, price_summary

logger = logging.getLogger(__name__)

FIRST_STEP = 1
LAST_STEP = 4

STATUS_ACTIVE = "active"
STATUS_SUBMITTED = "submitted"

# Draft fields that may be reset to null from a patch
_NULLABLE = frozenset(
    (f.alias or name) for name, f in BookingDraft.model_fields.items() if f.default is None
)


class BookingGateway(Protocol):
    def create_booking(self, payload: dict) -> dict: ...


class WizardError(RuntimeError):
    """Action not allowed in the wizard's current state."""


class WizardNotFound(KeyError):
    pass


class IncompleteDraft(WizardError):
    def __init__(self, errors: dict[str, str]):
        super().__init__("Booking details are incomplete")
        self.errors = errors


class BookingWizard:
    def __init__(self, wizard_id: str | None = None, today: Callable[[], date] = date.today):
        self.id = wizard_id or uuid.uuid4().hex
        self.draft = BookingDraft()
        self.step = FIRST_STEP
        self.status = STATUS_ACTIVE
        self.step_valid: dict[int, bool] = {s: False for s in booking_form.STEP_NAMES}
        self.errors: dict[str, str] = {}
        self.show_confirmation = False
        self.submitting = False
        self.submit_error: str | None = None
        self.record: BookingRecord | None = None
        self._today = today
        self._lock = threading.Lock()

    # ---- state ----
    @property
    def step_name(self) -> str:
        return booking_form.STEP_NAMES[self.step]

    def relevant_fields(self) -> frozenset[str]:
        return booking_form.relevant_fields_for(self.draft)

    def summary(self) -> PriceSummary:
        return price_summary(self.draft)

    def _ensure_editable(self):
        if self.status == STATUS_SUBMITTED:
            raise WizardError("Booking already submitted")
        if self.submitting:
            raise WizardError("Booking submission in progress")

    # ---- draft ----
    def update(self, patch: DraftPatch | dict) -> BookingDraft:
        """Merge field values into the draft.

        Conditional fields left over from a previous package type are kept;
        they are ignored by validation and nulled in the submission payload.
        An edit closes the confirmation, so the summary has to be reviewed
        again before it can be submitted.
        """
        self._ensure_editable()
        if isinstance(patch, DraftPatch):
            changes = patch.model_dump(exclude_unset=True, by_alias=True)
        else:
            changes = DraftPatch.model_validate(patch).model_dump(exclude_unset=True, by_alias=True)
        changes = {k: v for k, v in changes.items() if v is not None or k in _NULLABLE}
        merged = {**self.draft.model_dump(by_alias=True), **changes}
        self.draft = BookingDraft.model_validate(merged)
        if changes:
            self.show_confirmation = False
        for key in changes:
            self.errors.pop(key, None)
        return self.draft

    # ---- navigation ----
    def validate_step(self, step: int | None = None) -> booking_form.ValidationResult:
        step = step or self.step
        fields = booking_form.fields_for_step(step, self.draft)
        return booking_form.validate(self.draft, fields, today=self._today())

    def advance(self) -> bool:
        self._ensure_editable()
        result = self.validate_step()
        self.step_valid[self.step] = result.valid
        self.errors = dict(result.errors)
        if not result.valid:
            return False
        if self.step == LAST_STEP:
            self.show_confirmation = True
            return True
        self.show_confirmation = False
        self.step += 1
        return True

    def retreat(self) -> int:
        if self.status == STATUS_SUBMITTED:
            raise WizardError("Booking already submitted")
        self.show_confirmation = False
        self.errors = {}
        self.step = max(FIRST_STEP, self.step - 1)
        return self.step

    def cancel_confirmation(self):
        self.show_confirmation = False

    # ---- submission ----
    def payload(self) -> dict:
        """Request body for the backend. Irrelevant conditional fields go out as null."""
        data = self.draft.model_dump(mode="json", by_alias=True)
        relevant = self.relevant_fields()
        for name in booking_form.CONDITIONAL_FIELDS:
            if name not in relevant:
                data[name] = None
        if "customTimeSlot" not in relevant:
            data["customTimeSlot"] = ""
        return data

    def submit(self, gateway: BookingGateway) -> BookingRecord:
        with self._lock:
            self._ensure_editable()
            if not self.show_confirmation:
                raise WizardError("Review the booking summary before confirming")
            result = booking_form.validate(
                self.draft, booking_form.all_required_fields(self.draft), today=self._today()
            )
            if not result.valid:
                self.errors = dict(result.errors)
                raise IncompleteDraft(result.errors)
            self.submitting = True
            self.submit_error = None

        payload = self.payload()
        try:
            response = gateway.create_booking(payload)
            booking = response.get("booking", response) if isinstance(response, dict) else None
            try:
                record = BookingRecord.model_validate(booking)
            except ValidationError as e:
                raise BackendError("Invalid response from server") from e
        except BackendError as e:
            with self._lock:
                self.submit_error = str(e)
            logger.warning("booking submission failed", extra={"wizard_id": self.id, "reason": str(e)})
            raise
        except Exception:
            with self._lock:
                self.submit_error = "Booking could not be submitted"
            logger.exception("booking submission crashed", extra={"wizard_id": self.id})
            raise
        finally:
            # submitting never outlives the gateway call
            with self._lock:
                self.submitting = False

        with self._lock:
            self.show_confirmation = False
            self.record = record
            self.status = STATUS_SUBMITTED
        logger.info("booking submitted", extra={"wizard_id": self.id, "booking_id": record.id})
        return record


class WizardStore:
    """In-memory wizards keyed by id, dropped after `ttl_seconds` idle."""

    def __init__(self, ttl_seconds: int, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._items: dict[str, tuple[BookingWizard, float]] = {}
        self._lock = threading.Lock()

    def _purge(self, now: float):
        expired = [k for k, (_, seen) in self._items.items() if now - seen > self.ttl_seconds]
        for k in expired:
            del self._items[k]

    def create(self, **kwargs) -> BookingWizard:
        wizard = BookingWizard(**kwargs)
        with self._lock:
            now = self._clock()
            self._purge(now)
            self._items[wizard.id] = (wizard, now)
        return wizard

    def get(self, wizard_id: str) -> BookingWizard:
        with self._lock:
            now = self._clock()
            self._purge(now)
            item = self._items.get(wizard_id)
            if not item:
                raise WizardNotFound(wizard_id)
            self._items[wizard_id] = (item[0], now)
            return item[0]

    def discard(self, wizard_id: str):
        with self._lock:
            self._items.pop(wizard_id, None)

    def __len__(self) -> int:
        return len(self._items)

"""Booking form rules: which fields each wizard step owns, which package
options apply to a draft, and per-field validation.

`relevant_fields` is the one place that decides whether a conditional field
matters. The validator, the submission payload and the page's field list all
go through it.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import date
from typing import Iterable

from modernband.schemas.booking import BookingDraft, PackageType, TimeSlot

PHONE_RE = re.compile(r"^[0-9]{10}$")
EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

MAX_DHOLS = 10
GHODA_BAGGI_CHOICES = (1, 2, 3, 4)

STEP_NAMES = {1: "Personal Info", 2: "Event Details", 3: "Features", 4: "Payment"}

PERSONAL_FIELDS = ("name", "email", "phone", "additionalPhone")
EVENT_FIELDS = ("packageType", "date", "venue", "city")
PAYMENT_FIELDS = ("amount", "advancePayment")

# Shown on step 3 whatever the package
ADDON_FIELDS = ("fireworks", "flowerCanon", "DoliForVidai", "customization")

# Fields whose relevance depends on the package type or a toggle
CONDITIONAL_FIELDS = (
    "bandTime",
    "customTimeSlot",
    "numberOfPeople",
    "numberOfLights",
    "ghodiForBaraat",
    "ghodaBaggi",
    "numberOfDhols",
    "fireworksAmount",
)

BAND_PACKAGES = (PackageType.BARAAT.value, PackageType.DJ.value)


@dataclass(frozen=True)
class ValidationResult:
    valid: bool
    errors: dict[str, str] = field(default_factory=dict)


def _value(v) -> str | None:
    """Enum members and their plain string values compare the same here."""
    if v is None:
        return None
    return getattr(v, "value", v)


def relevant_fields(package_type, band_time=None, ghodi_for_baraat: bool = False,
                    fireworks: bool = False) -> frozenset[str]:
    """Fields that apply to the draft's package type and toggles."""
    pkg = _value(package_type)
    slot = _value(band_time)
    out: set[str] = set(ADDON_FIELDS)
    if fireworks:
        out.add("fireworksAmount")

    if pkg in BAND_PACKAGES:
        out.update(("bandTime", "numberOfLights", "ghodiForBaraat"))
        if pkg == PackageType.BARAAT.value:
            out.add("numberOfPeople")
        if not ghodi_for_baraat:
            out.add("ghodaBaggi")
    elif pkg == PackageType.DHOL.value:
        out.update(("bandTime", "numberOfDhols"))

    if "bandTime" in out and slot == TimeSlot.CUSTOM.value:
        out.add("customTimeSlot")
    return frozenset(out)


def relevant_fields_for(draft: BookingDraft) -> frozenset[str]:
    return relevant_fields(draft.packageType, draft.bandTime, draft.ghodiForBaraat, draft.fireworks)


def fields_for_step(step: int, draft: BookingDraft) -> tuple[str, ...]:
    """Fields checked before leaving `step`. Later steps are never included."""
    if step == 1:
        return PERSONAL_FIELDS
    if step == 2:
        return EVENT_FIELDS
    if step == 3:
        relevant = relevant_fields_for(draft)
        return tuple(f for f in CONDITIONAL_FIELDS + ADDON_FIELDS
                     if f in relevant and f != "fireworksAmount")
    if step == 4:
        if "fireworksAmount" in relevant_fields_for(draft):
            return PAYMENT_FIELDS + ("fireworksAmount",)
        return PAYMENT_FIELDS
    return ()


def all_required_fields(draft: BookingDraft) -> tuple[str, ...]:
    out: list[str] = []
    for step in STEP_NAMES:
        out.extend(f for f in fields_for_step(step, draft) if f not in out)
    return tuple(out)


def _non_negative(v, label: str) -> str | None:
    if v is not None and v < 0:
        return f"{label} must be 0 or greater"
    return None


def _check(draft: BookingDraft, name: str, today: date) -> str | None:
    if name == "name":
        if len(draft.name.strip()) < 2:
            return "Name must be at least 2 characters"
    elif name == "email":
        if not EMAIL_RE.match(draft.email.strip()):
            return "Invalid email address"
    elif name == "phone":
        if not PHONE_RE.match(draft.phone.strip()):
            return "Invalid phone number"
    elif name == "additionalPhone":
        extra = draft.additionalPhone.strip()
        if extra and not PHONE_RE.match(extra):
            return "Invalid phone number"
    elif name == "packageType":
        if _value(draft.packageType) not in {p.value for p in PackageType}:
            return "Please select a package"
    elif name == "date":
        if draft.date is None:
            return "Please select a date"
        if draft.date < today:
            return "Event date cannot be in the past"
    elif name == "venue":
        if len(draft.venue.strip()) < 2:
            return "Venue is required"
    elif name == "city":
        if len(draft.city.strip()) < 2:
            return "City is required"
    elif name == "bandTime":
        if draft.bandTime is not None and _value(draft.bandTime) not in {t.value for t in TimeSlot}:
            return "Please select a valid time slot"
    elif name == "customTimeSlot":
        if _value(draft.bandTime) == TimeSlot.CUSTOM.value and not draft.customTimeSlot.strip():
            return "Please enter your custom time slot"
    elif name == "numberOfPeople":
        return _non_negative(draft.numberOfPeople, "Number of people")
    elif name == "numberOfLights":
        return _non_negative(draft.numberOfLights, "Number of lights")
    elif name == "numberOfDhols":
        err = _non_negative(draft.numberOfDhols, "Number of dhols")
        if err:
            return err
        if draft.numberOfDhols is not None and draft.numberOfDhols > MAX_DHOLS:
            return f"Number of dhols cannot exceed {MAX_DHOLS}"
    elif name == "ghodaBaggi":
        if draft.ghodaBaggi is not None and draft.ghodaBaggi not in GHODA_BAGGI_CHOICES:
            return "Please select between 1 and 4 Ghoda Baggi"
    elif name == "fireworksAmount":
        return _non_negative(draft.fireworksAmount, "Fireworks amount")
    elif name == "amount":
        return _non_negative(draft.amount, "Amount")
    elif name == "advancePayment":
        return _non_negative(draft.advancePayment, "Advance payment")
    return None


def validate(draft: BookingDraft, fields: Iterable[str], today: date | None = None) -> ValidationResult:
    """Check only `fields` on the draft. Never raises and never mutates the draft."""
    today = today or date.today()
    errors: dict[str, str] = {}
    for name in fields:
        msg = _check(draft, name, today)
        if msg:
            errors[name] = msg
    return ValidationResult(valid=not errors, errors=errors)

"""Shaping of backend data for the admin console: booking list
normalisation and filters, dashboard counts, employee payment totals."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Iterable

from modernband.services.pricing import Amount, as_amount

REQUIRED_BOOKING_KEYS = ("id", "name", "email", "phone", "packageType", "date", "venue", "city", "amount")

MONTH_NAMES = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)


@dataclass
class BookingFilters:
    name: str = ""
    phone: str = ""
    month: int | None = None       # 1-12
    eventDate: date | None = None
    packageType: str = ""
    activeOnly: bool = False

    def is_empty(self) -> bool:
        return not (self.name or self.phone or self.month or self.eventDate or self.packageType or self.activeOnly)

    def describe(self) -> list[str]:
        """Human readable lines for the report header."""
        out = []
        if self.name:
            out.append(f"Name contains: {self.name}")
        if self.phone:
            out.append(f"Phone contains: {self.phone}")
        if self.month:
            out.append(f"Month: {MONTH_NAMES[self.month - 1]}")
        if self.eventDate:
            out.append(f"Date: {self.eventDate.isoformat()}")
        if self.packageType:
            out.append(f"Package: {self.packageType}")
        out.append("Only future bookings" if self.activeOnly else "Including past bookings")
        return out


def parse_event_date(value: Any) -> date | None:
    """Accept YYYY-MM-DD or a full ISO timestamp."""
    if not value:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        return None


def is_upcoming(d: date, today: date) -> bool:
    """An event dated today still counts as upcoming."""
    return d >= today


def normalize_bookings(data: Any) -> list[dict]:
    """Pull the booking list out of whichever envelope the backend used.

    Entries missing a required key are dropped; `eventDate` stands in for a
    missing `date`.
    """
    items: list = []
    if isinstance(data, list):
        items = data
    elif isinstance(data, dict):
        for key in ("bookings", "data", "results"):
            if isinstance(data.get(key), list):
                items = data[key]
                break

    out = []
    for b in items:
        if not isinstance(b, dict):
            continue
        b = dict(b)
        if not b.get("date") and b.get("eventDate"):
            b["date"] = b["eventDate"]
        if all(k in b for k in REQUIRED_BOOKING_KEYS):
            out.append(b)
    return out


def filter_bookings(bookings: Iterable[dict], f: BookingFilters, today: date | None = None) -> list[dict]:
    today = today or date.today()
    result = list(bookings)
    if f.name:
        needle = f.name.lower()
        result = [b for b in result if needle in str(b.get("name", "")).lower()]
    if f.phone:
        result = [b for b in result if f.phone in str(b.get("phone", ""))]
    if f.month:
        result = [b for b in result if (d := parse_event_date(b.get("date"))) and d.month == f.month]
    if f.eventDate:
        result = [b for b in result if parse_event_date(b.get("date")) == f.eventDate]
    if f.packageType:
        result = [b for b in result if b.get("packageType") == f.packageType]
    if f.activeOnly:
        # Undated bookings stay listed
        result = [b for b in result if (d := parse_event_date(b.get("date"))) is None or is_upcoming(d, today)]
    return result


def package_types(bookings: Iterable[dict]) -> list[str]:
    return sorted({b["packageType"] for b in bookings if b.get("packageType")})


def total_amount(bookings: Iterable[dict]) -> Amount:
    return sum(as_amount(b.get("amount")) for b in bookings)


def _created_key(b: dict) -> str:
    return str(b.get("createdAt") or b.get("date") or "")


def booking_stats(bookings: list[dict], today: date | None = None) -> dict:
    today = today or date.today()
    this_month = upcoming = 0
    monthly = [0] * 12
    for b in bookings:
        d = parse_event_date(b.get("date"))
        if d is None:
            continue
        if d.year == today.year:
            monthly[d.month - 1] += 1
            if d.month == today.month:
                this_month += 1
        if is_upcoming(d, today):
            upcoming += 1
    recent = sorted(bookings, key=_created_key, reverse=True)[:5]
    return {
        "total": len(bookings),
        "thisMonth": this_month,
        "upcoming": upcoming,
        "monthly": [{"month": MONTH_NAMES[i][:3], "count": c} for i, c in enumerate(monthly)],
        "recent": recent,
    }


def employee_stats(employees: list[dict]) -> dict:
    to_pay = sum(as_amount(e.get("totalAmountToBePaid")) for e in employees)
    advance = sum(as_amount(e.get("totalAmountPaidInAdvance")) for e in employees)
    return {
        "count": len(employees),
        "totalAmount": to_pay,
        "advanceAmount": advance,
        "remainingAmount": to_pay - advance,
        "percentPaid": round(advance / (to_pay or 1) * 100),
    }


def with_payment_totals(employee: dict) -> dict:
    """Add `totalPaid` (sum of recorded payments), `totalWithAdvance` and the outstanding balance."""
    payments = employee.get("payments") or []
    paid = sum(as_amount(p.get("amountPaid")) for p in payments)
    to_pay = as_amount(employee.get("totalAmountToBePaid"))
    advance = as_amount(employee.get("totalAmountPaidInAdvance"))
    return {**employee, "totalPaid": paid, "totalWithAdvance": advance + paid,
            "balance": to_pay - advance - paid}

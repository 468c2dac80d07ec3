from datetime import datetime, timezone

from modernband.services.admin_service import BookingFilters
from modernband.services.report_service import (
    render_booking_confirmation,
    render_bookings_report,
    render_employee_report,
)

STAMP = datetime(2026, 10, 18, 9, 30, tzinfo=timezone.utc)

BOOKING = {
    "id": "MB-0001", "name": "Riya Sharma", "email": "riya@example.com", "phone": "9876543210",
    "packageType": "Baraat Band Package", "date": "2026-12-02", "venue": "Rambagh Lawns", "city": "Jaipur",
    "bandTime": "7PM to 9PM", "numberOfPeople": 12, "fireworks": True, "fireworksAmount": 5000,
    "amount": 30000, "advancePayment": 10000,
}


def test_bookings_report_is_pdf():
    pdf = render_bookings_report([BOOKING] * 3, BookingFilters(name="riya"), generated_at=STAMP)
    assert pdf.startswith(b"%PDF")


def test_empty_report_still_renders():
    assert render_bookings_report([], generated_at=STAMP).startswith(b"%PDF")


def test_confirmation_tolerates_sparse_booking():
    assert render_booking_confirmation(BOOKING, generated_at=STAMP).startswith(b"%PDF")
    assert render_booking_confirmation({"id": "MB-9"}, generated_at=STAMP).startswith(b"%PDF")


def test_filter_text_with_markup_characters():
    filters = BookingFilters(name="A<B & <i>Sons", packageType="Dhol & Band")
    pdf = render_bookings_report([{**BOOKING, "name": "A<B"}], filters, generated_at=STAMP)
    assert pdf.startswith(b"%PDF")


EMPLOYEE = {
    "username": "ramu", "name": "Ramu <Lal>", "email": "ramu@example.com", "mobileNumber": "9123456780",
    "address": "12 Station Road", "createdAt": "2026-01-10T08:00:00Z",
    "totalAmountToBePaid": 9000, "totalAmountPaidInAdvance": 1000.5,
    "payments": [{"amountPaid": 2000, "date": "2026-03-01", "note": "March"}, {"amountPaid": "500.25", "date": "2026-04-01"}],
}


def test_employee_report_with_payments():
    assert render_employee_report(EMPLOYEE, generated_at=STAMP).startswith(b"%PDF")


def test_employee_report_without_payments():
    bare = {"username": "new", "name": "New Hire"}
    assert render_employee_report(bare, generated_at=STAMP).startswith(b"%PDF")

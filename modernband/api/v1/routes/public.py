import re

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import Response

from modernband.api.deps import backend_http_error, get_backend
from modernband.schemas.booking import BookingLookupOut, PriceSummaryOut
from modernband.services.admin_service import with_payment_totals
from modernband.services.backend_client import BackendClient, BackendError
from modernband.services.catalog import FAQS, PACKAGES, booking_options
from modernband.services.pricing import price_summary_from_payload
from modernband.services.report_service import render_booking_confirmation, render_employee_report

router = APIRouter(tags=["public"])

_PHONE = re.compile(r"^\d{10}$")


@router.get("/public/packages")
def list_packages():
    return {"items": PACKAGES}


@router.get("/public/faqs")
def list_faqs():
    return {"items": FAQS}


@router.get("/public/booking-options")
def get_booking_options():
    return booking_options()


def lookup_booking(backend: BackendClient, identifier: str) -> dict:
    """A 10-digit identifier is a phone number (most recent booking wins), anything else a booking id."""
    ident = (identifier or "").strip()
    if not ident:
        raise HTTPException(status_code=400, detail="Enter a booking ID or phone number")
    is_phone = bool(_PHONE.match(ident))
    try:
        data = backend.get_booking(
            booking_id=None if is_phone else ident,
            contact_number=ident if is_phone else None,
        )
    except BackendError as e:
        raise backend_http_error(e)

    if isinstance(data, dict):
        if isinstance(data.get("bookings"), list) and data["bookings"]:
            return data["bookings"][0]
        if isinstance(data.get("booking"), dict):
            return data["booking"]
    raise HTTPException(status_code=404, detail="No booking found")


@router.get("/public/bookings/lookup", response_model=BookingLookupOut)
def get_booking(identifier: str, backend: BackendClient = Depends(get_backend)):
    booking = lookup_booking(backend, identifier)
    return BookingLookupOut(
        booking=booking,
        summary=PriceSummaryOut(**price_summary_from_payload(booking).as_dict()),
    )


@router.get("/public/bookings/lookup/confirmation.pdf")
def download_confirmation(identifier: str, backend: BackendClient = Depends(get_backend)):
    booking = lookup_booking(backend, identifier)
    pdf = render_booking_confirmation(booking)
    ref = booking.get("id") or "booking"
    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="booking-{ref}.pdf"'},
    )


def _public_employee(backend: BackendClient, username: str) -> dict:
    try:
        data = backend.get_employee(username)
    except BackendError as e:
        raise backend_http_error(e)
    employee = data.get("employee") if isinstance(data, dict) else None
    if not employee:
        raise HTTPException(status_code=404, detail="Employee not found")
    return {k: v for k, v in employee.items() if k != "password"}


@router.get("/public/employees/{username}")
def employee_details(username: str, backend: BackendClient = Depends(get_backend)):
    """Employee self-service: payment history and balance by username."""
    return {"employee": with_payment_totals(_public_employee(backend, username))}


@router.get("/public/employees/{username}/report.pdf")
def employee_report(username: str, backend: BackendClient = Depends(get_backend)):
    employee = _public_employee(backend, username)
    pdf = render_employee_report(employee)
    safe_name = re.sub(r"[^A-Za-z0-9_.-]", "_", str(employee.get("username") or username))
    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{safe_name}_employee_report.pdf"'},
    )

import logging
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import Response

from modernband.api.deps import backend_http_error, get_admin, get_backend
from modernband.core.config import settings
from modernband.schemas.admin import AdminAccountIn, EmployeeIn, PaymentIn
from modernband.services.admin_service import (
    BookingFilters,
    booking_stats,
    employee_stats,
    filter_bookings,
    normalize_bookings,
    package_types,
    total_amount,
    with_payment_totals,
)
from modernband.services.backend_client import BackendClient, BackendError
from modernband.services.report_service import render_bookings_report
from modernband.services.session_store import AdminSession

logger = logging.getLogger(__name__)

router = APIRouter(tags=["admin"])


def _token() -> str | None:
    return settings.API_TOKEN or None


def booking_filters(
    name: str = "",
    phone: str = "",
    month: int | None = Query(default=None, ge=1, le=12),
    eventDate: date | None = None,
    packageType: str = "",
    activeOnly: bool = False,
) -> BookingFilters:
    return BookingFilters(name=name.strip(), phone=phone.strip(), month=month, eventDate=eventDate,
                          packageType=packageType, activeOnly=activeOnly)


def _all_bookings(backend: BackendClient) -> list[dict]:
    try:
        return normalize_bookings(backend.list_bookings())
    except BackendError as e:
        raise backend_http_error(e)


def _employees(backend: BackendClient) -> list[dict]:
    try:
        data = backend.list_employees(token=_token())
    except BackendError as e:
        raise backend_http_error(e)
    items = data.get("employees") if isinstance(data, dict) else data
    return [e for e in (items or []) if isinstance(e, dict)]


# -------------------------
# ADMIN: BOOKINGS
# -------------------------
@router.get("/admin/bookings")
def list_bookings(f: BookingFilters = Depends(booking_filters),
                  backend: BackendClient = Depends(get_backend),
                  me: AdminSession = Depends(get_admin)):
    everything = _all_bookings(backend)
    items = filter_bookings(everything, f)
    return {
        "total": len(everything),
        "count": len(items),
        "totalAmount": total_amount(items),
        "packageTypes": package_types(everything),
        "items": items,
    }


@router.get("/admin/bookings/report.pdf")
def bookings_report(f: BookingFilters = Depends(booking_filters),
                    backend: BackendClient = Depends(get_backend),
                    me: AdminSession = Depends(get_admin)):
    items = filter_bookings(_all_bookings(backend), f)
    pdf = render_bookings_report(items, f)
    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="bookings-report-{date.today().isoformat()}.pdf"'},
    )


# Declared before /admin/bookings/{booking_id} so "past" is not taken for an id
@router.delete("/admin/bookings/past")
def delete_past_bookings(backend: BackendClient = Depends(get_backend),
                         me: AdminSession = Depends(get_admin)):
    try:
        result = backend.delete_past_bookings()
    except BackendError as e:
        raise backend_http_error(e)
    deleted = result.get("deleted_count", 0) if isinstance(result, dict) else 0
    logger.info("past bookings deleted", extra={"username": me.profile.username, "count": deleted})
    return {"ok": True, "deletedCount": deleted}


@router.delete("/admin/bookings/{booking_id}")
def delete_booking(booking_id: str, backend: BackendClient = Depends(get_backend),
                   me: AdminSession = Depends(get_admin)):
    try:
        backend.delete_booking(booking_id)
    except BackendError as e:
        raise backend_http_error(e)
    logger.info("booking deleted", extra={"username": me.profile.username, "booking_id": booking_id})
    return {"ok": True, "id": booking_id}


# -------------------------
# ADMIN: DASHBOARD
# -------------------------
@router.get("/admin/dashboard")
def dashboard(backend: BackendClient = Depends(get_backend), me: AdminSession = Depends(get_admin)):
    return {
        "bookings": booking_stats(_all_bookings(backend)),
        "employees": employee_stats(_employees(backend)),
    }


# -------------------------
# ADMIN: EMPLOYEES + PAYMENTS
# -------------------------
@router.get("/admin/employees")
def list_employees(q: str = "", backend: BackendClient = Depends(get_backend),
                   me: AdminSession = Depends(get_admin)):
    items = _employees(backend)
    if q:
        ql = q.lower()
        items = [e for e in items
                 if ql in str(e.get("name", "")).lower() or ql in str(e.get("username", "")).lower()]
    return {"total": len(items), "items": items}


@router.get("/admin/employees/{username}")
def get_employee(username: str, backend: BackendClient = Depends(get_backend),
                 me: AdminSession = Depends(get_admin)):
    try:
        data = backend.get_employee(username, token=_token())
    except BackendError as e:
        raise backend_http_error(e)
    employee = data.get("employee") if isinstance(data, dict) else None
    if not employee:
        raise HTTPException(status_code=404, detail="Employee not found")
    return {"employee": with_payment_totals(employee)}


@router.post("/admin/employees")
def save_employee(body: EmployeeIn, backend: BackendClient = Depends(get_backend),
                  me: AdminSession = Depends(get_admin)):
    try:
        result = backend.save_employee(body.to_backend(), token=_token())
    except BackendError as e:
        raise backend_http_error(e)
    logger.info("employee saved", extra={"username": me.profile.username})
    return result


@router.delete("/admin/employees/{username}")
def delete_employee(username: str, backend: BackendClient = Depends(get_backend),
                    me: AdminSession = Depends(get_admin)):
    try:
        backend.delete_employee(username, token=_token())
    except BackendError as e:
        raise backend_http_error(e)
    return {"ok": True}


@router.post("/admin/employees/{username}/payments")
def add_payment(username: str, body: PaymentIn, backend: BackendClient = Depends(get_backend),
                me: AdminSession = Depends(get_admin)):
    try:
        return backend.add_payment(username, body.model_dump(exclude_none=True), token=_token())
    except BackendError as e:
        raise backend_http_error(e)


@router.delete("/admin/employees/{username}/payments/{payment_id}")
def delete_payment(username: str, payment_id: str, backend: BackendClient = Depends(get_backend),
                   me: AdminSession = Depends(get_admin)):
    try:
        backend.delete_payment(username, payment_id, token=_token())
    except BackendError as e:
        raise backend_http_error(e)
    return {"ok": True}


# -------------------------
# ADMIN: SETTINGS
# -------------------------
@router.put("/admin/settings/account")
def update_account(body: AdminAccountIn, backend: BackendClient = Depends(get_backend),
                   me: AdminSession = Depends(get_admin)):
    try:
        result = backend.update_admin(body.to_backend(), token=_token())
    except BackendError as e:
        raise backend_http_error(e)
    logger.info("admin account updated", extra={"username": me.profile.username})
    return result

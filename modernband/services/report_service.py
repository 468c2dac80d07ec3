from __future__ import annotations

import io
from datetime import datetime, timezone
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.pdfgen import canvas
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from modernband.core.config import settings
from modernband.services.admin_service import BookingFilters, parse_event_date, total_amount, with_payment_totals
from modernband.services.pricing import as_amount, price_summary_from_payload

BRAND = colors.Color(18 / 255, 78 / 255, 102 / 255)  # #124E66
STRIPE = colors.Color(240 / 255, 240 / 255, 240 / 255)


def _fmt_date(value) -> str:
    d = parse_event_date(value)
    return d.strftime("%d %b %Y") if d else str(value or "-")


def _money(v) -> str:
    return f"{settings.CURRENCY_SYMBOL} {as_amount(v):,}"


def _yes_no(v) -> str:
    return "Yes" if v else "No"


def render_bookings_report(bookings: list[dict], filters: BookingFilters | None = None,
                           generated_at: datetime | None = None) -> bytes:
    """Admin booking report: filters, one row per booking, totals, page footer."""
    generated_at = generated_at or datetime.now(timezone.utc)
    filters = filters or BookingFilters()
    buf = io.BytesIO()
    doc = SimpleDocTemplate(buf, pagesize=A4, leftMargin=14 * mm, rightMargin=14 * mm,
                            topMargin=18 * mm, bottomMargin=18 * mm,
                            title=f"{settings.BUSINESS_NAME} - Booking Report", invariant=True)
    styles = getSampleStyleSheet()

    story = [
        Paragraph(escape(f"{settings.BUSINESS_NAME} - Booking Report"), styles["Title"]),
        Paragraph(f"Generated on {generated_at.strftime('%d %b %Y')}", styles["Normal"]),
        Spacer(1, 6 * mm),
    ]
    if not filters.is_empty():
        story.append(Paragraph("Applied Filters:", styles["Heading4"]))
        for line in filters.describe():
            story.append(Paragraph(escape(line), styles["Normal"]))
        story.append(Spacer(1, 4 * mm))

    rows = [["Name", "Phone", "Package", "Date", "Venue", f"Amount ({settings.CURRENCY_SYMBOL})"]]
    for b in bookings:
        rows.append([
            str(b.get("name", "")),
            str(b.get("phone", "")),
            str(b.get("packageType", "")),
            _fmt_date(b.get("date")),
            f"{b.get('venue', '')}, {b.get('city', '')}",
            str(b.get("amount", 0)),
        ])
    table = Table(rows, repeatRows=1)
    table.setStyle(TableStyle([
        ("BACKGROUND", (0, 0), (-1, 0), BRAND),
        ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
        ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
        ("FONTSIZE", (0, 0), (-1, -1), 8),
        ("ROWBACKGROUNDS", (0, 1), (-1, -1), [colors.white, STRIPE]),
        ("ALIGN", (-1, 1), (-1, -1), "RIGHT"),
    ]))
    story += [
        table,
        Spacer(1, 6 * mm),
        Paragraph(f"Total Bookings: {len(bookings)}", styles["Normal"]),
        Paragraph(escape(f"Total Amount: {_money(total_amount(bookings))}"), styles["Normal"]),
    ]

    def _footer(c: canvas.Canvas, d):
        c.saveState()
        c.setFont("Helvetica", 9)
        c.setFillColor(colors.grey)
        w, _ = A4
        c.drawString(14 * mm, 10 * mm, f"{settings.BUSINESS_NAME} Booking System")
        c.drawCentredString(w / 2, 10 * mm, f"Page {d.page}")
        c.restoreState()

    doc.build(story, onFirstPage=_footer, onLaterPages=_footer)
    return buf.getvalue()


def render_booking_confirmation(booking: dict, generated_at: datetime | None = None) -> bytes:
    """A4 confirmation for one booking, as downloaded from the lookup page. Pure function."""
    generated_at = generated_at or datetime.now(timezone.utc)
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=A4, invariant=1)
    w, h = A4
    margin = 20 * mm

    # Header band
    c.setFillColor(BRAND)
    c.rect(0, h - 15 * mm, w, 15 * mm, stroke=0, fill=1)
    c.setFillColor(colors.white)
    c.setFont("Helvetica-Bold", 14)
    c.drawCentredString(w / 2, h - 10 * mm, f"{settings.BUSINESS_NAME} - Booking Confirmation")

    y = h - 30 * mm
    c.setFillColor(BRAND)
    c.setFont("Helvetica-Bold", 16)
    c.drawString(margin, y, "Booking ID:")
    c.setFillColor(colors.black)
    c.setFont("Courier-Bold", 16)
    c.drawString(margin + 35 * mm, y, str(booking.get("id", "")))
    y -= 8 * mm
    c.setFont("Helvetica", 10)
    c.setFillColor(colors.grey)
    c.drawString(margin, y, f"Booking Date: {_fmt_date(booking.get('createdAt'))}")
    y -= 5 * mm
    c.setFont("Helvetica-Bold", 10)
    c.setFillColor(colors.Color(46 / 255, 125 / 255, 50 / 255))
    c.drawString(margin, y, f"Status: {booking.get('status') or 'Confirmed'}")
    y -= 10 * mm

    def section(title: str, lines: list[tuple[str, str]]):
        nonlocal y
        if y < 40 * mm:
            c.showPage()
            y = h - 20 * mm
        c.setFillColor(BRAND)
        c.setFont("Helvetica-Bold", 12)
        c.drawString(margin, y, title)
        y -= 6 * mm
        c.setFillColor(colors.black)
        c.setFont("Helvetica", 10)
        for label, value in lines:
            c.drawString(margin + 4 * mm, y, f"{label}: {value}")
            y -= 5 * mm
        y -= 4 * mm

    section("Personal Information", [
        ("Name", str(booking.get("name", ""))),
        ("Email", str(booking.get("email", ""))),
        ("Phone", str(booking.get("phone", ""))),
    ] + ([("Additional Contact", str(booking["additionalPhone"]))] if booking.get("additionalPhone") else []))

    event = [
        ("Package", str(booking.get("packageType", ""))),
        ("Date", _fmt_date(booking.get("date"))),
        ("Venue", str(booking.get("venue", ""))),
        ("City", str(booking.get("city", ""))),
    ]
    if booking.get("bandTime"):
        event.append(("Time", str(booking["bandTime"])))
        if booking.get("bandTime") == "Custom" and booking.get("customTimeSlot"):
            event.append(("Custom Time", str(booking["customTimeSlot"])))
    section("Event Details", event)

    options = []
    for key, label in (("numberOfPeople", "People in Band"), ("numberOfLights", "Lights"),
                       ("numberOfDhols", "Dhols")):
        if booking.get(key):
            options.append((label, str(booking[key])))
    if booking.get("ghodiForBaraat"):
        options.append(("Ghodi for Baraat", "Yes"))
    elif booking.get("ghodaBaggi"):
        options.append(("Ghoda Baggi", str(booking["ghodaBaggi"])))
    options += [
        ("Fireworks", _yes_no(booking.get("fireworks"))),
        ("Flower Canon", _yes_no(booking.get("flowerCanon"))),
        ("Doli for Vidai", _yes_no(booking.get("DoliForVidai"))),
    ]
    if booking.get("customization"):
        options.append(("Additional Requests", str(booking["customization"])[:90]))
    section("Features", options)

    s = price_summary_from_payload(booking)
    payment = [("Base Amount", _money(s.baseAmount))]
    if s.fireworksAmount:
        payment.append(("Fireworks", _money(s.fireworksAmount)))
    payment += [
        ("Total Amount", _money(s.totalAmount)),
        ("Advance Paid", _money(s.advancePayment)),
        ("Balance Due", _money(s.remainingAmount)),
    ]
    section("Payment Summary", payment)

    c.setFont("Helvetica", 9)
    c.setFillColor(colors.grey)
    c.drawString(margin, 20 * mm, "Please keep this confirmation for your records.")
    c.drawString(margin, 14 * mm, f"Generated: {generated_at.isoformat()}")

    c.showPage()
    c.save()
    return buf.getvalue()


def _striped(rows: list[list[str]], right_align_last: bool = False) -> Table:
    table = Table(rows, repeatRows=1, hAlign="LEFT")
    style = [
        ("BACKGROUND", (0, 0), (-1, 0), BRAND),
        ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
        ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
        ("FONTSIZE", (0, 0), (-1, -1), 9),
        ("ROWBACKGROUNDS", (0, 1), (-1, -1), [colors.white, STRIPE]),
    ]
    if right_align_last:
        style.append(("ALIGN", (-1, 1), (-1, -1), "RIGHT"))
    table.setStyle(TableStyle(style))
    return table


def render_employee_report(employee: dict, generated_at: datetime | None = None) -> bytes:
    """Employee details, payment totals and payment history, as downloaded from the employee page."""
    generated_at = generated_at or datetime.now(timezone.utc)
    emp = with_payment_totals(employee)
    buf = io.BytesIO()
    doc = SimpleDocTemplate(buf, pagesize=A4, leftMargin=14 * mm, rightMargin=14 * mm,
                            topMargin=18 * mm, bottomMargin=18 * mm,
                            title="Employee Details Report", invariant=True)
    styles = getSampleStyleSheet()
    name = str(emp.get("name") or "")
    username = str(emp.get("username") or "")

    story = [
        Paragraph("Employee Details Report", styles["Title"]),
        Paragraph(f"Generated on {generated_at.strftime('%d %b %Y')}", styles["Normal"]),
        Paragraph(escape(f"Employee: {name} ({username})"), styles["Normal"]),
        Spacer(1, 6 * mm),
        Paragraph("Personal Information", styles["Heading3"]),
        _striped([
            ["Field", "Details"],
            ["Name", name],
            ["Username", username],
            ["Email", str(emp.get("email") or "")],
            ["Mobile Number", str(emp.get("mobileNumber") or "")],
            ["Address", str(emp.get("address") or "")],
            ["Date Joined", _fmt_date(emp.get("createdAt")) if emp.get("createdAt") else "N/A"],
        ]),
        Spacer(1, 6 * mm),
        Paragraph("Financial Information", styles["Heading3"]),
        _striped([
            ["Category", f"Amount ({settings.CURRENCY_SYMBOL})"],
            ["Total to be Paid", f"{as_amount(emp.get('totalAmountToBePaid')):,.2f}"],
            ["Advance Payment", f"{as_amount(emp.get('totalAmountPaidInAdvance')):,.2f}"],
            ["Total Paid", f"{emp['totalWithAdvance']:,.2f}"],
            ["Remaining Balance", f"{emp['balance']:,.2f}"],
        ], right_align_last=True),
        Spacer(1, 6 * mm),
        Paragraph("Payment History", styles["Heading3"]),
    ]
    payments = [p for p in (emp.get("payments") or []) if isinstance(p, dict)]
    if payments:
        rows = [["Date", f"Amount ({settings.CURRENCY_SYMBOL})", "Note"]]
        for p in payments:
            rows.append([_fmt_date(p.get("date")), f"{as_amount(p.get('amountPaid')):,.2f}", str(p.get("note") or "")])
        table = _striped(rows)
        table.setStyle(TableStyle([("ALIGN", (1, 1), (1, -1), "RIGHT")]))
        story.append(table)
    else:
        story.append(Paragraph("No payment records found", styles["Normal"]))

    def _footer(c: canvas.Canvas, d):
        c.saveState()
        c.setFont("Helvetica", 9)
        c.setFillColor(colors.grey)
        w, _ = A4
        c.drawString(14 * mm, 10 * mm, "Confidential - For Internal Use Only")
        c.drawCentredString(w / 2, 10 * mm, f"Page {d.page}")
        c.restoreState()

    doc.build(story, onFirstPage=_footer, onLaterPages=_footer)
    return buf.getvalue()

from datetime import datetime

import pytest
from factories import make_approved_timesheet, make_booking, make_client

from interpreter_booking.domain.billing.invoice_service import (
    NO_ELIGIBLE_TIMESHEETS_MESSAGE,
    InvoiceService,
)
from interpreter_booking.domain.billing.repository import BillingRepository
from interpreter_booking.domain.billing.schemas import (
    GenerateClientInvoiceRequest,
    TimesheetSubmit,
)
from interpreter_booking.domain.billing.timesheet_service import TimesheetService
from interpreter_booking.domain.bookings.service import BookingService
from interpreter_booking.errors import (
    InvalidArgumentError,
    InvalidTransitionError,
    PermissionDeniedError,
)
from interpreter_booking.models import BookingStatus
from interpreter_booking.models_invoice import (
    ClientInvoice,
    ClientInvoiceLine,
    InvoiceStatus,
    Timesheet,
    TimesheetStatus,
)


def _request(client_id, start=datetime(2025, 3, 1), end=datetime(2025, 3, 31, 23, 59, 59)):
    return GenerateClientInvoiceRequest(clientId=client_id, periodStart=start, periodEnd=end)


@pytest.fixture
def completed_timesheets(db, client_org, interpreter):
    amounts = [80.0, 45.5, 120.25]
    timesheets = []
    for day, amount in zip((3, 10, 17), amounts):
        booking = make_booking(
            db, client_org, status=BookingStatus.COMPLETED, interpreter=interpreter,
            on_date=datetime(2025, 3, day).date(),
        )
        timesheets.append(
            make_approved_timesheet(
                db, booking,
                actual_start=datetime(2025, 3, day, 10, 0),
                actual_end=datetime(2025, 3, day, 12, 0),
                client_amount=amount,
            )
        )
    return timesheets


def test_generates_one_invoice_with_a_line_per_timesheet(
    db, client_org, completed_timesheets, admin_user
):
    result = InvoiceService(db).generate_client_invoice(_request(client_org.id), admin_user)

    assert result["success"] is True
    assert result["count"] == 3
    assert result["total"] == 245.75

    invoice = db.query(ClientInvoice).one()
    assert invoice.id == result["invoiceId"]
    assert invoice.status == InvoiceStatus.DRAFT.value
    assert invoice.total_amount == 245.75
    assert invoice.invoice_number.startswith("INV-")
    assert (invoice.due_date - invoice.issue_date).days == client_org.payment_terms_days

    lines = db.query(ClientInvoiceLine).filter(ClientInvoiceLine.invoice_id == invoice.id).all()
    assert len(lines) == 3
    assert {line.timesheet_id for line in lines} == {ts.id for ts in completed_timesheets}
    assert round(sum(line.line_amount for line in lines), 2) == invoice.total_amount


def test_generation_links_timesheets_and_invoices_bookings(
    db, client_org, completed_timesheets, admin_user
):
    result = InvoiceService(db).generate_client_invoice(_request(client_org.id), admin_user)

    db.expire_all()
    for ts in completed_timesheets:
        assert ts.client_invoice_id == result["invoiceId"]
        assert ts.status == TimesheetStatus.INVOICED.value
    statuses = {
        b.status
        for b in BillingRepository.get_bookings_by_ids(
            db, {ts.booking_id for ts in completed_timesheets}
        )
    }
    assert statuses == {BookingStatus.INVOICED.value}


def test_invoiced_timesheets_are_not_billed_twice(db, client_org, completed_timesheets, admin_user):
    service = InvoiceService(db)
    service.generate_client_invoice(_request(client_org.id), admin_user)

    again = service.generate_client_invoice(_request(client_org.id), admin_user)

    assert again == {"success": False, "message": NO_ELIGIBLE_TIMESHEETS_MESSAGE}
    assert db.query(ClientInvoice).count() == 1


def test_no_eligible_timesheets_creates_nothing(db, client_org, interpreter, admin_user):
    booking = make_booking(db, client_org, status=BookingStatus.COMPLETED, interpreter=interpreter)
    # Outside the period
    make_approved_timesheet(
        db, booking,
        actual_start=datetime(2025, 4, 2, 10, 0),
        actual_end=datetime(2025, 4, 2, 11, 0),
    )

    result = InvoiceService(db).generate_client_invoice(_request(client_org.id), admin_user)

    assert result == {"success": False, "message": NO_ELIGIBLE_TIMESHEETS_MESSAGE}
    assert db.query(ClientInvoice).count() == 0
    assert db.query(ClientInvoiceLine).count() == 0


def test_other_clients_timesheets_are_excluded(db, client_org, interpreter, admin_user):
    other = make_client(db, company_name="Other Ltd")
    booking = make_booking(db, other, status=BookingStatus.COMPLETED, interpreter=interpreter)
    make_approved_timesheet(db, booking)

    result = InvoiceService(db).generate_client_invoice(_request(client_org.id), admin_user)

    assert result["success"] is False


def test_failure_mid_batch_rolls_back_everything(
    db, client_org, completed_timesheets, admin_user, monkeypatch
):
    calls = []

    def failing_add(session, line):
        calls.append(line)
        if len(calls) == 2:
            raise RuntimeError("write failed")
        session.add(line)
        return line

    monkeypatch.setattr(BillingRepository, "add_client_invoice_line", staticmethod(failing_add))

    with pytest.raises(RuntimeError):
        InvoiceService(db).generate_client_invoice(_request(client_org.id), admin_user)

    db.expire_all()
    assert db.query(ClientInvoice).count() == 0
    assert db.query(ClientInvoiceLine).count() == 0
    for ts in db.query(Timesheet).all():
        assert ts.client_invoice_id is None
        assert ts.status == TimesheetStatus.APPROVED.value
    bookings = BillingRepository.get_bookings_by_ids(
        db, {ts.booking_id for ts in completed_timesheets}
    )
    assert {b.status for b in bookings} == {BookingStatus.COMPLETED.value}


def test_generation_validates_input(db, client_org, admin_user, client_user):
    service = InvoiceService(db)

    with pytest.raises(InvalidArgumentError):
        service.generate_client_invoice(GenerateClientInvoiceRequest(), admin_user)
    with pytest.raises(InvalidArgumentError):
        service.generate_client_invoice(
            _request(client_org.id, start=datetime(2025, 3, 31), end=datetime(2025, 3, 1)),
            admin_user,
        )
    with pytest.raises(PermissionDeniedError):
        service.generate_client_invoice(_request(client_org.id), client_user)


def test_paying_invoice_marks_bookings_paid(db, client_org, completed_timesheets, admin_user):
    service = InvoiceService(db)
    result = service.generate_client_invoice(_request(client_org.id), admin_user)

    service.update_client_invoice_status(result["invoiceId"], InvoiceStatus.SENT, admin_user)
    invoice = service.update_client_invoice_status(result["invoiceId"], InvoiceStatus.PAID, admin_user)

    assert invoice.status == InvoiceStatus.PAID.value
    db.expire_all()
    bookings = BillingRepository.get_bookings_by_ids(
        db, {ts.booking_id for ts in completed_timesheets}
    )
    assert {b.status for b in bookings} == {BookingStatus.PAID.value}


def test_client_invoice_status_cannot_skip_sent(db, client_org, completed_timesheets, admin_user):
    service = InvoiceService(db)
    result = service.generate_client_invoice(_request(client_org.id), admin_user)

    with pytest.raises(InvalidTransitionError):
        service.update_client_invoice_status(result["invoiceId"], InvoiceStatus.PAID, admin_user)


def test_linking_guest_booking_carries_client_to_its_timesheet(
    db, client_org, interpreter, interpreter_user, admin_user
):
    booking = make_booking(db, None, status=BookingStatus.CONFIRMED, interpreter=interpreter)
    timesheet = TimesheetService(db).submit_timesheet(
        TimesheetSubmit(
            booking_id=booking.id,
            actual_start=datetime(2025, 3, 10, 10, 0),
            actual_end=datetime(2025, 3, 10, 11, 0),
        ),
        interpreter_user,
    )
    assert timesheet.client_id is None

    BookingService(db).link_client_to_booking(booking.id, client_org.id, admin_user)
    TimesheetService(db).approve_timesheet(timesheet.id, admin_user)
    result = InvoiceService(db).generate_client_invoice(_request(client_org.id), admin_user)

    assert timesheet.client_id == client_org.id
    assert result["success"] is True
    assert result["count"] == 1

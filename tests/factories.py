"""Row builders shared by the test modules"""

from datetime import date, datetime

from interpreter_booking.models import (
    Booking,
    BookingStatus,
    Client,
    Interpreter,
    Rate,
    User,
    UserRole,
)
from interpreter_booking.models_invoice import Timesheet, TimesheetStatus


def make_client(db, company_name="Acme Legal", payment_terms_days=30) -> Client:
    client = Client(company_name=company_name, payment_terms_days=payment_terms_days)
    db.add(client)
    db.commit()
    return client


def make_interpreter(db, name="Ana Silva", languages=None, status="ACTIVE") -> Interpreter:
    interpreter = Interpreter(
        name=name,
        email=f"{name.lower().replace(' ', '.')}@example.com",
        languages=languages if languages is not None else ["Portuguese", "Spanish"],
        regions=[],
        qualifications=[],
        unavailable_dates=[],
        status=status,
    )
    db.add(interpreter)
    db.commit()
    return interpreter


def make_user(db, role: UserRole, profile_id=None, email=None) -> User:
    email = email or f"{role.value.lower()}-{profile_id or 'x'}@example.com"
    user = User(
        firebase_uid=f"uid-{email}",
        email=email,
        role=role.value,
        profile_id=profile_id,
        status="ACTIVE",
    )
    db.add(user)
    db.commit()
    return user


def make_booking(
    db,
    client: Client,
    status=BookingStatus.REQUESTED,
    on_date=date(2025, 3, 10),
    start_time="10:00",
    duration_minutes=60,
    interpreter: Interpreter = None,
    service_type="Face-to-Face",
) -> Booking:
    booking = Booking(
        client_id=client.id if client else None,
        client_name=client.company_name if client else None,
        service_type=service_type,
        language_from="English",
        language_to="Portuguese",
        date=on_date,
        start_time=start_time,
        duration_minutes=duration_minutes,
        location_type="ONSITE",
        address="1 High Street",
        status=status.value,
        interpreter_id=interpreter.id if interpreter else None,
        interpreter_name=interpreter.name if interpreter else None,
    )
    db.add(booking)
    db.commit()
    return booking


def make_rate(db, rate_type: str, service_type: str, amount_per_unit: float, minimum_units: float):
    rate = Rate(
        rate_type=rate_type,
        service_type=service_type,
        amount_per_unit=amount_per_unit,
        minimum_units=minimum_units,
    )
    db.add(rate)
    db.commit()
    return rate


def make_submitted_timesheet(
    db,
    booking: Booking,
    actual_start=datetime(2025, 3, 10, 10, 0),
    actual_end=datetime(2025, 3, 10, 12, 0),
    break_minutes=0,
) -> Timesheet:
    timesheet = Timesheet(
        booking_id=booking.id,
        client_id=booking.client_id,
        interpreter_id=booking.interpreter_id,
        actual_start=actual_start,
        actual_end=actual_end,
        break_duration_minutes=break_minutes,
        status=TimesheetStatus.SUBMITTED.value,
        submitted_at=actual_end,
    )
    db.add(timesheet)
    db.commit()
    return timesheet


def make_approved_timesheet(
    db,
    booking: Booking,
    actual_start=datetime(2025, 3, 10, 10, 0),
    actual_end=datetime(2025, 3, 10, 12, 0),
    client_amount=80.0,
    interpreter_amount=50.0,
    units=2.0,
) -> Timesheet:
    """Timesheet as it looks after approval pricing"""
    timesheet = Timesheet(
        booking_id=booking.id,
        client_id=booking.client_id,
        interpreter_id=booking.interpreter_id,
        actual_start=actual_start,
        actual_end=actual_end,
        break_duration_minutes=0,
        units_billable_to_client=units,
        units_payable_to_interpreter=units,
        client_amount_calculated=client_amount,
        interpreter_amount_calculated=interpreter_amount,
        admin_approved=True,
        admin_approved_at=actual_end,
        ready_for_client_invoice=True,
        ready_for_interpreter_invoice=True,
        status=TimesheetStatus.APPROVED.value,
        submitted_at=actual_end,
    )
    db.add(timesheet)
    db.commit()
    return timesheet

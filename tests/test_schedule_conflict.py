from datetime import date

from factories import make_booking, make_interpreter

from interpreter_booking.domain.bookings.service import BookingService
from interpreter_booking.models import BookingStatus


def test_overlapping_confirmed_booking_is_reported(db, client_org, interpreter):
    existing = make_booking(
        db, client_org, status=BookingStatus.CONFIRMED, interpreter=interpreter,
        start_time="10:00", duration_minutes=60,
    )
    service = BookingService(db)

    conflict = service.check_schedule_conflict(interpreter.id, date(2025, 3, 10), "10:30", 60)

    assert conflict is not None
    assert conflict.id == existing.id


def test_adjacent_booking_does_not_conflict(db, client_org, interpreter):
    make_booking(
        db, client_org, status=BookingStatus.CONFIRMED, interpreter=interpreter,
        start_time="10:00", duration_minutes=60,
    )
    service = BookingService(db)

    assert service.check_schedule_conflict(interpreter.id, date(2025, 3, 10), "11:00", 60) is None
    assert service.check_schedule_conflict(interpreter.id, date(2025, 3, 10), "09:00", 60) is None


def test_enclosing_slot_conflicts(db, client_org, interpreter):
    make_booking(
        db, client_org, status=BookingStatus.CONFIRMED, interpreter=interpreter,
        start_time="10:15", duration_minutes=30,
    )
    service = BookingService(db)

    assert service.check_schedule_conflict(interpreter.id, date(2025, 3, 10), "10:00", 120)


def test_only_confirmed_bookings_on_same_date_count(db, client_org, interpreter):
    make_booking(
        db, client_org, status=BookingStatus.COMPLETED, interpreter=interpreter,
        start_time="10:00", duration_minutes=60,
    )
    make_booking(
        db, client_org, status=BookingStatus.CONFIRMED, interpreter=interpreter,
        on_date=date(2025, 3, 11), start_time="10:00", duration_minutes=60,
    )
    service = BookingService(db)

    assert service.check_schedule_conflict(interpreter.id, date(2025, 3, 10), "10:00", 60) is None


def test_other_interpreters_and_excluded_booking_are_ignored(db, client_org, interpreter):
    other = make_interpreter(db, name="Ben Jones")
    mine = make_booking(
        db, client_org, status=BookingStatus.CONFIRMED, interpreter=interpreter,
        start_time="10:00", duration_minutes=60,
    )
    make_booking(
        db, client_org, status=BookingStatus.CONFIRMED, interpreter=other,
        start_time="10:00", duration_minutes=60,
    )
    service = BookingService(db)

    assert (
        service.check_schedule_conflict(
            interpreter.id, date(2025, 3, 10), "10:00", 60, exclude_booking_id=mine.id
        )
        is None
    )

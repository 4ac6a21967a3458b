from datetime import date

import pytest
from factories import make_booking, make_client, make_user

from interpreter_booking.domain.bookings.schemas import (
    BookingCreate,
    GuestBookingCreate,
    GuestContact,
)
from interpreter_booking.domain.bookings.service import BookingService
from interpreter_booking.errors import (
    ConcurrencyConflictError,
    InvalidArgumentError,
    InvalidTransitionError,
    PermissionDeniedError,
)
from interpreter_booking.models import BookingStatus, ServiceType, UserRole


def _create(**overrides):
    data = {
        "service_type": ServiceType.FACE_TO_FACE,
        "language_from": "English",
        "language_to": "Polish",
        "date": date(2025, 3, 10),
        "start_time": "9:30",
        "duration_minutes": 90,
        "location_type": "ONSITE",
        "address": "2 Court Road",
    }
    data.update(overrides)
    return BookingCreate(**data)


def test_client_booking_starts_requested(db, client_org, client_user):
    booking = BookingService(db).create_booking(_create(), client_user)

    assert booking.status == BookingStatus.REQUESTED.value
    assert booking.client_id == client_org.id
    assert booking.client_name == client_org.company_name
    assert booking.start_time == "09:30"
    assert booking.expected_end_time == "11:00"
    assert booking.version == 1


def test_client_cannot_book_for_another_client(db, client_user):
    other = make_client(db, company_name="Other Ltd")

    with pytest.raises(PermissionDeniedError):
        BookingService(db).create_booking(_create(client_id=other.id), client_user)


def test_short_bookings_are_rejected(db, client_user):
    with pytest.raises(InvalidArgumentError):
        BookingService(db).create_booking(_create(duration_minutes=15), client_user)


def test_interpreter_cannot_create_bookings(db, interpreter_user):
    with pytest.raises(PermissionDeniedError):
        BookingService(db).create_booking(_create(), interpreter_user)


def test_guest_booking_can_be_linked_to_client(db, client_org, admin_user):
    service = BookingService(db)
    guest = service.create_guest_booking(
        GuestBookingCreate(
            **_create().model_dump(),
            guest_contact=GuestContact(name="Jo Bloggs", email="jo@example.com", phone="07700 900123"),
        )
    )
    assert guest.client_id is None
    assert guest.guest_contact["phone"] == "+447700900123"

    linked = service.link_client_to_booking(guest.id, client_org.id, admin_user)

    assert linked.client_id == client_org.id
    assert linked.client_name == client_org.company_name


def test_visibility_by_role(db, client_org, client_user, interpreter, interpreter_user, admin_user):
    other = make_client(db, company_name="Other Ltd")
    mine = make_booking(db, client_org)
    theirs = make_booking(db, other, status=BookingStatus.CONFIRMED, interpreter=interpreter)
    service = BookingService(db)

    assert {b.id for b in service.get_bookings(admin_user)} == {mine.id, theirs.id}
    assert [b.id for b in service.get_bookings(client_user)] == [mine.id]
    assert [b.id for b in service.get_bookings(interpreter_user)] == [theirs.id]
    with pytest.raises(PermissionDeniedError):
        service.get_booking(theirs.id, client_user)


def test_owner_cancels_unconfirmed_booking(db, client_org, client_user):
    booking = make_booking(db, client_org, status=BookingStatus.OFFERED)

    cancelled = BookingService(db).cancel_booking(booking.id, client_user)

    assert cancelled.status == BookingStatus.CANCELLED.value


def test_confirmed_booking_cannot_be_cancelled(db, client_org, interpreter, admin_user):
    booking = make_booking(db, client_org, status=BookingStatus.CONFIRMED, interpreter=interpreter)

    with pytest.raises(InvalidTransitionError):
        BookingService(db).cancel_booking(booking.id, admin_user)


def test_other_client_cannot_cancel(db, client_org):
    other = make_client(db, company_name="Other Ltd")
    outsider = make_user(db, UserRole.CLIENT, profile_id=other.id)
    booking = make_booking(db, client_org)

    with pytest.raises(PermissionDeniedError):
        BookingService(db).cancel_booking(booking.id, outsider)


def test_expected_version_guards_booking_actions(db, client_org, admin_user):
    booking = make_booking(db, client_org)
    service = BookingService(db)

    with pytest.raises(ConcurrencyConflictError):
        service.cancel_booking(booking.id, admin_user, expected_version=booking.version + 1)
    assert booking.status == BookingStatus.REQUESTED.value

    cancelled = service.cancel_booking(booking.id, admin_user, expected_version=booking.version)
    assert cancelled.version == 2


def test_admin_completes_confirmed_booking(db, client_org, interpreter, admin_user):
    booking = make_booking(db, client_org, status=BookingStatus.CONFIRMED, interpreter=interpreter)

    completed = BookingService(db).complete_booking(booking.id, admin_user)

    assert completed.status == BookingStatus.COMPLETED.value

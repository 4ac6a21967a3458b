"""
Booking status state machine.

Every change to ``Booking.status`` goes through :func:`apply_transition`.
"""

import enum
import logging

from ...errors import InvalidTransitionError
from ...models import Booking, BookingStatus

logger = logging.getLogger(__name__)


class ConfirmationActor(str, enum.Enum):
    """Who caused a booking to be confirmed"""

    OFFER_ACCEPTED = "OFFER_ACCEPTED"
    ADMIN_DIRECT_ASSIGN = "ADMIN_DIRECT_ASSIGN"


ALLOWED_TRANSITIONS = {
    BookingStatus.REQUESTED.value: {
        BookingStatus.OFFERED.value,
        BookingStatus.CONFIRMED.value,
        BookingStatus.CANCELLED.value,
    },
    BookingStatus.OFFERED.value: {
        BookingStatus.CONFIRMED.value,
        BookingStatus.CANCELLED.value,
    },
    # CONFIRMED -> CONFIRMED is a re-confirmation to a different interpreter
    BookingStatus.CONFIRMED.value: {
        BookingStatus.CONFIRMED.value,
        BookingStatus.COMPLETED.value,
    },
    BookingStatus.COMPLETED.value: {BookingStatus.INVOICED.value},
    BookingStatus.INVOICED.value: {BookingStatus.PAID.value},
    BookingStatus.CANCELLED.value: set(),
    BookingStatus.PAID.value: set(),
}


def can_transition(current: str, target: str) -> bool:
    return target in ALLOWED_TRANSITIONS.get(current, set())


def ensure_transition(booking: Booking, target: BookingStatus) -> None:
    target_value = BookingStatus(target).value
    if not can_transition(booking.status, target_value):
        logger.warning(f"⚠️ Rejected transition {booking.status} → {target_value} for booking {booking.id}")
        raise InvalidTransitionError(
            f"Cannot move booking from {booking.status} to {target_value}"
        )


def apply_transition(booking: Booking, target: BookingStatus) -> str:
    """Validate and apply a status change; returns the previous status"""
    ensure_transition(booking, target)
    previous = booking.status
    booking.status = BookingStatus(target).value
    logger.info(f"📊 Booking {booking.id}: {previous} → {booking.status}")
    return previous

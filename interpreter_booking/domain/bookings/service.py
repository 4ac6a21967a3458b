"""Booking service - Booking lifecycle and interpreter assignment"""

import logging
import random
from datetime import date
from typing import Optional

from sqlalchemy.orm import Session

from ... import config
from ...errors import (
    InvalidArgumentError,
    InvalidTransitionError,
    NotFoundError,
    PermissionDeniedError,
)
from ...models import (
    AssignmentStatus,
    Booking,
    BookingAssignment,
    BookingStatus,
    Interpreter,
    User,
    UserRole,
)
from ...permissions import ensure_role, has_role
from ...shared.transactions import check_version, transaction
from ...shared.validators import add_minutes_to_time, time_to_minutes, utc_now
from ..clients.repository import ClientRepository
from ..interpreters.repository import InterpreterRepository
from .repository import BookingRepository
from .schemas import BookingCreate, GuestBookingCreate
from .state_machine import ConfirmationActor, apply_transition, can_transition, ensure_transition

logger = logging.getLogger(__name__)


def generate_booking_ref() -> str:
    """Human-facing reference such as LL-4821 (not guaranteed unique)"""
    return f"LL-{random.randint(1000, 9999)}"


def booking_snapshot(booking: Booking) -> dict:
    """Denormalized copy of the booking stored on each offer"""
    return {
        "booking_ref": booking.booking_ref,
        "client_name": booking.client_name,
        "service_type": booking.service_type,
        "language_from": booking.language_from,
        "language_to": booking.language_to,
        "date": booking.date.isoformat() if booking.date else None,
        "start_time": booking.start_time,
        "duration_minutes": booking.duration_minutes,
        "expected_end_time": booking.expected_end_time,
        "location_type": booking.location_type,
        "postcode": booking.postcode,
        "status": booking.status,
    }


class BookingService:
    """Service layer for booking business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = BookingRepository()
        self.clients = ClientRepository()
        self.interpreters = InterpreterRepository()

    # ========================================================================
    # LOOKUPS
    # ========================================================================

    def _get_booking(self, booking_id: str) -> Booking:
        booking = self.repo.get_booking(self.db, booking_id)
        if not booking:
            raise NotFoundError("Booking not found")
        return booking

    def _get_assignment(self, assignment_id: str) -> BookingAssignment:
        assignment = self.repo.get_assignment(self.db, assignment_id)
        if not assignment:
            raise NotFoundError("Assignment not found")
        return assignment

    def _get_interpreter(self, interpreter_id: str) -> Interpreter:
        interpreter = self.interpreters.get_interpreter_by_id(self.db, interpreter_id)
        if not interpreter:
            raise NotFoundError("Interpreter not found")
        return interpreter

    def get_bookings(self, actor: User, status: Optional[BookingStatus] = None) -> list[Booking]:
        """Admins see everything, clients their own bookings, interpreters their schedule"""
        status_value = status.value if status else None

        if has_role(actor, UserRole.ADMIN):
            return self.repo.get_bookings(self.db, status_value)

        if has_role(actor, UserRole.CLIENT):
            if not actor.profile_id:
                raise PermissionDeniedError("User is not linked to a client")
            return self.repo.get_bookings_for_client(self.db, actor.profile_id, status_value)

        if has_role(actor, UserRole.INTERPRETER):
            if not actor.profile_id:
                raise PermissionDeniedError("User is not linked to an interpreter profile")
            schedule = self.repo.get_interpreter_schedule(self.db, actor.profile_id)
            if status_value:
                schedule = [b for b in schedule if b.status == status_value]
            return schedule

        raise PermissionDeniedError("Access forbidden for this role")

    def get_booking(self, booking_id: str, actor: User) -> Booking:
        booking = self._get_booking(booking_id)

        if has_role(actor, UserRole.ADMIN):
            return booking
        if has_role(actor, UserRole.CLIENT):
            if actor.profile_id and booking.client_id == actor.profile_id:
                return booking
        elif has_role(actor, UserRole.INTERPRETER) and actor.profile_id:
            if booking.interpreter_id == actor.profile_id or self.repo.has_assignment(
                self.db, booking.id, actor.profile_id
            ):
                return booking

        raise PermissionDeniedError("You do not have access to this booking")

    # ========================================================================
    # CREATION
    # ========================================================================

    def _build_booking(self, data: BookingCreate, **extra) -> Booking:
        """Validate logistics and build a REQUESTED booking"""
        if data.duration_minutes < config.MIN_BOOKING_DURATION_MINUTES:
            raise InvalidArgumentError(
                f"Duration must be at least {config.MIN_BOOKING_DURATION_MINUTES} minutes"
            )

        online_link = data.online_link
        if data.location_type == "ONSITE":
            if not data.address or not data.address.strip():
                raise InvalidArgumentError("Address is required for onsite bookings")
        elif not online_link:
            online_link = config.DEFAULT_ONLINE_PLATFORM_URL

        return Booking(
            booking_ref=generate_booking_ref(),
            service_type=data.service_type.value,
            language_from=data.language_from,
            language_to=data.language_to,
            date=data.date,
            start_time=data.start_time,
            duration_minutes=data.duration_minutes,
            expected_end_time=add_minutes_to_time(data.start_time, data.duration_minutes),
            location_type=data.location_type,
            address=data.address,
            postcode=data.postcode,
            online_link=online_link,
            cost_code=data.cost_code,
            case_type=data.case_type,
            notes=data.notes,
            gender_preference=data.gender_preference,
            status=BookingStatus.REQUESTED.value,
            **extra,
        )

    def create_booking(self, data: BookingCreate, actor: User) -> Booking:
        """Create a booking for the actor's client (CLIENT) or any client (ADMIN)"""
        if has_role(actor, UserRole.CLIENT):
            if not actor.profile_id:
                raise PermissionDeniedError("User is not linked to a client")
            if data.client_id and data.client_id != actor.profile_id:
                raise PermissionDeniedError("Clients can only book for their own organisation")
            client_id = actor.profile_id
        elif has_role(actor, UserRole.ADMIN):
            if not data.client_id:
                raise InvalidArgumentError("client_id is required")
            client_id = data.client_id
        else:
            raise PermissionDeniedError("Only clients and admins can create bookings")

        client = self.clients.get_client_by_id(self.db, client_id)
        if not client:
            raise NotFoundError("Client not found")

        booking = self._build_booking(
            data,
            client_id=client.id,
            client_name=client.company_name,
            requested_by_user_id=actor.id,
        )

        with transaction(self.db):
            self.repo.add_booking(self.db, booking)

        logger.info(f"✅ Booking {booking.booking_ref} created for client {client.id}")
        return booking

    def create_guest_booking(self, data: GuestBookingCreate) -> Booking:
        """Public booking request with no client account attached"""
        contact = data.guest_contact
        booking = self._build_booking(
            data,
            client_id=None,
            client_name=contact.organisation or contact.name,
            guest_contact=contact.model_dump(),
        )

        with transaction(self.db):
            self.repo.add_booking(self.db, booking)

        logger.info(f"✅ Guest booking {booking.booking_ref} created for {contact.email}")
        return booking

    def link_client_to_booking(
        self, booking_id: str, client_id: str, actor: User, expected_version: Optional[int] = None
    ) -> Booking:
        """Attach a (guest) booking to a client record"""
        ensure_role(actor, UserRole.ADMIN)
        booking = self._get_booking(booking_id)
        check_version(booking, expected_version)

        client = self.clients.get_client_by_id(self.db, client_id)
        if not client:
            raise NotFoundError("Client not found")

        with transaction(self.db):
            booking.client_id = client.id
            booking.client_name = client.company_name
            # Timesheets copy client_id at submission
            for timesheet in self.repo.get_unbilled_timesheets(self.db, booking.id):
                timesheet.client_id = client.id

        logger.info(f"🔗 Booking {booking.id} linked to client {client.id}")
        return booking

    # ========================================================================
    # CONFLICTS AND CONFIRMATION
    # ========================================================================

    def check_schedule_conflict(
        self,
        interpreter_id: str,
        on_date: date,
        start_time: str,
        duration_minutes: int,
        exclude_booking_id: Optional[str] = None,
    ) -> Optional[Booking]:
        """
        First CONFIRMED booking of the interpreter that overlaps the candidate slot.

        Intervals are half-open, so back-to-back bookings do not conflict.
        """
        target_start = time_to_minutes(start_time)
        target_end = target_start + duration_minutes

        for existing in self.repo.get_confirmed_on_date(self.db, interpreter_id, on_date):
            if existing.id == exclude_booking_id:
                continue
            existing_start = time_to_minutes(existing.start_time)
            existing_end = existing_start + existing.duration_minutes
            if target_start < existing_end and target_end > existing_start:
                return existing
        return None

    def confirm_interpreter(
        self,
        booking: Booking,
        interpreter: Interpreter,
        actor: ConfirmationActor,
        reason: Optional[str] = None,
    ) -> Optional[Booking]:
        """
        Set a booking to CONFIRMED for an interpreter.

        This is the only place that writes CONFIRMED, interpreter_id and
        interpreter_name. Changes are staged on the session; the caller commits.
        Returns the conflicting booking, if any; conflicts never block.
        """
        ensure_transition(booking, BookingStatus.CONFIRMED)

        conflict = self.check_schedule_conflict(
            interpreter.id,
            booking.date,
            booking.start_time,
            booking.duration_minutes,
            exclude_booking_id=booking.id,
        )
        if conflict:
            logger.warning(
                f"⚠️ Interpreter {interpreter.id} double-booked: {booking.id} overlaps {conflict.id}"
            )

        previous_interpreter = booking.interpreter_id
        if (
            booking.status == BookingStatus.CONFIRMED.value
            and previous_interpreter
            and previous_interpreter != interpreter.id
        ):
            # Last confirmation wins; sibling offers are left untouched
            logger.warning(
                f"⚠️ Booking {booking.id} re-confirmed: interpreter "
                f"{previous_interpreter} replaced by {interpreter.id}"
            )

        apply_transition(booking, BookingStatus.CONFIRMED)
        booking.interpreter_id = interpreter.id
        booking.interpreter_name = interpreter.name

        logger.info(
            f"✅ Booking {booking.id} confirmed to {interpreter.id} by {actor.value}"
            + (f" ({reason})" if reason else "")
        )
        return conflict

    # ========================================================================
    # OFFERS
    # ========================================================================

    def create_assignment(
        self,
        booking_id: str,
        interpreter_id: str,
        actor: User,
        expected_version: Optional[int] = None,
    ) -> BookingAssignment:
        """Offer a booking to an interpreter"""
        ensure_role(actor, UserRole.ADMIN)
        booking = self._get_booking(booking_id)
        check_version(booking, expected_version)
        interpreter = self._get_interpreter(interpreter_id)

        assignment = BookingAssignment(
            booking_id=booking.id,
            interpreter_id=interpreter.id,
            status=AssignmentStatus.OFFERED.value,
            offered_at=utc_now(),
            booking_snapshot=booking_snapshot(booking),
        )

        with transaction(self.db):
            self.repo.add_assignment(self.db, assignment)
            if booking.status == BookingStatus.REQUESTED.value:
                apply_transition(booking, BookingStatus.OFFERED)

        logger.info(f"📤 Booking {booking.id} offered to interpreter {interpreter.id}")
        return assignment

    def _ensure_can_respond(self, assignment: BookingAssignment, actor: User) -> None:
        if has_role(actor, UserRole.ADMIN):
            return
        if has_role(actor, UserRole.INTERPRETER) and actor.profile_id == assignment.interpreter_id:
            return
        raise PermissionDeniedError("Only the offered interpreter can respond to this offer")

    def accept_offer(
        self, assignment_id: str, actor: User, expected_version: Optional[int] = None
    ) -> tuple[BookingAssignment, Booking, Optional[Booking]]:
        """Accept an offer and confirm the booking to its interpreter"""
        assignment = self._get_assignment(assignment_id)
        self._ensure_can_respond(assignment, actor)
        check_version(assignment, expected_version)

        if assignment.status != AssignmentStatus.OFFERED.value:
            raise InvalidTransitionError(f"Cannot accept an offer that is {assignment.status}")

        booking = self._get_booking(assignment.booking_id)
        interpreter = self._get_interpreter(assignment.interpreter_id)

        with transaction(self.db):
            self.repo.mark_responded(assignment, AssignmentStatus.ACCEPTED, utc_now())
            conflict = self.confirm_interpreter(
                booking,
                interpreter,
                ConfirmationActor.OFFER_ACCEPTED,
                reason=f"offer {assignment.id} accepted",
            )

        return assignment, booking, conflict

    def decline_offer(
        self, assignment_id: str, actor: User, expected_version: Optional[int] = None
    ) -> BookingAssignment:
        """Interpreter declines, or admin retracts; both end as DECLINED"""
        assignment = self._get_assignment(assignment_id)
        self._ensure_can_respond(assignment, actor)
        check_version(assignment, expected_version)

        if assignment.status != AssignmentStatus.OFFERED.value:
            raise InvalidTransitionError(f"Cannot decline an offer that is {assignment.status}")

        with transaction(self.db):
            self.repo.mark_responded(assignment, AssignmentStatus.DECLINED, utc_now())

        logger.info(f"📥 Offer {assignment.id} declined by {actor.role}")
        return assignment

    def assign_interpreter_to_booking(
        self,
        booking_id: str,
        interpreter_id: str,
        actor: User,
        reason: Optional[str] = None,
        expected_version: Optional[int] = None,
    ) -> tuple[Booking, Optional[Booking]]:
        """Admin direct assignment, bypassing offers"""
        ensure_role(actor, UserRole.ADMIN)
        booking = self._get_booking(booking_id)
        check_version(booking, expected_version)
        interpreter = self._get_interpreter(interpreter_id)

        with transaction(self.db):
            conflict = self.confirm_interpreter(
                booking,
                interpreter,
                ConfirmationActor.ADMIN_DIRECT_ASSIGN,
                reason=reason or f"assigned by admin {actor.id}",
            )

        return booking, conflict

    def get_assignments_for_booking(self, booking_id: str, actor: User) -> list[BookingAssignment]:
        ensure_role(actor, UserRole.ADMIN)
        self._get_booking(booking_id)
        return self.repo.get_assignments_for_booking(self.db, booking_id)

    def get_my_assignments(
        self, actor: User, status: Optional[AssignmentStatus] = None
    ) -> list[BookingAssignment]:
        """An interpreter's offers, optionally filtered by status"""
        ensure_role(actor, UserRole.INTERPRETER)
        if not actor.profile_id:
            raise PermissionDeniedError("User is not linked to an interpreter profile")
        return self.repo.get_assignments_for_interpreter(
            self.db, actor.profile_id, status.value if status else None
        )

    # ========================================================================
    # LIFECYCLE
    # ========================================================================

    def cancel_booking(
        self, booking_id: str, actor: User, expected_version: Optional[int] = None
    ) -> Booking:
        """Cancel a REQUESTED or OFFERED booking"""
        booking = self._get_booking(booking_id)
        if has_role(actor, UserRole.CLIENT):
            if not actor.profile_id or booking.client_id != actor.profile_id:
                raise PermissionDeniedError("Clients can only cancel their own bookings")
        else:
            ensure_role(actor, UserRole.ADMIN)
        check_version(booking, expected_version)

        with transaction(self.db):
            apply_transition(booking, BookingStatus.CANCELLED)

        logger.info(f"🚫 Booking {booking.id} cancelled by {actor.role}")
        return booking

    def complete_booking(
        self, booking_id: str, actor: User, expected_version: Optional[int] = None
    ) -> Booking:
        ensure_role(actor, UserRole.ADMIN)
        booking = self._get_booking(booking_id)
        check_version(booking, expected_version)

        with transaction(self.db):
            apply_transition(booking, BookingStatus.COMPLETED)

        return booking

    @staticmethod
    def complete_if_confirmed(booking: Booking) -> bool:
        """Stage CONFIRMED -> COMPLETED when allowed; other statuses are left alone"""
        if booking.status == BookingStatus.CONFIRMED.value and can_transition(
            booking.status, BookingStatus.COMPLETED.value
        ):
            apply_transition(booking, BookingStatus.COMPLETED)
            return True
        logger.info(f"ℹ️ Booking {booking.id} left as {booking.status} on timesheet submission")
        return False

"""Timesheet service - submission, approval and pricing of worked time"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from ...errors import (
    InvalidArgumentError,
    InvalidTransitionError,
    NotFoundError,
    PermissionDeniedError,
)
from ...models import BookingStatus, RateType, User, UserRole
from ...models_invoice import Timesheet, TimesheetStatus
from ...permissions import ensure_role, has_role
from ...shared.transactions import check_version, transaction
from ...shared.validators import utc_now
from ..bookings.repository import BookingRepository
from ..bookings.service import BookingService
from .calculator import RateCard, TimesheetFigures, calculate_timesheet_figures
from .repository import BillingRepository
from .schemas import TimesheetSubmit

logger = logging.getLogger(__name__)

TIMESHEET_BOOKING_STATUSES = (BookingStatus.CONFIRMED.value, BookingStatus.COMPLETED.value)


class TimesheetService:
    """Service layer for timesheet business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = BillingRepository()
        self.bookings = BookingRepository()

    def _get_timesheet(self, timesheet_id: str) -> Timesheet:
        timesheet = self.repo.get_timesheet(self.db, timesheet_id)
        if not timesheet:
            raise NotFoundError("Timesheet not found")
        return timesheet

    def _rate_card(self, rate_type: RateType, service_type: str) -> Optional[RateCard]:
        rate = self.repo.get_rate(self.db, rate_type.value, service_type)
        if not rate:
            logger.warning(f"⚠️ No {rate_type.value} rate for {service_type}, using fallback")
            return None
        return RateCard(amount_per_unit=rate.amount_per_unit, minimum_units=rate.minimum_units)

    # ========================================================================
    # QUERIES
    # ========================================================================

    def get_timesheet(self, timesheet_id: str, actor: User) -> Timesheet:
        timesheet = self._get_timesheet(timesheet_id)
        if has_role(actor, UserRole.ADMIN):
            return timesheet
        if has_role(actor, UserRole.INTERPRETER) and actor.profile_id == timesheet.interpreter_id:
            return timesheet
        if has_role(actor, UserRole.CLIENT):
            if actor.profile_id and actor.profile_id == timesheet.client_id:
                return timesheet
        raise PermissionDeniedError("You do not have access to this timesheet")

    def get_pending_timesheets(self, actor: User) -> list[Timesheet]:
        """Submitted timesheets awaiting approval"""
        ensure_role(actor, UserRole.ADMIN)
        return self.repo.get_pending_timesheets(self.db)

    def get_my_timesheets(self, actor: User) -> list[Timesheet]:
        ensure_role(actor, UserRole.INTERPRETER)
        if not actor.profile_id:
            raise PermissionDeniedError("User is not linked to an interpreter profile")
        return self.repo.get_timesheets_for_interpreter(self.db, actor.profile_id)

    def get_uninvoiced_timesheets(
        self, actor: User, interpreter_id: Optional[str] = None
    ) -> list[Timesheet]:
        """Approved timesheets an interpreter can still claim"""
        if has_role(actor, UserRole.INTERPRETER):
            if not actor.profile_id or (interpreter_id and interpreter_id != actor.profile_id):
                raise PermissionDeniedError("Interpreters can only view their own timesheets")
            interpreter_id = actor.profile_id
        else:
            ensure_role(actor, UserRole.ADMIN)
            if not interpreter_id:
                raise InvalidArgumentError("interpreter_id is required")
        return self.repo.get_uninvoiced_for_interpreter(self.db, interpreter_id)

    # ========================================================================
    # SUBMISSION
    # ========================================================================

    def submit_timesheet(self, data: TimesheetSubmit, actor: User) -> Timesheet:
        """Record actual worked time for a booking and complete the booking"""
        booking = self.bookings.get_booking(self.db, data.booking_id)
        if not booking:
            raise NotFoundError("Booking not found")

        if has_role(actor, UserRole.INTERPRETER):
            if not actor.profile_id or booking.interpreter_id != actor.profile_id:
                raise PermissionDeniedError("Only the assigned interpreter can submit a timesheet")
        else:
            ensure_role(actor, UserRole.ADMIN)
            if not booking.interpreter_id:
                raise InvalidArgumentError("Booking has no assigned interpreter")

        if booking.status not in TIMESHEET_BOOKING_STATUSES:
            raise InvalidTransitionError(
                f"Cannot submit a timesheet for a booking that is {booking.status}"
            )
        if self.repo.get_active_timesheets_for_booking(self.db, booking.id):
            raise InvalidTransitionError("Booking already has a timesheet")

        timesheet = Timesheet(
            booking_id=booking.id,
            client_id=booking.client_id,
            interpreter_id=booking.interpreter_id,
            actual_start=data.actual_start,
            actual_end=data.actual_end,
            break_duration_minutes=data.break_duration_minutes,
            travel_duration_minutes=data.travel_duration_minutes,
            units_billable_to_client=0,
            units_payable_to_interpreter=0,
            client_amount_calculated=0,
            interpreter_amount_calculated=0,
            admin_approved=False,
            ready_for_client_invoice=False,
            ready_for_interpreter_invoice=False,
            status=TimesheetStatus.SUBMITTED.value,
            submitted_at=utc_now(),
        )

        with transaction(self.db):
            self.repo.add(self.db, timesheet)
            BookingService.complete_if_confirmed(booking)

        logger.info(f"📥 Timesheet {timesheet.id} submitted for booking {booking.id}")
        return timesheet

    # ========================================================================
    # APPROVAL
    # ========================================================================

    def approve_timesheet(
        self, timesheet_id: str, actor: User, expected_version: Optional[int] = None
    ) -> Timesheet:
        """Approve a timesheet and freeze its billing figures"""
        ensure_role(actor, UserRole.ADMIN)
        timesheet = self._get_timesheet(timesheet_id)

        if timesheet.admin_approved:
            logger.info(f"ℹ️ Timesheet {timesheet.id} already approved, figures unchanged")
            return timesheet

        check_version(timesheet, expected_version)
        if timesheet.status != TimesheetStatus.SUBMITTED.value:
            raise InvalidTransitionError(f"Cannot approve a timesheet that is {timesheet.status}")

        was_approved = timesheet.admin_approved

        with transaction(self.db):
            timesheet.admin_approved = True
            timesheet.admin_approved_at = utc_now()
            timesheet.status = TimesheetStatus.APPROVED.value
            self.on_timesheet_admin_approved(timesheet, was_approved)

        logger.info(f"✅ Timesheet {timesheet.id} approved by {actor.id}")
        return timesheet

    def on_timesheet_admin_approved(
        self, timesheet: Timesheet, was_approved: bool
    ) -> Optional[TimesheetFigures]:
        """
        Price a timesheet when admin_approved flips from false to true.

        Any other change is ignored. Figures are staged on the session and the
        caller commits them together with the approval.
        """
        if was_approved or not timesheet.admin_approved:
            return None

        booking = self.bookings.get_booking(self.db, timesheet.booking_id)
        if not booking:
            logger.error(f"❌ Booking {timesheet.booking_id} not found for timesheet {timesheet.id}")
            raise NotFoundError(f"Booking {timesheet.booking_id} not found for timesheet")

        figures = calculate_timesheet_figures(
            timesheet.actual_start,
            timesheet.actual_end,
            timesheet.break_duration_minutes,
            client_rate=self._rate_card(RateType.CLIENT, booking.service_type),
            interpreter_rate=self._rate_card(RateType.INTERPRETER, booking.service_type),
        )

        timesheet.units_billable_to_client = figures.units_billable_to_client
        timesheet.units_payable_to_interpreter = figures.units_payable_to_interpreter
        timesheet.client_amount_calculated = figures.client_amount_calculated
        timesheet.interpreter_amount_calculated = figures.interpreter_amount_calculated
        timesheet.ready_for_client_invoice = True
        timesheet.ready_for_interpreter_invoice = True

        logger.info(
            f"📊 Timesheet {timesheet.id} priced: client £{figures.client_amount_calculated}, "
            f"interpreter £{figures.interpreter_amount_calculated}"
        )
        return figures

    def reject_timesheet(
        self, timesheet_id: str, actor: User, expected_version: Optional[int] = None
    ) -> Timesheet:
        ensure_role(actor, UserRole.ADMIN)
        timesheet = self._get_timesheet(timesheet_id)
        check_version(timesheet, expected_version)

        if timesheet.status != TimesheetStatus.SUBMITTED.value or timesheet.admin_approved:
            raise InvalidTransitionError(f"Cannot reject a timesheet that is {timesheet.status}")

        with transaction(self.db):
            timesheet.status = TimesheetStatus.REJECTED.value

        logger.info(f"🚫 Timesheet {timesheet.id} rejected")
        return timesheet

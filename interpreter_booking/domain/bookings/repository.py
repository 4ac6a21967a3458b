"""Booking repository - Database operations for bookings and assignments.

Writes are staged on the session; the service commits them as one unit.
"""

from datetime import date
from typing import Optional

from sqlalchemy.orm import Session

from ...models import AssignmentStatus, Booking, BookingAssignment, BookingStatus
from ...models_invoice import Timesheet


class BookingRepository:
    """Repository for booking database operations"""

    @staticmethod
    def get_booking(db: Session, booking_id: str) -> Optional[Booking]:
        return db.query(Booking).filter(Booking.id == booking_id).first()

    @staticmethod
    def get_bookings(db: Session, status: Optional[str] = None) -> list[Booking]:
        """All bookings, newest date first"""
        query = db.query(Booking)
        if status:
            query = query.filter(Booking.status == status)
        return query.order_by(Booking.date.desc(), Booking.start_time.desc()).all()

    @staticmethod
    def get_bookings_for_client(
        db: Session, client_id: str, status: Optional[str] = None
    ) -> list[Booking]:
        query = db.query(Booking).filter(Booking.client_id == client_id)
        if status:
            query = query.filter(Booking.status == status)
        return query.order_by(Booking.date.desc(), Booking.start_time.desc()).all()

    @staticmethod
    def get_interpreter_schedule(db: Session, interpreter_id: str) -> list[Booking]:
        """Non-cancelled bookings assigned to an interpreter"""
        return (
            db.query(Booking)
            .filter(
                Booking.interpreter_id == interpreter_id,
                Booking.status != BookingStatus.CANCELLED.value,
            )
            .order_by(Booking.date.asc(), Booking.start_time.asc())
            .all()
        )

    @staticmethod
    def get_confirmed_on_date(db: Session, interpreter_id: str, on_date: date) -> list[Booking]:
        return (
            db.query(Booking)
            .filter(
                Booking.interpreter_id == interpreter_id,
                Booking.date == on_date,
                Booking.status == BookingStatus.CONFIRMED.value,
            )
            .order_by(Booking.start_time.asc())
            .all()
        )

    @staticmethod
    def add_booking(db: Session, booking: Booking) -> Booking:
        db.add(booking)
        db.flush()
        return booking

    @staticmethod
    def get_unbilled_timesheets(db: Session, booking_id: str) -> list[Timesheet]:
        """Timesheets on the booking not yet on a client invoice"""
        return (
            db.query(Timesheet)
            .filter(Timesheet.booking_id == booking_id, Timesheet.client_invoice_id.is_(None))
            .all()
        )

    # ------------------------------------------------------------------
    # Assignments
    # ------------------------------------------------------------------

    @staticmethod
    def get_assignment(db: Session, assignment_id: str) -> Optional[BookingAssignment]:
        return db.query(BookingAssignment).filter(BookingAssignment.id == assignment_id).first()

    @staticmethod
    def get_assignments_for_booking(db: Session, booking_id: str) -> list[BookingAssignment]:
        return (
            db.query(BookingAssignment)
            .filter(BookingAssignment.booking_id == booking_id)
            .order_by(BookingAssignment.offered_at.asc())
            .all()
        )

    @staticmethod
    def get_assignments_for_interpreter(
        db: Session, interpreter_id: str, status: Optional[str] = None
    ) -> list[BookingAssignment]:
        query = db.query(BookingAssignment).filter(
            BookingAssignment.interpreter_id == interpreter_id
        )
        if status:
            query = query.filter(BookingAssignment.status == status)
        return query.order_by(BookingAssignment.offered_at.desc()).all()

    @staticmethod
    def has_assignment(db: Session, booking_id: str, interpreter_id: str) -> bool:
        return (
            db.query(BookingAssignment)
            .filter(
                BookingAssignment.booking_id == booking_id,
                BookingAssignment.interpreter_id == interpreter_id,
            )
            .first()
            is not None
        )

    @staticmethod
    def add_assignment(db: Session, assignment: BookingAssignment) -> BookingAssignment:
        db.add(assignment)
        db.flush()
        return assignment

    @staticmethod
    def mark_responded(
        assignment: BookingAssignment, status: AssignmentStatus, responded_at
    ) -> BookingAssignment:
        assignment.status = status.value
        assignment.responded_at = responded_at
        return assignment

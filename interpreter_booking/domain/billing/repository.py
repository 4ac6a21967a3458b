"""Billing repository - timesheets, rates and invoices.

Write methods only stage changes; services commit through ``transaction``.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from ...models import Booking, Rate
from ...models_invoice import (
    ClientInvoice,
    ClientInvoiceLine,
    InterpreterInvoice,
    InterpreterInvoiceLine,
    InvoiceStatus,
    Timesheet,
    TimesheetStatus,
)


class BillingRepository:
    """Repository for billing database operations"""

    # ------------------------------------------------------------------
    # Timesheets
    # ------------------------------------------------------------------

    @staticmethod
    def get_timesheet(db: Session, timesheet_id: str) -> Optional[Timesheet]:
        return db.query(Timesheet).filter(Timesheet.id == timesheet_id).first()

    @staticmethod
    def get_timesheets_by_ids(db: Session, timesheet_ids: list[str]) -> list[Timesheet]:
        return db.query(Timesheet).filter(Timesheet.id.in_(timesheet_ids)).all()

    @staticmethod
    def get_active_timesheets_for_booking(db: Session, booking_id: str) -> list[Timesheet]:
        """Timesheets on the booking other than rejected ones"""
        return (
            db.query(Timesheet)
            .filter(
                Timesheet.booking_id == booking_id,
                Timesheet.status != TimesheetStatus.REJECTED.value,
            )
            .all()
        )

    @staticmethod
    def get_pending_timesheets(db: Session) -> list[Timesheet]:
        """Submitted timesheets awaiting admin approval"""
        return (
            db.query(Timesheet)
            .filter(
                Timesheet.admin_approved.is_(False),
                Timesheet.status == TimesheetStatus.SUBMITTED.value,
            )
            .order_by(Timesheet.submitted_at.asc())
            .all()
        )

    @staticmethod
    def get_timesheets_for_interpreter(db: Session, interpreter_id: str) -> list[Timesheet]:
        return (
            db.query(Timesheet)
            .filter(Timesheet.interpreter_id == interpreter_id)
            .order_by(Timesheet.actual_start.desc())
            .all()
        )

    @staticmethod
    def get_uninvoiced_for_interpreter(db: Session, interpreter_id: str) -> list[Timesheet]:
        """Approved timesheets not yet claimed on an interpreter invoice"""
        return (
            db.query(Timesheet)
            .filter(
                Timesheet.interpreter_id == interpreter_id,
                Timesheet.ready_for_interpreter_invoice.is_(True),
                Timesheet.interpreter_invoice_id.is_(None),
            )
            .order_by(Timesheet.actual_start.asc())
            .all()
        )

    @staticmethod
    def get_billable_timesheets(
        db: Session, client_id: str, period_start: datetime, period_end: datetime
    ) -> list[Timesheet]:
        """Timesheets ready for a client invoice whose actual start falls in the period"""
        return (
            db.query(Timesheet)
            .filter(
                Timesheet.client_id == client_id,
                Timesheet.ready_for_client_invoice.is_(True),
                Timesheet.client_invoice_id.is_(None),
                Timesheet.actual_start >= period_start,
                Timesheet.actual_start <= period_end,
            )
            .order_by(Timesheet.actual_start.asc())
            .all()
        )

    @staticmethod
    def get_timesheets_for_client_invoice(db: Session, invoice_id: str) -> list[Timesheet]:
        return db.query(Timesheet).filter(Timesheet.client_invoice_id == invoice_id).all()

    @staticmethod
    def get_timesheets_for_interpreter_invoice(db: Session, invoice_id: str) -> list[Timesheet]:
        return db.query(Timesheet).filter(Timesheet.interpreter_invoice_id == invoice_id).all()

    @staticmethod
    def get_bookings_by_ids(db: Session, booking_ids: set[str]) -> list[Booking]:
        if not booking_ids:
            return []
        return db.query(Booking).filter(Booking.id.in_(booking_ids)).all()

    @staticmethod
    def add(db: Session, row):
        db.add(row)
        return row

    # ------------------------------------------------------------------
    # Rates
    # ------------------------------------------------------------------

    @staticmethod
    def get_rate(db: Session, rate_type: str, service_type: str) -> Optional[Rate]:
        """Most recently created rate for the pair"""
        return (
            db.query(Rate)
            .filter(Rate.rate_type == rate_type, Rate.service_type == service_type)
            .order_by(Rate.created_at.desc())
            .first()
        )

    @staticmethod
    def get_rate_by_id(db: Session, rate_id: str) -> Optional[Rate]:
        return db.query(Rate).filter(Rate.id == rate_id).first()

    @staticmethod
    def get_rates(db: Session, rate_type: Optional[str] = None) -> list[Rate]:
        query = db.query(Rate)
        if rate_type:
            query = query.filter(Rate.rate_type == rate_type)
        return query.order_by(Rate.rate_type.asc(), Rate.service_type.asc()).all()

    # ------------------------------------------------------------------
    # Client invoices
    # ------------------------------------------------------------------

    @staticmethod
    def get_client_invoice(db: Session, invoice_id: str) -> Optional[ClientInvoice]:
        return db.query(ClientInvoice).filter(ClientInvoice.id == invoice_id).first()

    @staticmethod
    def get_client_invoices(
        db: Session, client_id: str, status: Optional[str] = None
    ) -> list[ClientInvoice]:
        query = db.query(ClientInvoice).filter(ClientInvoice.client_id == client_id)
        if status:
            query = query.filter(ClientInvoice.status == status)
        return query.order_by(ClientInvoice.issue_date.desc()).all()

    @staticmethod
    def get_client_invoice_lines(db: Session, invoice_id: str) -> list[ClientInvoiceLine]:
        return (
            db.query(ClientInvoiceLine)
            .filter(ClientInvoiceLine.invoice_id == invoice_id)
            .all()
        )

    @staticmethod
    def add_client_invoice_line(db: Session, line: ClientInvoiceLine) -> ClientInvoiceLine:
        db.add(line)
        return line

    # ------------------------------------------------------------------
    # Interpreter invoices
    # ------------------------------------------------------------------

    @staticmethod
    def get_interpreter_invoice(db: Session, invoice_id: str) -> Optional[InterpreterInvoice]:
        return db.query(InterpreterInvoice).filter(InterpreterInvoice.id == invoice_id).first()

    @staticmethod
    def get_interpreter_invoices(
        db: Session, interpreter_id: Optional[str] = None, status: Optional[str] = None
    ) -> list[InterpreterInvoice]:
        query = db.query(InterpreterInvoice)
        if interpreter_id:
            query = query.filter(InterpreterInvoice.interpreter_id == interpreter_id)
        if status:
            query = query.filter(InterpreterInvoice.status == status)
        return query.order_by(InterpreterInvoice.issue_date.desc()).all()

    @staticmethod
    def get_interpreter_invoice_lines(db: Session, invoice_id: str) -> list[InterpreterInvoiceLine]:
        return (
            db.query(InterpreterInvoiceLine)
            .filter(InterpreterInvoiceLine.interpreter_invoice_id == invoice_id)
            .all()
        )

    # ------------------------------------------------------------------
    # Dashboard
    # ------------------------------------------------------------------

    @staticmethod
    def get_outstanding_client_invoice_totals(db: Session) -> tuple[int, float]:
        """Count and sum of DRAFT/SENT client invoices"""
        count, total = (
            db.query(func.count(ClientInvoice.id), func.coalesce(func.sum(ClientInvoice.total_amount), 0))
            .filter(
                ClientInvoice.status.in_([InvoiceStatus.DRAFT.value, InvoiceStatus.SENT.value])
            )
            .one()
        )
        return count, float(total)

    @staticmethod
    def count_submitted_interpreter_invoices(db: Session) -> int:
        return (
            db.query(InterpreterInvoice)
            .filter(InterpreterInvoice.status == InvoiceStatus.SUBMITTED.value)
            .count()
        )

    @staticmethod
    def count_pending_timesheets(db: Session) -> int:
        return (
            db.query(Timesheet)
            .filter(
                Timesheet.admin_approved.is_(False),
                Timesheet.status == TimesheetStatus.SUBMITTED.value,
            )
            .count()
        )

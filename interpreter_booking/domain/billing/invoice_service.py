"""Invoice service - client invoice rollup and interpreter claims"""

import logging
import time
from datetime import timedelta
from typing import Optional

from sqlalchemy.orm import Session

from ... import config
from ...errors import (
    InvalidArgumentError,
    InvalidTransitionError,
    NotFoundError,
    PermissionDeniedError,
)
from ...models import BookingStatus, User, UserRole, generate_id
from ...models_invoice import (
    ClientInvoice,
    ClientInvoiceLine,
    InterpreterInvoice,
    InterpreterInvoiceLine,
    InterpreterInvoiceModel,
    InvoiceStatus,
    Timesheet,
    TimesheetStatus,
)
from ...permissions import ensure_role, has_role
from ...shared.transactions import check_version, transaction
from ...shared.validators import utc_now
from ..bookings.state_machine import apply_transition
from ..clients.repository import ClientRepository
from ..interpreters.repository import InterpreterRepository
from .calculator import line_rate, round_money
from .repository import BillingRepository
from .schemas import GenerateClientInvoiceRequest, InterpreterInvoiceCreate

logger = logging.getLogger(__name__)

NO_ELIGIBLE_TIMESHEETS_MESSAGE = "No eligible timesheets found for this period."

CLIENT_INVOICE_TRANSITIONS = {
    InvoiceStatus.DRAFT.value: {InvoiceStatus.SENT.value, InvoiceStatus.CANCELLED.value},
    InvoiceStatus.SENT.value: {InvoiceStatus.PAID.value, InvoiceStatus.CANCELLED.value},
    InvoiceStatus.PAID.value: set(),
    InvoiceStatus.CANCELLED.value: set(),
}

INTERPRETER_INVOICE_TRANSITIONS = {
    InvoiceStatus.SUBMITTED.value: {InvoiceStatus.APPROVED.value, InvoiceStatus.REJECTED.value},
    InvoiceStatus.APPROVED.value: {InvoiceStatus.PAID.value},
    InvoiceStatus.REJECTED.value: set(),
    InvoiceStatus.PAID.value: set(),
}


def _timestamp_suffix() -> str:
    """Last six digits of the current epoch milliseconds"""
    return str(int(time.time() * 1000))[-6:]


def generate_invoice_reference() -> str:
    return f"INV-{_timestamp_suffix()}"


def generate_self_bill_reference() -> str:
    return f"SB-{_timestamp_suffix()}"


def line_description(timesheet: Timesheet) -> str:
    return f"Interpreting Service ({timesheet.booking_id}) - {timesheet.actual_start:%d/%m/%Y}"


class InvoiceService:
    """Service layer for invoice business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = BillingRepository()
        self.clients = ClientRepository()
        self.interpreters = InterpreterRepository()

    # ========================================================================
    # CLIENT INVOICES
    # ========================================================================

    def generate_client_invoice(self, data: GenerateClientInvoiceRequest, actor: User) -> dict:
        """
        Roll a client's approved, uninvoiced timesheets for a period into one DRAFT invoice.

        The invoice, its lines, the timesheet links and the booking status
        moves commit together or not at all.
        """
        ensure_role(actor, UserRole.ADMIN)

        if not data.clientId:
            raise InvalidArgumentError("clientId is required")
        if not data.periodStart or not data.periodEnd:
            raise InvalidArgumentError("periodStart and periodEnd are required")
        if data.periodEnd < data.periodStart:
            raise InvalidArgumentError("periodEnd must be on or after periodStart")

        client = self.clients.get_client_by_id(self.db, data.clientId)
        if not client:
            raise NotFoundError("Client not found")

        timesheets = self.repo.get_billable_timesheets(
            self.db, client.id, data.periodStart, data.periodEnd
        )
        if not timesheets:
            logger.info(f"ℹ️ No eligible timesheets for client {client.id} in period")
            return {"success": False, "message": NO_ELIGIBLE_TIMESHEETS_MESSAGE}

        issue_date = utc_now()
        total = round_money(sum(ts.client_amount_calculated for ts in timesheets))
        payment_terms = client.payment_terms_days
        if payment_terms is None:
            payment_terms = config.DEFAULT_PAYMENT_TERMS_DAYS
        reference = generate_invoice_reference()

        invoice = ClientInvoice(
            id=generate_id(),
            client_id=client.id,
            client_name=client.company_name,
            invoice_number=reference,
            reference=reference,
            issue_date=issue_date,
            due_date=issue_date + timedelta(days=payment_terms),
            period_start=data.periodStart,
            period_end=data.periodEnd,
            status=InvoiceStatus.DRAFT.value,
            total_amount=total,
            currency=config.DEFAULT_CURRENCY,
        )

        with transaction(self.db):
            self.repo.add(self.db, invoice)

            for ts in timesheets:
                self.repo.add_client_invoice_line(
                    self.db,
                    ClientInvoiceLine(
                        invoice_id=invoice.id,
                        timesheet_id=ts.id,
                        booking_id=ts.booking_id,
                        description=line_description(ts),
                        units=ts.units_billable_to_client,
                        rate=line_rate(ts.client_amount_calculated, ts.units_billable_to_client),
                        line_amount=ts.client_amount_calculated,
                    ),
                )
                ts.client_invoice_id = invoice.id
                ts.status = TimesheetStatus.INVOICED.value

            booking_ids = {ts.booking_id for ts in timesheets}
            for booking in self.repo.get_bookings_by_ids(self.db, booking_ids):
                if booking.status == BookingStatus.COMPLETED.value:
                    apply_transition(booking, BookingStatus.INVOICED)

        logger.info(
            f"✅ Client invoice {reference} generated for {client.company_name}: "
            f"{len(timesheets)} timesheets, total {total}"
        )
        return {
            "success": True,
            "invoiceId": invoice.id,
            "count": len(timesheets),
            "total": total,
        }

    def get_client_invoices(
        self, actor: User, client_id: Optional[str] = None, status: Optional[str] = None
    ) -> list[ClientInvoice]:
        """Clients see their own invoices; admins must name a client"""
        if has_role(actor, UserRole.CLIENT):
            if not actor.profile_id:
                raise PermissionDeniedError("User is not linked to a client")
            if client_id and client_id != actor.profile_id:
                raise PermissionDeniedError("Clients can only view their own invoices")
            client_id = actor.profile_id
        elif has_role(actor, UserRole.ADMIN):
            if not client_id:
                raise InvalidArgumentError("clientId is required")
        else:
            raise PermissionDeniedError("Access forbidden for this role")

        return self.repo.get_client_invoices(self.db, client_id, status)

    def get_client_invoice(
        self, invoice_id: str, actor: User
    ) -> tuple[ClientInvoice, list[ClientInvoiceLine]]:
        invoice = self.repo.get_client_invoice(self.db, invoice_id)
        if not invoice:
            raise NotFoundError("Invoice not found")

        if has_role(actor, UserRole.CLIENT):
            if not actor.profile_id or invoice.client_id != actor.profile_id:
                raise PermissionDeniedError("Clients can only view their own invoices")
        else:
            ensure_role(actor, UserRole.ADMIN)

        return invoice, self.repo.get_client_invoice_lines(self.db, invoice.id)

    def update_client_invoice_status(
        self,
        invoice_id: str,
        status: InvoiceStatus,
        actor: User,
        expected_version: Optional[int] = None,
    ) -> ClientInvoice:
        """DRAFT → SENT → PAID, or CANCELLED before payment"""
        ensure_role(actor, UserRole.ADMIN)
        invoice = self.repo.get_client_invoice(self.db, invoice_id)
        if not invoice:
            raise NotFoundError("Invoice not found")
        check_version(invoice, expected_version)

        target = InvoiceStatus(status).value
        if target not in CLIENT_INVOICE_TRANSITIONS.get(invoice.status, set()):
            raise InvalidTransitionError(f"Cannot move invoice from {invoice.status} to {target}")

        with transaction(self.db):
            previous = invoice.status
            invoice.status = target

            if target == InvoiceStatus.PAID.value:
                timesheets = self.repo.get_timesheets_for_client_invoice(self.db, invoice.id)
                booking_ids = {ts.booking_id for ts in timesheets}
                for booking in self.repo.get_bookings_by_ids(self.db, booking_ids):
                    if booking.status == BookingStatus.INVOICED.value:
                        apply_transition(booking, BookingStatus.PAID)

        logger.info(f"📊 Client invoice {invoice.invoice_number}: {previous} → {target}")
        return invoice

    # ========================================================================
    # INTERPRETER INVOICES
    # ========================================================================

    def create_interpreter_invoice(
        self, data: InterpreterInvoiceCreate, actor: User
    ) -> InterpreterInvoice:
        """Claim approved timesheets on an uploaded or self-billed invoice"""
        if has_role(actor, UserRole.INTERPRETER):
            if not actor.profile_id:
                raise PermissionDeniedError("User is not linked to an interpreter profile")
            if data.interpreterId and data.interpreterId != actor.profile_id:
                raise PermissionDeniedError("Interpreters can only invoice for themselves")
            interpreter_id = actor.profile_id
        else:
            ensure_role(actor, UserRole.ADMIN)
            if not data.interpreterId:
                raise InvalidArgumentError("interpreterId is required")
            interpreter_id = data.interpreterId

        interpreter = self.interpreters.get_interpreter_by_id(self.db, interpreter_id)
        if not interpreter:
            raise NotFoundError("Interpreter not found")

        timesheet_ids = list(dict.fromkeys(data.timesheetIds))
        if not timesheet_ids:
            raise InvalidArgumentError("At least one timesheet is required")

        timesheets = self.repo.get_timesheets_by_ids(self.db, timesheet_ids)
        found = {ts.id for ts in timesheets}
        missing = [tid for tid in timesheet_ids if tid not in found]
        if missing:
            raise NotFoundError(f"Timesheets not found: {', '.join(missing)}")

        for ts in timesheets:
            if ts.interpreter_id != interpreter_id:
                raise PermissionDeniedError(f"Timesheet {ts.id} belongs to another interpreter")
            if not ts.ready_for_interpreter_invoice:
                raise InvalidArgumentError(f"Timesheet {ts.id} is not approved for invoicing")
            if ts.interpreter_invoice_id:
                raise InvalidArgumentError(f"Timesheet {ts.id} is already on an invoice")

        if data.model == InterpreterInvoiceModel.UPLOAD:
            if not data.ref or data.amount is None:
                raise InvalidArgumentError("Uploaded invoices need a reference and an amount")
            reference = data.ref
            total = round_money(data.amount)
        else:
            reference = generate_self_bill_reference()
            total = round_money(sum(ts.interpreter_amount_calculated for ts in timesheets))

        invoice = InterpreterInvoice(
            id=generate_id(),
            interpreter_id=interpreter.id,
            interpreter_name=interpreter.name,
            model=data.model.value,
            external_invoice_reference=reference,
            issue_date=utc_now(),
            status=InvoiceStatus.SUBMITTED.value,
            total_amount=total,
            currency=config.DEFAULT_CURRENCY,
        )

        with transaction(self.db):
            self.repo.add(self.db, invoice)
            for ts in timesheets:
                self.repo.add(
                    self.db,
                    InterpreterInvoiceLine(
                        interpreter_invoice_id=invoice.id,
                        timesheet_id=ts.id,
                        booking_id=ts.booking_id,
                        description=line_description(ts),
                        units=ts.units_payable_to_interpreter,
                        rate=line_rate(
                            ts.interpreter_amount_calculated, ts.units_payable_to_interpreter
                        ),
                        line_amount=ts.interpreter_amount_calculated,
                    ),
                )
                ts.interpreter_invoice_id = invoice.id

        logger.info(
            f"✅ Interpreter invoice {reference} ({data.model.value}) submitted by {interpreter.id}: "
            f"{len(timesheets)} timesheets, total {total}"
        )
        return invoice

    def get_interpreter_invoices(
        self, actor: User, status: Optional[str] = None
    ) -> list[InterpreterInvoice]:
        if has_role(actor, UserRole.INTERPRETER):
            if not actor.profile_id:
                raise PermissionDeniedError("User is not linked to an interpreter profile")
            return self.repo.get_interpreter_invoices(self.db, actor.profile_id, status)
        ensure_role(actor, UserRole.ADMIN)
        return self.repo.get_interpreter_invoices(self.db, status=status)

    def get_interpreter_invoice(
        self, invoice_id: str, actor: User
    ) -> tuple[InterpreterInvoice, list[InterpreterInvoiceLine]]:
        invoice = self.repo.get_interpreter_invoice(self.db, invoice_id)
        if not invoice:
            raise NotFoundError("Invoice not found")

        if has_role(actor, UserRole.INTERPRETER):
            if actor.profile_id != invoice.interpreter_id:
                raise PermissionDeniedError("Interpreters can only view their own invoices")
        else:
            ensure_role(actor, UserRole.ADMIN)

        return invoice, self.repo.get_interpreter_invoice_lines(self.db, invoice.id)

    def update_interpreter_invoice_status(
        self, invoice_id: str, status: InvoiceStatus, actor: User
    ) -> InterpreterInvoice:
        """Approve, reject or pay an interpreter claim; rejection frees the timesheets"""
        ensure_role(actor, UserRole.ADMIN)
        invoice = self.repo.get_interpreter_invoice(self.db, invoice_id)
        if not invoice:
            raise NotFoundError("Invoice not found")

        target = InvoiceStatus(status).value
        if target not in INTERPRETER_INVOICE_TRANSITIONS.get(invoice.status, set()):
            raise InvalidTransitionError(f"Cannot move invoice from {invoice.status} to {target}")

        with transaction(self.db):
            previous = invoice.status
            invoice.status = target

            if target == InvoiceStatus.REJECTED.value:
                for ts in self.repo.get_timesheets_for_interpreter_invoice(self.db, invoice.id):
                    ts.interpreter_invoice_id = None

        logger.info(f"📊 Interpreter invoice {invoice.id}: {previous} → {target}")
        return invoice

    # ========================================================================
    # DASHBOARD
    # ========================================================================

    def get_dashboard_stats(self, actor: User) -> dict:
        ensure_role(actor, UserRole.ADMIN)
        pending_count, pending_amount = self.repo.get_outstanding_client_invoice_totals(self.db)
        return {
            "pendingClientInvoices": pending_count,
            "pendingClientAmount": round_money(pending_amount),
            "pendingInterpreterInvoices": self.repo.count_submitted_interpreter_invoices(self.db),
            "pendingTimesheets": self.repo.count_pending_timesheets(self.db),
        }

"""
Timesheet and Invoice Models for the Billing Rollup
"""

import enum

from sqlalchemy import Boolean, Column, DateTime, Float, Integer, String, Text
from sqlalchemy.sql import func

from .database import Base
from .models import generate_id


class TimesheetStatus(str, enum.Enum):
    SUBMITTED = "SUBMITTED"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    INVOICED = "INVOICED"


class InvoiceStatus(str, enum.Enum):
    # Client invoices
    DRAFT = "DRAFT"
    SENT = "SENT"
    PAID = "PAID"
    CANCELLED = "CANCELLED"
    # Interpreter invoices
    SUBMITTED = "SUBMITTED"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class InterpreterInvoiceModel(str, enum.Enum):
    UPLOAD = "UPLOAD"
    SELF_BILLING = "SELF_BILLING"


class Timesheet(Base):
    """Interpreter's claimed worked time for a booking"""

    __tablename__ = "timesheets"

    id = Column(String(36), primary_key=True, default=generate_id)
    booking_id = Column(String(36), nullable=False, index=True)
    client_id = Column(String(36), nullable=True, index=True)
    interpreter_id = Column(String(36), nullable=False, index=True)

    actual_start = Column(DateTime, nullable=False, index=True)
    actual_end = Column(DateTime, nullable=False)
    break_duration_minutes = Column(Integer, default=0, nullable=False)
    travel_duration_minutes = Column(Integer, nullable=True)

    # Frozen on admin approval
    units_billable_to_client = Column(Float, default=0, nullable=False)
    units_payable_to_interpreter = Column(Float, default=0, nullable=False)
    client_amount_calculated = Column(Float, default=0, nullable=False)
    interpreter_amount_calculated = Column(Float, default=0, nullable=False)

    admin_approved = Column(Boolean, default=False, nullable=False)
    admin_approved_at = Column(DateTime, nullable=True)
    ready_for_client_invoice = Column(Boolean, default=False, nullable=False, index=True)
    ready_for_interpreter_invoice = Column(Boolean, default=False, nullable=False)

    status = Column(String(20), default=TimesheetStatus.SUBMITTED.value, nullable=False, index=True)
    submitted_at = Column(DateTime, nullable=True)

    client_invoice_id = Column(String(36), nullable=True, index=True)
    interpreter_invoice_id = Column(String(36), nullable=True, index=True)

    version = Column(Integer, nullable=False)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    __mapper_args__ = {"version_id_col": version}


class ClientInvoice(Base):
    """Rollup of approved timesheets billed to one client"""

    __tablename__ = "client_invoices"

    id = Column(String(36), primary_key=True, default=generate_id)
    client_id = Column(String(36), nullable=False, index=True)
    client_name = Column(String(255), nullable=False)
    invoice_number = Column(String(50), nullable=False, index=True)
    reference = Column(String(50), nullable=True)

    issue_date = Column(DateTime, nullable=False)
    due_date = Column(DateTime, nullable=False)
    period_start = Column(DateTime, nullable=True)
    period_end = Column(DateTime, nullable=True)

    status = Column(String(20), default=InvoiceStatus.DRAFT.value, nullable=False, index=True)
    total_amount = Column(Float, nullable=False)
    currency = Column(String(10), default="GBP")

    version = Column(Integer, nullable=False)
    created_at = Column(DateTime, server_default=func.now())

    __mapper_args__ = {"version_id_col": version}


class ClientInvoiceLine(Base):
    __tablename__ = "client_invoice_lines"

    id = Column(String(36), primary_key=True, default=generate_id)
    invoice_id = Column(String(36), nullable=False, index=True)
    timesheet_id = Column(String(36), nullable=False)
    booking_id = Column(String(36), nullable=False)
    description = Column(Text, nullable=False)
    units = Column(Float, nullable=False)
    rate = Column(Float, nullable=False)
    line_amount = Column(Float, nullable=False)


class InterpreterInvoice(Base):
    """Interpreter claim: uploaded external invoice or system self-bill"""

    __tablename__ = "interpreter_invoices"

    id = Column(String(36), primary_key=True, default=generate_id)
    interpreter_id = Column(String(36), nullable=False, index=True)
    interpreter_name = Column(String(255), nullable=True)
    model = Column(String(20), nullable=False)  # UPLOAD, SELF_BILLING
    external_invoice_reference = Column(String(100), nullable=True)

    issue_date = Column(DateTime, nullable=False)
    status = Column(String(20), default=InvoiceStatus.SUBMITTED.value, nullable=False, index=True)
    total_amount = Column(Float, nullable=False)
    currency = Column(String(10), default="GBP")

    created_at = Column(DateTime, server_default=func.now())


class InterpreterInvoiceLine(Base):
    __tablename__ = "interpreter_invoice_lines"

    id = Column(String(36), primary_key=True, default=generate_id)
    interpreter_invoice_id = Column(String(36), nullable=False, index=True)
    timesheet_id = Column(String(36), nullable=False)
    booking_id = Column(String(36), nullable=False)
    description = Column(Text, nullable=False)
    units = Column(Float, nullable=False)
    rate = Column(Float, nullable=False)
    line_amount = Column(Float, nullable=False)

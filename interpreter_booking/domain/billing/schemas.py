"""Billing domain schemas - timesheets, rates and invoices"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, field_validator, model_validator

from ...models import RateType, ServiceType
from ...models_invoice import InterpreterInvoiceModel, InvoiceStatus, TimesheetStatus
from ...shared.validators import to_naive_utc


# ============================================================================
# TIMESHEETS
# ============================================================================


class TimesheetSubmit(BaseModel):
    """Interpreter's claim of actual worked time"""

    booking_id: str
    actual_start: datetime
    actual_end: datetime
    break_duration_minutes: int = 0
    travel_duration_minutes: Optional[int] = None

    @field_validator("actual_start", "actual_end")
    @classmethod
    def normalize_timestamp(cls, v):
        return to_naive_utc(v)

    @field_validator("break_duration_minutes", "travel_duration_minutes")
    @classmethod
    def validate_minutes(cls, v):
        if v is not None and v < 0:
            raise ValueError("Minutes cannot be negative")
        return v

    @model_validator(mode="after")
    def validate_range(self):
        if self.actual_end <= self.actual_start:
            raise ValueError("actual_end must be after actual_start")
        return self


class TimesheetAction(BaseModel):
    expected_version: Optional[int] = None


class TimesheetResponse(BaseModel):
    id: str
    booking_id: str
    client_id: Optional[str] = None
    interpreter_id: str
    actual_start: datetime
    actual_end: datetime
    break_duration_minutes: int
    travel_duration_minutes: Optional[int] = None
    units_billable_to_client: float
    units_payable_to_interpreter: float
    client_amount_calculated: float
    interpreter_amount_calculated: float
    admin_approved: bool
    admin_approved_at: Optional[datetime] = None
    ready_for_client_invoice: bool
    ready_for_interpreter_invoice: bool
    status: TimesheetStatus
    submitted_at: Optional[datetime] = None
    client_invoice_id: Optional[str] = None
    interpreter_invoice_id: Optional[str] = None
    version: int

    class Config:
        from_attributes = True


# ============================================================================
# RATES
# ============================================================================


class RateCreate(BaseModel):
    rate_type: RateType
    service_type: ServiceType
    amount_per_unit: float
    minimum_units: float = 1

    @field_validator("amount_per_unit", "minimum_units")
    @classmethod
    def validate_non_negative(cls, v):
        if v < 0:
            raise ValueError("Rate values cannot be negative")
        return v


class RateUpdate(BaseModel):
    amount_per_unit: Optional[float] = None
    minimum_units: Optional[float] = None

    @field_validator("amount_per_unit", "minimum_units")
    @classmethod
    def validate_non_negative(cls, v):
        if v is not None and v < 0:
            raise ValueError("Rate values cannot be negative")
        return v


class RateResponse(BaseModel):
    id: str
    rate_type: RateType
    service_type: str
    amount_per_unit: float
    minimum_units: float
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


# ============================================================================
# CLIENT INVOICES
# ============================================================================


class GenerateClientInvoiceRequest(BaseModel):
    """Payload for rolling a client's approved timesheets into an invoice"""

    clientId: Optional[str] = None
    periodStart: Optional[datetime] = None
    periodEnd: Optional[datetime] = None

    @field_validator("periodStart", "periodEnd")
    @classmethod
    def normalize_timestamp(cls, v):
        return to_naive_utc(v)


class GenerateClientInvoiceResponse(BaseModel):
    success: bool
    invoiceId: Optional[str] = None
    count: Optional[int] = None
    total: Optional[float] = None
    message: Optional[str] = None


class ClientInvoiceLineResponse(BaseModel):
    id: str
    invoice_id: str
    timesheet_id: str
    booking_id: str
    description: str
    units: float
    rate: float
    line_amount: float

    class Config:
        from_attributes = True


class ClientInvoiceResponse(BaseModel):
    id: str
    client_id: str
    client_name: str
    invoice_number: str
    reference: Optional[str] = None
    issue_date: datetime
    due_date: datetime
    period_start: Optional[datetime] = None
    period_end: Optional[datetime] = None
    status: InvoiceStatus
    total_amount: float
    currency: str
    version: int

    class Config:
        from_attributes = True


class ClientInvoiceDetail(ClientInvoiceResponse):
    lines: list[ClientInvoiceLineResponse] = []


class ClientInvoiceStatusUpdate(BaseModel):
    status: Literal["SENT", "PAID", "CANCELLED"]
    expected_version: Optional[int] = None


# ============================================================================
# INTERPRETER INVOICES
# ============================================================================


class InterpreterInvoiceCreate(BaseModel):
    """Interpreter claim against approved timesheets"""

    interpreterId: Optional[str] = None
    timesheetIds: list[str]
    ref: Optional[str] = None
    amount: Optional[float] = None
    model: InterpreterInvoiceModel = InterpreterInvoiceModel.UPLOAD

    @field_validator("amount")
    @classmethod
    def validate_amount(cls, v):
        if v is not None and v < 0:
            raise ValueError("Amount cannot be negative")
        return v


class InterpreterInvoiceLineResponse(BaseModel):
    id: str
    interpreter_invoice_id: str
    timesheet_id: str
    booking_id: str
    description: str
    units: float
    rate: float
    line_amount: float

    class Config:
        from_attributes = True


class InterpreterInvoiceResponse(BaseModel):
    id: str
    interpreter_id: str
    interpreter_name: Optional[str] = None
    model: InterpreterInvoiceModel
    external_invoice_reference: Optional[str] = None
    issue_date: datetime
    status: InvoiceStatus
    total_amount: float
    currency: str

    class Config:
        from_attributes = True


class InterpreterInvoiceDetail(InterpreterInvoiceResponse):
    lines: list[InterpreterInvoiceLineResponse] = []


class InterpreterInvoiceStatusUpdate(BaseModel):
    status: Literal["APPROVED", "REJECTED", "PAID"]


# ============================================================================
# DASHBOARD
# ============================================================================


class BillingDashboardStats(BaseModel):
    pendingClientInvoices: int
    pendingClientAmount: float
    pendingInterpreterInvoices: int
    pendingTimesheets: int

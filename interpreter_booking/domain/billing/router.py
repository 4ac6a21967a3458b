"""Billing router - client invoices, interpreter invoices and dashboard"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import User
from ...models_invoice import InvoiceStatus
from .invoice_service import InvoiceService
from .schemas import (
    BillingDashboardStats,
    ClientInvoiceDetail,
    ClientInvoiceLineResponse,
    ClientInvoiceResponse,
    ClientInvoiceStatusUpdate,
    GenerateClientInvoiceRequest,
    GenerateClientInvoiceResponse,
    InterpreterInvoiceCreate,
    InterpreterInvoiceDetail,
    InterpreterInvoiceLineResponse,
    InterpreterInvoiceResponse,
    InterpreterInvoiceStatusUpdate,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/billing", tags=["Billing"])


def get_invoice_service(db: Session = Depends(get_db)) -> InvoiceService:
    """Dependency injection for InvoiceService"""
    return InvoiceService(db)


# ============================================================================
# CLIENT INVOICES
# ============================================================================


@router.post("/client-invoices/generate", response_model=GenerateClientInvoiceResponse)
async def generate_client_invoice(
    data: GenerateClientInvoiceRequest,
    current_user: User = Depends(get_current_user),
    service: InvoiceService = Depends(get_invoice_service),
):
    """Roll approved timesheets for a client and period into a DRAFT invoice"""
    return service.generate_client_invoice(data, current_user)


@router.get("/client-invoices", response_model=list[ClientInvoiceResponse])
async def get_client_invoices(
    clientId: Optional[str] = Query(None),
    status: Optional[InvoiceStatus] = Query(None),
    current_user: User = Depends(get_current_user),
    service: InvoiceService = Depends(get_invoice_service),
):
    """Client invoices, newest first"""
    return service.get_client_invoices(current_user, clientId, status.value if status else None)


@router.get("/client-invoices/{invoice_id}", response_model=ClientInvoiceDetail)
async def get_client_invoice(
    invoice_id: str,
    current_user: User = Depends(get_current_user),
    service: InvoiceService = Depends(get_invoice_service),
):
    """Invoice with its lines"""
    invoice, lines = service.get_client_invoice(invoice_id, current_user)
    return ClientInvoiceDetail(
        **ClientInvoiceResponse.model_validate(invoice).model_dump(),
        lines=[ClientInvoiceLineResponse.model_validate(line) for line in lines],
    )


@router.patch("/client-invoices/{invoice_id}/status", response_model=ClientInvoiceResponse)
async def update_client_invoice_status(
    invoice_id: str,
    data: ClientInvoiceStatusUpdate,
    current_user: User = Depends(get_current_user),
    service: InvoiceService = Depends(get_invoice_service),
):
    return service.update_client_invoice_status(
        invoice_id, InvoiceStatus(data.status), current_user, data.expected_version
    )


# ============================================================================
# INTERPRETER INVOICES
# ============================================================================


@router.post("/interpreter-invoices", response_model=InterpreterInvoiceResponse, status_code=201)
async def create_interpreter_invoice(
    data: InterpreterInvoiceCreate,
    current_user: User = Depends(get_current_user),
    service: InvoiceService = Depends(get_invoice_service),
):
    """Submit an uploaded or self-billed invoice for approved timesheets"""
    return service.create_interpreter_invoice(data, current_user)


@router.get("/interpreter-invoices", response_model=list[InterpreterInvoiceResponse])
async def get_interpreter_invoices(
    status: Optional[InvoiceStatus] = Query(None),
    current_user: User = Depends(get_current_user),
    service: InvoiceService = Depends(get_invoice_service),
):
    return service.get_interpreter_invoices(current_user, status.value if status else None)


@router.get("/interpreter-invoices/{invoice_id}", response_model=InterpreterInvoiceDetail)
async def get_interpreter_invoice(
    invoice_id: str,
    current_user: User = Depends(get_current_user),
    service: InvoiceService = Depends(get_invoice_service),
):
    invoice, lines = service.get_interpreter_invoice(invoice_id, current_user)
    return InterpreterInvoiceDetail(
        **InterpreterInvoiceResponse.model_validate(invoice).model_dump(),
        lines=[InterpreterInvoiceLineResponse.model_validate(line) for line in lines],
    )


@router.patch(
    "/interpreter-invoices/{invoice_id}/status", response_model=InterpreterInvoiceResponse
)
async def update_interpreter_invoice_status(
    invoice_id: str,
    data: InterpreterInvoiceStatusUpdate,
    current_user: User = Depends(get_current_user),
    service: InvoiceService = Depends(get_invoice_service),
):
    return service.update_interpreter_invoice_status(
        invoice_id, InvoiceStatus(data.status), current_user
    )


# ============================================================================
# DASHBOARD
# ============================================================================


@router.get("/dashboard", response_model=BillingDashboardStats)
async def get_dashboard_stats(
    current_user: User = Depends(get_current_user),
    service: InvoiceService = Depends(get_invoice_service),
):
    """Outstanding invoices and timesheets awaiting approval"""
    return service.get_dashboard_stats(current_user)

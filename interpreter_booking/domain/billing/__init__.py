"""
Billing Domain

Timesheet pricing on approval, client invoice rollup and interpreter invoices.
"""

from .rate_router import router as rates_router
from .router import router
from .timesheet_router import router as timesheets_router

__all__ = ["router", "timesheets_router", "rates_router"]

"""
Pricing rules for approved timesheets.

Pure functions: no database access. Money is rounded half-up to pennies.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

TWO_PLACES = Decimal("0.01")


@dataclass(frozen=True)
class RateCard:
    amount_per_unit: float
    minimum_units: float


# Used when no rate row exists for the service type
CLIENT_FALLBACK_RATE = RateCard(amount_per_unit=40.0, minimum_units=1.0)
INTERPRETER_FALLBACK_RATE = RateCard(amount_per_unit=25.0, minimum_units=1.0)


@dataclass(frozen=True)
class TimesheetFigures:
    units_billable_to_client: float
    units_payable_to_interpreter: float
    client_amount_calculated: float
    interpreter_amount_calculated: float


def round_money(value: float) -> float:
    return float(Decimal(str(value)).quantize(TWO_PLACES, rounding=ROUND_HALF_UP))


def worked_hours(actual_start: datetime, actual_end: datetime, break_minutes: int = 0) -> float:
    """Elapsed hours less breaks, never negative"""
    elapsed = (actual_end - actual_start).total_seconds() / 3600
    return max(0.0, elapsed - (break_minutes or 0) / 60)


def billable_units(hours: float, rate: RateCard) -> float:
    # A zero minimum still bills one unit
    return max(hours, rate.minimum_units or 1.0)


def calculate_timesheet_figures(
    actual_start: datetime,
    actual_end: datetime,
    break_minutes: int,
    client_rate: Optional[RateCard],
    interpreter_rate: Optional[RateCard],
) -> TimesheetFigures:
    """Units and amounts for both sides; each side applies its own minimum"""
    client_rate = client_rate or CLIENT_FALLBACK_RATE
    interpreter_rate = interpreter_rate or INTERPRETER_FALLBACK_RATE

    hours = worked_hours(actual_start, actual_end, break_minutes)
    client_units = billable_units(hours, client_rate)
    interpreter_units = billable_units(hours, interpreter_rate)

    return TimesheetFigures(
        units_billable_to_client=round_money(client_units),
        units_payable_to_interpreter=round_money(interpreter_units),
        client_amount_calculated=round_money(client_units * client_rate.amount_per_unit),
        interpreter_amount_calculated=round_money(
            interpreter_units * interpreter_rate.amount_per_unit
        ),
    )


def line_rate(amount: float, units: float) -> float:
    """Effective unit price shown on an invoice line"""
    if not units:
        return 0.0
    return round_money(amount / units)

"""Timesheet router - submission and admin approval"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import User
from .schemas import TimesheetAction, TimesheetResponse, TimesheetSubmit
from .timesheet_service import TimesheetService

router = APIRouter(prefix="/timesheets", tags=["Timesheets"])


def get_timesheet_service(db: Session = Depends(get_db)) -> TimesheetService:
    """Dependency injection for TimesheetService"""
    return TimesheetService(db)


@router.post("", response_model=TimesheetResponse, status_code=201)
async def submit_timesheet(
    data: TimesheetSubmit,
    current_user: User = Depends(get_current_user),
    service: TimesheetService = Depends(get_timesheet_service),
):
    """Submit actual worked time for a booking"""
    return service.submit_timesheet(data, current_user)


@router.get("/pending", response_model=list[TimesheetResponse])
async def get_pending_timesheets(
    current_user: User = Depends(get_current_user),
    service: TimesheetService = Depends(get_timesheet_service),
):
    """Timesheets awaiting admin approval"""
    return service.get_pending_timesheets(current_user)


@router.get("/me", response_model=list[TimesheetResponse])
async def get_my_timesheets(
    current_user: User = Depends(get_current_user),
    service: TimesheetService = Depends(get_timesheet_service),
):
    return service.get_my_timesheets(current_user)


@router.get("/uninvoiced", response_model=list[TimesheetResponse])
async def get_uninvoiced_timesheets(
    interpreter_id: Optional[str] = Query(None),
    current_user: User = Depends(get_current_user),
    service: TimesheetService = Depends(get_timesheet_service),
):
    """Approved timesheets not yet on an interpreter invoice"""
    return service.get_uninvoiced_timesheets(current_user, interpreter_id)


@router.get("/{timesheet_id}", response_model=TimesheetResponse)
async def get_timesheet(
    timesheet_id: str,
    current_user: User = Depends(get_current_user),
    service: TimesheetService = Depends(get_timesheet_service),
):
    return service.get_timesheet(timesheet_id, current_user)


@router.post("/{timesheet_id}/approve", response_model=TimesheetResponse)
async def approve_timesheet(
    timesheet_id: str,
    data: Optional[TimesheetAction] = None,
    current_user: User = Depends(get_current_user),
    service: TimesheetService = Depends(get_timesheet_service),
):
    """Approve a timesheet; billing figures are calculated and frozen"""
    return service.approve_timesheet(
        timesheet_id, current_user, data.expected_version if data else None
    )


@router.post("/{timesheet_id}/reject", response_model=TimesheetResponse)
async def reject_timesheet(
    timesheet_id: str,
    data: Optional[TimesheetAction] = None,
    current_user: User = Depends(get_current_user),
    service: TimesheetService = Depends(get_timesheet_service),
):
    return service.reject_timesheet(
        timesheet_id, current_user, data.expected_version if data else None
    )

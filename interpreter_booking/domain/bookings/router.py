"""Booking router - FastAPI endpoints for bookings and interpreter offers"""

import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...errors import InvalidArgumentError
from ...models import AssignmentStatus, BookingStatus, User
from ...permissions import require_admin
from ...shared.validators import validate_time_hhmm
from .schemas import (
    AssignmentCreate,
    AssignmentResponse,
    BookingAction,
    BookingCreate,
    BookingResponse,
    ConfirmationResponse,
    DirectAssignRequest,
    GuestBookingCreate,
    LinkClientRequest,
    ScheduleConflictResponse,
)
from .service import BookingService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/bookings", tags=["Bookings"])
assignments_router = APIRouter(prefix="/assignments", tags=["Assignments"])


def get_booking_service(db: Session = Depends(get_db)) -> BookingService:
    """Dependency injection for BookingService"""
    return BookingService(db)


# ============================================================================
# BOOKINGS
# ============================================================================


@router.post("", response_model=BookingResponse, status_code=201)
async def create_booking(
    data: BookingCreate,
    current_user: User = Depends(get_current_user),
    service: BookingService = Depends(get_booking_service),
):
    """Request an interpreter"""
    return service.create_booking(data, current_user)


@router.post("/guest", response_model=BookingResponse, status_code=201)
async def create_guest_booking(
    data: GuestBookingCreate,
    service: BookingService = Depends(get_booking_service),
):
    """Public booking request (no account required)"""
    return service.create_guest_booking(data)


@router.get("", response_model=list[BookingResponse])
async def get_bookings(
    status: Optional[BookingStatus] = Query(None),
    current_user: User = Depends(get_current_user),
    service: BookingService = Depends(get_booking_service),
):
    """List bookings visible to the current user"""
    return service.get_bookings(current_user, status)


@router.get("/conflicts", response_model=ScheduleConflictResponse)
async def check_schedule_conflict(
    interpreter_id: str,
    on_date: date = Query(..., alias="date"),
    start_time: str = Query(...),
    duration_minutes: int = Query(..., gt=0),
    exclude_booking_id: Optional[str] = Query(None),
    _admin: User = Depends(require_admin),
    service: BookingService = Depends(get_booking_service),
):
    """Advisory double-booking check for an interpreter"""
    try:
        start_time = validate_time_hhmm(start_time)
    except ValueError as e:
        raise InvalidArgumentError(str(e)) from e

    conflict = service.check_schedule_conflict(
        interpreter_id, on_date, start_time, duration_minutes, exclude_booking_id
    )
    return ScheduleConflictResponse(
        has_conflict=conflict is not None,
        conflicting_booking=BookingResponse.model_validate(conflict) if conflict else None,
    )


@router.get("/{booking_id}", response_model=BookingResponse)
async def get_booking(
    booking_id: str,
    current_user: User = Depends(get_current_user),
    service: BookingService = Depends(get_booking_service),
):
    return service.get_booking(booking_id, current_user)


@router.post("/{booking_id}/link-client", response_model=BookingResponse)
async def link_client(
    booking_id: str,
    data: LinkClientRequest,
    current_user: User = Depends(get_current_user),
    service: BookingService = Depends(get_booking_service),
):
    """Attach a guest booking to a client record"""
    return service.link_client_to_booking(
        booking_id, data.client_id, current_user, data.expected_version
    )


@router.post("/{booking_id}/cancel", response_model=BookingResponse)
async def cancel_booking(
    booking_id: str,
    data: Optional[BookingAction] = None,
    current_user: User = Depends(get_current_user),
    service: BookingService = Depends(get_booking_service),
):
    """Cancel a booking that has not been confirmed"""
    return service.cancel_booking(
        booking_id, current_user, data.expected_version if data else None
    )


@router.post("/{booking_id}/complete", response_model=BookingResponse)
async def complete_booking(
    booking_id: str,
    data: Optional[BookingAction] = None,
    current_user: User = Depends(get_current_user),
    service: BookingService = Depends(get_booking_service),
):
    return service.complete_booking(
        booking_id, current_user, data.expected_version if data else None
    )


@router.post("/{booking_id}/assign", response_model=ConfirmationResponse)
async def assign_interpreter(
    booking_id: str,
    data: DirectAssignRequest,
    current_user: User = Depends(get_current_user),
    service: BookingService = Depends(get_booking_service),
):
    """Admin direct assignment, bypassing offers"""
    booking, conflict = service.assign_interpreter_to_booking(
        booking_id, data.interpreter_id, current_user, data.reason, data.expected_version
    )
    return ConfirmationResponse(
        booking=BookingResponse.model_validate(booking),
        conflict_booking_id=conflict.id if conflict else None,
    )


# ============================================================================
# OFFERS
# ============================================================================


@router.post("/{booking_id}/assignments", response_model=AssignmentResponse, status_code=201)
async def create_assignment(
    booking_id: str,
    data: AssignmentCreate,
    current_user: User = Depends(get_current_user),
    service: BookingService = Depends(get_booking_service),
):
    """Offer the booking to an interpreter"""
    return service.create_assignment(
        booking_id, data.interpreter_id, current_user, data.expected_version
    )


@router.get("/{booking_id}/assignments", response_model=list[AssignmentResponse])
async def get_booking_assignments(
    booking_id: str,
    current_user: User = Depends(get_current_user),
    service: BookingService = Depends(get_booking_service),
):
    return service.get_assignments_for_booking(booking_id, current_user)


@assignments_router.get("/me", response_model=list[AssignmentResponse])
async def get_my_assignments(
    status: Optional[AssignmentStatus] = Query(None),
    current_user: User = Depends(get_current_user),
    service: BookingService = Depends(get_booking_service),
):
    """Offers made to the current interpreter"""
    return service.get_my_assignments(current_user, status)


@assignments_router.post("/{assignment_id}/accept", response_model=ConfirmationResponse)
async def accept_offer(
    assignment_id: str,
    data: Optional[BookingAction] = None,
    current_user: User = Depends(get_current_user),
    service: BookingService = Depends(get_booking_service),
):
    """Accept an offer; the booking is confirmed to this interpreter"""
    assignment, booking, conflict = service.accept_offer(
        assignment_id, current_user, data.expected_version if data else None
    )
    return ConfirmationResponse(
        booking=BookingResponse.model_validate(booking),
        assignment=AssignmentResponse.model_validate(assignment),
        conflict_booking_id=conflict.id if conflict else None,
    )


@assignments_router.post("/{assignment_id}/decline", response_model=AssignmentResponse)
async def decline_offer(
    assignment_id: str,
    data: Optional[BookingAction] = None,
    current_user: User = Depends(get_current_user),
    service: BookingService = Depends(get_booking_service),
):
    """Decline an offer (interpreter) or retract it (admin)"""
    return service.decline_offer(
        assignment_id, current_user, data.expected_version if data else None
    )

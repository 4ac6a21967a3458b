"""Booking domain schemas - Pydantic models for validation"""

from datetime import date as DateType
from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, field_validator

from ...models import AssignmentStatus, BookingStatus, ServiceType
from ...shared.validators import validate_email, validate_time_hhmm, validate_uk_phone


class BookingCreate(BaseModel):
    """Schema for creating a new booking"""

    client_id: Optional[str] = None
    service_type: ServiceType
    language_from: str
    language_to: str
    date: DateType
    start_time: str
    duration_minutes: int
    location_type: Literal["ONLINE", "ONSITE"]
    address: Optional[str] = None
    postcode: Optional[str] = None
    online_link: Optional[str] = None
    cost_code: Optional[str] = None
    case_type: Optional[str] = None
    notes: Optional[str] = None
    gender_preference: Optional[Literal["Male", "Female", "None"]] = None

    @field_validator("start_time")
    @classmethod
    def validate_start_time(cls, v):
        return validate_time_hhmm(v)

    @field_validator("language_from", "language_to")
    @classmethod
    def validate_language(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("Language is required")
        return v


class GuestContact(BaseModel):
    name: str
    email: str
    phone: Optional[str] = None
    organisation: Optional[str] = None

    @field_validator("email")
    @classmethod
    def validate_guest_email(cls, v):
        return validate_email(v)

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v):
        if v:
            return validate_uk_phone(v)
        return v


class GuestBookingCreate(BookingCreate):
    """Public booking request with no client account"""

    guest_contact: GuestContact


class LinkClientRequest(BaseModel):
    client_id: str
    expected_version: Optional[int] = None


class BookingAction(BaseModel):
    """Body for status-changing booking actions"""

    expected_version: Optional[int] = None


class AssignmentCreate(BaseModel):
    interpreter_id: str
    expected_version: Optional[int] = None


class DirectAssignRequest(BaseModel):
    interpreter_id: str
    reason: Optional[str] = None
    expected_version: Optional[int] = None


class BookingResponse(BaseModel):
    """Schema for booking response"""

    id: str
    booking_ref: Optional[str] = None
    client_id: Optional[str] = None
    client_name: Optional[str] = None
    guest_contact: Optional[dict] = None
    service_type: str
    language_from: str
    language_to: str
    date: DateType
    start_time: str
    duration_minutes: int
    expected_end_time: Optional[str] = None
    location_type: str
    address: Optional[str] = None
    postcode: Optional[str] = None
    online_link: Optional[str] = None
    status: BookingStatus
    cost_code: Optional[str] = None
    case_type: Optional[str] = None
    notes: Optional[str] = None
    gender_preference: Optional[str] = None
    interpreter_id: Optional[str] = None
    interpreter_name: Optional[str] = None
    version: int
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class AssignmentResponse(BaseModel):
    id: str
    booking_id: str
    interpreter_id: str
    status: AssignmentStatus
    offered_at: datetime
    responded_at: Optional[datetime] = None
    booking_snapshot: Optional[dict] = None
    version: int

    class Config:
        from_attributes = True


class ConfirmationResponse(BaseModel):
    """Outcome of accepting an offer or assigning directly"""

    booking: BookingResponse
    assignment: Optional[AssignmentResponse] = None
    conflict_booking_id: Optional[str] = None


class ScheduleConflictResponse(BaseModel):
    has_conflict: bool
    conflicting_booking: Optional[BookingResponse] = None

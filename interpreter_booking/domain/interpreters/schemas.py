"""Interpreter domain schemas"""

from datetime import date, datetime
from typing import Literal, Optional

from pydantic import BaseModel, field_validator

from ...shared.validators import validate_email, validate_uk_phone

InterpreterStatus = Literal["ACTIVE", "ONBOARDING", "SUSPENDED"]


class InterpreterCreate(BaseModel):
    name: str
    email: str
    phone: Optional[str] = None
    languages: list[str] = []
    regions: list[str] = []
    qualifications: list[str] = []
    dbs_expiry: Optional[date] = None
    address_line1: Optional[str] = None
    address_line2: Optional[str] = None
    city: Optional[str] = None
    postcode: Optional[str] = None

    @field_validator("email")
    @classmethod
    def validate_interpreter_email(cls, v):
        return validate_email(v)

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v):
        if v:
            return validate_uk_phone(v)
        return v


class InterpreterProfileUpdate(BaseModel):
    """Fields an interpreter may change on their own profile"""

    phone: Optional[str] = None
    languages: Optional[list[str]] = None
    regions: Optional[list[str]] = None
    is_available: Optional[bool] = None
    address_line1: Optional[str] = None
    address_line2: Optional[str] = None
    city: Optional[str] = None
    postcode: Optional[str] = None
    unavailable_dates: Optional[list[date]] = None

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v):
        if v:
            return validate_uk_phone(v)
        return v


class InterpreterAdminUpdate(InterpreterProfileUpdate):
    """Admin-only fields on top of the self-service ones"""

    name: Optional[str] = None
    email: Optional[str] = None
    qualifications: Optional[list[str]] = None
    status: Optional[InterpreterStatus] = None
    dbs_expiry: Optional[date] = None

    @field_validator("email")
    @classmethod
    def validate_interpreter_email(cls, v):
        return validate_email(v)


class InterpreterResponse(BaseModel):
    id: str
    name: str
    email: str
    phone: Optional[str] = None
    languages: list[str]
    regions: list[str]
    qualifications: list[str]
    status: str
    is_available: bool
    dbs_expiry: Optional[date] = None
    address_line1: Optional[str] = None
    address_line2: Optional[str] = None
    city: Optional[str] = None
    postcode: Optional[str] = None
    unavailable_dates: list[date]
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

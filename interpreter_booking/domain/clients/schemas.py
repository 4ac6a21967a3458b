"""Client domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, field_validator

from ...shared.validators import validate_email

CostCodeType = Literal["PO", "ICS", "Cost Code"]


class ClientCreate(BaseModel):
    """Schema for creating a new client organisation"""

    company_name: str
    billing_address: Optional[str] = None
    payment_terms_days: int = 30
    contact_person: Optional[str] = None
    email: Optional[str] = None
    default_cost_code_type: Optional[CostCodeType] = None

    @field_validator("email")
    @classmethod
    def validate_client_email(cls, v):
        return validate_email(v)

    @field_validator("payment_terms_days")
    @classmethod
    def validate_payment_terms(cls, v):
        if v is not None and v < 0:
            raise ValueError("Payment terms cannot be negative")
        return v


class ClientUpdate(BaseModel):
    """Schema for updating an existing client"""

    company_name: Optional[str] = None
    billing_address: Optional[str] = None
    payment_terms_days: Optional[int] = None
    contact_person: Optional[str] = None
    email: Optional[str] = None
    default_cost_code_type: Optional[CostCodeType] = None

    @field_validator("email")
    @classmethod
    def validate_client_email(cls, v):
        return validate_email(v)

    @field_validator("payment_terms_days")
    @classmethod
    def validate_payment_terms(cls, v):
        if v is not None and v < 0:
            raise ValueError("Payment terms cannot be negative")
        return v


class ClientResponse(BaseModel):
    """Schema for client response"""

    id: str
    company_name: str
    billing_address: Optional[str] = None
    payment_terms_days: int
    contact_person: Optional[str] = None
    email: Optional[str] = None
    default_cost_code_type: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

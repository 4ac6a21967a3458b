"""User domain schemas"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, field_validator

from ...models import UserRole
from ...shared.validators import validate_email


class UserProvision(BaseModel):
    """Admin provisioning of a Firebase account into a role"""

    firebase_uid: str
    email: str
    display_name: Optional[str] = None
    role: UserRole
    profile_id: Optional[str] = None

    @field_validator("email")
    @classmethod
    def validate_user_email(cls, v):
        return validate_email(v)


class UserUpdate(BaseModel):
    role: Optional[UserRole] = None
    profile_id: Optional[str] = None
    status: Optional[Literal["ACTIVE", "SUSPENDED"]] = None
    display_name: Optional[str] = None


class UserResponse(BaseModel):
    id: str
    email: str
    display_name: Optional[str] = None
    role: UserRole
    profile_id: Optional[str] = None
    status: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

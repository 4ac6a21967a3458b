"""User router - current user and admin provisioning"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import User, UserRole
from .schemas import UserProvision, UserResponse, UserUpdate
from .service import UserService

router = APIRouter(prefix="/users", tags=["Users"])


def get_user_service(db: Session = Depends(get_db)) -> UserService:
    return UserService(db)


@router.get("/me", response_model=UserResponse)
async def get_me(current_user: User = Depends(get_current_user)):
    """Get the authenticated user with role and profile link"""
    return current_user


@router.get("", response_model=list[UserResponse])
async def get_users(
    role: Optional[UserRole] = Query(None),
    current_user: User = Depends(get_current_user),
    service: UserService = Depends(get_user_service),
):
    return service.get_users(current_user, role)


@router.post("", response_model=UserResponse, status_code=201)
async def provision_user(
    data: UserProvision,
    current_user: User = Depends(get_current_user),
    service: UserService = Depends(get_user_service),
):
    """Register a Firebase account in a role"""
    return service.provision_user(data, current_user)


@router.patch("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: str,
    data: UserUpdate,
    current_user: User = Depends(get_current_user),
    service: UserService = Depends(get_user_service),
):
    """Change role, profile link or suspend a user"""
    return service.update_user(user_id, data, current_user)

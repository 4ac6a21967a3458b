"""Interpreter router - roster endpoints"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import User
from .schemas import (
    InterpreterAdminUpdate,
    InterpreterCreate,
    InterpreterProfileUpdate,
    InterpreterResponse,
)
from .service import InterpreterService

router = APIRouter(prefix="/interpreters", tags=["Interpreters"])


def get_interpreter_service(db: Session = Depends(get_db)) -> InterpreterService:
    """Dependency injection for InterpreterService"""
    return InterpreterService(db)


@router.get("", response_model=list[InterpreterResponse])
async def get_interpreters(
    status: Optional[str] = Query(None),
    current_user: User = Depends(get_current_user),
    service: InterpreterService = Depends(get_interpreter_service),
):
    """List interpreters, optionally by status"""
    return service.get_interpreters(current_user, status)


@router.get("/search", response_model=list[InterpreterResponse])
async def search_interpreters(
    language: str = Query(..., min_length=1),
    current_user: User = Depends(get_current_user),
    service: InterpreterService = Depends(get_interpreter_service),
):
    """Find ACTIVE interpreters by language"""
    return service.search_by_language(language, current_user)


@router.get("/me", response_model=InterpreterResponse)
async def get_my_profile(
    current_user: User = Depends(get_current_user),
    service: InterpreterService = Depends(get_interpreter_service),
):
    return service.get_own_profile(current_user)


@router.patch("/me", response_model=InterpreterResponse)
async def update_my_profile(
    data: InterpreterProfileUpdate,
    current_user: User = Depends(get_current_user),
    service: InterpreterService = Depends(get_interpreter_service),
):
    """Update availability, languages and contact details"""
    return service.update_own_profile(data, current_user)


@router.get("/{interpreter_id}", response_model=InterpreterResponse)
async def get_interpreter(
    interpreter_id: str,
    current_user: User = Depends(get_current_user),
    service: InterpreterService = Depends(get_interpreter_service),
):
    return service.get_interpreter(interpreter_id, current_user)


@router.post("", response_model=InterpreterResponse, status_code=201)
async def create_interpreter(
    data: InterpreterCreate,
    current_user: User = Depends(get_current_user),
    service: InterpreterService = Depends(get_interpreter_service),
):
    """Add an interpreter to the roster"""
    return service.create_interpreter(data, current_user)


@router.patch("/{interpreter_id}", response_model=InterpreterResponse)
async def update_interpreter(
    interpreter_id: str,
    data: InterpreterAdminUpdate,
    current_user: User = Depends(get_current_user),
    service: InterpreterService = Depends(get_interpreter_service),
):
    return service.update_interpreter(interpreter_id, data, current_user)

"""Rate router - admin maintenance of unit prices"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import RateType, User
from .rate_service import RateService
from .schemas import RateCreate, RateResponse, RateUpdate

router = APIRouter(prefix="/rates", tags=["Rates"])


def get_rate_service(db: Session = Depends(get_db)) -> RateService:
    return RateService(db)


@router.get("", response_model=list[RateResponse])
async def get_rates(
    rate_type: Optional[RateType] = Query(None),
    current_user: User = Depends(get_current_user),
    service: RateService = Depends(get_rate_service),
):
    return service.get_rates(current_user, rate_type)


@router.post("", response_model=RateResponse, status_code=201)
async def create_rate(
    data: RateCreate,
    current_user: User = Depends(get_current_user),
    service: RateService = Depends(get_rate_service),
):
    """Add a rate for a service type"""
    return service.create_rate(data, current_user)


@router.patch("/{rate_id}", response_model=RateResponse)
async def update_rate(
    rate_id: str,
    data: RateUpdate,
    current_user: User = Depends(get_current_user),
    service: RateService = Depends(get_rate_service),
):
    return service.update_rate(rate_id, data, current_user)

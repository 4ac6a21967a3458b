"""Rate service - per service type unit prices for clients and interpreters"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from ...errors import NotFoundError
from ...models import Rate, RateType, User, UserRole
from ...permissions import ensure_role
from ...shared.transactions import transaction
from .repository import BillingRepository
from .schemas import RateCreate, RateUpdate

logger = logging.getLogger(__name__)


class RateService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = BillingRepository()

    def get_rates(self, actor: User, rate_type: Optional[RateType] = None) -> list[Rate]:
        ensure_role(actor, UserRole.ADMIN)
        return self.repo.get_rates(self.db, rate_type.value if rate_type else None)

    def create_rate(self, data: RateCreate, actor: User) -> Rate:
        ensure_role(actor, UserRole.ADMIN)
        rate = Rate(
            rate_type=data.rate_type.value,
            service_type=data.service_type.value,
            amount_per_unit=data.amount_per_unit,
            minimum_units=data.minimum_units,
        )
        with transaction(self.db):
            self.repo.add(self.db, rate)

        logger.info(
            f"✅ {rate.rate_type} rate for {rate.service_type}: "
            f"{rate.amount_per_unit}/unit, min {rate.minimum_units}"
        )
        return rate

    def update_rate(self, rate_id: str, data: RateUpdate, actor: User) -> Rate:
        """Change a rate; figures already frozen on approved timesheets are unaffected"""
        ensure_role(actor, UserRole.ADMIN)
        rate = self.repo.get_rate_by_id(self.db, rate_id)
        if not rate:
            raise NotFoundError("Rate not found")

        with transaction(self.db):
            for key, value in data.model_dump(exclude_unset=True).items():
                if value is not None:
                    setattr(rate, key, value)

        return rate

"""Interpreter service - roster management and language search"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from ...errors import NotFoundError, PermissionDeniedError
from ...models import Interpreter, User, UserRole
from ...permissions import ensure_role, has_role
from .repository import InterpreterRepository
from .schemas import InterpreterAdminUpdate, InterpreterCreate, InterpreterProfileUpdate

logger = logging.getLogger(__name__)


def _updates_from(data: InterpreterProfileUpdate) -> dict:
    updates = data.model_dump(exclude_unset=True)
    # JSON column stores ISO strings
    if updates.get("unavailable_dates") is not None:
        updates["unavailable_dates"] = [d.isoformat() for d in updates["unavailable_dates"]]
    return updates


class InterpreterService:
    """Service layer for interpreter business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = InterpreterRepository()

    def get_interpreters(self, user: User, status: Optional[str] = None) -> list[Interpreter]:
        ensure_role(user, UserRole.ADMIN)
        return self.repo.get_interpreters(self.db, status)

    def get_interpreter(self, interpreter_id: str, user: User) -> Interpreter:
        if has_role(user, UserRole.INTERPRETER):
            if user.profile_id != interpreter_id:
                raise PermissionDeniedError("Interpreters can only view their own profile")
        else:
            ensure_role(user, UserRole.ADMIN)

        interpreter = self.repo.get_interpreter_by_id(self.db, interpreter_id)
        if not interpreter:
            raise NotFoundError("Interpreter not found")
        return interpreter

    def get_own_profile(self, user: User) -> Interpreter:
        ensure_role(user, UserRole.INTERPRETER)
        if not user.profile_id:
            raise PermissionDeniedError("User is not linked to an interpreter profile")
        return self.get_interpreter(user.profile_id, user)

    def search_by_language(self, language: str, user: User) -> list[Interpreter]:
        """Find ACTIVE interpreters who speak the language"""
        ensure_role(user, UserRole.ADMIN)
        results = self.repo.find_by_language(self.db, language)
        logger.info(f"🔍 Language search '{language}' matched {len(results)} interpreters")
        return results

    def create_interpreter(self, data: InterpreterCreate, user: User) -> Interpreter:
        """Add an interpreter to the roster; new interpreters start ONBOARDING"""
        ensure_role(user, UserRole.ADMIN)
        interpreter = self.repo.create_interpreter(
            self.db, **data.model_dump(), status="ONBOARDING", unavailable_dates=[]
        )
        logger.info(f"✅ Interpreter created: {interpreter.id} ({interpreter.name})")
        return interpreter

    def update_interpreter(
        self, interpreter_id: str, data: InterpreterAdminUpdate, user: User
    ) -> Interpreter:
        ensure_role(user, UserRole.ADMIN)
        interpreter = self.repo.get_interpreter_by_id(self.db, interpreter_id)
        if not interpreter:
            raise NotFoundError("Interpreter not found")
        return self.repo.update_interpreter(self.db, interpreter, **_updates_from(data))

    def update_own_profile(self, data: InterpreterProfileUpdate, user: User) -> Interpreter:
        interpreter = self.get_own_profile(user)
        return self.repo.update_interpreter(self.db, interpreter, **_updates_from(data))

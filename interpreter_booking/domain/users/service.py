"""User service - provisioning and role management"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from ...errors import InvalidArgumentError, NotFoundError
from ...models import User, UserRole
from ...permissions import ensure_role
from ..clients.repository import ClientRepository
from ..interpreters.repository import InterpreterRepository
from .repository import UserRepository
from .schemas import UserProvision, UserUpdate

logger = logging.getLogger(__name__)


class UserService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = UserRepository()

    def _validate_profile_link(self, role: UserRole, profile_id: Optional[str]) -> None:
        """CLIENT and INTERPRETER users must point at an existing profile row"""
        if role == UserRole.CLIENT:
            if not profile_id or not ClientRepository.get_client_by_id(self.db, profile_id):
                raise InvalidArgumentError("CLIENT users must be linked to an existing client")
        elif role == UserRole.INTERPRETER:
            if not profile_id or not InterpreterRepository.get_interpreter_by_id(
                self.db, profile_id
            ):
                raise InvalidArgumentError(
                    "INTERPRETER users must be linked to an existing interpreter"
                )

    def get_users(self, actor: User, role: Optional[UserRole] = None) -> list[User]:
        ensure_role(actor, UserRole.ADMIN)
        return self.repo.get_users(self.db, role.value if role else None)

    def provision_user(self, data: UserProvision, actor: User) -> User:
        """Register a Firebase account with a role and profile link"""
        ensure_role(actor, UserRole.ADMIN)

        if self.repo.find_existing(self.db, data.firebase_uid, data.email):
            raise InvalidArgumentError("A user with this Firebase UID or email already exists")

        self._validate_profile_link(data.role, data.profile_id)

        user = self.repo.create_user(
            self.db,
            firebase_uid=data.firebase_uid,
            email=data.email,
            display_name=data.display_name,
            role=data.role.value,
            profile_id=data.profile_id if data.role != UserRole.ADMIN else None,
            status="ACTIVE",
        )
        logger.info(f"✅ Provisioned {user.role} user {user.email}")
        return user

    def update_user(self, user_id: str, data: UserUpdate, actor: User) -> User:
        ensure_role(actor, UserRole.ADMIN)
        user = self.repo.get_user_by_id(self.db, user_id)
        if not user:
            raise NotFoundError("User not found")

        role = data.role or UserRole(user.role)
        profile_id = data.profile_id if data.profile_id is not None else user.profile_id
        if data.role is not None or data.profile_id is not None:
            self._validate_profile_link(role, profile_id)

        updates = data.model_dump(exclude_unset=True)
        if data.role is not None:
            updates["role"] = data.role.value
        if data.status is not None and data.status != user.status:
            logger.info(f"📊 User {user.email} status: {user.status} → {data.status}")

        return self.repo.update_user(self.db, user, **updates)

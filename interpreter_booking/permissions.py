"""Role guards shared by routers and services"""

import logging

from fastapi import Depends, HTTPException, status

from .auth import get_current_user
from .errors import PermissionDeniedError
from .models import User, UserRole

logger = logging.getLogger(__name__)


def has_role(user: User, *roles: UserRole) -> bool:
    return user.role in {r.value for r in roles}


def ensure_role(user: User, *roles: UserRole) -> None:
    """Raise PermissionDeniedError unless the user holds one of the roles"""
    if not has_role(user, *roles):
        logger.warning(f"⚠️ User {user.id} ({user.role}) denied, requires {[r.value for r in roles]}")
        raise PermissionDeniedError("Access forbidden for this role")


def require_roles(*roles: UserRole):
    """FastAPI dependency factory: authenticated user holding one of the roles"""

    async def dependency(current_user: User = Depends(get_current_user)) -> User:
        if not has_role(current_user, *roles):
            logger.warning(
                f"⚠️ User {current_user.id} ({current_user.role}) denied, requires {[r.value for r in roles]}"
            )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Access forbidden for this role",
            )
        return current_user

    return dependency


require_admin = require_roles(UserRole.ADMIN)

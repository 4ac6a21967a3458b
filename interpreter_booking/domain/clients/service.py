"""Client service - Business logic for client organisations"""

import logging

from sqlalchemy.orm import Session

from ...errors import NotFoundError, PermissionDeniedError
from ...models import Client, User, UserRole
from ...permissions import ensure_role, has_role
from .repository import ClientRepository
from .schemas import ClientCreate, ClientUpdate

logger = logging.getLogger(__name__)


class ClientService:
    """Service layer for client business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = ClientRepository()

    def get_clients(self, user: User) -> list[Client]:
        """Get all clients (admin only)"""
        ensure_role(user, UserRole.ADMIN)
        return self.repo.get_clients(self.db)

    def get_client(self, client_id: str, user: User) -> Client:
        """Get a client; client users may only read their own record"""
        if has_role(user, UserRole.CLIENT):
            if not user.profile_id or user.profile_id != client_id:
                raise PermissionDeniedError("Clients can only view their own record")
        else:
            ensure_role(user, UserRole.ADMIN)

        client = self.repo.get_client_by_id(self.db, client_id)
        if not client:
            raise NotFoundError("Client not found")
        return client

    def get_own_client(self, user: User) -> Client:
        ensure_role(user, UserRole.CLIENT)
        if not user.profile_id:
            raise PermissionDeniedError("User is not linked to a client")
        return self.get_client(user.profile_id, user)

    def create_client(self, data: ClientCreate, user: User) -> Client:
        """Create a new client organisation"""
        ensure_role(user, UserRole.ADMIN)
        logger.info(f"📥 Creating client {data.company_name}")
        client = self.repo.create_client(self.db, **data.model_dump())
        logger.info(f"✅ Client created: {client.id}")
        return client

    def update_client(self, client_id: str, data: ClientUpdate, user: User) -> Client:
        """Update a client organisation"""
        ensure_role(user, UserRole.ADMIN)
        client = self.repo.get_client_by_id(self.db, client_id)
        if not client:
            raise NotFoundError("Client not found")
        return self.repo.update_client(self.db, client, **data.model_dump(exclude_unset=True))

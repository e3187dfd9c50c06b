"""
Client Service - admin view of client accounts.
"""

from __future__ import annotations

from sqlalchemy.orm import Session

from rest_api.models import User
from rest_api.repositories import OrderRepository, UserFilters, UserRepository
from rest_api.services.base_service import BaseService
from shared.config.constants import Roles
from shared.config.logging import get_logger
from shared.utils.exceptions import NotFoundError
from shared.utils.schemas import ClientOutput

logger = get_logger(__name__)


class ClientService(BaseService[User]):
    """Lists and (de)activates client accounts; admins are never returned."""

    def __init__(self, db: Session):
        super().__init__(db, User, UserRepository(db))
        self._orders = OrderRepository(db)

    def list_clients(
        self,
        *,
        search: str | None = None,
        is_active: bool | None = None,
        limit: int = 10,
        offset: int = 0,
    ) -> tuple[list[ClientOutput], int]:
        """A page of clients, newest first, with order counts and the total."""
        filters = UserFilters(
            role=Roles.CLIENT,
            is_active=is_active,
            search=search,
            limit=limit,
            offset=offset,
            include_deleted=True,
        )
        clients = self._repo.find_all(filters, order_by=[User.created_at.desc(), User.id.desc()])
        counts = self._orders.counts_by_user([c.id for c in clients])
        return (
            [self._with_count(c, counts) for c in clients],
            self._repo.count(filters),
        )

    def get_client(self, client_id: int) -> ClientOutput:
        client = self._get_entity(client_id)
        return self._with_count(client, self._orders.counts_by_user([client.id]))

    def set_active(self, client_id: int, is_active: bool, admin_id: int) -> ClientOutput:
        client = self._get_entity(client_id)
        client.is_active = is_active
        client.set_updated_by(admin_id)
        self._commit("actualizar estado del cliente", client)

        logger.info("Client status changed", client_id=client.id, is_active=is_active, user_id=admin_id)
        return self._with_count(client, self._orders.counts_by_user([client.id]))

    def _get_entity(self, client_id: int) -> User:
        client = self._repo.find_by_id(client_id, include_deleted=True)
        if client is None or client.role != Roles.CLIENT:
            raise NotFoundError("Cliente", client_id)
        return client

    @staticmethod
    def _with_count(client: User, counts: dict[int, int]) -> ClientOutput:
        output = ClientOutput.model_validate(client)
        output.order_count = counts.get(client.id, 0)
        return output

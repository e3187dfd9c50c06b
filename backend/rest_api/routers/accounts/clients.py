"""
Client administration router - /clients/*
CLEAN-ARCH: Thin router delegating to ClientService.
"""

from typing import Literal

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from rest_api.models import User
from rest_api.routers._common import Pagination, get_pagination_small, ok, require_admin
from rest_api.services.domain import ClientService
from shared.infrastructure.db import get_db
from shared.utils.schemas import ClientStatusRequest


router = APIRouter(prefix="/clients", tags=["clients"])


@router.get("")
def list_clients(
    search: str | None = Query(default=None, max_length=100),
    status: Literal["active", "inactive"] | None = None,
    pagination: Pagination = Depends(get_pagination_small),
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
) -> dict:
    """Clients with their order counts, newest first."""
    is_active = None if status is None else status == "active"
    clients, total = ClientService(db).list_clients(
        search=search,
        is_active=is_active,
        limit=pagination.limit,
        offset=pagination.offset,
    )
    return ok(clients, count=len(clients), pagination=pagination.to_dict(total))


@router.get("/{client_id}")
def get_client(
    client_id: int,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
) -> dict:
    return ok(ClientService(db).get_client(client_id))


@router.put("/{client_id}/status")
def set_client_status(
    client_id: int,
    body: ClientStatusRequest,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
) -> dict:
    client = ClientService(db).set_active(client_id, body.is_active, admin.id)
    action = "activado" if client.is_active else "desactivado"
    return ok(client, message=f"Cliente {action} exitosamente")

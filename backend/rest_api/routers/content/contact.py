"""
Contact router - /api/contact/*

Anyone can send a message; reading and triaging them is for administrators.
"""

from fastapi import APIRouter, Depends, Request, status
from slowapi.util import get_remote_address
from sqlalchemy.orm import Session

from rest_api.models import User
from rest_api.routers._common import Pagination, get_pagination_large, ok, require_admin
from rest_api.services.domain import ContactService
from shared.infrastructure.db import get_db
from shared.utils.content_schemas import ContactCreate, ContactStatusUpdate


router = APIRouter(prefix="/api/contact", tags=["contact"])


@router.post("", status_code=status.HTTP_201_CREATED)
def submit_message(
    request: Request,
    body: ContactCreate,
    db: Session = Depends(get_db),
) -> dict:
    message = ContactService(db).submit(
        body,
        ip_address=get_remote_address(request),
        user_agent=request.headers.get("user-agent"),
    )
    return ok(
        {"id": message.id},
        message="Mensaje enviado exitosamente. Nos pondremos en contacto contigo pronto.",
    )


@router.get("/stats")
def contact_stats(
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
) -> dict:
    return ok(ContactService(db).stats())


@router.get("")
def list_messages(
    status: str | None = None,
    pagination: Pagination = Depends(get_pagination_large),
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
) -> dict:
    messages, total, unread = ContactService(db).list_messages(
        status=status,
        limit=pagination.limit,
        offset=pagination.offset,
    )
    return ok(messages, pagination=pagination.to_dict(total), unread_count=unread)


@router.get("/{message_id}")
def get_message(
    message_id: int,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
) -> dict:
    """Message detail; opening a new message marks it as read."""
    return ok(ContactService(db).open_message(message_id))


@router.patch("/{message_id}/status")
def update_message_status(
    message_id: int,
    body: ContactStatusUpdate,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
) -> dict:
    message = ContactService(db).update_status(message_id, body, admin.id)
    return ok(message, message="Estado actualizado exitosamente")


@router.delete("/{message_id}")
def delete_message(
    message_id: int,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
) -> dict:
    ContactService(db).delete(message_id, admin.id)
    return ok(message="Mensaje eliminado exitosamente")

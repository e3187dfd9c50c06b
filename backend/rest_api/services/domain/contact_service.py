"""
Contact Service - messages from the public contact form.

Usage:
    from rest_api.services.domain import ContactService

    service = ContactService(db)
    message = service.submit(body, ip_address=ip, user_agent=agent)
"""

from __future__ import annotations

from datetime import timedelta
from typing import Any

from sqlalchemy.orm import Session

from rest_api.models import ContactMessage, utcnow
from rest_api.repositories import ContactFilters, ContactMessageRepository
from rest_api.services.base_service import BaseCRUDService
from shared.config.constants import ContactStatus
from shared.config.logging import get_logger
from shared.utils.content_schemas import ContactCreate, ContactOutput, ContactStatusUpdate

logger = get_logger(__name__)

RECENT_DAYS = 7


class ContactService(BaseCRUDService[ContactMessage, ContactOutput]):
    """
    Service for contact messages.

    Business rules:
    - Opening a new message marks it as read
    - Moving a message to "responded" stamps who answered and when
    - Deleting a message removes it
    """

    def __init__(self, db: Session):
        super().__init__(
            db=db,
            model=ContactMessage,
            output_schema=ContactOutput,
            entity_name="Mensaje",
            repository=ContactMessageRepository(db),
            supports_soft_delete=False,
        )

    @property
    def messages(self) -> ContactMessageRepository:
        return self._repo

    def submit(
        self,
        body: ContactCreate,
        *,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> ContactOutput:
        message = ContactMessage(
            name=body.name,
            email=body.email,
            company=body.company.strip() if body.company else None,
            message=body.message,
            ip_address=ip_address,
            user_agent=(user_agent or "")[:512] or None,
        )
        self._db.add(message)
        self._commit("enviar mensaje", message)

        logger.info("Contact message received", message_id=message.id)
        return self.to_output(message)

    def list_messages(
        self,
        *,
        status: str | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> tuple[list[ContactOutput], int, int]:
        """A page of messages (newest first), the matching total and the unread count."""
        filters = ContactFilters(status=status, limit=limit, offset=offset)
        messages = self.list_all(
            filters,
            order_by=[ContactMessage.created_at.desc(), ContactMessage.id.desc()],
        )
        unread = self.messages.count(ContactFilters(status=ContactStatus.NEW))
        return messages, self.messages.count(filters), unread

    def open_message(self, message_id: int) -> ContactOutput:
        message = self.get_entity(message_id)
        if message.status == ContactStatus.NEW:
            message.status = ContactStatus.READ
            self._commit("marcar mensaje como leído", message)
        return self.to_output(message)

    def update_status(self, message_id: int, body: ContactStatusUpdate, admin_id: int) -> ContactOutput:
        message = self.get_entity(message_id)
        message.status = body.status
        if body.admin_notes and body.admin_notes.strip():
            message.admin_notes = body.admin_notes.strip()
        if body.status == ContactStatus.RESPONDED:
            message.responded_at = utcnow()
            message.responded_by = admin_id
        message.set_updated_by(admin_id)
        self._commit("actualizar estado del mensaje", message)

        logger.info("Contact message status updated", message_id=message.id, status=message.status, user_id=admin_id)
        return self.to_output(message)

    def stats(self) -> dict[str, Any]:
        by_status = self.messages.count_by_status()
        return {
            "totalMessages": sum(by_status.values()),
            "messagesByStatus": {status: by_status.get(status, 0) for status in ContactStatus.ALL},
            "recentMessages": {
                "count": self.messages.count_since(utcnow() - timedelta(days=RECENT_DAYS)),
                "period": f"Últimos {RECENT_DAYS} días",
            },
        }

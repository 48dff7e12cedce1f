"""Turns registration events into per-user notifications."""

from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from workshop_hub.events_engine.schemas import EventEnvelope, WorkshopEventType
from workshop_hub.models.notification import Notification, NotificationType

LOGGER = logging.getLogger("workshop_hub.events_engine.consumers.notifications")

_MESSAGES = {
    WorkshopEventType.REGISTERED.value: (NotificationType.REGISTRATION, "Successfully registered for {title}"),
    WorkshopEventType.CANCELLED.value: (NotificationType.CANCELLATION, "Registration cancelled for {title}"),
}


class NotificationConsumer:
    """Stores a notification for the user named in a registration event."""

    def handle(self, session: Session, envelope: EventEnvelope) -> None:
        template = _MESSAGES.get(envelope.event_type)
        if template is None:
            return
        user_id = envelope.payload.get("user_id")
        if not user_id:
            LOGGER.warning("notification_skipped_missing_user", extra={"event_id": str(envelope.event_id)})
            return

        notification_type, message = template
        title = envelope.payload.get("title") or f"workshop {envelope.workshop_id}"
        session.add(
            Notification(
                user_id=str(user_id),
                workshop_id=envelope.workshop_id,
                type=notification_type,
                message=message.format(title=title),
            )
        )

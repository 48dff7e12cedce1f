"""User notification inbox."""

from __future__ import annotations

import logging
from typing import List

from sqlalchemy import select
from sqlalchemy.orm import Session

from workshop_hub.models.notification import Notification
from workshop_hub.services.store import WorkshopServiceError


class NotificationNotFoundError(WorkshopServiceError):
    code = "not_found"


class NotificationService:
    def __init__(self, session: Session) -> None:
        self._session = session
        self._logger = logging.getLogger("workshop_hub.services.notifications")

    def list_for_user(self, user_id: str, *, unread_only: bool = False) -> List[Notification]:
        stmt = select(Notification).where(Notification.user_id == user_id)
        if unread_only:
            stmt = stmt.where(Notification.read.is_(False))
        stmt = stmt.order_by(Notification.created_at.desc(), Notification.id.desc())
        return list(self._session.scalars(stmt))

    def mark_read(self, notification_id: int) -> Notification:
        notification = self._session.get(Notification, notification_id)
        if notification is None:
            raise NotificationNotFoundError(f"Notification {notification_id} not found")
        if not notification.read:
            notification.read = True
            self._session.flush()
            self._logger.info(
                "notification_marked_read",
                extra={"notification_id": notification_id, "user_id": notification.user_id},
            )
        return notification

"""Notification state endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from workshop_hub.api.dependencies import get_notification_service
from workshop_hub.schemas.notification import NotificationResponse
from workshop_hub.services.notifications import NotificationService

router = APIRouter()


@router.patch("/{notification_id}/read", response_model=NotificationResponse)
def mark_notification_read(
    notification_id: int,
    service: NotificationService = Depends(get_notification_service),
) -> NotificationResponse:
    return NotificationResponse.model_validate(service.mark_read(notification_id), from_attributes=True)

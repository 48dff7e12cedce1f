"""Per-user views: registered workshops and notifications."""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, Query

from workshop_hub.api.dependencies import get_notification_service, get_registration_service
from workshop_hub.schemas.notification import NotificationResponse
from workshop_hub.schemas.registration import UserWorkshopResponse
from workshop_hub.schemas.workshop import WorkshopResponse
from workshop_hub.services.notifications import NotificationService
from workshop_hub.services.registrations import RegistrationService

router = APIRouter()


@router.get("/{user_id}/workshops", response_model=List[UserWorkshopResponse])
def list_user_workshops(
    user_id: str,
    service: RegistrationService = Depends(get_registration_service),
) -> List[UserWorkshopResponse]:
    return [
        UserWorkshopResponse(
            **WorkshopResponse.from_model(workshop).model_dump(),
            registration_id=registration.id,
            registered_at=registration.registered_at,
            registration_status=registration.status,
        )
        for registration, workshop in service.list_for_user(user_id)
    ]


@router.get("/{user_id}/notifications", response_model=List[NotificationResponse])
def list_user_notifications(
    user_id: str,
    unread_only: bool = Query(default=False),
    service: NotificationService = Depends(get_notification_service),
) -> List[NotificationResponse]:
    notifications = service.list_for_user(user_id, unread_only=unread_only)
    return [NotificationResponse.model_validate(item, from_attributes=True) for item in notifications]

"""Pydantic schemas for API payloads."""

from workshop_hub.schemas.event import EventResponse
from workshop_hub.schemas.notification import NotificationResponse
from workshop_hub.schemas.registration import (
    CancellationResult,
    RegistrationRequest,
    RegistrationResponse,
    RegistrationResult,
    UserWorkshopResponse,
)
from workshop_hub.schemas.review import ReviewCreate, ReviewResponse
from workshop_hub.schemas.workshop import (
    WorkshopCreate,
    WorkshopPage,
    WorkshopResponse,
    WorkshopStats,
)

__all__ = [
    "CancellationResult",
    "EventResponse",
    "NotificationResponse",
    "RegistrationRequest",
    "RegistrationResponse",
    "RegistrationResult",
    "ReviewCreate",
    "ReviewResponse",
    "UserWorkshopResponse",
    "WorkshopCreate",
    "WorkshopPage",
    "WorkshopResponse",
    "WorkshopStats",
]

"""Dependency injection helpers for FastAPI routes."""

from __future__ import annotations

from fastapi import Depends
from sqlalchemy.orm import Session

from workshop_hub.core.database import get_session
from workshop_hub.events_engine import get_event_dispatcher
from workshop_hub.events_engine.broadcast import BroadcastHub, get_broadcast_hub
from workshop_hub.events_engine.service import EventService
from workshop_hub.services.analytics import get_analytics_counter
from workshop_hub.services.notifications import NotificationService
from workshop_hub.services.registrations import RegistrationService
from workshop_hub.services.reviews import ReviewService
from workshop_hub.services.workshops import WorkshopService


def get_db_session() -> Session:
    yield from get_session()


def get_workshop_service(session: Session = Depends(get_db_session)) -> WorkshopService:
    return WorkshopService(session, analytics=get_analytics_counter())


def get_registration_service(session: Session = Depends(get_db_session)) -> RegistrationService:
    return RegistrationService(session, event_dispatcher=get_event_dispatcher())


def get_notification_service(session: Session = Depends(get_db_session)) -> NotificationService:
    return NotificationService(session)


def get_review_service(session: Session = Depends(get_db_session)) -> ReviewService:
    return ReviewService(session)


def get_event_service(session: Session = Depends(get_db_session)) -> EventService:
    return EventService(session)


def get_hub() -> BroadcastHub:
    return get_broadcast_hub()

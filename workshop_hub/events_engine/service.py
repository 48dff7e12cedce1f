"""Read access to the event log."""

from __future__ import annotations

from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from workshop_hub.models.platform_event import PlatformEvent
from workshop_hub.services.store import WorkshopServiceError


class EventNotFoundError(WorkshopServiceError):
    """Raised when a requested event does not exist."""

    code = "not_found"


class EventService:
    """Queries recorded platform events."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def list_events(
        self,
        *,
        event_type: Optional[str] = None,
        workshop_id: Optional[int] = None,
        limit: int = 50,
    ) -> List[PlatformEvent]:
        stmt = select(PlatformEvent)
        if event_type:
            stmt = stmt.where(PlatformEvent.event_type == event_type)
        if workshop_id is not None:
            stmt = stmt.where(PlatformEvent.workshop_id == workshop_id)
        stmt = stmt.order_by(PlatformEvent.occurred_at.desc()).limit(limit)
        return list(self._session.scalars(stmt))

    def get_event(self, event_id: str) -> PlatformEvent:
        record = self._session.scalar(select(PlatformEvent).where(PlatformEvent.event_id == event_id))
        if record is None:
            raise EventNotFoundError(f"Event {event_id} not found")
        return record

"""Event log query endpoints."""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from workshop_hub.api.dependencies import get_event_service
from workshop_hub.events_engine.service import EventService
from workshop_hub.schemas.event import EventResponse

router = APIRouter()


@router.get("", response_model=List[EventResponse])
def list_events(
    event_type: Optional[str] = Query(default=None, max_length=128),
    workshop_id: Optional[int] = Query(default=None),
    limit: int = Query(default=50, ge=1, le=200),
    service: EventService = Depends(get_event_service),
) -> List[EventResponse]:
    records = service.list_events(event_type=event_type, workshop_id=workshop_id, limit=limit)
    return [EventResponse.model_validate(record, from_attributes=True) for record in records]


@router.get("/{event_id}", response_model=EventResponse)
def get_event(
    event_id: str,
    service: EventService = Depends(get_event_service),
) -> EventResponse:
    return EventResponse.model_validate(service.get_event(event_id), from_attributes=True)

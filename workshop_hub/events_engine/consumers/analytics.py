"""Feeds lifecycle and registration events into the analytics counters."""

from __future__ import annotations

from sqlalchemy.orm import Session

from workshop_hub.events_engine.schemas import EventEnvelope, WorkshopEventType
from workshop_hub.services.analytics import AnalyticsCounter

_COUNTERS = {
    WorkshopEventType.REGISTERED.value: "registrations",
    WorkshopEventType.CANCELLED.value: "cancellations",
    WorkshopEventType.COMPLETED.value: "completions",
}


class AnalyticsConsumer:
    def __init__(self, counter: AnalyticsCounter) -> None:
        self._counter = counter

    def handle(self, session: Session, envelope: EventEnvelope) -> None:
        name = _COUNTERS.get(envelope.event_type)
        if name is not None:
            self._counter.increment(name)

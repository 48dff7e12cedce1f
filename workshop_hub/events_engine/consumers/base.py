"""Contract for in-process event consumers."""

from __future__ import annotations

from typing import Protocol

from sqlalchemy.orm import Session

from workshop_hub.events_engine.schemas import EventEnvelope


class EventConsumer(Protocol):
    """Handler invoked synchronously for every dispatched event.

    In-transaction consumers share the emitter's session, so anything they
    add commits (or rolls back) together with the change that produced the
    event. Post-commit consumers get a fresh session after that commit.
    """

    def handle(self, session: Session, envelope: EventEnvelope) -> None:
        ...

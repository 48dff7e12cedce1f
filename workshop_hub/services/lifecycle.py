"""Time-driven workshop lifecycle: upcoming -> live -> completed."""

from __future__ import annotations

import logging
from contextlib import AbstractContextManager
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, List, Optional

from sqlalchemy.orm import Session

from workshop_hub.core.database import session_scope
from workshop_hub.events_engine import EventDispatcher, WorkshopEventType, get_event_dispatcher
from workshop_hub.models.types import as_utc
from workshop_hub.models.workshop import Workshop, WorkshopStatus
from workshop_hub.services.store import WorkshopLockRegistry, WorkshopStore, get_lock_registry

SessionFactory = Callable[[], AbstractContextManager[Session]]

_EVENT_FOR_STATUS = {
    WorkshopStatus.LIVE: (WorkshopEventType.WENT_LIVE, "workshop_went_live"),
    WorkshopStatus.COMPLETED: (WorkshopEventType.COMPLETED, "workshop_completed"),
}


def derive_status(scheduled_start: datetime, duration_minutes: int, now: datetime) -> WorkshopStatus:
    """Status implied by the clock alone. The live window includes both ends."""

    start = as_utc(scheduled_start)
    end = start + timedelta(minutes=duration_minutes)
    now = as_utc(now)
    if now < start:
        return WorkshopStatus.UPCOMING
    if now <= end:
        return WorkshopStatus.LIVE
    return WorkshopStatus.COMPLETED


def next_status(workshop: Workshop, now: datetime) -> Optional[WorkshopStatus]:
    """One forward step for ``workshop`` at ``now``, or None if it stays put."""

    if workshop.status == WorkshopStatus.UPCOMING:
        # A missed live window still passes through live on the way to completed.
        if as_utc(now) >= as_utc(workshop.scheduled_start):
            return WorkshopStatus.LIVE
        return None
    if workshop.status == WorkshopStatus.LIVE:
        if as_utc(now) > as_utc(workshop.scheduled_end):
            return WorkshopStatus.COMPLETED
        return None
    return None


@dataclass(frozen=True)
class LifecycleTransition:
    workshop_id: int
    previous: WorkshopStatus
    current: WorkshopStatus
    at: datetime


class LifecycleEvaluator:
    """Sweeps unfinished workshops and advances their status.

    Each workshop is evaluated under its own lock and transaction, so a
    registration racing with a transition always sees one or the other.
    """

    def __init__(
        self,
        *,
        session_factory: SessionFactory = session_scope,
        locks: Optional[WorkshopLockRegistry] = None,
        event_dispatcher: Optional[EventDispatcher] = None,
    ) -> None:
        self._session_factory = session_factory
        self._locks = locks or get_lock_registry()
        self._dispatcher = event_dispatcher
        self._logger = logging.getLogger("workshop_hub.services.lifecycle")

    @property
    def _events(self) -> EventDispatcher:
        return self._dispatcher or get_event_dispatcher()

    def tick(self, now: Optional[datetime] = None) -> List[LifecycleTransition]:
        """Apply every transition due at ``now`` and return them in order."""

        now = as_utc(now or datetime.now(timezone.utc))
        with self._session_factory() as session:
            candidates = WorkshopStore(session, self._locks).ids_with_status(
                [WorkshopStatus.UPCOMING, WorkshopStatus.LIVE]
            )

        transitions: List[LifecycleTransition] = []
        for workshop_id in candidates:
            try:
                transitions.extend(self._evaluate(workshop_id, now))
            except Exception:  # noqa: BLE001 - one bad record must not stop the sweep
                self._logger.exception("lifecycle_evaluation_failed", extra={"workshop_id": workshop_id})

        if transitions:
            self._logger.info(
                "lifecycle_tick_applied",
                extra={"transitions": len(transitions), "evaluated": len(candidates)},
            )
        return transitions

    def _evaluate(self, workshop_id: int, now: datetime) -> List[LifecycleTransition]:
        applied: List[LifecycleTransition] = []
        with self._locks.hold(workshop_id), self._session_factory() as session:
            store = WorkshopStore(session, self._locks)
            workshop = store.find(workshop_id)
            if workshop is None:
                return applied

            target = next_status(workshop, now)
            while target is not None:
                previous = workshop.status
                if not store.transition(workshop, target):
                    break
                transition = LifecycleTransition(workshop_id=workshop_id, previous=previous, current=target, at=now)
                applied.append(transition)
                self._emit(session, workshop, transition)
                target = next_status(workshop, now)
        return applied

    def _emit(self, session: Session, workshop: Workshop, transition: LifecycleTransition) -> None:
        event_type, log_message = _EVENT_FOR_STATUS[transition.current]
        self._logger.info(
            log_message,
            extra={"workshop_id": workshop.id, "previous_status": transition.previous.value},
        )
        try:
            self._events.publish_event(
                session,
                event_type=event_type.value,
                workshop_id=workshop.id,
                occurred_at=transition.at,
                payload={
                    "workshop_id": workshop.id,
                    "title": workshop.title,
                    "status": transition.current.value,
                    "previous_status": transition.previous.value,
                    "scheduled_start": workshop.scheduled_start.isoformat(),
                    "scheduled_end": workshop.scheduled_end.isoformat(),
                },
            )
        except Exception:  # noqa: BLE001
            self._logger.exception(
                "lifecycle_event_failed",
                extra={"workshop_id": workshop.id, "event_type": event_type.value},
            )

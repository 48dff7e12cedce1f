"""Encapsulated workshop store with per-workshop mutual exclusion.

Every mutation of a workshop (seat counters, lifecycle status) happens while
holding that workshop's lock from the shared :class:`WorkshopLockRegistry`
and is expressed as a conditional ``UPDATE`` so the check and the write are a
single statement.
"""

from __future__ import annotations

from contextlib import contextmanager
from threading import Lock, RLock
from typing import Dict, Iterable, Iterator, List, Optional

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from workshop_hub.models.base import utcnow
from workshop_hub.models.workshop import Workshop, WorkshopStatus


class WorkshopServiceError(Exception):
    """Base class for domain errors returned to callers."""

    code = "error"


class WorkshopNotFoundError(WorkshopServiceError):
    """Raised when the target workshop does not exist."""

    code = "not_found"


class WorkshopLockRegistry:
    """Lazily created re-entrant lock per workshop id."""

    def __init__(self) -> None:
        self._locks: Dict[int, RLock] = {}
        self._guard = Lock()

    def lock_for(self, workshop_id: int) -> RLock:
        with self._guard:
            lock = self._locks.get(workshop_id)
            if lock is None:
                lock = self._locks[workshop_id] = RLock()
            return lock

    @contextmanager
    def hold(self, workshop_id: int) -> Iterator[None]:
        with self.lock_for(workshop_id):
            yield


class WorkshopStore:
    """Single source of truth for workshop status and capacity."""

    def __init__(self, session: Session, locks: Optional[WorkshopLockRegistry] = None) -> None:
        self._session = session
        self._locks = locks or get_lock_registry()

    @property
    def session(self) -> Session:
        return self._session

    def locked(self, workshop_id: int):
        """Context manager serializing all writers of ``workshop_id``."""

        return self._locks.hold(workshop_id)

    def add(self, workshop: Workshop) -> Workshop:
        self._session.add(workshop)
        self._session.flush()
        return workshop

    def find(self, workshop_id: int) -> Optional[Workshop]:
        return self._session.get(Workshop, workshop_id, populate_existing=True)

    def get(self, workshop_id: int) -> Workshop:
        workshop = self.find(workshop_id)
        if workshop is None:
            raise WorkshopNotFoundError(f"Workshop {workshop_id} not found")
        return workshop

    def list(self, *, statuses: Optional[Iterable[WorkshopStatus]] = None) -> List[Workshop]:
        stmt = select(Workshop)
        if statuses is not None:
            stmt = stmt.where(Workshop.status.in_(list(statuses)))
        return list(self._session.scalars(stmt.order_by(Workshop.scheduled_start, Workshop.id)))

    def ids_with_status(self, statuses: Iterable[WorkshopStatus]) -> List[int]:
        stmt = select(Workshop.id).where(Workshop.status.in_(list(statuses))).order_by(Workshop.scheduled_start)
        return list(self._session.scalars(stmt))

    def claim_seat(self, workshop: Workshop) -> bool:
        """Take one seat on a workshop that is open and not full. Returns False otherwise."""

        result = self._session.execute(
            update(Workshop)
            .where(
                Workshop.id == workshop.id,
                Workshop.status != WorkshopStatus.COMPLETED,
                Workshop.seats_filled < Workshop.seats_total,
            )
            .values(seats_filled=Workshop.seats_filled + 1, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        self._session.refresh(workshop)
        return result.rowcount == 1

    def release_seat(self, workshop: Workshop) -> bool:
        """Give back one seat; the counter never drops below zero."""

        result = self._session.execute(
            update(Workshop)
            .where(Workshop.id == workshop.id, Workshop.seats_filled > 0)
            .values(seats_filled=Workshop.seats_filled - 1, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        self._session.refresh(workshop)
        return result.rowcount == 1

    def transition(self, workshop: Workshop, target: WorkshopStatus) -> bool:
        """Move ``workshop`` from its current status to ``target`` if nobody else did."""

        expected = workshop.status
        result = self._session.execute(
            update(Workshop)
            .where(Workshop.id == workshop.id, Workshop.status == expected)
            .values(status=target, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        self._session.refresh(workshop)
        return result.rowcount == 1


_lock_registry: Optional[WorkshopLockRegistry] = None
_registry_guard = Lock()


def get_lock_registry() -> WorkshopLockRegistry:
    """Return the process-wide lock registry shared by all writers."""

    global _lock_registry
    with _registry_guard:
        if _lock_registry is None:
            _lock_registry = WorkshopLockRegistry()
        return _lock_registry

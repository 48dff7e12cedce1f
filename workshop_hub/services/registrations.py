"""Capacity-gated workshop registration and cancellation."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from workshop_hub.events_engine import EventDispatcher, WorkshopEventType, get_event_dispatcher
from workshop_hub.models.registration import Registration, RegistrationStatus
from workshop_hub.models.workshop import Workshop, WorkshopStatus
from workshop_hub.services.store import WorkshopServiceError, WorkshopStore


class WorkshopStateError(WorkshopServiceError):
    """Raised when acting on a workshop that has already completed."""

    code = "invalid_state"


class WorkshopFullError(WorkshopServiceError):
    """Raised when every seat is taken."""

    code = "full"


class DuplicateRegistrationError(WorkshopServiceError):
    """Raised when the user already holds a registration for the workshop."""

    code = "duplicate"


class RegistrationNotFoundError(WorkshopServiceError):
    """Raised when cancelling a registration that does not exist."""

    code = "not_found"


@dataclass
class RegistrationOutcome:
    workshop: Workshop
    registration: Registration


class RegistrationService:
    """Applies register/cancel requests against a workshop's seats.

    Both operations hold the workshop lock from the first read until the
    transaction commits.
    """

    def __init__(
        self,
        session: Session,
        store: Optional[WorkshopStore] = None,
        event_dispatcher: Optional[EventDispatcher] = None,
    ) -> None:
        self._session = session
        self._store = store or WorkshopStore(session)
        self._events = event_dispatcher or get_event_dispatcher()
        self._logger = logging.getLogger("workshop_hub.services.registrations")

    def register(
        self,
        workshop_id: int,
        user_id: str,
        *,
        user_email: Optional[str] = None,
        user_name: Optional[str] = None,
    ) -> RegistrationOutcome:
        with self._store.locked(workshop_id):
            try:
                outcome = self._register_locked(workshop_id, user_id, user_email=user_email, user_name=user_name)
                self._session.commit()
            except Exception:
                self._session.rollback()
                raise

        self._logger.info(
            "registration_confirmed",
            extra={
                "workshop_id": workshop_id,
                "user_id": user_id,
                "seats_filled": outcome.workshop.seats_filled,
                "seats_total": outcome.workshop.seats_total,
            },
        )
        return outcome

    def cancel(self, workshop_id: int, user_id: str) -> Workshop:
        with self._store.locked(workshop_id):
            try:
                workshop = self._cancel_locked(workshop_id, user_id)
                self._session.commit()
            except Exception:
                self._session.rollback()
                raise

        self._logger.info(
            "registration_cancelled",
            extra={"workshop_id": workshop_id, "user_id": user_id, "seats_filled": workshop.seats_filled},
        )
        return workshop

    def find(self, workshop_id: int, user_id: str) -> Optional[Registration]:
        return self._session.scalar(
            select(Registration).where(
                Registration.workshop_id == workshop_id,
                Registration.user_id == user_id,
            )
        )

    def list_for_user(self, user_id: str) -> List[Tuple[Registration, Workshop]]:
        """Registrations of ``user_id`` with their workshops, most recent first."""

        stmt = (
            select(Registration, Workshop)
            .join(Workshop, Workshop.id == Registration.workshop_id)
            .where(Registration.user_id == user_id)
            .order_by(Registration.registered_at.desc(), Registration.id.desc())
        )
        return [(registration, workshop) for registration, workshop in self._session.execute(stmt)]

    def _register_locked(
        self,
        workshop_id: int,
        user_id: str,
        *,
        user_email: Optional[str],
        user_name: Optional[str],
    ) -> RegistrationOutcome:
        workshop = self._store.get(workshop_id)
        if workshop.status == WorkshopStatus.COMPLETED:
            raise WorkshopStateError(f"Cannot register for completed workshop {workshop_id}")
        if self.find(workshop_id, user_id) is not None:
            raise DuplicateRegistrationError(f"User {user_id} is already registered for workshop {workshop_id}")
        if workshop.is_full:
            raise WorkshopFullError(f"Workshop {workshop_id} is full")

        if not self._store.claim_seat(workshop):
            # claim_seat refreshed the row; another writer got there first.
            if workshop.status == WorkshopStatus.COMPLETED:
                raise WorkshopStateError(f"Cannot register for completed workshop {workshop_id}")
            raise WorkshopFullError(f"Workshop {workshop_id} is full")

        registration = Registration(
            user_id=user_id,
            workshop_id=workshop_id,
            user_email=user_email,
            user_name=user_name,
            status=RegistrationStatus.CONFIRMED,
        )
        self._session.add(registration)
        try:
            self._session.flush()
        except IntegrityError as exc:
            raise DuplicateRegistrationError(
                f"User {user_id} is already registered for workshop {workshop_id}"
            ) from exc

        self._emit(
            WorkshopEventType.REGISTERED,
            workshop,
            {"registration_id": registration.id, "user_id": user_id},
        )
        return RegistrationOutcome(workshop=workshop, registration=registration)

    def _cancel_locked(self, workshop_id: int, user_id: str) -> Workshop:
        registration = self.find(workshop_id, user_id)
        if registration is None:
            raise RegistrationNotFoundError(f"No registration for user {user_id} on workshop {workshop_id}")

        workshop = self._store.get(workshop_id)
        self._session.delete(registration)
        self._store.release_seat(workshop)
        self._session.flush()

        self._emit(
            WorkshopEventType.CANCELLED,
            workshop,
            {"registration_id": registration.id, "user_id": user_id},
        )
        return workshop

    def _emit(self, event_type: WorkshopEventType, workshop: Workshop, details: dict) -> None:
        try:
            self._events.publish_event(
                self._session,
                event_type=event_type.value,
                workshop_id=workshop.id,
                payload={
                    "workshop_id": workshop.id,
                    "title": workshop.title,
                    "seats_filled": workshop.seats_filled,
                    "seats_total": workshop.seats_total,
                    **details,
                },
            )
        except Exception:  # noqa: BLE001
            self._logger.exception(
                "registration_event_failed",
                extra={"workshop_id": workshop.id, "event_type": event_type.value},
            )

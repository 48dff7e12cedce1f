from __future__ import annotations

import random
import threading
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import func, select, update

from workshop_hub.core.database import session_scope
from workshop_hub.models.notification import Notification
from workshop_hub.models.registration import Registration
from workshop_hub.models.workshop import Workshop, WorkshopStatus
from workshop_hub.services.lifecycle import LifecycleEvaluator
from workshop_hub.services.registrations import (
    DuplicateRegistrationError,
    RegistrationNotFoundError,
    RegistrationService,
    WorkshopFullError,
    WorkshopStateError,
)
from workshop_hub.services.store import WorkshopNotFoundError, WorkshopStore


def _register(workshop_id: int, user_id: str):
    with session_scope() as session:
        return RegistrationService(session).register(workshop_id, user_id)


def _cancel(workshop_id: int, user_id: str):
    with session_scope() as session:
        return RegistrationService(session).cancel(workshop_id, user_id)


def _registration_count(workshop_id: int) -> int:
    with session_scope() as session:
        return session.scalar(
            select(func.count()).select_from(Registration).where(Registration.workshop_id == workshop_id)
        )


def test_register_claims_a_seat(make_workshop, load_workshop, stub_publisher, analytics) -> None:
    workshop_id = make_workshop(total=3)

    outcome = _register(workshop_id, "user-1")

    assert outcome.workshop.seats_filled == 1
    assert outcome.registration.user_id == "user-1"
    assert load_workshop(workshop_id).seats_filled == 1
    assert stub_publisher.event_types() == ["workshop.registered"]
    assert stub_publisher.envelopes[0].payload["user_id"] == "user-1"
    assert analytics.snapshot()["registrations"] == 1


def test_register_on_live_workshop_is_allowed(make_workshop) -> None:
    workshop_id = make_workshop(start=datetime.now(timezone.utc) - timedelta(minutes=5), status=WorkshopStatus.LIVE)

    assert _register(workshop_id, "late-joiner").workshop.seats_filled == 1


def test_register_full_workshop_leaves_capacity_unchanged(make_workshop, load_workshop, stub_publisher) -> None:
    workshop_id = make_workshop(total=2, filled=2)

    with pytest.raises(WorkshopFullError):
        _register(workshop_id, "user-1")

    assert load_workshop(workshop_id).seats_filled == 2
    assert _registration_count(workshop_id) == 0
    assert stub_publisher.envelopes == []


def test_register_twice_is_rejected(make_workshop, load_workshop) -> None:
    workshop_id = make_workshop(total=5)
    _register(workshop_id, "user-1")

    with pytest.raises(DuplicateRegistrationError):
        _register(workshop_id, "user-1")

    assert load_workshop(workshop_id).seats_filled == 1


def test_same_user_on_last_seat_is_duplicate_not_full(make_workshop, load_workshop) -> None:
    workshop_id = make_workshop(total=1)
    _register(workshop_id, "user-1")

    with pytest.raises(DuplicateRegistrationError):
        _register(workshop_id, "user-1")

    with pytest.raises(WorkshopFullError):
        _register(workshop_id, "user-2")
    assert load_workshop(workshop_id).seats_filled == 1


def test_register_completed_workshop_is_rejected(make_workshop, load_workshop) -> None:
    workshop_id = make_workshop(
        start=datetime.now(timezone.utc) - timedelta(days=1),
        status=WorkshopStatus.COMPLETED,
    )

    with pytest.raises(WorkshopStateError):
        _register(workshop_id, "user-1")

    assert load_workshop(workshop_id).seats_filled == 0


def test_completed_check_wins_over_full(make_workshop) -> None:
    workshop_id = make_workshop(total=1, filled=1, status=WorkshopStatus.COMPLETED)

    with pytest.raises(WorkshopStateError):
        _register(workshop_id, "user-1")


def test_register_unknown_workshop() -> None:
    with pytest.raises(WorkshopNotFoundError):
        _register(404, "user-1")


def test_cancel_releases_seat_and_allows_reregistering(make_workshop, load_workshop, stub_publisher) -> None:
    workshop_id = make_workshop(total=1)
    _register(workshop_id, "user-1")

    workshop = _cancel(workshop_id, "user-1")

    assert workshop.seats_filled == 0
    assert _registration_count(workshop_id) == 0
    assert stub_publisher.event_types() == ["workshop.registered", "workshop.cancelled"]

    _register(workshop_id, "user-1")
    assert load_workshop(workshop_id).seats_filled == 1


def test_cancel_missing_registration_keeps_capacity(make_workshop, load_workshop) -> None:
    workshop_id = make_workshop(total=4, filled=3)

    with pytest.raises(RegistrationNotFoundError):
        _cancel(workshop_id, "nobody")

    assert load_workshop(workshop_id).seats_filled == 3


def test_cancel_never_drops_below_zero(make_workshop, load_workshop) -> None:
    workshop_id = make_workshop(total=2, filled=0)
    with session_scope() as session:
        session.add(Registration(user_id="ghost", workshop_id=workshop_id))

    workshop = _cancel(workshop_id, "ghost")

    assert workshop.seats_filled == 0
    assert load_workshop(workshop_id).seats_filled == 0
    assert _registration_count(workshop_id) == 0


def test_registration_events_create_notifications(make_workshop) -> None:
    workshop_id = make_workshop(title="Rust for Pythonistas")
    _register(workshop_id, "user-7")
    _cancel(workshop_id, "user-7")

    with session_scope() as session:
        messages = list(
            session.scalars(select(Notification.message).where(Notification.user_id == "user-7").order_by(Notification.id))
        )
    assert messages == [
        "Successfully registered for Rust for Pythonistas",
        "Registration cancelled for Rust for Pythonistas",
    ]


def test_failed_registration_leaves_no_notification(make_workshop) -> None:
    workshop_id = make_workshop(total=1, filled=1)

    with pytest.raises(WorkshopFullError):
        _register(workshop_id, "user-1")

    with session_scope() as session:
        assert session.scalar(select(func.count()).select_from(Notification)) == 0


def test_list_for_user_returns_registered_workshops(make_workshop) -> None:
    first = make_workshop(title="First")
    second = make_workshop(title="Second")
    make_workshop(title="Unrelated")
    _register(first, "user-1")
    _register(second, "user-1")

    with session_scope() as session:
        titles = {workshop.title for _, workshop in RegistrationService(session).list_for_user("user-1")}
    assert titles == {"First", "Second"}


def test_concurrent_registrations_never_overbook(file_database, make_workshop, load_workshop) -> None:
    workshop_id = make_workshop(total=5)

    def attempt(index: int) -> str:
        try:
            _register(workshop_id, f"user-{index}")
        except WorkshopFullError:
            return "full"
        return "ok"

    with ThreadPoolExecutor(max_workers=8) as pool:
        results = list(pool.map(attempt, range(20)))

    assert results.count("ok") == 5
    assert results.count("full") == 15
    assert load_workshop(workshop_id).seats_filled == 5
    assert _registration_count(workshop_id) == 5


def test_interleaved_operations_keep_counter_consistent(make_workshop, load_workshop) -> None:
    rng = random.Random(1234)
    workshop_ids = [make_workshop(total=3) for _ in range(3)]
    users = [f"user-{index}" for index in range(6)]

    for _ in range(200):
        workshop_id = rng.choice(workshop_ids)
        user_id = rng.choice(users)
        try:
            if rng.random() < 0.6:
                _register(workshop_id, user_id)
            else:
                _cancel(workshop_id, user_id)
        except (WorkshopFullError, DuplicateRegistrationError, RegistrationNotFoundError):
            pass

        workshop = load_workshop(workshop_id)
        assert 0 <= workshop.seats_filled <= workshop.seats_total
        assert workshop.seats_filled == _registration_count(workshop_id)


class _CompletedBehindOurBackStore(WorkshopStore):
    """Marks the row completed right after it is read, as a separate evaluator process would."""

    def get(self, workshop_id: int) -> Workshop:
        workshop = super().get(workshop_id)
        self.session.execute(
            update(Workshop)
            .where(Workshop.id == workshop_id)
            .values(status=WorkshopStatus.COMPLETED)
            .execution_options(synchronize_session=False)
        )
        return workshop


def test_claim_seat_refuses_completed_workshop(make_workshop, load_workshop) -> None:
    workshop_id = make_workshop(total=3, status=WorkshopStatus.COMPLETED)

    with session_scope() as session:
        store = WorkshopStore(session)
        assert store.claim_seat(store.get(workshop_id)) is False

    assert load_workshop(workshop_id).seats_filled == 0


def test_registration_rejected_when_completed_after_checks(make_workshop, load_workshop) -> None:
    workshop_id = make_workshop(total=3, status=WorkshopStatus.LIVE)

    with pytest.raises(WorkshopStateError):
        with session_scope() as session:
            RegistrationService(session, store=_CompletedBehindOurBackStore(session)).register(workshop_id, "user-1")

    workshop = load_workshop(workshop_id)
    assert workshop.seats_filled == 0
    assert workshop.status == WorkshopStatus.LIVE
    assert _registration_count(workshop_id) == 0


def test_registration_racing_completion_is_all_or_nothing(
    file_database, make_workshop, load_workshop, stub_publisher
) -> None:
    now = datetime.now(timezone.utc)
    workshop_id = make_workshop(
        start=now - timedelta(minutes=31),
        duration_minutes=30,
        total=10,
        status=WorkshopStatus.LIVE,
    )
    start_line = threading.Barrier(9)

    def attempt(index: int) -> str:
        start_line.wait()
        try:
            _register(workshop_id, f"user-{index}")
        except WorkshopStateError:
            return "rejected"
        return "ok"

    def complete() -> str:
        start_line.wait()
        LifecycleEvaluator().tick(now)
        return "ticked"

    with ThreadPoolExecutor(max_workers=9) as pool:
        futures = [pool.submit(attempt, index) for index in range(8)] + [pool.submit(complete)]
        results = [future.result() for future in futures]

    confirmed = results.count("ok")
    assert confirmed + results.count("rejected") == 8
    workshop = load_workshop(workshop_id)
    assert workshop.status == WorkshopStatus.COMPLETED
    assert workshop.seats_filled == confirmed == _registration_count(workshop_id)

    event_types = [e.event_type for e in stub_publisher.envelopes if e.workshop_id == workshop_id]
    assert event_types.count("workshop.completed") == 1
    assert event_types.index("workshop.completed") == confirmed

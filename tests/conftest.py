import os
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine

os.environ.setdefault("WSH_ENVIRONMENT", "test")
os.environ.setdefault("WSH_DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("WSH_LIFECYCLE_ENABLED", "false")
os.environ.setdefault("WSH_SEED_DEMO_DATA", "false")
os.environ.setdefault("WSH_LOG_JSON", "false")
os.environ.setdefault("WSH_REDIS_URL", "")
os.environ.setdefault("WSH_REDIS_TOKEN", "")
os.environ.setdefault("WSH_EVENT_TOPIC_ARN", "")

PROJECT_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(PROJECT_ROOT))

from workshop_hub.core.config import get_settings

get_settings.cache_clear()

from workshop_hub.core.database import SessionLocal, engine, session_scope  # noqa: E402
from workshop_hub.events_engine.broadcast import BroadcastEventPublisher, BroadcastHub, set_broadcast_hub  # noqa: E402
from workshop_hub.events_engine.consumers import AnalyticsConsumer, NotificationConsumer  # noqa: E402
from workshop_hub.events_engine.dispatcher import EventDispatcher, set_event_dispatcher  # noqa: E402
from workshop_hub.events_engine.publisher import FanoutEventPublisher  # noqa: E402
from workshop_hub.main import create_app  # noqa: E402
from workshop_hub.models import Base  # noqa: E402
from workshop_hub.models.workshop import Workshop, WorkshopStatus  # noqa: E402
from workshop_hub.services import store as store_module  # noqa: E402
from workshop_hub.services.analytics import InMemoryAnalyticsCounter, set_analytics_counter  # noqa: E402


class StubPublisher:
    def __init__(self) -> None:
        self.envelopes = []

    def publish(self, envelope):
        self.envelopes.append(envelope)

    def event_types(self):
        return [envelope.event_type for envelope in self.envelopes]


@pytest.fixture(autouse=True)
def reset_database():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    store_module._lock_registry = store_module.WorkshopLockRegistry()
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def file_database(tmp_path):
    """Bind sessions to a file-backed SQLite database so each thread gets its own connection."""

    file_engine = create_engine(
        f"sqlite:///{tmp_path / 'workshops.db'}",
        future=True,
        connect_args={"check_same_thread": False, "timeout": 30},
    )
    Base.metadata.create_all(bind=file_engine)
    SessionLocal.configure(bind=file_engine)
    yield file_engine
    SessionLocal.configure(bind=engine)
    file_engine.dispose()


@pytest.fixture()
def analytics() -> InMemoryAnalyticsCounter:
    return InMemoryAnalyticsCounter()


@pytest.fixture()
def hub() -> BroadcastHub:
    return BroadcastHub(queue_size=10)


@pytest.fixture()
def stub_publisher() -> StubPublisher:
    return StubPublisher()


@pytest.fixture(autouse=True)
def event_dispatcher(analytics, hub, stub_publisher):
    set_analytics_counter(analytics)
    set_broadcast_hub(hub)
    dispatcher = EventDispatcher(
        publisher=FanoutEventPublisher([BroadcastEventPublisher(hub), stub_publisher]),
        default_source="workshop_hub",
        max_attempts=2,
        consumers=[NotificationConsumer()],
        post_commit_consumers=[AnalyticsConsumer(analytics)],
    )
    set_event_dispatcher(dispatcher)
    yield dispatcher
    set_event_dispatcher(None)
    set_broadcast_hub(None)
    set_analytics_counter(None)


@pytest.fixture()
def client() -> TestClient:  # noqa: ANN001
    app = create_app()
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture()
def make_workshop():
    """Insert a workshop directly, bypassing status derivation."""

    def _make(
        *,
        start: datetime | None = None,
        duration_minutes: int = 60,
        total: int = 10,
        filled: int = 0,
        status: WorkshopStatus = WorkshopStatus.UPCOMING,
        title: str = "Test Workshop",
        **extra,
    ) -> int:
        with session_scope() as session:
            workshop = Workshop(
                title=title,
                scheduled_start=start or datetime.now(timezone.utc) + timedelta(days=1),
                duration_minutes=duration_minutes,
                seats_total=total,
                seats_filled=filled,
                status=status,
                **extra,
            )
            session.add(workshop)
            session.flush()
            return workshop.id

    return _make


@pytest.fixture()
def load_workshop():
    def _load(workshop_id: int) -> Workshop:
        with session_scope() as session:
            return session.get(Workshop, workshop_id)

    return _load

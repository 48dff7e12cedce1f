"""Event dispatcher that records, consumes, and publishes workshop events."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Dict, List, Optional, Sequence, Tuple

from sqlalchemy import event, update
from sqlalchemy.orm import Session
from sqlalchemy.orm.attributes import set_committed_value

from workshop_hub.events_engine.broadcast import BroadcastEventPublisher, get_broadcast_hub
from workshop_hub.events_engine.config import get_event_engine_config
from workshop_hub.events_engine.consumers import AnalyticsConsumer, EventConsumer, NotificationConsumer
from workshop_hub.events_engine.publisher import (
    EventPublisher,
    FanoutEventPublisher,
    SnsEventPublisher,
)
from workshop_hub.events_engine.schemas import EventEnvelope
from workshop_hub.models.platform_event import DeliveryState, PlatformEvent

_dispatcher: Optional["EventDispatcher"] = None

_PENDING_KEY = "workshop_hub.pending_events"

LOGGER = logging.getLogger("workshop_hub.events_engine.dispatcher")


class EventDispatcher:
    """Coordinates persistence, consumption, and delivery of events.

    The event row and anything ``consumers`` add share the caller's
    transaction. Publishing and ``post_commit_consumers`` run only once that
    transaction commits and are dropped if it rolls back. Failures there are
    logged and recorded on the event row, never raised.
    """

    def __init__(
        self,
        *,
        publisher: EventPublisher,
        default_source: str,
        max_attempts: int = 1,
        consumers: Sequence[EventConsumer] = (),
        post_commit_consumers: Sequence[EventConsumer] = (),
    ) -> None:
        self._publisher = publisher
        self._default_source = default_source
        self._max_attempts = max(max_attempts, 1)
        self._consumers = list(consumers)
        self._post_commit_consumers = list(post_commit_consumers)

    def publish_event(
        self,
        session: Session,
        *,
        event_type: str,
        payload: Dict[str, object],
        workshop_id: Optional[int] = None,
        source: Optional[str] = None,
        occurred_at: Optional[datetime] = None,
        schema_version: str = "v1",
        metadata: Optional[Dict[str, object]] = None,
    ) -> PlatformEvent:
        """Persist an event record, run consumers, and queue it for delivery on commit."""

        envelope = EventEnvelope(
            event_type=event_type,
            payload=payload,
            workshop_id=workshop_id,
            source=source or self._default_source,
            occurred_at=occurred_at or datetime.now(timezone.utc),
            schema_version=schema_version,
            metadata=metadata or {},
        )

        record = PlatformEvent(
            event_id=str(envelope.event_id),
            event_type=envelope.event_type,
            source=envelope.source,
            workshop_id=envelope.workshop_id,
            occurred_at=envelope.occurred_at,
            schema_version=envelope.schema_version,
            payload=envelope.model_dump(mode="json")["payload"],
            context=envelope.metadata,
        )
        session.add(record)
        self._run_consumers(self._consumers, session, envelope)
        session.flush()

        _pending(session).append((self, record, envelope))
        return record

    def deliver_committed(self, session: Session, record: PlatformEvent, envelope: EventEnvelope) -> None:
        """Publish an event whose transaction committed and store the delivery outcome."""

        with Session(bind=session.get_bind(), expire_on_commit=False) as status_session:
            self._run_consumers(self._post_commit_consumers, status_session, envelope)
            state, attempts, last_error = self._deliver(envelope)
            status_session.execute(
                update(PlatformEvent)
                .where(PlatformEvent.id == record.id)
                .values(delivery_state=state, delivery_attempts=attempts, last_error=last_error)
                .execution_options(synchronize_session=False)
            )
            status_session.commit()

        set_committed_value(record, "delivery_state", state)
        set_committed_value(record, "delivery_attempts", attempts)
        set_committed_value(record, "last_error", last_error)

    def _run_consumers(self, consumers: Sequence[EventConsumer], session: Session, envelope: EventEnvelope) -> None:
        for consumer in consumers:
            try:
                consumer.handle(session, envelope)
            except Exception:  # noqa: BLE001
                LOGGER.exception(
                    "events_engine_consumer_failed",
                    extra={"event_id": str(envelope.event_id), "consumer": type(consumer).__name__},
                )

    def _deliver(self, envelope: EventEnvelope) -> Tuple[DeliveryState, int, Optional[str]]:
        last_error: Optional[str] = None
        attempts = 0
        while attempts < self._max_attempts:
            attempts += 1
            try:
                self._publisher.publish(envelope)
            except Exception as exc:  # noqa: BLE001
                last_error = str(exc)[:1024]
                LOGGER.warning(
                    "events_engine_publish_attempt_failed",
                    extra={"event_id": str(envelope.event_id), "attempt": attempts, "error": str(exc)},
                )
                continue
            LOGGER.info(
                "events_engine_published",
                extra={
                    "event_id": str(envelope.event_id),
                    "event_type": envelope.event_type,
                    "workshop_id": envelope.workshop_id,
                },
            )
            return DeliveryState.SUCCEEDED, attempts, None

        LOGGER.error(
            "events_engine_publish_failed",
            extra={"event_id": str(envelope.event_id), "event_type": envelope.event_type, "attempts": attempts},
        )
        return DeliveryState.FAILED, attempts, last_error


def build_event_dispatcher() -> EventDispatcher:
    """Assemble the dispatcher from settings: broadcast hub, optional SNS, consumers."""

    from workshop_hub.services.analytics import get_analytics_counter

    config = get_event_engine_config()
    publishers: list[EventPublisher] = [BroadcastEventPublisher(get_broadcast_hub())]
    if config.topic_arn:
        publishers.append(SnsEventPublisher(topic_arn=config.topic_arn, region_name=config.region_name))

    return EventDispatcher(
        publisher=FanoutEventPublisher(publishers),
        default_source=config.source,
        max_attempts=config.max_attempts,
        consumers=[NotificationConsumer()],
        post_commit_consumers=[AnalyticsConsumer(get_analytics_counter())],
    )


def get_event_dispatcher() -> EventDispatcher:
    """Return the singleton event dispatcher for the application."""

    global _dispatcher
    if _dispatcher is None:
        _dispatcher = build_event_dispatcher()
    return _dispatcher


def set_event_dispatcher(dispatcher: Optional[EventDispatcher]) -> None:
    """Override the cached dispatcher (primarily for tests)."""

    global _dispatcher
    _dispatcher = dispatcher


def _pending(session: Session) -> List[Tuple[EventDispatcher, PlatformEvent, EventEnvelope]]:
    pending = session.info.get(_PENDING_KEY)
    if pending is None:
        pending = session.info[_PENDING_KEY] = []
        event.listen(session, "after_commit", _deliver_pending)
        event.listen(session, "after_rollback", _discard_pending)
    return pending


def _deliver_pending(session: Session) -> None:
    # Runs inside Session.commit(); nothing may propagate from here.
    pending = session.info.get(_PENDING_KEY) or []
    batch = list(pending)
    pending.clear()
    for dispatcher, record, envelope in batch:
        try:
            dispatcher.deliver_committed(session, record, envelope)
        except Exception:  # noqa: BLE001
            LOGGER.exception("events_engine_delivery_crashed", extra={"event_id": str(envelope.event_id)})


def _discard_pending(session: Session) -> None:
    pending = session.info.get(_PENDING_KEY) or []
    if pending:
        LOGGER.info("events_engine_discarded_on_rollback", extra={"count": len(pending)})
        pending.clear()

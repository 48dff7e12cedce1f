"""Publishers responsible for delivering events to external transports."""

from __future__ import annotations

import json
import logging
from typing import Protocol, Sequence

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from workshop_hub.events_engine.schemas import EventEnvelope

LOGGER = logging.getLogger("workshop_hub.events_engine.publisher")


class EventPublisher(Protocol):
    """Transport abstraction for event delivery."""

    def publish(self, envelope: EventEnvelope) -> None:
        ...


class NullEventPublisher(EventPublisher):
    """No-op publisher used when no transport is configured."""

    def publish(self, envelope: EventEnvelope) -> None:  # noqa: D401
        LOGGER.debug(
            "events_engine_publish_skipped",
            extra={"event_id": str(envelope.event_id), "event_type": envelope.event_type},
        )


class SnsEventPublisher(EventPublisher):
    """Publishes events to an AWS SNS topic."""

    def __init__(self, *, topic_arn: str, region_name: str) -> None:
        self._topic_arn = topic_arn
        self._client = boto3.client("sns", region_name=region_name)

    def publish(self, envelope: EventEnvelope) -> None:
        message = json.dumps(envelope.model_dump(mode="json"))
        attributes = {"event_type": {"DataType": "String", "StringValue": envelope.event_type}}
        if envelope.workshop_id is not None:
            attributes["workshop_id"] = {"DataType": "Number", "StringValue": str(envelope.workshop_id)}
        try:
            self._client.publish(TopicArn=self._topic_arn, Message=message, MessageAttributes=attributes)
        except (BotoCoreError, ClientError):
            LOGGER.exception(
                "events_engine_publish_failed",
                extra={
                    "event_id": str(envelope.event_id),
                    "event_type": envelope.event_type,
                    "topic_arn": self._topic_arn,
                },
            )
            raise


class FanoutEventPublisher(EventPublisher):
    """Delivers each envelope to every wrapped publisher.

    Every publisher is attempted; the first failure is re-raised afterwards so
    the dispatcher can record it.
    """

    def __init__(self, publishers: Sequence[EventPublisher]) -> None:
        self._publishers = list(publishers)

    def publish(self, envelope: EventEnvelope) -> None:
        first_error: Exception | None = None
        for publisher in self._publishers:
            try:
                publisher.publish(envelope)
            except Exception as exc:  # noqa: BLE001
                LOGGER.warning(
                    "events_engine_fanout_target_failed",
                    extra={
                        "event_id": str(envelope.event_id),
                        "publisher": type(publisher).__name__,
                        "error": str(exc),
                    },
                )
                if first_error is None:
                    first_error = exc
        if first_error is not None:
            raise first_error

"""Configuration helpers for the events engine."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from workshop_hub.core.config import AppSettings, get_settings


@dataclass
class EventEngineConfig:
    """Resolved configuration values for the events engine."""

    topic_arn: Optional[str]
    region_name: str
    source: str
    max_attempts: int


def get_event_engine_config(settings: Optional[AppSettings] = None) -> EventEngineConfig:
    """Materialize events engine configuration from application settings."""

    settings = settings or get_settings()
    region = os.getenv("AWS_REGION") or os.getenv("AWS_DEFAULT_REGION") or "us-east-1"
    return EventEngineConfig(
        topic_arn=settings.event_topic_arn,
        region_name=region,
        source=settings.event_source,
        max_attempts=settings.event_publish_attempts,
    )

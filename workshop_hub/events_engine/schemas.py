"""Pydantic models describing normalized events."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field, field_validator


class WorkshopEventType(str, Enum):
    """Event types emitted by the lifecycle evaluator and registration service."""

    WENT_LIVE = "workshop.went_live"
    COMPLETED = "workshop.completed"
    REGISTERED = "workshop.registered"
    CANCELLED = "workshop.cancelled"


class EventEnvelope(BaseModel):
    """Canonical event payload handed to consumers and publishers."""

    event_id: UUID = Field(default_factory=uuid4)
    event_type: str = Field(..., min_length=3, max_length=128)
    source: str = Field(..., min_length=3, max_length=128)
    workshop_id: Optional[int] = None
    occurred_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="UTC timestamp for when the originating action occurred.",
    )
    schema_version: str = Field(default="v1", max_length=16)
    payload: Dict[str, Any] = Field(default_factory=dict)
    metadata: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("occurred_at")
    @classmethod
    def _ensure_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

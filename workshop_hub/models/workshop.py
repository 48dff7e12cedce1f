"""Workshop model: a scheduled training session with seat capacity."""

from __future__ import annotations

from datetime import datetime, timedelta
from enum import Enum
from typing import List, Optional

from sqlalchemy import CheckConstraint, Float, Index, Integer, String, Text
from sqlalchemy import Enum as SqlEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from workshop_hub.models.base import Base, TimestampMixin
from workshop_hub.models.types import JSONType, UTCDateTime


class WorkshopStatus(str, Enum):
    UPCOMING = "upcoming"
    LIVE = "live"
    COMPLETED = "completed"


class WorkshopMode(str, Enum):
    ONLINE = "Online"
    OFFLINE = "Offline"
    HYBRID = "Hybrid"


class Workshop(TimestampMixin, Base):
    """Workshop record; status and seats_filled are the only mutable state."""

    __tablename__ = "workshops"
    __table_args__ = (
        Index("ix_workshops_status", "status"),
        Index("ix_workshops_scheduled_start", "scheduled_start"),
        CheckConstraint("duration_minutes > 0", name="duration_positive"),
        CheckConstraint("seats_total > 0", name="seats_total_positive"),
        CheckConstraint("seats_filled >= 0", name="seats_filled_non_negative"),
        CheckConstraint("seats_filled <= seats_total", name="seats_filled_within_total"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(length=255), nullable=False)
    subtitle: Mapped[str] = mapped_column(String(length=255), nullable=False, default="")
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    category: Mapped[str] = mapped_column(String(length=120), nullable=False, default="General")
    level: Mapped[str] = mapped_column(String(length=64), nullable=False, default="Beginner")
    mode: Mapped[WorkshopMode] = mapped_column(
        SqlEnum(WorkshopMode, name="workshop_mode", native_enum=False, values_callable=lambda x: [e.value for e in x]),
        nullable=False,
        default=WorkshopMode.ONLINE,
    )
    scheduled_start: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)
    duration_minutes: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[WorkshopStatus] = mapped_column(
        SqlEnum(WorkshopStatus, name="workshop_status", native_enum=False, values_callable=lambda x: [e.value for e in x]),
        nullable=False,
        default=WorkshopStatus.UPCOMING,
    )
    seats_total: Mapped[int] = mapped_column(Integer, nullable=False)
    seats_filled: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    trainer_name: Mapped[str] = mapped_column(String(length=255), nullable=False, default="")
    trainer_bio: Mapped[str] = mapped_column(Text, nullable=False, default="")
    trainer_image: Mapped[Optional[str]] = mapped_column(String(length=1024), nullable=True)
    trainer_rating: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    tags: Mapped[List[str]] = mapped_column(JSONType, nullable=False, default=list)
    agenda: Mapped[List[str]] = mapped_column(JSONType, nullable=False, default=list)
    links: Mapped[dict] = mapped_column(JSONType, nullable=False, default=dict)

    registrations = relationship(
        "Registration",
        back_populates="workshop",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    @property
    def scheduled_end(self) -> datetime:
        return self.scheduled_start + timedelta(minutes=self.duration_minutes)

    @property
    def seats_available(self) -> int:
        return max(self.seats_total - self.seats_filled, 0)

    @property
    def is_full(self) -> bool:
        return self.seats_filled >= self.seats_total

"""Confirmed link between a user and a workshop."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional

from sqlalchemy import Enum as SqlEnum
from sqlalchemy import ForeignKey, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from workshop_hub.models.base import Base, utcnow
from workshop_hub.models.types import UTCDateTime


class RegistrationStatus(str, Enum):
    CONFIRMED = "confirmed"


class Registration(Base):
    """Registration rows are created and deleted, never updated."""

    __tablename__ = "registrations"
    __table_args__ = (
        UniqueConstraint("user_id", "workshop_id", name="uq_registrations_user_workshop"),
        Index("ix_registrations_user", "user_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(length=128), nullable=False)
    workshop_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("workshops.id", ondelete="CASCADE"),
        nullable=False,
    )
    user_email: Mapped[Optional[str]] = mapped_column(String(length=255), nullable=True)
    user_name: Mapped[Optional[str]] = mapped_column(String(length=255), nullable=True)
    status: Mapped[RegistrationStatus] = mapped_column(
        SqlEnum(RegistrationStatus, name="registration_status", native_enum=False, values_callable=lambda x: [e.value for e in x]),
        nullable=False,
        default=RegistrationStatus.CONFIRMED,
    )
    registered_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False, default=utcnow)

    workshop = relationship("Workshop", back_populates="registrations")

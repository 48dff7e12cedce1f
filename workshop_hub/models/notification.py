"""Per-user notifications produced from registration events."""

from __future__ import annotations

from enum import Enum
from typing import Optional

from sqlalchemy import Boolean, Index, Integer, String
from sqlalchemy import Enum as SqlEnum
from sqlalchemy.orm import Mapped, mapped_column

from workshop_hub.models.base import Base, TimestampMixin


class NotificationType(str, Enum):
    REGISTRATION = "registration"
    CANCELLATION = "cancellation"


class Notification(TimestampMixin, Base):
    __tablename__ = "notifications"
    __table_args__ = (Index("ix_notifications_user", "user_id"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(length=128), nullable=False)
    # Not a foreign key: notifications outlive the workshop they mention.
    workshop_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    type: Mapped[NotificationType] = mapped_column(
        SqlEnum(NotificationType, name="notification_type", native_enum=False, values_callable=lambda x: [e.value for e in x]),
        nullable=False,
    )
    message: Mapped[str] = mapped_column(String(length=512), nullable=False)
    read: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

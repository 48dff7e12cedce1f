"""Notification API schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict

from workshop_hub.models.notification import NotificationType


class NotificationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: str
    workshop_id: Optional[int]
    type: NotificationType
    message: str
    read: bool
    created_at: datetime

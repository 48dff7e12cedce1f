"""Registration API schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from workshop_hub.models.registration import RegistrationStatus
from workshop_hub.schemas.workshop import WorkshopResponse


class RegistrationRequest(BaseModel):
    user_id: str = Field(..., min_length=1, max_length=128)
    user_email: Optional[str] = Field(default=None, max_length=255)
    user_name: Optional[str] = Field(default=None, max_length=255)


class RegistrationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: str
    workshop_id: int
    user_email: Optional[str]
    user_name: Optional[str]
    status: RegistrationStatus
    registered_at: datetime


class RegistrationResult(BaseModel):
    registration: RegistrationResponse
    workshop: WorkshopResponse


class CancellationResult(BaseModel):
    status: str = "cancelled"
    workshop: WorkshopResponse


class UserWorkshopResponse(WorkshopResponse):
    """A workshop as seen from one registered user."""

    registration_id: int
    registered_at: datetime
    registration_status: RegistrationStatus

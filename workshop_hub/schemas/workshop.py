"""Workshop API schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from workshop_hub.models.types import as_utc
from workshop_hub.models.workshop import Workshop, WorkshopMode, WorkshopStatus


class Capacity(BaseModel):
    total: int
    filled: int
    available: int


class Trainer(BaseModel):
    name: str = Field(default="", max_length=255)
    bio: str = ""
    image: Optional[str] = Field(default=None, max_length=1024)
    rating: Optional[float] = Field(default=None, ge=0, le=5)


class WorkshopCreate(BaseModel):
    """Payload for creating a workshop. Status is derived, never supplied."""

    model_config = ConfigDict(extra="forbid")

    title: str = Field(..., min_length=1, max_length=255)
    subtitle: str = Field(default="", max_length=255)
    description: str = ""
    category: str = Field(default="General", max_length=120)
    level: str = Field(default="Beginner", max_length=64)
    mode: WorkshopMode = WorkshopMode.ONLINE
    scheduled_start: datetime
    duration_minutes: int = Field(..., gt=0)
    capacity_total: int = Field(..., gt=0)
    capacity_filled: int = Field(default=0, ge=0)
    trainer: Trainer = Field(default_factory=Trainer)
    tags: List[str] = Field(default_factory=list)
    agenda: List[str] = Field(default_factory=list)
    links: Dict[str, Optional[str]] = Field(default_factory=dict)

    @field_validator("scheduled_start")
    @classmethod
    def _ensure_utc(cls, value: datetime) -> datetime:
        return as_utc(value)

    @model_validator(mode="after")
    def _filled_within_total(self) -> "WorkshopCreate":
        if self.capacity_filled > self.capacity_total:
            raise ValueError("capacity_filled cannot exceed capacity_total")
        return self


class WorkshopResponse(BaseModel):
    id: int
    title: str
    subtitle: str
    description: str
    category: str
    level: str
    mode: WorkshopMode
    scheduled_start: datetime
    scheduled_end: datetime
    duration_minutes: int
    status: WorkshopStatus
    capacity: Capacity
    trainer: Trainer
    tags: List[str]
    agenda: List[str]
    links: Dict[str, Optional[str]]
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_model(cls, workshop: Workshop) -> "WorkshopResponse":
        return cls(
            id=workshop.id,
            title=workshop.title,
            subtitle=workshop.subtitle,
            description=workshop.description,
            category=workshop.category,
            level=workshop.level,
            mode=workshop.mode,
            scheduled_start=workshop.scheduled_start,
            scheduled_end=workshop.scheduled_end,
            duration_minutes=workshop.duration_minutes,
            status=workshop.status,
            capacity=Capacity(
                total=workshop.seats_total,
                filled=workshop.seats_filled,
                available=workshop.seats_available,
            ),
            trainer=Trainer(
                name=workshop.trainer_name,
                bio=workshop.trainer_bio,
                image=workshop.trainer_image,
                rating=workshop.trainer_rating,
            ),
            tags=list(workshop.tags or []),
            agenda=list(workshop.agenda or []),
            links=dict(workshop.links or {}),
            created_at=workshop.created_at,
            updated_at=workshop.updated_at,
        )


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    pages: int


class WorkshopPage(BaseModel):
    data: List[WorkshopResponse]
    pagination: Pagination


class AnalyticsSnapshot(BaseModel):
    total_views: int = 0
    registrations: int = 0
    cancellations: int = 0
    completions: int = 0
    popular_workshops: Dict[str, int] = Field(default_factory=dict)


class WorkshopStats(BaseModel):
    total: int
    upcoming: int
    live: int
    completed: int
    total_capacity: int
    total_enrolled: int
    average_rating: float
    categories: Dict[str, int]
    modes: Dict[str, int]
    analytics: AnalyticsSnapshot

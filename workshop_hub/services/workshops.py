"""Workshop catalogue: listing, lookup, creation, and aggregate statistics."""

from __future__ import annotations

import logging
import math
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List, Optional

import httpx
from sqlalchemy.orm import Session

from workshop_hub.models.workshop import Workshop, WorkshopStatus
from workshop_hub.schemas.workshop import WorkshopCreate
from workshop_hub.services.analytics import AnalyticsCounter, get_analytics_counter
from workshop_hub.services.lifecycle import derive_status
from workshop_hub.services.store import WorkshopStore


@dataclass
class WorkshopFilter:
    """Query options accepted by :meth:`WorkshopService.list_workshops`."""

    status: Optional[WorkshopStatus] = None
    search: Optional[str] = None
    tags: List[str] = field(default_factory=list)
    category: Optional[str] = None
    level: Optional[str] = None
    mode: Optional[str] = None

    def matches(self, workshop: Workshop) -> bool:
        if self.category and workshop.category != self.category:
            return False
        if self.level and workshop.level != self.level:
            return False
        if self.mode and workshop.mode.value != self.mode:
            return False
        if self.tags and not all(tag in (workshop.tags or []) for tag in self.tags):
            return False
        if self.search:
            term = self.search.lower()
            haystack = [
                workshop.title,
                workshop.subtitle,
                workshop.description,
                workshop.trainer_name,
                workshop.category,
                *(workshop.tags or []),
            ]
            if not any(term in (text or "").lower() for text in haystack):
                return False
        return True


@dataclass
class WorkshopPageResult:
    items: List[Workshop]
    page: int
    limit: int
    total: int

    @property
    def pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0


class WorkshopService:
    """Read-mostly access to the workshop catalogue."""

    def __init__(
        self,
        session: Session,
        store: Optional[WorkshopStore] = None,
        analytics: Optional[AnalyticsCounter] = None,
    ) -> None:
        self._session = session
        self._store = store or WorkshopStore(session)
        self._analytics = analytics or get_analytics_counter()
        self._logger = logging.getLogger("workshop_hub.services.workshops")

    def create_workshop(self, payload: WorkshopCreate, *, now: Optional[datetime] = None) -> Workshop:
        """Create a workshop whose initial status reflects the current time."""

        now = now or datetime.now(timezone.utc)
        workshop = Workshop(
            title=payload.title,
            subtitle=payload.subtitle,
            description=payload.description,
            category=payload.category,
            level=payload.level,
            mode=payload.mode,
            scheduled_start=payload.scheduled_start,
            duration_minutes=payload.duration_minutes,
            status=derive_status(payload.scheduled_start, payload.duration_minutes, now),
            seats_total=payload.capacity_total,
            seats_filled=payload.capacity_filled,
            trainer_name=payload.trainer.name,
            trainer_bio=payload.trainer.bio,
            trainer_image=payload.trainer.image,
            trainer_rating=payload.trainer.rating,
            tags=list(payload.tags),
            agenda=list(payload.agenda),
            links=dict(payload.links),
        )
        self._store.add(workshop)
        self._logger.info(
            "workshop_created",
            extra={"workshop_id": workshop.id, "status": workshop.status.value, "seats_total": workshop.seats_total},
        )
        return workshop

    def get_workshop(self, workshop_id: int, *, track_view: bool = True) -> Workshop:
        workshop = self._store.get(workshop_id)
        if track_view:
            self._track("record_view", workshop.id)
        return workshop

    def list_workshops(
        self,
        filters: Optional[WorkshopFilter] = None,
        *,
        page: int = 1,
        limit: int = 10,
    ) -> WorkshopPageResult:
        """Return one page of workshops sorted by start time."""

        filters = filters or WorkshopFilter()
        self._track("increment", "total_views")

        statuses = [filters.status] if filters.status else None
        matching = [workshop for workshop in self._store.list(statuses=statuses) if filters.matches(workshop)]

        start = (page - 1) * limit
        return WorkshopPageResult(items=matching[start : start + limit], page=page, limit=limit, total=len(matching))

    def _track(self, method: str, *args: object) -> None:
        """Analytics is a sink: an unreachable counter store never fails a read."""

        try:
            getattr(self._analytics, method)(*args)
        except httpx.HTTPError as exc:
            self._logger.warning("analytics_record_failed", extra={"operation": method, "error": str(exc)})

    def _analytics_snapshot(self) -> Dict[str, object]:
        try:
            return self._analytics.snapshot()
        except httpx.HTTPError as exc:
            self._logger.warning("analytics_snapshot_failed", extra={"error": str(exc)})
            return {}

    def categories(self) -> List[str]:
        return sorted({workshop.category for workshop in self._store.list()})

    def tags(self) -> List[str]:
        return sorted({tag for workshop in self._store.list() for tag in (workshop.tags or [])})

    def stats(self) -> Dict[str, object]:
        workshops = self._store.list()
        by_status = Counter(workshop.status for workshop in workshops)
        ratings = [workshop.trainer_rating or 0.0 for workshop in workshops]
        return {
            "total": len(workshops),
            "upcoming": by_status[WorkshopStatus.UPCOMING],
            "live": by_status[WorkshopStatus.LIVE],
            "completed": by_status[WorkshopStatus.COMPLETED],
            "total_capacity": sum(workshop.seats_total for workshop in workshops),
            "total_enrolled": sum(workshop.seats_filled for workshop in workshops),
            "average_rating": round(sum(ratings) / len(ratings), 2) if ratings else 0.0,
            "categories": dict(Counter(workshop.category for workshop in workshops)),
            "modes": dict(Counter(workshop.mode.value for workshop in workshops)),
            "analytics": self._analytics_snapshot(),
        }

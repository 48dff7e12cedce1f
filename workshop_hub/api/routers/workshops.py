"""Workshop catalogue, registration, review, and live-update endpoints."""

from __future__ import annotations

import asyncio
import json
from datetime import datetime, timezone
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request, status
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import StreamingResponse

from workshop_hub.api.dependencies import (
    get_hub,
    get_registration_service,
    get_review_service,
    get_workshop_service,
)
from workshop_hub.core.config import get_settings
from workshop_hub.events_engine.broadcast import BroadcastHub
from workshop_hub.models.workshop import WorkshopMode, WorkshopStatus
from workshop_hub.schemas.registration import (
    CancellationResult,
    RegistrationRequest,
    RegistrationResponse,
    RegistrationResult,
)
from workshop_hub.schemas.review import ReviewCreate, ReviewResponse
from workshop_hub.schemas.workshop import (
    Pagination,
    WorkshopCreate,
    WorkshopPage,
    WorkshopResponse,
    WorkshopStats,
)
from workshop_hub.services.registrations import RegistrationService
from workshop_hub.services.reviews import ReviewService
from workshop_hub.services.workshops import WorkshopFilter, WorkshopService

router = APIRouter()

STREAM_HEARTBEAT_SECONDS = 15.0


@router.get("", response_model=WorkshopPage)
def list_workshops(
    status_filter: Optional[WorkshopStatus] = Query(default=None, alias="status"),
    search: Optional[str] = Query(default=None, max_length=200),
    tags: Optional[str] = Query(default=None, description="Comma separated; all must match"),
    category: Optional[str] = Query(default=None),
    level: Optional[str] = Query(default=None),
    mode: Optional[WorkshopMode] = Query(default=None),
    page: int = Query(default=1, ge=1),
    limit: Optional[int] = Query(default=None, ge=1),
    service: WorkshopService = Depends(get_workshop_service),
) -> WorkshopPage:
    settings = get_settings()
    page_size = min(limit or settings.default_page_size, settings.max_page_size)
    filters = WorkshopFilter(
        status=status_filter,
        search=search,
        tags=[tag.strip() for tag in tags.split(",") if tag.strip()] if tags else [],
        category=category,
        level=level,
        mode=mode.value if mode else None,
    )
    result = service.list_workshops(filters, page=page, limit=page_size)
    return WorkshopPage(
        data=[WorkshopResponse.from_model(workshop) for workshop in result.items],
        pagination=Pagination(page=result.page, limit=result.limit, total=result.total, pages=result.pages),
    )


@router.post("", response_model=WorkshopResponse, status_code=status.HTTP_201_CREATED)
def create_workshop(
    payload: WorkshopCreate,
    service: WorkshopService = Depends(get_workshop_service),
) -> WorkshopResponse:
    workshop = service.create_workshop(payload)
    return WorkshopResponse.from_model(workshop)


@router.get("/categories", response_model=List[str])
def list_categories(service: WorkshopService = Depends(get_workshop_service)) -> List[str]:
    return service.categories()


@router.get("/tags", response_model=List[str])
def list_tags(service: WorkshopService = Depends(get_workshop_service)) -> List[str]:
    return service.tags()


@router.get("/stats", response_model=WorkshopStats)
def workshop_stats(service: WorkshopService = Depends(get_workshop_service)) -> WorkshopStats:
    return WorkshopStats.model_validate(service.stats())


@router.get("/{workshop_id}", response_model=WorkshopResponse)
def get_workshop(
    workshop_id: int,
    service: WorkshopService = Depends(get_workshop_service),
) -> WorkshopResponse:
    return WorkshopResponse.from_model(service.get_workshop(workshop_id))


@router.post("/{workshop_id}/register", response_model=RegistrationResult)
def register_for_workshop(
    workshop_id: int,
    payload: RegistrationRequest,
    service: RegistrationService = Depends(get_registration_service),
) -> RegistrationResult:
    outcome = service.register(
        workshop_id,
        payload.user_id,
        user_email=payload.user_email,
        user_name=payload.user_name,
    )
    return RegistrationResult(
        registration=RegistrationResponse.model_validate(outcome.registration, from_attributes=True),
        workshop=WorkshopResponse.from_model(outcome.workshop),
    )


@router.delete("/{workshop_id}/register", response_model=CancellationResult)
def cancel_registration(
    workshop_id: int,
    user_id: str = Query(..., min_length=1, max_length=128),
    service: RegistrationService = Depends(get_registration_service),
) -> CancellationResult:
    workshop = service.cancel(workshop_id, user_id)
    return CancellationResult(workshop=WorkshopResponse.from_model(workshop))


@router.get("/{workshop_id}/reviews", response_model=List[ReviewResponse])
def list_reviews(
    workshop_id: int,
    service: ReviewService = Depends(get_review_service),
) -> List[ReviewResponse]:
    return [ReviewResponse.model_validate(review, from_attributes=True) for review in service.list_for_workshop(workshop_id)]


@router.post("/{workshop_id}/reviews", response_model=ReviewResponse, status_code=status.HTTP_201_CREATED)
def submit_review(
    workshop_id: int,
    payload: ReviewCreate,
    service: ReviewService = Depends(get_review_service),
) -> ReviewResponse:
    return ReviewResponse.model_validate(service.submit(workshop_id, payload), from_attributes=True)


@router.get("/{workshop_id}/stream", summary="Server-sent workshop updates")
async def stream_workshop_updates(
    workshop_id: int,
    request: Request,
    service: WorkshopService = Depends(get_workshop_service),
    hub: BroadcastHub = Depends(get_hub),
) -> StreamingResponse:
    workshop = await run_in_threadpool(service.get_workshop, workshop_id, track_view=False)
    snapshot = {"workshop_id": workshop.id, "status": workshop.status.value, "seats_filled": workshop.seats_filled}
    subscription = hub.subscribe(workshop_id)

    async def event_generator():
        try:
            yield f"event: snapshot\ndata: {json.dumps(snapshot)}\n\n"
            while True:
                if await request.is_disconnected():
                    break
                try:
                    message = await asyncio.wait_for(subscription.get(), timeout=STREAM_HEARTBEAT_SECONDS)
                except asyncio.TimeoutError:
                    heartbeat = json.dumps({"timestamp": datetime.now(timezone.utc).isoformat()})
                    yield f"event: heartbeat\ndata: {heartbeat}\n\n"
                    continue
                yield f"event: workshop-update\ndata: {json.dumps(message, default=str)}\n\n"
        finally:
            hub.unsubscribe(subscription)

    return StreamingResponse(event_generator(), media_type="text/event-stream")

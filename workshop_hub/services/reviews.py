"""Workshop reviews."""

from __future__ import annotations

import logging
from typing import List

from sqlalchemy import select
from sqlalchemy.orm import Session

from workshop_hub.models.review import Review
from workshop_hub.schemas.review import ReviewCreate
from workshop_hub.services.store import WorkshopStore


class ReviewService:
    def __init__(self, session: Session) -> None:
        self._session = session
        self._store = WorkshopStore(session)
        self._logger = logging.getLogger("workshop_hub.services.reviews")

    def list_for_workshop(self, workshop_id: int) -> List[Review]:
        self._store.get(workshop_id)
        stmt = select(Review).where(Review.workshop_id == workshop_id).order_by(Review.created_at.desc(), Review.id.desc())
        return list(self._session.scalars(stmt))

    def submit(self, workshop_id: int, payload: ReviewCreate) -> Review:
        self._store.get(workshop_id)
        review = Review(
            workshop_id=workshop_id,
            user_id=payload.user_id,
            user_name=payload.user_name,
            rating=payload.rating,
            comment=payload.comment,
        )
        self._session.add(review)
        self._session.flush()
        self._logger.info(
            "review_submitted",
            extra={"workshop_id": workshop_id, "user_id": payload.user_id, "rating": payload.rating},
        )
        return review

"""Review API schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ReviewCreate(BaseModel):
    user_id: str = Field(..., min_length=1, max_length=128)
    user_name: Optional[str] = Field(default=None, max_length=255)
    rating: int = Field(..., ge=1, le=5)
    comment: str = Field(default="", max_length=4000)


class ReviewResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    workshop_id: int
    user_id: str
    user_name: Optional[str]
    rating: int
    comment: str
    created_at: datetime

"""Pydantic schemas for form response analytics."""

import uuid
from datetime import datetime
from typing import Any

from pydantic import BaseModel

from zopforms.schemas.forms import FieldType


class DailyBucket(BaseModel):
    """Response count bucketed by submission date."""

    date: str  # ISO date string, e.g. "2026-02-12"
    count: int


class FieldAnalytics(BaseModel):
    """Answer distribution for a single field."""

    field_id: str
    field_label: str
    field_type: FieldType
    response_count: int
    responses: dict[str, int]
    average_rating: float | None = None
    sample_responses: list[Any] | None = None


class FormAnalytics(BaseModel):
    form_id: uuid.UUID
    total_responses: int
    average_score: float | None
    average_rating: float | None
    completion_rate: float  # percentage, 0-100
    latest_response_at: datetime | None
    responses_by_date: list[DailyBucket]
    field_analytics: list[FieldAnalytics]

"""
Модели журнала отзывов.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import ConfigDict, Field

from maasin_go.shared.models.common import CamelModel


class FeedbackRequest(CamelModel):
    """Тело отзыва (POST /feedback)."""

    driver_id: str | None = None
    rating: int = Field(..., strict=True)
    comment: str | None = None
    plate_number: str | None = None


class FeedbackRecord(CamelModel):
    """Неизменяемая запись отзыва. Идентичность: (пассажир, время создания)."""

    model_config = ConfigDict(frozen=True)

    id: str
    passenger_id: str
    driver_id: str | None = None
    plate_number: str | None = None
    rating: int
    comment: str | None = None
    created_at: datetime


class FeedbackResponse(CamelModel):
    """Ответ на отправку отзыва."""

    success: bool = True
    feedback: FeedbackRecord

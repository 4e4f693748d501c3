from __future__ import annotations

from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends

from maasin_go.services.dependencies import get_current_identity, get_feedback_service
from maasin_go.services.feedback.service import FeedbackService
from maasin_go.shared.models.feedback_dto import FeedbackResponse
from maasin_go.shared.models.user_dto import Identity

router = APIRouter(tags=["feedback"])


@router.post("/feedback", response_model=FeedbackResponse)
async def submit_feedback(
    identity: Annotated[Identity | None, Depends(get_current_identity)],
    service: Annotated[FeedbackService, Depends(get_feedback_service)],
    payload: Annotated[Any, Body()] = None,
) -> FeedbackResponse:
    """Пассажир оценивает поездку (1-5)."""
    feedback = await service.submit(identity, payload)
    return FeedbackResponse(feedback=feedback)

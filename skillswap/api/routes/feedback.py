"""Feedback endpoints for rating the other participant of a session."""

import structlog
from fastapi import APIRouter, Depends, status

from skillswap.api.auth import get_current_user_id
from skillswap.api.dependencies import get_feedback_service
from skillswap.api.models import (
    ErrorResponse,
    FeedbackItem,
    FeedbackListResponse,
    FeedbackRequest,
    FeedbackResponse,
    scoring_status,
)
from skillswap.feedback.schemas import Feedback
from skillswap.feedback.service import FeedbackService

logger = structlog.get_logger(__name__)
router = APIRouter()


def _to_item(feedback: Feedback) -> FeedbackItem:
    return FeedbackItem(
        feedback_id=feedback.feedback_id,
        session_id=feedback.session_id,
        from_user_id=feedback.from_user_id,
        to_user_id=feedback.to_user_id,
        role=feedback.role,
        rating=feedback.rating,
        comment=feedback.comment,
        created_at=feedback.created_at.isoformat(),
    )


@router.post(
    "/sessions/{session_id}/feedback",
    response_model=FeedbackResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse, "description": "Bad rating or session not completed"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        403: {"model": ErrorResponse, "description": "Not a participant"},
        404: {"model": ErrorResponse, "description": "Session not found"},
        409: {"model": ErrorResponse, "description": "Feedback already submitted"},
    },
    summary="Submit feedback",
)
async def submit_feedback(
    session_id: str,
    request: FeedbackRequest,
    user_id: str = Depends(get_current_user_id),
    service: FeedbackService = Depends(get_feedback_service),
) -> FeedbackResponse:
    result = await service.submit_feedback(
        session_id, user_id, request.rating, request.comment
    )
    logger.info(
        "Feedback submitted",
        feedback_id=result.value.feedback_id,
        session_id=session_id,
        rating=result.value.rating,
        scoring_ok=result.scoring_ok,
    )
    return FeedbackResponse(
        feedback=_to_item(result.value),
        scoring=scoring_status(result.scoring),
    )


@router.get(
    "/sessions/{session_id}/feedback",
    response_model=FeedbackListResponse,
    responses={
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        403: {"model": ErrorResponse, "description": "Not a participant"},
        404: {"model": ErrorResponse, "description": "Session not found"},
    },
    summary="List feedback for a session",
)
async def list_session_feedback(
    session_id: str,
    user_id: str = Depends(get_current_user_id),
    service: FeedbackService = Depends(get_feedback_service),
) -> FeedbackListResponse:
    items = await service.get_feedback_for_session(session_id, user_id)
    return FeedbackListResponse(
        feedback=[_to_item(f) for f in items],
        total=len(items),
    )

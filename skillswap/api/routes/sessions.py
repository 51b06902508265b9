"""Session workflow endpoints: schedule and complete."""

import structlog
from fastapi import APIRouter, Depends

from skillswap.api.auth import get_current_user_id
from skillswap.api.dependencies import get_session_service
from skillswap.api.models import (
    ErrorResponse,
    ScheduleSessionRequest,
    SessionItem,
    SessionResponse,
    iso,
    scoring_status,
)
from skillswap.sessions.schemas import Session
from skillswap.sessions.service import SessionService

logger = structlog.get_logger(__name__)
router = APIRouter()

_ERRORS = {
    401: {"model": ErrorResponse, "description": "Not authenticated"},
    403: {"model": ErrorResponse, "description": "Not allowed for this user"},
    404: {"model": ErrorResponse, "description": "Session not found"},
    400: {"model": ErrorResponse, "description": "Invalid session state"},
}


def session_item(session: Session) -> SessionItem:
    return SessionItem(
        session_id=session.session_id,
        teacher_id=session.teacher_id,
        learner_id=session.learner_id,
        teacher_name=session.teacher_name,
        learner_name=session.learner_name,
        skill_id=session.skill_id,
        skill_name=session.skill_name,
        mode=session.mode,
        learner_skill=session.learner_skill,
        status=session.status,
        scheduled_at=iso(session.scheduled_at),
        completed_at=iso(session.completed_at),
        created_at=session.created_at.isoformat(),
    )


@router.post(
    "/sessions/{session_id}/schedule",
    response_model=SessionResponse,
    responses=_ERRORS,
    summary="Set the session start time (teacher only)",
)
async def schedule_session(
    session_id: str,
    request: ScheduleSessionRequest,
    user_id: str = Depends(get_current_user_id),
    service: SessionService = Depends(get_session_service),
) -> SessionResponse:
    session = await service.schedule_session(session_id, user_id, request.scheduled_at)
    logger.info("Session scheduled", session_id=session_id, scheduled_at=iso(session.scheduled_at))
    return SessionResponse(session=session_item(session))


@router.post(
    "/sessions/{session_id}/complete",
    response_model=SessionResponse,
    responses=_ERRORS,
    summary="Mark a session completed",
    description=(
        "Completes the session, creates post-session assignments and "
        "recomputes both participants' scores. Scoring failures are "
        "reported in `scoring` and never fail the completion."
    ),
)
async def complete_session(
    session_id: str,
    user_id: str = Depends(get_current_user_id),
    service: SessionService = Depends(get_session_service),
) -> SessionResponse:
    result = await service.complete_session(session_id, user_id)
    if not result.scoring_ok:
        logger.warning(
            "Session completed with scoring errors",
            session_id=session_id,
            errors=result.scoring.errors,
        )
    return SessionResponse(
        session=session_item(result.value),
        scoring=scoring_status(result.scoring),
    )

"""Credibility endpoints: dashboard view and explicit recompute."""

import structlog
from fastapi import APIRouter, Depends

from skillswap.api.auth import get_current_user_id, verify_api_key
from skillswap.api.dependencies import get_scoring_service
from skillswap.api.models import (
    CredibilityRecomputeResponse,
    CredibilityResponse,
    CredibilityStatsItem,
    ErrorResponse,
    UpcomingSessionItem,
    iso,
)
from skillswap.errors import ForbiddenError
from skillswap.scoring.service import ScoringService
from skillswap.users.schemas import CredibilityStats

logger = structlog.get_logger(__name__)
router = APIRouter()


def _stats_item(stats: CredibilityStats) -> CredibilityStatsItem:
    return CredibilityStatsItem(
        avg_skill_score=stats.avg_skill_score,
        avg_teaching_rating=stats.avg_teaching_rating,
        session_count=stats.session_count,
        consistency_bonus=stats.consistency_bonus,
        updated_at=iso(stats.updated_at),
    )


@router.get(
    "/users/{user_id}/credibility",
    response_model=CredibilityResponse,
    responses={401: {"model": ErrorResponse, "description": "Invalid API key"}},
    summary="Get a user's credibility",
    description=(
        "Stored credibility score plus live dashboard fields. Unknown users "
        "and read failures return zero/empty defaults, never an error."
    ),
)
async def get_credibility(
    user_id: str,
    api_key: str = Depends(verify_api_key),
    scoring: ScoringService = Depends(get_scoring_service),
) -> CredibilityResponse:
    view = await scoring.get_credibility(user_id)
    return CredibilityResponse(
        user_id=user_id,
        credibility_score=view.credibility_score,
        sessions_completed=view.sessions_completed,
        students_count=view.students_count,
        teaching_hours=view.teaching_hours,
        avg_rating=view.avg_rating,
        rating_breakdown={str(k): v for k, v in view.rating_breakdown.items()},
        skills_taught_count=view.skills_taught_count,
        skills_learned_count=view.skills_learned_count,
        total_reviews=view.total_reviews,
        upcoming_sessions=[
            UpcomingSessionItem(
                session_id=s.session_id,
                skill=s.skill,
                role=s.role,
                teacher_name=s.teacher_name,
                learner_name=s.learner_name,
                scheduled_at=iso(s.scheduled_at),
                status=s.status,
            )
            for s in view.upcoming_sessions
        ],
        stats=_stats_item(view.stats),
    )


@router.post(
    "/users/{user_id}/credibility/recompute",
    response_model=CredibilityRecomputeResponse,
    responses={
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        403: {"model": ErrorResponse, "description": "Not your profile"},
        404: {"model": ErrorResponse, "description": "User not found"},
    },
    summary="Recompute a user's credibility",
)
async def recompute_credibility(
    user_id: str,
    caller_id: str = Depends(get_current_user_id),
    scoring: ScoringService = Depends(get_scoring_service),
) -> CredibilityRecomputeResponse:
    if caller_id != user_id:
        raise ForbiddenError("You can only recompute your own credibility")
    result = await scoring.recompute_credibility_score(user_id)
    logger.info(
        "Credibility recomputed",
        user_id=user_id,
        credibility_score=result.credibility_score,
    )
    return CredibilityRecomputeResponse(
        user_id=user_id,
        credibility_score=result.credibility_score,
        stats=_stats_item(result.stats),
    )

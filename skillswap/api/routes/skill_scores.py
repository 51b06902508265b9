"""Skill score endpoints: read and recompute the caller's per-skill scores."""

import time

import structlog
from fastapi import APIRouter, Depends

from skillswap.api.auth import get_current_user_id
from skillswap.api.dependencies import get_scoring_service
from skillswap.api.models import (
    ErrorResponse,
    LegacySkillScoreItem,
    LegacySkillScoreListResponse,
    RecomputeSkillRequest,
    SkillScoreItem,
    SkillScoreListResponse,
)
from skillswap.errors import NotFoundError
from skillswap.scoring.schemas import SkillScore
from skillswap.scoring.service import ScoringService

logger = structlog.get_logger(__name__)
router = APIRouter()


def _to_item(score: SkillScore) -> SkillScoreItem:
    return SkillScoreItem(
        user_id=score.user_id,
        skill_id=score.skill_id,
        skill_name=score.skill_name,
        assignment_avg=score.assignment_avg,
        feedback_avg=score.feedback_avg,
        session_count=score.session_count,
        final_score=score.final_score,
        updated_at=score.updated_at.isoformat(),
    )


@router.get(
    "/skill-scores",
    response_model=SkillScoreListResponse,
    responses={401: {"model": ErrorResponse, "description": "Not authenticated"}},
    summary="List my skill scores",
)
async def list_skill_scores(
    user_id: str = Depends(get_current_user_id),
    scoring: ScoringService = Depends(get_scoring_service),
) -> SkillScoreListResponse:
    start_time = time.perf_counter()
    scores = await scoring.get_skill_scores_for_user(user_id)
    latency_ms = round((time.perf_counter() - start_time) * 1000, 2)
    return SkillScoreListResponse(
        scores=[_to_item(s) for s in scores],
        total=len(scores),
        latency_ms=latency_ms,
    )


@router.get(
    "/skill-scores/{skill_id}",
    response_model=SkillScoreItem,
    responses={
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        404: {"model": ErrorResponse, "description": "No score for this skill"},
    },
    summary="Get my score for one skill",
)
async def get_skill_score(
    skill_id: str,
    user_id: str = Depends(get_current_user_id),
    scoring: ScoringService = Depends(get_scoring_service),
) -> SkillScoreItem:
    score = await scoring.get_skill_score(user_id, skill_id)
    if score is None:
        raise NotFoundError(f"No skill score for skill {skill_id}")
    return _to_item(score)


@router.post(
    "/skill-scores/{skill_id}/recompute",
    response_model=SkillScoreItem,
    responses={401: {"model": ErrorResponse, "description": "Not authenticated"}},
    summary="Recompute my score for one skill",
)
async def recompute_skill_score(
    skill_id: str,
    request: RecomputeSkillRequest,
    user_id: str = Depends(get_current_user_id),
    scoring: ScoringService = Depends(get_scoring_service),
) -> SkillScoreItem:
    score = await scoring.recompute_skill_score(user_id, skill_id, request.skill_name)
    logger.info(
        "Skill score recomputed",
        user_id=user_id,
        skill_id=skill_id,
        final_score=score.final_score,
    )
    return _to_item(score)


@router.get(
    "/legacy-skill-scores",
    response_model=LegacySkillScoreListResponse,
    responses={401: {"model": ErrorResponse, "description": "Not authenticated"}},
    summary="List my legacy running-average scores",
    description=(
        "Running average of graded assignments, kept for older clients. "
        "`/skill-scores` is authoritative."
    ),
)
async def list_legacy_skill_scores(
    user_id: str = Depends(get_current_user_id),
    scoring: ScoringService = Depends(get_scoring_service),
) -> LegacySkillScoreListResponse:
    records = await scoring.get_legacy_scores(user_id)
    return LegacySkillScoreListResponse(
        scores=[
            LegacySkillScoreItem(
                skill_id=r.skill_id,
                skill_name=r.skill_name,
                score=r.score,
                sessions=r.sessions,
                last_updated=r.last_updated.isoformat(),
            )
            for r in records
        ],
        total=len(records),
    )

"""
Request and response models for the skillswap API.
"""

import datetime as dt
from typing import Any

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Response model for errors."""

    detail: str = Field(
        ...,
        description="Error message",
    )
    error_type: str = Field(
        default="error",
        description="Error type",
    )


class ComponentHealth(BaseModel):
    """Health of one infrastructure dependency."""

    status: str = Field(..., description="healthy or unhealthy")
    latency_ms: float | None = Field(default=None, description="Check latency")
    details: dict[str, Any] = Field(default_factory=dict)


class HealthResponse(BaseModel):
    """Response model for health check."""

    status: str = Field(
        ...,
        description="Overall service status: healthy, degraded, or unhealthy",
    )
    components: dict[str, ComponentHealth] = Field(default_factory=dict)
    version: str = Field(default="0.1.0")


class ScoringStatus(BaseModel):
    """Outcome of the scoring side effects of a workflow action.

    A failed recompute does not fail the action; it is reported here.
    """

    ok: bool = Field(..., description="Whether every scoring step succeeded")
    errors: list[str] = Field(default_factory=list)


# Skill scores


class SkillScoreItem(BaseModel):
    user_id: str
    skill_id: str
    skill_name: str
    assignment_avg: int = Field(..., ge=0, le=100)
    feedback_avg: int = Field(..., ge=0, le=100)
    session_count: int = Field(..., ge=0)
    final_score: int = Field(..., ge=0, le=100)
    updated_at: str


class SkillScoreListResponse(BaseModel):
    scores: list[SkillScoreItem]
    total: int
    latency_ms: float


class RecomputeSkillRequest(BaseModel):
    skill_name: str = Field(..., min_length=1, description="Display name of the skill")


class LegacySkillScoreItem(BaseModel):
    """Running-average score kept for older clients; not authoritative."""

    skill_id: str
    skill_name: str
    score: float = Field(..., ge=0, le=100)
    sessions: int = Field(..., ge=0)
    last_updated: str


class LegacySkillScoreListResponse(BaseModel):
    scores: list[LegacySkillScoreItem]
    total: int


# Credibility


class CredibilityStatsItem(BaseModel):
    avg_skill_score: int = 0
    avg_teaching_rating: int = 0
    session_count: int = 0
    consistency_bonus: int = 0
    updated_at: str | None = None


class UpcomingSessionItem(BaseModel):
    session_id: str
    skill: str
    role: str
    teacher_name: str
    learner_name: str
    scheduled_at: str | None = None
    status: str


class CredibilityResponse(BaseModel):
    """Credibility dashboard; every field is always present."""

    user_id: str
    credibility_score: int = Field(..., ge=0, le=100)
    sessions_completed: int
    students_count: int
    teaching_hours: int
    avg_rating: float
    rating_breakdown: dict[str, int] = Field(
        ..., description="Percent of ratings per star value, 5 down to 1"
    )
    skills_taught_count: int
    skills_learned_count: int
    total_reviews: int
    upcoming_sessions: list[UpcomingSessionItem]
    stats: CredibilityStatsItem


class CredibilityRecomputeResponse(BaseModel):
    user_id: str
    credibility_score: int = Field(..., ge=0, le=100)
    stats: CredibilityStatsItem


# Sessions


class ScheduleSessionRequest(BaseModel):
    scheduled_at: dt.datetime = Field(..., description="Agreed start time (ISO 8601)")


class SessionItem(BaseModel):
    session_id: str
    teacher_id: str
    learner_id: str
    teacher_name: str
    learner_name: str
    skill_id: str
    skill_name: str
    mode: str
    learner_skill: str | None = None
    status: str
    scheduled_at: str | None = None
    completed_at: str | None = None
    created_at: str


class SessionResponse(BaseModel):
    session: SessionItem
    scoring: ScoringStatus | None = Field(
        default=None,
        description="Scoring outcome; absent when the action triggered no scoring",
    )


# Feedback


class FeedbackRequest(BaseModel):
    rating: int = Field(..., description="Rating from 1 to 5")
    comment: str = Field(default="", description="Optional comment")


class FeedbackItem(BaseModel):
    feedback_id: str
    session_id: str
    from_user_id: str
    to_user_id: str
    role: str
    rating: int
    comment: str
    created_at: str


class FeedbackResponse(BaseModel):
    feedback: FeedbackItem
    scoring: ScoringStatus


class FeedbackListResponse(BaseModel):
    feedback: list[FeedbackItem]
    total: int


# Assignments


class SubmitAssignmentRequest(BaseModel):
    answers: dict[str, str] = Field(..., description="Question id -> answer text")


class GradeAssignmentRequest(BaseModel):
    scores: dict[str, float] = Field(..., description="Question id -> grade 1-5")
    comment: str = Field(default="")


class QuestionItem(BaseModel):
    question_id: str
    text: str
    type: str = "text"


class AssignmentItem(BaseModel):
    assignment_id: str
    session_id: str
    user_id: str
    skill_id: str
    skill_name: str
    questions: list[QuestionItem]
    answers: dict[str, str]
    submitted: bool
    submitted_at: str | None = None
    graded: bool
    graded_by: str | None = None
    graded_at: str | None = None
    scores: dict[str, float]
    final_score: float | None = None
    grader_comment: str = ""
    created_at: str


class AssignmentResponse(BaseModel):
    assignment: AssignmentItem
    scoring: ScoringStatus | None = None


class AssignmentListResponse(BaseModel):
    """The caller's assignments, also split by submission state."""

    assignments: list[AssignmentItem]
    pending: list[AssignmentItem]
    completed: list[AssignmentItem]


class SessionAssignmentsResponse(BaseModel):
    session_id: str
    assignments: list[AssignmentItem]


# Users


class CreateUserRequest(BaseModel):
    name: str = Field(..., min_length=1)
    email: str = Field(..., description="Login email, stored lower-cased")


class UserItem(BaseModel):
    user_id: str
    name: str
    email: str
    credibility_score: int = Field(..., ge=0, le=100)
    created_at: str


class UserProfileResponse(BaseModel):
    user: UserItem
    avg_rating: float = Field(..., description="Mean rating received, one decimal")
    rating_count: int


class AddSkillRequest(BaseModel):
    skill_name: str = Field(..., min_length=1)
    kind: str = Field(..., description="teach or learn")
    skill_id: str | None = Field(
        default=None, description="Defaults to a slug of the skill name"
    )


class SkillListingItem(BaseModel):
    user_id: str
    skill_id: str
    skill_name: str
    kind: str
    created_at: str


class SkillListingResponse(BaseModel):
    skills: list[SkillListingItem]
    total: int


# Session requests


class SendSessionRequest(BaseModel):
    teacher_id: str = Field(..., min_length=1)
    skill_id: str = Field(..., min_length=1, description="One of the teacher's teach listings")
    message: str = Field(default="")


class ConfirmSessionRequest(BaseModel):
    mode: str = Field(..., description="single or mutual")
    learner_skill: str | None = Field(
        default=None,
        description="Mutual mode: a skill the learner teaches, by id or name",
    )


class SessionRequestItem(BaseModel):
    request_id: str
    from_user_id: str
    from_user_name: str
    to_user_id: str
    to_user_name: str
    skill_id: str
    skill_name: str
    message: str
    status: str
    mode: str | None = None
    learner_skill: str | None = None
    confirmed: bool
    session_id: str | None = None
    created_at: str
    accepted_at: str | None = None
    confirmed_at: str | None = None


class SessionRequestListResponse(BaseModel):
    incoming: list[SessionRequestItem]
    outgoing: list[SessionRequestItem]


class ConfirmSessionResponse(BaseModel):
    request: SessionRequestItem
    session: SessionItem


def scoring_status(outcome: Any) -> ScoringStatus | None:
    """Build the response block from a ScoringOutcome (None passes through)."""
    if outcome is None:
        return None
    return ScoringStatus(ok=outcome.ok, errors=list(outcome.errors))


def iso(value: dt.datetime | None) -> str | None:
    return value.isoformat() if value is not None else None

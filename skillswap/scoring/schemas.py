"""Data models for the scoring pipeline.

SkillScore maps 1:1 to the ``skill_scores`` table and is always a
from-scratch snapshot: every recomputation overwrites the whole record.
UserSkillScore maps to the legacy ``user_skill_scores`` running average
kept only for older display code.
"""

from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any

from skillswap.users.schemas import CredibilityStats

RATING_BUCKETS = (5, 4, 3, 2, 1)


@dataclass
class SkillScore:
    """Per-(user, skill) 0-100 trust metric.

    Attributes:
        user_id: Scored user.
        skill_id: Scored skill.
        skill_name: Display name, carried through unchanged.
        assignment_avg: Mean graded-assignment score on 0-100.
        feedback_avg: Mean peer rating for this skill's sessions on 0-100.
        session_count: Completed sessions for the skill, either role.
        final_score: Weighted blend, integer 0-100.
        updated_at: Time of the recomputation that produced this record.
    """

    user_id: str
    skill_id: str
    skill_name: str
    assignment_avg: int = 0
    feedback_avg: int = 0
    session_count: int = 0
    final_score: int = 0
    updated_at: datetime = field(
        default_factory=lambda: datetime.now(timezone.utc)
    )

    def __post_init__(self) -> None:
        if not (0 <= self.final_score <= 100):
            raise ValueError(
                f"Invalid final_score {self.final_score}. Must be between 0 and 100."
            )

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["updated_at"] = self.updated_at.isoformat()
        return data


@dataclass
class CredibilityResult:
    """Outcome of one credibility recomputation."""

    credibility_score: int
    stats: CredibilityStats


@dataclass
class UpcomingSession:
    """A scheduled session as shown on the credibility dashboard."""

    session_id: str
    skill: str
    role: str
    teacher_name: str
    learner_name: str
    scheduled_at: datetime | None = None
    status: str = "scheduled"


def _empty_breakdown() -> dict[int, int]:
    return {stars: 0 for stars in RATING_BUCKETS}


@dataclass
class CredibilityView:
    """Read-only credibility dashboard for a user.

    Every field has a zero or empty default so the view is always fully
    populated, including when the user is missing or a read fails.
    """

    credibility_score: int = 0
    sessions_completed: int = 0
    students_count: int = 0
    teaching_hours: int = 0
    avg_rating: float = 0.0
    rating_breakdown: dict[int, int] = field(default_factory=_empty_breakdown)
    skills_taught_count: int = 0
    skills_learned_count: int = 0
    total_reviews: int = 0
    upcoming_sessions: list[UpcomingSession] = field(default_factory=list)
    stats: CredibilityStats = field(default_factory=CredibilityStats)


@dataclass
class UserSkillScore:
    """Legacy running-average skill score.

    Attributes:
        score: Running mean of graded-assignment samples on 0-100.
        sessions: Number of samples folded into ``score``.
    """

    user_id: str
    skill_id: str
    skill_name: str
    score: float = 0.0
    sessions: int = 0
    last_updated: datetime = field(
        default_factory=lambda: datetime.now(timezone.utc)
    )

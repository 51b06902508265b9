"""Schema definitions for user profiles.

Maps to the ``users`` table. The credibility score and its stats
sub-object live on the profile and are overwritten in place by the
credibility aggregator.
"""

import uuid
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any

DEFAULT_CREDIBILITY_SCORE = 50

VALID_SKILL_KINDS: frozenset[str] = frozenset({"teach", "learn"})


@dataclass
class CredibilityStats:
    """Breakdown of the last credibility recomputation, kept for display."""

    avg_skill_score: int = 0
    avg_teaching_rating: int = 0
    session_count: int = 0
    consistency_bonus: int = 0
    updated_at: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["updated_at"] = self.updated_at.isoformat() if self.updated_at else None
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CredibilityStats":
        updated_at = data.get("updated_at")
        if isinstance(updated_at, str):
            updated_at = datetime.fromisoformat(updated_at)
        return cls(
            avg_skill_score=data.get("avg_skill_score", 0),
            avg_teaching_rating=data.get("avg_teaching_rating", 0),
            session_count=data.get("session_count", 0),
            consistency_bonus=data.get("consistency_bonus", 0),
            updated_at=updated_at,
        )


@dataclass
class User:
    """A user profile.

    Attributes:
        user_id: Unique identifier.
        name: Display name.
        email: Login email.
        credibility_score: Overall 0-100 trust score (neutral 50 at signup).
        credibility_stats: Breakdown from the last recomputation, if any.
        created_at: Account creation time.
    """

    name: str
    email: str
    user_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    credibility_score: int = DEFAULT_CREDIBILITY_SCORE
    credibility_stats: CredibilityStats | None = None
    created_at: datetime = field(
        default_factory=lambda: datetime.now(timezone.utc)
    )

    def __post_init__(self) -> None:
        if not (0 <= self.credibility_score <= 100):
            raise ValueError(
                f"Invalid credibility_score {self.credibility_score}. "
                "Must be between 0 and 100."
            )


@dataclass
class SkillListing:
    """A skill a user offers to teach or wants to learn.

    ``teach`` listings are what learners request sessions for, and what a
    learner may offer back in mutual mode.
    """

    user_id: str
    skill_id: str
    skill_name: str
    kind: str
    created_at: datetime = field(
        default_factory=lambda: datetime.now(timezone.utc)
    )

    def __post_init__(self) -> None:
        if self.kind not in VALID_SKILL_KINDS:
            raise ValueError(
                f"Invalid skill kind {self.kind!r}. "
                f"Must be one of: {sorted(VALID_SKILL_KINDS)}"
            )
        if not self.skill_name.strip():
            raise ValueError("skill_name must not be empty")

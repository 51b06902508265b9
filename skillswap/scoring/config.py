"""Configuration for the skill and credibility scoring pipeline.

All settings can be overridden via ``SCORING_*`` environment variables.

Example:
    SCORING_TOP_SKILL_COUNT=5
    SCORING_ASSIGNMENT_WEIGHT=0.5
"""

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ScoringConfig(BaseSettings):
    """Weights, thresholds and limits for score computation."""

    model_config = SettingsConfigDict(
        env_prefix="SCORING_",
        case_sensitive=False,
        extra="ignore",
    )

    # Skill score blend
    assignment_weight: float = Field(
        default=0.60,
        ge=0.0,
        le=1.0,
        description="Weight of the graded-assignment average",
    )
    feedback_weight: float = Field(
        default=0.30,
        ge=0.0,
        le=1.0,
        description="Weight of the peer-feedback average",
    )
    consistency_weight: float = Field(
        default=0.10,
        ge=0.0,
        le=1.0,
        description="Weight of the session-consistency term",
    )
    session_consistency_step: int = Field(
        default=10,
        ge=0,
        description="Consistency points per completed session (capped at 100)",
    )

    # Credibility
    top_skill_count: int = Field(
        default=3,
        ge=1,
        description="How many of the best skill scores feed credibility",
    )
    bonus_tiers: tuple[tuple[int, int], ...] = Field(
        default=((30, 10), (15, 5), (5, 2)),
        description="(min completed sessions, bonus) pairs, highest first",
    )
    upcoming_session_limit: int = Field(
        default=3,
        ge=0,
        description="Upcoming sessions shown in the credibility view",
    )

    @model_validator(mode="after")
    def _check_weights(self) -> "ScoringConfig":
        total = self.assignment_weight + self.feedback_weight + self.consistency_weight
        if abs(total - 1.0) > 1e-9:
            raise ValueError(f"Skill score weights must sum to 1.0, got {total}")
        self.bonus_tiers = tuple(
            sorted(self.bonus_tiers, key=lambda tier: tier[0], reverse=True)
        )
        return self

"""Skill and credibility scoring pipeline.

Turns graded assignments, session feedback and completed sessions into
per-skill scores and an overall per-user credibility score, recomputed
from scratch whenever a scoring event fires.

Components:
- SkillScoreCalculator: per-(user, skill) 0-100 score
- CredibilityAggregator: per-user 0-100 score and dashboard view
- ScoringDispatcher: single fan-out point for scoring events
- ScoringService: facade used by workflows, API and CLI
"""

from skillswap.scoring.config import ScoringConfig
from skillswap.scoring.credibility import CredibilityAggregator
from skillswap.scoring.events import (
    ActionResult,
    ScoringDispatcher,
    ScoringEvent,
    ScoringEventKind,
    ScoringOutcome,
)
from skillswap.scoring.repository import SkillScoreRepository, UserSkillScoreRepository
from skillswap.scoring.schemas import (
    CredibilityResult,
    CredibilityStats,
    CredibilityView,
    SkillScore,
    UpcomingSession,
    UserSkillScore,
)
from skillswap.scoring.service import LegacyScoreListener, ScoringService
from skillswap.scoring.skill_calculator import SkillScoreCalculator

__all__ = [
    "ActionResult",
    "CredibilityAggregator",
    "CredibilityResult",
    "CredibilityStats",
    "CredibilityView",
    "LegacyScoreListener",
    "ScoringConfig",
    "ScoringDispatcher",
    "ScoringEvent",
    "ScoringEventKind",
    "ScoringOutcome",
    "ScoringService",
    "SkillScore",
    "SkillScoreCalculator",
    "SkillScoreRepository",
    "UpcomingSession",
    "UserSkillScore",
    "UserSkillScoreRepository",
]

"""Scoring service: the read and recompute surface used by workflows,
the API and the CLI.

Usage:
    service = ScoringService.from_database(db)
    score = await service.recompute_skill_score(user_id, skill_id, "Guitar")
    view = await service.get_credibility(user_id)

    # From a trigger workflow
    outcome = await service.on_scoring_event(
        ScoringEvent.feedback_submitted(recipient_id, skill_id, skill_name)
    )
"""

from __future__ import annotations

import logging

from skillswap.assignments.repository import AssignmentRepository
from skillswap.feedback.repository import FeedbackRepository
from skillswap.scoring.config import ScoringConfig
from skillswap.scoring.credibility import CredibilityAggregator
from skillswap.scoring.events import (
    ScoringDispatcher,
    ScoringEvent,
    ScoringEventKind,
    ScoringOutcome,
)
from skillswap.scoring.formulas import legacy_running_average, rescale_rating
from skillswap.scoring.repository import SkillScoreRepository, UserSkillScoreRepository
from skillswap.scoring.schemas import (
    CredibilityResult,
    CredibilityView,
    SkillScore,
    UserSkillScore,
)
from skillswap.scoring.skill_calculator import SkillScoreCalculator
from skillswap.sessions.repository import SessionRepository
from skillswap.storage.database import Database
from skillswap.users.repository import UserRepository

logger = logging.getLogger(__name__)


class LegacyScoreListener:
    """Keeps the ``user_skill_scores`` running average up to date.

    Only assignment grades feed it; the record is not authoritative and
    exists for older display code.
    """

    def __init__(self, repository: UserSkillScoreRepository) -> None:
        self._repo = repository

    async def __call__(self, event: ScoringEvent) -> None:
        if event.kind is not ScoringEventKind.ASSIGNMENT_GRADED or event.grade is None:
            return
        if not event.has_skill:
            return

        for user_id in event.user_ids:
            record = await self._repo.get_or_create(
                user_id, event.skill_id, event.skill_name
            )
            record.score = legacy_running_average(
                record.score, record.sessions, rescale_rating(event.grade)
            )
            record.sessions += 1
            await self._repo.save(record)
            logger.debug(
                "Legacy score for user=%s skill=%s: %.2f over %d sessions",
                user_id,
                event.skill_id,
                record.score,
                record.sessions,
            )


class ScoringService:
    """Facade over the skill calculator, credibility aggregator and
    event dispatcher."""

    def __init__(
        self,
        scores: SkillScoreRepository,
        skill_calculator: SkillScoreCalculator,
        credibility: CredibilityAggregator,
        dispatcher: ScoringDispatcher | None = None,
        legacy: UserSkillScoreRepository | None = None,
    ) -> None:
        self._scores = scores
        self._legacy = legacy
        self._skill_calculator = skill_calculator
        self._credibility = credibility
        self._dispatcher = dispatcher or ScoringDispatcher(
            skill_calculator, credibility
        )

    @classmethod
    def from_database(
        cls,
        database: Database,
        config: ScoringConfig | None = None,
    ) -> ScoringService:
        """Wire repositories, calculators and the legacy listener."""
        config = config or ScoringConfig()
        scores = SkillScoreRepository(database)
        sessions = SessionRepository(database)
        feedback = FeedbackRepository(database)

        skill_calculator = SkillScoreCalculator(
            scores=scores,
            assignments=AssignmentRepository(database),
            sessions=sessions,
            feedback=feedback,
            config=config,
        )
        credibility = CredibilityAggregator(
            users=UserRepository(database),
            scores=scores,
            sessions=sessions,
            feedback=feedback,
            config=config,
        )
        legacy = UserSkillScoreRepository(database)
        dispatcher = ScoringDispatcher(skill_calculator, credibility)
        dispatcher.add_listener("legacy_score", LegacyScoreListener(legacy))
        return cls(scores, skill_calculator, credibility, dispatcher, legacy)

    async def get_skill_score(self, user_id: str, skill_id: str) -> SkillScore | None:
        return await self._scores.get(user_id, skill_id)

    async def get_skill_scores_for_user(self, user_id: str) -> list[SkillScore]:
        return await self._scores.list_for_user(user_id)

    async def get_legacy_scores(self, user_id: str) -> list[UserSkillScore]:
        """Running-average records, highest first. Empty without a legacy
        repository."""
        if self._legacy is None:
            return []
        return await self._legacy.list_for_user(user_id)

    async def recompute_skill_score(
        self, user_id: str, skill_id: str, skill_name: str
    ) -> SkillScore:
        """Full recompute; failures propagate."""
        return await self._skill_calculator.recompute(user_id, skill_id, skill_name)

    async def recompute_credibility_score(self, user_id: str) -> CredibilityResult:
        """Full recompute; failures propagate."""
        return await self._credibility.recompute(user_id)

    async def get_credibility(self, user_id: str) -> CredibilityView:
        """Dashboard view; never raises."""
        return await self._credibility.get_view(user_id)

    async def on_scoring_event(self, event: ScoringEvent) -> ScoringOutcome:
        """Run all scoring side effects for an event; never raises."""
        return await self._dispatcher.on_scoring_event(event)

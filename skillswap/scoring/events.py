"""Scoring event dispatch.

Every workflow that affects scores (feedback submitted, assignment
graded, session completed) builds a ScoringEvent and hands it to
ScoringDispatcher.on_scoring_event. The dispatcher runs, in order:

1. registered listeners (e.g. the legacy running average),
2. the skill score recompute for every affected user,
3. the credibility recompute for every affected user.

Scoring is a side effect of the primary action. Each step is isolated:
a failure is logged, counted and recorded on the returned
ScoringOutcome, and the remaining steps still run. on_scoring_event
never raises, so the caller's primary write stands regardless.
"""

import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Generic, TypeVar

from skillswap.observability.metrics import get_metrics
from skillswap.scoring.credibility import CredibilityAggregator
from skillswap.scoring.schemas import CredibilityResult, SkillScore
from skillswap.scoring.skill_calculator import SkillScoreCalculator

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ScoringEventKind(str, Enum):
    FEEDBACK_SUBMITTED = "feedback_submitted"
    ASSIGNMENT_GRADED = "assignment_graded"
    SESSION_COMPLETED = "session_completed"


@dataclass(frozen=True)
class ScoringEvent:
    """Something happened that may change one or more users' scores.

    Attributes:
        kind: Which workflow produced the event.
        user_ids: Users whose scores must be recomputed, in order.
        skill_id: Skill whose score is affected, if known.
        skill_name: Display name of that skill.
        grade: Final 1-5 grade for ``assignment_graded`` events.
    """

    kind: ScoringEventKind
    user_ids: tuple[str, ...]
    skill_id: str | None = None
    skill_name: str | None = None
    grade: float | None = None

    @classmethod
    def feedback_submitted(
        cls, recipient_id: str, skill_id: str, skill_name: str
    ) -> "ScoringEvent":
        return cls(
            kind=ScoringEventKind.FEEDBACK_SUBMITTED,
            user_ids=(recipient_id,),
            skill_id=skill_id,
            skill_name=skill_name,
        )

    @classmethod
    def assignment_graded(
        cls, owner_id: str, skill_id: str, skill_name: str, grade: float
    ) -> "ScoringEvent":
        return cls(
            kind=ScoringEventKind.ASSIGNMENT_GRADED,
            user_ids=(owner_id,),
            skill_id=skill_id,
            skill_name=skill_name,
            grade=grade,
        )

    @classmethod
    def session_completed(
        cls, teacher_id: str, learner_id: str, skill_id: str, skill_name: str
    ) -> "ScoringEvent":
        return cls(
            kind=ScoringEventKind.SESSION_COMPLETED,
            user_ids=(teacher_id, learner_id),
            skill_id=skill_id,
            skill_name=skill_name,
        )

    @property
    def has_skill(self) -> bool:
        return bool(self.skill_id and self.skill_name)


@dataclass
class ScoringOutcome:
    """What the scoring side effects of one event produced."""

    event: ScoringEvent
    skill_scores: list[SkillScore] = field(default_factory=list)
    credibility: dict[str, CredibilityResult] = field(default_factory=dict)
    errors: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


@dataclass
class ActionResult(Generic[T]):
    """A primary action's result plus its secondary scoring outcome.

    ``value`` is authoritative: it was written before scoring ran. A
    ``scoring`` of None means the action did not trigger scoring (e.g.
    completing an already completed session).
    """

    value: T
    scoring: ScoringOutcome | None = None

    @property
    def scoring_ok(self) -> bool:
        return self.scoring is None or self.scoring.ok


ScoringListener = Callable[[ScoringEvent], Awaitable[None]]


class ScoringDispatcher:
    """Single fan-out point from scoring events to the calculators."""

    def __init__(
        self,
        skill_calculator: SkillScoreCalculator,
        credibility: CredibilityAggregator,
    ) -> None:
        self._skill_calculator = skill_calculator
        self._credibility = credibility
        self._listeners: list[tuple[str, ScoringListener]] = []

    def add_listener(self, name: str, listener: ScoringListener) -> None:
        """Run ``listener`` for every event, before the recomputes."""
        self._listeners.append((name, listener))

    async def on_scoring_event(self, event: ScoringEvent) -> ScoringOutcome:
        outcome = ScoringOutcome(event=event)
        metrics = get_metrics()

        for name, listener in self._listeners:
            try:
                await listener(event)
            except Exception as e:
                self._record_failure(outcome, event, f"{name}: {e}")

        if event.has_skill:
            for user_id in event.user_ids:
                start = time.perf_counter()
                try:
                    score = await self._skill_calculator.recompute(
                        user_id, event.skill_id, event.skill_name
                    )
                except Exception as e:
                    metrics.record_recompute("skill", success=False)
                    self._record_failure(
                        outcome, event, f"skill score for {user_id}: {e}"
                    )
                    continue
                metrics.record_recompute(
                    "skill", success=True, latency=time.perf_counter() - start
                )
                outcome.skill_scores.append(score)
        else:
            logger.debug("Event %s carries no skill, skipping skill scores", event.kind.value)

        for user_id in event.user_ids:
            start = time.perf_counter()
            try:
                result = await self._credibility.recompute(user_id)
            except Exception as e:
                metrics.record_recompute("credibility", success=False)
                self._record_failure(outcome, event, f"credibility for {user_id}: {e}")
                continue
            metrics.record_recompute(
                "credibility", success=True, latency=time.perf_counter() - start
            )
            outcome.credibility[user_id] = result

        return outcome

    @staticmethod
    def _record_failure(
        outcome: ScoringOutcome, event: ScoringEvent, message: str
    ) -> None:
        logger.error(
            "Scoring step failed after %s (primary action kept): %s",
            event.kind.value,
            message,
        )
        get_metrics().record_side_effect_failure(event.kind.value)
        outcome.errors.append(message)

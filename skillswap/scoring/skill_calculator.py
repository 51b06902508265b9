"""Per-(user, skill) score computation.

Each call re-reads every graded assignment, completed session and
feedback record behind the score and overwrites the stored snapshot.
Nothing is accumulated, so repeated calls with unchanged data produce
the same record apart from ``updated_at``, and concurrent recomputes
converge on the next trigger (last write wins).
"""

import logging
from datetime import datetime, timezone

from skillswap.assignments.repository import AssignmentRepository
from skillswap.feedback.repository import FeedbackRepository
from skillswap.scoring.config import ScoringConfig
from skillswap.scoring.formulas import mean_rescaled, round_half_up, skill_final_score
from skillswap.scoring.repository import SkillScoreRepository
from skillswap.scoring.schemas import SkillScore
from skillswap.sessions.repository import SessionRepository

logger = logging.getLogger(__name__)


class SkillScoreCalculator:
    """Computes and persists SkillScore snapshots.

    Store failures propagate unchanged; callers decide whether a failed
    recompute matters.
    """

    def __init__(
        self,
        scores: SkillScoreRepository,
        assignments: AssignmentRepository,
        sessions: SessionRepository,
        feedback: FeedbackRepository,
        config: ScoringConfig | None = None,
    ) -> None:
        self._scores = scores
        self._assignments = assignments
        self._sessions = sessions
        self._feedback = feedback
        self._config = config or ScoringConfig()

    async def recompute(
        self, user_id: str, skill_id: str, skill_name: str
    ) -> SkillScore:
        """Recompute and upsert the score for one user and skill."""
        graded = await self._assignments.list_graded(user_id, skill_id)
        assignment_avg = mean_rescaled(
            a.final_score for a in graded if a.final_score is not None
        )

        skill_sessions = await self._sessions.list_completed_for_skill(skill_id)
        session_ids = {s.session_id for s in skill_sessions if s.is_participant(user_id)}
        session_count = len(session_ids)

        received = await self._feedback.list_for_recipient(user_id)
        feedback_avg = mean_rescaled(
            f.rating for f in received if f.session_id in session_ids
        )

        final_score = skill_final_score(
            assignment_avg, feedback_avg, session_count, self._config
        )

        score = SkillScore(
            user_id=user_id,
            skill_id=skill_id,
            skill_name=skill_name,
            assignment_avg=round_half_up(assignment_avg),
            feedback_avg=round_half_up(feedback_avg),
            session_count=session_count,
            final_score=final_score,
            updated_at=datetime.now(timezone.utc),
        )
        saved = await self._scores.upsert(score)
        logger.info(
            "Skill score for user=%s skill=%s: %d "
            "(assignments=%.1f feedback=%.1f sessions=%d)",
            user_id,
            skill_id,
            final_score,
            assignment_avg,
            feedback_avg,
            session_count,
        )
        return saved

"""Per-user credibility score.

recompute() folds the user's best skill scores, the ratings they
received while teaching, and a completed-session bonus into one 0-100
value stored on the user profile. get_view() is the dashboard read: it
combines that stored value with live counts and never raises.
"""

import logging
import time
from datetime import datetime, timezone

from skillswap.feedback.repository import FeedbackRepository
from skillswap.observability.metrics import get_metrics
from skillswap.scoring.config import ScoringConfig
from skillswap.scoring.formulas import (
    blend_credibility,
    consistency_bonus,
    credibility_final_score,
    mean_rescaled,
    round_half_up,
    top_average,
)
from skillswap.scoring.repository import SkillScoreRepository
from skillswap.scoring.schemas import (
    RATING_BUCKETS,
    CredibilityResult,
    CredibilityView,
    UpcomingSession,
)
from skillswap.sessions.repository import SessionRepository
from skillswap.sessions.schemas import Session
from skillswap.users.repository import UserRepository
from skillswap.users.schemas import CredibilityStats

logger = logging.getLogger(__name__)

# Shown in place of the viewing user's own name
SELF_NAME = "You"


def _upcoming_entry(session: Session, role: str) -> UpcomingSession:
    if role == "teacher":
        teacher_name, learner_name = SELF_NAME, session.learner_name or "Learner"
    else:
        teacher_name, learner_name = session.teacher_name or "Teacher", SELF_NAME
    return UpcomingSession(
        session_id=session.session_id,
        skill=session.skill_name or "Session",
        role=role,
        teacher_name=teacher_name,
        learner_name=learner_name,
        scheduled_at=session.scheduled_at,
        status=session.status,
    )


def _upcoming_sort_key(entry: UpcomingSession) -> tuple[bool, datetime]:
    # Unscheduled entries sort last
    return (
        entry.scheduled_at is None,
        entry.scheduled_at or datetime.max.replace(tzinfo=timezone.utc),
    )


class CredibilityAggregator:
    """Computes, persists and presents the credibility score."""

    def __init__(
        self,
        users: UserRepository,
        scores: SkillScoreRepository,
        sessions: SessionRepository,
        feedback: FeedbackRepository,
        config: ScoringConfig | None = None,
    ) -> None:
        self._users = users
        self._scores = scores
        self._sessions = sessions
        self._feedback = feedback
        self._config = config or ScoringConfig()

    async def recompute(self, user_id: str) -> CredibilityResult:
        """Recompute and store the user's credibility score.

        Store failures (including a missing user on write) propagate.
        """
        top = await self._scores.top_for_user(user_id, self._config.top_skill_count)
        avg_skill_score = top_average(
            [s.final_score for s in top], self._config.top_skill_count
        )

        # Feedback given by a learner rates this user's teaching
        teaching = await self._feedback.list_for_recipient_by_role(user_id, "learner")
        avg_teaching_rating = (
            mean_rescaled(f.rating for f in teaching) if teaching else None
        )

        session_count = await self._sessions.count_completed_by_role(
            user_id, "teacher"
        ) + await self._sessions.count_completed_by_role(user_id, "learner")
        bonus = consistency_bonus(session_count, self._config.bonus_tiers)

        base = blend_credibility(avg_skill_score, avg_teaching_rating)
        final_score = credibility_final_score(base, bonus)

        stats = CredibilityStats(
            avg_skill_score=round_half_up(avg_skill_score or 0),
            avg_teaching_rating=round_half_up(avg_teaching_rating or 0),
            session_count=session_count,
            consistency_bonus=bonus,
            updated_at=datetime.now(timezone.utc),
        )
        await self._users.update_credibility(user_id, final_score, stats)

        logger.info(
            "Credibility for user=%s: %d (skills=%s teaching=%s sessions=%d bonus=%d)",
            user_id,
            final_score,
            avg_skill_score,
            avg_teaching_rating,
            session_count,
            bonus,
        )
        return CredibilityResult(credibility_score=final_score, stats=stats)

    async def get_view(self, user_id: str) -> CredibilityView:
        """Dashboard view for a user.

        Returns the default (all-zero) view when the user does not exist
        or any read fails; callers always get every field.
        """
        start = time.perf_counter()
        try:
            view = await self._build_view(user_id)
        except Exception as e:
            logger.error("Failed to build credibility view for %s: %s", user_id, e)
            get_metrics().record_recompute("view", success=False)
            return CredibilityView()

        get_metrics().record_recompute(
            "view", success=True, latency=time.perf_counter() - start
        )
        return view

    async def _build_view(self, user_id: str) -> CredibilityView:
        user = await self._users.get_by_id(user_id)
        if user is None:
            logger.info("User %s not found, returning default credibility view", user_id)
            return CredibilityView()

        skills_taught = await self._users.count_skills(user_id, "teach")
        skills_learned = await self._users.count_skills(user_id, "learn")

        received = await self._feedback.list_for_recipient(user_id)
        counts = {stars: 0 for stars in RATING_BUCKETS}
        for fb in received:
            if fb.rating in counts:
                counts[fb.rating] += 1
        total_reviews = len(received)
        avg_rating = (
            sum(fb.rating for fb in received) / total_reviews if total_reviews else 0.0
        )
        breakdown = {
            stars: round_half_up(counts[stars] / total_reviews * 100) if total_reviews else 0
            for stars in RATING_BUCKETS
        }

        taught = await self._sessions.list_completed_by_role(user_id, "teacher")
        learned_count = await self._sessions.count_completed_by_role(user_id, "learner")
        sessions_completed = len(taught) + learned_count

        stored = user.credibility_stats or CredibilityStats()
        return CredibilityView(
            credibility_score=user.credibility_score,
            sessions_completed=sessions_completed,
            students_count=len({s.learner_id for s in taught}),
            # One hour per completed teaching session
            teaching_hours=len(taught),
            avg_rating=round_half_up(avg_rating * 10) / 10,
            rating_breakdown=breakdown,
            skills_taught_count=skills_taught,
            skills_learned_count=skills_learned,
            total_reviews=total_reviews,
            upcoming_sessions=await self._upcoming_sessions(user_id),
            stats=CredibilityStats(
                avg_skill_score=stored.avg_skill_score,
                avg_teaching_rating=stored.avg_teaching_rating,
                session_count=sessions_completed,
                consistency_bonus=stored.consistency_bonus,
                updated_at=stored.updated_at,
            ),
        )

    async def _upcoming_sessions(self, user_id: str) -> list[UpcomingSession]:
        """Soonest scheduled sessions in either role; empty on failure."""
        limit = self._config.upcoming_session_limit
        if limit == 0:
            return []
        try:
            entries = [
                _upcoming_entry(session, role)
                for role in ("teacher", "learner")
                for session in await self._sessions.list_upcoming_by_role(
                    user_id, role, limit
                )
            ]
        except Exception as e:
            logger.error("Failed to load upcoming sessions for %s: %s", user_id, e)
            return []
        entries.sort(key=_upcoming_sort_key)
        return entries[:limit]

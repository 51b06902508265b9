"""Feedback workflow.

Participants rate each other once per completed session. The giver's
role and the recipient are derived from the session, never taken from
the caller. A stored feedback record then triggers scoring for the
recipient.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from skillswap.errors import ConflictError, ForbiddenError, NotFoundError, ValidationError
from skillswap.feedback.config import FeedbackConfig
from skillswap.feedback.repository import FeedbackRepository
from skillswap.feedback.schemas import Feedback
from skillswap.scoring.events import ActionResult, ScoringEvent
from skillswap.sessions.repository import SessionRepository
from skillswap.sessions.schemas import Session

if TYPE_CHECKING:
    from skillswap.scoring.service import ScoringService

logger = logging.getLogger(__name__)


class FeedbackService:
    """Submit and read session feedback."""

    def __init__(
        self,
        repository: FeedbackRepository,
        sessions: SessionRepository,
        scoring: "ScoringService",
        config: FeedbackConfig | None = None,
    ) -> None:
        self._repo = repository
        self._sessions = sessions
        self._scoring = scoring
        self._config = config or FeedbackConfig()

    async def _participant_session(self, session_id: str, user_id: str) -> Session:
        session = await self._sessions.get_by_id(session_id)
        if session is None:
            raise NotFoundError(f"Session {session_id} not found")
        if not session.is_participant(user_id):
            raise ForbiddenError("You are not a participant of this session")
        return session

    async def submit_feedback(
        self,
        session_id: str,
        user_id: str,
        rating: int,
        comment: str = "",
    ) -> ActionResult[Feedback]:
        """Store one participant's rating of the other.

        Raises:
            ValidationError: Rating outside 1-5, or the session is not
                completed.
            NotFoundError: Unknown session.
            ForbiddenError: Caller is not a participant.
            ConflictError: Caller already rated this session.
        """
        if isinstance(rating, bool) or not isinstance(rating, int) or not 1 <= rating <= 5:
            raise ValidationError("Rating must be between 1 and 5")

        session = await self._sessions.get_by_id(session_id)
        if session is None:
            raise NotFoundError(f"Session {session_id} not found")
        if session.status != "completed":
            raise ValidationError(
                "Feedback can only be submitted for completed sessions"
            )
        role = session.role_of(user_id)
        if role is None:
            raise ForbiddenError("You are not a participant of this session")

        if await self._repo.exists_from_user(session_id, user_id):
            raise ConflictError("You have already submitted feedback for this session")

        feedback = await self._repo.create(
            Feedback(
                session_id=session_id,
                from_user_id=user_id,
                to_user_id=session.counterpart_of(user_id),
                role=role,
                rating=rating,
                comment=(comment or "")[: self._config.max_comment_length],
            )
        )
        logger.info(
            "Feedback %s: %s (%s) rated %s %d/5",
            feedback.feedback_id,
            user_id,
            role,
            feedback.to_user_id,
            rating,
        )

        outcome = await self._scoring.on_scoring_event(
            ScoringEvent.feedback_submitted(
                feedback.to_user_id, session.skill_id, session.skill_name
            )
        )
        return ActionResult(value=feedback, scoring=outcome)

    async def get_feedback_for_session(
        self, session_id: str, user_id: str
    ) -> list[Feedback]:
        """All feedback for a session; participants only."""
        await self._participant_session(session_id, user_id)
        return await self._repo.list_for_session(session_id)

    async def get_user_average_rating(self, user_id: str) -> tuple[float, int]:
        """Mean rating received by a user and the number of ratings."""
        received = await self._repo.list_for_recipient(user_id)
        if not received:
            return 0.0, 0
        return sum(f.rating for f in received) / len(received), len(received)

"""Session workflow: creation, scheduling and completion.

Completing a session is one of the three scoring triggers. The status
write happens first; assignment creation and score recomputation
follow as side effects that can fail without undoing the completion.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import TYPE_CHECKING

from skillswap.errors import ForbiddenError, NotFoundError, ValidationError
from skillswap.scoring.events import ActionResult, ScoringEvent
from skillswap.sessions.repository import SessionRepository
from skillswap.sessions.schemas import COMPLETABLE_STATUSES, Session

if TYPE_CHECKING:
    from skillswap.assignments.service import AssignmentService
    from skillswap.scoring.service import ScoringService

logger = logging.getLogger(__name__)


class SessionService:
    """Session lifecycle operations.

    Args:
        repository: Session persistence.
        scoring: Receives the ``session_completed`` event.
        assignments: Creates post-session assignments on completion.
            Optional; without it no assignments are created.
    """

    def __init__(
        self,
        repository: SessionRepository,
        scoring: "ScoringService",
        assignments: "AssignmentService | None" = None,
    ) -> None:
        self._repo = repository
        self._scoring = scoring
        self._assignments = assignments

    async def get_session(self, session_id: str) -> Session:
        session = await self._repo.get_by_id(session_id)
        if session is None:
            raise NotFoundError(f"Session {session_id} not found")
        return session

    async def create_session(
        self,
        *,
        teacher_id: str,
        learner_id: str,
        skill_id: str,
        skill_name: str,
        teacher_name: str = "",
        learner_name: str = "",
        mode: str = "single",
        learner_skill: str | None = None,
    ) -> Session:
        """Create a scheduled session with no start time yet.

        Raises:
            ValidationError: Teacher and learner are the same user, or the
                mode is unknown.
        """
        try:
            session = Session(
                teacher_id=teacher_id,
                learner_id=learner_id,
                skill_id=skill_id,
                skill_name=skill_name,
                teacher_name=teacher_name,
                learner_name=learner_name,
                mode=mode,
                learner_skill=learner_skill if mode == "mutual" else None,
            )
        except ValueError as e:
            raise ValidationError(str(e)) from e

        created = await self._repo.create(session)
        logger.info(
            "Created session %s (%s teaches %s to %s)",
            created.session_id,
            teacher_id,
            skill_name,
            learner_id,
        )
        return created

    async def schedule_session(
        self,
        session_id: str,
        user_id: str,
        scheduled_at: datetime,
    ) -> Session:
        """Set the start time. Only the teacher may do this, and only
        while the session is still scheduled."""
        session = await self.get_session(session_id)
        if session.teacher_id != user_id:
            raise ForbiddenError("Only the teacher can schedule this session")
        if session.status != "scheduled":
            raise ValidationError("Session cannot be rescheduled")

        updated = await self._repo.update_schedule(session_id, scheduled_at)
        if updated is None:
            raise NotFoundError(f"Session {session_id} not found")
        return updated

    async def complete_session(
        self, session_id: str, user_id: str
    ) -> ActionResult[Session]:
        """Mark a session completed and run its side effects.

        Completing an already completed session returns it unchanged
        without triggering scoring again.

        Raises:
            NotFoundError: Unknown session.
            ForbiddenError: Caller is not a participant.
            ValidationError: Session is cancelled.
        """
        session = await self.get_session(session_id)
        if not session.is_participant(user_id):
            raise ForbiddenError("You are not a participant in this session")

        if session.status == "completed":
            logger.info("Session %s already completed", session_id)
            return ActionResult(value=session)

        if session.status not in COMPLETABLE_STATUSES:
            raise ValidationError(
                f"Cannot complete a session with status '{session.status}'"
            )

        completed = await self._repo.mark_completed(
            session_id, datetime.now(timezone.utc)
        )
        if completed is None:
            raise NotFoundError(f"Session {session_id} not found")
        logger.info("Session %s completed by %s", session_id, user_id)

        if self._assignments is not None:
            try:
                await self._assignments.create_assignments_for_session(completed)
            except Exception as e:
                logger.error(
                    "Failed to create assignments for session %s: %s", session_id, e
                )

        outcome = await self._scoring.on_scoring_event(
            ScoringEvent.session_completed(
                completed.teacher_id,
                completed.learner_id,
                completed.skill_id,
                completed.skill_name,
            )
        )
        return ActionResult(value=completed, scoring=outcome)

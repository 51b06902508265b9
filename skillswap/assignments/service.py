"""Assignment workflow: creation after a session, submission, grading.

Grading is one of the three scoring triggers. The grade is written
first; the scoring event (legacy running average, skill score,
credibility) runs afterwards and cannot undo it.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import TYPE_CHECKING

from skillswap.assignments.questions import QuestionGenerator, fallback_questions
from skillswap.assignments.repository import AssignmentRepository
from skillswap.assignments.schemas import MAX_GRADE, MIN_GRADE, Assignment, Question
from skillswap.errors import ForbiddenError, NotFoundError, ValidationError
from skillswap.scoring.events import ActionResult, ScoringEvent
from skillswap.sessions.repository import SessionRepository
from skillswap.sessions.schemas import Session

if TYPE_CHECKING:
    from skillswap.scoring.service import ScoringService

logger = logging.getLogger(__name__)


def _is_grade(value: object) -> bool:
    return (
        isinstance(value, (int, float))
        and not isinstance(value, bool)
        and MIN_GRADE <= value <= MAX_GRADE
    )


class AssignmentService:
    """Creates, submits and grades post-session assignments."""

    def __init__(
        self,
        repository: AssignmentRepository,
        sessions: SessionRepository,
        scoring: "ScoringService",
        generator: QuestionGenerator | None = None,
    ) -> None:
        self._repo = repository
        self._sessions = sessions
        self._scoring = scoring
        self._generator = generator or QuestionGenerator()

    async def get_assignment(self, assignment_id: str) -> Assignment:
        assignment = await self._repo.get_by_id(assignment_id)
        if assignment is None:
            raise NotFoundError("Assignment not found")
        return assignment

    async def view_assignment(self, assignment_id: str, user_id: str) -> Assignment:
        """Read an assignment as its owner or as the session's teacher.

        Raises:
            NotFoundError: Unknown assignment.
            ForbiddenError: Caller is neither the owner nor the grader.
        """
        assignment = await self.get_assignment(assignment_id)
        if assignment.user_id == user_id:
            return assignment
        session = await self._sessions.get_by_id(assignment.session_id)
        if session is not None and session.teacher_id == user_id:
            return assignment
        raise ForbiddenError("You are not allowed to view this assignment")

    async def list_for_user(self, user_id: str) -> list[Assignment]:
        return await self._repo.list_for_user(user_id)

    async def list_for_session(self, session_id: str, user_id: str) -> list[Assignment]:
        """Assignments of a session; participants only."""
        session = await self._sessions.get_by_id(session_id)
        if session is None:
            raise NotFoundError(f"Session {session_id} not found")
        if not session.is_participant(user_id):
            raise ForbiddenError("You are not a participant of this session")
        return await self._repo.list_for_session(session_id)

    async def create_assignment(
        self,
        session: Session,
        user_id: str,
        skill_name: str,
    ) -> Assignment:
        """Create the user's assignment for a session, or return the
        existing one."""
        existing = await self._repo.find_for_session_user(session.session_id, user_id)
        if existing is not None:
            return existing

        try:
            questions = await self._generator.generate(skill_name)
        except Exception as e:
            logger.error("Question generation failed for %r: %s", skill_name, e)
            questions = [
                Question(question_id=f"q{i}", text=text)
                for i, text in enumerate(fallback_questions(skill_name), start=1)
            ]

        assignment = await self._repo.create(
            Assignment(
                session_id=session.session_id,
                user_id=user_id,
                skill_id=session.skill_id,
                skill_name=skill_name,
                questions=questions,
            )
        )
        logger.info(
            "Created assignment %s for user %s (%d questions)",
            assignment.assignment_id,
            user_id,
            len(questions),
        )
        return assignment

    async def create_assignments_for_session(self, session: Session) -> list[Assignment]:
        """Learner always; teacher too in mutual mode, on the skill they
        learned back."""
        created = [
            await self.create_assignment(session, session.learner_id, session.skill_name)
        ]
        if session.mode == "mutual" and session.learner_skill:
            created.append(
                await self.create_assignment(
                    session, session.teacher_id, session.learner_skill
                )
            )
        return created

    async def submit_assignment(
        self,
        assignment_id: str,
        user_id: str,
        answers: dict[str, str],
    ) -> Assignment:
        """Store the owner's answers. Allowed once."""
        assignment = await self.get_assignment(assignment_id)
        if assignment.user_id != user_id:
            raise ForbiddenError("You are not authorized to submit this assignment")
        if assignment.submitted:
            raise ValidationError("Assignment has already been submitted")

        updated = await self._repo.save_submission(
            assignment_id, answers, datetime.now(timezone.utc)
        )
        if updated is None:
            raise NotFoundError("Assignment not found")
        return updated

    async def grade_assignment(
        self,
        assignment_id: str,
        grader_id: str,
        scores: dict[str, float],
        comment: str = "",
    ) -> ActionResult[Assignment]:
        """Grade every question 1-5 and store the mean as the final score.

        Raises:
            NotFoundError: Unknown assignment or session.
            ForbiddenError: Grader is not the session's teacher.
            ValidationError: Not submitted, already graded, or a question
                score is missing or outside 1-5.
        """
        assignment = await self.get_assignment(assignment_id)
        session = await self._sessions.get_by_id(assignment.session_id)
        if session is None:
            raise NotFoundError("Session not found")
        if session.teacher_id != grader_id:
            raise ForbiddenError("Only the teacher can grade this assignment")
        if not assignment.submitted:
            raise ValidationError("Assignment must be submitted before grading")
        if assignment.graded:
            raise ValidationError("Assignment has already been graded")

        for question_id in assignment.question_ids:
            if question_id not in scores:
                raise ValidationError(f"Missing score for question {question_id}")
            if not _is_grade(scores[question_id]):
                raise ValidationError(
                    f"Score for question {question_id} must be between "
                    f"{MIN_GRADE} and {MAX_GRADE}"
                )

        graded_scores = {qid: scores[qid] for qid in assignment.question_ids}
        if not graded_scores:
            raise ValidationError("Assignment has no questions to grade")
        final_score = round(sum(graded_scores.values()) / len(graded_scores), 2)

        graded = await self._repo.save_grade(
            assignment_id,
            graded_by=grader_id,
            graded_at=datetime.now(timezone.utc),
            scores=graded_scores,
            final_score=final_score,
            comment=comment or "",
        )
        if graded is None:
            raise NotFoundError("Assignment not found")
        logger.info("Graded assignment %s with score %.2f", assignment_id, final_score)

        outcome = await self._scoring.on_scoring_event(
            ScoringEvent.assignment_graded(
                graded.user_id, graded.skill_id, graded.skill_name, final_score
            )
        )
        return ActionResult(value=graded, scoring=outcome)

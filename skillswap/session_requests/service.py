"""Session request workflow.

A learner sends a request for one of a teacher's ``teach`` listings.
The teacher accepts or rejects it, the sender may cancel it while it
is pending, and once accepted either participant confirms it with a
learning mode. Confirmation creates the session.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone

from skillswap.errors import ForbiddenError, NotFoundError, ValidationError
from skillswap.session_requests.repository import SessionRequestRepository
from skillswap.session_requests.schemas import SessionRequest
from skillswap.sessions.schemas import VALID_MODES, Session
from skillswap.sessions.service import SessionService
from skillswap.users.repository import UserRepository

logger = logging.getLogger(__name__)


@dataclass
class UserRequests:
    """A user's pending requests, split by direction."""

    incoming: list[SessionRequest]
    outgoing: list[SessionRequest]


@dataclass
class ConfirmedRequest:
    """A confirmed request and the session it created."""

    request: SessionRequest
    session: Session


class SessionRequestService:
    """Request, accept, confirm, reject and cancel.

    Args:
        repository: Request persistence.
        users: Profile and skill listing lookups.
        sessions: Creates the session on confirmation.
    """

    def __init__(
        self,
        repository: SessionRequestRepository,
        users: UserRepository,
        sessions: SessionService,
    ) -> None:
        self._repo = repository
        self._users = users
        self._sessions = sessions

    async def _get(self, request_id: str) -> SessionRequest:
        request = await self._repo.get_by_id(request_id)
        if request is None:
            raise NotFoundError("Request not found")
        return request

    async def get_request(self, request_id: str, user_id: str) -> SessionRequest:
        request = await self._get(request_id)
        if not request.is_participant(user_id):
            raise ForbiddenError("You are not allowed to view this request")
        return request

    async def list_for_user(self, user_id: str) -> UserRequests:
        return UserRequests(
            incoming=await self._repo.list_pending(user_id, "incoming"),
            outgoing=await self._repo.list_pending(user_id, "outgoing"),
        )

    async def send_request(
        self,
        from_user_id: str,
        teacher_id: str,
        skill_id: str,
        message: str = "",
    ) -> SessionRequest:
        """Ask a teacher for a session on one of their teach listings.

        Raises:
            ValidationError: Self-request, or a pending request for the
                same teacher and skill already exists.
            NotFoundError: Unknown sender, teacher or listing.
        """
        if from_user_id == teacher_id:
            raise ValidationError("Cannot send request to yourself")

        sender = await self._users.get_by_id(from_user_id)
        if sender is None:
            raise NotFoundError("User not found")
        teacher = await self._users.get_by_id(teacher_id)
        if teacher is None:
            raise NotFoundError("Teacher not found")
        listing = await self._users.get_skill_listing(teacher_id, skill_id, "teach")
        if listing is None:
            raise NotFoundError("Skill not found")

        if await self._repo.find_pending(from_user_id, teacher_id, skill_id):
            raise ValidationError("You already have a pending request for this skill")

        created = await self._repo.create(
            SessionRequest(
                from_user_id=from_user_id,
                from_user_name=sender.name,
                to_user_id=teacher_id,
                to_user_name=teacher.name,
                skill_id=skill_id,
                skill_name=listing.skill_name,
                message=message or "",
            )
        )
        logger.info(
            "Request %s: %s -> %s for %s",
            created.request_id,
            from_user_id,
            teacher_id,
            skill_id,
        )
        return created

    async def accept(self, request_id: str, user_id: str) -> SessionRequest:
        request = await self._get(request_id)
        if request.to_user_id != user_id:
            raise ForbiddenError("Only the teacher can accept this request")
        if request.status != "pending":
            raise ValidationError("Request is no longer pending")

        accepted = await self._repo.mark_accepted(request_id, datetime.now(timezone.utc))
        if accepted is None:
            raise ValidationError("Request is no longer pending")
        logger.info("Request %s accepted", request_id)
        return accepted

    async def reject(self, request_id: str, user_id: str) -> SessionRequest:
        request = await self._get(request_id)
        if request.to_user_id != user_id:
            raise ForbiddenError("Only the teacher can reject this request")
        if request.status != "pending":
            raise ValidationError("Request is no longer pending")

        rejected = await self._repo.mark_rejected(request_id)
        if rejected is None:
            raise ValidationError("Request is no longer pending")
        logger.info("Request %s rejected", request_id)
        return rejected

    async def cancel(self, request_id: str, user_id: str) -> None:
        """Withdraw a pending request. Only its sender may."""
        request = await self._get(request_id)
        if request.from_user_id != user_id:
            raise ForbiddenError("Only the sender can cancel this request")
        if request.status != "pending" or not await self._repo.delete_pending(request_id):
            raise ValidationError("Request is no longer pending")
        logger.info("Request %s cancelled", request_id)

    async def _resolve_learner_skill(self, learner_id: str, learner_skill: str) -> str:
        """Match a mutual-mode skill against the learner's teach listings
        by id or name and return its display name."""
        wanted = learner_skill.strip().lower()
        for listing in await self._users.list_skills(learner_id, "teach"):
            if wanted in (listing.skill_id.lower(), listing.skill_name.lower()):
                return listing.skill_name
        raise ValidationError("Selected skill is not one the learner can teach")

    async def confirm(
        self,
        request_id: str,
        user_id: str,
        mode: str,
        learner_skill: str | None = None,
    ) -> ConfirmedRequest:
        """Confirm an accepted request and create its session.

        Raises:
            NotFoundError: Unknown request.
            ForbiddenError: Caller is not a participant.
            ValidationError: Not accepted, already confirmed, unknown mode,
                or a mutual-mode skill the learner does not teach.
        """
        request = await self._get(request_id)
        if not request.is_participant(user_id):
            raise ForbiddenError("You are not allowed to confirm this request")
        if request.status != "accepted":
            raise ValidationError("Request must be accepted before confirmation")
        if request.confirmed:
            raise ValidationError("Request is already confirmed")
        if mode not in VALID_MODES:
            raise ValidationError(f"Mode must be one of: {sorted(VALID_MODES)}")

        resolved_skill = None
        if mode == "mutual":
            if not learner_skill:
                raise ValidationError("Learner skill is required for mutual learning")
            resolved_skill = await self._resolve_learner_skill(
                request.from_user_id, learner_skill
            )

        claimed = await self._repo.claim_confirmation(
            request_id, user_id, mode, resolved_skill, datetime.now(timezone.utc)
        )
        if claimed is None:
            raise ValidationError("Request is already confirmed")

        try:
            session = await self._sessions.create_session(
                teacher_id=request.to_user_id,
                learner_id=request.from_user_id,
                skill_id=request.skill_id,
                skill_name=request.skill_name,
                teacher_name=request.to_user_name,
                learner_name=request.from_user_name,
                mode=mode,
                learner_skill=resolved_skill,
            )
        except Exception:
            await self._repo.release_confirmation(request_id)
            raise

        linked = await self._repo.link_session(request_id, session.session_id)
        logger.info(
            "Request %s confirmed by %s (%s), session %s",
            request_id,
            user_id,
            mode,
            session.session_id,
        )
        return ConfirmedRequest(request=linked or claimed, session=session)

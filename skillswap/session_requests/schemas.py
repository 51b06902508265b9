"""Schema definitions for session requests.

Maps 1:1 to the ``session_requests`` table. A request is sent by the
learner to a teacher for one of the teacher's listed skills. Once the
teacher accepts, either participant confirms it with a learning mode,
which creates the session and links it back through ``session_id``.
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Literal

from skillswap.sessions.schemas import VALID_MODES

RequestStatus = Literal["pending", "accepted", "rejected"]

VALID_REQUEST_STATUSES: frozenset[str] = frozenset({"pending", "accepted", "rejected"})


@dataclass
class SessionRequest:
    """A learner's request for a session with a teacher.

    Attributes:
        from_user_id: Learner who sent the request.
        to_user_id: Teacher who receives it.
        skill_id: Teacher's listed skill being requested.
        skill_name: Display name of that skill.
        message: Optional note from the learner.
        status: ``pending``, ``accepted`` or ``rejected``.
        mode: Learning mode chosen at confirmation.
        learner_skill: Skill the learner teaches back (mutual mode only).
        confirmed: Whether the request has been turned into a session.
        session_id: The session created on confirmation.
    """

    from_user_id: str
    to_user_id: str
    skill_id: str
    skill_name: str
    request_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    from_user_name: str = ""
    to_user_name: str = ""
    message: str = ""
    status: str = "pending"
    mode: str | None = None
    learner_skill: str | None = None
    confirmed: bool = False
    confirmed_by: str | None = None
    session_id: str | None = None
    created_at: datetime = field(
        default_factory=lambda: datetime.now(timezone.utc)
    )
    accepted_at: datetime | None = None
    confirmed_at: datetime | None = None

    def __post_init__(self) -> None:
        if self.from_user_id == self.to_user_id:
            raise ValueError("Cannot send a session request to yourself")
        if self.status not in VALID_REQUEST_STATUSES:
            raise ValueError(
                f"Invalid status {self.status!r}. "
                f"Must be one of: {sorted(VALID_REQUEST_STATUSES)}"
            )
        if self.mode is not None and self.mode not in VALID_MODES:
            raise ValueError(
                f"Invalid mode {self.mode!r}. Must be one of: {sorted(VALID_MODES)}"
            )

    def is_participant(self, user_id: str) -> bool:
        return user_id in (self.from_user_id, self.to_user_id)

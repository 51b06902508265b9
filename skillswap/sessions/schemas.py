"""Schema definitions for tutoring sessions.

Maps 1:1 to the ``sessions`` table. A session pairs one teacher with one
learner for a single skill; in ``mutual`` mode the learner teaches a
second skill (``learner_skill``) back.
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Literal

SessionStatus = Literal["scheduled", "ongoing", "completed", "cancelled"]
SessionRole = Literal["teacher", "learner"]

VALID_STATUSES: frozenset[str] = frozenset({
    "scheduled",
    "ongoing",
    "completed",
    "cancelled",
})

VALID_MODES: frozenset[str] = frozenset({"single", "mutual"})

VALID_ROLES: frozenset[str] = frozenset({"teacher", "learner"})

# Statuses from which a session may be marked completed
COMPLETABLE_STATUSES: frozenset[str] = frozenset({"scheduled", "ongoing"})


@dataclass
class Session:
    """A tutoring session between a teacher and a learner.

    Attributes:
        teacher_id: User teaching the skill.
        learner_id: User learning the skill. Never equal to teacher_id.
        skill_id: Skill being taught.
        skill_name: Display name of the skill.
        session_id: UUID4 identifier.
        mode: ``single`` or ``mutual`` learning.
        learner_skill: Skill the learner teaches back (mutual mode only).
        status: Lifecycle status.
        scheduled_at: Agreed start time, set by the teacher.
        completed_at: When the session was marked completed.
    """

    teacher_id: str
    learner_id: str
    skill_id: str
    skill_name: str
    session_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    teacher_name: str = ""
    learner_name: str = ""
    mode: str = "single"
    learner_skill: str | None = None
    status: str = "scheduled"
    scheduled_at: datetime | None = None
    completed_at: datetime | None = None
    created_at: datetime = field(
        default_factory=lambda: datetime.now(timezone.utc)
    )

    def __post_init__(self) -> None:
        if self.teacher_id == self.learner_id:
            raise ValueError(
                "A user cannot be both teacher and learner in the same session"
            )
        if self.status not in VALID_STATUSES:
            raise ValueError(
                f"Invalid status {self.status!r}. "
                f"Must be one of: {sorted(VALID_STATUSES)}"
            )
        if self.mode not in VALID_MODES:
            raise ValueError(
                f"Invalid mode {self.mode!r}. Must be one of: {sorted(VALID_MODES)}"
            )

    def is_participant(self, user_id: str) -> bool:
        return user_id in (self.teacher_id, self.learner_id)

    def role_of(self, user_id: str) -> str | None:
        """Return ``teacher``, ``learner`` or None for a non-participant."""
        if user_id == self.teacher_id:
            return "teacher"
        if user_id == self.learner_id:
            return "learner"
        return None

    def counterpart_of(self, user_id: str) -> str:
        """Return the other participant's id."""
        return self.learner_id if user_id == self.teacher_id else self.teacher_id

"""Schema definitions for session feedback records.

Maps 1:1 to the ``feedback`` table. Each record is one participant's
1-5 rating of the other participant after a completed session.
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone

from skillswap.sessions.schemas import VALID_ROLES


@dataclass
class Feedback:
    """A persisted feedback record from the feedback table.

    Attributes:
        session_id: Session the feedback refers to.
        from_user_id: Participant giving the feedback.
        to_user_id: Participant receiving the feedback.
        role: The giver's role in the session (teacher or learner).
            Feedback given by a ``learner`` rates the recipient's teaching.
        rating: Score from 1 (poor) to 5 (excellent).
        feedback_id: UUID4 identifier.
        comment: Optional free-text comment.
        created_at: When the feedback was submitted.
    """

    session_id: str
    from_user_id: str
    to_user_id: str
    role: str
    rating: int
    feedback_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    comment: str = ""
    created_at: datetime = field(
        default_factory=lambda: datetime.now(timezone.utc)
    )

    def __post_init__(self) -> None:
        if self.role not in VALID_ROLES:
            raise ValueError(
                f"Invalid role {self.role!r}. Must be one of: {sorted(VALID_ROLES)}"
            )
        if not (1 <= self.rating <= 5):
            raise ValueError(
                f"Invalid rating {self.rating}. Must be between 1 and 5."
            )

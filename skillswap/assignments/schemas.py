"""Schema definitions for post-session assignments.

Maps 1:1 to the ``assignments`` table. An assignment is created for a
participant when a session completes, answered by that participant, and
graded 1-5 per question by the session's teacher.
"""

import uuid
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any

MIN_GRADE = 1
MAX_GRADE = 5


@dataclass
class Question:
    """One assignment question."""

    question_id: str
    text: str
    type: str = "text"

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Question":
        return cls(
            question_id=data["question_id"],
            text=data["text"],
            type=data.get("type", "text"),
        )


@dataclass
class Assignment:
    """A post-session assignment.

    Attributes:
        session_id: Session the assignment follows.
        user_id: Participant who must complete it.
        skill_id: Skill the assignment exercises.
        skill_name: Display name of that skill.
        questions: Generated questions.
        answers: Question id -> answer text, filled on submission.
        scores: Question id -> 1-5 grade, filled on grading.
        final_score: Mean of ``scores`` (1-5, 2 decimals) once graded.
    """

    session_id: str
    user_id: str
    skill_id: str
    skill_name: str
    questions: list[Question] = field(default_factory=list)
    assignment_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    answers: dict[str, str] = field(default_factory=dict)
    submitted: bool = False
    submitted_at: datetime | None = None
    graded: bool = False
    graded_by: str | None = None
    graded_at: datetime | None = None
    scores: dict[str, float] = field(default_factory=dict)
    final_score: float | None = None
    grader_comment: str = ""
    created_at: datetime = field(
        default_factory=lambda: datetime.now(timezone.utc)
    )

    def __post_init__(self) -> None:
        if self.final_score is not None and not (
            MIN_GRADE <= self.final_score <= MAX_GRADE
        ):
            raise ValueError(
                f"Invalid final_score {self.final_score}. "
                f"Must be between {MIN_GRADE} and {MAX_GRADE}."
            )

    @property
    def question_ids(self) -> list[str]:
        return [q.question_id for q in self.questions]

"""Session feedback: participants' 1-5 ratings of each other.

Components:
- Feedback: Dataclass mapping to the feedback table
- FeedbackConfig: Pydantic settings for feedback constraints
- FeedbackRepository: persistence and recipient-scoped reads
- FeedbackService (skillswap.feedback.service): submission workflow
"""

from skillswap.feedback.config import FeedbackConfig
from skillswap.feedback.repository import FeedbackRepository
from skillswap.feedback.schemas import Feedback

__all__ = [
    "Feedback",
    "FeedbackConfig",
    "FeedbackRepository",
]

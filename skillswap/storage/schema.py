"""Creates every table the application uses."""

import logging

from skillswap.assignments.repository import AssignmentRepository
from skillswap.feedback.repository import FeedbackRepository
from skillswap.scoring.repository import SkillScoreRepository, UserSkillScoreRepository
from skillswap.session_requests.repository import SessionRequestRepository
from skillswap.sessions.repository import SessionRepository
from skillswap.storage.database import Database
from skillswap.users.repository import UserRepository

logger = logging.getLogger(__name__)


async def create_all_tables(db: Database) -> None:
    """Run each repository's idempotent DDL, users first."""
    for repo in (
        UserRepository(db),
        SessionRepository(db),
        SessionRequestRepository(db),
        FeedbackRepository(db),
        AssignmentRepository(db),
        SkillScoreRepository(db),
        UserSkillScoreRepository(db),
    ):
        await repo.create_table()
    logger.info("All tables ensured")

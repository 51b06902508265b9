"""
Dependency injection for FastAPI endpoints.
"""

import redis.asyncio as redis
from fastapi import Depends

from skillswap.assignments.cache import build_question_cache
from skillswap.assignments.config import AssignmentConfig
from skillswap.assignments.questions import QuestionGenerator
from skillswap.assignments.repository import AssignmentRepository
from skillswap.assignments.service import AssignmentService
from skillswap.config.settings import get_settings
from skillswap.feedback.config import FeedbackConfig
from skillswap.feedback.repository import FeedbackRepository
from skillswap.feedback.service import FeedbackService
from skillswap.scoring.config import ScoringConfig
from skillswap.scoring.service import ScoringService
from skillswap.session_requests.repository import SessionRequestRepository
from skillswap.session_requests.service import SessionRequestService
from skillswap.sessions.repository import SessionRepository
from skillswap.sessions.service import SessionService
from skillswap.storage import database as storage
from skillswap.storage.database import Database
from skillswap.users.repository import UserRepository
from skillswap.users.service import UserService

# Global instances (initialized on first request)
_redis_client: redis.Redis | None = None
_question_generator: QuestionGenerator | None = None
_scoring_config: ScoringConfig | None = None


def _get_redis() -> redis.Redis:
    global _redis_client

    if _redis_client is None:
        settings = get_settings()
        _redis_client = redis.from_url(
            str(settings.redis_url),
            encoding="utf-8",
            decode_responses=True,
        )
    return _redis_client


async def get_database() -> Database:
    """Get the shared database, connecting on first use."""
    return await storage.get_database()


async def get_redis_client() -> redis.Redis:
    return _get_redis()


async def get_question_generator() -> QuestionGenerator:
    """
    Get question generator instance.

    The question cache is created once here and injected, so every
    request shares it for the life of the process.
    """
    global _question_generator

    if _question_generator is None:
        config = AssignmentConfig()
        redis_client = _get_redis() if config.cache_backend == "redis" else None
        _question_generator = QuestionGenerator(
            config=config,
            cache=build_question_cache(config, redis_client),
        )

    return _question_generator


async def get_scoring_service(db: Database = Depends(get_database)) -> ScoringService:
    global _scoring_config

    if _scoring_config is None:
        _scoring_config = ScoringConfig()
    return ScoringService.from_database(db, _scoring_config)


async def get_assignment_service(
    db: Database = Depends(get_database),
    scoring: ScoringService = Depends(get_scoring_service),
    generator: QuestionGenerator = Depends(get_question_generator),
) -> AssignmentService:
    return AssignmentService(
        repository=AssignmentRepository(db),
        sessions=SessionRepository(db),
        scoring=scoring,
        generator=generator,
    )


async def get_session_service(
    db: Database = Depends(get_database),
    scoring: ScoringService = Depends(get_scoring_service),
    assignments: AssignmentService = Depends(get_assignment_service),
) -> SessionService:
    return SessionService(
        repository=SessionRepository(db),
        scoring=scoring,
        assignments=assignments,
    )


async def get_feedback_service(
    db: Database = Depends(get_database),
    scoring: ScoringService = Depends(get_scoring_service),
) -> FeedbackService:
    return FeedbackService(
        repository=FeedbackRepository(db),
        sessions=SessionRepository(db),
        scoring=scoring,
        config=FeedbackConfig(),
    )


async def get_user_service(db: Database = Depends(get_database)) -> UserService:
    return UserService(UserRepository(db))


async def get_session_request_service(
    db: Database = Depends(get_database),
    sessions: SessionService = Depends(get_session_service),
) -> SessionRequestService:
    return SessionRequestService(
        repository=SessionRequestRepository(db),
        users=UserRepository(db),
        sessions=sessions,
    )


async def cleanup_dependencies() -> None:
    """Clean up global dependencies on shutdown."""
    global _redis_client, _question_generator, _scoring_config

    if _question_generator is not None:
        await _question_generator.close()
        _question_generator = None

    await storage.close_database()

    if _redis_client is not None:
        await _redis_client.aclose()
        _redis_client = None

    _scoring_config = None

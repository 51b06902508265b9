"""Post-session assignments and question generation.

Components:
- Assignment / Question: Dataclasses mapping to the assignments table
- AssignmentConfig: Pydantic settings (question API, cache backend)
- AssignmentRepository: persistence
- QuestionGenerator: generative-text API client with static fallback
- MemoryQuestionCache / RedisQuestionCache / NullQuestionCache
- AssignmentService (skillswap.assignments.service): grading workflow
"""

from skillswap.assignments.cache import (
    MemoryQuestionCache,
    NullQuestionCache,
    QuestionCache,
    RedisQuestionCache,
    build_question_cache,
    normalize_skill_key,
)
from skillswap.assignments.config import AssignmentConfig
from skillswap.assignments.questions import QuestionGenerator
from skillswap.assignments.repository import AssignmentRepository
from skillswap.assignments.schemas import Assignment, Question

__all__ = [
    "Assignment",
    "AssignmentConfig",
    "AssignmentRepository",
    "MemoryQuestionCache",
    "NullQuestionCache",
    "Question",
    "QuestionCache",
    "QuestionGenerator",
    "RedisQuestionCache",
    "build_question_cache",
    "normalize_skill_key",
]

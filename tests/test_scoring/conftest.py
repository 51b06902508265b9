"""Pytest fixtures for scoring tests."""

from unittest.mock import AsyncMock

import pytest

from skillswap.scoring.config import ScoringConfig
from skillswap.scoring.credibility import CredibilityAggregator
from skillswap.scoring.skill_calculator import SkillScoreCalculator
from skillswap.users.schemas import User


@pytest.fixture
def scoring_config() -> ScoringConfig:
    return ScoringConfig()


@pytest.fixture
def score_repo():
    """Mock SkillScoreRepository whose upsert echoes its input."""
    repo = AsyncMock()
    repo.upsert = AsyncMock(side_effect=lambda score: score)
    repo.get = AsyncMock(return_value=None)
    repo.list_for_user = AsyncMock(return_value=[])
    repo.top_for_user = AsyncMock(return_value=[])
    return repo


@pytest.fixture
def assignment_repo():
    repo = AsyncMock()
    repo.list_graded = AsyncMock(return_value=[])
    return repo


@pytest.fixture
def session_repo():
    repo = AsyncMock()
    repo.list_completed_for_skill = AsyncMock(return_value=[])
    repo.list_completed_by_role = AsyncMock(return_value=[])
    repo.count_completed_by_role = AsyncMock(return_value=0)
    repo.list_upcoming_by_role = AsyncMock(return_value=[])
    return repo


@pytest.fixture
def feedback_repo():
    repo = AsyncMock()
    repo.list_for_recipient = AsyncMock(return_value=[])
    repo.list_for_recipient_by_role = AsyncMock(return_value=[])
    return repo


@pytest.fixture
def user_repo():
    repo = AsyncMock()
    repo.get_by_id = AsyncMock(
        return_value=User(name="Tina", email="tina@example.com", user_id="teacher_1")
    )
    repo.update_credibility = AsyncMock()
    repo.count_skills = AsyncMock(return_value=0)
    return repo


@pytest.fixture
def calculator(score_repo, assignment_repo, session_repo, feedback_repo, scoring_config):
    return SkillScoreCalculator(
        scores=score_repo,
        assignments=assignment_repo,
        sessions=session_repo,
        feedback=feedback_repo,
        config=scoring_config,
    )


@pytest.fixture
def aggregator(user_repo, score_repo, session_repo, feedback_repo, scoring_config):
    return CredibilityAggregator(
        users=user_repo,
        scores=score_repo,
        sessions=session_repo,
        feedback=feedback_repo,
        config=scoring_config,
    )

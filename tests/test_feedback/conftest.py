"""Shared fixtures for feedback tests."""

from unittest.mock import AsyncMock

import pytest

from factories import make_session
from skillswap.feedback.config import FeedbackConfig
from skillswap.feedback.service import FeedbackService


@pytest.fixture
def feedback_repo():
    repo = AsyncMock()
    repo.exists_from_user = AsyncMock(return_value=False)
    repo.create = AsyncMock(side_effect=lambda feedback: feedback)
    repo.list_for_session = AsyncMock(return_value=[])
    repo.list_for_recipient = AsyncMock(return_value=[])
    return repo


@pytest.fixture
def session_repo():
    repo = AsyncMock()
    repo.get_by_id = AsyncMock(return_value=make_session())
    return repo


@pytest.fixture
def feedback_service(feedback_repo, session_repo, mock_scoring):
    return FeedbackService(
        feedback_repo, session_repo, mock_scoring, FeedbackConfig(max_comment_length=10)
    )

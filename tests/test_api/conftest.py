"""Shared fixtures for API tests."""

from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from skillswap.api.app import create_app
from skillswap.api.auth import verify_api_key
from skillswap.api.dependencies import (
    get_assignment_service,
    get_feedback_service,
    get_scoring_service,
    get_session_request_service,
    get_session_service,
    get_user_service,
)


@pytest.fixture
def mock_scoring_service():
    """Mock ScoringService."""
    service = AsyncMock()
    service.get_skill_scores_for_user = AsyncMock(return_value=[])
    service.get_skill_score = AsyncMock(return_value=None)
    return service


@pytest.fixture
def mock_session_service():
    return AsyncMock()


@pytest.fixture
def mock_feedback_service():
    return AsyncMock()


@pytest.fixture
def mock_assignment_service():
    return AsyncMock()


@pytest.fixture
def mock_user_service():
    return AsyncMock()


@pytest.fixture
def mock_request_service():
    return AsyncMock()


@pytest.fixture
def client(
    mock_scoring_service,
    mock_session_service,
    mock_feedback_service,
    mock_assignment_service,
    mock_user_service,
    mock_request_service,
):
    """FastAPI TestClient with dependency overrides."""
    app = create_app()

    app.dependency_overrides[verify_api_key] = lambda: "test-key"
    app.dependency_overrides[get_scoring_service] = lambda: mock_scoring_service
    app.dependency_overrides[get_session_service] = lambda: mock_session_service
    app.dependency_overrides[get_feedback_service] = lambda: mock_feedback_service
    app.dependency_overrides[get_assignment_service] = lambda: mock_assignment_service
    app.dependency_overrides[get_user_service] = lambda: mock_user_service
    app.dependency_overrides[get_session_request_service] = lambda: mock_request_service

    with TestClient(app, raise_server_exceptions=False) as c:
        yield c

    app.dependency_overrides.clear()

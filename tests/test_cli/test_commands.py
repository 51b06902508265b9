"""Tests for the skillswap CLI commands."""

from unittest.mock import AsyncMock, patch

import pytest
from click.testing import CliRunner

from factories import make_listing, make_skill_score, make_user
from skillswap.cli import main
from skillswap.errors import ConflictError
from skillswap.scoring.schemas import CredibilityResult, CredibilityView
from skillswap.users.schemas import CredibilityStats


@pytest.fixture
def runner():
    with patch("skillswap.cli.setup_logging"):
        yield CliRunner()


@pytest.fixture
def mock_db():
    db = AsyncMock()
    db.__aenter__.return_value = db
    return db


@pytest.fixture
def scoring():
    return AsyncMock()


@pytest.fixture
def patched(mock_db, scoring):
    with patch("skillswap.storage.database.Database", return_value=mock_db), patch(
        "skillswap.scoring.service.ScoringService.from_database", return_value=scoring
    ):
        yield


class TestScoreCommands:
    """Tests for the recompute and show commands."""

    def test_recompute_skill(self, runner, scoring, patched):
        scoring.recompute_skill_score.return_value = make_skill_score(
            user_id="learner_1", final_score=84, assignment_avg=90,
            feedback_avg=80, session_count=6,
        )

        result = runner.invoke(
            main, ["recompute-skill", "learner_1", "skill_guitar", "Guitar"]
        )

        assert result.exit_code == 0, result.output
        assert "Skill score for learner_1 / Guitar: 84" in result.output
        assert "sessions:    6" in result.output
        scoring.recompute_skill_score.assert_awaited_once_with(
            "learner_1", "skill_guitar", "Guitar"
        )

    def test_recompute_credibility(self, runner, scoring, patched):
        scoring.recompute_credibility_score.return_value = CredibilityResult(
            credibility_score=82,
            stats=CredibilityStats(avg_skill_score=80, avg_teaching_rating=80,
                                   session_count=5, consistency_bonus=2),
        )

        result = runner.invoke(main, ["recompute-credibility", "teacher_1"])

        assert result.exit_code == 0, result.output
        assert "Credibility for teacher_1: 82" in result.output
        assert "consistency bonus:   +2" in result.output

    def test_recompute_failure_exits_nonzero(self, runner, scoring, patched):
        scoring.recompute_credibility_score.side_effect = ConnectionError("db down")

        result = runner.invoke(main, ["recompute-credibility", "teacher_1"])

        assert result.exit_code != 0

    def test_show_credibility_defaults(self, runner, scoring, patched):
        scoring.get_credibility.return_value = CredibilityView()

        result = runner.invoke(main, ["show-credibility", "ghost"])

        assert result.exit_code == 0, result.output
        assert "Credibility: 0" in result.output
        assert "upcoming" not in result.output


class TestInitDb:
    """Tests for the init-db command."""

    def test_creates_tables(self, runner, mock_db):
        with patch("skillswap.storage.database.Database", return_value=mock_db):
            result = runner.invoke(main, ["init-db"])

        assert result.exit_code == 0, result.output
        assert "initialized" in result.output
        executed = " ".join(call.args[0] for call in mock_db.execute.call_args_list)
        for table in ("users", "sessions", "session_requests", "feedback",
                      "assignments", "skill_scores", "user_skill_scores"):
            assert f"CREATE TABLE IF NOT EXISTS {table}" in executed


class TestCreateUser:
    """Tests for the create-user command."""

    @pytest.fixture
    def users(self, mock_db):
        service = AsyncMock()
        service.register.return_value = make_user("u_new", "Nia", email="nia@x.io")
        service.add_skill.side_effect = lambda user_id, skill, kind: make_listing(
            user_id, skill.lower(), skill, kind
        )
        with patch("skillswap.storage.database.Database", return_value=mock_db), patch(
            "skillswap.users.service.UserService", return_value=service
        ):
            yield service

    def test_registers_with_listings(self, runner, users):
        result = runner.invoke(
            main,
            ["create-user", "Nia", "nia@x.io", "--teach", "Guitar", "--learn", "Piano"],
        )

        assert result.exit_code == 0, result.output
        assert "Created user u_new (nia@x.io)" in result.output
        assert "teach: Guitar [guitar]" in result.output
        assert "learn: Piano [piano]" in result.output
        users.register.assert_awaited_once_with("Nia", "nia@x.io")

    def test_duplicate_email_exits_nonzero(self, runner, users):
        users.register.side_effect = ConflictError("Email is already registered")

        result = runner.invoke(main, ["create-user", "Nia", "nia@x.io"])

        assert result.exit_code == 1
        assert "Email is already registered" in result.output
        users.add_skill.assert_not_awaited()

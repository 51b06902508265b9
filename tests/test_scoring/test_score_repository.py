"""Tests for the score repositories against a mocked Database."""

import pytest

from factories import T0, make_skill_score
from skillswap.scoring.repository import SkillScoreRepository, UserSkillScoreRepository
from skillswap.scoring.schemas import UserSkillScore


def _score_row(**overrides):
    row = {
        "user_id": "teacher_1",
        "skill_id": "skill_guitar",
        "skill_name": "Guitar",
        "assignment_avg": 90,
        "feedback_avg": 80,
        "session_count": 6,
        "final_score": 84,
        "updated_at": T0,
    }
    row.update(overrides)
    return row


class TestSkillScoreRepository:
    """Tests for SkillScoreRepository."""

    @pytest.mark.asyncio
    async def test_create_table(self, mock_database):
        await SkillScoreRepository(mock_database).create_table()

        sql = mock_database.execute.call_args[0][0]
        assert "CREATE TABLE IF NOT EXISTS skill_scores" in sql
        assert "CHECK (final_score BETWEEN 0 AND 100)" in sql

    @pytest.mark.asyncio
    async def test_upsert_keys_on_user_and_skill(self, mock_database):
        mock_database.fetchrow.return_value = _score_row()
        repo = SkillScoreRepository(mock_database)

        saved = await repo.upsert(make_skill_score(final_score=84))

        sql, *args = mock_database.fetchrow.call_args[0]
        assert "ON CONFLICT (user_id, skill_id) DO UPDATE" in sql
        assert args[:2] == ["teacher_1", "skill_guitar"]
        assert saved.final_score == 84
        assert saved.session_count == 6

    @pytest.mark.asyncio
    async def test_get_missing_returns_none(self, mock_database):
        mock_database.fetchrow.return_value = None

        assert await SkillScoreRepository(mock_database).get("u", "s") is None
        sql, *args = mock_database.fetchrow.call_args[0]
        assert "WHERE user_id = $1 AND skill_id = $2" in sql
        assert args == ["u", "s"]

    @pytest.mark.asyncio
    async def test_underscored_ids_stay_distinct(self, mock_database):
        """("alice_smith", "guitar") and ("alice", "smith_guitar") are separate rows."""
        mock_database.fetchrow.return_value = _score_row()
        repo = SkillScoreRepository(mock_database)

        await repo.upsert(make_skill_score(user_id="alice_smith", skill_id="guitar"))
        await repo.upsert(make_skill_score(user_id="alice", skill_id="smith_guitar"))

        keys = [tuple(call.args[1:3]) for call in mock_database.fetchrow.call_args_list]
        assert keys == [("alice_smith", "guitar"), ("alice", "smith_guitar")]

    @pytest.mark.asyncio
    async def test_create_table_keys_on_user_and_skill(self, mock_database):
        await SkillScoreRepository(mock_database).create_table()

        sql = mock_database.execute.call_args[0][0]
        assert "PRIMARY KEY (user_id, skill_id)" in sql
        assert "score_id" not in sql

    @pytest.mark.asyncio
    async def test_list_for_user(self, mock_database):
        mock_database.fetch.return_value = [
            _score_row(skill_id="a", final_score=90),
            _score_row(skill_id="b", final_score=60),
        ]

        scores = await SkillScoreRepository(mock_database).list_for_user("teacher_1")

        assert [s.skill_id for s in scores] == ["a", "b"]
        assert "ORDER BY final_score DESC" in mock_database.fetch.call_args[0][0]

    @pytest.mark.asyncio
    async def test_top_for_user_passes_limit(self, mock_database):
        await SkillScoreRepository(mock_database).top_for_user("teacher_1", 3)

        sql, user_id, limit = mock_database.fetch.call_args[0]
        assert "LIMIT $2" in sql
        assert (user_id, limit) == ("teacher_1", 3)


class TestUserSkillScoreRepository:
    """Tests for the legacy score repository."""

    @pytest.mark.asyncio
    async def test_get_or_create_returns_unsaved_zero(self, mock_database):
        mock_database.fetchrow.return_value = None
        repo = UserSkillScoreRepository(mock_database)

        record = await repo.get_or_create("learner_1", "skill_guitar", "Guitar")

        assert record.score == 0.0
        assert record.sessions == 0
        mock_database.execute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_save_upserts(self, mock_database):
        mock_database.fetchrow.return_value = {
            "user_id": "learner_1",
            "skill_id": "skill_guitar",
            "skill_name": "Guitar",
            "score": 86.67,
            "sessions": 3,
            "last_updated": T0,
        }
        repo = UserSkillScoreRepository(mock_database)

        saved = await repo.save(
            UserSkillScore(
                user_id="learner_1", skill_id="skill_guitar", skill_name="Guitar",
                score=86.67, sessions=3,
            )
        )

        assert "ON CONFLICT (user_id, skill_id)" in mock_database.fetchrow.call_args[0][0]
        assert saved.score == 86.67
        assert saved.sessions == 3

    @pytest.mark.asyncio
    async def test_list_for_user_highest_first(self, mock_database):
        mock_database.fetch.return_value = [
            {
                "user_id": "learner_1",
                "skill_id": "skill_guitar",
                "skill_name": "Guitar",
                "score": 86.67,
                "sessions": 3,
                "last_updated": T0,
            }
        ]

        records = await UserSkillScoreRepository(mock_database).list_for_user("learner_1")

        sql, user_id = mock_database.fetch.call_args[0]
        assert "ORDER BY score DESC" in sql
        assert user_id == "learner_1"
        assert records[0].sessions == 3

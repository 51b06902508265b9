"""Tests for SessionRequestRepository against a mocked Database."""

import pytest

from factories import T0, make_request
from skillswap.session_requests.repository import SessionRequestRepository


def _request_row(**overrides):
    row = {
        "request_id": "req_1",
        "from_user_id": "learner_1",
        "from_user_name": "Leo",
        "to_user_id": "teacher_1",
        "to_user_name": "Tina",
        "skill_id": "skill_guitar",
        "skill_name": "Guitar",
        "message": "",
        "status": "pending",
        "mode": None,
        "learner_skill": None,
        "confirmed": False,
        "confirmed_by": None,
        "session_id": None,
        "created_at": T0,
        "accepted_at": None,
        "confirmed_at": None,
    }
    row.update(overrides)
    return row


class TestSessionRequestRepository:
    """Tests for SessionRequestRepository."""

    @pytest.mark.asyncio
    async def test_create_table_has_pending_unique_index(self, mock_database):
        await SessionRequestRepository(mock_database).create_table()

        ddl = mock_database.execute.call_args[0][0]
        assert "CREATE TABLE IF NOT EXISTS session_requests" in ddl
        assert "WHERE status = 'pending'" in ddl

    @pytest.mark.asyncio
    async def test_create(self, mock_database):
        mock_database.fetchrow.return_value = _request_row(message="hi")

        created = await SessionRequestRepository(mock_database).create(
            make_request(message="hi")
        )

        args = mock_database.fetchrow.call_args[0]
        assert args[1:3] == ("req_1", "learner_1")
        assert created.message == "hi"

    @pytest.mark.asyncio
    async def test_get_missing(self, mock_database):
        mock_database.fetchrow.return_value = None

        assert await SessionRequestRepository(mock_database).get_by_id("x") is None

    @pytest.mark.asyncio
    async def test_list_incoming_filters_recipient(self, mock_database):
        mock_database.fetch.return_value = [_request_row()]

        requests = await SessionRequestRepository(mock_database).list_pending(
            "teacher_1", "incoming"
        )

        sql = mock_database.fetch.call_args[0][0]
        assert "to_user_id = $1" in sql
        assert "ORDER BY created_at DESC" in sql
        assert requests[0].request_id == "req_1"

    @pytest.mark.asyncio
    async def test_list_outgoing_filters_sender(self, mock_database):
        await SessionRequestRepository(mock_database).list_pending("learner_1", "outgoing")

        assert "from_user_id = $1" in mock_database.fetch.call_args[0][0]

    @pytest.mark.asyncio
    async def test_list_invalid_direction(self, mock_database):
        with pytest.raises(ValueError):
            await SessionRequestRepository(mock_database).list_pending("u", "sideways")

    @pytest.mark.asyncio
    async def test_mark_accepted_is_conditional(self, mock_database):
        mock_database.fetchrow.return_value = _request_row(status="accepted", accepted_at=T0)

        accepted = await SessionRequestRepository(mock_database).mark_accepted("req_1", T0)

        assert "AND status = 'pending'" in mock_database.fetchrow.call_args[0][0]
        assert accepted.status == "accepted"

    @pytest.mark.asyncio
    async def test_mark_accepted_lost_race(self, mock_database):
        mock_database.fetchrow.return_value = None

        assert await SessionRequestRepository(mock_database).mark_accepted("req_1", T0) is None

    @pytest.mark.asyncio
    async def test_claim_confirmation_requires_unconfirmed(self, mock_database):
        mock_database.fetchrow.return_value = _request_row(
            status="accepted", confirmed=True, mode="single", confirmed_by="learner_1"
        )

        claimed = await SessionRequestRepository(mock_database).claim_confirmation(
            "req_1", "learner_1", "single", None, T0
        )

        sql, *args = mock_database.fetchrow.call_args[0]
        assert "status = 'accepted' AND confirmed = FALSE" in sql
        assert args == ["req_1", "learner_1", "single", None, T0]
        assert claimed.confirmed is True

    @pytest.mark.asyncio
    async def test_release_only_unlinked(self, mock_database):
        await SessionRequestRepository(mock_database).release_confirmation("req_1")

        assert "session_id IS NULL" in mock_database.execute.call_args[0][0]

    @pytest.mark.asyncio
    async def test_delete_pending(self, mock_database):
        mock_database.execute.return_value = "DELETE 0"

        deleted = await SessionRequestRepository(mock_database).delete_pending("req_1")

        assert deleted is False

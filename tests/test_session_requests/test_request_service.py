"""Tests for SessionRequestService."""

from unittest.mock import AsyncMock

import pytest

from factories import make_listing, make_request, make_session, make_user
from skillswap.errors import ForbiddenError, NotFoundError, ValidationError
from skillswap.session_requests.service import SessionRequestService


def _users_by_id(user_id):
    names = {"learner_1": "Leo", "teacher_1": "Tina"}
    return make_user(user_id, names[user_id]) if user_id in names else None


@pytest.fixture
def request_repo():
    repo = AsyncMock()
    repo.get_by_id = AsyncMock(return_value=make_request())
    repo.find_pending = AsyncMock(return_value=None)
    repo.create = AsyncMock(side_effect=lambda request: request)
    repo.mark_accepted = AsyncMock(
        side_effect=lambda request_id, accepted_at: make_request(
            status="accepted", accepted_at=accepted_at
        )
    )
    repo.mark_rejected = AsyncMock(return_value=make_request(status="rejected"))
    repo.claim_confirmation = AsyncMock(
        side_effect=lambda request_id, user_id, mode, learner_skill, at: make_request(
            status="accepted",
            confirmed=True,
            confirmed_by=user_id,
            mode=mode,
            learner_skill=learner_skill,
        )
    )
    repo.link_session = AsyncMock(
        side_effect=lambda request_id, session_id: make_request(
            status="accepted", confirmed=True, mode="single", session_id=session_id
        )
    )
    repo.delete_pending = AsyncMock(return_value=True)
    return repo


@pytest.fixture
def user_repo():
    repo = AsyncMock()
    repo.get_by_id = AsyncMock(side_effect=_users_by_id)
    repo.get_skill_listing = AsyncMock(return_value=make_listing())
    repo.list_skills = AsyncMock(
        return_value=[make_listing("learner_1", "skill_piano", "Piano")]
    )
    return repo


@pytest.fixture
def sessions():
    service = AsyncMock()
    service.create_session = AsyncMock(
        side_effect=lambda **kwargs: make_session(
            session_id="sess_new", status="scheduled", **{
                k: v for k, v in kwargs.items()
                if k not in ("teacher_name", "learner_name")
            }
        )
    )
    return service


@pytest.fixture
def service(request_repo, user_repo, sessions):
    return SessionRequestService(request_repo, user_repo, sessions)


class TestSendRequest:
    """Tests for send_request()."""

    @pytest.mark.asyncio
    async def test_creates_pending_request(self, service):
        request = await service.send_request(
            "learner_1", "teacher_1", "skill_guitar", "Can you help?"
        )

        assert request.status == "pending"
        assert request.skill_name == "Guitar"
        assert (request.from_user_name, request.to_user_name) == ("Leo", "Tina")
        assert request.message == "Can you help?"

    @pytest.mark.asyncio
    async def test_self_request(self, service, request_repo):
        with pytest.raises(ValidationError, match="yourself"):
            await service.send_request("teacher_1", "teacher_1", "skill_guitar")
        request_repo.create.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unknown_teacher(self, service):
        with pytest.raises(NotFoundError, match="Teacher"):
            await service.send_request("learner_1", "ghost", "skill_guitar")

    @pytest.mark.asyncio
    async def test_skill_not_listed_by_teacher(self, service, user_repo):
        user_repo.get_skill_listing.return_value = None

        with pytest.raises(NotFoundError, match="Skill"):
            await service.send_request("learner_1", "teacher_1", "skill_drums")
        user_repo.get_skill_listing.assert_awaited_once_with(
            "teacher_1", "skill_drums", "teach"
        )

    @pytest.mark.asyncio
    async def test_duplicate_pending(self, service, request_repo):
        request_repo.find_pending.return_value = make_request()

        with pytest.raises(ValidationError, match="pending request"):
            await service.send_request("learner_1", "teacher_1", "skill_guitar")


class TestAcceptRejectCancel:
    """Tests for the pending-state transitions."""

    @pytest.mark.asyncio
    async def test_teacher_accepts(self, service):
        request = await service.accept("req_1", "teacher_1")

        assert request.status == "accepted"
        assert request.accepted_at is not None

    @pytest.mark.asyncio
    async def test_learner_cannot_accept(self, service, request_repo):
        with pytest.raises(ForbiddenError):
            await service.accept("req_1", "learner_1")
        request_repo.mark_accepted.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_accept_not_pending(self, service, request_repo):
        request_repo.get_by_id.return_value = make_request(status="rejected")

        with pytest.raises(ValidationError, match="no longer pending"):
            await service.accept("req_1", "teacher_1")

    @pytest.mark.asyncio
    async def test_accept_lost_race(self, service, request_repo):
        request_repo.mark_accepted.side_effect = None
        request_repo.mark_accepted.return_value = None

        with pytest.raises(ValidationError, match="no longer pending"):
            await service.accept("req_1", "teacher_1")

    @pytest.mark.asyncio
    async def test_accept_missing(self, service, request_repo):
        request_repo.get_by_id.return_value = None

        with pytest.raises(NotFoundError):
            await service.accept("req_1", "teacher_1")

    @pytest.mark.asyncio
    async def test_teacher_rejects(self, service):
        request = await service.reject("req_1", "teacher_1")

        assert request.status == "rejected"

    @pytest.mark.asyncio
    async def test_learner_cannot_reject(self, service):
        with pytest.raises(ForbiddenError):
            await service.reject("req_1", "learner_1")

    @pytest.mark.asyncio
    async def test_sender_cancels(self, service, request_repo):
        await service.cancel("req_1", "learner_1")

        request_repo.delete_pending.assert_awaited_once_with("req_1")

    @pytest.mark.asyncio
    async def test_teacher_cannot_cancel(self, service):
        with pytest.raises(ForbiddenError):
            await service.cancel("req_1", "teacher_1")

    @pytest.mark.asyncio
    async def test_cancel_after_accept(self, service, request_repo):
        request_repo.get_by_id.return_value = make_request(status="accepted")

        with pytest.raises(ValidationError):
            await service.cancel("req_1", "learner_1")
        request_repo.delete_pending.assert_not_awaited()


class TestConfirm:
    """Tests for confirm()."""

    @pytest.fixture(autouse=True)
    def accepted(self, request_repo):
        request_repo.get_by_id.return_value = make_request(status="accepted")

    @pytest.mark.asyncio
    async def test_single_mode_creates_session(self, service, sessions, request_repo):
        result = await service.confirm("req_1", "learner_1", "single")

        kwargs = sessions.create_session.call_args.kwargs
        assert kwargs["teacher_id"] == "teacher_1"
        assert kwargs["learner_id"] == "learner_1"
        assert kwargs["mode"] == "single"
        assert kwargs["learner_skill"] is None
        assert result.session.session_id == "sess_new"
        assert result.request.session_id == "sess_new"
        request_repo.link_session.assert_awaited_once_with("req_1", "sess_new")

    @pytest.mark.asyncio
    async def test_mutual_mode_resolves_learner_listing(self, service, sessions, user_repo):
        await service.confirm("req_1", "teacher_1", "mutual", learner_skill="piano")

        user_repo.list_skills.assert_awaited_once_with("learner_1", "teach")
        assert sessions.create_session.call_args.kwargs["learner_skill"] == "Piano"

    @pytest.mark.asyncio
    async def test_mutual_requires_skill(self, service):
        with pytest.raises(ValidationError, match="required"):
            await service.confirm("req_1", "teacher_1", "mutual")

    @pytest.mark.asyncio
    async def test_mutual_skill_not_taught_by_learner(self, service, sessions):
        with pytest.raises(ValidationError, match="learner can teach"):
            await service.confirm("req_1", "teacher_1", "mutual", learner_skill="Drums")
        sessions.create_session.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unknown_mode(self, service):
        with pytest.raises(ValidationError, match="Mode"):
            await service.confirm("req_1", "teacher_1", "group")

    @pytest.mark.asyncio
    async def test_stranger_cannot_confirm(self, service):
        with pytest.raises(ForbiddenError):
            await service.confirm("req_1", "stranger", "single")

    @pytest.mark.asyncio
    async def test_must_be_accepted(self, service, request_repo):
        request_repo.get_by_id.return_value = make_request()

        with pytest.raises(ValidationError, match="accepted before"):
            await service.confirm("req_1", "teacher_1", "single")

    @pytest.mark.asyncio
    async def test_already_confirmed(self, service, request_repo, sessions):
        request_repo.get_by_id.return_value = make_request(
            status="accepted", confirmed=True
        )

        with pytest.raises(ValidationError, match="already confirmed"):
            await service.confirm("req_1", "teacher_1", "single")
        sessions.create_session.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_concurrent_confirmation_loses(self, service, request_repo, sessions):
        request_repo.claim_confirmation.side_effect = None
        request_repo.claim_confirmation.return_value = None

        with pytest.raises(ValidationError, match="already confirmed"):
            await service.confirm("req_1", "teacher_1", "single")
        sessions.create_session.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_session_failure_releases_claim(self, service, request_repo, sessions):
        sessions.create_session.side_effect = ValidationError("bad session")

        with pytest.raises(ValidationError, match="bad session"):
            await service.confirm("req_1", "teacher_1", "single")
        request_repo.release_confirmation.assert_awaited_once_with("req_1")
        request_repo.link_session.assert_not_awaited()


class TestReads:
    """Tests for get_request() and list_for_user()."""

    @pytest.mark.asyncio
    async def test_participant_reads(self, service):
        request = await service.get_request("req_1", "teacher_1")

        assert request.request_id == "req_1"

    @pytest.mark.asyncio
    async def test_stranger_cannot_read(self, service):
        with pytest.raises(ForbiddenError):
            await service.get_request("req_1", "stranger")

    @pytest.mark.asyncio
    async def test_list_splits_directions(self, service, request_repo):
        request_repo.list_pending = AsyncMock(
            side_effect=lambda user_id, direction: (
                [make_request("in_1")] if direction == "incoming" else []
            )
        )

        requests = await service.list_for_user("teacher_1")

        assert [r.request_id for r in requests.incoming] == ["in_1"]
        assert requests.outgoing == []

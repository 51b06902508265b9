"""Tests for the SessionRequest dataclass."""

import pytest

from factories import make_request


class TestSessionRequest:

    def test_defaults(self):
        request = make_request()

        assert request.status == "pending"
        assert request.confirmed is False
        assert request.mode is None
        assert request.session_id is None

    def test_self_request_rejected(self):
        with pytest.raises(ValueError, match="yourself"):
            make_request(from_user_id="u1", to_user_id="u1")

    def test_invalid_status(self):
        with pytest.raises(ValueError, match="Invalid status"):
            make_request(status="cancelled")

    def test_invalid_mode(self):
        with pytest.raises(ValueError, match="Invalid mode"):
            make_request(mode="group")

    def test_is_participant(self):
        request = make_request()

        assert request.is_participant("learner_1")
        assert request.is_participant("teacher_1")
        assert not request.is_participant("stranger")

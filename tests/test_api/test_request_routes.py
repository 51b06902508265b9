"""Tests for the /requests endpoints."""

from factories import make_request, make_session
from skillswap.errors import ForbiddenError, NotFoundError, ValidationError
from skillswap.session_requests.service import ConfirmedRequest, UserRequests

TEACHER = {"X-User-ID": "teacher_1"}
LEARNER = {"X-User-ID": "learner_1"}


class TestSessionRequestRoutes:
    """Tests for the request workflow endpoints."""

    def test_send(self, client, mock_request_service):
        mock_request_service.send_request.return_value = make_request(message="hi")

        response = client.post(
            "/requests",
            json={"teacher_id": "teacher_1", "skill_id": "skill_guitar", "message": "hi"},
            headers=LEARNER,
        )

        assert response.status_code == 201
        assert response.json()["status"] == "pending"
        mock_request_service.send_request.assert_awaited_once_with(
            "learner_1", "teacher_1", "skill_guitar", "hi"
        )

    def test_send_to_self_is_400(self, client, mock_request_service):
        mock_request_service.send_request.side_effect = ValidationError(
            "Cannot send request to yourself"
        )

        response = client.post(
            "/requests",
            json={"teacher_id": "teacher_1", "skill_id": "skill_guitar"},
            headers=TEACHER,
        )

        assert response.status_code == 400

    def test_send_requires_user(self, client):
        response = client.post(
            "/requests", json={"teacher_id": "teacher_1", "skill_id": "skill_guitar"}
        )

        assert response.status_code == 401

    def test_list(self, client, mock_request_service):
        mock_request_service.list_for_user.return_value = UserRequests(
            incoming=[make_request()], outgoing=[]
        )

        response = client.get("/requests", headers=TEACHER)

        assert response.status_code == 200
        data = response.json()
        assert [r["request_id"] for r in data["incoming"]] == ["req_1"]
        assert data["outgoing"] == []

    def test_get_forbidden(self, client, mock_request_service):
        mock_request_service.get_request.side_effect = ForbiddenError("nope")

        response = client.get("/requests/req_1", headers={"X-User-ID": "stranger"})

        assert response.status_code == 403

    def test_accept(self, client, mock_request_service):
        mock_request_service.accept.return_value = make_request(status="accepted")

        response = client.put("/requests/req_1/accept", headers=TEACHER)

        assert response.status_code == 200
        assert response.json()["status"] == "accepted"
        mock_request_service.accept.assert_awaited_once_with("req_1", "teacher_1")

    def test_accept_missing(self, client, mock_request_service):
        mock_request_service.accept.side_effect = NotFoundError("Request not found")

        response = client.put("/requests/req_1/accept", headers=TEACHER)

        assert response.status_code == 404

    def test_confirm_creates_session(self, client, mock_request_service):
        mock_request_service.confirm.return_value = ConfirmedRequest(
            request=make_request(
                status="accepted", confirmed=True, mode="mutual",
                learner_skill="Piano", session_id="sess_new",
            ),
            session=make_session(
                session_id="sess_new", status="scheduled",
                mode="mutual", learner_skill="Piano",
            ),
        )

        response = client.post(
            "/requests/req_1/confirm",
            json={"mode": "mutual", "learner_skill": "Piano"},
            headers=LEARNER,
        )

        assert response.status_code == 201
        data = response.json()
        assert data["request"]["session_id"] == "sess_new"
        assert data["session"]["mode"] == "mutual"
        assert data["session"]["learner_skill"] == "Piano"
        mock_request_service.confirm.assert_awaited_once_with(
            "req_1", "learner_1", "mutual", "Piano"
        )

    def test_confirm_before_accept_is_400(self, client, mock_request_service):
        mock_request_service.confirm.side_effect = ValidationError(
            "Request must be accepted before confirmation"
        )

        response = client.post(
            "/requests/req_1/confirm", json={"mode": "single"}, headers=LEARNER
        )

        assert response.status_code == 400

    def test_reject(self, client, mock_request_service):
        mock_request_service.reject.return_value = make_request(status="rejected")

        response = client.put("/requests/req_1/reject", headers=TEACHER)

        assert response.status_code == 200
        assert response.json()["status"] == "rejected"

    def test_cancel(self, client, mock_request_service):
        response = client.delete("/requests/req_1", headers=LEARNER)

        assert response.status_code == 204
        mock_request_service.cancel.assert_awaited_once_with("req_1", "learner_1")

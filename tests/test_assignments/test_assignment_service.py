"""Tests for AssignmentService."""

from unittest.mock import AsyncMock

import pytest

from factories import make_assignment, make_session
from skillswap.assignments.schemas import Question
from skillswap.assignments.service import AssignmentService
from skillswap.errors import ForbiddenError, NotFoundError, ValidationError
from skillswap.scoring.events import ScoringEventKind


@pytest.fixture
def assignment_repo():
    repo = AsyncMock()
    repo.get_by_id = AsyncMock(return_value=make_assignment(submitted=True))
    repo.find_for_session_user = AsyncMock(return_value=None)
    repo.create = AsyncMock(side_effect=lambda assignment: assignment)

    async def _save_grade(assignment_id, *, graded_by, graded_at, scores, final_score, comment):
        return make_assignment(
            assignment_id=assignment_id,
            submitted=True,
            graded=True,
            graded_by=graded_by,
            graded_at=graded_at,
            scores=scores,
            final_score=final_score,
            grader_comment=comment,
        )

    repo.save_grade = AsyncMock(side_effect=_save_grade)
    repo.save_submission = AsyncMock(
        side_effect=lambda assignment_id, answers, submitted_at: make_assignment(
            assignment_id=assignment_id, answers=answers, submitted=True,
            submitted_at=submitted_at,
        )
    )
    return repo


@pytest.fixture
def session_repo():
    repo = AsyncMock()
    repo.get_by_id = AsyncMock(return_value=make_session())
    return repo


@pytest.fixture
def generator():
    gen = AsyncMock()
    gen.generate = AsyncMock(
        return_value=[Question(question_id="q1", text="How do you tune a guitar?")]
    )
    return gen


@pytest.fixture
def service(assignment_repo, session_repo, mock_scoring, generator):
    return AssignmentService(assignment_repo, session_repo, mock_scoring, generator)


class TestCreateAssignments:
    """Tests for assignment creation."""

    @pytest.mark.asyncio
    async def test_learner_only_in_single_mode(self, service, generator):
        created = await service.create_assignments_for_session(make_session())

        assert [a.user_id for a in created] == ["learner_1"]
        assert created[0].skill_id == "skill_guitar"
        generator.generate.assert_awaited_once_with("Guitar")

    @pytest.mark.asyncio
    async def test_teacher_too_in_mutual_mode(self, service, generator):
        session = make_session(mode="mutual", learner_skill="Piano")

        created = await service.create_assignments_for_session(session)

        assert [(a.user_id, a.skill_name) for a in created] == [
            ("learner_1", "Guitar"),
            ("teacher_1", "Piano"),
        ]

    @pytest.mark.asyncio
    async def test_existing_assignment_reused(self, service, assignment_repo, generator):
        existing = make_assignment()
        assignment_repo.find_for_session_user.return_value = existing

        result = await service.create_assignment(make_session(), "learner_1", "Guitar")

        assert result is existing
        generator.generate.assert_not_awaited()
        assignment_repo.create.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_generator_crash_uses_fallback(self, service, generator):
        generator.generate.side_effect = RuntimeError("unexpected")

        result = await service.create_assignment(make_session(), "learner_1", "Guitar")

        assert [q.question_id for q in result.questions] == ["q1", "q2", "q3"]


class TestSubmitAssignment:
    """Tests for submit_assignment()."""

    @pytest.mark.asyncio
    async def test_owner_submits(self, service, assignment_repo):
        assignment_repo.get_by_id.return_value = make_assignment()

        result = await service.submit_assignment("asg_1", "learner_1", {"q1": "Tune by ear"})

        assert result.submitted
        assert result.answers == {"q1": "Tune by ear"}

    @pytest.mark.asyncio
    async def test_other_user_forbidden(self, service, assignment_repo):
        assignment_repo.get_by_id.return_value = make_assignment()

        with pytest.raises(ForbiddenError):
            await service.submit_assignment("asg_1", "teacher_1", {})

    @pytest.mark.asyncio
    async def test_only_once(self, service):
        with pytest.raises(ValidationError, match="already been submitted"):
            await service.submit_assignment("asg_1", "learner_1", {})

    @pytest.mark.asyncio
    async def test_missing(self, service, assignment_repo):
        assignment_repo.get_by_id.return_value = None

        with pytest.raises(NotFoundError):
            await service.submit_assignment("nope", "learner_1", {})


class TestGradeAssignment:
    """Tests for grade_assignment()."""

    @pytest.mark.asyncio
    async def test_grades_and_dispatches(self, service, mock_scoring):
        result = await service.grade_assignment(
            "asg_1", "teacher_1", {"q1": 4, "q2": 5, "q3": 4}, "Nice work"
        )

        assert result.value.graded
        assert result.value.final_score == 4.33
        assert result.value.grader_comment == "Nice work"
        event = mock_scoring.on_scoring_event.call_args[0][0]
        assert event.kind is ScoringEventKind.ASSIGNMENT_GRADED
        assert event.user_ids == ("learner_1",)
        assert event.grade == 4.33

    @pytest.mark.asyncio
    async def test_extra_scores_ignored(self, service):
        result = await service.grade_assignment(
            "asg_1", "teacher_1", {"q1": 5, "q2": 5, "q3": 5, "q9": 1}
        )

        assert result.value.scores == {"q1": 5, "q2": 5, "q3": 5}
        assert result.value.final_score == 5

    @pytest.mark.asyncio
    async def test_only_teacher(self, service, mock_scoring):
        with pytest.raises(ForbiddenError):
            await service.grade_assignment("asg_1", "learner_1", {"q1": 4, "q2": 4, "q3": 4})
        mock_scoring.on_scoring_event.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_must_be_submitted(self, service, assignment_repo):
        assignment_repo.get_by_id.return_value = make_assignment()

        with pytest.raises(ValidationError, match="submitted"):
            await service.grade_assignment("asg_1", "teacher_1", {"q1": 4, "q2": 4, "q3": 4})

    @pytest.mark.asyncio
    async def test_not_twice(self, service, assignment_repo):
        assignment_repo.get_by_id.return_value = make_assignment(
            submitted=True, graded=True, final_score=4
        )

        with pytest.raises(ValidationError, match="already been graded"):
            await service.grade_assignment("asg_1", "teacher_1", {"q1": 4, "q2": 4, "q3": 4})

    @pytest.mark.asyncio
    async def test_missing_question_score(self, service):
        with pytest.raises(ValidationError, match="q3"):
            await service.grade_assignment("asg_1", "teacher_1", {"q1": 4, "q2": 4})

    @pytest.mark.asyncio
    @pytest.mark.parametrize("bad", [0, 6, True, "4"])
    async def test_score_out_of_range(self, service, assignment_repo, bad):
        with pytest.raises(ValidationError):
            await service.grade_assignment("asg_1", "teacher_1", {"q1": bad, "q2": 4, "q3": 4})
        assignment_repo.save_grade.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_missing_session(self, service, session_repo):
        session_repo.get_by_id.return_value = None

        with pytest.raises(NotFoundError):
            await service.grade_assignment("asg_1", "teacher_1", {"q1": 4})


class TestListing:
    """Tests for the assignment reads."""

    @pytest.mark.asyncio
    async def test_list_for_session_requires_participant(self, service):
        with pytest.raises(ForbiddenError):
            await service.list_for_session("sess_1", "stranger")

    @pytest.mark.asyncio
    async def test_list_for_session(self, service, assignment_repo):
        assignment_repo.list_for_session.return_value = [make_assignment()]

        found = await service.list_for_session("sess_1", "teacher_1")

        assert [a.assignment_id for a in found] == ["asg_1"]
        assignment_repo.list_for_session.assert_awaited_once_with("sess_1")

    @pytest.mark.asyncio
    async def test_list_for_user(self, service, assignment_repo):
        assignment_repo.list_for_user.return_value = [make_assignment()]

        assert len(await service.list_for_user("learner_1")) == 1

    @pytest.mark.asyncio
    async def test_get_missing(self, service, assignment_repo):
        assignment_repo.get_by_id.return_value = None

        with pytest.raises(NotFoundError):
            await service.get_assignment("nope")

    @pytest.mark.asyncio
    async def test_owner_views_without_session_lookup(self, service, session_repo):
        found = await service.view_assignment("asg_1", "learner_1")

        assert found.user_id == "learner_1"
        session_repo.get_by_id.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_session_teacher_views(self, service):
        found = await service.view_assignment("asg_1", "teacher_1")

        assert found.assignment_id == "asg_1"

    @pytest.mark.asyncio
    async def test_stranger_cannot_view(self, service):
        with pytest.raises(ForbiddenError):
            await service.view_assignment("asg_1", "stranger")

"""Assignment endpoints: read, submit answers and grade."""

import structlog
from fastapi import APIRouter, Depends

from skillswap.api.auth import get_current_user_id
from skillswap.api.dependencies import get_assignment_service
from skillswap.api.models import (
    AssignmentItem,
    AssignmentListResponse,
    AssignmentResponse,
    ErrorResponse,
    GradeAssignmentRequest,
    QuestionItem,
    SessionAssignmentsResponse,
    SubmitAssignmentRequest,
    iso,
    scoring_status,
)
from skillswap.assignments.schemas import Assignment
from skillswap.assignments.service import AssignmentService

logger = structlog.get_logger(__name__)
router = APIRouter()

_ERRORS = {
    400: {"model": ErrorResponse, "description": "Invalid assignment state or scores"},
    401: {"model": ErrorResponse, "description": "Not authenticated"},
    403: {"model": ErrorResponse, "description": "Not allowed for this user"},
    404: {"model": ErrorResponse, "description": "Assignment not found"},
}


def _to_item(assignment: Assignment) -> AssignmentItem:
    return AssignmentItem(
        assignment_id=assignment.assignment_id,
        session_id=assignment.session_id,
        user_id=assignment.user_id,
        skill_id=assignment.skill_id,
        skill_name=assignment.skill_name,
        questions=[
            QuestionItem(question_id=q.question_id, text=q.text, type=q.type)
            for q in assignment.questions
        ],
        answers=assignment.answers,
        submitted=assignment.submitted,
        submitted_at=iso(assignment.submitted_at),
        graded=assignment.graded,
        graded_by=assignment.graded_by,
        graded_at=iso(assignment.graded_at),
        scores=assignment.scores,
        final_score=assignment.final_score,
        grader_comment=assignment.grader_comment,
        created_at=assignment.created_at.isoformat(),
    )


@router.get(
    "/assignments",
    response_model=AssignmentListResponse,
    responses=_ERRORS,
    summary="List the caller's assignments",
)
async def list_assignments(
    user_id: str = Depends(get_current_user_id),
    service: AssignmentService = Depends(get_assignment_service),
) -> AssignmentListResponse:
    items = [_to_item(a) for a in await service.list_for_user(user_id)]
    return AssignmentListResponse(
        assignments=items,
        pending=[item for item in items if not item.submitted],
        completed=[item for item in items if item.submitted],
    )


@router.get(
    "/assignments/session/{session_id}",
    response_model=SessionAssignmentsResponse,
    responses=_ERRORS,
    summary="List a session's assignments (participants only)",
)
async def list_session_assignments(
    session_id: str,
    user_id: str = Depends(get_current_user_id),
    service: AssignmentService = Depends(get_assignment_service),
) -> SessionAssignmentsResponse:
    assignments = await service.list_for_session(session_id, user_id)
    return SessionAssignmentsResponse(
        session_id=session_id,
        assignments=[_to_item(a) for a in assignments],
    )


@router.get(
    "/assignments/{assignment_id}",
    response_model=AssignmentResponse,
    responses=_ERRORS,
    summary="Get one assignment (owner or session teacher)",
)
async def get_assignment(
    assignment_id: str,
    user_id: str = Depends(get_current_user_id),
    service: AssignmentService = Depends(get_assignment_service),
) -> AssignmentResponse:
    assignment = await service.view_assignment(assignment_id, user_id)
    return AssignmentResponse(assignment=_to_item(assignment))


@router.post(
    "/assignments/{assignment_id}/submit",
    response_model=AssignmentResponse,
    responses=_ERRORS,
    summary="Submit answers (owner only)",
)
async def submit_assignment(
    assignment_id: str,
    request: SubmitAssignmentRequest,
    user_id: str = Depends(get_current_user_id),
    service: AssignmentService = Depends(get_assignment_service),
) -> AssignmentResponse:
    assignment = await service.submit_assignment(assignment_id, user_id, request.answers)
    logger.info("Assignment submitted", assignment_id=assignment_id)
    return AssignmentResponse(assignment=_to_item(assignment))


@router.post(
    "/assignments/{assignment_id}/grade",
    response_model=AssignmentResponse,
    responses=_ERRORS,
    summary="Grade a submitted assignment (session teacher only)",
)
async def grade_assignment(
    assignment_id: str,
    request: GradeAssignmentRequest,
    user_id: str = Depends(get_current_user_id),
    service: AssignmentService = Depends(get_assignment_service),
) -> AssignmentResponse:
    result = await service.grade_assignment(
        assignment_id, user_id, request.scores, request.comment
    )
    logger.info(
        "Assignment graded",
        assignment_id=assignment_id,
        final_score=result.value.final_score,
        scoring_ok=result.scoring_ok,
    )
    return AssignmentResponse(
        assignment=_to_item(result.value),
        scoring=scoring_status(result.scoring),
    )

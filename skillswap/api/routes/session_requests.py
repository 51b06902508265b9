"""Session request endpoints: send, accept, confirm, reject and cancel."""

import structlog
from fastapi import APIRouter, Depends, status

from skillswap.api.auth import get_current_user_id
from skillswap.api.dependencies import get_session_request_service
from skillswap.api.models import (
    ConfirmSessionRequest,
    ConfirmSessionResponse,
    ErrorResponse,
    SendSessionRequest,
    SessionRequestItem,
    SessionRequestListResponse,
    iso,
)
from skillswap.api.routes.sessions import session_item
from skillswap.session_requests.schemas import SessionRequest
from skillswap.session_requests.service import SessionRequestService

logger = structlog.get_logger(__name__)
router = APIRouter()

_ERRORS = {
    400: {"model": ErrorResponse, "description": "Invalid request state"},
    401: {"model": ErrorResponse, "description": "Not authenticated"},
    403: {"model": ErrorResponse, "description": "Not allowed for this user"},
    404: {"model": ErrorResponse, "description": "Request not found"},
}


def request_item(request: SessionRequest) -> SessionRequestItem:
    return SessionRequestItem(
        request_id=request.request_id,
        from_user_id=request.from_user_id,
        from_user_name=request.from_user_name,
        to_user_id=request.to_user_id,
        to_user_name=request.to_user_name,
        skill_id=request.skill_id,
        skill_name=request.skill_name,
        message=request.message,
        status=request.status,
        mode=request.mode,
        learner_skill=request.learner_skill,
        confirmed=request.confirmed,
        session_id=request.session_id,
        created_at=request.created_at.isoformat(),
        accepted_at=iso(request.accepted_at),
        confirmed_at=iso(request.confirmed_at),
    )


@router.get(
    "/requests",
    response_model=SessionRequestListResponse,
    responses=_ERRORS,
    summary="List my pending requests",
)
async def list_requests(
    user_id: str = Depends(get_current_user_id),
    service: SessionRequestService = Depends(get_session_request_service),
) -> SessionRequestListResponse:
    requests = await service.list_for_user(user_id)
    return SessionRequestListResponse(
        incoming=[request_item(r) for r in requests.incoming],
        outgoing=[request_item(r) for r in requests.outgoing],
    )


@router.post(
    "/requests",
    response_model=SessionRequestItem,
    status_code=status.HTTP_201_CREATED,
    responses=_ERRORS,
    summary="Ask a teacher for a session",
)
async def send_request(
    request: SendSessionRequest,
    user_id: str = Depends(get_current_user_id),
    service: SessionRequestService = Depends(get_session_request_service),
) -> SessionRequestItem:
    created = await service.send_request(
        user_id, request.teacher_id, request.skill_id, request.message
    )
    logger.info(
        "Session request sent",
        request_id=created.request_id,
        teacher_id=created.to_user_id,
        skill_id=created.skill_id,
    )
    return request_item(created)


@router.get(
    "/requests/{request_id}",
    response_model=SessionRequestItem,
    responses=_ERRORS,
    summary="Get one of my requests",
)
async def get_request(
    request_id: str,
    user_id: str = Depends(get_current_user_id),
    service: SessionRequestService = Depends(get_session_request_service),
) -> SessionRequestItem:
    return request_item(await service.get_request(request_id, user_id))


@router.put(
    "/requests/{request_id}/accept",
    response_model=SessionRequestItem,
    responses=_ERRORS,
    summary="Accept a request (teacher only)",
)
async def accept_request(
    request_id: str,
    user_id: str = Depends(get_current_user_id),
    service: SessionRequestService = Depends(get_session_request_service),
) -> SessionRequestItem:
    accepted = await service.accept(request_id, user_id)
    logger.info("Session request accepted", request_id=request_id)
    return request_item(accepted)


@router.post(
    "/requests/{request_id}/confirm",
    response_model=ConfirmSessionResponse,
    status_code=status.HTTP_201_CREATED,
    responses=_ERRORS,
    summary="Confirm an accepted request and create the session",
    description=(
        "Either participant picks the learning mode. In `mutual` mode "
        "`learner_skill` must be one of the learner's teach listings."
    ),
)
async def confirm_request(
    request_id: str,
    request: ConfirmSessionRequest,
    user_id: str = Depends(get_current_user_id),
    service: SessionRequestService = Depends(get_session_request_service),
) -> ConfirmSessionResponse:
    result = await service.confirm(
        request_id, user_id, request.mode, request.learner_skill
    )
    logger.info(
        "Session request confirmed",
        request_id=request_id,
        session_id=result.session.session_id,
        mode=request.mode,
    )
    return ConfirmSessionResponse(
        request=request_item(result.request),
        session=session_item(result.session),
    )


@router.put(
    "/requests/{request_id}/reject",
    response_model=SessionRequestItem,
    responses=_ERRORS,
    summary="Reject a request (teacher only)",
)
async def reject_request(
    request_id: str,
    user_id: str = Depends(get_current_user_id),
    service: SessionRequestService = Depends(get_session_request_service),
) -> SessionRequestItem:
    rejected = await service.reject(request_id, user_id)
    logger.info("Session request rejected", request_id=request_id)
    return request_item(rejected)


@router.delete(
    "/requests/{request_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses=_ERRORS,
    summary="Cancel a pending request (sender only)",
)
async def cancel_request(
    request_id: str,
    user_id: str = Depends(get_current_user_id),
    service: SessionRequestService = Depends(get_session_request_service),
) -> None:
    await service.cancel(request_id, user_id)
    logger.info("Session request cancelled", request_id=request_id)

"""User endpoints: registration, profile and skill listings."""

import structlog
from fastapi import APIRouter, Depends, Query, status

from skillswap.api.auth import get_current_user_id, verify_api_key
from skillswap.api.dependencies import get_feedback_service, get_user_service
from skillswap.api.models import (
    AddSkillRequest,
    CreateUserRequest,
    ErrorResponse,
    SkillListingItem,
    SkillListingResponse,
    UserItem,
    UserProfileResponse,
)
from skillswap.feedback.service import FeedbackService
from skillswap.users.schemas import SkillListing, User
from skillswap.users.service import UserService

logger = structlog.get_logger(__name__)
router = APIRouter()

_ERRORS = {
    400: {"model": ErrorResponse, "description": "Invalid input"},
    401: {"model": ErrorResponse, "description": "Not authenticated"},
    404: {"model": ErrorResponse, "description": "User or listing not found"},
}


def _user_item(user: User) -> UserItem:
    return UserItem(
        user_id=user.user_id,
        name=user.name,
        email=user.email,
        credibility_score=user.credibility_score,
        created_at=user.created_at.isoformat(),
    )


def _listing_item(listing: SkillListing) -> SkillListingItem:
    return SkillListingItem(
        user_id=listing.user_id,
        skill_id=listing.skill_id,
        skill_name=listing.skill_name,
        kind=listing.kind,
        created_at=listing.created_at.isoformat(),
    )


def _listings(listings: list[SkillListing]) -> SkillListingResponse:
    return SkillListingResponse(
        skills=[_listing_item(item) for item in listings],
        total=len(listings),
    )


@router.post(
    "/users",
    response_model=UserItem,
    status_code=status.HTTP_201_CREATED,
    responses={
        **_ERRORS,
        409: {"model": ErrorResponse, "description": "Email already registered"},
    },
    summary="Register a user",
)
async def create_user(
    request: CreateUserRequest,
    api_key: str = Depends(verify_api_key),
    service: UserService = Depends(get_user_service),
) -> UserItem:
    user = await service.register(request.name, request.email)
    logger.info("User registered", user_id=user.user_id)
    return _user_item(user)


@router.get(
    "/users/me/skills",
    response_model=SkillListingResponse,
    responses=_ERRORS,
    summary="List my skills",
)
async def list_my_skills(
    kind: str | None = Query(default=None, description="teach or learn"),
    user_id: str = Depends(get_current_user_id),
    service: UserService = Depends(get_user_service),
) -> SkillListingResponse:
    return _listings(await service.list_skills(user_id, kind))


@router.post(
    "/users/me/skills",
    response_model=SkillListingItem,
    status_code=status.HTTP_201_CREATED,
    responses=_ERRORS,
    summary="Add a skill I teach or want to learn",
)
async def add_my_skill(
    request: AddSkillRequest,
    user_id: str = Depends(get_current_user_id),
    service: UserService = Depends(get_user_service),
) -> SkillListingItem:
    listing = await service.add_skill(
        user_id, request.skill_name, request.kind, skill_id=request.skill_id
    )
    logger.info("Skill listed", skill_id=listing.skill_id, kind=listing.kind)
    return _listing_item(listing)


@router.delete(
    "/users/me/skills/{skill_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses=_ERRORS,
    summary="Remove one of my skill listings",
)
async def remove_my_skill(
    skill_id: str,
    kind: str = Query(..., description="teach or learn"),
    user_id: str = Depends(get_current_user_id),
    service: UserService = Depends(get_user_service),
) -> None:
    await service.remove_skill(user_id, skill_id, kind)
    logger.info("Skill unlisted", skill_id=skill_id, kind=kind)


@router.get(
    "/users/{user_id}",
    response_model=UserProfileResponse,
    responses=_ERRORS,
    summary="Get a user's profile",
    description="Profile with the mean rating the user has received.",
)
async def get_user(
    user_id: str,
    api_key: str = Depends(verify_api_key),
    service: UserService = Depends(get_user_service),
    feedback: FeedbackService = Depends(get_feedback_service),
) -> UserProfileResponse:
    user = await service.get_user(user_id)
    avg_rating, count = await feedback.get_user_average_rating(user_id)
    return UserProfileResponse(
        user=_user_item(user),
        avg_rating=round(avg_rating, 1),
        rating_count=count,
    )


@router.get(
    "/users/{user_id}/skills",
    response_model=SkillListingResponse,
    responses=_ERRORS,
    summary="List a user's skills",
)
async def list_user_skills(
    user_id: str,
    kind: str | None = Query(default=None, description="teach or learn"),
    api_key: str = Depends(verify_api_key),
    service: UserService = Depends(get_user_service),
) -> SkillListingResponse:
    return _listings(await service.list_skills(user_id, kind))

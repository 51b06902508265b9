"""User profiles: identity, skill listings, and the stored credibility score."""

from skillswap.users.repository import UserRepository
from skillswap.users.schemas import (
    DEFAULT_CREDIBILITY_SCORE,
    CredibilityStats,
    SkillListing,
    User,
)

__all__ = [
    "CredibilityStats",
    "DEFAULT_CREDIBILITY_SCORE",
    "SkillListing",
    "User",
    "UserRepository",
]

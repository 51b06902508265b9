"""User workflow: registration and skill listings.

New users start at the neutral credibility score; the scoring pipeline
overwrites it after their first scored event.
"""

import logging
import re

from skillswap.errors import ConflictError, NotFoundError, ValidationError
from skillswap.users.repository import UserRepository
from skillswap.users.schemas import SkillListing, User

logger = logging.getLogger(__name__)

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
_SKILL_ID_RE = re.compile(r"[^a-z0-9]+")


def skill_id_for(skill_name: str) -> str:
    """Stable id derived from a skill name: "Jazz Guitar" -> "jazz-guitar"."""
    return _SKILL_ID_RE.sub("-", skill_name.strip().lower()).strip("-")


class UserService:
    """Profile and skill listing operations."""

    def __init__(self, repository: UserRepository) -> None:
        self._repo = repository

    async def register(self, name: str, email: str) -> User:
        """Create a user with the default credibility score.

        Raises:
            ValidationError: Blank name or malformed email.
            ConflictError: Email already registered.
        """
        name = name.strip()
        email = email.strip().lower()
        if not name:
            raise ValidationError("Name is required")
        if not _EMAIL_RE.match(email):
            raise ValidationError(f"Invalid email address: {email!r}")
        if await self._repo.get_by_email(email) is not None:
            raise ConflictError("Email is already registered")

        user = await self._repo.create(User(name=name, email=email))
        logger.info("Registered user %s", user.user_id)
        return user

    async def get_user(self, user_id: str) -> User:
        user = await self._repo.get_by_id(user_id)
        if user is None:
            raise NotFoundError(f"User {user_id} not found")
        return user

    async def add_skill(
        self,
        user_id: str,
        skill_name: str,
        kind: str,
        skill_id: str | None = None,
    ) -> SkillListing:
        """Add (or rename) a teach/learn listing for an existing user."""
        await self.get_user(user_id)
        skill_id = skill_id or skill_id_for(skill_name)
        if not skill_id:
            raise ValidationError("Skill name is required")
        try:
            listing = SkillListing(
                user_id=user_id,
                skill_id=skill_id,
                skill_name=skill_name.strip(),
                kind=kind,
            )
        except ValueError as e:
            raise ValidationError(str(e)) from e

        saved = await self._repo.add_skill_listing(listing)
        logger.info("User %s lists %s (%s)", user_id, saved.skill_id, kind)
        return saved

    async def remove_skill(self, user_id: str, skill_id: str, kind: str) -> None:
        if not await self._repo.remove_skill_listing(user_id, skill_id, kind):
            raise NotFoundError(f"No {kind} listing for skill {skill_id}")

    async def list_skills(self, user_id: str, kind: str | None = None) -> list[SkillListing]:
        return await self._repo.list_skills(user_id, kind)

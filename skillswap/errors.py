"""Domain exceptions shared by services and mapped to HTTP responses by the API.

Each exception carries the status code and ``error_type`` the API returns,
so services can raise them without importing FastAPI.
"""


class SkillSwapError(Exception):
    """Base exception for expected domain failures."""

    status_code: int = 500
    error_type: str = "error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(SkillSwapError):
    """Referenced user, skill, session or assignment does not exist."""

    status_code = 404
    error_type = "not_found"


class ValidationError(SkillSwapError):
    """Malformed input, e.g. a rating outside 1-5."""

    status_code = 400
    error_type = "validation"


class UnauthorizedError(SkillSwapError):
    """Caller identity missing or invalid."""

    status_code = 401
    error_type = "unauthorized"


class ForbiddenError(SkillSwapError):
    """Caller lacks the role or ownership the action requires."""

    status_code = 403
    error_type = "forbidden"


class ConflictError(SkillSwapError):
    """Action already performed (e.g. duplicate feedback)."""

    status_code = 409
    error_type = "conflict"


class UnexpectedError(SkillSwapError):
    """Store connectivity or query failure."""

    status_code = 500
    error_type = "unexpected"

"""Session requests: the learner asks, the teacher accepts, either side
confirms and the session is created.

Components:
- SessionRequest: Dataclass mapping to the session_requests table
- SessionRequestRepository: conditional status transitions
- SessionRequestService (skillswap.session_requests.service): the workflow
"""

from skillswap.session_requests.repository import SessionRequestRepository
from skillswap.session_requests.schemas import (
    VALID_REQUEST_STATUSES,
    SessionRequest,
)

__all__ = [
    "SessionRequest",
    "SessionRequestRepository",
    "VALID_REQUEST_STATUSES",
]

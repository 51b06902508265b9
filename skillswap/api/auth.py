"""
API authentication.

Two headers are involved:
- X-API-KEY authenticates the calling client (skipped in dev mode when
  no keys are configured).
- X-User-ID identifies the acting user; role and ownership checks in
  the workflows are made against it.
"""

from fastapi import Header, HTTPException, Security, status
from fastapi.security import APIKeyHeader

from skillswap.config.settings import get_settings
from skillswap.observability.logging import bind_context

api_key_header = APIKeyHeader(name="X-API-KEY", auto_error=False)


async def verify_api_key(api_key: str | None = Security(api_key_header)) -> str:
    """
    Verify API key from X-API-KEY header.

    Raises:
        HTTPException: 401 if the key is missing or not configured
    """
    settings = get_settings()

    if not settings.api_keys:
        return "dev-mode"

    if api_key is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing API key. Provide X-API-KEY header.",
        )

    valid_keys = [k.strip() for k in settings.api_keys.split(",") if k.strip()]
    if api_key not in valid_keys:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid API key",
        )

    return api_key


async def get_current_user_id(
    x_user_id: str | None = Header(default=None, alias="X-User-ID"),
    _api_key: str = Security(verify_api_key),
) -> str:
    """Return the acting user's id from the X-User-ID header."""
    if not x_user_id or not x_user_id.strip():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing user identity. Provide X-User-ID header.",
        )
    user_id = x_user_id.strip()
    bind_context(user_id=user_id)
    return user_id

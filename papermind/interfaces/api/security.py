"""Authentication dependency for API routes."""

from typing import Annotated, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from ...infrastructure.security import verify_access_token
from ...modules.common.exceptions import UnauthorizedError

_http_bearer = HTTPBearer(auto_error=False)


async def get_current_user_id(
    request: Request,
    bearer_token: Optional[HTTPAuthorizationCredentials] = Depends(_http_bearer),
) -> str:
    """Resolve the caller's user id from the bearer token's ``sub`` claim."""
    if bearer_token is None or not bearer_token.credentials:
        raise UnauthorizedError("Authentication required")

    payload = verify_access_token(bearer_token.credentials)
    subject = payload.get("sub")
    if not isinstance(subject, str) or not subject:
        raise UnauthorizedError("Token has no subject")

    request.state.user_id = subject
    return subject


CurrentUserId = Annotated[str, Depends(get_current_user_id)]

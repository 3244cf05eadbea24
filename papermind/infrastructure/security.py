"""Verification of bearer tokens issued by the external identity provider."""

from typing import Any, Dict, Optional

from jose import JWTError, jwt

from ..modules.common.exceptions import ConfigurationError, UnauthorizedError
from .config import Settings, get_settings


def verify_access_token(token: str, settings: Optional[Settings] = None) -> Dict[str, Any]:
    """Decode and verify a signed access token.

    Signature, expiry and, when ``AUTH_JWT_AUDIENCE`` is set, the audience
    are checked.

    Raises:
        ConfigurationError: If no signing secret is configured.
        UnauthorizedError: If the token is invalid or expired.
    """
    settings = settings or get_settings()
    if not settings.AUTH_JWT_SECRET:
        raise ConfigurationError("AUTH_JWT_SECRET is not configured")

    audience = settings.AUTH_JWT_AUDIENCE or None
    try:
        return jwt.decode(
            token,
            settings.AUTH_JWT_SECRET,
            algorithms=[settings.AUTH_JWT_ALGORITHM],
            audience=audience,
            options={"verify_aud": audience is not None},
        )
    except JWTError as exc:
        raise UnauthorizedError("Invalid or expired token") from exc

"""FastAPI dependency injection functions."""

import logging
from typing import Annotated

from fastapi import Depends, Header

from src.api.middleware.auth import AuthError, decode_jwt
from src.api.middleware.error_handler import AuthenticationError, AuthorizationError
from src.core.errors import AUTHENTICATION_ERRORS
from src.schemas.auth import UserContext

logger = logging.getLogger(__name__)


async def get_current_user(
    authorization: Annotated[str, Header(description="Bearer token")] = "",
) -> UserContext:
    """Extract and validate the current user from the Authorization header.

    A missing header, or one not in ``Bearer <token>`` form, is treated as
    no credentials (401). A token that fails verification is rejected (403).

    Args:
        authorization: The Authorization header value (Bearer token).

    Returns:
        UserContext: The authenticated user's context.

    Raises:
        AuthenticationError: 401 if the token is missing.
        AuthorizationError: 403 if the token is invalid or expired.
    """
    parts = authorization.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        raise AuthenticationError(
            message=AUTHENTICATION_ERRORS["MISSING_TOKEN"],
            error_type="missing_token",
        )

    try:
        payload = decode_jwt(parts[1])
    except AuthError as e:
        logger.info("Rejected access token: %s", e.code.value)
        raise AuthorizationError(
            message=AUTHENTICATION_ERRORS["INVALID_TOKEN"],
            error_type="invalid_token",
        ) from e

    return payload.to_user_context()


# Type alias for cleaner dependency injection
CurrentUser = Annotated[UserContext, Depends(get_current_user)]

"""Access token signing and verification."""

import time
from enum import Enum
from typing import Any

import jwt

from src.core.config import get_settings
from src.schemas.auth import TokenPayload, UserPublic


class AuthErrorCode(str, Enum):
    """Authentication error codes."""

    MISSING_TOKEN = "MISSING_TOKEN"
    TOKEN_EXPIRED = "TOKEN_EXPIRED"
    INVALID_TOKEN = "INVALID_TOKEN"
    INVALID_SIGNATURE = "INVALID_SIGNATURE"


class AuthError(Exception):
    """Authentication error with specific error code.

    Raised when token validation fails for any reason.
    The error code indicates the specific failure reason.
    """

    def __init__(self, message: str, code: AuthErrorCode) -> None:
        """Initialize authentication error.

        Args:
            message: Human-readable error description.
            code: Specific error code for programmatic handling.
        """
        self.message = message
        self.code = code
        super().__init__(message)


def create_access_token(user: UserPublic, expires_in_seconds: int | None = None) -> str:
    """Sign an access token for a user.

    The claim set is ``{id, username, role, site}`` plus ``iat``/``exp``.
    Tokens are stateless: validity depends only on signature and expiry.

    Args:
        user: The authenticated user.
        expires_in_seconds: Override of the configured lifetime.

    Returns:
        str: Encoded token.
    """
    settings = get_settings()
    now = int(time.time())
    lifetime = expires_in_seconds if expires_in_seconds is not None else settings.jwt_expires_hours * 3600
    payload: dict[str, Any] = {
        "id": user.id,
        "username": user.username,
        "role": user.role,
        "site": user.site,
        "iat": now,
        "exp": now + lifetime,
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_jwt(token: str) -> TokenPayload:
    """Decode and validate an access token.

    Validates the token signature, expiration, and structure.

    Args:
        token: The token string to decode.

    Returns:
        TokenPayload: Validated token payload.

    Raises:
        AuthError: If token is missing, invalid, expired, or has wrong signature.
    """
    if not token:
        raise AuthError("Access token is missing", AuthErrorCode.MISSING_TOKEN)

    settings = get_settings()
    try:
        payload: dict[str, Any] = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            options={
                "verify_signature": True,
                "verify_exp": True,
                "require": ["exp", "iat"],
            },
        )

    except jwt.ExpiredSignatureError as e:
        raise AuthError(
            "Token has expired",
            AuthErrorCode.TOKEN_EXPIRED,
        ) from e

    except jwt.InvalidSignatureError as e:
        raise AuthError(
            "Invalid token signature",
            AuthErrorCode.INVALID_SIGNATURE,
        ) from e

    except jwt.MissingRequiredClaimError as e:
        raise AuthError(
            f"Token missing required claim: {e}",
            AuthErrorCode.INVALID_TOKEN,
        ) from e

    except jwt.InvalidTokenError as e:
        raise AuthError(
            f"Invalid token: {e}",
            AuthErrorCode.INVALID_TOKEN,
        ) from e

    try:
        return TokenPayload(
            id=payload["id"],
            username=payload["username"],
            role=payload.get("role"),
            site=payload["site"],
            exp=payload["exp"],
            iat=payload["iat"],
        )
    except (KeyError, ValueError) as e:
        raise AuthError(
            f"Token missing required claim: {e}",
            AuthErrorCode.INVALID_TOKEN,
        ) from e

"""Authentication schemas for tokens, users and auth endpoints."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from src.core.errors import AUTHENTICATION_ERRORS
from src.schemas.common import require_non_empty


class UserPublic(BaseModel):
    """User projection returned by the API (never includes the password hash)."""

    model_config = ConfigDict(from_attributes=True)

    id: int | str = Field(description="User identifier")
    username: str = Field(description="Username, unique per site")
    email: str = Field(description="Email address, unique per site")
    role: str = Field(default="user", description="User role")
    site: str = Field(description="Tenant site the user belongs to")


class UserContext(BaseModel):
    """Authenticated user context extracted from an access token.

    Populated by the bearer-token dependency from the validated claims.
    """

    model_config = ConfigDict(from_attributes=True)

    id: int | str = Field(description="User identifier (from token id claim)")
    username: str = Field(description="Username")
    role: str | None = Field(default=None, description="User's role (e.g., 'user', 'admin')")
    site: str = Field(description="Tenant site")


class TokenPayload(BaseModel):
    """Access token claim set."""

    model_config = ConfigDict(from_attributes=True)

    id: int | str = Field(description="User identifier")
    username: str = Field(description="Username")
    role: str | None = Field(default=None, description="User's role")
    site: str = Field(description="Tenant site")
    exp: int = Field(description="Expiration timestamp (Unix epoch)")
    iat: int = Field(description="Issued at timestamp (Unix epoch)")

    @property
    def expiration_datetime(self) -> datetime:
        """Get expiration as datetime object."""
        return datetime.fromtimestamp(self.exp)

    def to_user_context(self) -> UserContext:
        """Convert token payload to UserContext.

        Returns:
            UserContext: User context derived from token claims.
        """
        return UserContext(
            id=self.id,
            username=self.username,
            role=self.role,
            site=self.site,
        )


class RegisterRequest(BaseModel):
    """Request schema for user registration."""

    username: str = Field(..., description="Username", max_length=255)
    password: str = Field(..., description="Plaintext password", max_length=255)
    email: str = Field(..., description="Email address", max_length=255)
    site: str = Field(..., description="Tenant site", max_length=255)

    @model_validator(mode="before")
    @classmethod
    def check_required(cls, data: Any) -> Any:
        return require_non_empty(
            data,
            ("username", "password", "email", "site"),
            AUTHENTICATION_ERRORS["MISSING_REGISTER_FIELDS"],
        )


class RegisterResponse(BaseModel):
    """Response schema for user registration."""

    message: str = Field(default="User registered", description="Status message")
    user: UserPublic = Field(description="Newly created user")


class LoginRequest(BaseModel):
    """Request schema for user login."""

    username: str = Field(..., description="Username")
    password: str = Field(..., description="Plaintext password")
    site: str = Field(..., description="Tenant site")

    @model_validator(mode="before")
    @classmethod
    def check_required(cls, data: Any) -> Any:
        return require_non_empty(
            data,
            ("username", "password", "site"),
            AUTHENTICATION_ERRORS["MISSING_LOGIN_FIELDS"],
        )


class LoginResponse(BaseModel):
    """Response schema for user login."""

    token: str = Field(description="Signed access token")
    user: UserPublic = Field(description="Authenticated user")

"""Authentication business logic service."""

import logging
from typing import Any

import bcrypt
from supabase import Client

from src.api.middleware.auth import create_access_token
from src.api.middleware.error_handler import ConflictError, PersistenceError
from src.core.config import get_settings
from src.core.errors import AUTHENTICATION_ERRORS
from src.core.supabase import get_supabase_client, is_unique_violation
from src.models.user import User, UserCreate
from src.schemas.auth import LoginResponse, UserPublic

logger = logging.getLogger(__name__)

USERS_TABLE = "users"
PUBLIC_USER_COLUMNS = "id, username, email, role, site"


class DuplicateUserError(ConflictError):
    """Username or email is already taken within the site."""

    def __init__(self) -> None:
        super().__init__(
            message=AUTHENTICATION_ERRORS["DUPLICATE_USER"],
            error_type="duplicate_user",
        )


class RegistrationFailedError(PersistenceError):
    """Registration failed for a reason other than a duplicate."""

    def __init__(self) -> None:
        super().__init__(
            message=AUTHENTICATION_ERRORS["REGISTER_FAILED"],
            error_type="registration_failed",
        )


class LoginFailedError(PersistenceError):
    """Credential lookup failed."""

    def __init__(self) -> None:
        super().__init__(
            message=AUTHENTICATION_ERRORS["LOGIN_FAILED"],
            error_type="login_failed",
        )


BCRYPT_MAX_PASSWORD_BYTES = 72


def _password_bytes(password: str) -> bytes:
    # bcrypt reads at most 72 bytes
    return password.encode("utf-8")[:BCRYPT_MAX_PASSWORD_BYTES]


def hash_password(password: str, rounds: int) -> str:
    """Hash a password with bcrypt at the given cost factor.

    Passwords longer than 72 UTF-8 bytes are truncated, in both hashing and
    verification.
    """
    return bcrypt.hashpw(_password_bytes(password), bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Check a password against a stored bcrypt hash.

    Malformed hashes are treated as a mismatch.
    """
    try:
        return bcrypt.checkpw(_password_bytes(password), password_hash.encode("utf-8"))
    except ValueError:
        return False


class AuthService:
    """Service for per-site user registration and login."""

    def __init__(self, client: Client | None = None, bcrypt_rounds: int | None = None) -> None:
        """Initialize auth service.

        Args:
            client: Supabase client; defaults to the shared singleton.
            bcrypt_rounds: Cost factor override; defaults to settings.
        """
        self.client = client or get_supabase_client()
        self.settings = get_settings()
        self.bcrypt_rounds = bcrypt_rounds or self.settings.bcrypt_rounds

    def _db(self, client: Client | None) -> Client:
        return client or self.client

    async def register(
        self,
        username: str,
        password: str,
        email: str,
        site: str,
        client: Client | None = None,
    ) -> UserPublic:
        """Register a new user for a site.

        Args:
            username: Username, unique per site.
            password: Plaintext password.
            email: Email address, unique per site.
            site: Tenant site.
            client: Optional scoped Supabase client.

        Returns:
            UserPublic: The created user without the password hash.

        Raises:
            DuplicateUserError: If the username or email exists for this site.
            RegistrationFailedError: If the insert fails for any other reason.
        """
        new_user: UserCreate = {
            "username": username,
            "password_hash": hash_password(password, self.bcrypt_rounds),
            "email": email,
            "site": site,
        }

        try:
            response = (
                self._db(client)
                .table(USERS_TABLE)
                .insert(dict(new_user))
                .execute()
            )
        except Exception as e:
            if is_unique_violation(e):
                logger.info("Duplicate registration for site %s", site)
                raise DuplicateUserError() from e
            logger.error("Failed to register user for site %s: %s", site, str(e))
            raise RegistrationFailedError() from e

        if not response.data:
            logger.error("Insert for site %s returned no user row", site)
            raise RegistrationFailedError()

        user = UserPublic.model_validate(_without_password(response.data[0]))
        logger.info("Registered user %s for site %s", user.id, site)
        return user

    async def authenticate(
        self,
        username: str,
        password: str,
        site: str,
        client: Client | None = None,
    ) -> LoginResponse | None:
        """Verify credentials and issue an access token.

        A missing user, a user on a different site, and a wrong password all
        return None; they are normal negative results, not failures.

        Args:
            username: Username.
            password: Plaintext password.
            site: Tenant site.
            client: Optional scoped Supabase client.

        Returns:
            LoginResponse | None: Token and user on success, otherwise None.

        Raises:
            LoginFailedError: If the user lookup itself fails.
        """
        try:
            response = (
                self._db(client)
                .table(USERS_TABLE)
                .select(f"{PUBLIC_USER_COLUMNS}, password_hash")
                .eq("username", username)
                .eq("site", site)
                .maybe_single()
                .execute()
            )
        except Exception as e:
            logger.error("Failed to look up user for site %s: %s", site, str(e))
            raise LoginFailedError() from e

        row: User | None = response.data if response and response.data else None
        if not row or not row.get("password_hash"):
            return None

        if not verify_password(password, row["password_hash"]):
            return None

        user = UserPublic.model_validate(_without_password(row))
        token = create_access_token(user)
        logger.info("User %s authenticated for site %s", user.id, site)
        return LoginResponse(token=token, user=user)


def _without_password(row: User | dict[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in row.items() if key != "password_hash"}

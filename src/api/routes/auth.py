"""Authentication API routes."""

from fastapi import APIRouter, status

from src.api.deps import CurrentUser
from src.api.middleware.error_handler import AuthenticationError
from src.core.errors import AUTHENTICATION_ERRORS
from src.schemas.auth import (
    LoginRequest,
    LoginResponse,
    RegisterRequest,
    RegisterResponse,
    UserContext,
)
from src.services.auth_service import AuthService

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post(
    "/register",
    response_model=RegisterResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register new user",
    description="Create a user account scoped to a site. Username and email are unique per site.",
)
async def register(data: RegisterRequest) -> RegisterResponse:
    """Register a new user for a site.

    Args:
        data: Username, password, email and site.

    Returns:
        RegisterResponse: Confirmation message and the created user.

    Raises:
        DuplicateUserError: 400 if the username or email is taken on this site.
        RegistrationFailedError: 500 if the user cannot be saved.
    """
    service = AuthService()
    user = await service.register(
        username=data.username,
        password=data.password,
        email=data.email,
        site=data.site,
    )
    return RegisterResponse(user=user)


@router.post(
    "/login",
    response_model=LoginResponse,
    summary="Log in",
    description="Authenticate with username, password and site to receive an access token.",
)
async def login(data: LoginRequest) -> LoginResponse:
    """Authenticate user and return an access token.

    Args:
        data: Username, password and site.

    Returns:
        LoginResponse: Access token and user.

    Raises:
        AuthenticationError: 401 if credentials are invalid.
        LoginFailedError: 500 if the user lookup fails.
    """
    service = AuthService()
    result = await service.authenticate(
        username=data.username,
        password=data.password,
        site=data.site,
    )
    if result is None:
        raise AuthenticationError(
            message=AUTHENTICATION_ERRORS["INVALID_CREDENTIALS"],
            error_type="invalid_credentials",
        )
    return result


@router.get(
    "/me",
    response_model=UserContext,
    summary="Get current user",
    description="Return the claims of the presented access token.",
)
async def get_me(user: CurrentUser) -> UserContext:
    return user

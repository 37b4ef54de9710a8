"""Integration tests for authentication endpoints."""

import time
from unittest.mock import AsyncMock, MagicMock, patch

from fastapi.testclient import TestClient
from jose import jwt

from src.schemas.auth import LoginResponse, UserPublic
from src.services.auth_service import AuthService, DuplicateUserError, RegistrationFailedError


# Test JWT secret for integration tests (matches JWT_SECRET in conftest)
TEST_JWT_SECRET = "test-jwt-secret-for-unit-tests"


def create_test_token(exp_offset: int = 3600, secret: str = TEST_JWT_SECRET) -> str:
    """Create a test access token."""
    now = int(time.time())
    payload = {
        "id": 7,
        "username": "jane",
        "role": "user",
        "site": "developerhorizon",
        "exp": now + exp_offset,
        "iat": now,
    }
    return jwt.encode(payload, secret, algorithm="HS256")


def sample_user() -> UserPublic:
    return UserPublic(id=7, username="jane", email="jane@example.com", role="user", site="developerhorizon")


class TestRegister:
    """Tests for POST /api/v1/auth/register."""

    @patch("src.api.routes.auth.AuthService")
    def test_register_returns_201(self, mock_service_cls: MagicMock, client: TestClient) -> None:
        mock_service_cls.return_value.register = AsyncMock(return_value=sample_user())

        response = client.post(
            "/api/v1/auth/register",
            json={"username": "jane", "password": "s3cret!", "email": "jane@example.com", "site": "developerhorizon"},
        )

        assert response.status_code == 201
        data = response.json()
        assert data["message"] == "User registered"
        assert data["user"]["username"] == "jane"
        assert "password_hash" not in data["user"]

    @patch("src.api.routes.auth.AuthService")
    def test_register_missing_fields_returns_400(self, mock_service_cls: MagicMock, client: TestClient) -> None:
        response = client.post("/api/v1/auth/register", json={"username": "jane", "password": ""})

        assert response.status_code == 400
        assert response.json() == {"errors": ["Username, password, email, and site are required."]}
        mock_service_cls.assert_not_called()

    @patch("src.api.routes.auth.AuthService")
    def test_register_duplicate_returns_400(self, mock_service_cls: MagicMock, client: TestClient) -> None:
        mock_service_cls.return_value.register = AsyncMock(side_effect=DuplicateUserError())

        response = client.post(
            "/api/v1/auth/register",
            json={"username": "jane", "password": "s3cret!", "email": "jane@example.com", "site": "developerhorizon"},
        )

        assert response.status_code == 400
        assert response.json()["error"] == "Username or email already exists for this site."
        assert response.json()["code"] == "duplicate_user"

    @patch("src.api.routes.auth.AuthService")
    def test_register_failure_returns_500(self, mock_service_cls: MagicMock, client: TestClient) -> None:
        mock_service_cls.return_value.register = AsyncMock(side_effect=RegistrationFailedError())

        response = client.post(
            "/api/v1/auth/register",
            json={"username": "jane", "password": "s3cret!", "email": "jane@example.com", "site": "developerhorizon"},
        )

        assert response.status_code == 500
        assert response.json()["error"] == "Error registering user."

    def test_register_long_password_returns_201(self, client: TestClient) -> None:
        """Test an 80-character password goes through the real service without a 500."""
        db = MagicMock()
        insert_response = MagicMock()
        insert_response.data = [
            {"id": 7, "username": "jane", "email": "jane@example.com", "role": "user", "site": "developerhorizon"}
        ]
        db.table.return_value.insert.return_value.execute.return_value = insert_response

        with patch("src.api.routes.auth.AuthService", return_value=AuthService(client=db, bcrypt_rounds=4)):
            response = client.post(
                "/api/v1/auth/register",
                json={"username": "jane", "password": "p" * 80, "email": "jane@example.com", "site": "developerhorizon"},
            )

        assert response.status_code == 201
        assert response.json()["user"]["id"] == 7


class TestLogin:
    """Tests for POST /api/v1/auth/login."""

    @patch("src.api.routes.auth.AuthService")
    def test_login_returns_token(self, mock_service_cls: MagicMock, client: TestClient) -> None:
        mock_service_cls.return_value.authenticate = AsyncMock(
            return_value=LoginResponse(token="signed-token", user=sample_user())
        )

        response = client.post(
            "/api/v1/auth/login",
            json={"username": "jane", "password": "s3cret!", "site": "developerhorizon"},
        )

        assert response.status_code == 200
        assert response.json()["token"] == "signed-token"
        assert response.json()["user"]["site"] == "developerhorizon"

    @patch("src.api.routes.auth.AuthService")
    def test_login_invalid_credentials_returns_401(self, mock_service_cls: MagicMock, client: TestClient) -> None:
        mock_service_cls.return_value.authenticate = AsyncMock(return_value=None)

        response = client.post(
            "/api/v1/auth/login",
            json={"username": "jane", "password": "wrong", "site": "developerhorizon"},
        )

        assert response.status_code == 401
        assert response.json()["error"] == "Invalid credentials."

    def test_login_missing_fields_returns_400(self, client: TestClient) -> None:
        response = client.post("/api/v1/auth/login", json={"username": "jane"})

        assert response.status_code == 400
        assert response.json() == {"errors": ["Username, password, and site are required."]}


class TestMe:
    """Tests for the bearer gate via GET /api/v1/auth/me."""

    def test_returns_401_without_auth_header(self, client: TestClient) -> None:
        response = client.get("/api/v1/auth/me")

        assert response.status_code == 401
        assert response.json()["error"] == "Access token is missing."
        assert response.headers["WWW-Authenticate"] == "Bearer"

    def test_returns_401_with_invalid_header_format(self, client: TestClient) -> None:
        response = client.get("/api/v1/auth/me", headers={"Authorization": "InvalidFormat"})

        assert response.status_code == 401

    def test_returns_403_with_expired_token(self, client: TestClient) -> None:
        token = create_test_token(exp_offset=-3600)

        response = client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 403
        assert response.json()["error"] == "Invalid or expired token."

    def test_returns_403_with_wrong_signature(self, client: TestClient) -> None:
        token = create_test_token(secret="another-secret")

        response = client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 403

    def test_returns_claims_with_valid_token(self, client: TestClient) -> None:
        token = create_test_token()

        response = client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 200
        assert response.json() == {"id": 7, "username": "jane", "role": "user", "site": "developerhorizon"}

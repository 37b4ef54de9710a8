"""Pytest configuration and fixtures."""

import json
import os
from collections.abc import Generator
from typing import Any
from unittest.mock import MagicMock, patch

import pytest
from fastapi.testclient import TestClient

# Set test environment variables before importing application modules
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_SECRET_KEY", "test-secret-key")
os.environ.setdefault("JWT_SECRET", "test-jwt-secret-for-unit-tests")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("PRINTIFY_API_KEY", "test-printify-key")
os.environ.setdefault("ORDER_LINK_MAX_ATTEMPTS", "3")
os.environ.setdefault(
    "STORE_EMAILS",
    json.dumps(
        {
            "12345": {
                "store_name": "Developer Horizon",
                "sender": "orders@developerhorizon.com",
                "resend_api_key": "re_test_key",
                "frontend_url": "https://developerhorizon.com/",
            }
        }
    ),
)
os.environ.setdefault("STRIPE_STORE_KEYS", json.dumps({"12345": "sk_test_store_key"}))

TEST_JWT_SECRET = "test-jwt-secret-for-unit-tests"


@pytest.fixture(scope="session")
def test_settings() -> Generator[Any, None, None]:
    """Provide test settings with cleared cache.

    Yields:
        Settings: Test configuration settings.
    """
    from src.core.config import get_settings

    # Clear the cache to ensure fresh settings
    get_settings.cache_clear()

    settings = get_settings()
    yield settings

    # Clean up cache after tests
    get_settings.cache_clear()


@pytest.fixture
def mock_supabase_client() -> Generator[MagicMock, None, None]:
    """Provide a mocked Supabase client.

    Yields:
        MagicMock: Mocked Supabase client for testing.
    """
    mock_client = MagicMock()

    # Configure default mock responses
    mock_response = MagicMock()
    mock_response.data = []
    mock_client.table.return_value.select.return_value.limit.return_value.execute.return_value = (
        mock_response
    )

    with patch("src.core.supabase.get_supabase_client", return_value=mock_client):
        yield mock_client


@pytest.fixture
def client(mock_supabase_client: MagicMock) -> Generator[TestClient, None, None]:
    """Provide a test client for the FastAPI application.

    Args:
        mock_supabase_client: Mocked Supabase client fixture.

    Yields:
        TestClient: FastAPI test client.
    """
    from src.main import app

    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def order_body() -> dict[str, Any]:
    """A complete submit-order request body."""
    return {
        "storeId": "12345",
        "stripe_payment_id": "pi_test_123",
        "order": {
            "total_price": 3498,
            "currency": "USD",
            "shipping_method": 1,
            "shipping_cost": 499,
            "customer": {
                "email": "jane@example.com",
                "address": {
                    "first_name": "Jane",
                    "last_name": "Doe",
                    "country": "US",
                    "region": "CA",
                    "city": "San Francisco",
                    "address1": "1 Market St",
                    "zip": "94105",
                },
            },
            "line_items": [
                {
                    "product_id": "prod_abc",
                    "variant_id": 101,
                    "quantity": 2,
                    "print_provider_id": 29,
                    "metadata": {
                        "title": "Logo Tee",
                        "price": 1499,
                        "variant_label": "Black / M",
                        "sku": "TEE-BLK-M",
                        "country": "US",
                    },
                }
            ],
        },
    }

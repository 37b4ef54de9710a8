"""Integration tests for Printify order, shipping and product endpoints."""

import time
from unittest.mock import AsyncMock, MagicMock, patch

from fastapi.testclient import TestClient
from jose import jwt

from src.schemas.printify import OrderStatusResponse, ShippingQuote, StatusCustomer, StatusMetadata
from src.services.order_service import (
    OrderLinkError,
    OrderNotFoundError,
    OrderNotLinkedError,
    OrderPersistenceError,
    OrderService,
)
from src.services.order_store import OrderStore
from src.services.printify_service import (
    FulfillmentUnavailableError,
    OrderFetchError,
    OrderSubmissionError,
    ShippingRatesError,
)

TEST_JWT_SECRET = "test-jwt-secret-for-unit-tests"


def auth_headers() -> dict[str, str]:
    now = int(time.time())
    token = jwt.encode(
        {"id": 1, "username": "admin", "role": "admin", "site": "developerhorizon", "iat": now, "exp": now + 600},
        TEST_JWT_SECRET,
        algorithm="HS256",
    )
    return {"Authorization": f"Bearer {token}"}


class TestSubmitOrder:
    """Tests for POST /api/v1/printify/submit-order."""

    @patch("src.api.routes.printify.OrderService")
    def test_submit_returns_201_with_order_number(
        self, mock_service_cls: MagicMock, client: TestClient, order_body: dict
    ) -> None:
        mock_service_cls.return_value.submit_order = AsyncMock(
            return_value={
                "order_number": "3f1c2d4e-0000-4000-8000-000000000001",
                "provider_order_id": "pf_987",
                "email_sent": True,
                "email_error": None,
            }
        )

        response = client.post("/api/v1/printify/submit-order", json=order_body)

        assert response.status_code == 201
        assert response.json() == {
            "success": True,
            "orderId": "3f1c2d4e-0000-4000-8000-000000000001",
            "providerOrderId": "pf_987",
        }
        kwargs = mock_service_cls.return_value.submit_order.call_args.kwargs
        assert kwargs["store_id"] == "12345"
        assert kwargs["stripe_payment_id"] == "pi_test_123"
        assert kwargs["order"].customer.email == "jane@example.com"

    @patch("src.api.routes.printify.OrderService")
    def test_submit_succeeds_even_if_email_failed(
        self, mock_service_cls: MagicMock, client: TestClient, order_body: dict
    ) -> None:
        mock_service_cls.return_value.submit_order = AsyncMock(
            return_value={
                "order_number": "ord-1",
                "provider_order_id": "pf_987",
                "email_sent": False,
                "email_error": "resend down",
            }
        )

        response = client.post("/api/v1/printify/submit-order", json=order_body)

        assert response.status_code == 201

    @patch("src.api.routes.printify.OrderService")
    def test_missing_top_level_fields_returns_400(
        self, mock_service_cls: MagicMock, client: TestClient, order_body: dict
    ) -> None:
        del order_body["stripe_payment_id"]

        response = client.post("/api/v1/printify/submit-order", json=order_body)

        assert response.status_code == 400
        assert response.json() == {"errors": ["Missing storeId, order details, or stripe_payment_id."]}
        mock_service_cls.assert_not_called()

    @patch("src.api.routes.printify.OrderService")
    def test_empty_line_items_returns_400(
        self, mock_service_cls: MagicMock, client: TestClient, order_body: dict
    ) -> None:
        order_body["order"]["line_items"] = []

        response = client.post("/api/v1/printify/submit-order", json=order_body)

        assert response.status_code == 400
        assert response.json()["errors"]

    @patch("src.api.routes.printify.OrderService")
    def test_persistence_failure_returns_500(
        self, mock_service_cls: MagicMock, client: TestClient, order_body: dict
    ) -> None:
        mock_service_cls.return_value.submit_order = AsyncMock(side_effect=OrderPersistenceError())

        response = client.post("/api/v1/printify/submit-order", json=order_body)

        assert response.status_code == 500
        assert response.json()["error"] == "Failed to process order."

    @patch("src.api.routes.printify.OrderService")
    def test_submission_failure_hides_provider_message(
        self, mock_service_cls: MagicMock, client: TestClient, order_body: dict
    ) -> None:
        mock_service_cls.return_value.submit_order = AsyncMock(
            side_effect=OrderSubmissionError("Shop 12345 token revoked")
        )

        response = client.post("/api/v1/printify/submit-order", json=order_body)

        assert response.status_code == 500
        assert response.json()["error"] == "Failed to process order."
        assert "revoked" not in response.text

    @patch("src.api.routes.printify.OrderService")
    def test_unlinked_order_returns_distinct_code(
        self, mock_service_cls: MagicMock, client: TestClient, order_body: dict
    ) -> None:
        mock_service_cls.return_value.submit_order = AsyncMock(side_effect=OrderLinkError("ord-1", "pf_987"))

        response = client.post("/api/v1/printify/submit-order", json=order_body)

        assert response.status_code == 500
        data = response.json()
        assert data["code"] == "order_unlinked"
        assert data["details"] == {"order_number": "ord-1", "provider_order_id": "pf_987"}


class TestOrderStatus:
    """Tests for POST /api/v1/printify/order-status."""

    @patch("src.api.routes.printify.OrderService")
    def test_returns_merged_status(self, mock_service_cls: MagicMock, client: TestClient) -> None:
        mock_service_cls.return_value.get_order_status = AsyncMock(
            return_value=OrderStatusResponse(
                order_status="fulfilled",
                tracking_number="9400",
                tracking_url="https://track.example/9400",
                total_price=3498,
                total_shipping=499,
                currency="USD",
                created_at="2024-05-01 10:00:00+00:00",
                customer=StatusCustomer(first_name="Jane"),
                items=[],
                metadata=StatusMetadata(),
                shipments=[],
            )
        )

        response = client.post(
            "/api/v1/printify/order-status",
            json={"orderId": "ord-1", "email": "jane@example.com"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["total_price"] == 3498
        assert data["total_shipping"] == 499
        assert data["metadata"]["order_type"] == "N/A"
        mock_service_cls.return_value.get_order_status.assert_awaited_once_with("ord-1", "jane@example.com")

    def test_missing_fields_returns_400(self, client: TestClient) -> None:
        response = client.post("/api/v1/printify/order-status", json={"orderId": "ord-1"})

        assert response.status_code == 400
        assert response.json() == {"errors": ["Missing orderId or email."]}

    @patch("src.api.routes.printify.OrderService")
    def test_not_found_returns_404(self, mock_service_cls: MagicMock, client: TestClient) -> None:
        mock_service_cls.return_value.get_order_status = AsyncMock(side_effect=OrderNotFoundError())

        response = client.post(
            "/api/v1/printify/order-status",
            json={"orderId": "ord-1", "email": "wrong@example.com"},
        )

        assert response.status_code == 404
        assert response.json()["error"] == "Order not found."

    @patch("src.api.routes.printify.OrderService")
    def test_unlinked_returns_422(self, mock_service_cls: MagicMock, client: TestClient) -> None:
        mock_service_cls.return_value.get_order_status = AsyncMock(side_effect=OrderNotLinkedError())

        response = client.post(
            "/api/v1/printify/order-status",
            json={"orderId": "ord-1", "email": "jane@example.com"},
        )

        assert response.status_code == 422
        assert response.json()["error"] == "Order not found."
        assert response.json()["code"] == "order_not_linked"

    @patch("src.api.routes.printify.OrderService")
    def test_provider_failure_returns_500(self, mock_service_cls: MagicMock, client: TestClient) -> None:
        mock_service_cls.return_value.get_order_status = AsyncMock(side_effect=OrderFetchError())

        response = client.post(
            "/api/v1/printify/order-status",
            json={"orderId": "ord-1", "email": "jane@example.com"},
        )

        assert response.status_code == 500
        assert response.json()["error"] == "Failed to retrieve order status."

    def test_database_failure_returns_catalog_message(self, client: TestClient) -> None:
        failing_db = MagicMock()
        select = failing_db.table.return_value.select
        select.return_value.eq.return_value.eq.return_value.maybe_single.return_value.execute.side_effect = Exception(
            "connection reset"
        )
        service = OrderService(
            order_store=OrderStore(client=failing_db),
            printify_service=MagicMock(),
            email_service=MagicMock(),
            link_max_attempts=1,
        )

        with patch("src.api.routes.printify.OrderService", return_value=service):
            response = client.post(
                "/api/v1/printify/order-status",
                json={"orderId": "ord-1", "email": "jane@example.com"},
            )

        assert response.status_code == 500
        assert response.json()["error"] == "Failed to retrieve order status."
        assert response.json()["code"] == "order_lookup_failed"
        assert "connection reset" not in response.text


class TestProductsAndShipping:
    """Tests for product listing and shipping quotes."""

    @patch("src.api.routes.printify.PrintifyService")
    def test_products_passthrough(self, mock_service_cls: MagicMock, client: TestClient) -> None:
        body = {"current_page": 1, "data": [{"id": "p1"}]}
        mock_service_cls.return_value.get_products = AsyncMock(return_value=body)

        response = client.get("/api/v1/printify/12345/products")

        assert response.status_code == 200
        assert response.json() == body
        mock_service_cls.return_value.get_products.assert_awaited_once_with("12345")

    @patch("src.api.routes.printify.PrintifyService")
    def test_products_failure_returns_500(self, mock_service_cls: MagicMock, client: TestClient) -> None:
        mock_service_cls.return_value.get_products = AsyncMock(side_effect=FulfillmentUnavailableError("nope"))

        response = client.get("/api/v1/printify/12345/products")

        assert response.status_code == 500
        assert response.json()["error"] == "Failed to fetch products from Printify."

    @patch("src.api.routes.printify.PrintifyService")
    def test_shipping_options(self, mock_service_cls: MagicMock, client: TestClient) -> None:
        mock_service_cls.return_value.get_shipping_rates = AsyncMock(
            return_value=[ShippingQuote(code="standard", price=499), ShippingQuote(code="priority", price=1599)]
        )

        response = client.post(
            "/api/v1/printify/12345/shipping-options",
            json={
                "address_to": {"country": "US", "zip": "94105"},
                "line_items": [{"product_id": "prod_abc", "variant_id": 101, "quantity": 1}],
            },
        )

        assert response.status_code == 200
        assert response.json() == [{"code": "standard", "price": 499}, {"code": "priority", "price": 1599}]

    def test_shipping_options_missing_fields_returns_400(self, client: TestClient) -> None:
        response = client.post("/api/v1/printify/12345/shipping-options", json={"address_to": {"country": "US"}})

        assert response.status_code == 400
        assert response.json() == {"errors": ["Missing required fields."]}

    @patch("src.api.routes.printify.PrintifyService")
    def test_shipping_failure_returns_500(self, mock_service_cls: MagicMock, client: TestClient) -> None:
        mock_service_cls.return_value.get_shipping_rates = AsyncMock(side_effect=ShippingRatesError())

        response = client.post(
            "/api/v1/printify/12345/shipping-options",
            json={
                "address_to": {"country": "US"},
                "line_items": [{"product_id": "prod_abc", "variant_id": 101, "quantity": 1}],
            },
        )

        assert response.status_code == 500
        assert response.json()["error"] == "Failed to retrieve shipping options."


class TestSendToProduction:
    """Tests for the protected send-to-production endpoint."""

    def test_requires_token(self, client: TestClient) -> None:
        response = client.post("/api/v1/printify/12345/orders/pf_987/send-to-production")

        assert response.status_code == 401

    @patch("src.api.routes.printify.PrintifyService")
    def test_sends_with_valid_token(self, mock_service_cls: MagicMock, client: TestClient) -> None:
        mock_service_cls.return_value.send_to_production = AsyncMock(return_value=None)

        response = client.post(
            "/api/v1/printify/12345/orders/pf_987/send-to-production",
            headers=auth_headers(),
        )

        assert response.status_code == 200
        assert response.json() == {"success": True}
        mock_service_cls.return_value.send_to_production.assert_awaited_once_with("12345", "pf_987")

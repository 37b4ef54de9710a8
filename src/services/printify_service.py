"""Printify API client for products, shipping quotes and orders."""

import logging
import time
from typing import Any, Callable

import httpx

from src.api.middleware.error_handler import UpstreamError
from src.core.errors import PRINTIFY_ERRORS
from src.core.printify import create_printify_client, log_call_latency, provider_error_message
from src.schemas.printify import OrderPayload, ShippingQuote, ShippingRatesRequest

logger = logging.getLogger(__name__)

# Printify renamed its shipping fields over time. The old "express" field is
# priority-speed shipping; "printify_express" is today's express tier.
SHIPPING_FIELD_CODES: dict[str, str] = {
    "economy": "economy",
    "standard": "standard",
    "printify_express": "express",
    "express": "priority",
    "priority": "priority",
}

SHIPPING_DISPLAY_ORDER = ["economy", "standard", "express", "priority"]

MISSING_PHONE_PLACEHOLDER = "000-000-0000"


class PrintifyError(UpstreamError):
    """Base class for Printify failures.

    ``provider_message`` holds Printify's own message for logs; clients only
    see the catalog message.
    """

    def __init__(self, message: str, error_type: str, provider_message: str = "Unknown error") -> None:
        super().__init__(message=message, error_type=error_type)
        self.provider_message = provider_message


class FulfillmentUnavailableError(PrintifyError):
    """Printify could not serve a catalog or production request."""

    def __init__(
        self,
        provider_message: str = "Unknown error",
        message: str = PRINTIFY_ERRORS["FAILED_FETCH_PRODUCTS"],
    ) -> None:
        super().__init__(message, "fulfillment_unavailable", provider_message)


class ShippingRatesError(PrintifyError):
    """Shipping quote request failed."""

    def __init__(self, provider_message: str = "Unknown error") -> None:
        super().__init__(PRINTIFY_ERRORS["FAILED_SHIPPING_OPTIONS"], "shipping_rates_failed", provider_message)


class OrderSubmissionError(PrintifyError):
    """Printify rejected or never received an order."""

    def __init__(self, provider_message: str = "Unknown error") -> None:
        super().__init__(PRINTIFY_ERRORS["FAILED_PROCESS_ORDER"], "order_submission_failed", provider_message)


class OrderFetchError(PrintifyError):
    """Printify order details could not be fetched."""

    def __init__(self, provider_message: str = "Unknown error") -> None:
        super().__init__(PRINTIFY_ERRORS["FAILED_ORDER_STATUS"], "order_fetch_failed", provider_message)


def _option_price(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return int(value)
    if isinstance(value, dict):
        return _option_price(value.get("price"))
    if isinstance(value, list):
        prices = [price for price in (_option_price(option) for option in value) if price is not None]
        return min(prices) if prices else None
    return None


def normalize_shipping_rates(raw: Any) -> list[ShippingQuote]:
    """Map Printify's raw shipping response onto canonical shipping codes.

    Each raw field may hold a price, a single option with a ``price`` or a
    list of such options. The cheapest price wins when several fields map to
    the same code. Only codes present in the response are returned, sorted
    by price and then by display order.

    Args:
        raw: Decoded JSON body from the shipping endpoint.

    Returns:
        list[ShippingQuote]: Normalized quotes.
    """
    if not isinstance(raw, dict):
        return []

    cheapest: dict[str, int] = {}
    for field, code in SHIPPING_FIELD_CODES.items():
        if field not in raw:
            continue
        price = _option_price(raw[field])
        if price is None:
            continue
        if code not in cheapest or price < cheapest[code]:
            cheapest[code] = price

    ordered = sorted(cheapest.items(), key=lambda item: (item[1], SHIPPING_DISPLAY_ORDER.index(item[0])))
    return [ShippingQuote(code=code, price=price) for code, price in ordered]


def build_order_payload(order_number: str, order: OrderPayload) -> dict[str, Any]:
    """Build the body Printify expects for a new order.

    ``external_id`` ties the Printify order back to the local order number.
    Printify's own shipping notification is turned off; the store sends its
    own confirmation.
    """
    address = order.customer.address
    return {
        "external_id": order_number,
        "line_items": [item.model_dump(exclude_none=True) for item in order.line_items],
        "total_price": order.total_price,
        "currency": order.currency,
        "shipping_method": order.shipping_method,
        "shipping_cost": order.shipping_cost,
        "send_shipping_notification": False,
        "address_to": {
            "first_name": address.first_name,
            "last_name": address.last_name,
            "email": order.customer.email,
            "phone": address.phone or MISSING_PHONE_PLACEHOLDER,
            "country": address.country,
            "region": address.region or "",
            "city": address.city,
            "address1": address.address1,
            "address2": address.address2 or "",
            "zip": address.zip,
        },
    }


class PrintifyService:
    """Service for calling the Printify API.

    Each call is a single attempt. Retrying order submission could create
    duplicate orders upstream, so any retry policy belongs to the caller.
    """

    def __init__(self, client_factory: Callable[[], httpx.AsyncClient] = create_printify_client) -> None:
        self.client_factory = client_factory

    async def _request(
        self,
        operation: str,
        method: str,
        path: str,
        json: dict[str, Any] | None = None,
    ) -> Any:
        start_time = time.perf_counter()
        try:
            async with self.client_factory() as client:
                response = await client.request(method, path, json=json)
                response.raise_for_status()
                data = response.json() if response.content else {}
        except (httpx.HTTPError, ValueError) as e:
            latency_ms = (time.perf_counter() - start_time) * 1000
            log_call_latency(operation, latency_ms, error=f"{type(e).__name__}: {provider_error_message(e)}")
            raise

        log_call_latency(operation, (time.perf_counter() - start_time) * 1000)
        return data

    async def get_products(self, store_id: str) -> Any:
        """Fetch all products for a store.

        Args:
            store_id: Printify shop ID.

        Returns:
            Any: Printify's product listing, unchanged.

        Raises:
            FulfillmentUnavailableError: If the request fails.
        """
        try:
            return await self._request("get_products", "GET", f"/shops/{store_id}/products.json")
        except (httpx.HTTPError, ValueError) as e:
            raise FulfillmentUnavailableError(provider_error_message(e)) from e

    async def get_shipping_rates(self, store_id: str, request: ShippingRatesRequest) -> list[ShippingQuote]:
        """Quote shipping for a cart.

        Args:
            store_id: Printify shop ID.
            request: Destination address and line items.

        Returns:
            list[ShippingQuote]: Normalized quotes, cheapest first.

        Raises:
            ShippingRatesError: If the request fails.
        """
        try:
            raw = await self._request(
                "get_shipping_rates",
                "POST",
                f"/shops/{store_id}/orders/shipping.json",
                json=request.model_dump(mode="json", exclude_none=True),
            )
        except (httpx.HTTPError, ValueError) as e:
            raise ShippingRatesError(provider_error_message(e)) from e
        return normalize_shipping_rates(raw)

    async def submit_order(self, store_id: str, order_number: str, order: OrderPayload) -> dict[str, Any]:
        """Create an order in Printify.

        Args:
            store_id: Printify shop ID.
            order_number: Local order number, sent as ``external_id``.
            order: Order details from the storefront.

        Returns:
            dict: Printify's response; ``id`` is the Printify order ID.

        Raises:
            OrderSubmissionError: If the request fails or returns no order ID.
        """
        payload = build_order_payload(order_number, order)
        try:
            data = await self._request("submit_order", "POST", f"/shops/{store_id}/orders.json", json=payload)
        except (httpx.HTTPError, ValueError) as e:
            raise OrderSubmissionError(provider_error_message(e)) from e

        if not isinstance(data, dict) or not data.get("id"):
            logger.error("Printify accepted order %s without returning an ID", order_number)
            raise OrderSubmissionError("Missing order ID in response")

        logger.info("Order %s submitted to Printify as %s", order_number, data["id"])
        return data

    async def get_order(self, store_id: str, provider_order_id: str) -> dict[str, Any]:
        """Fetch a Printify order.

        Raises:
            OrderFetchError: If the request fails.
        """
        try:
            data = await self._request(
                "get_order",
                "GET",
                f"/shops/{store_id}/orders/{provider_order_id}.json",
            )
        except (httpx.HTTPError, ValueError) as e:
            raise OrderFetchError(provider_error_message(e)) from e

        if not isinstance(data, dict):
            raise OrderFetchError("Unexpected response body")
        return data

    async def send_to_production(self, store_id: str, provider_order_id: str) -> None:
        """Release an on-hold Printify order for production.

        Raises:
            FulfillmentUnavailableError: If the request fails.
        """
        try:
            await self._request(
                "send_to_production",
                "POST",
                f"/shops/{store_id}/orders/{provider_order_id}/send_to_production.json",
                json={},
            )
        except (httpx.HTTPError, ValueError) as e:
            raise FulfillmentUnavailableError(
                provider_error_message(e),
                message=PRINTIFY_ERRORS["FAILED_SEND_TO_PRODUCTION"],
            ) from e

        logger.info("Printify order %s sent to production", provider_order_id)

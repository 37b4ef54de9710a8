"""Order submission and status business logic service."""

import logging
from datetime import datetime, timezone
from typing import Any
from uuid import uuid4

from tenacity import (
    AsyncRetrying,
    RetryError,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from src.api.middleware.error_handler import (
    NotFoundError,
    PersistenceError,
    UnlinkedResourceError,
)
from src.core.config import get_settings
from src.core.errors import PRINTIFY_ERRORS
from src.models.order import OrderCreate
from src.schemas.email import OrderEmailItem, OrderEmailSummary
from src.schemas.printify import (
    OrderPayload,
    OrderStatusResponse,
    StatusCustomer,
    StatusItem,
    StatusMetadata,
    StatusShipment,
)
from src.services.email_service import EmailService
from src.services.order_store import OrderStore
from src.services.printify_service import PrintifyService

logger = logging.getLogger(__name__)

LINK_MIN_WAIT_SECONDS = 0.2
LINK_MAX_WAIT_SECONDS = 2


class OrderPersistenceError(PersistenceError):
    """The order could not be saved before submission."""

    def __init__(self) -> None:
        super().__init__(message=PRINTIFY_ERRORS["FAILED_PROCESS_ORDER"], error_type="order_persistence_failed")


class OrderLinkError(PersistenceError):
    """Printify accepted the order but its ID could not be stored locally."""

    def __init__(self, order_number: str, provider_order_id: str) -> None:
        super().__init__(
            message=PRINTIFY_ERRORS["ORDER_UNLINKED"],
            error_type="order_unlinked",
            details={"order_number": order_number, "provider_order_id": provider_order_id},
        )


class OrderLookupError(PersistenceError):
    """The order could not be read from the database."""

    def __init__(self) -> None:
        super().__init__(message=PRINTIFY_ERRORS["FAILED_ORDER_STATUS"], error_type="order_lookup_failed")


class OrderNotFoundError(NotFoundError):
    """No order matches the order number and email."""

    def __init__(self) -> None:
        super().__init__(message=PRINTIFY_ERRORS["ORDER_NOT_FOUND"], error_type="order_not_found")


class OrderNotLinkedError(UnlinkedResourceError):
    """The order exists but was never accepted by Printify."""

    def __init__(self) -> None:
        super().__init__(message=PRINTIFY_ERRORS["ORDER_NOT_FOUND"], error_type="order_not_linked")


def build_email_summary(order: OrderPayload) -> OrderEmailSummary:
    """Project an order onto the fields the confirmation email needs."""
    return OrderEmailSummary(
        address=order.customer.address,
        items=[
            OrderEmailItem(
                title=item.metadata.title,
                variant_label=item.metadata.variant_label,
                quantity=item.quantity,
                price=item.metadata.price,
            )
            for item in order.line_items
        ],
        shipping_method=order.shipping_method,
        total_price=order.total_price,
        currency=order.currency,
    )


def merge_order_status(order: dict[str, Any], provider_order: dict[str, Any]) -> OrderStatusResponse:
    """Combine the local order with Printify's live view of it.

    Money fields come from the local order, which records what the customer
    was charged. Everything else comes from Printify.
    """
    shipments = provider_order.get("shipments") or []
    first_shipment = shipments[0] if shipments else {}
    address = provider_order.get("address_to") or {}
    metadata = provider_order.get("metadata") or {}

    items = []
    for item in provider_order.get("line_items") or []:
        item_metadata = item.get("metadata") or {}
        items.append(
            StatusItem(
                product_id=item.get("product_id"),
                variant_id=item.get("variant_id"),
                quantity=item.get("quantity"),
                print_provider_id=item.get("print_provider_id"),
                price=item_metadata.get("price"),
                shipping_cost=item.get("shipping_cost") or 0,
                status=item.get("status"),
                title=item_metadata.get("title"),
                variant_label=item_metadata.get("variant_label"),
                sku=item_metadata.get("sku"),
                country=item_metadata.get("country") or "Unknown",
                sent_to_production_at=item.get("sent_to_production_at"),
                fulfilled_at=item.get("fulfilled_at"),
            )
        )

    return OrderStatusResponse(
        order_status=provider_order.get("status") or "unknown",
        tracking_number=first_shipment.get("number") or None,
        tracking_url=first_shipment.get("url") or None,
        total_price=order["total_price"],
        total_shipping=order["shipping_cost"],
        currency=order["currency"],
        created_at=provider_order.get("created_at") or _utc_now_iso(),
        customer=StatusCustomer(**{field: str(address.get(field) or "") for field in StatusCustomer.model_fields}),
        items=items,
        metadata=StatusMetadata(
            order_type=metadata.get("order_type") or "N/A",
            shop_order_id=metadata.get("shop_order_id") or "N/A",
            shop_order_label=metadata.get("shop_order_label") or "N/A",
            shop_fulfilled_at=metadata.get("shop_fulfilled_at") or None,
        ),
        shipping_method=provider_order.get("shipping_method"),
        is_printify_express=bool(provider_order.get("is_printify_express")),
        is_economy_shipping=bool(provider_order.get("is_economy_shipping")),
        shipments=[
            StatusShipment(
                carrier=shipment.get("carrier"),
                tracking_number=shipment.get("number"),
                tracking_url=shipment.get("url"),
                delivered_at=shipment.get("delivered_at"),
            )
            for shipment in shipments
        ],
        printify_connect=provider_order.get("printify_connect") or None,
    )


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class OrderService:
    """Coordinates saving, submitting, linking and confirming orders."""

    def __init__(
        self,
        order_store: OrderStore | None = None,
        printify_service: PrintifyService | None = None,
        email_service: EmailService | None = None,
        link_max_attempts: int | None = None,
    ) -> None:
        self.order_store = order_store or OrderStore()
        self.printify_service = printify_service or PrintifyService()
        self.email_service = email_service or EmailService()
        self.link_max_attempts = link_max_attempts or get_settings().order_link_max_attempts

    async def submit_order(
        self,
        store_id: str,
        order: OrderPayload,
        stripe_payment_id: str,
    ) -> dict[str, Any]:
        """Save a paid order, submit it to Printify and email the customer.

        Steps run strictly in order. A failed email is recorded in the result
        but never fails the order.

        Args:
            store_id: Printify shop ID.
            order: Order details from the storefront.
            stripe_payment_id: Stripe PaymentIntent that paid for the order.

        Returns:
            dict: ``order_number``, ``provider_order_id``, ``email_sent`` and ``email_error``.

        Raises:
            OrderPersistenceError: If the order cannot be saved.
            OrderSubmissionError: If Printify does not accept the order.
            OrderLinkError: If the Printify order ID cannot be stored.
        """
        order_number = str(uuid4())

        try:
            await self.order_store.save_order(
                OrderCreate(
                    order_number=order_number,
                    store_id=store_id,
                    email=order.customer.email,
                    total_price=order.total_price,
                    currency=order.currency,
                    shipping_method=order.shipping_method,
                    shipping_cost=order.shipping_cost,
                    shipping_address=order.customer.address.model_dump(),
                    items=[item.model_dump() for item in order.line_items],
                    stripe_payment_id=stripe_payment_id,
                    payment_status="paid",
                    order_status="pending",
                )
            )
        except PersistenceError as e:
            raise OrderPersistenceError() from e
        logger.info("Order %s saved for store %s", order_number, store_id)

        try:
            provider_response = await self.printify_service.submit_order(store_id, order_number, order)
        except Exception as e:
            logger.error("Order %s saved but not submitted to Printify: %s", order_number, str(e))
            raise
        provider_order_id = str(provider_response["id"])

        await self._link_provider_order(order_number, provider_order_id)

        try:
            email_result = await self.email_service.send_order_confirmation(
                store_id=store_id,
                to_email=order.customer.email,
                order_id=order_number,
                summary=build_email_summary(order),
            )
        except Exception as e:
            email_result = {"success": False, "error": str(e)}
        if not email_result.get("success"):
            logger.error("Order email failed for %s: %s", order_number, email_result.get("error"))

        return {
            "order_number": order_number,
            "provider_order_id": provider_order_id,
            "email_sent": bool(email_result.get("success")),
            "email_error": email_result.get("error"),
        }

    async def _link_provider_order(self, order_number: str, provider_order_id: str) -> None:
        # Safe to repeat: the update sets the same value each time.
        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(self.link_max_attempts),
                wait=wait_exponential(multiplier=LINK_MIN_WAIT_SECONDS, max=LINK_MAX_WAIT_SECONDS),
                retry=retry_if_exception_type(PersistenceError),
            ):
                with attempt:
                    await self.order_store.update_printify_order_id(order_number, provider_order_id)
        except RetryError as e:
            logger.error(
                "Order %s submitted to Printify as %s but could not be linked after %d attempts",
                order_number,
                provider_order_id,
                self.link_max_attempts,
            )
            raise OrderLinkError(order_number, provider_order_id) from e.last_attempt.exception()

        logger.info("Order %s linked to Printify order %s", order_number, provider_order_id)

    async def get_order_status(self, order_number: str, email: str) -> OrderStatusResponse:
        """Get the merged status of a customer's order.

        Args:
            order_number: Customer-facing order number.
            email: Email used for the order.

        Returns:
            OrderStatusResponse: Local money fields merged with live Printify data.

        Raises:
            OrderNotFoundError: If no order matches both values.
            OrderLookupError: If the order cannot be read from the database.
            OrderNotLinkedError: If the order never reached Printify.
            OrderFetchError: If Printify cannot be queried.
        """
        try:
            order = await self.order_store.get_order_by_customer(order_number, email)
        except PersistenceError as e:
            raise OrderLookupError() from e
        if not order:
            raise OrderNotFoundError()
        if not order.get("printify_order_id"):
            raise OrderNotLinkedError()

        provider_order = await self.printify_service.get_order(order["store_id"], order["printify_order_id"])
        return merge_order_status(dict(order), provider_order)

"""Printify product, shipping and order API routes."""

import logging
from typing import Any

from fastapi import APIRouter, status

from src.api.deps import CurrentUser
from src.schemas.printify import (
    OrderStatusRequest,
    OrderStatusResponse,
    ShippingQuote,
    ShippingRatesRequest,
    SubmitOrderRequest,
    SubmitOrderResponse,
)
from src.services.order_service import OrderService
from src.services.printify_service import PrintifyService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/printify", tags=["printify"])


@router.post(
    "/submit-order",
    response_model=SubmitOrderResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Submit a paid order",
    description="Save a paid order, submit it to Printify and send the confirmation email.",
)
async def submit_order(data: SubmitOrderRequest) -> SubmitOrderResponse:
    """Submit a paid order for fulfillment.

    Args:
        data: Store ID, order details and the Stripe payment ID.

    Returns:
        SubmitOrderResponse: Customer-facing order number and Printify order ID.
    """
    service = OrderService()
    result = await service.submit_order(
        store_id=data.store_id,
        order=data.order,
        stripe_payment_id=data.stripe_payment_id,
    )
    if not result["email_sent"]:
        logger.warning("Order %s placed without confirmation email", result["order_number"])

    return SubmitOrderResponse(
        orderId=result["order_number"],
        providerOrderId=result["provider_order_id"],
    )


@router.post(
    "/order-status",
    response_model=OrderStatusResponse,
    summary="Get order status",
    description="Look up an order by order number and email and return its live status.",
    responses={
        404: {"description": "No order matches the order number and email"},
        422: {"description": "Order exists but was never submitted to Printify"},
    },
)
async def get_order_status(data: OrderStatusRequest) -> OrderStatusResponse:
    """Get the merged status of a customer's order.

    Args:
        data: Order number and email.

    Returns:
        OrderStatusResponse: Order status with tracking details.
    """
    service = OrderService()
    return await service.get_order_status(data.orderId, data.email)


@router.get(
    "/{store_id}/products",
    summary="List store products",
    description="Return the store's Printify products unchanged.",
)
async def get_products(store_id: str) -> Any:
    service = PrintifyService()
    return await service.get_products(store_id)


@router.post(
    "/{store_id}/shipping-options",
    response_model=list[ShippingQuote],
    summary="Quote shipping",
    description="Quote shipping for a cart, normalized to economy, standard, express and priority.",
)
async def get_shipping_options(store_id: str, data: ShippingRatesRequest) -> list[ShippingQuote]:
    """Quote shipping options for a store and cart.

    Args:
        store_id: Printify shop ID.
        data: Destination address and line items.

    Returns:
        list[ShippingQuote]: Available options, cheapest first.
    """
    service = PrintifyService()
    return await service.get_shipping_rates(store_id, data)


@router.post(
    "/{store_id}/orders/{provider_order_id}/send-to-production",
    summary="Send order to production",
    description="Release a Printify order for production. Requires authentication.",
)
async def send_to_production(store_id: str, provider_order_id: str, user: CurrentUser) -> dict[str, bool]:
    """Release a Printify order for production.

    Args:
        store_id: Printify shop ID.
        provider_order_id: Printify order ID.
        user: The authenticated user.

    Returns:
        dict: ``{"success": True}``.
    """
    service = PrintifyService()
    await service.send_to_production(store_id, provider_order_id)
    logger.info("User %s sent Printify order %s to production", user.id, provider_order_id)
    return {"success": True}

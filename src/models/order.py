"""Order model type definitions for database operations."""

from datetime import datetime
from typing import Any, Literal, TypedDict


PaymentStatus = Literal["pending", "paid", "refunded"]
OrderStatus = Literal["pending", "processing", "fulfilled", "cancelled"]


class Order(TypedDict):
    """printify_orders table row representation.

    ``order_number`` is the customer-facing identifier and is sent to
    Printify as ``external_id``. ``printify_order_id`` stays null until
    Printify accepts the order and is never cleared afterwards.
    """

    id: int
    order_number: str
    store_id: str
    email: str
    total_price: int
    currency: str
    shipping_method: int
    shipping_cost: int
    shipping_address: dict[str, Any]
    items: list[dict[str, Any]]
    stripe_payment_id: str
    payment_status: PaymentStatus
    order_status: OrderStatus
    printify_order_id: str | None
    created_at: datetime


class OrderCreate(TypedDict):
    """Data required to insert a new order."""

    order_number: str
    store_id: str
    email: str
    total_price: int
    currency: str
    shipping_method: int
    shipping_cost: int
    shipping_address: dict[str, Any]
    items: list[dict[str, Any]]
    stripe_payment_id: str
    payment_status: PaymentStatus
    order_status: OrderStatus


class OrderLookup(TypedDict):
    """Subset of an order returned by the customer status lookup."""

    store_id: str
    printify_order_id: str | None
    total_price: int
    shipping_cost: int
    currency: str

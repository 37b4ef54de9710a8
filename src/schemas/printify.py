"""Printify order, shipping and status schemas for API request/response models."""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from src.core.errors import PRINTIFY_ERRORS
from src.schemas.common import require_non_empty


ShippingCode = Literal["economy", "standard", "express", "priority"]


class CustomerAddress(BaseModel):
    """Customer shipping address as sent by the storefront."""

    model_config = ConfigDict(coerce_numbers_to_str=True)

    first_name: str = Field(description="First name")
    last_name: str = Field(description="Last name")
    phone: str | None = Field(default=None, description="Phone number")
    country: str = Field(description="Country code")
    region: str | None = Field(default=None, description="Region or state")
    city: str = Field(description="City")
    address1: str = Field(description="Address line 1")
    address2: str | None = Field(default=None, description="Address line 2")
    zip: str = Field(description="Postal/ZIP code")


class Customer(BaseModel):
    """Customer placing the order."""

    email: str = Field(description="Customer email address")
    address: CustomerAddress = Field(description="Shipping address")


class LineItemMetadata(BaseModel):
    """Display data for a line item, used for confirmation emails."""

    model_config = ConfigDict(coerce_numbers_to_str=True)

    title: str = Field(description="Product title")
    price: int = Field(ge=0, description="Price paid per item in minor units")
    variant_label: str = Field(default="", description='Variant name, e.g. "Solid Red / M"')
    sku: str = Field(default="", description="SKU")
    country: str | None = Field(default=None, description="Shipping destination")


class OrderLineItem(BaseModel):
    """A single item in a submitted order."""

    model_config = ConfigDict(coerce_numbers_to_str=True, extra="allow")

    product_id: str = Field(description="Printify product ID")
    variant_id: int = Field(description="Printify variant ID")
    quantity: int = Field(ge=1, description="Quantity ordered")
    print_provider_id: int | None = Field(default=None, description="Print provider ID")
    metadata: LineItemMetadata = Field(description="Display metadata")


class OrderPayload(BaseModel):
    """Order details submitted by the storefront after payment."""

    line_items: list[OrderLineItem] = Field(min_length=1, description="Items in the order")
    customer: Customer = Field(description="Customer and address")
    total_price: int = Field(ge=0, description="Total charged in minor units")
    currency: str = Field(default="USD", description="ISO currency code")
    shipping_method: int = Field(description="Printify shipping method ID")
    shipping_cost: int = Field(ge=0, description="Shipping charged in minor units")

    @model_validator(mode="before")
    @classmethod
    def default_currency(cls, data: Any) -> Any:
        if isinstance(data, dict) and not data.get("currency"):
            data = {**data, "currency": "USD"}
        return data


class SubmitOrderRequest(BaseModel):
    """Request schema for POST /printify/submit-order."""

    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True)

    store_id: str = Field(alias="storeId", description="Printify store ID")
    order: OrderPayload = Field(description="Order details")
    stripe_payment_id: str = Field(description="Stripe PaymentIntent ID")

    @model_validator(mode="before")
    @classmethod
    def check_required(cls, data: Any) -> Any:
        if isinstance(data, dict) and "store_id" in data and "storeId" not in data:
            data = {**data, "storeId": data["store_id"]}
        return require_non_empty(
            data,
            ("storeId", "order", "stripe_payment_id"),
            PRINTIFY_ERRORS["MISSING_ORDER_FIELDS"],
        )


class SubmitOrderResponse(BaseModel):
    """Response schema for a successfully submitted order."""

    success: bool = Field(default=True, description="Always true on success")
    orderId: str = Field(description="Customer-facing order number")
    providerOrderId: str = Field(description="Printify order ID")


class OrderStatusRequest(BaseModel):
    """Request schema for POST /printify/order-status."""

    orderId: str = Field(description="Customer-facing order number")
    email: str = Field(description="Email used for the order")

    @model_validator(mode="before")
    @classmethod
    def check_required(cls, data: Any) -> Any:
        return require_non_empty(
            data,
            ("orderId", "email"),
            PRINTIFY_ERRORS["MISSING_ORDER_STATUS_FIELDS"],
        )


class ShippingLineItem(BaseModel):
    """Line item used when quoting shipping."""

    model_config = ConfigDict(coerce_numbers_to_str=True, extra="allow")

    product_id: str = Field(description="Printify product ID")
    variant_id: int = Field(description="Printify variant ID")
    quantity: int = Field(ge=1, description="Quantity")


class ShippingRatesRequest(BaseModel):
    """Request schema for POST /printify/{store_id}/shipping-options."""

    model_config = ConfigDict(extra="allow")

    address_to: dict[str, Any] = Field(description="Destination address in Printify's shape")
    line_items: list[ShippingLineItem] = Field(description="Items to ship")

    @model_validator(mode="before")
    @classmethod
    def check_required(cls, data: Any) -> Any:
        return require_non_empty(
            data,
            ("address_to", "line_items"),
            PRINTIFY_ERRORS["MISSING_SHIPPING_FIELDS"],
        )


class ShippingQuote(BaseModel):
    """Normalized shipping option."""

    code: ShippingCode = Field(description="Canonical shipping code")
    price: int = Field(description="Price in minor units")


# Order status response


class StatusCustomer(BaseModel):
    """Shipping address as Printify has it."""

    first_name: str = ""
    last_name: str = ""
    phone: str = ""
    country: str = ""
    region: str = ""
    city: str = ""
    address1: str = ""
    address2: str = ""
    zip: str = ""


class StatusItem(BaseModel):
    """Line item with production progress."""

    product_id: str | None = None
    variant_id: int | None = None
    quantity: int | None = None
    print_provider_id: int | None = None
    price: int | None = None
    shipping_cost: int = 0
    status: str | None = None
    title: str | None = None
    variant_label: str | None = None
    sku: str | None = None
    country: str = "Unknown"
    sent_to_production_at: str | None = None
    fulfilled_at: str | None = None


class StatusMetadata(BaseModel):
    """Printify order metadata."""

    order_type: str = "N/A"
    shop_order_id: int | str = "N/A"
    shop_order_label: str = "N/A"
    shop_fulfilled_at: str | None = None


class StatusShipment(BaseModel):
    """Carrier tracking for one shipment."""

    carrier: str | None = None
    tracking_number: str | None = None
    tracking_url: str | None = None
    delivered_at: str | None = None


class OrderStatusResponse(BaseModel):
    """Merged order status.

    Money fields come from the local order; everything else is live from
    Printify.
    """

    success: bool = True
    order_status: str
    tracking_number: str | None = None
    tracking_url: str | None = None
    total_price: int
    total_shipping: int
    currency: str
    created_at: str
    customer: StatusCustomer
    items: list[StatusItem]
    metadata: StatusMetadata
    shipping_method: int | None = None
    is_printify_express: bool = False
    is_economy_shipping: bool = False
    shipments: list[StatusShipment]
    printify_connect: dict[str, Any] | None = None

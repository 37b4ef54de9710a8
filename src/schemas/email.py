"""Order confirmation email schemas."""

from pydantic import BaseModel, Field

from src.schemas.printify import CustomerAddress


class OrderEmailItem(BaseModel):
    """A single line item shown in the confirmation email."""

    title: str = Field(description="Product title")
    variant_label: str = Field(default="", description="Variant label")
    quantity: int = Field(description="Quantity purchased")
    price: int = Field(description="Price per item in minor units")

    @property
    def line_total(self) -> int:
        return self.price * self.quantity


class OrderEmailSummary(BaseModel):
    """Minimal projection of an order needed to render the confirmation email."""

    address: CustomerAddress = Field(description="Shipping address")
    items: list[OrderEmailItem] = Field(description="Purchased items")
    shipping_method: int | str = Field(description="Shipping method code or label")
    total_price: int = Field(description="Total in minor units")
    currency: str = Field(default="USD", description="ISO currency code")


class OrderEmail(BaseModel):
    """A fully rendered email ready for the transport."""

    sender: str = Field(description='From header, e.g. "Store Orders <orders@store.com>"')
    to: str = Field(description="Recipient address")
    subject: str
    text: str
    html: str
    tracking_url: str = Field(description="Order status link included in the body")


class ComposeFailure(BaseModel):
    """Reason an email could not be composed for a store."""

    error: str

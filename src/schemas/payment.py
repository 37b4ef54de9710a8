"""Payment Pydantic schemas for API request/response models."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from src.core.errors import PAYMENT_ERRORS
from src.schemas.common import require_non_empty


class PaymentIntentCreate(BaseModel):
    """Schema for creating a PaymentIntent via POST /payments/payment-intent."""

    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True)

    store_id: str = Field(alias="storeId", description="Store whose Stripe account is charged")
    amount: int = Field(description="Amount in minor currency units")
    currency: str = Field(description="ISO currency code")

    @model_validator(mode="before")
    @classmethod
    def check_required(cls, data: Any) -> Any:
        data = require_non_empty(data, ("storeId", "amount", "currency"), PAYMENT_ERRORS["MISSING_FIELDS"])
        amount = data.get("amount")
        if isinstance(amount, bool) or not isinstance(amount, (int, float)) or amount <= 0:
            raise ValueError(PAYMENT_ERRORS["INVALID_AMOUNT"])
        if isinstance(amount, float) and not amount.is_integer():
            raise ValueError(PAYMENT_ERRORS["INVALID_AMOUNT"])
        return {**data, "amount": int(amount)}


class PaymentIntentResponse(BaseModel):
    """Schema for PaymentIntent creation response."""

    clientSecret: str = Field(description="Client secret for Stripe.js confirmation")

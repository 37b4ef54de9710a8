"""Payment API routes."""

from fastapi import APIRouter

from src.schemas.payment import PaymentIntentCreate, PaymentIntentResponse
from src.services.payment_service import PaymentService

router = APIRouter(prefix="/payments", tags=["payments"])


@router.post(
    "/payment-intent",
    response_model=PaymentIntentResponse,
    summary="Create PaymentIntent",
    description="Create a Stripe PaymentIntent on the store's Stripe account.",
)
async def create_payment_intent(data: PaymentIntentCreate) -> PaymentIntentResponse:
    """Create a PaymentIntent for the storefront checkout.

    Args:
        data: Store ID, amount in minor units and currency.

    Returns:
        PaymentIntentResponse: Client secret for Stripe.js.

    Raises:
        StoreConfigurationError: 500 if the store has no Stripe key.
        PaymentFailedError: 500 if Stripe rejects the request.
    """
    service = PaymentService()
    client_secret = await service.create_payment_intent(
        store_id=data.store_id,
        amount=data.amount,
        currency=data.currency,
    )
    return PaymentIntentResponse(clientSecret=client_secret)

"""Stripe PaymentIntent creation per store."""

import logging

import stripe

from src.api.middleware.error_handler import ConfigurationError, UpstreamError
from src.core.errors import PAYMENT_ERRORS
from src.core.stores import StoreRegistry, get_store_registry
from src.core.stripe import get_stripe

logger = logging.getLogger(__name__)


class StoreConfigurationError(ConfigurationError):
    """No Stripe secret key is configured for the store."""

    def __init__(self, store_id: str) -> None:
        super().__init__(
            message=PAYMENT_ERRORS["PAYMENT_FAILED"],
            error_type="store_not_configured",
        )
        self.store_id = store_id


class PaymentFailedError(UpstreamError):
    """Stripe rejected the PaymentIntent request."""

    def __init__(self) -> None:
        super().__init__(message=PAYMENT_ERRORS["PAYMENT_FAILED"], error_type="payment_failed")


class PaymentService:
    """Service for creating Stripe PaymentIntents with per-store keys."""

    def __init__(self, stores: StoreRegistry | None = None) -> None:
        self.stores = stores or get_store_registry()
        self.stripe = get_stripe()

    async def create_payment_intent(self, store_id: str, amount: int, currency: str) -> str:
        """Create a card PaymentIntent on the store's Stripe account.

        Args:
            store_id: Store whose Stripe account is charged.
            amount: Amount in minor currency units.
            currency: ISO currency code.

        Returns:
            str: The PaymentIntent client secret.

        Raises:
            StoreConfigurationError: If the store has no Stripe key.
            PaymentFailedError: If Stripe rejects the request.
        """
        api_key = self.stores.get_stripe_key(store_id)
        if not api_key:
            logger.error("No Stripe API key configured for store %s", store_id)
            raise StoreConfigurationError(store_id)

        try:
            payment_intent = self.stripe.PaymentIntent.create(
                amount=amount,
                currency=currency.lower(),
                payment_method_types=["card"],
                api_key=api_key,
            )
        except stripe.StripeError as e:
            logger.error("Error creating PaymentIntent for %s: %s", store_id, str(e))
            raise PaymentFailedError() from e

        logger.info("Created PaymentIntent %s for store %s", payment_intent.id, store_id)
        return payment_intent.client_secret

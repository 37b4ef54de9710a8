"""Stripe SDK configuration."""

import logging

import stripe

from src.core.config import get_settings

logger = logging.getLogger(__name__)


def configure_stripe() -> None:
    """Configure the Stripe SDK at application startup.

    Keys are per store and passed on each call, so only the API version is
    pinned globally here.
    """
    settings = get_settings()
    stripe.api_version = settings.stripe_api_version
    if not settings.stripe_store_keys:
        logger.warning("No Stripe store keys configured. Payment features will not work.")


def get_stripe() -> stripe:
    """Get the configured Stripe module.

    Returns:
        stripe: The Stripe module.
    """
    return stripe

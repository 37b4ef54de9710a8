"""Printify HTTP client configuration."""

import logging
from typing import Any

import httpx

from src.core.config import get_settings

logger = logging.getLogger(__name__)

# Latency thresholds for logging (milliseconds)
SLOW_CALL_THRESHOLD_MS = 2000
VERY_SLOW_CALL_THRESHOLD_MS = 5000


def create_printify_client() -> httpx.AsyncClient:
    """Create an async HTTP client for the Printify API.

    A fresh client is created per service call so it is always bound to the
    running event loop. Every request carries the bearer token and a bounded
    timeout; a hung upstream surfaces as httpx.TimeoutException.

    Returns:
        httpx.AsyncClient: Client with base URL, auth header and timeout set.
    """
    settings = get_settings()
    return httpx.AsyncClient(
        base_url=settings.printify_base_url,
        headers={
            "Authorization": f"Bearer {settings.printify_api_key}",
            "Content-Type": "application/json",
        },
        timeout=httpx.Timeout(settings.printify_timeout_seconds),
    )


def log_call_latency(operation: str, latency_ms: float, error: str | None = None) -> None:
    """Log a Printify call with a level chosen by latency and outcome."""
    if error:
        logger.error("Printify %s failed after %.2fms: %s", operation, latency_ms, error)
    elif latency_ms > VERY_SLOW_CALL_THRESHOLD_MS:
        logger.error("Printify %s VERY SLOW: %.2fms", operation, latency_ms)
    elif latency_ms > SLOW_CALL_THRESHOLD_MS:
        logger.warning("Printify %s slow: %.2fms", operation, latency_ms)
    else:
        logger.debug("Printify %s: %.2fms", operation, latency_ms)


def provider_error_message(error: Exception) -> str:
    """Extract the provider's error message from a failed call.

    Args:
        error: Exception raised while calling Printify.

    Returns:
        str: The provider's ``message`` field if present, else "Unknown error".
    """
    if isinstance(error, httpx.HTTPStatusError):
        try:
            body: Any = error.response.json()
        except ValueError:
            return "Unknown error"
        if isinstance(body, dict) and body.get("message"):
            return str(body["message"])
    return "Unknown error"

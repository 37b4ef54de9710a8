"""Read-only per-store configuration lookup."""

import logging
from dataclasses import dataclass
from functools import lru_cache
from types import MappingProxyType
from typing import Mapping

from src.core.config import Settings, StoreEmailSettings, get_settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StoreEmailConfig:
    """Email identity and link settings for one store."""

    store_name: str
    sender: str
    resend_api_key: str
    frontend_url: str
    locale: str | None = None

    @property
    def has_sender_identity(self) -> bool:
        """Whether the store can actually send mail."""
        return bool(self.sender and self.resend_api_key)

    @classmethod
    def from_settings(cls, entry: StoreEmailSettings) -> "StoreEmailConfig":
        return cls(
            store_name=entry.store_name,
            sender=entry.sender,
            resend_api_key=entry.resend_api_key,
            frontend_url=entry.frontend_url.rstrip("/"),
            locale=entry.locale,
        )


class StoreRegistry:
    """Lookup of store ID to per-store email and payment configuration.

    Built once at startup from settings and never mutated afterwards, so it
    can be shared across requests and injected into services.
    """

    def __init__(
        self,
        email_configs: Mapping[str, StoreEmailConfig] | None = None,
        stripe_keys: Mapping[str, str] | None = None,
    ) -> None:
        self._email_configs = MappingProxyType(dict(email_configs or {}))
        self._stripe_keys = MappingProxyType(dict(stripe_keys or {}))

    @classmethod
    def from_settings(cls, settings: Settings) -> "StoreRegistry":
        """Build the registry from application settings."""
        email_configs = {
            store_id: StoreEmailConfig.from_settings(entry)
            for store_id, entry in settings.store_emails.items()
        }
        stripe_keys = {store_id: key for store_id, key in settings.stripe_store_keys.items() if key}
        return cls(email_configs=email_configs, stripe_keys=stripe_keys)

    def get_email_config(self, store_id: str) -> StoreEmailConfig | None:
        return self._email_configs.get(str(store_id))

    def get_stripe_key(self, store_id: str) -> str | None:
        return self._stripe_keys.get(str(store_id))

    @property
    def store_ids(self) -> list[str]:
        """All store IDs with any configuration."""
        return sorted(set(self._email_configs) | set(self._stripe_keys))


@lru_cache
def get_store_registry() -> StoreRegistry:
    """Get cached store registry singleton.

    Returns:
        StoreRegistry: Registry resolved from current settings.
    """
    registry = StoreRegistry.from_settings(get_settings())
    for store_id in registry.store_ids:
        email_config = registry.get_email_config(store_id)
        if email_config and not email_config.has_sender_identity:
            logger.warning("Store %s has no sender identity; order emails will not be sent", store_id)
    return registry

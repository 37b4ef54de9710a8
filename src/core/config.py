"""Application configuration management using Pydantic Settings."""

from functools import lru_cache

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class StoreEmailSettings(BaseModel):
    """Email configuration for a single storefront.

    Loaded from the STORE_EMAILS JSON map, keyed by Printify store ID.
    """

    store_name: str = Field(description="Human-readable store name used in subjects and sender")
    sender: str = Field(default="", description="Sender mailbox, e.g. orders@example.com")
    resend_api_key: str = Field(default="", description="Resend API key used for this store")
    frontend_url: str = Field(description="Storefront URL used for order-status links")
    locale: str | None = Field(default=None, description="Optional locale hint for formatting")


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    All settings can be overridden via environment variables.
    Required settings will raise validation errors if not provided.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = Field(default="storefront-backend", description="Application name")
    app_env: str = Field(default="development", description="Environment (development/staging/production)")
    debug: bool = Field(default=False, description="Enable debug mode")

    # Server
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=5000, description="Server port")
    max_request_body_size: int = Field(default=1_048_576, description="Maximum request body size in bytes")

    # CORS
    cors_origins: str = Field(
        default="http://localhost:3000,http://localhost:5173",
        description="Comma-separated list of allowed CORS origins",
    )

    # Supabase
    supabase_url: str = Field(..., description="Supabase project URL")
    supabase_secret_key: str = Field(..., description="Supabase secret key for backend operations")

    # Auth tokens
    jwt_secret: str = Field(..., description="Secret used to sign access tokens")
    jwt_algorithm: str = Field(default="HS256", description="Access token signing algorithm")
    jwt_expires_hours: int = Field(default=24, ge=1, description="Access token lifetime in hours")
    bcrypt_rounds: int = Field(default=10, ge=4, le=31, description="bcrypt cost factor for password hashing")

    # Printify
    printify_api_key: str = Field(..., description="Printify personal access token")
    printify_base_url: str = Field(default="https://api.printify.com/v1", description="Printify API base URL")
    printify_timeout_seconds: float = Field(default=15.0, gt=0, description="Timeout for each Printify call")

    # Order pipeline
    order_link_max_attempts: int = Field(
        default=3,
        ge=1,
        description="Attempts to record the Printify order ID before reporting the order as unlinked",
    )

    # Per-store configuration (JSON maps keyed by store ID)
    store_emails: dict[str, StoreEmailSettings] = Field(
        default_factory=dict,
        description="Per-store email configuration as JSON",
    )
    stripe_store_keys: dict[str, str] = Field(
        default_factory=dict,
        description="Per-store Stripe secret keys as JSON",
    )
    stripe_api_version: str = Field(default="2023-10-16", description="Pinned Stripe API version")

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS origins string into a list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.app_env == "production"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings singleton.

    Returns:
        Settings: Application settings instance.

    Note:
        Settings are cached using lru_cache for performance.
        Call get_settings.cache_clear() to reload settings.
    """
    return Settings()

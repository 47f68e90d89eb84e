"""Application configuration using Pydantic BaseSettings."""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.constants import (
    CHECKOUT_ITEM_NAME_PREFIX,
    PAYMENT_CANCEL_PATH,
    PAYMENT_NOTIFY_PATH,
    PAYMENT_RETURN_PATH,
    STALE_MESSAGE_TIMEOUT_MINUTES,
)
from src.models.conversation_models import CheckoutInfo


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Built once at startup and treated as immutable for the process lifetime.
    """

    model_config = SettingsConfigDict(
        # Load .env first, then .env.local (for local/test overrides)
        # Later files override earlier ones, so .env.local takes precedence
        env_file=[".env", ".env.local"],
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
    )

    # WhatsApp Configuration
    whatsapp_verify_token: str = Field(
        ..., description="Token echoed by Meta during webhook verification"
    )
    whatsapp_app_secret: str = Field(
        ..., description="App secret used to sign webhook deliveries (HMAC key)"
    )
    host_number: str = Field(
        ..., description="The bot's own WhatsApp number; messages from it are dropped"
    )

    # Message admission
    stale_message_minutes: int = Field(
        default=STALE_MESSAGE_TIMEOUT_MINUTES,
        description="Messages at least this many minutes old are discarded",
    )
    auto_increment_ids: bool = Field(
        default=False,
        description="Whether the conversation store uses auto-incrementing ids",
    )

    # Conversation engine
    conversation_engine: str | None = Field(
        default=None,
        description="Import path of the conversation engine factory (module:callable)",
    )

    # Supabase Configuration (database handle passed to the conversation engine)
    supabase_url: str = Field(..., description="Supabase project URL")
    supabase_service_key: str = Field(..., description="Supabase service role key")

    # Checkout Configuration (passed through to the conversation engine)
    homebase_url: str = Field(default="", description="Public base URL of this service")
    merchant_id: str = Field(default="", description="Payment gateway merchant id")
    merchant_key: str = Field(default="", description="Payment gateway merchant key")
    passphrase: str = Field(default="", description="Payment gateway passphrase")
    payment_host: str = Field(default="", description="Payment gateway host URL")

    # Environment
    env: Literal["local", "railway", "prod"] = Field(
        default="local", description="Current environment"
    )
    log_level: str = Field(default="INFO", description="Python logging level")

    # Sentry Configuration
    sentry_dsn: str | None = Field(
        default=None, description="Sentry DSN for error tracking (optional)"
    )
    sentry_traces_sample_rate: float = Field(
        default=1.0, description="Sentry traces sample rate (0.0 to 1.0)"
    )

    # Logfire Configuration
    logfire_token: str | None = Field(
        default=None, description="Pydantic Logfire token for observability"
    )

    def checkout_info(self) -> CheckoutInfo:
        """Build the checkout configuration handed to the conversation engine."""
        return CheckoutInfo(
            return_url=self.homebase_url + PAYMENT_RETURN_PATH,
            cancel_url=self.homebase_url + PAYMENT_CANCEL_PATH,
            notify_url=self.homebase_url + PAYMENT_NOTIFY_PATH,
            merchant_id=self.merchant_id,
            merchant_key=self.merchant_key,
            passphrase=self.passphrase,
            host_url=self.payment_host,
            item_name_prefix=CHECKOUT_ITEM_NAME_PREFIX,
        )


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()

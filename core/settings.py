"""
Payment-related settings using pydantic-settings v2 with nested env keys.

Kept apart from core.config.Settings; read once at import and treated as
immutable afterwards. The OpenPix section is handed to the gateway client
explicitly rather than read from module globals inside it.
"""
from __future__ import annotations

from decimal import Decimal
from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import BaseModel, ConfigDict, Field


class PaymentTimeouts(BaseModel):
    model_config = ConfigDict(frozen=True)

    connect: float = 2.0
    read: float = 10.0
    write: float = 10.0
    total: float = 15.0


class PaymentRetry(BaseModel):
    model_config = ConfigDict(frozen=True)

    # 0 keeps every call to a single attempt
    max: int = 0
    base_backoff: float = 0.2


class WebhookSettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    # When set, x-openpix-signature is mandatory and must match
    signing_key: Optional[str] = None
    ip_allowlist: list[str] | None = None  # Optional IPs/CIDRs allowed to post webhooks


class OpenPixSettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    app_id: Optional[str] = None
    base_url: str = "https://api.openpix.com.br/api/v1"
    # Platform key receiving the split when a seller has no key of their own
    main_pix_key: Optional[str] = None
    platform_fee_rate: Decimal = Field(default=Decimal("0.15"), ge=0, le=1)
    timeouts: PaymentTimeouts = Field(default_factory=PaymentTimeouts)
    retry: PaymentRetry = Field(default_factory=PaymentRetry)


class PaymentSettings(BaseSettings):
    openpix: OpenPixSettings = Field(default_factory=OpenPixSettings)
    webhook: WebhookSettings = Field(default_factory=WebhookSettings)

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="allow",
        env_nested_delimiter="__",
        frozen=True,
    )


payment_settings = PaymentSettings()

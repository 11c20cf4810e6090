"""Runtime settings, read from environment variables."""

from __future__ import annotations

import os
from collections.abc import Mapping
from decimal import Decimal
from pathlib import Path

from pydantic import BaseModel, Field, field_validator

from storefront.domain.model.order import PaymentMethod

# Resolve data directory relative to the project root.
# When installed in editable mode the project root is the repo root.
DEFAULT_DATA_DIR = Path(__file__).resolve().parents[3] / "data"

_ENV_NAMES = {
    "data_dir": "STOREFRONT_DATA_DIR",
    "tax_rate": "STOREFRONT_TAX_RATE",
    "free_shipping_threshold": "STOREFRONT_FREE_SHIPPING_THRESHOLD",
    "flat_shipping": "STOREFRONT_FLAT_SHIPPING",
    "max_per_order": "STOREFRONT_MAX_PER_ORDER",
    "payment_methods": "STOREFRONT_PAYMENT_METHODS",
    "pending_ttl_minutes": "STOREFRONT_PENDING_TTL_MINUTES",
    "paypal_env": "PAYPAL_ENV",
    "paypal_client_id": "PAYPAL_CLIENT_ID",
    "paypal_client_secret": "PAYPAL_CLIENT_SECRET",
}


class Settings(BaseModel):
    data_dir: Path = DEFAULT_DATA_DIR
    tax_rate: Decimal = Field(default=Decimal("0.08"), ge=0)
    free_shipping_threshold: Decimal = Field(default=Decimal("50.00"), ge=0)
    flat_shipping: Decimal = Field(default=Decimal("9.99"), ge=0)
    max_per_order: int | None = Field(default=None, ge=1)
    # Card has no server-side capture, so it is off unless enabled explicitly
    payment_methods: list[PaymentMethod] = [
        PaymentMethod.WALLET,
        PaymentMethod.PAYPAL,
        PaymentMethod.COD,
    ]
    pending_ttl_minutes: int = Field(default=60, ge=1)
    paypal_env: str = "sandbox"
    paypal_client_id: str = ""
    paypal_client_secret: str = ""

    @field_validator("payment_methods", mode="before")
    @classmethod
    def _split_methods(cls, value):
        if isinstance(value, str):
            return [part.strip() for part in value.split(",") if part.strip()]
        return value

    @field_validator("paypal_env")
    @classmethod
    def _known_env(cls, value: str) -> str:
        if value not in ("sandbox", "live"):
            raise ValueError("PAYPAL_ENV must be 'sandbox' or 'live'")
        return value

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Settings:
        environ = os.environ if environ is None else environ
        values = {
            field: environ[name]
            for field, name in _ENV_NAMES.items()
            if environ.get(name, "") != ""
        }
        return cls.model_validate(values)

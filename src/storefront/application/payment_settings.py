"""Admin-controlled payment settings: which methods are offered."""

from __future__ import annotations

from dataclasses import dataclass

from storefront.domain.exceptions import (
    MissingPaymentMethodError,
    PaymentMethodUnavailableError,
)
from storefront.domain.model.order import PaymentMethod

# Preference order used to pick the default method
PREFERENCE = (PaymentMethod.WALLET, PaymentMethod.CARD, PaymentMethod.PAYPAL, PaymentMethod.COD)
FALLBACK = PaymentMethod.CARD


@dataclass(frozen=True)
class PaymentSettings:
    enabled: frozenset[PaymentMethod]

    @property
    def offered(self) -> list[PaymentMethod]:
        return [m for m in PREFERENCE if m in self.enabled]

    @property
    def default_method(self) -> PaymentMethod:
        offered = self.offered
        return offered[0] if offered else FALLBACK

    def resolve(self, raw: str | None) -> PaymentMethod:
        """Turn a submitted form value into an enabled PaymentMethod."""
        if raw is None or not raw.strip():
            raise MissingPaymentMethodError("Please select a payment method.")
        try:
            method = PaymentMethod(raw.strip())
        except ValueError:
            raise MissingPaymentMethodError(f"Unknown payment method '{raw}'.") from None
        if method not in self.enabled:
            raise PaymentMethodUnavailableError(
                f"{method.label} is not available at the moment."
            )
        return method

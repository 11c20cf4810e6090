"""Domain service: Pricing Engine.

Pure computation of order totals from validated lines.  Amounts keep
full precision here; rounding happens once, when an Order is created or
a value is displayed.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from storefront.domain.exceptions import ValidationError
from storefront.domain.model.cart import ValidatedLine
from storefront.domain.model.order import OrderTotals
from storefront.domain.model.value_objects import Money


@dataclass(frozen=True)
class PricingPolicy:
    tax_rate: Decimal = Decimal("0.08")
    free_shipping_threshold: Decimal = Decimal("50.00")
    flat_shipping: Decimal = Decimal("9.99")

    def __post_init__(self) -> None:
        for name in ("tax_rate", "free_shipping_threshold", "flat_shipping"):
            if getattr(self, name) < 0:
                raise ValidationError(f"{name} cannot be negative")


class PricingEngine:

    def __init__(self, policy: PricingPolicy | None = None) -> None:
        self._policy = policy or PricingPolicy()

    @property
    def policy(self) -> PricingPolicy:
        return self._policy

    def quote(self, lines: list[ValidatedLine]) -> OrderTotals:
        if not lines:
            raise ValidationError("Cannot price an empty cart")

        subtotal = lines[0].line_total
        for line in lines[1:]:
            subtotal = subtotal + line.line_total

        currency = subtotal.currency
        tax = subtotal.scale(self._policy.tax_rate)
        if subtotal.amount >= self._policy.free_shipping_threshold:
            shipping = Money.zero(currency)
        else:
            shipping = Money(self._policy.flat_shipping, currency)

        return OrderTotals(subtotal=subtotal, tax=tax, shipping=shipping)

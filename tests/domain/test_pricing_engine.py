"""Unit tests for the Pricing Engine."""

from decimal import Decimal

import pytest

from storefront.domain.exceptions import ValidationError
from storefront.domain.model.cart import ValidatedLine
from storefront.domain.model.product import Product
from storefront.domain.model.value_objects import Money
from storefront.domain.service.pricing_engine import PricingEngine, PricingPolicy


def _line(price: str, qty: int, sale: str | None = None) -> ValidatedLine:
    product = Product(
        id=f"p-{price}",
        name=f"Item {price}",
        price=Money.of(price),
        stock_quantity=100,
        sale_price=Money.of(sale) if sale else None,
    )
    return ValidatedLine(product=product, quantity=qty)


class TestQuote:

    def test_large_order_ships_free(self):
        totals = PricingEngine().quote([_line("180.00", 2)]).rounded()
        assert totals.subtotal == Money.of("360.00")
        assert totals.tax == Money.of("28.80")
        assert totals.shipping == Money.zero()
        assert totals.grand_total == Money.of("388.80")

    def test_small_order_pays_flat_shipping(self):
        totals = PricingEngine().quote([_line("20.00", 1)]).rounded()
        assert totals.subtotal == Money.of("20.00")
        assert totals.tax == Money.of("1.60")
        assert totals.shipping == Money.of("9.99")
        assert totals.grand_total == Money.of("31.59")

    def test_threshold_is_inclusive(self):
        totals = PricingEngine().quote([_line("25.00", 2)])
        assert totals.shipping.is_zero

    def test_just_below_threshold(self):
        totals = PricingEngine().quote([_line("49.99", 1)])
        assert totals.shipping == Money.of("9.99")

    def test_sale_price_is_charged(self):
        totals = PricingEngine().quote([_line("100.00", 1, sale="40.00")])
        assert totals.subtotal == Money.of("40.00")

    def test_tax_is_not_rounded_per_line(self):
        # subtotal 0.15 -> tax 0.012 -> 0.01; rounding each line first gives 0.00
        totals = PricingEngine().quote([_line("0.05", 1), _line("0.06", 1), _line("0.04", 1)])
        assert totals.tax.amount == Decimal("0.0120")
        assert totals.rounded().tax == Money.of("0.01")

    def test_grand_total_invariant_after_rounding(self):
        totals = PricingEngine().quote([_line("19.99", 3), _line("0.33", 7)]).rounded()
        assert totals.grand_total == totals.subtotal + totals.tax + totals.shipping

    def test_custom_policy(self):
        policy = PricingPolicy(
            tax_rate=Decimal("0.10"),
            free_shipping_threshold=Decimal("100"),
            flat_shipping=Decimal("5.00"),
        )
        totals = PricingEngine(policy).quote([_line("60.00", 1)]).rounded()
        assert totals.grand_total == Money.of("71.00")

    def test_empty_cart_rejected(self):
        with pytest.raises(ValidationError, match="empty cart"):
            PricingEngine().quote([])

    def test_negative_policy_rejected(self):
        with pytest.raises(ValidationError, match="tax_rate"):
            PricingPolicy(tax_rate=Decimal("-0.01"))

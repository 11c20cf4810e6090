"""Unit tests for the Order aggregate and its state transitions."""

from decimal import Decimal

import pytest

from storefront.domain.exceptions import OrderStateError, ValidationError
from storefront.domain.model.order import (
    Order,
    OrderLine,
    OrderStatus,
    OrderTotals,
    PaymentMethod,
    PaymentStatus,
)
from storefront.domain.model.value_objects import Money, Quantity


def _line(qty: int = 1, price: str = "20.00") -> OrderLine:
    return OrderLine(
        product_id="p1",
        product_name="Widget",
        sku="W-1",
        quantity=Quantity(qty),
        unit_price=Money.of(price),
    )


def _totals(subtotal="20.00", tax="1.60", shipping="9.99") -> OrderTotals:
    return OrderTotals(Money.of(subtotal), Money.of(tax), Money.of(shipping))


def _order(method: PaymentMethod = PaymentMethod.COD, **kwargs) -> Order:
    defaults = dict(
        order_number="ORD-20240101000000-ABC123",
        user_id="u1",
        lines=[_line()],
        totals=_totals(),
        payment_method=method,
        shipping_address_id=1,
        billing_address_id=1,
    )
    defaults.update(kwargs)
    return Order.create(**defaults)


class TestOrderCreation:

    def test_new_order_is_pending_and_placed(self):
        order = _order()
        assert order.id is None  # assigned by repository
        assert order.payment_status == PaymentStatus.PENDING
        assert order.status == OrderStatus.PLACED

    def test_grand_total_is_sum_of_parts(self):
        assert _order().grand_total == Money.of("31.59")

    def test_totals_rounded_once_at_creation(self):
        order = _order(totals=_totals(subtotal="20.005", tax="1.6004", shipping="0"))
        assert order.totals.subtotal.amount == Decimal("20.01")
        assert order.totals.tax.amount == Decimal("1.60")
        assert order.grand_total == Money.of("21.61")

    def test_empty_order_rejected(self):
        with pytest.raises(ValidationError, match="at least one item"):
            _order(lines=[])

    def test_user_required(self):
        with pytest.raises(ValidationError, match="belong to a user"):
            _order(user_id="")

    def test_notes_are_trimmed(self):
        assert _order(notes="  leave at door \n").notes == "leave at door"


class TestMarkPaid:

    def test_pending_to_paid(self):
        order = _order()
        order.mark_paid("CAP-1")
        assert order.is_paid
        assert order.capture_id == "CAP-1"
        assert order.paid_at is not None

    def test_paid_never_reverts(self):
        order = _order()
        order.mark_paid()
        with pytest.raises(OrderStateError, match="already paid"):
            order.mark_paid()

    def test_cancelled_cannot_be_paid(self):
        order = _order()
        order.cancel()
        with pytest.raises(OrderStateError, match="cancelled"):
            order.mark_paid()


class TestCancel:

    def test_pending_order_can_be_cancelled(self):
        order = _order()
        order.cancel()
        assert order.status == OrderStatus.CANCELLED

    def test_paid_order_cannot_be_cancelled(self):
        order = _order()
        order.mark_paid()
        with pytest.raises(OrderStateError, match="has been paid"):
            order.cancel()

    def test_double_cancel_rejected(self):
        order = _order()
        order.cancel()
        with pytest.raises(OrderStateError, match="already cancelled"):
            order.cancel()


class TestRemotePayment:

    def test_attach_is_idempotent_for_same_id(self):
        order = _order(PaymentMethod.PAYPAL)
        order.attach_remote_payment("PAYPAL-1")
        order.attach_remote_payment("PAYPAL-1")
        assert order.remote_payment_id == "PAYPAL-1"

    def test_attach_conflicting_id_rejected(self):
        order = _order(PaymentMethod.PAYPAL)
        order.attach_remote_payment("PAYPAL-1")
        with pytest.raises(OrderStateError, match="another payment"):
            order.attach_remote_payment("PAYPAL-2")

"""Integration tests for the PayPal create-order and capture use cases."""

from decimal import Decimal

import pytest

from storefront.application.dto import CheckoutRequest, SummaryItem
from storefront.application.paypal_checkout import CART_CHANGED
from storefront.application.place_order import SUMMARY_OUT_OF_DATE
from storefront.domain.exceptions import (
    EntityNotFoundError,
    OrderStateError,
    PaymentGatewayError,
    ValidationError,
)
from storefront.domain.model.order import OrderStatus, PaymentStatus
from tests.fakes import FakePaymentGateway, InMemoryDatabase, make_services


def _request(user_id: str = "u1") -> CheckoutRequest:
    return CheckoutRequest(
        user_id=user_id,
        shipping_address_id=1,
        billing_address_id=1,
        payment_method="",
    )


def _summary(qty: int = 1, price: str = "20.00") -> list[SummaryItem]:
    return [SummaryItem(name="Widget", quantity=qty, unit_price=Decimal(price))]


@pytest.fixture
def db() -> InMemoryDatabase:
    db = InMemoryDatabase()
    db.add_product("p1", "Widget", "20.00", stock=5, sku="W-1")
    db.add_to_cart("u1", "p1", 1)
    return db


class TestCreatePayPalOrder:

    def test_creates_pending_order_and_remote_order(self, db):
        gateway = FakePaymentGateway()

        created = make_services(db, gateway).create_paypal_order().handle(_request(), _summary())

        assert created.id == "PAYPAL-1"
        order = db.orders()[0]
        assert created.order_id == order.id
        assert order.payment_status == PaymentStatus.PENDING
        assert order.remote_payment_id == "PAYPAL-1"
        assert db.product("p1").stock_quantity == 4
        assert db.cart("u1") == {}
        reference, totals, items = gateway.created[0]
        assert reference == order.order_number
        assert str(totals.grand_total) == "$31.59"
        assert items[0].sku == "W-1"

    def test_method_is_forced_to_paypal(self, db):
        make_services(db).create_paypal_order().handle(_request(), _summary())
        assert db.orders()[0].payment_method.value == "paypal"

    def test_summary_mismatch_rejected_before_order(self, db):
        services = make_services(db)
        with pytest.raises(ValidationError, match="out of date") as exc_info:
            services.create_paypal_order().handle(_request(), _summary(price="15.00"))
        assert str(exc_info.value) == SUMMARY_OUT_OF_DATE
        assert db.orders() == []
        assert db.product("p1").stock_quantity == 5

    def test_summary_quantity_mismatch_rejected(self, db):
        with pytest.raises(ValidationError):
            make_services(db).create_paypal_order().handle(_request(), _summary(qty=2))

    def test_changed_cart_rejected(self, db):
        db.product("p1").is_active = False
        with pytest.raises(ValidationError) as exc_info:
            make_services(db).create_paypal_order().handle(_request(), _summary())
        assert str(exc_info.value) == CART_CHANGED
        assert db.cart("u1") == {}

    def test_missing_summary_rejected(self, db):
        gateway = FakePaymentGateway()
        with pytest.raises(ValidationError) as exc_info:
            make_services(db, gateway).create_paypal_order().handle(_request(), [])
        assert str(exc_info.value) == SUMMARY_OUT_OF_DATE
        assert db.orders() == []
        assert gateway.created == []

    def test_empty_cart_rejected(self):
        with pytest.raises(ValidationError, match="cart is empty"):
            make_services(InMemoryDatabase()).create_paypal_order().handle(_request(), [])

    def test_gateway_failure_keeps_pending_order(self, db):
        services = make_services(db, FakePaymentGateway(fail_create=True))

        with pytest.raises(PaymentGatewayError):
            services.create_paypal_order().handle(_request(), _summary())

        order = db.orders()[0]
        assert order.payment_status == PaymentStatus.PENDING
        assert order.remote_payment_id is None
        assert db.product("p1").stock_quantity == 4


class TestCapturePayPalOrder:

    def _create(self, db, gateway):
        return make_services(db, gateway).create_paypal_order().handle(_request(), _summary())

    def test_capture_marks_order_paid(self, db):
        gateway = FakePaymentGateway()
        created = self._create(db, gateway)

        dto = make_services(db, gateway).capture_paypal_order().handle(
            "u1", created.id, created.order_id
        )

        assert dto.payment_status == "paid"
        stored = db.orders()[0]
        assert stored.is_paid
        assert stored.capture_id == "CAP-PAYPAL-1"

    def test_failed_capture_is_safe_to_retry(self, db):
        gateway = FakePaymentGateway()
        created = self._create(db, gateway)
        capture = make_services(db, gateway).capture_paypal_order()

        gateway.fail_capture = True
        with pytest.raises(PaymentGatewayError):
            capture.handle("u1", created.id, created.order_id)
        assert db.orders()[0].payment_status == PaymentStatus.PENDING

        gateway.fail_capture = False
        capture.handle("u1", created.id, created.order_id)
        capture.handle("u1", created.id, created.order_id)

        assert len(db.orders()) == 1
        assert db.orders()[0].is_paid
        assert db.product("p1").stock_quantity == 4
        # the second successful retry never reaches PayPal
        assert gateway.captured == ["PAYPAL-1"]

    def test_incomplete_capture_leaves_order_pending(self, db):
        gateway = FakePaymentGateway(capture_status="PENDING")
        created = self._create(db, gateway)

        with pytest.raises(PaymentGatewayError, match="not completed"):
            make_services(db, gateway).capture_paypal_order().handle(
                "u1", created.id, created.order_id
            )
        assert not db.orders()[0].is_paid

    def test_other_users_order_not_found(self, db):
        gateway = FakePaymentGateway()
        created = self._create(db, gateway)

        with pytest.raises(EntityNotFoundError):
            make_services(db, gateway).capture_paypal_order().handle(
                "mallory", created.id, created.order_id
            )
        assert gateway.captured == []

    def test_mismatched_remote_id_rejected(self, db):
        gateway = FakePaymentGateway()
        created = self._create(db, gateway)

        with pytest.raises(ValidationError, match="does not match"):
            make_services(db, gateway).capture_paypal_order().handle(
                "u1", "PAYPAL-999", created.order_id
            )

    def test_missing_remote_id_rejected(self, db):
        with pytest.raises(ValidationError, match="Missing PayPal order id"):
            make_services(db).capture_paypal_order().handle("u1", "", 1)

    def test_cancelled_order_cannot_be_captured(self, db):
        gateway = FakePaymentGateway()
        created = self._create(db, gateway)
        services = make_services(db, gateway)
        services.cancel_order().handle(created.order_id)

        with pytest.raises(OrderStateError, match="cancelled"):
            services.capture_paypal_order().handle("u1", created.id, created.order_id)
        assert db.orders()[0].status == OrderStatus.CANCELLED
        assert gateway.captured == []

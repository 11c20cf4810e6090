"""Order aggregate — the core of the domain.

The Order is an aggregate root that owns its line items and totals.
Lines and totals are frozen at creation; only payment and lifecycle
status move afterwards.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from storefront.domain.exceptions import OrderStateError, ValidationError
from storefront.domain.model.value_objects import Money, Quantity


class PaymentMethod(Enum):
    WALLET = "wallet"
    CARD = "credit_card"
    PAYPAL = "paypal"
    COD = "cod"

    @property
    def label(self) -> str:
        return _PAYMENT_LABELS[self]


_PAYMENT_LABELS = {
    PaymentMethod.WALLET: "Wallet",
    PaymentMethod.CARD: "Credit Card",
    PaymentMethod.PAYPAL: "PayPal",
    PaymentMethod.COD: "Cash on Delivery",
}


class PaymentStatus(Enum):
    PENDING = "pending"
    PAID = "paid"


class OrderStatus(Enum):
    PLACED = "placed"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class OrderLine:
    """Immutable snapshot of a cart line at order-commit time."""

    product_id: str
    product_name: str
    sku: str
    quantity: Quantity
    unit_price: Money  # locked at order-creation time

    @property
    def line_total(self) -> Money:
        return self.unit_price * self.quantity.value


@dataclass(frozen=True)
class OrderTotals:
    """Monetary totals of an order.

    ``grand_total`` is always derived from the three parts, so the
    invariant grand = subtotal + tax + shipping cannot be broken.
    """

    subtotal: Money
    tax: Money
    shipping: Money

    @property
    def grand_total(self) -> Money:
        return self.subtotal + self.tax + self.shipping

    def rounded(self) -> OrderTotals:
        return OrderTotals(
            subtotal=self.subtotal.rounded(),
            tax=self.tax.rounded(),
            shipping=self.shipping.rounded(),
        )


@dataclass
class Order:
    """Aggregate root for customer orders.

    Use ``Order.create()`` for new orders; the plain ``__init__`` is for
    repositories reconstituting persisted orders.
    """

    id: int | None
    order_number: str
    user_id: str
    lines: list[OrderLine]
    totals: OrderTotals
    payment_method: PaymentMethod
    shipping_address_id: int
    billing_address_id: int
    notes: str = ""
    payment_status: PaymentStatus = PaymentStatus.PENDING
    status: OrderStatus = OrderStatus.PLACED
    remote_payment_id: str | None = None
    capture_id: str | None = None
    paid_at: datetime | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    # --- Factory (used for NEW orders only) -----------------------------------

    @staticmethod
    def create(
        order_number: str,
        user_id: str,
        lines: list[OrderLine],
        totals: OrderTotals,
        payment_method: PaymentMethod,
        shipping_address_id: int,
        billing_address_id: int,
        notes: str = "",
    ) -> Order:
        """Create a new pending order; totals are rounded exactly once here."""
        if not user_id:
            raise ValidationError("Order must belong to a user")
        if not lines:
            raise ValidationError("Order must contain at least one item")
        if not order_number:
            raise ValidationError("Order number is required")

        return Order(
            id=None,
            order_number=order_number,
            user_id=user_id,
            lines=list(lines),
            totals=totals.rounded(),
            payment_method=payment_method,
            shipping_address_id=shipping_address_id,
            billing_address_id=billing_address_id,
            notes=notes.strip(),
        )

    # --- State transitions ----------------------------------------------------

    def mark_paid(self, capture_id: str | None = None) -> None:
        """Transition pending -> paid.  Paid orders never revert."""
        if self.status == OrderStatus.CANCELLED:
            raise OrderStateError(f"Order {self.order_number} has been cancelled")
        if self.payment_status == PaymentStatus.PAID:
            raise OrderStateError(f"Order {self.order_number} is already paid")
        self.payment_status = PaymentStatus.PAID
        self.capture_id = capture_id
        self.paid_at = datetime.now(timezone.utc)

    def attach_remote_payment(self, remote_payment_id: str) -> None:
        if self.remote_payment_id and self.remote_payment_id != remote_payment_id:
            raise OrderStateError(
                f"Order {self.order_number} is already linked to another payment"
            )
        self.remote_payment_id = remote_payment_id

    def cancel(self) -> None:
        """Transition placed -> cancelled.

        Only unpaid orders can be cancelled here; restocking must happen
        *before* calling this (coordinated by the application handler).
        """
        if self.status == OrderStatus.CANCELLED:
            raise OrderStateError("Order is already cancelled")
        if self.payment_status == PaymentStatus.PAID:
            raise OrderStateError("Cannot cancel an order that has been paid")
        self.status = OrderStatus.CANCELLED

    # --- Computed properties --------------------------------------------------

    @property
    def is_paid(self) -> bool:
        return self.payment_status == PaymentStatus.PAID

    @property
    def grand_total(self) -> Money:
        return self.totals.grand_total

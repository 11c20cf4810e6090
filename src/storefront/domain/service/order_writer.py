"""Domain service: Order Writer.

Turns validated cart lines into a persisted order inside the caller's
unit of work: order number, header, line snapshots, stock decrement,
sales counters, cart cleanup and any in-transaction settlement step.
Nothing here commits; a failure anywhere leaves the unit of work to roll
the whole attempt back.
"""

from __future__ import annotations

import logging
import secrets
from collections.abc import Callable
from datetime import datetime, timezone

from storefront.domain.exceptions import (
    MissingAddressError,
    OrderNumberCollisionError,
    ValidationError,
)
from storefront.domain.model.cart import ValidatedLine
from storefront.domain.model.order import Order, OrderLine, OrderTotals
from storefront.domain.model.value_objects import Quantity
from storefront.domain.repository.unit_of_work import UnitOfWork
from storefront.domain.service.settlement import Settlement
from storefront.domain.service.stock_ledger import StockLedger

logger = logging.getLogger(__name__)

MAX_NUMBER_ATTEMPTS = 5
NO_SKU = "N/A"


def generate_order_number(now: datetime | None = None) -> str:
    """``ORD-<UTC timestamp>-<6 random hex digits>``."""
    now = now or datetime.now(timezone.utc)
    return f"ORD-{now:%Y%m%d%H%M%S}-{secrets.token_hex(3).upper()}"


class OrderWriter:

    def __init__(
        self,
        uow: UnitOfWork,
        number_generator: Callable[[], str] = generate_order_number,
    ) -> None:
        self._uow = uow
        self._number_generator = number_generator

    def write(
        self,
        user_id: str,
        lines: list[ValidatedLine],
        totals: OrderTotals,
        settlement: Settlement,
        shipping_address_id: int,
        billing_address_id: int,
        notes: str = "",
    ) -> Order:
        if not shipping_address_id:
            raise MissingAddressError("Please select a shipping address.")
        if not billing_address_id:
            raise MissingAddressError("Please select a billing address.")
        if not lines:
            raise ValidationError("Order must contain at least one item")

        order = Order.create(
            order_number=self._unique_number(),
            user_id=user_id,
            lines=[self._snapshot(line) for line in lines],
            totals=totals,
            payment_method=settlement.method,
            shipping_address_id=shipping_address_id,
            billing_address_id=billing_address_id,
            notes=notes,
        )
        self._uow.orders.save(order)

        # Re-checked under lock: validation ran in an earlier transaction
        StockLedger(self._uow.products).decrement(
            {line.product.id: line.quantity for line in lines}
        )

        for line in lines:
            self._uow.carts.delete_line(user_id, line.product.id)

        settlement.within_transaction(self._uow, order)

        logger.info(
            "Wrote order %s for user %s (%d lines, total %s, %s)",
            order.order_number, user_id, len(order.lines),
            order.grand_total, order.payment_method.value,
        )
        return order

    def _unique_number(self) -> str:
        for attempt in range(1, MAX_NUMBER_ATTEMPTS + 1):
            number = self._number_generator()
            if not self._uow.orders.number_exists(number):
                return number
            logger.warning("Order number collision on %s (attempt %d)", number, attempt)
        raise OrderNumberCollisionError(
            f"Could not generate a unique order number after {MAX_NUMBER_ATTEMPTS} attempts"
        )

    @staticmethod
    def _snapshot(line: ValidatedLine) -> OrderLine:
        product = line.product
        return OrderLine(
            product_id=product.id,
            product_name=product.name,
            sku=product.sku or NO_SKU,
            quantity=Quantity(line.quantity),
            unit_price=line.unit_price,  # <-- price snapshot
        )

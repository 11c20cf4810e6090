"""Application service: Cancel Order use case.

Only unpaid orders can be cancelled.  Every line's units go back into
stock (and out of the sales counters) in the same unit of work that
marks the order cancelled.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from storefront.application.dto import OrderDTO
from storefront.domain.exceptions import EntityNotFoundError
from storefront.domain.model.order import Order
from storefront.domain.repository.unit_of_work import UnitOfWork
from storefront.domain.service.stock_ledger import StockLedger

logger = logging.getLogger(__name__)


class CancelOrderHandler:

    def __init__(self, uow_factory: Callable[[], UnitOfWork]) -> None:
        self._uow_factory = uow_factory

    def handle(self, order_id: int) -> OrderDTO:
        with self._uow_factory() as uow:
            order = uow.orders.get_by_id(order_id)
            if order is None:
                raise EntityNotFoundError(f"Order #{order_id} not found")
            cancel_in(uow, order)
            uow.commit()
        return OrderDTO.from_domain(order)


def cancel_in(uow: UnitOfWork, order: Order) -> None:
    """Restock and cancel *order* inside an open unit of work."""
    # Let the aggregate refuse first so no stock moves for a paid order
    order.cancel()
    quantities: dict[str, int] = {}
    for line in order.lines:
        quantities[line.product_id] = quantities.get(line.product_id, 0) + line.quantity.value
    StockLedger(uow.products).return_units(quantities)
    uow.orders.save(order)
    logger.info("Cancelled order %s and restocked %d lines", order.order_number, len(order.lines))

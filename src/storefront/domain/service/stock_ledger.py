"""Domain service: Stock Ledger.

The single writer of ``Product.stock_quantity``.  Every method must run
inside an open unit of work; nothing here commits.

The two-phase approach (lock and validate, then mutate) ensures we never
touch any row if one product fails, and rows are always locked in
product-id order so concurrent checkouts cannot deadlock each other.
"""

from __future__ import annotations

import logging

from storefront.domain.exceptions import EntityNotFoundError, InsufficientStockError
from storefront.domain.model.product import Product
from storefront.domain.repository.product_repository import ProductRepository

logger = logging.getLogger(__name__)


class StockLedger:

    def __init__(self, product_repo: ProductRepository) -> None:
        self._product_repo = product_repo

    def decrement(self, quantities: dict[str, int]) -> None:
        """Remove stock for every product, all or nothing.

        Raises InsufficientStockError when any product no longer has
        enough stock under lock.
        """
        # Phase 1: lock every row and re-check availability
        locked = self._lock_all(quantities)
        for product, qty in locked:
            if qty > product.stock_quantity:
                logger.warning(
                    "Stock race lost on %s: need %d, have %d",
                    product.id, qty, product.stock_quantity,
                )
                raise InsufficientStockError(product.name, qty, product.stock_quantity)

        # Phase 2: mutate and persist
        for product, qty in locked:
            product.remove_stock(qty)
            product.record_sale(qty)
            self._product_repo.save(product)

    def increment(self, quantities: dict[str, int]) -> None:
        """Add stock received from a supplier."""
        for product, qty in self._lock_all(quantities):
            product.add_stock(qty)
            self._product_repo.save(product)

    def return_units(self, quantities: dict[str, int]) -> None:
        """Undo ``decrement`` for a cancelled order, including sales counts."""
        for product, qty in self._lock_all(quantities):
            product.add_stock(qty)
            product.reverse_sale(qty)
            self._product_repo.save(product)

    def _lock_all(self, quantities: dict[str, int]) -> list[tuple[Product, int]]:
        locked: list[tuple[Product, int]] = []
        for product_id in sorted(quantities):
            product = self._product_repo.get_for_update(product_id)
            if product is None:
                raise EntityNotFoundError(f"Product '{product_id}' not found")
            locked.append((product, quantities[product_id]))
        return locked

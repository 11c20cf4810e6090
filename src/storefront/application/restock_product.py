"""Application service: Restock Product use case."""

from __future__ import annotations

from collections.abc import Callable

from storefront.domain.exceptions import EntityNotFoundError, ValidationError
from storefront.domain.repository.unit_of_work import UnitOfWork
from storefront.domain.service.stock_ledger import StockLedger


class RestockProductHandler:

    def __init__(self, uow_factory: Callable[[], UnitOfWork]) -> None:
        self._uow_factory = uow_factory

    def handle(self, product_id: str, quantity: int) -> int:
        """Add *quantity* units to stock; return the new stock level."""
        if quantity <= 0:
            raise ValidationError("Restock quantity must be positive")
        with self._uow_factory() as uow:
            if uow.products.get_by_id(product_id) is None:
                raise EntityNotFoundError(f"Product '{product_id}' not found")
            StockLedger(uow.products).increment({product_id: quantity})
            uow.commit()
            return uow.products.get_by_id(product_id).stock_quantity  # type: ignore[union-attr]

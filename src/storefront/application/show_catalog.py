"""Application service: Show Catalog use case (query)."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from storefront.domain.repository.unit_of_work import UnitOfWork


@dataclass(frozen=True)
class ProductLineDTO:
    product_id: str
    name: str
    price: str
    stock: int
    sales_count: int
    sellable: bool


class ShowCatalogHandler:

    def __init__(self, uow_factory: Callable[[], UnitOfWork]) -> None:
        self._uow_factory = uow_factory

    def handle(self) -> list[ProductLineDTO]:
        with self._uow_factory() as uow:
            products = uow.products.list_all()
        return [
            ProductLineDTO(
                product_id=p.id,
                name=p.name,
                price=str(p.charge_price),
                stock=p.stock_quantity,
                sales_count=p.sales_count,
                sellable=p.unavailability_reason() is None,
            )
            for p in products
        ]

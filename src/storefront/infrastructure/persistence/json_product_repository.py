"""JSON-backed implementation of ProductRepository."""

from __future__ import annotations

from collections.abc import Callable
from decimal import Decimal

from storefront.domain.model.product import ACTIVE_STATUS, Product
from storefront.domain.model.value_objects import Money
from storefront.domain.repository.product_repository import ProductRepository


class JsonProductRepository(ProductRepository):
    """Works on the unit of work's in-memory copy of the ``products`` collection."""

    def __init__(self, records: list[dict], on_change: Callable[[], None]) -> None:
        self._records = records
        self._on_change = on_change

    # --- ProductRepository interface ------------------------------------------

    def get_by_id(self, product_id: str) -> Product | None:
        for raw in self._records:
            if raw["id"] == product_id:
                return self._to_domain(raw)
        return None

    def get_for_update(self, product_id: str) -> Product | None:
        # The unit of work already holds the store lock
        return self.get_by_id(product_id)

    def list_all(self) -> list[Product]:
        return [self._to_domain(raw) for raw in self._records]

    def save(self, product: Product) -> None:
        for i, raw in enumerate(self._records):
            if raw["id"] == product.id:
                self._records[i] = self._to_raw(product)
                break
        else:
            self._records.append(self._to_raw(product))
        self._on_change()

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(product: Product) -> dict:
        return {
            "id": product.id,
            "name": product.name,
            "sku": product.sku,
            "price": str(product.price.amount),
            "sale_price": str(product.sale_price.amount) if product.sale_price else None,
            "currency": product.price.currency,
            "stock_quantity": product.stock_quantity,
            "is_active": product.is_active,
            "status": product.status,
            "sales_count": product.sales_count,
        }

    @staticmethod
    def _to_domain(raw: dict) -> Product:
        currency = raw.get("currency", "USD")
        sale_price = raw.get("sale_price")
        return Product(
            id=raw["id"],
            name=raw["name"],
            sku=raw.get("sku"),
            price=Money(Decimal(raw["price"]), currency),
            sale_price=Money(Decimal(sale_price), currency) if sale_price else None,
            stock_quantity=int(raw.get("stock_quantity", 0)),
            is_active=bool(raw.get("is_active", True)),
            status=raw.get("status", ACTIVE_STATUS),
            sales_count=int(raw.get("sales_count", 0)),
        )

"""Product aggregate.

Products live independently of carts and orders.  Catalog management owns
everything except ``stock_quantity`` and ``sales_count``, which only the
stock ledger mutates.
"""

from __future__ import annotations

from dataclasses import dataclass

from storefront.domain.exceptions import InsufficientStockError, ValidationError
from storefront.domain.model.value_objects import Money

ACTIVE_STATUS = "active"

REASON_UNAVAILABLE = "Product is no longer available"
REASON_STATUS_CHANGED = "Product status changed"
REASON_OUT_OF_STOCK = "Product is out of stock"


@dataclass
class Product:
    """A product in the catalog.

    ``sale_price`` of None or zero means the product sells at list price.
    """

    id: str
    name: str
    price: Money
    stock_quantity: int
    sku: str | None = None
    sale_price: Money | None = None
    is_active: bool = True
    status: str = ACTIVE_STATUS
    sales_count: int = 0

    def __post_init__(self) -> None:
        if self.stock_quantity < 0:
            raise ValidationError(
                f"Stock for {self.name} cannot be negative, got {self.stock_quantity}"
            )

    @property
    def charge_price(self) -> Money:
        """The unit price a customer pays right now."""
        if self.sale_price is not None and not self.sale_price.is_zero:
            return self.sale_price
        return self.price

    def unavailability_reason(self) -> str | None:
        """Why this product cannot be sold at all, or None if it can.

        Checked in order: active flag, lifecycle status, stock.
        """
        if not self.is_active:
            return REASON_UNAVAILABLE
        if self.status != ACTIVE_STATUS:
            return REASON_STATUS_CHANGED
        if self.stock_quantity <= 0:
            return REASON_OUT_OF_STOCK
        return None

    # --- Stock mutations (stock ledger only) ----------------------------------

    def remove_stock(self, quantity: int) -> None:
        if quantity <= 0:
            raise ValidationError("Stock decrement must be positive")
        if quantity > self.stock_quantity:
            raise InsufficientStockError(self.name, quantity, self.stock_quantity)
        self.stock_quantity -= quantity

    def add_stock(self, quantity: int) -> None:
        if quantity <= 0:
            raise ValidationError("Stock increment must be positive")
        self.stock_quantity += quantity

    def record_sale(self, quantity: int) -> None:
        self.sales_count += quantity

    def reverse_sale(self, quantity: int) -> None:
        self.sales_count = max(0, self.sales_count - quantity)

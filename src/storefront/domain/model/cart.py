"""Cart lines and the outcome of validating them."""

from __future__ import annotations

from dataclasses import dataclass

from storefront.domain.exceptions import ValidationError
from storefront.domain.model.product import Product
from storefront.domain.model.value_objects import Money


@dataclass
class CartLine:
    """One (product, quantity) pair in a user's in-progress selection."""

    user_id: str
    product_id: str
    quantity: int

    def __post_init__(self) -> None:
        if self.quantity < 1:
            raise ValidationError("Cart quantity must be at least 1")

    def clamp_to(self, available: int) -> bool:
        """Reduce quantity to *available*; never raises it.

        Returns True when the quantity changed.
        """
        if available < 1:
            raise ValidationError("Cannot clamp a cart line below 1")
        if self.quantity > available:
            self.quantity = available
            return True
        return False


@dataclass(frozen=True)
class ValidatedLine:
    """A cart line that passed validation, paired with the live product."""

    product: Product
    quantity: int

    @property
    def unit_price(self) -> Money:
        return self.product.charge_price

    @property
    def line_total(self) -> Money:
        return self.unit_price * self.quantity


@dataclass(frozen=True)
class RemovedItem:
    """A line dropped from the cart, with a human-readable reason."""

    product_id: str
    product_name: str
    reason: str


@dataclass(frozen=True)
class CartValidation:
    lines: list[ValidatedLine]
    removed: list[RemovedItem]
    clamped: list[str]

    @property
    def is_empty(self) -> bool:
        return not self.lines

    @property
    def needs_review(self) -> bool:
        """True when the user must look at the cart again before paying."""
        return bool(self.removed) or self.is_empty

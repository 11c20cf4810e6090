"""Application services: add to cart and show cart."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from storefront.domain.exceptions import EntityNotFoundError, ValidationError
from storefront.domain.model.cart import CartLine
from storefront.domain.repository.unit_of_work import UnitOfWork


@dataclass(frozen=True)
class CartLineDTO:
    product_id: str
    product_name: str
    quantity: int
    unit_price: str


class AddToCartHandler:

    def __init__(self, uow_factory: Callable[[], UnitOfWork]) -> None:
        self._uow_factory = uow_factory

    def handle(self, user_id: str, product_id: str, quantity: int) -> int:
        """Add *quantity* units; return the line's new quantity."""
        if quantity < 1:
            raise ValidationError("Quantity must be at least 1")
        with self._uow_factory() as uow:
            product = uow.products.get_by_id(product_id)
            if product is None:
                raise EntityNotFoundError(f"Product '{product_id}' not found")
            reason = product.unavailability_reason()
            if reason is not None:
                raise ValidationError(f"{product.name}: {reason}")

            line = uow.carts.get_line(user_id, product_id)
            if line is None:
                line = CartLine(user_id, product_id, quantity)
            else:
                line.quantity += quantity
            uow.carts.save_line(line)
            uow.commit()
            return line.quantity


class ShowCartHandler:

    def __init__(self, uow_factory: Callable[[], UnitOfWork]) -> None:
        self._uow_factory = uow_factory

    def handle(self, user_id: str) -> list[CartLineDTO]:
        result: list[CartLineDTO] = []
        with self._uow_factory() as uow:
            for line in uow.carts.lines_for_user(user_id):
                product = uow.products.get_by_id(line.product_id)
                result.append(
                    CartLineDTO(
                        product_id=line.product_id,
                        product_name=product.name if product else line.product_id,
                        quantity=line.quantity,
                        unit_price=str(product.charge_price) if product else "-",
                    )
                )
        return result

"""Application service: Show Order use case (query)."""

from __future__ import annotations

from collections.abc import Callable

from storefront.application.dto import OrderDTO
from storefront.domain.exceptions import EntityNotFoundError
from storefront.domain.repository.unit_of_work import UnitOfWork


class ShowOrderHandler:

    def __init__(self, uow_factory: Callable[[], UnitOfWork]) -> None:
        self._uow_factory = uow_factory

    def handle(self, order_id: int, user_id: str | None = None) -> OrderDTO:
        """Return the order; when *user_id* is given it must own the order."""
        with self._uow_factory() as uow:
            order = uow.orders.get_by_id(order_id)
        if order is None or (user_id is not None and order.user_id != user_id):
            raise EntityNotFoundError(f"Order #{order_id} not found")
        return OrderDTO.from_domain(order)

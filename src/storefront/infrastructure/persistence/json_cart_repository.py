"""JSON-backed implementation of CartRepository."""

from __future__ import annotations

from collections.abc import Callable

from storefront.domain.model.cart import CartLine
from storefront.domain.repository.cart_repository import CartRepository


class JsonCartRepository(CartRepository):

    def __init__(self, records: list[dict], on_change: Callable[[], None]) -> None:
        self._records = records
        self._on_change = on_change

    def lines_for_user(self, user_id: str) -> list[CartLine]:
        return [self._to_domain(raw) for raw in self._records if raw["user_id"] == user_id]

    def get_line(self, user_id: str, product_id: str) -> CartLine | None:
        index = self._index(user_id, product_id)
        return None if index is None else self._to_domain(self._records[index])

    def save_line(self, line: CartLine) -> None:
        raw = {"user_id": line.user_id, "product_id": line.product_id, "quantity": line.quantity}
        index = self._index(line.user_id, line.product_id)
        if index is None:
            self._records.append(raw)
        else:
            self._records[index] = raw
        self._on_change()

    def delete_line(self, user_id: str, product_id: str) -> None:
        index = self._index(user_id, product_id)
        if index is not None:
            del self._records[index]
            self._on_change()

    def _index(self, user_id: str, product_id: str) -> int | None:
        for i, raw in enumerate(self._records):
            if raw["user_id"] == user_id and raw["product_id"] == product_id:
                return i
        return None

    @staticmethod
    def _to_domain(raw: dict) -> CartLine:
        return CartLine(user_id=raw["user_id"], product_id=raw["product_id"], quantity=raw["quantity"])

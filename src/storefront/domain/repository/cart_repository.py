"""Abstract repository for persistent cart lines."""

from __future__ import annotations

from abc import ABC, abstractmethod

from storefront.domain.model.cart import CartLine


class CartRepository(ABC):

    @abstractmethod
    def lines_for_user(self, user_id: str) -> list[CartLine]:
        """Return the user's stored cart lines in insertion order."""

    @abstractmethod
    def get_line(self, user_id: str, product_id: str) -> CartLine | None:
        """Return one stored line, or None."""

    @abstractmethod
    def save_line(self, line: CartLine) -> None:
        """Insert or overwrite the line for (user, product)."""

    @abstractmethod
    def delete_line(self, user_id: str, product_id: str) -> None:
        """Remove the line for (user, product); a no-op if absent."""

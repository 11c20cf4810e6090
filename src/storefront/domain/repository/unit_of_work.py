"""Abstract unit of work.

Groups the repositories that must change together and owns the
transaction boundary.  Usage::

    with uow:
        ...  # reads and writes through uow.products, uow.orders, ...
        uow.commit()

Leaving the block without ``commit()`` (or through an exception) rolls
back every change made inside it.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from storefront.domain.repository.cart_repository import CartRepository
from storefront.domain.repository.order_repository import OrderRepository
from storefront.domain.repository.product_repository import ProductRepository
from storefront.domain.repository.wallet_repository import WalletRepository


class UnitOfWork(ABC):

    products: ProductRepository
    carts: CartRepository
    orders: OrderRepository
    wallets: WalletRepository

    def __enter__(self) -> UnitOfWork:
        self.begin()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        # rollback after commit is a no-op in every implementation
        self.rollback()

    @abstractmethod
    def begin(self) -> None:
        """Open the transaction and take its locks."""

    @abstractmethod
    def commit(self) -> None:
        """Make every change since ``begin()`` durable."""

    @abstractmethod
    def rollback(self) -> None:
        """Discard uncommitted changes and release locks."""

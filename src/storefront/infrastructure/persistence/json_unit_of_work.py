"""JSON-file implementation of UnitOfWork.

``begin()`` takes the data directory's lock and loads a private working
copy of every collection.  Repositories read and write that copy only;
``commit()`` writes the whole document back in one atomic replace when
anything was touched, ``rollback()`` throws the copy away.  The lock is
held until the unit of work ends.
"""

from __future__ import annotations

import copy
import logging

from storefront.domain.repository.unit_of_work import UnitOfWork
from storefront.infrastructure.persistence.json_cart_repository import JsonCartRepository
from storefront.infrastructure.persistence.json_order_repository import JsonOrderRepository
from storefront.infrastructure.persistence.json_product_repository import (
    JsonProductRepository,
)
from storefront.infrastructure.persistence.json_store import JsonDataStore
from storefront.infrastructure.persistence.json_wallet_repository import (
    JsonWalletRepository,
)

logger = logging.getLogger(__name__)


class JsonUnitOfWork(UnitOfWork):

    def __init__(self, store: JsonDataStore) -> None:
        self._store = store
        self._working: dict[str, list[dict]] = {}
        self._dirty: set[str] = set()
        self._active = False

    def begin(self) -> None:
        if self._active:
            raise RuntimeError("Unit of work is already active")
        self._store.acquire()
        try:
            self._working = copy.deepcopy(self._store.load())
        except BaseException:
            self._store.release()
            raise
        self._dirty = set()
        self._active = True

        self.products = JsonProductRepository(self._working["products"], self._marker("products"))
        self.carts = JsonCartRepository(self._working["carts"], self._marker("carts"))
        self.orders = JsonOrderRepository(self._working["orders"], self._marker("orders"))
        self.wallets = JsonWalletRepository(
            self._working["wallets"],
            self._working["wallet_transactions"],
            self._marker("wallets"),
            self._marker("wallet_transactions"),
        )

    def commit(self) -> None:
        if not self._active:
            raise RuntimeError("No active unit of work to commit")
        if self._dirty:
            self._store.write(self._working)
        logger.debug("Committed collections: %s", sorted(self._dirty))
        self._dirty = set()

    def rollback(self) -> None:
        if not self._active:
            return
        if self._dirty:
            logger.debug("Rolled back collections: %s", sorted(self._dirty))
        self._working = {}
        self._dirty = set()
        self._active = False
        self._store.release()

    def _marker(self, name: str):
        def mark() -> None:
            self._dirty.add(name)
        return mark

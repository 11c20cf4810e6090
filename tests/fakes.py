"""In-memory fakes for testing.

``InMemoryDatabase`` holds the committed state.  ``FakeUnitOfWork``
mirrors the JSON unit of work: it takes the database lock, works on a
deep copy and only publishes it on commit.  Repositories hand out copies,
so a change is only visible after ``save``.  No file I/O, no network.
"""

from __future__ import annotations

import copy
import itertools
import threading
from collections.abc import Iterable
from dataclasses import dataclass, field, replace
from datetime import datetime
from decimal import Decimal
from pathlib import Path

from storefront.domain.exceptions import PaymentGatewayError
from storefront.domain.model.cart import CartLine
from storefront.domain.model.order import Order, OrderLine, OrderTotals, PaymentMethod
from storefront.domain.model.product import Product
from storefront.domain.model.value_objects import Money, Quantity
from storefront.domain.model.wallet import WalletAccount, WalletTransaction
from storefront.domain.repository.cart_repository import CartRepository
from storefront.domain.repository.order_repository import OrderRepository
from storefront.domain.repository.product_repository import ProductRepository
from storefront.domain.repository.unit_of_work import UnitOfWork
from storefront.domain.repository.wallet_repository import WalletRepository
from storefront.domain.service.payment_gateway import (
    CaptureResult,
    PaymentGateway,
    RemoteOrderItem,
)
from storefront.domain.service.stock_ledger import StockLedger
from storefront.infrastructure.bootstrap import Services
from storefront.infrastructure.config import Settings
from storefront.infrastructure.persistence.json_store import JsonDataStore
from storefront.infrastructure.persistence.json_unit_of_work import JsonUnitOfWork


@dataclass
class _State:
    products: dict[str, Product] = field(default_factory=dict)
    carts: dict[tuple[str, str], CartLine] = field(default_factory=dict)
    orders: dict[int, Order] = field(default_factory=dict)
    wallets: dict[str, WalletAccount] = field(default_factory=dict)
    wallet_transactions: list[WalletTransaction] = field(default_factory=list)


class InMemoryDatabase:

    def __init__(self) -> None:
        self.state = _State()
        self.lock = threading.Lock()
        self.commits = 0

    # --- Seeding --------------------------------------------------------------

    def add_product(
        self,
        product_id: str,
        name: str,
        price: str,
        stock: int,
        **kwargs,
    ) -> Product:
        product = Product(
            id=product_id, name=name, price=Money.of(price), stock_quantity=stock, **kwargs
        )
        self.state.products[product_id] = product
        return product

    def add_to_cart(self, user_id: str, product_id: str, quantity: int) -> None:
        self.state.carts[(user_id, product_id)] = CartLine(user_id, product_id, quantity)

    def open_wallet(self, user_id: str, balance: str) -> None:
        self.state.wallets[user_id] = WalletAccount(user_id, Money.of(balance))

    # --- Inspection -----------------------------------------------------------

    def product(self, product_id: str) -> Product:
        return self.state.products[product_id]

    def cart(self, user_id: str) -> dict[str, int]:
        return {
            line.product_id: line.quantity
            for (uid, _), line in self.state.carts.items()
            if uid == user_id
        }

    def orders(self) -> list[Order]:
        return list(self.state.orders.values())

    def balance(self, user_id: str) -> Decimal:
        return self.state.wallets[user_id].balance.amount


class FakeProductRepository(ProductRepository):

    def __init__(self, store: dict[str, Product]) -> None:
        self._store = store

    def get_by_id(self, product_id: str) -> Product | None:
        return copy.deepcopy(self._store.get(product_id))

    def get_for_update(self, product_id: str) -> Product | None:
        return self.get_by_id(product_id)

    def list_all(self) -> list[Product]:
        return [copy.deepcopy(p) for p in self._store.values()]

    def save(self, product: Product) -> None:
        self._store[product.id] = copy.deepcopy(product)


class FakeCartRepository(CartRepository):

    def __init__(self, store: dict[tuple[str, str], CartLine]) -> None:
        self._store = store

    def lines_for_user(self, user_id: str) -> list[CartLine]:
        return [copy.deepcopy(line) for (uid, _), line in self._store.items() if uid == user_id]

    def get_line(self, user_id: str, product_id: str) -> CartLine | None:
        return copy.deepcopy(self._store.get((user_id, product_id)))

    def save_line(self, line: CartLine) -> None:
        self._store[(line.user_id, line.product_id)] = copy.deepcopy(line)

    def delete_line(self, user_id: str, product_id: str) -> None:
        self._store.pop((user_id, product_id), None)


class FakeOrderRepository(OrderRepository):

    def __init__(self, store: dict[int, Order]) -> None:
        self._store = store

    def next_id(self) -> int:
        return max(self._store, default=0) + 1

    def get_by_id(self, order_id: int) -> Order | None:
        return copy.deepcopy(self._store.get(order_id))

    def number_exists(self, order_number: str) -> bool:
        return any(o.order_number == order_number for o in self._store.values())

    def list_all(self) -> list[Order]:
        return [copy.deepcopy(o) for o in self._store.values()]

    def save(self, order: Order) -> None:
        if order.id is None:
            order.id = self.next_id()
        self._store[order.id] = copy.deepcopy(order)


class FakeWalletRepository(WalletRepository):

    def __init__(
        self,
        accounts: dict[str, WalletAccount],
        transactions: list[WalletTransaction],
    ) -> None:
        self._accounts = accounts
        self._transactions = transactions

    def get_account(self, user_id: str) -> WalletAccount | None:
        return copy.deepcopy(self._accounts.get(user_id))

    def get_for_update(self, user_id: str) -> WalletAccount | None:
        return self.get_account(user_id)

    def save_account(self, account: WalletAccount) -> None:
        self._accounts[account.user_id] = copy.deepcopy(account)

    def append_transaction(self, entry: WalletTransaction) -> WalletTransaction:
        stored = replace(entry, id=len(self._transactions) + 1)
        self._transactions.append(stored)
        return stored

    def transactions_for_user(self, user_id: str) -> list[WalletTransaction]:
        return [t for t in self._transactions if t.user_id == user_id]


class FakeUnitOfWork(UnitOfWork):

    def __init__(self, db: InMemoryDatabase) -> None:
        self._db = db
        self._working: _State | None = None

    def begin(self) -> None:
        self._db.lock.acquire()
        self._working = copy.deepcopy(self._db.state)
        self.products = FakeProductRepository(self._working.products)
        self.carts = FakeCartRepository(self._working.carts)
        self.orders = FakeOrderRepository(self._working.orders)
        self.wallets = FakeWalletRepository(
            self._working.wallets, self._working.wallet_transactions
        )

    def commit(self) -> None:
        self._db.state = copy.deepcopy(self._working)
        self._db.commits += 1

    def rollback(self) -> None:
        if self._working is None:
            return
        self._working = None
        self._db.lock.release()


def uow_factory(db: InMemoryDatabase):
    return lambda: FakeUnitOfWork(db)


class FakePaymentGateway(PaymentGateway):
    """Scripted PayPal: records calls and fails on demand."""

    def __init__(
        self,
        fail_create: bool = False,
        fail_capture: bool = False,
        capture_status: str = "COMPLETED",
    ) -> None:
        self.fail_create = fail_create
        self.fail_capture = fail_capture
        self.capture_status = capture_status
        self.created: list[tuple[str, OrderTotals, list[RemoteOrderItem]]] = []
        self.captured: list[str] = []
        self._ids = itertools.count(1)

    def create_remote_order(
        self,
        reference: str,
        totals: OrderTotals,
        items: list[RemoteOrderItem],
    ) -> str:
        if self.fail_create:
            raise PaymentGatewayError("PayPal error: service unavailable")
        self.created.append((reference, totals, items))
        return f"PAYPAL-{next(self._ids)}"

    def capture_remote_order(self, remote_order_id: str) -> CaptureResult:
        if self.fail_capture:
            raise PaymentGatewayError("PayPal error: capture declined")
        self.captured.append(remote_order_id)
        return CaptureResult(status=self.capture_status, capture_id=f"CAP-{remote_order_id}")


def sequential_numbers(*numbers: str):
    """Order number generator that replays *numbers* in turn."""
    it = iter(numbers)
    return lambda: next(it)


def place_pending_order(
    db: InMemoryDatabase,
    method: PaymentMethod,
    user_id: str = "u1",
    created_at: datetime | None = None,
) -> Order:
    """Commit a pending order for one Widget (20.00), taking its stock."""
    if "w" not in db.state.products:
        db.add_product("w", "Widget", "20.00", stock=5)
    with FakeUnitOfWork(db) as uow:
        order = Order.create(
            order_number=f"ORD-TEST-{len(db.state.orders) + 1}",
            user_id=user_id,
            lines=[OrderLine("w", "Widget", "N/A", Quantity(1), Money.of("20.00"))],
            totals=OrderTotals(Money.of("20.00"), Money.of("1.60"), Money.of("9.99")),
            payment_method=method,
            shipping_address_id=1,
            billing_address_id=1,
        )
        if created_at is not None:
            order.created_at = created_at
        uow.orders.save(order)
        StockLedger(uow.products).decrement({"w": 1})
        uow.commit()
    return order


def make_services(
    db: InMemoryDatabase,
    gateway: PaymentGateway | None = None,
    **settings,
) -> Services:
    """Wire every handler to *db* and *gateway* instead of files and PayPal."""
    return Services(
        settings=Settings(**settings),
        uow_factory=uow_factory(db),
        gateway=gateway or FakePaymentGateway(),
    )


def seed_json_store(
    data_dir: Path,
    products: Iterable[Product] = (),
    carts: Iterable[CartLine] = (),
    wallets: Iterable[WalletAccount] = (),
) -> JsonDataStore:
    """Write a catalog, carts and wallets into a JSON data directory."""
    store = JsonDataStore(data_dir)
    with JsonUnitOfWork(store) as uow:
        for product in products:
            uow.products.save(product)
        for line in carts:
            uow.carts.save_line(line)
        for account in wallets:
            uow.wallets.save_account(account)
        uow.commit()
    return store

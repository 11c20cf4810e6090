"""Domain service: Payment Settlement.

One strategy per payment method.  Each strategy takes part in up to
three moments of a checkout:

- ``precheck``: before any order is written (read-only).
- ``within_transaction``: inside the Order Writer's unit of work; only
  synchronous, local settlement (wallet) does anything here.
- ``after_commit``: after the order is durable; remote calls go here.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass

from storefront.domain.exceptions import EntityNotFoundError
from storefront.domain.model.order import Order, PaymentMethod, PaymentStatus
from storefront.domain.model.value_objects import Money
from storefront.domain.repository.unit_of_work import UnitOfWork
from storefront.domain.service.payment_gateway import PaymentGateway, RemoteOrderItem
from storefront.domain.service.wallet_ledger import WalletLedger

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SettlementOutcome:
    order_id: int
    payment_status: PaymentStatus
    remote_payment_id: str | None = None


class Settlement(ABC):

    method: PaymentMethod

    def precheck(self, uow: UnitOfWork, user_id: str, amount: Money) -> None:
        """Reject the checkout before an order exists.  Default: accept."""

    def within_transaction(self, uow: UnitOfWork, order: Order) -> None:
        """Settle inside the order transaction.  Default: nothing to do."""

    @abstractmethod
    def after_commit(self, order: Order) -> SettlementOutcome:
        """Continue settlement once the order has been committed."""


class WalletSettlement(Settlement):

    method = PaymentMethod.WALLET

    def precheck(self, uow: UnitOfWork, user_id: str, amount: Money) -> None:
        WalletLedger(uow.wallets).ensure_can_pay(user_id, amount)

    def within_transaction(self, uow: UnitOfWork, order: Order) -> None:
        WalletLedger(uow.wallets).debit_for_order(
            order.user_id, order.grand_total, order.id  # type: ignore[arg-type]
        )
        order.mark_paid()
        uow.orders.save(order)

    def after_commit(self, order: Order) -> SettlementOutcome:
        return SettlementOutcome(order.id, order.payment_status)  # type: ignore[arg-type]


class CashOnDeliverySettlement(Settlement):
    """Payment is collected at the door; the order stays pending."""

    method = PaymentMethod.COD

    def after_commit(self, order: Order) -> SettlementOutcome:
        return SettlementOutcome(order.id, order.payment_status)  # type: ignore[arg-type]


class CardSettlement(Settlement):
    """Placeholder: card details are never captured server-side.

    Orders are left pending, like cash on delivery, until a card
    processor is wired in.
    """

    method = PaymentMethod.CARD

    def within_transaction(self, uow: UnitOfWork, order: Order) -> None:
        logger.warning(
            "Order %s placed with card payment; no server-side capture is configured",
            order.order_number,
        )

    def after_commit(self, order: Order) -> SettlementOutcome:
        return SettlementOutcome(order.id, order.payment_status)  # type: ignore[arg-type]


class PayPalSettlement(Settlement):
    """Two-phase settlement: create the remote order here, capture later.

    If the gateway fails, the committed local order stays pending with
    its stock decremented until it is captured or expired.
    """

    method = PaymentMethod.PAYPAL

    def __init__(
        self,
        gateway: PaymentGateway,
        uow_factory: Callable[[], UnitOfWork],
    ) -> None:
        self._gateway = gateway
        self._uow_factory = uow_factory

    def after_commit(self, order: Order) -> SettlementOutcome:
        items = [
            RemoteOrderItem(
                name=line.product_name,
                quantity=line.quantity.value,
                unit_price=line.unit_price,
                sku=line.sku,
            )
            for line in order.lines
        ]
        remote_id = self._gateway.create_remote_order(order.order_number, order.totals, items)

        with self._uow_factory() as uow:
            stored = uow.orders.get_by_id(order.id)  # type: ignore[arg-type]
            if stored is None:
                raise EntityNotFoundError(f"Order #{order.id} not found")
            stored.attach_remote_payment(remote_id)
            uow.orders.save(stored)
            uow.commit()

        logger.info("Linked order %s to PayPal order %s", order.order_number, remote_id)
        return SettlementOutcome(order.id, stored.payment_status, remote_id)  # type: ignore[arg-type]


def build_settlements(
    gateway: PaymentGateway,
    uow_factory: Callable[[], UnitOfWork],
) -> dict[PaymentMethod, Settlement]:
    strategies: list[Settlement] = [
        WalletSettlement(),
        CardSettlement(),
        PayPalSettlement(gateway, uow_factory),
        CashOnDeliverySettlement(),
    ]
    return {s.method: s for s in strategies}

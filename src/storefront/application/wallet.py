"""Application services: wallet balance and top-up."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from storefront.domain.model.value_objects import Money
from storefront.domain.repository.unit_of_work import UnitOfWork
from storefront.domain.service.wallet_ledger import WalletLedger


@dataclass(frozen=True)
class WalletEntryDTO:
    amount: str  # signed, e.g. "-31.59"
    type: str
    reference_order_id: int | None
    created_at: str


@dataclass(frozen=True)
class WalletDTO:
    user_id: str
    balance: str
    entries: list[WalletEntryDTO]


class ShowWalletHandler:

    def __init__(self, uow_factory: Callable[[], UnitOfWork]) -> None:
        self._uow_factory = uow_factory

    def handle(self, user_id: str) -> WalletDTO:
        with self._uow_factory() as uow:
            balance = WalletLedger(uow.wallets).balance_of(user_id)
            entries = uow.wallets.transactions_for_user(user_id)
        return WalletDTO(
            user_id=user_id,
            balance=str(balance),
            entries=[
                WalletEntryDTO(
                    amount=f"{e.amount:.2f}",
                    type=e.type.value,
                    reference_order_id=e.reference_order_id,
                    created_at=e.created_at.strftime("%Y-%m-%d %H:%M UTC"),
                )
                for e in entries
            ],
        )


class TopUpWalletHandler:

    def __init__(self, uow_factory: Callable[[], UnitOfWork]) -> None:
        self._uow_factory = uow_factory

    def handle(self, user_id: str, amount: str) -> str:
        """Credit *amount*; return the new balance, formatted."""
        money = Money.of(amount).rounded()
        with self._uow_factory() as uow:
            ledger = WalletLedger(uow.wallets)
            ledger.top_up(user_id, money)
            uow.commit()
            return str(ledger.balance_of(user_id))

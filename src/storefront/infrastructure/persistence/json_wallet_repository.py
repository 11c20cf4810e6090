"""JSON-backed implementation of WalletRepository."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime
from decimal import Decimal

from storefront.domain.model.value_objects import Money
from storefront.domain.model.wallet import (
    WalletAccount,
    WalletTransaction,
    WalletTransactionType,
)
from storefront.domain.repository.wallet_repository import WalletRepository


class JsonWalletRepository(WalletRepository):

    def __init__(
        self,
        accounts: list[dict],
        transactions: list[dict],
        on_accounts_change: Callable[[], None],
        on_transactions_change: Callable[[], None],
    ) -> None:
        self._accounts = accounts
        self._transactions = transactions
        self._on_accounts_change = on_accounts_change
        self._on_transactions_change = on_transactions_change

    # --- WalletRepository interface -------------------------------------------

    def get_account(self, user_id: str) -> WalletAccount | None:
        for raw in self._accounts:
            if raw["user_id"] == user_id:
                return WalletAccount(
                    user_id=raw["user_id"],
                    balance=Money(Decimal(raw["balance"]), raw.get("currency", "USD")),
                )
        return None

    def get_for_update(self, user_id: str) -> WalletAccount | None:
        # The unit of work already holds the store lock
        return self.get_account(user_id)

    def save_account(self, account: WalletAccount) -> None:
        raw = {
            "user_id": account.user_id,
            "balance": str(account.balance.amount),
            "currency": account.balance.currency,
        }
        for i, existing in enumerate(self._accounts):
            if existing["user_id"] == account.user_id:
                self._accounts[i] = raw
                break
        else:
            self._accounts.append(raw)
        self._on_accounts_change()

    def append_transaction(self, entry: WalletTransaction) -> WalletTransaction:
        next_id = max((t["id"] for t in self._transactions), default=0) + 1
        self._transactions.append(
            {
                "id": next_id,
                "user_id": entry.user_id,
                "amount": str(entry.amount),
                "type": entry.type.value,
                "reference_id": entry.reference_order_id,
                "created_at": entry.created_at.isoformat(),
            }
        )
        self._on_transactions_change()
        return WalletTransaction(
            user_id=entry.user_id,
            amount=entry.amount,
            type=entry.type,
            reference_order_id=entry.reference_order_id,
            id=next_id,
            created_at=entry.created_at,
        )

    def transactions_for_user(self, user_id: str) -> list[WalletTransaction]:
        return [
            WalletTransaction(
                user_id=raw["user_id"],
                amount=Decimal(raw["amount"]),
                type=WalletTransactionType(raw["type"]),
                reference_order_id=raw.get("reference_id"),
                id=raw["id"],
                created_at=datetime.fromisoformat(raw["created_at"]),
            )
            for raw in self._transactions
            if raw["user_id"] == user_id
        ]

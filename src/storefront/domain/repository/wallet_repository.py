"""Abstract repository for wallets and their transaction log."""

from __future__ import annotations

from abc import ABC, abstractmethod

from storefront.domain.model.wallet import WalletAccount, WalletTransaction


class WalletRepository(ABC):

    @abstractmethod
    def get_account(self, user_id: str) -> WalletAccount | None:
        """Return the user's wallet, or None if it was never opened."""

    @abstractmethod
    def get_for_update(self, user_id: str) -> WalletAccount | None:
        """Like ``get_account`` but locks the row until the unit of work ends."""

    @abstractmethod
    def save_account(self, account: WalletAccount) -> None:
        """Persist a new or updated wallet."""

    @abstractmethod
    def append_transaction(self, entry: WalletTransaction) -> WalletTransaction:
        """Append a ledger entry and return it with its ID assigned."""

    @abstractmethod
    def transactions_for_user(self, user_id: str) -> list[WalletTransaction]:
        """Return the user's ledger entries, oldest first."""

"""Domain service: Wallet Ledger.

Applies balance changes and records them in the transaction log within
the caller's unit of work.  Debits re-read the wallet under lock so
concurrent spends cannot overdraw it.
"""

from __future__ import annotations

import logging

from storefront.domain.exceptions import (
    InsufficientBalanceError,
    ValidationError,
    WalletUnavailableError,
)
from storefront.domain.model.value_objects import Money
from storefront.domain.model.wallet import (
    WalletAccount,
    WalletTransaction,
    WalletTransactionType,
)
from storefront.domain.repository.wallet_repository import WalletRepository

logger = logging.getLogger(__name__)

INSUFFICIENT_BALANCE = (
    "Insufficient wallet balance. "
    "Please choose another payment method or top up your wallet."
)


class WalletLedger:

    def __init__(self, wallet_repo: WalletRepository) -> None:
        self._wallet_repo = wallet_repo

    def balance_of(self, user_id: str) -> Money:
        account = self._wallet_repo.get_account(user_id)
        if account is None:
            raise WalletUnavailableError("Unable to retrieve wallet balance")
        return account.balance

    def ensure_can_pay(self, user_id: str, amount: Money) -> None:
        """Unlocked pre-check, run before any order is written."""
        if self.balance_of(user_id) < amount:
            raise InsufficientBalanceError(INSUFFICIENT_BALANCE)

    def debit_for_order(self, user_id: str, amount: Money, order_id: int) -> WalletTransaction:
        account = self._wallet_repo.get_for_update(user_id)
        if account is None:
            raise WalletUnavailableError("Unable to retrieve wallet balance")
        if not account.can_cover(amount):
            logger.warning(
                "Wallet race lost for user %s: balance %s, need %s",
                user_id, account.balance, amount,
            )
            raise InsufficientBalanceError("Insufficient wallet balance during finalization.")

        account.debit(amount)
        self._wallet_repo.save_account(account)
        return self._wallet_repo.append_transaction(
            WalletTransaction(
                user_id=user_id,
                amount=-amount.amount,
                type=WalletTransactionType.PAYMENT,
                reference_order_id=order_id,
            )
        )

    def top_up(self, user_id: str, amount: Money) -> WalletTransaction:
        if amount.is_zero:
            raise ValidationError("Top-up amount must be positive")
        account = self._wallet_repo.get_for_update(user_id)
        if account is None:
            account = WalletAccount(user_id=user_id, balance=Money.zero(amount.currency))
        account.credit(amount)
        self._wallet_repo.save_account(account)
        return self._wallet_repo.append_transaction(
            WalletTransaction(
                user_id=user_id,
                amount=amount.amount,
                type=WalletTransactionType.TOP_UP,
            )
        )

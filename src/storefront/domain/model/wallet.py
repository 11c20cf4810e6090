"""Wallet aggregate and its append-only transaction log."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum

from storefront.domain.exceptions import InsufficientBalanceError, ValidationError
from storefront.domain.model.value_objects import Money


class WalletTransactionType(Enum):
    PAYMENT = "payment"
    TOP_UP = "top_up"


@dataclass
class WalletAccount:
    """A user's stored balance.  The balance never drops below zero."""

    user_id: str
    balance: Money

    def can_cover(self, amount: Money) -> bool:
        return self.balance >= amount

    def debit(self, amount: Money) -> None:
        if amount.is_zero:
            raise ValidationError("Debit amount must be positive")
        if not self.can_cover(amount):
            raise InsufficientBalanceError(
                f"Insufficient wallet balance ({self.balance} available, "
                f"{amount} required)"
            )
        self.balance = self.balance - amount

    def credit(self, amount: Money) -> None:
        if amount.is_zero:
            raise ValidationError("Credit amount must be positive")
        self.balance = self.balance + amount


@dataclass(frozen=True)
class WalletTransaction:
    """One ledger entry.  Debits carry a negative ``amount``."""

    user_id: str
    amount: Decimal
    type: WalletTransactionType
    reference_order_id: int | None = None
    id: int | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

"""Abstract external payment gateway (PayPal).

Implementations talk to a remote API and must never be called while a
unit of work is open.  Every failure surfaces as PaymentGatewayError.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from storefront.domain.model.order import OrderTotals
from storefront.domain.model.value_objects import Money

CAPTURE_COMPLETED = "COMPLETED"


@dataclass(frozen=True)
class RemoteOrderItem:
    name: str
    quantity: int
    unit_price: Money
    sku: str | None = None


@dataclass(frozen=True)
class CaptureResult:
    status: str
    capture_id: str | None

    @property
    def completed(self) -> bool:
        return self.status == CAPTURE_COMPLETED


class PaymentGateway(ABC):

    @abstractmethod
    def create_remote_order(
        self,
        reference: str,
        totals: OrderTotals,
        items: list[RemoteOrderItem],
    ) -> str:
        """Create a remote order for ``totals.grand_total``; return its id."""

    @abstractmethod
    def capture_remote_order(self, remote_order_id: str) -> CaptureResult:
        """Capture a buyer-approved remote order."""

"""Application service: Expire Pending PayPal Orders.

A PayPal checkout commits a pending order (with stock taken) before the
buyer approves the payment.  When the capture never arrives, the order
would hold that stock forever; this sweep cancels such orders once they
are older than the configured time-to-live.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timedelta, timezone

from storefront.application.cancel_order import cancel_in
from storefront.domain.model.order import OrderStatus, PaymentMethod, PaymentStatus
from storefront.domain.repository.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


class ExpirePendingOrdersHandler:

    def __init__(
        self,
        uow_factory: Callable[[], UnitOfWork],
        ttl: timedelta,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ) -> None:
        self._uow_factory = uow_factory
        self._ttl = ttl
        self._clock = clock

    def handle(self) -> list[str]:
        """Cancel stale pending PayPal orders; return their order numbers."""
        cutoff = self._clock() - self._ttl
        expired: list[str] = []
        with self._uow_factory() as uow:
            for order in uow.orders.list_all():
                if (
                    order.payment_method == PaymentMethod.PAYPAL
                    and order.payment_status == PaymentStatus.PENDING
                    and order.status == OrderStatus.PLACED
                    and order.created_at < cutoff
                ):
                    cancel_in(uow, order)
                    expired.append(order.order_number)
            uow.commit()

        if expired:
            logger.warning("Expired %d stale PayPal orders: %s", len(expired), ", ".join(expired))
        return expired

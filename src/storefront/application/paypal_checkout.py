"""Application services: PayPal create-order and capture use cases.

Create runs the normal checkout (validation, pricing, atomic order
write) with PayPal forced as the method, then asks PayPal for a remote
order.  Capture confirms a buyer-approved remote order and flips the
local order to paid.  Both gateway calls happen outside any open unit
of work; the pending local order is the recovery anchor.
"""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Callable

from storefront.application.dto import (
    CheckoutRequest,
    OrderDTO,
    PayPalOrderDTO,
    SummaryItem,
)
from storefront.application.place_order import PlaceOrderHandler
from storefront.domain.exceptions import (
    EntityNotFoundError,
    OrderStateError,
    PaymentGatewayError,
    ValidationError,
)
from storefront.domain.model.order import Order, OrderStatus, PaymentMethod
from storefront.domain.repository.unit_of_work import UnitOfWork
from storefront.domain.service.payment_gateway import PaymentGateway

logger = logging.getLogger(__name__)

CART_CHANGED = "Some items in your cart are no longer available and have been removed."


class CreatePayPalOrderHandler:

    def __init__(self, place_order: PlaceOrderHandler) -> None:
        self._place_order = place_order

    def handle(self, request: CheckoutRequest, summary: list[SummaryItem]) -> PayPalOrderDTO:
        request = dataclasses.replace(request, payment_method=PaymentMethod.PAYPAL.value)
        result = self._place_order.handle(request, summary=summary)
        if not result.placed:
            raise ValidationError(CART_CHANGED if result.removed else "Your cart is empty.")

        order = result.order
        if order is None or not order.remote_payment_id:
            raise PaymentGatewayError("PayPal did not return an order id")
        return PayPalOrderDTO(id=order.remote_payment_id, order_id=order.id)


class CapturePayPalOrderHandler:

    def __init__(
        self,
        uow_factory: Callable[[], UnitOfWork],
        gateway: PaymentGateway,
    ) -> None:
        self._uow_factory = uow_factory
        self._gateway = gateway

    def handle(self, user_id: str, remote_order_id: str, order_id: int) -> OrderDTO:
        """Capture payment for *order_id*; safe to retry with the same ids."""
        if not remote_order_id:
            raise ValidationError("Missing PayPal order id")

        with self._uow_factory() as uow:
            order = self._load(uow, user_id, order_id, remote_order_id)
        if order.is_paid:
            logger.info("Order %s already paid; capture retry ignored", order.order_number)
            return OrderDTO.from_domain(order)

        capture = self._gateway.capture_remote_order(remote_order_id)
        if not capture.completed:
            logger.error(
                "PayPal capture for order %s returned status %s",
                order.order_number, capture.status,
            )
            raise PaymentGatewayError(f"Payment was not completed (status {capture.status})")

        with self._uow_factory() as uow:
            order = self._load(uow, user_id, order_id, remote_order_id)
            if not order.is_paid:
                order.mark_paid(capture.capture_id)
                uow.orders.save(order)
                uow.commit()
                logger.info(
                    "Order %s paid via PayPal capture %s",
                    order.order_number, capture.capture_id,
                )
        return OrderDTO.from_domain(order)

    @staticmethod
    def _load(uow: UnitOfWork, user_id: str, order_id: int, remote_order_id: str) -> Order:
        order = uow.orders.get_by_id(order_id)
        if order is None or order.user_id != user_id:
            raise EntityNotFoundError(f"Order #{order_id} not found")
        if order.payment_method != PaymentMethod.PAYPAL:
            raise ValidationError(f"Order #{order_id} is not a PayPal order")
        if order.remote_payment_id != remote_order_id:
            raise ValidationError("PayPal order does not match this order")
        if order.status == OrderStatus.CANCELLED:
            raise OrderStateError(f"Order {order.order_number} has been cancelled")
        return order

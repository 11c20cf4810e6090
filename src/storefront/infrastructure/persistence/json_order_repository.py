"""JSON-backed implementation of OrderRepository."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime
from decimal import Decimal

from storefront.domain.model.order import (
    Order,
    OrderLine,
    OrderStatus,
    OrderTotals,
    PaymentMethod,
    PaymentStatus,
)
from storefront.domain.model.value_objects import Money, Quantity
from storefront.domain.repository.order_repository import OrderRepository


class JsonOrderRepository(OrderRepository):

    def __init__(self, records: list[dict], on_change: Callable[[], None]) -> None:
        self._records = records
        self._on_change = on_change

    # --- OrderRepository interface --------------------------------------------

    def next_id(self) -> int:
        if not self._records:
            return 1
        return max(o["id"] for o in self._records) + 1

    def get_by_id(self, order_id: int) -> Order | None:
        for raw in self._records:
            if raw["id"] == order_id:
                return self._to_domain(raw)
        return None

    def number_exists(self, order_number: str) -> bool:
        return any(raw["order_number"] == order_number for raw in self._records)

    def list_all(self) -> list[Order]:
        return [self._to_domain(raw) for raw in self._records]

    def save(self, order: Order) -> None:
        if order.id is None:
            order.id = self.next_id()

        # Upsert: replace if exists, otherwise append
        for i, raw in enumerate(self._records):
            if raw["id"] == order.id:
                self._records[i] = self._to_raw(order)
                break
        else:
            self._records.append(self._to_raw(order))
        self._on_change()

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(order: Order) -> dict:
        totals = order.totals
        return {
            "id": order.id,
            "order_number": order.order_number,
            "user_id": order.user_id,
            "status": order.status.value,
            "payment_method": order.payment_method.value,
            "payment_status": order.payment_status.value,
            "shipping_address_id": order.shipping_address_id,
            "billing_address_id": order.billing_address_id,
            "notes": order.notes,
            "currency": totals.subtotal.currency,
            "subtotal": str(totals.subtotal.amount),
            "tax_amount": str(totals.tax.amount),
            "shipping_amount": str(totals.shipping.amount),
            "total_amount": str(totals.grand_total.amount),
            "remote_payment_id": order.remote_payment_id,
            "capture_id": order.capture_id,
            "paid_at": order.paid_at.isoformat() if order.paid_at else None,
            "created_at": order.created_at.isoformat(),
            "items": [
                {
                    "product_id": line.product_id,
                    "product_name": line.product_name,
                    "product_sku": line.sku,
                    "quantity": line.quantity.value,
                    "unit_price": str(line.unit_price.amount),
                    "total_price": str(line.line_total.amount),
                }
                for line in order.lines
            ],
        }

    @staticmethod
    def _to_domain(raw: dict) -> Order:
        currency = raw.get("currency", "USD")

        def money(key: str) -> Money:
            return Money(Decimal(raw[key]), currency)

        lines = [
            OrderLine(
                product_id=i["product_id"],
                product_name=i["product_name"],
                sku=i["product_sku"],
                quantity=Quantity(i["quantity"]),
                unit_price=Money(Decimal(i["unit_price"]), currency),
            )
            for i in raw["items"]
        ]
        return Order(
            id=raw["id"],
            order_number=raw["order_number"],
            user_id=raw["user_id"],
            lines=lines,
            totals=OrderTotals(
                subtotal=money("subtotal"),
                tax=money("tax_amount"),
                shipping=money("shipping_amount"),
            ),
            payment_method=PaymentMethod(raw["payment_method"]),
            payment_status=PaymentStatus(raw["payment_status"]),
            status=OrderStatus(raw["status"]),
            shipping_address_id=raw["shipping_address_id"],
            billing_address_id=raw["billing_address_id"],
            notes=raw.get("notes", ""),
            remote_payment_id=raw.get("remote_payment_id"),
            capture_id=raw.get("capture_id"),
            paid_at=datetime.fromisoformat(raw["paid_at"]) if raw.get("paid_at") else None,
            created_at=datetime.fromisoformat(raw["created_at"]),
        )

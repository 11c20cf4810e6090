"""Data Transfer Objects — plain containers that cross layer boundaries.

DTOs carry data between the CLI / web layers and the application layer
without exposing domain internals to the outside world.  Client-supplied
line items are parsed here, once, into typed values.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation

from storefront.domain.exceptions import ValidationError
from storefront.domain.model.cart import CartValidation, RemovedItem
from storefront.domain.model.order import Order, OrderTotals


# --- Input -------------------------------------------------------------------


@dataclass(frozen=True)
class SelectedItem:
    """Input: one cart line the customer chose to check out."""

    product_id: str
    quantity: int


@dataclass(frozen=True)
class SummaryItem:
    """Input: one row of the order summary the customer is looking at."""

    name: str
    quantity: int
    unit_price: Decimal


@dataclass(frozen=True)
class CheckoutRequest:
    user_id: str
    shipping_address_id: int
    billing_address_id: int
    payment_method: str
    notes: str = ""
    selected_items: list[SelectedItem] | None = None


def parse_selected_items(raw: str | None) -> list[SelectedItem] | None:
    """Parse the ``selected_items`` JSON array.

    Returns None for a missing or empty selection (meaning "the whole
    cart").  Duplicate product ids are merged.
    """
    if raw is None or not raw.strip():
        return None
    data = _load_json_list(raw, "selected items")
    if not data:
        return None

    merged: dict[str, int] = {}
    for entry in data:
        if not isinstance(entry, dict):
            raise ValidationError("Invalid selected items: each entry must be an object")
        product_id = entry.get("product_id")
        if product_id is None or str(product_id).strip() == "":
            raise ValidationError("Invalid selected items: product_id is required")
        quantity = _positive_int(entry.get("quantity"), "selected items")
        key = str(product_id).strip()
        merged[key] = merged.get(key, 0) + quantity
    return [SelectedItem(pid, qty) for pid, qty in merged.items()]


def parse_summary_items(raw: str | None) -> list[SummaryItem]:
    """Parse the ``order_items`` JSON array sent along with a PayPal checkout."""
    if raw is None or not raw.strip():
        return []
    items: list[SummaryItem] = []
    for entry in _load_json_list(raw, "order items"):
        if not isinstance(entry, dict) or not str(entry.get("name", "")).strip():
            raise ValidationError("Invalid order items: each entry needs a name")
        try:
            unit_price = Decimal(str(entry.get("unit_price")))
        except InvalidOperation as exc:
            raise ValidationError("Invalid order items: bad unit_price") from exc
        items.append(
            SummaryItem(
                name=str(entry["name"]).strip(),
                quantity=_positive_int(entry.get("quantity"), "order items"),
                unit_price=unit_price,
            )
        )
    return items


def _load_json_list(raw: str, what: str) -> list:
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ValidationError(f"Invalid {what}: not valid JSON") from exc
    if not isinstance(data, list):
        raise ValidationError(f"Invalid {what}: expected a list")
    return data


def _positive_int(value: object, what: str) -> int:
    if isinstance(value, bool):
        raise ValidationError(f"Invalid {what}: quantity must be an integer")
    try:
        quantity = int(str(value))
    except ValueError as exc:
        raise ValidationError(f"Invalid {what}: quantity must be an integer") from exc
    if quantity < 1:
        raise ValidationError(f"Invalid {what}: quantity must be at least 1")
    return quantity


# --- Output ------------------------------------------------------------------


@dataclass(frozen=True)
class RemovedItemDTO:
    product_id: str
    product_name: str
    reason: str

    @staticmethod
    def from_domain(item: RemovedItem) -> RemovedItemDTO:
        return RemovedItemDTO(item.product_id, item.product_name, item.reason)


@dataclass(frozen=True)
class TotalsDTO:
    subtotal: str  # formatted, e.g. "$20.00"
    tax: str
    shipping: str
    grand_total: str

    @staticmethod
    def from_domain(totals: OrderTotals) -> TotalsDTO:
        totals = totals.rounded()
        return TotalsDTO(
            subtotal=str(totals.subtotal),
            tax=str(totals.tax),
            shipping=str(totals.shipping),
            grand_total=str(totals.grand_total),
        )


@dataclass(frozen=True)
class LineDTO:
    """Output: a single line as displayed to the user."""

    product_id: str
    product_name: str
    sku: str
    quantity: int
    unit_price: str
    line_total: str


@dataclass(frozen=True)
class OrderDTO:
    """Output: a complete order as displayed to the user."""

    id: int
    order_number: str
    user_id: str
    status: str
    payment_method: str
    payment_status: str
    items: list[LineDTO]
    totals: TotalsDTO
    notes: str
    created_at: str
    remote_payment_id: str | None = None

    @staticmethod
    def from_domain(order: Order) -> OrderDTO:
        return OrderDTO(
            id=order.id,  # type: ignore[arg-type]
            order_number=order.order_number,
            user_id=order.user_id,
            status=order.status.value,
            payment_method=order.payment_method.value,
            payment_status=order.payment_status.value,
            items=[
                LineDTO(
                    product_id=line.product_id,
                    product_name=line.product_name,
                    sku=line.sku,
                    quantity=line.quantity.value,
                    unit_price=str(line.unit_price),
                    line_total=str(line.line_total),
                )
                for line in order.lines
            ],
            totals=TotalsDTO.from_domain(order.totals),
            notes=order.notes,
            created_at=order.created_at.strftime("%Y-%m-%d %H:%M UTC"),
            remote_payment_id=order.remote_payment_id,
        )


@dataclass(frozen=True)
class CheckoutSummaryDTO:
    """Output: what the checkout page shows before the order is placed."""

    items: list[LineDTO]
    totals: TotalsDTO | None
    removed: list[RemovedItemDTO]
    payment_methods: list[str]
    default_payment_method: str
    wallet_balance: str | None = None

    @property
    def needs_review(self) -> bool:
        return bool(self.removed) or not self.items


@dataclass(frozen=True)
class PlaceOrderResult:
    """Output of a checkout attempt.

    Either ``order`` is set, or the cart needs review (``removed`` lists
    what was dropped; an empty cart has no removals).
    """

    order: OrderDTO | None = None
    removed: list[RemovedItemDTO] = field(default_factory=list)

    @property
    def placed(self) -> bool:
        return self.order is not None

    @staticmethod
    def review(validation: CartValidation) -> PlaceOrderResult:
        return PlaceOrderResult(
            removed=[RemovedItemDTO.from_domain(r) for r in validation.removed]
        )


@dataclass(frozen=True)
class PayPalOrderDTO:
    """Output: the remote PayPal order id and the local order backing it."""

    id: str
    order_id: int

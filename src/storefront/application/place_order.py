"""Application service: Place Order use case.

Orchestrates one checkout attempt across three units of work:

1. Validate the cart and commit the cleanup (removals, clamps), so a
   retry sees a consistent cart even if the order fails later.
2. Price the validated lines and let the settlement strategy pre-check
   (wallet balance) without opening a write transaction.
3. Write the order, decrement stock, clear the cart and settle in-
   transaction (wallet) in one atomic unit.

Remote settlement (PayPal) runs after step 3 commits.
"""

from __future__ import annotations

import dataclasses
import logging
from collections import Counter
from collections.abc import Callable
from decimal import ROUND_HALF_UP, Decimal

from storefront.application.dto import (
    CheckoutRequest,
    OrderDTO,
    PlaceOrderResult,
    SummaryItem,
)
from storefront.application.payment_settings import PaymentSettings
from storefront.domain.exceptions import (
    DomainException,
    MissingAddressError,
    ValidationError,
)
from storefront.domain.model.cart import CartLine, ValidatedLine
from storefront.domain.model.order import PaymentMethod
from storefront.domain.repository.unit_of_work import UnitOfWork
from storefront.domain.service.cart_validator import CartValidator, EligibilityRule
from storefront.domain.service.order_writer import OrderWriter, generate_order_number
from storefront.domain.service.pricing_engine import PricingEngine
from storefront.domain.service.settlement import Settlement

logger = logging.getLogger(__name__)

SUMMARY_OUT_OF_DATE = "Your order summary is out of date. Please review your cart and try again."


class PlaceOrderHandler:

    def __init__(
        self,
        uow_factory: Callable[[], UnitOfWork],
        pricing: PricingEngine,
        payment_settings: PaymentSettings,
        settlements: dict[PaymentMethod, Settlement],
        rules: list[EligibilityRule] | None = None,
        number_generator: Callable[[], str] = generate_order_number,
    ) -> None:
        self._uow_factory = uow_factory
        self._pricing = pricing
        self._payment_settings = payment_settings
        self._settlements = settlements
        self._rules = list(rules or [])
        self._number_generator = number_generator

    def handle(
        self,
        request: CheckoutRequest,
        summary: list[SummaryItem] | None = None,
    ) -> PlaceOrderResult:
        """Place an order.

        Raises a ValidationError subclass for form problems (before any
        transaction), or another DomainException when the order
        transaction was rolled back.  Returns a review result when the
        cart changed under the customer.
        """
        # Form validation: no transaction is opened for these
        if not request.shipping_address_id:
            raise MissingAddressError("Please select a shipping address.")
        if not request.billing_address_id:
            raise MissingAddressError("Please select a billing address.")
        method = self._payment_settings.resolve(request.payment_method)
        settlement = self._settlements[method]

        # 1. Validate against live stock and persist the cleanup
        requested = None
        if request.selected_items is not None:
            requested = [
                CartLine(request.user_id, item.product_id, item.quantity)
                for item in request.selected_items
            ]
        with self._uow_factory() as uow:
            validation = CartValidator(uow, self._rules).validate(request.user_id, requested)
            uow.commit()

        if validation.needs_review:
            logger.info(
                "Checkout for user %s sent back to cart review (%d removed)",
                request.user_id, len(validation.removed),
            )
            return PlaceOrderResult.review(validation)

        if summary is not None:
            self._check_summary(validation.lines, summary)

        # 2. Price and pre-check payment
        totals = self._pricing.quote(validation.lines)
        with self._uow_factory() as uow:
            settlement.precheck(uow, request.user_id, totals.rounded().grand_total)

        # 3. Atomic order write
        try:
            with self._uow_factory() as uow:
                order = OrderWriter(uow, self._number_generator).write(
                    user_id=request.user_id,
                    lines=validation.lines,
                    totals=totals,
                    settlement=settlement,
                    shipping_address_id=request.shipping_address_id,
                    billing_address_id=request.billing_address_id,
                    notes=request.notes,
                )
                uow.commit()
        except DomainException as exc:
            logger.warning("Order for user %s rolled back: %s", request.user_id, exc)
            raise
        except Exception:
            logger.exception("Unexpected failure writing order for user %s", request.user_id)
            raise

        outcome = settlement.after_commit(order)
        dto = dataclasses.replace(
            OrderDTO.from_domain(order),
            payment_status=outcome.payment_status.value,
            remote_payment_id=outcome.remote_payment_id,
        )
        return PlaceOrderResult(order=dto)

    @staticmethod
    def _check_summary(lines: list[ValidatedLine], summary: list[SummaryItem]) -> None:
        """Refuse to charge for anything other than what the customer sees."""
        expected: Counter = Counter()
        for line in lines:
            expected[(line.product.name, _cents(line.unit_price.amount))] += line.quantity
        shown: Counter = Counter()
        for item in summary:
            shown[(item.name, _cents(item.unit_price))] += item.quantity
        if expected != shown:
            logger.warning("Order summary mismatch: expected %s, got %s", dict(expected), dict(shown))
            raise ValidationError(SUMMARY_OUT_OF_DATE)


def _cents(amount: Decimal) -> Decimal:
    return amount.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)

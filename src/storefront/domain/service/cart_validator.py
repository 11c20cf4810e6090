"""Domain service: Cart Validator.

Reconciles requested cart lines against live catalog rows.  Lines for
products that can no longer be sold are removed (and reported); lines
asking for more than is in stock are clamped down.  Both kinds of
cleanup are written back to the stored cart through the caller's unit
of work, so the caller decides when they become durable.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

from storefront.domain.model.cart import (
    CartLine,
    CartValidation,
    RemovedItem,
    ValidatedLine,
)
from storefront.domain.model.product import REASON_UNAVAILABLE
from storefront.domain.repository.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


class EligibilityRule(ABC):
    """A checkout rule applied after stock and status checks."""

    @abstractmethod
    def violation(self, line: ValidatedLine) -> str | None:
        """Return the reason *line* may not be checked out, or None."""


class MaxQuantityPerOrder(EligibilityRule):

    def __init__(self, limit: int) -> None:
        if limit < 1:
            raise ValueError("limit must be at least 1")
        self.limit = limit

    def violation(self, line: ValidatedLine) -> str | None:
        if line.quantity > self.limit:
            return f"Maximum {self.limit} per order"
        return None


class CartValidator:

    def __init__(self, uow: UnitOfWork, rules: list[EligibilityRule] | None = None) -> None:
        self._uow = uow
        self._rules = list(rules or [])

    def validate(self, user_id: str, requested: list[CartLine] | None = None) -> CartValidation:
        """Validate *requested* lines, or the user's whole cart when None.

        Requested lines that are not in the user's stored cart are skipped.
        """
        carts = self._uow.carts
        if requested is None:
            requested = carts.lines_for_user(user_id)

        lines: list[ValidatedLine] = []
        removed: list[RemovedItem] = []
        clamped: list[str] = []

        for request in requested:
            stored = carts.get_line(user_id, request.product_id)
            if stored is None:
                logger.warning(
                    "Ignoring product %s: not in cart of user %s",
                    request.product_id, user_id,
                )
                continue

            product = self._uow.products.get_by_id(request.product_id)
            if product is None:
                reason = REASON_UNAVAILABLE
                name = request.product_id
            else:
                reason = product.unavailability_reason()
                name = product.name

            if reason is not None:
                carts.delete_line(user_id, request.product_id)
                removed.append(RemovedItem(request.product_id, name, reason))
                logger.info("Removed %s from cart of user %s: %s", name, user_id, reason)
                continue

            quantity = request.quantity
            if quantity > product.stock_quantity:
                quantity = product.stock_quantity
                stored.clamp_to(quantity)
                carts.save_line(stored)
                clamped.append(product.id)
                logger.info(
                    "Clamped %s in cart of user %s to %d",
                    product.name, user_id, quantity,
                )

            lines.append(ValidatedLine(product=product, quantity=quantity))

        # Second pass: domain eligibility rules
        eligible: list[ValidatedLine] = []
        for line in lines:
            reason = self._first_violation(line)
            if reason is None:
                eligible.append(line)
                continue
            carts.delete_line(user_id, line.product.id)
            removed.append(RemovedItem(line.product.id, line.product.name, reason))
            logger.info(
                "Removed %s from cart of user %s: %s",
                line.product.name, user_id, reason,
            )

        return CartValidation(lines=eligible, removed=removed, clamped=clamped)

    def _first_violation(self, line: ValidatedLine) -> str | None:
        for rule in self._rules:
            reason = rule.violation(line)
            if reason is not None:
                return reason
        return None

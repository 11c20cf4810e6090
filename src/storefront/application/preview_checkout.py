"""Application service: Preview Checkout use case.

Builds what the checkout page shows: validated lines, totals, and the
payment options.  Validation cleanup is committed, exactly as when the
order is placed.
"""

from __future__ import annotations

from collections.abc import Callable

from storefront.application.dto import (
    CheckoutSummaryDTO,
    LineDTO,
    RemovedItemDTO,
    SelectedItem,
    TotalsDTO,
)
from storefront.application.payment_settings import PaymentSettings
from storefront.domain.exceptions import WalletUnavailableError
from storefront.domain.model.cart import CartLine
from storefront.domain.model.order import PaymentMethod
from storefront.domain.repository.unit_of_work import UnitOfWork
from storefront.domain.service.cart_validator import CartValidator, EligibilityRule
from storefront.domain.service.order_writer import NO_SKU
from storefront.domain.service.pricing_engine import PricingEngine
from storefront.domain.service.wallet_ledger import WalletLedger


class PreviewCheckoutHandler:

    def __init__(
        self,
        uow_factory: Callable[[], UnitOfWork],
        pricing: PricingEngine,
        payment_settings: PaymentSettings,
        rules: list[EligibilityRule] | None = None,
    ) -> None:
        self._uow_factory = uow_factory
        self._pricing = pricing
        self._payment_settings = payment_settings
        self._rules = list(rules or [])

    def handle(
        self,
        user_id: str,
        selected_items: list[SelectedItem] | None = None,
    ) -> CheckoutSummaryDTO:
        requested = None
        if selected_items is not None:
            requested = [CartLine(user_id, i.product_id, i.quantity) for i in selected_items]

        with self._uow_factory() as uow:
            validation = CartValidator(uow, self._rules).validate(user_id, requested)
            uow.commit()
            balance = None
            if PaymentMethod.WALLET in self._payment_settings.enabled:
                try:
                    balance = str(WalletLedger(uow.wallets).balance_of(user_id))
                except WalletUnavailableError:
                    balance = None

        items = [
            LineDTO(
                product_id=line.product.id,
                product_name=line.product.name,
                sku=line.product.sku or NO_SKU,
                quantity=line.quantity,
                unit_price=str(line.unit_price),
                line_total=str(line.line_total),
            )
            for line in validation.lines
        ]
        totals = TotalsDTO.from_domain(self._pricing.quote(validation.lines)) if items else None

        return CheckoutSummaryDTO(
            items=items,
            totals=totals,
            removed=[RemovedItemDTO.from_domain(r) for r in validation.removed],
            payment_methods=[m.value for m in self._payment_settings.offered],
            default_payment_method=self._payment_settings.default_method.value,
            wallet_balance=balance,
        )

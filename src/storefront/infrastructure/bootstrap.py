"""Composition root — wires concrete implementations to domain interfaces.

This is the only place in the codebase that knows about *all* layers.
Every other module depends only on abstractions.  The CLI and the web
app both build their handlers from a ``Services`` instance; tests pass
their own unit-of-work factory and gateway.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import timedelta

from storefront.application.cancel_order import CancelOrderHandler
from storefront.application.expire_pending_orders import ExpirePendingOrdersHandler
from storefront.application.manage_cart import AddToCartHandler, ShowCartHandler
from storefront.application.payment_settings import PaymentSettings
from storefront.application.paypal_checkout import (
    CapturePayPalOrderHandler,
    CreatePayPalOrderHandler,
)
from storefront.application.place_order import PlaceOrderHandler
from storefront.application.preview_checkout import PreviewCheckoutHandler
from storefront.application.restock_product import RestockProductHandler
from storefront.application.show_catalog import ShowCatalogHandler
from storefront.application.show_order import ShowOrderHandler
from storefront.application.wallet import ShowWalletHandler, TopUpWalletHandler
from storefront.domain.repository.unit_of_work import UnitOfWork
from storefront.domain.service.cart_validator import EligibilityRule, MaxQuantityPerOrder
from storefront.domain.service.order_writer import generate_order_number
from storefront.domain.service.payment_gateway import PaymentGateway
from storefront.domain.service.pricing_engine import PricingEngine, PricingPolicy
from storefront.domain.service.settlement import build_settlements
from storefront.infrastructure.config import Settings
from storefront.infrastructure.paypal.paypal_gateway import PayPalGateway, base_url_for
from storefront.infrastructure.persistence.json_store import JsonDataStore
from storefront.infrastructure.persistence.json_unit_of_work import JsonUnitOfWork


def json_uow_factory(settings: Settings) -> Callable[[], UnitOfWork]:
    store = JsonDataStore(settings.data_dir)
    return lambda: JsonUnitOfWork(store)


def paypal_gateway(settings: Settings) -> PaymentGateway:
    return PayPalGateway(
        client_id=settings.paypal_client_id,
        client_secret=settings.paypal_client_secret,
        base_url=base_url_for(settings.paypal_env),
    )


class Services:

    def __init__(
        self,
        settings: Settings | None = None,
        uow_factory: Callable[[], UnitOfWork] | None = None,
        gateway: PaymentGateway | None = None,
        number_generator: Callable[[], str] = generate_order_number,
    ) -> None:
        self.settings = settings or Settings.from_env()
        self.uow_factory = uow_factory or json_uow_factory(self.settings)
        self._gateway = gateway
        self._number_generator = number_generator

    # --- Shared collaborators -------------------------------------------------

    @property
    def gateway(self) -> PaymentGateway:
        # Built lazily so commands that never pay need no HTTP client
        if self._gateway is None:
            self._gateway = paypal_gateway(self.settings)
        return self._gateway

    def pricing(self) -> PricingEngine:
        s = self.settings
        return PricingEngine(
            PricingPolicy(
                tax_rate=s.tax_rate,
                free_shipping_threshold=s.free_shipping_threshold,
                flat_shipping=s.flat_shipping,
            )
        )

    def payment_settings(self) -> PaymentSettings:
        return PaymentSettings(enabled=frozenset(self.settings.payment_methods))

    def eligibility_rules(self) -> list[EligibilityRule]:
        if self.settings.max_per_order is None:
            return []
        return [MaxQuantityPerOrder(self.settings.max_per_order)]

    # --- Handlers -------------------------------------------------------------

    def preview_checkout(self) -> PreviewCheckoutHandler:
        return PreviewCheckoutHandler(
            self.uow_factory, self.pricing(), self.payment_settings(), self.eligibility_rules()
        )

    def place_order(self) -> PlaceOrderHandler:
        return PlaceOrderHandler(
            uow_factory=self.uow_factory,
            pricing=self.pricing(),
            payment_settings=self.payment_settings(),
            settlements=build_settlements(_LazyGateway(self), self.uow_factory),
            rules=self.eligibility_rules(),
            number_generator=self._number_generator,
        )

    def create_paypal_order(self) -> CreatePayPalOrderHandler:
        return CreatePayPalOrderHandler(self.place_order())

    def capture_paypal_order(self) -> CapturePayPalOrderHandler:
        return CapturePayPalOrderHandler(self.uow_factory, self.gateway)

    def show_order(self) -> ShowOrderHandler:
        return ShowOrderHandler(self.uow_factory)

    def cancel_order(self) -> CancelOrderHandler:
        return CancelOrderHandler(self.uow_factory)

    def expire_pending_orders(self) -> ExpirePendingOrdersHandler:
        return ExpirePendingOrdersHandler(
            self.uow_factory, timedelta(minutes=self.settings.pending_ttl_minutes)
        )

    def add_to_cart(self) -> AddToCartHandler:
        return AddToCartHandler(self.uow_factory)

    def show_cart(self) -> ShowCartHandler:
        return ShowCartHandler(self.uow_factory)

    def show_catalog(self) -> ShowCatalogHandler:
        return ShowCatalogHandler(self.uow_factory)

    def restock_product(self) -> RestockProductHandler:
        return RestockProductHandler(self.uow_factory)

    def show_wallet(self) -> ShowWalletHandler:
        return ShowWalletHandler(self.uow_factory)

    def top_up_wallet(self) -> TopUpWalletHandler:
        return TopUpWalletHandler(self.uow_factory)


class _LazyGateway(PaymentGateway):
    """Defers building the real gateway until a PayPal call is made."""

    def __init__(self, services: Services) -> None:
        self._services = services

    def create_remote_order(self, reference, totals, items):
        return self._services.gateway.create_remote_order(reference, totals, items)

    def capture_remote_order(self, remote_order_id):
        return self._services.gateway.capture_remote_order(remote_order_id)

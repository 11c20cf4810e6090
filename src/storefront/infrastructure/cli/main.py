import logging

import click

from storefront.infrastructure.cli.cart_commands import cart_add, cart_show
from storefront.infrastructure.cli.checkout_commands import checkout_place, checkout_preview
from storefront.infrastructure.cli.order_commands import (
    order_cancel,
    order_expire_pending,
    order_show,
)
from storefront.infrastructure.cli.product_commands import product_list, product_restock
from storefront.infrastructure.cli.serve_command import serve
from storefront.infrastructure.cli.wallet_commands import wallet_show, wallet_top_up


@click.group()
@click.option("-v", "--verbose", is_flag=True, default=False, help="Log debug output.")
def cli(verbose: bool) -> None:
    """Storefront — cart checkout and order placement"""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@cli.group()
def cart() -> None:
    """Manage a user's cart."""


@cli.group()
def checkout() -> None:
    """Preview and place orders."""


@cli.group()
def order() -> None:
    """Manage orders."""


@cli.group()
def product() -> None:
    """Manage products."""


@cli.group()
def wallet() -> None:
    """Manage wallets."""


# Register subcommands
cart.add_command(cart_add)
cart.add_command(cart_show)
checkout.add_command(checkout_place)
checkout.add_command(checkout_preview)
order.add_command(order_cancel)
order.add_command(order_expire_pending)
order.add_command(order_show)
product.add_command(product_list)
product.add_command(product_restock)
wallet.add_command(wallet_show)
wallet.add_command(wallet_top_up)
cli.add_command(serve)

"""CLI commands for the cart."""

from __future__ import annotations

import click

from storefront.domain.exceptions import DomainException
from storefront.infrastructure.bootstrap import Services


@click.command("add")
@click.option("--user", "user_id", required=True, help="User ID.")
@click.option("--product", "product_id", required=True, help="Product ID.")
@click.option("--quantity", default=1, show_default=True, type=int, help="Units to add.")
def cart_add(user_id: str, product_id: str, quantity: int) -> None:
    """Add a product to a user's cart."""
    handler = Services().add_to_cart()

    try:
        new_quantity = handler.handle(user_id, product_id, quantity)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Cart of {user_id}: {product_id} x{new_quantity}")


@click.command("show")
@click.option("--user", "user_id", required=True, help="User ID.")
def cart_show(user_id: str) -> None:
    """Show a user's cart."""
    lines = Services().show_cart().handle(user_id)

    if not lines:
        click.echo("Cart is empty.")
        return

    click.echo(f"  {'ID':<8} {'Product':<20} {'Qty':>5} {'Price':>10}")
    click.echo(f"  {'-'*46}")
    for line in lines:
        click.echo(
            f"  {line.product_id:<8} {line.product_name:<20} {line.quantity:>5} {line.unit_price:>10}"
        )

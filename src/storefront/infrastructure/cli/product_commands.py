"""CLI commands for the Product aggregate."""

from __future__ import annotations

import click

from storefront.domain.exceptions import DomainException
from storefront.infrastructure.bootstrap import Services


@click.command("list")
def product_list() -> None:
    """List all products in the catalog."""
    products = Services().show_catalog().handle()

    if not products:
        click.echo("No products found.")
        return

    click.echo(f"{'ID':<8} {'Name':<20} {'Price':>10} {'Stock':>7} {'Sold':>6}")
    click.echo("-" * 55)
    for p in products:
        flag = "" if p.sellable else "  (not for sale)"
        click.echo(
            f"{p.product_id:<8} {p.name:<20} {p.price:>10} {p.stock:>7} {p.sales_count:>6}{flag}"
        )


@click.command("restock")
@click.option("--id", "product_id", required=True, help="Product ID.")
@click.option("--quantity", required=True, type=int, help="Units received.")
def product_restock(product_id: str, quantity: int) -> None:
    """Add received units to a product's stock."""
    handler = Services().restock_product()

    try:
        stock = handler.handle(product_id, quantity)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Product {product_id} now has {stock} in stock")

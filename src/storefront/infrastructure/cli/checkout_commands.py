"""CLI commands for checkout."""

from __future__ import annotations

import click

from storefront.application.dto import CheckoutRequest, SelectedItem
from storefront.domain.exceptions import DomainException
from storefront.infrastructure.bootstrap import Services
from storefront.infrastructure.cli.order_commands import display_order


def _parse_items(raw: str | None) -> list[SelectedItem] | None:
    """Parse 'p1:3,p2:5' into SelectedItem list; None means the whole cart."""
    if not raw:
        return None
    items: list[SelectedItem] = []
    for pair in raw.split(","):
        pair = pair.strip()
        if ":" not in pair:
            raise click.BadParameter(
                f"Invalid item format '{pair}'. Expected 'ProductId:Quantity'."
            )
        product_id, qty_str = pair.rsplit(":", 1)
        try:
            qty = int(qty_str)
        except ValueError:
            raise click.BadParameter(
                f"Invalid quantity '{qty_str}' for product '{product_id}'."
            )
        if qty < 1:
            raise click.BadParameter(f"Quantity for '{product_id}' must be at least 1.")
        items.append(SelectedItem(product_id=product_id.strip(), quantity=qty))
    return items


def _echo_removed(removed) -> None:
    click.echo("Some items in your cart are no longer available and have been removed:")
    for item in removed:
        click.echo(f"  - {item.product_name}: {item.reason}")


@click.command("preview")
@click.option("--user", "user_id", required=True, help="User ID.")
@click.option("--items", default=None, help="Selected items as 'ProductId:Qty,...' (default: whole cart).")
def checkout_preview(user_id: str, items: str | None) -> None:
    """Show what checkout would charge."""
    handler = Services().preview_checkout()

    try:
        summary = handler.handle(user_id, _parse_items(items))
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if summary.removed:
        _echo_removed(summary.removed)
    if not summary.items:
        click.echo("Cart is empty.")
        return

    click.echo(f"  {'Product':<20} {'Qty':>5} {'Price':>10} {'Total':>10}")
    click.echo(f"  {'-'*47}")
    for line in summary.items:
        click.echo(
            f"  {line.product_name:<20} {line.quantity:>5} {line.unit_price:>10} {line.line_total:>10}"
        )
    click.echo(f"  {'-'*47}")
    totals = summary.totals
    click.echo(f"  {'Subtotal':<27} {totals.subtotal:>20}")
    click.echo(f"  {'Tax':<27} {totals.tax:>20}")
    click.echo(f"  {'Shipping':<27} {totals.shipping:>20}")
    click.echo(f"  {'Total':<27} {totals.grand_total:>20}")
    click.echo()
    click.echo(f"Payment methods: {', '.join(summary.payment_methods)} (default {summary.default_payment_method})")
    if summary.wallet_balance is not None:
        click.echo(f"Wallet balance: {summary.wallet_balance}")


@click.command("place")
@click.option("--user", "user_id", required=True, help="User ID.")
@click.option("--payment", "payment_method", required=True, help="wallet, credit_card, paypal or cod.")
@click.option("--shipping-address", required=True, type=int, help="Shipping address ID.")
@click.option("--billing-address", default=None, type=int, help="Billing address ID (default: shipping).")
@click.option("--items", default=None, help="Selected items as 'ProductId:Qty,...' (default: whole cart).")
@click.option("--notes", default="", help="Order notes.")
def checkout_place(
    user_id: str,
    payment_method: str,
    shipping_address: int,
    billing_address: int | None,
    items: str | None,
    notes: str,
) -> None:
    """Place an order."""
    request = CheckoutRequest(
        user_id=user_id,
        shipping_address_id=shipping_address,
        billing_address_id=billing_address or shipping_address,
        payment_method=payment_method,
        notes=notes,
        selected_items=_parse_items(items),
    )
    handler = Services().place_order()

    try:
        result = handler.handle(request)
    except DomainException as exc:
        raise click.ClickException(f"Failed to process order: {exc}")

    if not result.placed:
        if result.removed:
            _echo_removed(result.removed)
        raise click.ClickException("Please review your cart before checking out.")

    display_order(result.order)
    if result.order.remote_payment_id:
        click.echo(f"PayPal order: {result.order.remote_payment_id} (awaiting buyer approval)")

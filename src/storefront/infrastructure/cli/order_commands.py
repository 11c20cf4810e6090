"""CLI commands for the Order aggregate."""

from __future__ import annotations

import click

from storefront.application.dto import OrderDTO
from storefront.domain.exceptions import DomainException
from storefront.infrastructure.bootstrap import Services


def display_order(dto: OrderDTO) -> None:
    """Shared formatting for displaying an order."""
    click.echo(f"Order #{dto.id} {dto.order_number}  (status={dto.status}, payment={dto.payment_status})")
    click.echo(f"User:     {dto.user_id}")
    click.echo(f"Payment:  {dto.payment_method}")
    click.echo(f"Created:  {dto.created_at}")
    click.echo()
    click.echo(f"  {'Product':<20} {'Qty':>5} {'Price':>10} {'Total':>10}")
    click.echo(f"  {'-'*47}")
    for item in dto.items:
        click.echo(
            f"  {item.product_name:<20} {item.quantity:>5} {item.unit_price:>10} {item.line_total:>10}"
        )
    click.echo(f"  {'-'*47}")
    click.echo(f"  {'Subtotal':<27} {dto.totals.subtotal:>20}")
    click.echo(f"  {'Tax':<27} {dto.totals.tax:>20}")
    click.echo(f"  {'Shipping':<27} {dto.totals.shipping:>20}")
    click.echo(f"  {'Order Total':<27} {dto.totals.grand_total:>20}")


@click.command("show")
@click.option("--id", "order_id", required=True, type=int, help="Order ID to display.")
def order_show(order_id: int) -> None:
    """Show details of an existing order."""
    handler = Services().show_order()

    try:
        dto = handler.handle(order_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    display_order(dto)


@click.command("cancel")
@click.option("--id", "order_id", required=True, type=int, help="Order ID to cancel.")
def order_cancel(order_id: int) -> None:
    """Cancel an unpaid order (puts its stock back)."""
    handler = Services().cancel_order()

    try:
        dto = handler.handle(order_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order #{order_id} ({dto.order_number}) cancelled — stock returned.")


@click.command("expire-pending")
def order_expire_pending() -> None:
    """Cancel PayPal orders left pending longer than the configured TTL."""
    handler = Services().expire_pending_orders()

    try:
        expired = handler.handle()
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not expired:
        click.echo("No stale pending orders.")
        return
    for number in expired:
        click.echo(f"Expired {number}")

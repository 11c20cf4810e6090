"""CLI commands for wallets."""

from __future__ import annotations

import click

from storefront.domain.exceptions import DomainException
from storefront.infrastructure.bootstrap import Services


@click.command("show")
@click.option("--user", "user_id", required=True, help="User ID.")
def wallet_show(user_id: str) -> None:
    """Show a wallet balance and its transactions."""
    handler = Services().show_wallet()

    try:
        dto = handler.handle(user_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Wallet of {dto.user_id}: {dto.balance}")
    for entry in dto.entries:
        ref = f"order #{entry.reference_order_id}" if entry.reference_order_id else ""
        click.echo(f"  {entry.created_at}  {entry.type:<8} {entry.amount:>10}  {ref}")


@click.command("top-up")
@click.option("--user", "user_id", required=True, help="User ID.")
@click.option("--amount", required=True, help="Amount to add (e.g. 100.00).")
def wallet_top_up(user_id: str, amount: str) -> None:
    """Add funds to a wallet."""
    handler = Services().top_up_wallet()

    try:
        balance = handler.handle(user_id, amount)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Wallet of {user_id} topped up — balance {balance}")

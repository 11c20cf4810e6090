"""CLI command that runs the HTTP checkout API."""

from __future__ import annotations

import click


@click.command("serve")
@click.option("--host", default="127.0.0.1", show_default=True)
@click.option("--port", default=8000, show_default=True, type=int)
def serve(host: str, port: int) -> None:
    """Start the checkout HTTP API."""
    import uvicorn

    from storefront.infrastructure.web.app import create_app

    click.echo(f"Starting storefront API on http://{host}:{port}")
    uvicorn.run(create_app(), host=host, port=port)

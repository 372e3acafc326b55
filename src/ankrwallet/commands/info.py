from __future__ import annotations

import click

from ..errors import WalletError
from . import fail, get_wallet


@click.command()
@click.pass_context
def info(ctx: click.Context) -> None:
    """Show configuration and stored key count."""
    wallet = get_wallet(ctx)
    config = wallet.config

    try:
        key_count = len(wallet.list_keys())
    except WalletError as exc:
        fail(exc)

    click.echo(click.style("  Home:      ", dim=True) + str(config.home))
    click.echo(click.style("  Keystores: ", dim=True) + str(key_count))
    click.echo(click.style("  Chain ID:  ", dim=True) + config.chain_id)
    click.echo(click.style("  Port:      ", dim=True) + config.endpoints.port)
    click.echo(click.style("  Endpoints: ", dim=True))
    for endpoint in config.endpoints.candidates:
        click.echo(f"    {endpoint}")
    cost = config.scrypt
    click.echo(click.style("  scrypt:    ", dim=True) + f"N={cost.n} r={cost.r} p={cost.p}")

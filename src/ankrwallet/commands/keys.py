"""
Keystore commands: generate, list, import and delete keys.
"""

from __future__ import annotations

from pathlib import Path

import click

from ..errors import WalletError
from ..prompt import confirm_action, password_input
from ..utils import b64encode
from . import confirm_reader, fail, get_wallet, password_reader


@click.command()
@click.argument("name")
@click.pass_context
def genkey(ctx: click.Context, name: str) -> None:
    """Generate a key pair and store it as keystore NAME."""
    wallet = get_wallet(ctx)

    if not confirm_action(
        "Please record and back up the keystore once it is generated, "
        "the private key is not stored anywhere else. Continue?",
        confirm_reader(ctx),
    ):
        click.echo("Aborted.")
        return

    try:
        with password_input(
            "Keystore encryption password", reader=password_reader(ctx), confirm=True
        ) as password:
            click.echo("Generating keys...")
            pair, path = wallet.generate_key(name, password)
    except WalletError as exc:
        fail(exc)

    click.echo(f"  Private key: {b64encode(pair.private_key)}")
    click.echo(f"  Address:     {pair.address}")
    click.echo()
    click.secho(f"Created keystore: {path}", fg="green")


@click.command()
@click.pass_context
def listkey(ctx: click.Context) -> None:
    """List stored keystores."""
    wallet = get_wallet(ctx)
    try:
        keys = wallet.list_keys()
    except WalletError as exc:
        fail(exc)

    if not keys:
        click.echo("No keystores found.")
        return
    for key in keys:
        click.echo(f"{key.name}\t{key.address}\t{key.public_key or ''}")


@click.command()
@click.argument("name")
@click.option(
    "--keyfile",
    required=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Keystore file to import",
)
@click.pass_context
def importkey(ctx: click.Context, name: str, keyfile: Path) -> None:
    """Import a keystore file under NAME."""
    wallet = get_wallet(ctx)
    try:
        with password_input("Keystore password", reader=password_reader(ctx)) as password:
            path = wallet.import_key(name, keyfile.read_bytes(), password)
    except WalletError as exc:
        fail(exc)

    click.secho(f"Keystore imported: {path}", fg="green")


@click.command()
@click.argument("name")
@click.pass_context
def deletekey(ctx: click.Context, name: str) -> None:
    """Delete keystore NAME."""
    wallet = get_wallet(ctx)
    if not confirm_action(f"About to delete keystore '{name}'. Continue?", confirm_reader(ctx)):
        click.echo("Aborted.")
        return

    try:
        wallet.delete_key(name)
    except WalletError as exc:
        fail(exc)

    click.echo(f"Keystore '{name}' deleted.")

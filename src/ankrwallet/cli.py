"""
ankrwallet CLI

Command-line interface for the Ankr chain wallet.

Keys live in encrypted keystore files under $ANKR_HOME (default ~/.ankr).
Private keys are only decrypted for the span of a signing operation.

Commands:
  genkey     - Generate a key pair and store it encrypted
  listkey    - List stored keystores
  importkey  - Import a keystore file under a new name
  deletekey  - Delete a stored keystore
  sendcoins  - Send tokens to an address
  getbalance - Query the balance of an address
  info       - Show configuration
"""

from __future__ import annotations

import sys

import click

from .logging_config import setup_logging


# ============ Constants ============

VERSION = "1.0.0"


# ============ Main CLI Group ============


@click.group(invoke_without_command=True)
@click.version_option(version=VERSION, prog_name="ankrwallet")
@click.option(
    "--log-level",
    default="WARNING",
    envvar="ANKR_LOG_LEVEL",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="Log verbosity (stderr)",
)
@click.option(
    "--log-format",
    default="human",
    type=click.Choice(["human", "json"]),
    help="Log line format",
)
@click.pass_context
def cli(ctx: click.Context, log_level: str, log_format: str) -> None:
    """Ankr chain wallet: encrypted keystores and transfers."""
    setup_logging(log_level, log_format)
    ctx.ensure_object(dict)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


# ============ Commands ============

from .commands.keys import deletekey, genkey, importkey, listkey
from .commands.coins import getbalance, sendcoins
from .commands.info import info

cli.add_command(genkey)
cli.add_command(listkey)
cli.add_command(importkey)
cli.add_command(deletekey)
cli.add_command(sendcoins)
cli.add_command(getbalance)
cli.add_command(info)


# ============ Entry Points ============


def main() -> None:
    """ankrwallet CLI entry point."""
    if sys.platform == "win32":
        try:
            sys.stdout.reconfigure(encoding="utf-8")  # type: ignore[union-attr]
            sys.stderr.reconfigure(encoding="utf-8")  # type: ignore[union-attr]
        except (AttributeError, OSError):
            pass
    cli()


if __name__ == "__main__":
    main()

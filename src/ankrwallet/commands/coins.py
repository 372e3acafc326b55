"""
Token commands: send a transfer, query a balance.
"""

from __future__ import annotations

import click

from ..chain.tx import (
    ANKR,
    DEFAULT_GAS_PRICE,
    DEFAULT_TX_VERSION,
    Amount,
    Currency,
    TransferMsg,
    TxHeader,
)
from ..errors import WalletError
from ..prompt import confirm_action, password_input
from . import confirm_reader, fail, get_wallet, password_reader


@click.command()
@click.argument("symbol")
@click.option("--target", required=True, help="Recipient wallet address")
@click.option("--keystore", "keystore_name", required=True, help="Name of the sending keystore")
@click.option("--amount", required=True, type=click.IntRange(min=1), help="Amount in the token's smallest unit")
@click.option("--memo", default="", help="Transaction memo")
@click.option(
    "--gas-price",
    default=DEFAULT_GAS_PRICE,
    type=click.IntRange(min=0),
    show_default=True,
    help="Gas price of the transaction",
)
@click.option("--tx-version", default=DEFAULT_TX_VERSION, show_default=True, help="Chain version")
@click.pass_context
def sendcoins(
    ctx: click.Context,
    symbol: str,
    target: str,
    keystore_name: str,
    amount: int,
    memo: str,
    gas_price: int,
    tx_version: str,
) -> None:
    """Send SYMBOL tokens to another address."""
    wallet = get_wallet(ctx)

    try:
        sender = wallet.store.find_by_name(keystore_name).address
    except WalletError as exc:
        fail(exc)

    header = TxHeader(
        chain_id=wallet.config.chain_id,
        gas_price=Amount(ANKR, gas_price),
        version=tx_version,
        memo=memo,
    )
    message = TransferMsg(
        from_addr=sender,
        to_addr=target,
        amounts=(Amount(Currency(symbol.upper()), amount),),
    )

    try:
        with password_input("Keystore password", reader=password_reader(ctx)) as password:
            if not confirm_action(
                f"About to send {amount} {symbol.upper()} from '{sender}' to '{target}'. Continue?",
                confirm_reader(ctx),
            ):
                click.echo("Aborted.")
                return
            result = wallet.send_transfer(header, message, keystore_name, password)
    except WalletError as exc:
        fail(exc)

    if result.selection.degraded:
        click.secho(
            f"WARNING: no endpoint answered its health check, used {result.selection.endpoint}",
            fg="yellow",
            err=True,
        )
    click.secho("Transaction commit success.", fg="green")
    click.echo(f"  tx hash:   {result.tx_hash}")
    click.echo(f"  tx height: {result.block_height}")


@click.command()
@click.argument("address")
@click.option("--symbol", default="ANKR", show_default=True, help="Token symbol")
@click.pass_context
def getbalance(ctx: click.Context, address: str, symbol: str) -> None:
    """Query the balance of ADDRESS."""
    wallet = get_wallet(ctx)
    try:
        balance = wallet.get_balance(address, symbol.upper())
    except WalletError as exc:
        fail(exc)

    click.echo(f"Wallet balance: {balance} {symbol.upper()}")

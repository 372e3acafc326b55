"""
Commands - click command implementations.

- keys:  genkey, listkey, importkey, deletekey
- coins: sendcoins, getbalance
- info:  configuration overview

Commands read their collaborators from ``ctx.obj`` when present, so tests
can inject a wallet, a password reader and a confirmation reader:

    ctx.obj = {"wallet": Wallet(...), "password_reader": fn, "confirm": fn}
"""

from __future__ import annotations

import sys
from typing import NoReturn, Optional

import click

from ..config import WalletConfig
from ..errors import WalletError
from ..prompt import ConfirmReader, SecretReader
from ..wallet import Wallet


def get_wallet(ctx: click.Context) -> Wallet:
    obj = ctx.ensure_object(dict)
    if "wallet" not in obj:
        try:
            obj["wallet"] = Wallet(WalletConfig.from_env())
        except WalletError as exc:
            fail(exc)
    return obj["wallet"]


def password_reader(ctx: click.Context) -> Optional[SecretReader]:
    return ctx.ensure_object(dict).get("password_reader")


def confirm_reader(ctx: click.Context) -> Optional[ConfirmReader]:
    return ctx.ensure_object(dict).get("confirm")


def fail(exc: WalletError) -> NoReturn:
    click.secho(f"ERROR: {exc}", fg="red", err=True)
    sys.exit(exc.exit_code)

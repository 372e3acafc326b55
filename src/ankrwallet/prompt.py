"""
Interactive input for secrets and confirmations.

``password_input`` is a scoped acquisition: the password is read with echo
disabled, handed out as a ``bytearray`` and zeroed when the block exits,
on error paths too.  The reader is injectable so tests never touch a
terminal.  The default reader goes through ``click.prompt(hide_input=True)``,
which restores the terminal mode itself.

The reader returns ``str``; that intermediate object is immutable and is
left to the garbage collector, so zeroing is best-effort only.
"""

from __future__ import annotations

import hmac
from contextlib import contextmanager
from typing import Callable, Iterator, Optional

import click

from .errors import WalletError
from .utils import wipe

SecretReader = Callable[[str], str]
ConfirmReader = Callable[[str], bool]


class PasswordMismatchError(WalletError):
    exit_code = 1


def terminal_password_reader(prompt: str) -> str:
    return click.prompt(prompt, hide_input=True, prompt_suffix=": ")


def terminal_confirm(message: str) -> bool:
    return click.confirm(message, default=False)


@contextmanager
def password_input(
    prompt: str = "Keystore password",
    reader: Optional[SecretReader] = None,
    confirm: bool = False,
) -> Iterator[bytearray]:
    """
    Read a password and wipe it on exit.

    Args:
        prompt: Prompt text
        reader: Callable returning the entered text (default: hidden terminal prompt)
        confirm: Ask a second time and require both entries to match

    Raises:
        PasswordMismatchError: If ``confirm`` is set and the entries differ
    """
    reader = reader or terminal_password_reader
    buffer = bytearray(reader(prompt).encode("utf-8"))
    try:
        if confirm:
            again = bytearray(reader("Repeat password").encode("utf-8"))
            try:
                if not hmac.compare_digest(buffer, again):
                    raise PasswordMismatchError("Password and confirm password do not match.")
            finally:
                wipe(again)
        yield buffer
    finally:
        wipe(buffer)


def confirm_action(message: str, reader: Optional[ConfirmReader] = None) -> bool:
    return (reader or terminal_confirm)(message)

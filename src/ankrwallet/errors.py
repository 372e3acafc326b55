"""
Error taxonomy for the wallet core.

Every failure the keystore and transfer code can produce is a subclass of
``WalletError``.  The CLI maps ``exit_code`` straight to the process exit
status, so each family keeps a distinct code.
"""

from __future__ import annotations


class WalletError(RuntimeError):
    exit_code: int = 1


class ConfigError(WalletError):
    exit_code = 2


class DuplicateNameError(WalletError):
    exit_code = 3


class NotFoundError(WalletError):
    exit_code = 4


class FormatError(WalletError):
    exit_code = 5


class KDFError(WalletError):
    exit_code = 6


class IntegrityError(WalletError):
    exit_code = 7


class CryptoRandomnessError(WalletError):
    exit_code = 8


class EndpointUnavailableError(WalletError):
    """A single endpoint failed its liveness probe.

    Soft failure: the selector records it and moves on, it is never raised
    out of endpoint selection on its own.
    """

    exit_code = 9

    def __init__(self, endpoint: str, reason: str) -> None:
        super().__init__(f"Endpoint {endpoint} unavailable: {reason}")
        self.endpoint = endpoint
        self.reason = reason


class RpcError(WalletError):
    """Transport or protocol failure while talking to a node."""

    exit_code = 11


class SenderMismatchError(WalletError):
    """The signing key does not own the transfer's sender address."""

    exit_code = 12


class SubmissionError(WalletError):
    exit_code = 10

    def __init__(self, reason: str) -> None:
        super().__init__(f"Transaction submission failed: {reason}")
        self.reason = reason


__all__ = [
    "ConfigError",
    "CryptoRandomnessError",
    "DuplicateNameError",
    "EndpointUnavailableError",
    "FormatError",
    "IntegrityError",
    "KDFError",
    "NotFoundError",
    "RpcError",
    "SenderMismatchError",
    "SubmissionError",
    "WalletError",
]

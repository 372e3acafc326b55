"""
Transaction Builder - Build, sign, and submit transfer transactions.

The signed payload is the RFC 8785 canonical JSON of ``{"header", "message"}``.
Field names, nesting and the decimal-string encoding of integers must match
what the node verifies; any change here breaks signature verification.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from typing import Any, Optional, Union

import httpx
import rfc8785

from ..config import EndpointConfig
from ..errors import RpcError, SenderMismatchError, SubmissionError
from ..sigil.keys import key_pair_from_private_key, sign
from ..utils import b64encode
from .endpoints import EndpointSelection
from .rpc import broadcast_tx_commit

logger = logging.getLogger(__name__)

DEFAULT_GAS_LIMIT = 20000
DEFAULT_GAS_PRICE = 10000000000000000
DEFAULT_TX_VERSION = "1.0"


@dataclass(frozen=True)
class Currency:
    symbol: str
    decimals: int = 18

    def to_dict(self) -> dict[str, Any]:
        return {"symbol": self.symbol, "decimals": str(self.decimals)}


ANKR = Currency("ANKR", 18)


@dataclass(frozen=True)
class Amount:
    currency: Currency
    value: int

    def __post_init__(self) -> None:
        if self.value < 0:
            raise ValueError(f"Amount must not be negative, got {self.value}")

    def to_dict(self) -> dict[str, Any]:
        return {"currency": self.currency.to_dict(), "value": str(self.value)}


@dataclass(frozen=True)
class TxHeader:
    chain_id: str
    gas_limit: int = DEFAULT_GAS_LIMIT
    gas_price: Amount = field(default_factory=lambda: Amount(ANKR, DEFAULT_GAS_PRICE))
    version: str = DEFAULT_TX_VERSION
    memo: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "chain_id": self.chain_id,
            "gas_limit": str(self.gas_limit),
            "gas_price": self.gas_price.to_dict(),
            "version": self.version,
            "memo": self.memo,
        }


@dataclass(frozen=True)
class TransferMsg:
    from_addr: str
    to_addr: str
    amounts: tuple[Amount, ...]

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": "transfer",
            "from_addr": self.from_addr,
            "to_addr": self.to_addr,
            "amounts": [amount.to_dict() for amount in self.amounts],
        }


def canonical_sign_bytes(header: TxHeader, message: TransferMsg) -> bytes:
    return rfc8785.dumps({"header": header.to_dict(), "message": message.to_dict()})


@dataclass(frozen=True)
class TransactionEnvelope:
    header: TxHeader
    message: TransferMsg
    public_key: bytes
    signature: bytes

    def sign_bytes(self) -> bytes:
        return canonical_sign_bytes(self.header, self.message)

    def encode(self) -> bytes:
        return rfc8785.dumps(
            {
                "header": self.header.to_dict(),
                "message": self.message.to_dict(),
                "pub_key": b64encode(self.public_key),
                "signature": b64encode(self.signature),
            }
        )


@dataclass(frozen=True)
class Receipt:
    tx_hash: str
    block_height: int


class TransactionBuilder:
    def __init__(
        self,
        config: EndpointConfig,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.config = config
        self.transport = transport

    def build(
        self,
        header: TxHeader,
        message: TransferMsg,
        private_key: Union[bytes, bytearray],
    ) -> TransactionEnvelope:
        """
        Sign a transfer.

        Args:
            header: Transaction header
            message: Transfer message; ``from_addr`` must belong to the key
            private_key: 32-byte seed or 64-byte Ed25519 private key

        Returns:
            Signed envelope

        Raises:
            SenderMismatchError: If the key does not own ``message.from_addr``
        """
        pair = key_pair_from_private_key(private_key)
        if pair.address != message.from_addr.upper():
            raise SenderMismatchError(
                f"Signing key address {pair.address} does not match sender {message.from_addr}"
            )
        signature = sign(private_key, canonical_sign_bytes(header, message))
        return TransactionEnvelope(
            header=header,
            message=message,
            public_key=pair.public_key,
            signature=signature,
        )

    def submit(
        self,
        envelope: TransactionEnvelope,
        endpoint: Union[str, EndpointSelection],
    ) -> Receipt:
        """
        Broadcast the envelope once and wait for the commit result.

        Raises:
            SubmissionError: On transport failure or any rejection by the node
        """
        if isinstance(endpoint, EndpointSelection):
            url = endpoint.url
        else:
            url = self.config.url_for(endpoint)

        try:
            result = broadcast_tx_commit(
                envelope.encode(),
                url,
                timeout=self.config.rpc_timeout,
                transport=self.transport,
            )
        except RpcError as exc:
            raise SubmissionError(str(exc)) from exc

        for phase in ("check_tx", "deliver_tx"):
            outcome = result.get(phase) or {}
            if not isinstance(outcome, dict):
                raise SubmissionError(f"Malformed {phase} result: {outcome!r}")
            try:
                code = int(outcome.get("code") or 0)
            except (TypeError, ValueError) as exc:
                raise SubmissionError(f"Malformed {phase} code: {outcome.get('code')!r}") from exc
            if code != 0:
                raise SubmissionError(f"{phase} code {code}: {outcome.get('log', '')}")

        tx_hash = result.get("hash")
        try:
            height = int(result.get("height") or 0)
        except (TypeError, ValueError) as exc:
            raise SubmissionError(f"Invalid block height: {result.get('height')!r}") from exc
        if not isinstance(tx_hash, str) or not tx_hash or height <= 0:
            raise SubmissionError("Node returned no transaction hash or block height")

        logger.info("Transaction %s committed at height %d", tx_hash, height)
        return Receipt(tx_hash=tx_hash, block_height=height)


class TransferState(enum.Enum):
    IDLE = "idle"
    KEY_LOADED = "key_loaded"
    PASSWORD_VERIFIED = "password_verified"
    ENDPOINT_SELECTED = "endpoint_selected"
    SIGNED = "signed"
    SUBMITTED = "submitted"
    CONFIRMED = "confirmed"
    FAILED = "failed"


_FORWARD = {
    TransferState.IDLE: TransferState.KEY_LOADED,
    TransferState.KEY_LOADED: TransferState.PASSWORD_VERIFIED,
    TransferState.PASSWORD_VERIFIED: TransferState.ENDPOINT_SELECTED,
    TransferState.ENDPOINT_SELECTED: TransferState.SIGNED,
    TransferState.SIGNED: TransferState.SUBMITTED,
    TransferState.SUBMITTED: TransferState.CONFIRMED,
}


@dataclass
class TransferProgress:
    """Tracks a single transfer through its stages. No retries, no rewinds."""

    state: TransferState = TransferState.IDLE
    error: Optional[BaseException] = None

    @property
    def terminal(self) -> bool:
        return self.state in (TransferState.CONFIRMED, TransferState.FAILED)

    def advance(self, target: TransferState) -> None:
        if self.terminal:
            raise RuntimeError(f"Transfer already {self.state.value}")
        expected = _FORWARD[self.state]
        if target is not expected:
            raise RuntimeError(f"Cannot move from {self.state.value} to {target.value}")
        logger.debug("Transfer %s -> %s", self.state.value, target.value)
        self.state = target

    def fail(self, error: BaseException) -> None:
        if self.terminal:
            raise RuntimeError(f"Transfer already {self.state.value}")
        logger.debug("Transfer failed at %s: %s", self.state.value, error)
        self.state = TransferState.FAILED
        self.error = error

"""
Wallet core: the operations the CLI layer drives.

    generate_key   new key pair, encrypted and stored under a name
    import_key     adopt an existing keystore file under a new name
    list_keys      metadata of every stored keystore
    delete_key     remove a stored keystore
    decrypt        recover the private key of a stored keystore
    send_transfer  load, decrypt, select endpoint, sign, submit
    get_balance    query an address balance
"""

from __future__ import annotations

import binascii
import logging
import random
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence

import httpx

from .chain.endpoints import EndpointSelection, EndpointSelector
from .chain.rpc import get_balance
from .chain.tx import (
    Receipt,
    TransactionBuilder,
    TransferMsg,
    TransferProgress,
    TransferState,
    TxHeader,
)
from .config import WalletConfig
from .errors import DuplicateNameError, FormatError, IntegrityError, NotFoundError
from .keystore.codec import KeystoreRecord, decode
from .keystore.store import KeystoreStore, KeystoreSummary
from .sigil.cipher import Password, decrypt_secret, encrypt_secret
from .sigil.keys import PRIVATE_KEY_SIZE, SEED_SIZE, RawKeyPair, generate_key_pair, key_pair_from_private_key
from .utils import b64decode, b64encode, wipe

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TransferResult:
    receipt: Receipt
    selection: EndpointSelection

    @property
    def tx_hash(self) -> str:
        return self.receipt.tx_hash

    @property
    def block_height(self) -> int:
        return self.receipt.block_height


def _private_key_from_plaintext(plaintext: bytearray) -> bytearray:
    """Raw key bytes, or the base64 text form older keystores encrypted."""
    if len(plaintext) in (SEED_SIZE, PRIVATE_KEY_SIZE):
        return plaintext
    try:
        decoded = bytearray(b64decode(plaintext.decode("ascii")))
    except (UnicodeDecodeError, binascii.Error, ValueError) as exc:
        raise FormatError("Decrypted keystore does not hold an Ed25519 private key.") from exc
    wipe(plaintext)
    return decoded


class Wallet:
    def __init__(
        self,
        config: WalletConfig,
        transport: Optional[httpx.BaseTransport] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.config = config
        self.transport = transport
        self.store = KeystoreStore(config.home)
        self.selector = EndpointSelector(config.endpoints, transport=transport, rng=rng)
        self.builder = TransactionBuilder(config.endpoints, transport=transport)

    # ---- keystore operations ----

    def _ensure_unused(self, name: str) -> None:
        try:
            self.store.find_by_name(name)
        except NotFoundError:
            return
        raise DuplicateNameError(f"Key name '{name}' already exists.")

    def generate_key(self, name: str, password: Password) -> tuple[RawKeyPair, Path]:
        """
        Generate a key pair and store it encrypted under ``name``.

        Returns:
            Tuple of (key pair, keystore path).  The key pair is returned once
            so the caller can show a backup; it is never written in clear.
        """
        self._ensure_unused(name)
        pair = generate_key_pair()
        record = KeystoreRecord(
            name=name,
            address=pair.address,
            public_key=b64encode(pair.public_key),
            crypto=encrypt_secret(pair.private_key, password, self.config.scrypt),
        )
        return pair, self.store.create(name, record)

    def import_key(self, name: str, keyfile: bytes, password: Password) -> Path:
        """
        Store an existing encoded keystore under ``name``.

        The password must open the keystore and the decrypted key must derive
        the recorded address.
        """
        record = decode(keyfile)
        self._ensure_unused(name)
        private_key = self._open(record, password)
        try:
            pair = key_pair_from_private_key(private_key)
        finally:
            wipe(private_key)
        imported = KeystoreRecord(
            name=name,
            address=pair.address,
            public_key=record.public_key or b64encode(pair.public_key),
            crypto=record.crypto,
            version=record.version,
        )
        return self.store.create(name, imported)

    def list_keys(self) -> list[KeystoreSummary]:
        return self.store.list()

    def delete_key(self, name: str) -> Path:
        return self.store.delete(name)

    def decrypt(self, name: str, password: Password) -> bytearray:
        """Return the private key of keystore ``name``. Caller should wipe it."""
        return self._open(self.store.find_by_name(name), password)

    def _open(self, record: KeystoreRecord, password: Password) -> bytearray:
        private_key = _private_key_from_plaintext(decrypt_secret(record.crypto, password))
        try:
            address = key_pair_from_private_key(private_key).address
        except FormatError:
            wipe(private_key)
            raise
        if address != record.address:
            wipe(private_key)
            raise IntegrityError(
                f"Keystore address {record.address} does not match its key ({address})."
            )
        return private_key

    # ---- chain operations ----

    def send_transfer(
        self,
        header: TxHeader,
        message: TransferMsg,
        name: str,
        password: Password,
        endpoints: Optional[Sequence[str]] = None,
        progress: Optional[TransferProgress] = None,
    ) -> TransferResult:
        """
        Sign ``message`` with keystore ``name`` and submit it.

        Stages follow TransferState; any failure moves ``progress`` to FAILED
        and the error propagates unchanged.  Nothing is retried.
        """
        progress = progress or TransferProgress()
        try:
            record = self.store.find_by_name(name)
            progress.advance(TransferState.KEY_LOADED)

            private_key = self._open(record, password)
            try:
                progress.advance(TransferState.PASSWORD_VERIFIED)

                selection = self.selector.select(endpoints)
                progress.advance(TransferState.ENDPOINT_SELECTED)

                envelope = self.builder.build(header, message, private_key)
                progress.advance(TransferState.SIGNED)
            finally:
                wipe(private_key)

            progress.advance(TransferState.SUBMITTED)
            receipt = self.builder.submit(envelope, selection)
            progress.advance(TransferState.CONFIRMED)
        except Exception as exc:
            progress.fail(exc)
            raise

        if selection.degraded:
            logger.warning("Transfer %s was submitted to an unverified endpoint", receipt.tx_hash)
        return TransferResult(receipt=receipt, selection=selection)

    def get_balance(self, address: str, symbol: str = "ANKR") -> str:
        selection = self.selector.select()
        return get_balance(
            address,
            symbol,
            selection.url,
            timeout=self.config.endpoints.rpc_timeout,
            transport=self.transport,
        )

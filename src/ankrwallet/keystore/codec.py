"""
Keystore record encoding.

Records are stored as RFC 8785 canonical JSON, so the same record always
produces the same bytes.  Layout follows the version 3 keystore format:

    {"name", "address", "publickey"?, "crypto": {...}, "version": 3}
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Optional

import rfc8785

from ..errors import FormatError
from ..sigil.cipher import CipherParams, CryptoSection, KdfParams, ScryptParams
from .schemas import KEYSTORE_SCHEMA, SchemaRegistry, SchemaValidationError

KEYSTORE_VERSION = 3


@dataclass(frozen=True)
class KeystoreRecord:
    name: str
    address: str
    crypto: CryptoSection
    version: int = KEYSTORE_VERSION
    public_key: Optional[str] = None

    def renamed(self, name: str) -> "KeystoreRecord":
        return KeystoreRecord(
            name=name,
            address=self.address,
            crypto=self.crypto,
            version=self.version,
            public_key=self.public_key,
        )

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "name": self.name,
            "address": self.address,
            "crypto": {
                "cipher": self.crypto.cipher.name,
                "ciphertext": self.crypto.cipher.ciphertext.hex(),
                "cipherparams": {"iv": self.crypto.cipher.iv.hex()},
                "kdf": self.crypto.kdf.name,
                "kdfparams": {
                    **self.crypto.kdf.cost.to_dict(),
                    "dklen": self.crypto.kdf.dklen,
                    "salt": self.crypto.kdf.salt.hex(),
                },
                "mac": self.crypto.mac.hex(),
            },
            "version": self.version,
        }
        if self.public_key is not None:
            payload["publickey"] = self.public_key
        return payload


def encode(record: KeystoreRecord) -> bytes:
    return rfc8785.dumps(record.to_dict())


def decode(data: bytes, registry: SchemaRegistry | None = None) -> KeystoreRecord:
    """Parse and validate an encoded keystore record.

    Raises:
        FormatError: On invalid JSON, unknown version, missing fields or
            malformed nested structures.
    """
    try:
        payload = json.loads(data)
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise FormatError(f"Keystore is not valid JSON: {exc}") from exc
    if not isinstance(payload, dict):
        raise FormatError("Keystore must be a JSON object.")

    version = payload.get("version")
    if version != KEYSTORE_VERSION:
        raise FormatError(f"Unsupported keystore version: {version!r}")

    registry = registry or SchemaRegistry.default()
    try:
        registry.validate_instance(payload, KEYSTORE_SCHEMA)
    except SchemaValidationError as exc:
        raise FormatError(f"Malformed keystore: {'; '.join(exc.errors)}") from exc

    crypto = payload["crypto"]
    kdfparams = crypto["kdfparams"]
    return KeystoreRecord(
        name=payload["name"],
        address=payload["address"].upper(),
        public_key=payload.get("publickey"),
        version=version,
        crypto=CryptoSection(
            cipher=CipherParams(
                name=crypto["cipher"],
                ciphertext=bytes.fromhex(crypto["ciphertext"]),
                iv=bytes.fromhex(crypto["cipherparams"]["iv"]),
            ),
            kdf=KdfParams(
                name=crypto["kdf"],
                salt=bytes.fromhex(kdfparams["salt"]),
                cost=ScryptParams(n=kdfparams["n"], r=kdfparams["r"], p=kdfparams["p"]),
                dklen=kdfparams["dklen"],
            ),
            mac=bytes.fromhex(crypto["mac"]),
        ),
    )

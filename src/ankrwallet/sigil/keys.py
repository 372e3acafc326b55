"""
Ed25519 Key Management for the Ankr chain.

This module handles the account keys used for:
- Transfer transaction signing
- Address derivation (first 20 bytes of SHA-256 over the public key)

Private keys travel in the Tendermint layout: 32-byte seed followed by the
32-byte public key.  They only ever reach disk encrypted (see cipher.py).

Dependencies: cryptography (Ed25519 primitives)
"""

from __future__ import annotations

import hashlib
import os
from dataclasses import dataclass

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ed25519

from ..errors import CryptoRandomnessError, FormatError

SEED_SIZE = 32
PRIVATE_KEY_SIZE = 64
ADDRESS_SIZE = 20


@dataclass(frozen=True)
class RawKeyPair:
    private_key: bytes
    public_key: bytes
    address: str

    def __repr__(self) -> str:
        return f"RawKeyPair(address={self.address!r})"


def address_from_public_key(public_key: bytes) -> str:
    """
    Derive the chain address for an Ed25519 public key.

    Returns:
        40 upper-case hex characters (no 0x prefix)
    """
    return hashlib.sha256(public_key).digest()[:ADDRESS_SIZE].hex().upper()


def _public_bytes(private: ed25519.Ed25519PrivateKey) -> bytes:
    return private.public_key().public_bytes(
        encoding=serialization.Encoding.Raw,
        format=serialization.PublicFormat.Raw,
    )


def _load_private(private_key: bytes | bytearray) -> ed25519.Ed25519PrivateKey:
    if len(private_key) not in (SEED_SIZE, PRIVATE_KEY_SIZE):
        raise FormatError(
            f"Ed25519 private key must be {SEED_SIZE} or {PRIVATE_KEY_SIZE} bytes, "
            f"got {len(private_key)}."
        )
    private = ed25519.Ed25519PrivateKey.from_private_bytes(bytes(private_key[:SEED_SIZE]))
    if len(private_key) == PRIVATE_KEY_SIZE and bytes(private_key[SEED_SIZE:]) != _public_bytes(private):
        raise FormatError("Embedded public key does not match the private key seed.")
    return private


def key_pair_from_private_key(private_key: bytes | bytearray) -> RawKeyPair:
    """
    Rebuild the full key pair from a seed or a 64-byte private key.

    Raises:
        FormatError: If the key has the wrong size or an inconsistent public half
    """
    private = _load_private(private_key)
    public_key = _public_bytes(private)
    seed = bytes(private_key[:SEED_SIZE])
    return RawKeyPair(
        private_key=seed + public_key,
        public_key=public_key,
        address=address_from_public_key(public_key),
    )


def generate_key_pair() -> RawKeyPair:
    """
    Generate a new Ed25519 keypair.

    Returns:
        RawKeyPair with the 64-byte private key, raw public key and address

    Raises:
        CryptoRandomnessError: If the OS randomness source fails
    """
    try:
        seed = os.urandom(SEED_SIZE)
    except (OSError, NotImplementedError) as exc:
        raise CryptoRandomnessError(f"System randomness source failed: {exc}") from exc
    if len(seed) != SEED_SIZE:
        raise CryptoRandomnessError("System randomness source returned a short read.")
    return key_pair_from_private_key(seed)


def sign(private_key: bytes | bytearray, payload: bytes) -> bytes:
    """Sign ``payload`` and return the 64-byte Ed25519 signature."""
    return _load_private(private_key).sign(payload)


def verify(public_key: bytes, payload: bytes, signature: bytes) -> bool:
    try:
        ed25519.Ed25519PublicKey.from_public_bytes(public_key).verify(signature, payload)
    except (InvalidSignature, ValueError):
        return False
    return True

"""
Password-based keystore encryption.

Provides:
- scrypt key derivation with tunable CPU/memory cost
- AES-128-CTR encryption keyed by the first half of the derived key
- Keccak-256 MAC over (second half of the derived key || ciphertext)

The MAC is verified in constant time before any decryption happens, so a
wrong password or a tampered record never yields plaintext bytes.
"""

from __future__ import annotations

import hmac
import os
from dataclasses import dataclass

from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes
from cryptography.hazmat.primitives.kdf.scrypt import Scrypt
from eth_hash.auto import keccak

from ..errors import CryptoRandomnessError, FormatError, IntegrityError, KDFError

CIPHER_NAME = "aes-128-ctr"
KDF_NAME = "scrypt"
DKLEN = 32
SALT_SIZE = 32
IV_SIZE = 16

Password = str | bytes | bytearray


@dataclass(frozen=True)
class ScryptParams:
    n: int
    r: int
    p: int

    def to_dict(self) -> dict[str, int]:
        return {"n": self.n, "r": self.r, "p": self.p}


# Same cost presets as the go-ethereum v3 keystore.
STANDARD_SCRYPT = ScryptParams(n=1 << 18, r=8, p=1)
LIGHT_SCRYPT = ScryptParams(n=1 << 12, r=8, p=6)


@dataclass(frozen=True)
class CipherParams:
    name: str
    ciphertext: bytes
    iv: bytes


@dataclass(frozen=True)
class KdfParams:
    name: str
    salt: bytes
    cost: ScryptParams
    dklen: int = DKLEN


@dataclass(frozen=True)
class CryptoSection:
    cipher: CipherParams
    kdf: KdfParams
    mac: bytes


def _password_bytes(password: Password) -> bytes:
    if isinstance(password, str):
        return password.encode("utf-8")
    return bytes(password)


def _random_bytes(size: int) -> bytes:
    try:
        data = os.urandom(size)
    except (OSError, NotImplementedError) as exc:
        raise CryptoRandomnessError(f"System randomness source failed: {exc}") from exc
    if len(data) != size:
        raise CryptoRandomnessError("System randomness source returned a short read.")
    return data


def validate_cost(cost: ScryptParams, dklen: int = DKLEN) -> None:
    if cost.n <= 1 or cost.n & (cost.n - 1):
        raise KDFError(f"scrypt N must be a power of two greater than 1, got {cost.n}.")
    if cost.r <= 0 or cost.p <= 0:
        raise KDFError(f"scrypt r and p must be positive, got r={cost.r} p={cost.p}.")
    if dklen < DKLEN:
        raise KDFError(f"Derived key length must be at least {DKLEN} bytes, got {dklen}.")


def derive_key(password: Password, salt: bytes, cost: ScryptParams, dklen: int = DKLEN) -> bytes:
    validate_cost(cost, dklen)
    if not salt:
        raise KDFError("scrypt salt cannot be empty.")
    try:
        kdf = Scrypt(salt=salt, length=dklen, n=cost.n, r=cost.r, p=cost.p)
        return kdf.derive(_password_bytes(password))
    except (ValueError, MemoryError) as exc:
        raise KDFError(f"scrypt derivation failed: {exc}") from exc


def _aes_ctr(data: bytes, key: bytes, iv: bytes) -> bytes:
    if len(iv) != IV_SIZE:
        raise FormatError(f"IV must be {IV_SIZE} bytes, got {len(iv)}.")
    cipher = Cipher(algorithms.AES(key[:16]), modes.CTR(iv))
    encryptor = cipher.encryptor()
    return encryptor.update(data) + encryptor.finalize()


def encrypt(plaintext: bytes | bytearray, key: bytes, iv: bytes) -> bytes:
    """AES-128-CTR under the first 16 bytes of ``key``."""
    return _aes_ctr(bytes(plaintext), key, iv)


def compute_mac(secondary_key_half: bytes, ciphertext: bytes) -> bytes:
    """Keccak-256 over the MAC half of the derived key followed by the ciphertext.

    NOTE: Keccak-256 != SHA3-256 (NIST). Never use hashlib.sha3_256 here.
    """
    return keccak(secondary_key_half + ciphertext)


def decrypt(ciphertext: bytes, key: bytes, iv: bytes, mac: bytes) -> bytes:
    """Verify the MAC, then decrypt.

    Raises:
        IntegrityError: If the MAC does not match (wrong password or tampering)
    """
    expected = compute_mac(key[16:32], ciphertext)
    if not hmac.compare_digest(expected, mac):
        raise IntegrityError("Could not decrypt key with given password.")
    return _aes_ctr(ciphertext, key, iv)


def encrypt_secret(
    secret: bytes | bytearray,
    password: Password,
    cost: ScryptParams = STANDARD_SCRYPT,
) -> CryptoSection:
    """Encrypt a secret under a fresh salt and IV."""
    salt = _random_bytes(SALT_SIZE)
    iv = _random_bytes(IV_SIZE)
    derived = derive_key(password, salt, cost, DKLEN)
    ciphertext = encrypt(secret, derived, iv)
    return CryptoSection(
        cipher=CipherParams(name=CIPHER_NAME, ciphertext=ciphertext, iv=iv),
        kdf=KdfParams(name=KDF_NAME, salt=salt, cost=cost, dklen=DKLEN),
        mac=compute_mac(derived[16:32], ciphertext),
    )


def decrypt_secret(crypto: CryptoSection, password: Password) -> bytearray:
    """Decrypt a keystore crypto section.

    Returns a mutable buffer so callers can wipe it once they are done.
    """
    if crypto.cipher.name != CIPHER_NAME:
        raise FormatError(f"Unsupported cipher: {crypto.cipher.name}")
    if crypto.kdf.name != KDF_NAME:
        raise FormatError(f"Unsupported KDF: {crypto.kdf.name}")
    derived = derive_key(password, crypto.kdf.salt, crypto.kdf.cost, crypto.kdf.dklen)
    return bytearray(decrypt(crypto.cipher.ciphertext, derived, crypto.cipher.iv, crypto.mac))

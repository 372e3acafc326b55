"""
Sigil - Key material and keystore cryptography.

- keys:   Ed25519 key generation, address derivation, signing
- cipher: scrypt + AES-128-CTR + Keccak-256 MAC password encryption
"""

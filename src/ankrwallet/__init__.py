__all__ = [
    # Wallet core
    "Wallet",
    "TransferResult",
    # Configuration
    "WalletConfig",
    "EndpointConfig",
    # Errors
    "WalletError",
    "ConfigError",
    "DuplicateNameError",
    "NotFoundError",
    "FormatError",
    "KDFError",
    "IntegrityError",
    "CryptoRandomnessError",
    "EndpointUnavailableError",
    "RpcError",
    "SenderMismatchError",
    "SubmissionError",
    # Keys
    "RawKeyPair",
    "generate_key_pair",
    "key_pair_from_private_key",
    "address_from_public_key",
    # Password encryption
    "ScryptParams",
    "STANDARD_SCRYPT",
    "LIGHT_SCRYPT",
    "CryptoSection",
    "derive_key",
    "encrypt",
    "decrypt",
    "compute_mac",
    "encrypt_secret",
    "decrypt_secret",
    # Keystore
    "KeystoreRecord",
    "KeystoreStore",
    "KeystoreSummary",
    "encode",
    "decode",
    # Chain
    "EndpointSelector",
    "EndpointSelection",
    "permute",
    "TransactionBuilder",
    "TransactionEnvelope",
    "TxHeader",
    "TransferMsg",
    "Amount",
    "Currency",
    "Receipt",
    "TransferState",
    "TransferProgress",
]

from .errors import (
    ConfigError,
    CryptoRandomnessError,
    DuplicateNameError,
    EndpointUnavailableError,
    FormatError,
    IntegrityError,
    KDFError,
    NotFoundError,
    RpcError,
    SenderMismatchError,
    SubmissionError,
    WalletError,
)
from .config import EndpointConfig, WalletConfig
from .sigil.keys import (
    RawKeyPair,
    address_from_public_key,
    generate_key_pair,
    key_pair_from_private_key,
)
from .sigil.cipher import (
    LIGHT_SCRYPT,
    STANDARD_SCRYPT,
    CryptoSection,
    ScryptParams,
    compute_mac,
    decrypt,
    decrypt_secret,
    derive_key,
    encrypt,
    encrypt_secret,
)
from .keystore.codec import KeystoreRecord, decode, encode
from .keystore.store import KeystoreStore, KeystoreSummary
from .chain.endpoints import EndpointSelection, EndpointSelector, permute
from .chain.tx import (
    Amount,
    Currency,
    Receipt,
    TransactionBuilder,
    TransactionEnvelope,
    TransferMsg,
    TransferProgress,
    TransferState,
    TxHeader,
)
from .wallet import TransferResult, Wallet

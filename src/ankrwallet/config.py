"""
Wallet configuration.

Values come from the process environment, optionally seeded from
``$ANKR_HOME/.env`` (default ``~/.ankr/.env``).  Variables already present in
the environment win over the .env file.

    ANKR_HOME            keystore directory
    ANKR_CHAIN_URLS      ';'-separated RPC endpoint base URLs
    ANKR_CHAIN_PORT      shared RPC port
    ANKR_CHAIN_ID        chain id put into transaction headers
    ANKR_PROBE_TIMEOUT   liveness probe timeout (seconds)
    ANKR_RPC_TIMEOUT     submission / query timeout (seconds)
    ANKR_SCRYPT_LIGHT    "1" to encrypt new keystores with the light scrypt cost
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional

from dotenv import load_dotenv

from .errors import ConfigError
from .sigil.cipher import LIGHT_SCRYPT, STANDARD_SCRYPT, ScryptParams

ANKR_DIR = Path.home() / ".ankr"

DEFAULT_CHAIN_URLS = (
    "https://chain-01.dccn.ankr.com",
    "https://chain-02.dccn.ankr.com",
    "https://chain-03.dccn.ankr.com",
)
DEFAULT_CHAIN_PORT = "443"
DEFAULT_CHAIN_ID = "ankr-chain"
DEFAULT_PROBE_TIMEOUT = 3.0
DEFAULT_RPC_TIMEOUT = 30.0


@dataclass(frozen=True)
class EndpointConfig:
    candidates: tuple[str, ...] = DEFAULT_CHAIN_URLS
    port: str = DEFAULT_CHAIN_PORT
    probe_timeout: float = DEFAULT_PROBE_TIMEOUT
    rpc_timeout: float = DEFAULT_RPC_TIMEOUT

    def url_for(self, endpoint: str) -> str:
        return f"{endpoint.rstrip('/')}:{self.port}"


@dataclass(frozen=True)
class WalletConfig:
    home: Path = ANKR_DIR
    endpoints: EndpointConfig = field(default_factory=EndpointConfig)
    chain_id: str = DEFAULT_CHAIN_ID
    scrypt: ScryptParams = STANDARD_SCRYPT

    @classmethod
    def from_env(
        cls,
        env: Optional[Mapping[str, str]] = None,
        env_path: Optional[Path] = None,
    ) -> "WalletConfig":
        """
        Build the configuration from environment variables.

        Args:
            env: Mapping to read instead of ``os.environ`` (no .env loading)
            env_path: Explicit .env file (default: $ANKR_HOME/.env)

        Raises:
            ConfigError: On an unusable home directory or bad numeric values
        """
        if env is None:
            if env_path is None:
                home_hint = os.environ.get("ANKR_HOME")
                env_path = (Path(home_hint).expanduser() if home_hint else ANKR_DIR) / ".env"
            if env_path.is_file():
                load_dotenv(env_path, override=False)
            env = os.environ

        home = Path(env.get("ANKR_HOME") or ANKR_DIR).expanduser()
        if home.exists() and not home.is_dir():
            raise ConfigError(f"ANKR_HOME is not a directory: {home}")

        urls = env.get("ANKR_CHAIN_URLS", "")
        candidates = tuple(u.strip() for u in urls.split(";") if u.strip()) or DEFAULT_CHAIN_URLS
        port = env.get("ANKR_CHAIN_PORT", "").strip() or DEFAULT_CHAIN_PORT
        if not port.isdigit():
            raise ConfigError(f"ANKR_CHAIN_PORT must be numeric, got {port!r}")

        return cls(
            home=home,
            endpoints=EndpointConfig(
                candidates=candidates,
                port=port,
                probe_timeout=_positive_float(env, "ANKR_PROBE_TIMEOUT", DEFAULT_PROBE_TIMEOUT),
                rpc_timeout=_positive_float(env, "ANKR_RPC_TIMEOUT", DEFAULT_RPC_TIMEOUT),
            ),
            chain_id=env.get("ANKR_CHAIN_ID", "").strip() or DEFAULT_CHAIN_ID,
            scrypt=LIGHT_SCRYPT if env.get("ANKR_SCRYPT_LIGHT") == "1" else STANDARD_SCRYPT,
        )


def _positive_float(env: Mapping[str, str], key: str, default: float) -> float:
    raw = env.get(key)
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError as exc:
        raise ConfigError(f"{key} must be a number, got {raw!r}") from exc
    if value <= 0:
        raise ConfigError(f"{key} must be positive, got {raw!r}")
    return value

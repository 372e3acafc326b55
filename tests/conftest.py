"""Shared fixtures: fast scrypt cost, temporary keystore home, fake chain nodes."""

from __future__ import annotations

import base64
import hashlib
import json
import logging
from pathlib import Path
from typing import Any

import httpx
import pytest

from ankrwallet.config import EndpointConfig, WalletConfig
from ankrwallet.keystore.codec import KeystoreRecord
from ankrwallet.sigil.cipher import ScryptParams, encrypt_secret
from ankrwallet.sigil.keys import generate_key_pair
from ankrwallet.utils import b64encode
from ankrwallet.wallet import Wallet

# Cheap enough for unit tests, still a valid scrypt cost.
FAST_SCRYPT = ScryptParams(n=1024, r=8, p=1)

NODES = (
    "https://chain-01.test",
    "https://chain-02.test",
    "https://chain-03.test",
)


class FakeChain:
    """In-memory stand-in for a replica set of Tendermint RPC nodes."""

    def __init__(self, live: set[str], height: int = 42) -> None:
        self.live = live
        self.height = height
        self.probes: list[str] = []
        self.calls: list[tuple[str, str, dict[str, Any]]] = []
        self.balances: dict[tuple[str, str], str] = {}
        self.broadcast_result: dict[str, Any] | None = None
        self.rpc_error: dict[str, Any] | None = None
        self.status_code = 200

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def handler(self, request: httpx.Request) -> httpx.Response:
        base = f"{request.url.scheme}://{request.url.host}"
        if request.method == "GET" and request.url.path == "/net_info":
            self.probes.append(base)
            if base not in self.live:
                raise httpx.ConnectError("connection refused", request=request)
            return httpx.Response(200, json={"jsonrpc": "2.0", "id": -1, "result": {"listening": True}})

        body = json.loads(request.content)
        self.calls.append((base, body["method"], body["params"]))
        if self.status_code != 200:
            return httpx.Response(self.status_code, text="unavailable")
        if self.rpc_error is not None:
            return httpx.Response(200, json={"jsonrpc": "2.0", "id": 1, "error": self.rpc_error})

        if body["method"] == "broadcast_tx_commit":
            tx = base64.b64decode(body["params"]["tx"])
            result = self.broadcast_result or {
                "check_tx": {"code": 0, "log": ""},
                "deliver_tx": {"code": 0, "log": ""},
                "hash": hashlib.sha256(tx).hexdigest().upper(),
                "height": str(self.height),
            }
            return httpx.Response(200, json={"jsonrpc": "2.0", "id": 1, "result": result})

        if body["method"] == "abci_query":
            query = json.loads(bytes.fromhex(body["params"]["data"]))
            amount = self.balances.get((query["address"], query["symbol"]), "0")
            value = base64.b64encode(json.dumps({"amount": amount}).encode()).decode()
            return httpx.Response(
                200,
                json={"jsonrpc": "2.0", "id": 1, "result": {"response": {"code": 0, "value": value}}},
            )

        return httpx.Response(404)

    def broadcasts(self) -> list[tuple[str, dict[str, Any]]]:
        return [
            (base, json.loads(base64.b64decode(params["tx"])))
            for base, method, params in self.calls
            if method == "broadcast_tx_commit"
        ]


@pytest.fixture(autouse=True)
def _reset_logging():
    # the CLI installs a handler bound to the stderr of the invocation
    yield
    logger = logging.getLogger("ankrwallet")
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)


@pytest.fixture()
def ankr_home(tmp_path: Path) -> Path:
    return tmp_path / ".ankr"


@pytest.fixture()
def config(ankr_home: Path) -> WalletConfig:
    return WalletConfig(
        home=ankr_home,
        endpoints=EndpointConfig(candidates=NODES, port="443", probe_timeout=0.5, rpc_timeout=1.0),
        chain_id="ankr-chain",
        scrypt=FAST_SCRYPT,
    )


@pytest.fixture()
def chain() -> FakeChain:
    return FakeChain(live={NODES[1]})


@pytest.fixture()
def wallet(config: WalletConfig, chain: FakeChain) -> Wallet:
    return Wallet(config, transport=chain.transport)


def make_record(name: str, password: str = "pw") -> tuple[KeystoreRecord, bytes]:
    """Encrypted record for a fresh key, plus the clear private key."""
    pair = generate_key_pair()
    record = KeystoreRecord(
        name=name,
        address=pair.address,
        public_key=b64encode(pair.public_key),
        crypto=encrypt_secret(pair.private_key, password, FAST_SCRYPT),
    )
    return record, pair.private_key

"""Unit tests for chain/tx.py and chain/rpc.py."""

from __future__ import annotations

import json

import httpx
import pytest

from ankrwallet.chain.endpoints import EndpointSelection
from ankrwallet.chain.rpc import get_balance
from ankrwallet.chain.tx import (
    ANKR,
    Amount,
    Currency,
    TransactionBuilder,
    TransferMsg,
    TransferProgress,
    TransferState,
    TxHeader,
    canonical_sign_bytes,
)
from ankrwallet.config import EndpointConfig
from ankrwallet.errors import RpcError, SenderMismatchError, SubmissionError
from ankrwallet.sigil.keys import generate_key_pair, verify
from ankrwallet.utils import b64decode

from .conftest import NODES, FakeChain

CONFIG = EndpointConfig(candidates=NODES, port="443", rpc_timeout=1.0)
RECIPIENT = "B" * 40


def _transfer(sender: str, value: int = 100) -> tuple[TxHeader, TransferMsg]:
    header = TxHeader(chain_id="ankr-chain", gas_limit=20000)
    message = TransferMsg(from_addr=sender, to_addr=RECIPIENT, amounts=(Amount(ANKR, value),))
    return header, message


class TestCanonicalEncoding:
    def test_field_layout(self) -> None:
        header, message = _transfer("A" * 40)
        payload = json.loads(canonical_sign_bytes(header, message))
        assert list(payload) == ["header", "message"]
        assert payload["header"] == {
            "chain_id": "ankr-chain",
            "gas_limit": "20000",
            "gas_price": {"currency": {"decimals": "18", "symbol": "ANKR"}, "value": "10000000000000000"},
            "memo": "",
            "version": "1.0",
        }
        assert payload["message"]["amounts"] == [
            {"currency": {"decimals": "18", "symbol": "ANKR"}, "value": "100"}
        ]

    def test_deterministic(self) -> None:
        header, message = _transfer("A" * 40)
        assert canonical_sign_bytes(header, message) == canonical_sign_bytes(header, message)

    def test_large_values_stay_exact(self) -> None:
        header, message = _transfer("A" * 40, value=10**30 + 1)
        assert b'"value":"1000000000000000000000000000001"' in canonical_sign_bytes(header, message)

    def test_negative_amount_rejected(self) -> None:
        with pytest.raises(ValueError):
            Amount(Currency("ANKR"), -1)


class TestBuild:
    def test_signature_verifies(self) -> None:
        pair = generate_key_pair()
        header, message = _transfer(pair.address)
        envelope = TransactionBuilder(CONFIG).build(header, message, pair.private_key)
        assert envelope.public_key == pair.public_key
        assert verify(pair.public_key, envelope.sign_bytes(), envelope.signature)

    def test_signature_bound_to_content(self) -> None:
        pair = generate_key_pair()
        header, message = _transfer(pair.address)
        envelope = TransactionBuilder(CONFIG).build(header, message, pair.private_key)
        _, altered = _transfer(pair.address, value=101)
        assert not verify(pair.public_key, canonical_sign_bytes(header, altered), envelope.signature)

    def test_sender_must_own_key(self) -> None:
        pair = generate_key_pair()
        header, message = _transfer(generate_key_pair().address)
        with pytest.raises(SenderMismatchError):
            TransactionBuilder(CONFIG).build(header, message, pair.private_key)

    def test_encoded_envelope(self) -> None:
        pair = generate_key_pair()
        header, message = _transfer(pair.address)
        envelope = TransactionBuilder(CONFIG).build(header, message, pair.private_key)
        payload = json.loads(envelope.encode())
        assert b64decode(payload["pub_key"]) == pair.public_key
        assert b64decode(payload["signature"]) == envelope.signature
        assert payload["message"]["from_addr"] == pair.address


class TestSubmit:
    def _envelope(self):
        pair = generate_key_pair()
        header, message = _transfer(pair.address)
        return TransactionBuilder(CONFIG).build(header, message, pair.private_key)

    def test_success(self) -> None:
        chain = FakeChain(live={NODES[0]}, height=77)
        builder = TransactionBuilder(CONFIG, transport=chain.transport)
        envelope = self._envelope()

        receipt = builder.submit(envelope, NODES[0])

        assert receipt.tx_hash
        assert receipt.block_height == 77
        [(base, sent)] = chain.broadcasts()
        assert base == NODES[0]
        assert sent == json.loads(envelope.encode())

    def test_accepts_selection(self) -> None:
        chain = FakeChain(live=set())
        builder = TransactionBuilder(CONFIG, transport=chain.transport)
        receipt = builder.submit(self._envelope(), EndpointSelection(endpoint=NODES[2], port="443"))
        assert receipt.block_height > 0
        assert chain.calls[0][0] == NODES[2]

    def test_rpc_error_carries_reason(self) -> None:
        chain = FakeChain(live=set())
        chain.rpc_error = {"code": -32603, "message": "Internal error", "data": "tx already exists in cache"}
        builder = TransactionBuilder(CONFIG, transport=chain.transport)
        with pytest.raises(SubmissionError) as excinfo:
            builder.submit(self._envelope(), NODES[0])
        assert "tx already exists in cache" in excinfo.value.reason

    def test_check_tx_rejection(self) -> None:
        chain = FakeChain(live=set())
        chain.broadcast_result = {"check_tx": {"code": 4, "log": "insufficient funds"}, "deliver_tx": {}, "hash": "AB", "height": "0"}
        builder = TransactionBuilder(CONFIG, transport=chain.transport)
        with pytest.raises(SubmissionError, match="insufficient funds"):
            builder.submit(self._envelope(), NODES[0])

    def test_deliver_tx_rejection(self) -> None:
        chain = FakeChain(live=set())
        chain.broadcast_result = {"check_tx": {"code": 0}, "deliver_tx": {"code": 9, "log": "bad nonce"}, "hash": "AB", "height": "5"}
        builder = TransactionBuilder(CONFIG, transport=chain.transport)
        with pytest.raises(SubmissionError, match="bad nonce"):
            builder.submit(self._envelope(), NODES[0])

    def test_missing_height(self) -> None:
        chain = FakeChain(live=set())
        chain.broadcast_result = {"check_tx": {"code": 0}, "deliver_tx": {"code": 0}, "hash": "AB"}
        builder = TransactionBuilder(CONFIG, transport=chain.transport)
        with pytest.raises(SubmissionError):
            builder.submit(self._envelope(), NODES[0])

    def test_http_error_is_not_retried(self) -> None:
        chain = FakeChain(live=set())
        chain.status_code = 502
        builder = TransactionBuilder(CONFIG, transport=chain.transport)
        with pytest.raises(SubmissionError, match="502"):
            builder.submit(self._envelope(), NODES[0])
        assert len(chain.calls) == 1

    @pytest.mark.parametrize(
        "result",
        [
            {"check_tx": "oops", "deliver_tx": {}, "hash": "AB", "height": "5"},
            {"check_tx": {"code": "bad"}, "deliver_tx": {}, "hash": "AB", "height": "5"},
            {"check_tx": {"code": 0}, "deliver_tx": [1], "hash": "AB", "height": "5"},
            {"check_tx": {"code": 0}, "deliver_tx": {"code": 0}, "hash": 123, "height": "5"},
            {"check_tx": {"code": 0}, "deliver_tx": {"code": 0}, "hash": "AB", "height": "tall"},
        ],
    )
    def test_malformed_result(self, result: dict) -> None:
        chain = FakeChain(live=set())
        chain.broadcast_result = result
        builder = TransactionBuilder(CONFIG, transport=chain.transport)
        with pytest.raises(SubmissionError):
            builder.submit(self._envelope(), NODES[0])

    def test_transport_failure(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectTimeout("timed out", request=request)

        builder = TransactionBuilder(CONFIG, transport=httpx.MockTransport(handler))
        with pytest.raises(SubmissionError, match="timed out"):
            builder.submit(self._envelope(), NODES[0])


class TestBalance:
    def test_query(self) -> None:
        chain = FakeChain(live=set())
        chain.balances[("A" * 40, "ANKR")] = "5000"
        assert get_balance("A" * 40, "ANKR", NODES[0] + ":443", transport=chain.transport) == "5000"
        [(_, method, params)] = chain.calls
        assert method == "abci_query"
        assert params["path"] == "/store/balance"

    def test_query_error(self) -> None:
        chain = FakeChain(live=set())
        chain.rpc_error = {"code": -32603, "message": "boom"}
        with pytest.raises(RpcError, match="boom"):
            get_balance("A" * 40, "ANKR", NODES[0] + ":443", transport=chain.transport)

    @pytest.mark.parametrize(
        "result",
        [
            ["not", "an", "object"],
            {"response": "oops"},
            {"response": {"code": "bad"}},
            {"response": {"code": 0, "value": "%%not base64%%"}},
            {"response": {"code": 0, "value": "WzFd"}},
        ],
    )
    def test_malformed_query_result(self, result: object) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"jsonrpc": "2.0", "id": 1, "result": result})

        with pytest.raises(RpcError):
            get_balance("A" * 40, "ANKR", NODES[0] + ":443", transport=httpx.MockTransport(handler))


class TestTransferProgress:
    HAPPY_PATH = [
        TransferState.KEY_LOADED,
        TransferState.PASSWORD_VERIFIED,
        TransferState.ENDPOINT_SELECTED,
        TransferState.SIGNED,
        TransferState.SUBMITTED,
        TransferState.CONFIRMED,
    ]

    def test_happy_path(self) -> None:
        progress = TransferProgress()
        for state in self.HAPPY_PATH:
            progress.advance(state)
        assert progress.state is TransferState.CONFIRMED
        assert progress.terminal

    def test_cannot_skip(self) -> None:
        progress = TransferProgress()
        with pytest.raises(RuntimeError):
            progress.advance(TransferState.SIGNED)

    def test_fail_from_any_stage(self) -> None:
        for stop in range(len(self.HAPPY_PATH)):
            progress = TransferProgress()
            for state in self.HAPPY_PATH[:stop]:
                progress.advance(state)
            error = SubmissionError("nope")
            progress.fail(error)
            assert progress.state is TransferState.FAILED
            assert progress.error is error

    def test_terminal_states_are_final(self) -> None:
        progress = TransferProgress()
        progress.fail(RuntimeError("x"))
        with pytest.raises(RuntimeError):
            progress.advance(TransferState.KEY_LOADED)
        with pytest.raises(RuntimeError):
            progress.fail(RuntimeError("again"))

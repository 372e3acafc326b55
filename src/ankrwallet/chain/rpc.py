"""
JSON-RPC Client for Ankr chain (Tendermint) nodes.

Lightweight: httpx for HTTP, plain JSON for payloads.  Supports transaction
broadcast with commit and ABCI store queries.
"""

from __future__ import annotations

import base64
import json
import logging
from typing import Any, Optional

import httpx

from ..errors import RpcError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0


def _rpc_call(
    method: str,
    params: dict[str, Any],
    rpc_url: str,
    timeout: float = DEFAULT_TIMEOUT,
    transport: Optional[httpx.BaseTransport] = None,
) -> Any:
    """
    Make a JSON-RPC call.

    Args:
        method: RPC method name (e.g., "broadcast_tx_commit")
        params: RPC parameters (named)
        rpc_url: Endpoint URL including port
        timeout: Request timeout in seconds
        transport: Optional httpx transport (tests)

    Returns:
        Result field from the RPC response

    Raises:
        RpcError: On transport failure, non-200 status, bad JSON or an RPC error
    """
    payload = {
        "jsonrpc": "2.0",
        "method": method,
        "params": params,
        "id": 1,
    }

    logger.debug("RPC %s -> %s", method, rpc_url)
    try:
        with httpx.Client(timeout=timeout, transport=transport) as client:
            response = client.post(rpc_url, json=payload)
            response.raise_for_status()
            data = response.json()
    except httpx.HTTPStatusError as exc:
        raise RpcError(f"HTTP {exc.response.status_code} from {rpc_url}") from exc
    except httpx.HTTPError as exc:
        raise RpcError(f"Transport error: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise RpcError(f"Invalid JSON-RPC response: {exc}") from exc

    if not isinstance(data, dict):
        raise RpcError("Invalid JSON-RPC response: not an object")
    if data.get("error"):
        error = data["error"]
        if isinstance(error, dict):
            detail = error.get("data") or error.get("message") or error
        else:
            detail = error
        raise RpcError(f"RPC error: {detail}")

    return data.get("result")


def broadcast_tx_commit(
    tx: bytes,
    rpc_url: str,
    timeout: float = DEFAULT_TIMEOUT,
    transport: Optional[httpx.BaseTransport] = None,
) -> dict[str, Any]:
    """
    Broadcast a transaction and wait until it is committed in a block.

    Args:
        tx: Encoded, signed transaction bytes

    Returns:
        Raw result dict (check_tx, deliver_tx, hash, height)
    """
    result = _rpc_call(
        "broadcast_tx_commit",
        {"tx": base64.b64encode(tx).decode("ascii")},
        rpc_url,
        timeout=timeout,
        transport=transport,
    )
    if not isinstance(result, dict):
        raise RpcError("broadcast_tx_commit returned no result")
    return result


def abci_query(
    path: str,
    data: bytes,
    rpc_url: str,
    timeout: float = DEFAULT_TIMEOUT,
    transport: Optional[httpx.BaseTransport] = None,
) -> bytes:
    """
    Run an ABCI query against the application store.

    Returns:
        Decoded ``response.value`` bytes

    Raises:
        RpcError: If the call fails or the application reports a non-zero code
    """
    result = _rpc_call(
        "abci_query",
        {"path": path, "data": data.hex(), "height": "0", "prove": False},
        rpc_url,
        timeout=timeout,
        transport=transport,
    )
    if result is not None and not isinstance(result, dict):
        raise RpcError(f"Malformed {path} result: {result!r}")
    response = (result or {}).get("response") or {}
    if not isinstance(response, dict):
        raise RpcError(f"Malformed {path} response: {response!r}")
    try:
        code = int(response.get("code") or 0)
    except (TypeError, ValueError) as exc:
        raise RpcError(f"Malformed {path} response code: {response.get('code')!r}") from exc
    if code != 0:
        raise RpcError(f"Query {path} failed with code {code}: {response.get('log', '')}")
    value = response.get("value")
    if not value:
        return b""
    try:
        return base64.b64decode(value, validate=True)
    except (TypeError, ValueError) as exc:
        raise RpcError(f"Malformed {path} response value: {exc}") from exc


def get_balance(
    address: str,
    symbol: str,
    rpc_url: str,
    timeout: float = DEFAULT_TIMEOUT,
    transport: Optional[httpx.BaseTransport] = None,
) -> str:
    """
    Get the token balance for an address.

    Returns:
        Balance in the token's smallest unit, as a decimal string
    """
    query = json.dumps({"address": address, "symbol": symbol}, separators=(",", ":"))
    raw = abci_query("/store/balance", query.encode("utf-8"), rpc_url, timeout=timeout, transport=transport)
    if not raw:
        return "0"
    try:
        payload = json.loads(raw)
    except ValueError as exc:
        raise RpcError(f"Invalid balance response: {exc}") from exc
    if not isinstance(payload, dict):
        raise RpcError(f"Invalid balance response: {payload!r}")
    return str(payload.get("amount", "0"))

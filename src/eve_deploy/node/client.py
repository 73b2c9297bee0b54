"""Node RPC surface consumed by the pipeline.

The Protocols describe what each stage needs; TendermintRPCClient
implements all of them over JSON-RPC 2.0 (httpx). Tests substitute
in-memory fakes.

Calls are made once: there is no retry in this layer. The only retry in
the pipeline is the RetryPoller's explicit loop.
"""

from __future__ import annotations

import base64
import json
from typing import Any, Protocol

import httpx

from eve_deploy.domain.results import AccountInfo, BroadcastResult
from eve_deploy.logging_config import get_logger
from eve_deploy.node.errors import NodeResponseError, NodeRPCError, NodeTransportError

logger = get_logger(__name__)

SIMULATE_PATH = "/cosmos.tx.v1beta1.Service/Simulate"
ACCOUNT_PATH = "/cosmos.auth.v1beta1.Query/Account"


class Simulator(Protocol):
    async def simulate(self, tx_bytes: bytes) -> int:
        """Dry-run a transaction and return the gas it used."""
        ...


class AccountRetriever(Protocol):
    async def get_account(self, address: str) -> AccountInfo:
        ...


class TxQuerier(Protocol):
    async def query_tx(self, tx_hash: str) -> BroadcastResult:
        """Return the settled result, or raise NodeError ("... not found")."""
        ...


class NodeClient(Simulator, AccountRetriever, TxQuerier, Protocol):
    async def broadcast_tx_async(self, tx_bytes: bytes) -> BroadcastResult:
        ...

    async def broadcast_tx_sync(self, tx_bytes: bytes) -> BroadcastResult:
        ...

    async def broadcast_tx_commit(self, tx_bytes: bytes) -> BroadcastResult:
        ...


def _as_int(value: Any, default: int = 0) -> int:
    if value in (None, ""):
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        raise NodeResponseError(f"expected an integer, got {value!r}") from None


class TendermintRPCClient:
    """JSON-RPC client for a Tendermint/CometBFT node.

    Usage:
        async with TendermintRPCClient("http://localhost:26657") as node:
            result = await node.broadcast_tx_sync(tx_bytes)
    """

    def __init__(
        self,
        url: str,
        timeout: float = 30.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._url = url
        self._timeout = timeout
        self._client = client
        self._request_id = 0

    async def __aenter__(self) -> TendermintRPCClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    async def close(self) -> None:
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()

    # ------------------------------------------------------------------
    # Broadcast
    # ------------------------------------------------------------------

    async def broadcast_tx_async(self, tx_bytes: bytes) -> BroadcastResult:
        result = await self._rpc_call("broadcast_tx_async", {"tx": _b64(tx_bytes)})
        return self._parse_check_result(result)

    async def broadcast_tx_sync(self, tx_bytes: bytes) -> BroadcastResult:
        result = await self._rpc_call("broadcast_tx_sync", {"tx": _b64(tx_bytes)})
        return self._parse_check_result(result)

    async def broadcast_tx_commit(self, tx_bytes: bytes) -> BroadcastResult:
        """Submit and wait for block inclusion.

        A failed CheckTx is reported through the returned code, not raised.
        """
        result = await self._rpc_call("broadcast_tx_commit", {"tx": _b64(tx_bytes)})
        check = result.get("check_tx") or {}
        deliver = result.get("deliver_tx") or result.get("tx_result") or {}
        outcome = check if _as_int(check.get("code")) != 0 else deliver
        return BroadcastResult(
            tx_hash=str(result.get("hash", "")).upper(),
            code=_as_int(outcome.get("code")),
            raw_log=outcome.get("log", ""),
            height=_as_int(result.get("height")) or None,
            codespace=outcome.get("codespace", ""),
        )

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    async def query_tx(self, tx_hash: str) -> BroadcastResult:
        try:
            raw_hash = bytes.fromhex(tx_hash)
        except ValueError:
            raise NodeResponseError(f"invalid tx hash {tx_hash!r}") from None
        result = await self._rpc_call("tx", {"hash": _b64(raw_hash), "prove": False})
        tx_result = result.get("tx_result") or {}
        return BroadcastResult(
            tx_hash=str(result.get("hash", tx_hash)).upper(),
            code=_as_int(tx_result.get("code")),
            raw_log=tx_result.get("log", ""),
            height=_as_int(result.get("height")) or None,
            codespace=tx_result.get("codespace", ""),
        )

    async def simulate(self, tx_bytes: bytes) -> int:
        value = await self._abci_query(SIMULATE_PATH, {"tx_bytes": _b64(tx_bytes)})
        gas_info = value.get("gas_info") or {}
        return _as_int(gas_info.get("gas_used"))

    async def get_account(self, address: str) -> AccountInfo:
        value = await self._abci_query(ACCOUNT_PATH, {"address": address})
        account = value.get("account") or {}
        return AccountInfo(
            address=account.get("address", address),
            account_number=_as_int(account.get("account_number")),
            sequence=_as_int(account.get("sequence")),
        )

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    async def _abci_query(self, path: str, request: dict) -> dict:
        data = json.dumps(request, sort_keys=True).encode("utf-8").hex()
        result = await self._rpc_call(
            "abci_query",
            {"path": path, "data": data, "height": "0", "prove": False},
        )
        response = result.get("response") or {}
        code = _as_int(response.get("code"))
        if code != 0:
            raise NodeRPCError("abci query failed", code=code, data=response.get("log", ""))
        raw_value = response.get("value")
        if not raw_value:
            return {}
        try:
            return json.loads(base64.b64decode(raw_value))
        except ValueError as exc:
            raise NodeResponseError(f"undecodable abci_query value for {path}") from exc

    async def _rpc_call(self, method: str, params: dict[str, Any]) -> dict:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(timeout=self._timeout)

        self._request_id += 1
        logger.debug("node.rpc_call", method=method, request_id=self._request_id)
        try:
            response = await self._client.post(
                self._url,
                json={
                    "jsonrpc": "2.0",
                    "id": self._request_id,
                    "method": method,
                    "params": params,
                },
            )
        except httpx.HTTPError as exc:
            raise NodeTransportError(f"{method}: {exc}") from exc

        try:
            payload = response.json()
        except ValueError:
            raise NodeResponseError(
                f"{method}: non-JSON response (HTTP {response.status_code})"
            ) from None
        if not isinstance(payload, dict):
            raise NodeResponseError(f"{method}: expected a JSON-RPC object")

        error = payload.get("error")
        if isinstance(error, dict):
            raise NodeRPCError(
                error.get("message", "rpc error"),
                code=_as_int(error.get("code")),
                data=str(error.get("data", "")),
            )
        if response.is_error:
            raise NodeResponseError(f"{method}: HTTP {response.status_code}")

        result = payload.get("result")
        if not isinstance(result, dict):
            raise NodeResponseError(f"{method}: missing result")
        return result

    @staticmethod
    def _parse_check_result(result: dict) -> BroadcastResult:
        return BroadcastResult(
            tx_hash=str(result.get("hash", "")).upper(),
            code=_as_int(result.get("code")),
            raw_log=result.get("log", ""),
            codespace=result.get("codespace", ""),
        )


def _b64(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")

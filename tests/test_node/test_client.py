"""Tests for TendermintRPCClient against a mocked HTTP transport."""

from __future__ import annotations

import base64
import json

import httpx
import pytest

from eve_deploy.node.client import ACCOUNT_PATH, SIMULATE_PATH, TendermintRPCClient
from eve_deploy.node.errors import (
    NodeResponseError,
    NodeRPCError,
    NodeTransportError,
    is_timeout_error,
)


def _b64_json(value: dict) -> str:
    return base64.b64encode(json.dumps(value).encode()).decode()


class FakeRPC:
    """Records JSON-RPC requests and answers with canned results."""

    def __init__(self, result=None, error=None, status_code=200, raw=None) -> None:
        self.result = result if result is not None else {}
        self.error = error
        self.status_code = status_code
        self.raw = raw
        self.requests: list[dict] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        self.requests.append(body)
        if self.raw is not None:
            return httpx.Response(self.status_code, content=self.raw)
        payload = {"jsonrpc": "2.0", "id": body["id"]}
        if self.error is not None:
            payload["error"] = self.error
        else:
            payload["result"] = self.result
        return httpx.Response(self.status_code, json=payload)

    def client(self) -> TendermintRPCClient:
        return TendermintRPCClient(
            "http://node:26657",
            client=httpx.AsyncClient(transport=httpx.MockTransport(self)),
        )


class TestBroadcast:
    @pytest.mark.asyncio
    async def test_sync(self) -> None:
        rpc = FakeRPC(result={"code": 0, "log": "[]", "codespace": "", "hash": "ab12"})
        async with rpc.client() as node:
            result = await node.broadcast_tx_sync(b"tx-bytes")

        assert result.tx_hash == "AB12"
        assert result.is_success
        assert rpc.requests[0]["method"] == "broadcast_tx_sync"
        assert rpc.requests[0]["params"] == {"tx": base64.b64encode(b"tx-bytes").decode()}
        assert rpc.requests[0]["jsonrpc"] == "2.0"

    @pytest.mark.asyncio
    async def test_async_rejected_by_check_tx(self) -> None:
        rpc = FakeRPC(
            result={"code": 13, "log": "insufficient fee", "codespace": "sdk", "hash": "FF"}
        )
        async with rpc.client() as node:
            result = await node.broadcast_tx_async(b"tx")

        assert result.code == 13
        assert result.codespace == "sdk"
        assert not result.is_success

    @pytest.mark.asyncio
    async def test_commit(self) -> None:
        rpc = FakeRPC(
            result={
                "check_tx": {"code": 0, "log": ""},
                "deliver_tx": {"code": 0, "log": "[]"},
                "hash": "C0FFEE",
                "height": "42",
            }
        )
        async with rpc.client() as node:
            result = await node.broadcast_tx_commit(b"tx")

        assert result.tx_hash == "C0FFEE"
        assert result.height == 42
        assert result.code == 0

    @pytest.mark.asyncio
    async def test_commit_check_tx_failure_wins(self) -> None:
        rpc = FakeRPC(
            result={
                "check_tx": {"code": 5, "log": "insufficient funds", "codespace": "sdk"},
                "deliver_tx": {"code": 0},
                "hash": "AA",
                "height": "0",
            }
        )
        async with rpc.client() as node:
            result = await node.broadcast_tx_commit(b"tx")

        assert result.code == 5
        assert result.raw_log == "insufficient funds"
        assert result.height is None

    @pytest.mark.asyncio
    async def test_commit_timeout_error(self) -> None:
        rpc = FakeRPC(
            error={
                "code": -32603,
                "message": "Internal error",
                "data": "timed out waiting for tx to be included in a block",
            }
        )
        async with rpc.client() as node:
            with pytest.raises(NodeRPCError) as exc_info:
                await node.broadcast_tx_commit(b"tx")

        assert exc_info.value.rpc_code == -32603
        assert is_timeout_error(exc_info.value)


class TestQueries:
    @pytest.mark.asyncio
    async def test_query_tx(self) -> None:
        rpc = FakeRPC(
            result={"hash": "0A0B", "height": "7", "tx_result": {"code": 0, "log": "[]"}}
        )
        async with rpc.client() as node:
            result = await node.query_tx("0A0B")

        assert result.tx_hash == "0A0B"
        assert result.height == 7
        assert rpc.requests[0]["method"] == "tx"
        assert rpc.requests[0]["params"] == {
            "hash": base64.b64encode(bytes.fromhex("0A0B")).decode(),
            "prove": False,
        }

    @pytest.mark.asyncio
    async def test_query_tx_bad_hash_makes_no_call(self) -> None:
        rpc = FakeRPC()
        async with rpc.client() as node:
            with pytest.raises(NodeResponseError, match="invalid tx hash"):
                await node.query_tx("not-hex")
        assert rpc.requests == []

    @pytest.mark.asyncio
    async def test_simulate(self) -> None:
        rpc = FakeRPC(
            result={"response": {"code": 0, "value": _b64_json({"gas_info": {"gas_used": "98765"}})}}
        )
        async with rpc.client() as node:
            gas_used = await node.simulate(b"sim-tx")

        assert gas_used == 98765
        params = rpc.requests[0]["params"]
        assert params["path"] == SIMULATE_PATH
        request = json.loads(bytes.fromhex(params["data"]))
        assert request == {"tx_bytes": base64.b64encode(b"sim-tx").decode()}

    @pytest.mark.asyncio
    async def test_simulate_rejected(self) -> None:
        rpc = FakeRPC(result={"response": {"code": 11, "log": "out of gas"}})
        async with rpc.client() as node:
            with pytest.raises(NodeRPCError, match="out of gas") as exc_info:
                await node.simulate(b"sim-tx")
        assert exc_info.value.rpc_code == 11

    @pytest.mark.asyncio
    async def test_get_account(self) -> None:
        account = {"address": "akash1xyz", "account_number": "12", "sequence": "4"}
        rpc = FakeRPC(result={"response": {"code": 0, "value": _b64_json({"account": account})}})
        async with rpc.client() as node:
            info = await node.get_account("akash1xyz")

        assert (info.account_number, info.sequence) == (12, 4)
        assert rpc.requests[0]["params"]["path"] == ACCOUNT_PATH


class TestTransport:
    @pytest.mark.asyncio
    async def test_connection_failure(self) -> None:
        def refuse(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        client = httpx.AsyncClient(transport=httpx.MockTransport(refuse))
        async with TendermintRPCClient("http://node:26657", client=client) as node:
            with pytest.raises(NodeTransportError, match="connection refused"):
                await node.broadcast_tx_sync(b"tx")

    @pytest.mark.asyncio
    async def test_non_json(self) -> None:
        rpc = FakeRPC(status_code=502, raw=b"<html>bad gateway</html>")
        async with rpc.client() as node:
            with pytest.raises(NodeResponseError, match="HTTP 502"):
                await node.broadcast_tx_sync(b"tx")

    @pytest.mark.asyncio
    async def test_missing_result(self) -> None:
        rpc = FakeRPC(raw=b'{"jsonrpc": "2.0", "id": 1}')
        async with rpc.client() as node:
            with pytest.raises(NodeResponseError, match="missing result"):
                await node.broadcast_tx_sync(b"tx")

    @pytest.mark.asyncio
    async def test_request_ids_increase(self) -> None:
        rpc = FakeRPC(result={"hash": "AA"})
        async with rpc.client() as node:
            await node.broadcast_tx_sync(b"1")
            await node.broadcast_tx_sync(b"2")
        assert [r["id"] for r in rpc.requests] == [1, 2]

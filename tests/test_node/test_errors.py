"""Tests for node error classification.

classify_node_error is the only place that inspects node error strings,
so every message shape the node produces is covered here.
"""

from __future__ import annotations

import pytest

from eve_deploy.node.errors import (
    NodeErrorKind,
    NodeResponseError,
    NodeRPCError,
    NodeTransportError,
    classify_node_error,
    is_not_found_error,
    is_timeout_error,
)

HASH = "9F86D081884C7D659A2FEAA0C55AD015A3BF4F1B2B0B822CD15D6C15B0F00A08"


class TestClassifyNodeError:
    @pytest.mark.parametrize(
        "message",
        [
            "timed out waiting for tx to be included in a block",
            "Internal error: timed out waiting for tx to be included in a block",
            "error on broadcastTxCommit: timed out waiting for tx to be included in a block",
        ],
    )
    def test_timeout(self, message: str) -> None:
        assert classify_node_error(message) is NodeErrorKind.TIMEOUT
        assert is_timeout_error(message)

    @pytest.mark.parametrize(
        "message",
        [
            f"tx ({HASH}) not found",
            f"Internal error: tx ({HASH}) not found",
            f"RPC error -32603 - Internal error: tx ({HASH}) not found",
        ],
    )
    def test_not_found(self, message: str) -> None:
        assert classify_node_error(message) is NodeErrorKind.NOT_FOUND
        assert is_not_found_error(message)

    @pytest.mark.parametrize(
        "message",
        [
            "",
            "connection refused",
            "timed out waiting for tx to be included in a block; retrying",
            f"tx ({HASH}) not found yet",
            "account not found",
            "insufficient fees; got: 0uakt required: 3750uakt",
            "timed out",
        ],
    )
    def test_other(self, message: str) -> None:
        assert classify_node_error(message) is NodeErrorKind.OTHER
        assert not is_timeout_error(message)
        assert not is_not_found_error(message)

    def test_rpc_error_data_is_classified(self) -> None:
        error = NodeRPCError(
            "Internal error",
            code=-32603,
            data="timed out waiting for tx to be included in a block",
        )
        assert classify_node_error(error) is NodeErrorKind.TIMEOUT

    def test_rpc_error_without_data(self) -> None:
        error = NodeRPCError(f"tx ({HASH}) not found")
        assert str(error) == f"tx ({HASH}) not found"
        assert classify_node_error(error) is NodeErrorKind.NOT_FOUND

    def test_transport_error_is_never_retryable(self) -> None:
        error = NodeTransportError("timed out waiting for tx to be included in a block")
        assert classify_node_error(error) is NodeErrorKind.OTHER

    def test_response_error(self) -> None:
        assert classify_node_error(NodeResponseError("missing result")) is NodeErrorKind.OTHER

"""Node error types and the single place that classifies node errors.

The node exposes no structured error kind for "timed out waiting for
inclusion" or "tx not found", only fixed message shapes:

    timeout    ... timed out waiting for tx to be included in a block
    not found  tx (<HASH>) not found

classify_node_error() is the only code that matches on those strings.
Anything it does not recognise is OTHER, which callers treat as fatal.
"""

from __future__ import annotations

import enum

# Tendermint rpc/core/mempool.go: the only signal for a commit timeout.
TIMEOUT_ERROR_MESSAGE = "timed out waiting for tx to be included in a block"

# Tendermint rpc/core/tx.go: "tx (%X) not found".
NOT_FOUND_ERROR_SUFFIX = ") not found"


class NodeErrorKind(enum.StrEnum):
    TIMEOUT = "timeout"
    NOT_FOUND = "not_found"
    OTHER = "other"


class NodeError(Exception):
    """Base class for errors talking to the node."""


class NodeRPCError(NodeError):
    """The node answered with a JSON-RPC error object.

    str() is "<message>: <data>" so the node's detail stays at the end
    of the string, where classify_node_error looks for it.
    """

    def __init__(self, message: str, code: int = 0, data: str = "") -> None:
        self.rpc_message = message
        self.rpc_code = code
        self.data = data
        super().__init__(f"{message}: {data}" if data else message)


class NodeTransportError(NodeError):
    """The node could not be reached or the connection failed."""


class NodeResponseError(NodeError):
    """The node answered with something that is not a valid response."""


def classify_node_error(error: BaseException | str) -> NodeErrorKind:
    """Classify a node error by its message. Unknown shapes are OTHER."""
    if isinstance(error, NodeTransportError):
        return NodeErrorKind.OTHER
    message = str(error)
    if message.endswith(TIMEOUT_ERROR_MESSAGE):
        return NodeErrorKind.TIMEOUT
    if message.endswith(NOT_FOUND_ERROR_SUFFIX):
        return NodeErrorKind.NOT_FOUND
    return NodeErrorKind.OTHER


def is_timeout_error(error: BaseException | str) -> bool:
    return classify_node_error(error) is NodeErrorKind.TIMEOUT


def is_not_found_error(error: BaseException | str) -> bool:
    return classify_node_error(error) is NodeErrorKind.NOT_FOUND

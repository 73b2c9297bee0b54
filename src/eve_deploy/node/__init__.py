"""Node RPC client and error classification."""

from eve_deploy.node.client import NodeClient, TendermintRPCClient
from eve_deploy.node.errors import (
    NodeError,
    NodeErrorKind,
    NodeRPCError,
    NodeTransportError,
    classify_node_error,
)

__all__ = [
    "NodeClient",
    "NodeError",
    "NodeErrorKind",
    "NodeRPCError",
    "NodeTransportError",
    "TendermintRPCClient",
    "classify_node_error",
]

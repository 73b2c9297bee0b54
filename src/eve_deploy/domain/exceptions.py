"""Error taxonomy for the transaction pipeline.

Every stage fails closed: it raises one of these and never fabricates a
partial result. Errors raised after the transaction bytes exist carry the
transaction hash so the caller can keep tracking it out-of-band.

An operator declining the confirmation prompt is NOT an error; see
domain/results.py (AbortedByOperator).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from eve_deploy.domain.results import BroadcastResult


class TxPipelineError(Exception):
    """Base exception for all pipeline errors."""

    def __init__(self, message: str, code: str = "TX_PIPELINE_ERROR") -> None:
        self.message = message
        self.code = code
        super().__init__(self.message)


# --- Pre-network Errors ---


class ConfigError(TxPipelineError):
    """Raised when fee/gas inputs cannot be parsed."""

    def __init__(self, message: str) -> None:
        super().__init__(message=message, code="CONFIG_ERROR")


class ValidationError(TxPipelineError):
    """Raised when a domain message fails structural validation.

    Example: a MsgCreateDeployment with no groups.
    """

    def __init__(self, constraint: str, index: int | None = None, msg_type: str = "") -> None:
        where = f"message {index} ({msg_type})" if index is not None else "message"
        super().__init__(
            message=f"Invalid {where}: {constraint}",
            code="VALIDATION_ERROR",
        )
        self.constraint = constraint
        self.index = index
        self.msg_type = msg_type

    def at(self, index: int, msg_type: str) -> ValidationError:
        """Return a copy of this error pinned to a position in the tx."""
        return ValidationError(self.constraint, index=index, msg_type=msg_type)


class SigningError(TxPipelineError):
    """Raised when the named key is missing or the keyring is locked."""

    def __init__(self, message: str, key_name: str = "") -> None:
        super().__init__(message=message, code="SIGNING_ERROR")
        self.key_name = key_name


class TxFrozenError(TxPipelineError):
    """Raised when a signed transaction is mutated or signed again."""

    def __init__(self, message: str = "transaction is already signed and cannot change") -> None:
        super().__init__(message=message, code="TX_FROZEN")


class EncodingError(TxPipelineError):
    """Raised when a transaction cannot be encoded. Indicates a bug."""

    def __init__(self, message: str) -> None:
        super().__init__(message=message, code="ENCODING_ERROR")


# --- Node Errors ---


class AccountLookupError(TxPipelineError):
    """Raised when the signer's account number/sequence cannot be fetched."""

    def __init__(self, address: str, reason: str) -> None:
        super().__init__(
            message=f"Account lookup failed for {address}: {reason}",
            code="ACCOUNT_LOOKUP_ERROR",
        )
        self.address = address


class SimulationError(TxPipelineError):
    """Raised when the node rejects the gas simulation. Never retried."""

    def __init__(self, message: str) -> None:
        super().__init__(message=message, code="SIMULATION_ERROR")


class BroadcastError(TxPipelineError):
    """Raised on node rejection or transport failure other than the timeout signal."""

    def __init__(self, message: str, tx_hash: str | None = None) -> None:
        super().__init__(message=message, code="BROADCAST_ERROR")
        self.tx_hash = tx_hash


class RetryableTimeout(TxPipelineError):
    """The node could not confirm inclusion within its own wait window.

    Internal hand-off signal from the Broadcaster to the RetryPoller.
    """

    def __init__(self, tx_hash: str, node_message: str = "") -> None:
        super().__init__(
            message=f"Timed out waiting for tx {tx_hash} to be included: {node_message}",
            code="RETRYABLE_TIMEOUT",
        )
        self.tx_hash = tx_hash


class DeadlineExceededError(TxPipelineError):
    """Raised when the RetryPoller's own deadline elapsed without a result.

    Always carries the hash so polling can be resumed later.
    """

    def __init__(
        self,
        tx_hash: str,
        timeout: float,
        last_response: BroadcastResult | None = None,
    ) -> None:
        super().__init__(
            message=f"Tx {tx_hash} not found after polling for {timeout:g}s",
            code="DEADLINE_EXCEEDED",
        )
        self.tx_hash = tx_hash
        self.timeout = timeout
        self.last_response = last_response


class PollCancelledError(TxPipelineError):
    """Raised when the cancellation signal fires while polling."""

    def __init__(self, tx_hash: str) -> None:
        super().__init__(
            message=f"Polling for tx {tx_hash} was cancelled",
            code="POLL_CANCELLED",
        )
        self.tx_hash = tx_hash

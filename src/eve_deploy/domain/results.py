"""Terminal artifacts returned to the caller of submit()."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class BroadcastResult:
    """What the node reported for one submission attempt.

    Attributes:
        tx_hash: Upper-case hex sha256 of the wire bytes (64 chars).
        code: Delivery code. 0 means success; non-zero is an on-chain
            rejection, which is still a completed result.
        raw_log: Node log for the transaction.
        height: Block height, when the tx is known to be included.
        codespace: Module that produced a non-zero code.
    """

    tx_hash: str
    code: int = 0
    raw_log: str = ""
    height: int | None = None
    codespace: str = ""

    @property
    def is_success(self) -> bool:
        return self.code == 0

    def to_dict(self) -> dict:
        return {
            "txhash": self.tx_hash,
            "code": self.code,
            "raw_log": self.raw_log,
            "height": self.height,
            "codespace": self.codespace,
        }


@dataclass(frozen=True)
class AbortedByOperator:
    """The operator declined the confirmation prompt. Not an error."""

    reason: str = "submission aborted by operator"


@dataclass(frozen=True)
class AccountInfo:
    """Signer account state needed to build a sign doc."""

    address: str
    account_number: int
    sequence: int

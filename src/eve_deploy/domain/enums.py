"""Domain enumerations for the transaction pipeline."""

import enum


class BroadcastMode(enum.StrEnum):
    """Acknowledgement mode used when submitting a transaction.

    Only BLOCK carries post-hoc retry support via the RetryPoller.
    """

    ASYNC = "async"  # fire-and-forget
    SYNC = "sync"  # accepted into the mempool
    BLOCK = "block"  # wait for block commit


class SubmissionStatus(enum.StrEnum):
    """Lifecycle states of one submission.

    Transitions are guarded by SubmissionStateMachine
    (see domain/state_machine.py).
    """

    ASSEMBLED = "ASSEMBLED"
    APPROVED = "APPROVED"
    ABORTED = "ABORTED"
    SIGNED = "SIGNED"
    BROADCAST = "BROADCAST"
    COMMITTED = "COMMITTED"
    FAILED = "FAILED"


class ConfirmationDecision(enum.StrEnum):
    APPROVED = "approved"
    DECLINED = "declined"

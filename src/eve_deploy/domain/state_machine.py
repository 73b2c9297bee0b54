"""Submission lifecycle guard.

Uses python-statemachine so that an out-of-order pipeline step (signing a
declined transaction, broadcasting twice, settling a tx that was never
submitted) raises TransitionNotAllowed instead of silently proceeding.

One machine is created per submission and is never shared.

Transition table:
    ASSEMBLED  -> APPROVED   (approve)
    ASSEMBLED  -> ABORTED    (decline)
    APPROVED   -> SIGNED     (sign)
    SIGNED     -> BROADCAST  (submit)
    BROADCAST  -> COMMITTED  (settle)
    any open   -> FAILED     (fail)
"""

from __future__ import annotations

from statemachine import State, StateMachine


class SubmissionStateMachine(StateMachine):
    """State machine guarding one submission.

    Usage:
        sm = SubmissionStateMachine()
        sm.approve()
        sm.sign()
        sm.status  # "SIGNED"
    """

    # --- States ---
    ASSEMBLED = State("ASSEMBLED", initial=True)
    APPROVED = State("APPROVED")
    ABORTED = State("ABORTED", final=True)
    SIGNED = State("SIGNED")
    BROADCAST = State("BROADCAST")
    COMMITTED = State("COMMITTED", final=True)
    FAILED = State("FAILED", final=True)

    # --- Events / Transitions ---

    # Operator decision
    approve = ASSEMBLED.to(APPROVED)
    decline = ASSEMBLED.to(ABORTED)

    sign = APPROVED.to(SIGNED)
    submit = SIGNED.to(BROADCAST)

    settle = BROADCAST.to(COMMITTED)

    fail = (
        ASSEMBLED.to(FAILED)
        | APPROVED.to(FAILED)
        | SIGNED.to(FAILED)
        | BROADCAST.to(FAILED)
    )

    def __init__(self, current_status: str = "ASSEMBLED") -> None:
        valid_values = {s.value for s in self.states}
        if current_status not in valid_values:
            valid = ", ".join(sorted(valid_values))
            raise ValueError(f"Unknown status '{current_status}'. Valid states: {valid}")
        super().__init__(start_value=current_status)

    @property
    def status(self) -> str:
        return str(self.current_state.value)

    @property
    def is_finished(self) -> bool:
        return bool(self.current_state.final)

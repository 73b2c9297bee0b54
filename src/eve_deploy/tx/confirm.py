"""ConfirmationGate: operator approval before signing.

The gate returns a decision rather than raising, so a decline flows back
to the caller as AbortedByOperator and never reaches the Signer.
Non-interactive callers either skip the gate or hand it a pre-decided
answer.
"""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING, TextIO

from eve_deploy.domain.enums import ConfirmationDecision
from eve_deploy.logging_config import get_logger
from eve_deploy.tx.encoding import TxEncoder

if TYPE_CHECKING:
    from eve_deploy.tx.builder import UnsignedTx

logger = get_logger(__name__)

PROMPT = "confirm transaction before signing and broadcasting [y/N]: "
_YES = {"y", "yes"}


class ConfirmationGate:
    def __init__(
        self,
        output: TextIO | None = None,
        input: TextIO | None = None,
        skip: bool = False,
        answer: bool | None = None,
        encoder: TxEncoder | None = None,
    ) -> None:
        """
        Args:
            output: Where the preview and prompt go. Defaults to stderr.
            input: Where the answer is read from. Defaults to stdin.
            skip: Approve without showing anything.
            answer: Pre-decided answer; the preview is still shown but
                no input is read.
        """
        self._output = output
        self._input = input
        self._skip = skip
        self._answer = answer
        self._encoder = encoder or TxEncoder()

    def confirm(self, unsigned: UnsignedTx) -> ConfirmationDecision:
        if self._skip:
            return ConfirmationDecision.APPROVED

        output = self._output or sys.stderr
        output.write(f"{self._encoder.to_json(unsigned)}\n\n")

        if self._answer is not None:
            approved = self._answer
        else:
            output.write(PROMPT)
            output.flush()
            line = (self._input or sys.stdin).readline()
            approved = line.strip().lower() in _YES

        if not approved:
            output.write("cancelled transaction\n")
            logger.info("tx.confirmation_declined")
            return ConfirmationDecision.DECLINED

        logger.debug("tx.confirmation_approved")
        return ConfirmationDecision.APPROVED

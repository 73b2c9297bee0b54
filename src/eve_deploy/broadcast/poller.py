"""RetryPoller: settle a transaction whose block-commit wait timed out.

The loop is bounded by an explicit deadline and an explicit cancellation
event, both checked at the top of every iteration:

    1. cancellation set?          -> PollCancelledError
    2. deadline reached?          -> DeadlineExceededError (carries the hash)
    3. wait min(interval, remaining), racing the cancellation event
    4. query the tx by hash:
         found                    -> return the result
         "... ) not found"        -> next iteration
         any other error          -> BroadcastError, no retry

Time comes from an injectable Clock so tests run without wall-clock waits.
Task cancellation (asyncio.CancelledError) is never caught here.
"""

from __future__ import annotations

import asyncio
import enum
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

from eve_deploy.domain.exceptions import (
    BroadcastError,
    DeadlineExceededError,
    PollCancelledError,
)
from eve_deploy.logging_config import get_logger
from eve_deploy.node.errors import NodeError, is_not_found_error

if TYPE_CHECKING:
    from eve_deploy.domain.results import BroadcastResult
    from eve_deploy.node.client import TxQuerier

logger = get_logger(__name__)

DEFAULT_POLL_TIMEOUT = 300.0
DEFAULT_POLL_INTERVAL = 1.0


class Clock(Protocol):
    def monotonic(self) -> float:
        ...

    async def sleep(self, seconds: float) -> None:
        ...


class SystemClock:
    def monotonic(self) -> float:
        return time.monotonic()

    async def sleep(self, seconds: float) -> None:
        await asyncio.sleep(seconds)


class PollOutcomeKind(enum.StrEnum):
    FOUND = "found"
    NOT_FOUND_YET = "not_found_yet"
    FATAL = "fatal"


@dataclass(frozen=True)
class PollOutcome:
    kind: PollOutcomeKind
    result: BroadcastResult | None = None
    error: BaseException | None = None

    @classmethod
    def found(cls, result: BroadcastResult) -> PollOutcome:
        return cls(kind=PollOutcomeKind.FOUND, result=result)

    @classmethod
    def not_found_yet(cls) -> PollOutcome:
        return cls(kind=PollOutcomeKind.NOT_FOUND_YET)

    @classmethod
    def fatal(cls, error: BaseException) -> PollOutcome:
        return cls(kind=PollOutcomeKind.FATAL, error=error)


class RetryPoller:
    def __init__(
        self,
        node: TxQuerier,
        timeout: float = DEFAULT_POLL_TIMEOUT,
        interval: float = DEFAULT_POLL_INTERVAL,
        clock: Clock | None = None,
    ) -> None:
        if timeout <= 0 or interval <= 0:
            raise ValueError("poll timeout and interval must be positive")
        self._node = node
        self._timeout = timeout
        self._interval = interval
        self._clock = clock or SystemClock()

    @property
    def timeout(self) -> float:
        return self._timeout

    async def poll(
        self,
        tx_hash: str,
        last_response: BroadcastResult | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> BroadcastResult:
        """Poll the node until the transaction is found.

        Args:
            tx_hash: Hash of the submitted transaction.
            last_response: Last commit response seen, reported back on
                DeadlineExceededError. May be None.
            cancel_event: Setting it aborts the wait immediately.

        Raises:
            DeadlineExceededError: The deadline elapsed first.
            PollCancelledError: cancel_event was set.
            BroadcastError: The query failed with anything but "not found".
        """
        deadline = self._clock.monotonic() + self._timeout
        attempts = 0
        logger.info("poller.start", tx_hash=tx_hash, timeout=self._timeout)

        while True:
            if cancel_event is not None and cancel_event.is_set():
                logger.warning("poller.cancelled", tx_hash=tx_hash, attempts=attempts)
                raise PollCancelledError(tx_hash)

            remaining = deadline - self._clock.monotonic()
            if remaining <= 0:
                logger.warning("poller.deadline_exceeded", tx_hash=tx_hash, attempts=attempts)
                raise DeadlineExceededError(tx_hash, self._timeout, last_response)

            if not await self._wait(min(self._interval, remaining), cancel_event):
                logger.warning("poller.cancelled", tx_hash=tx_hash, attempts=attempts)
                raise PollCancelledError(tx_hash)

            attempts += 1
            outcome = await self._poll_once(tx_hash)

            if outcome.kind is PollOutcomeKind.FOUND:
                logger.info("poller.found", tx_hash=tx_hash, attempts=attempts)
                return outcome.result
            if outcome.kind is PollOutcomeKind.FATAL:
                logger.error("poller.query_failed", tx_hash=tx_hash, error=str(outcome.error))
                raise BroadcastError(
                    f"querying tx {tx_hash} failed: {outcome.error}",
                    tx_hash=tx_hash,
                ) from outcome.error
            logger.debug("poller.not_found_yet", tx_hash=tx_hash, attempt=attempts)

    async def _poll_once(self, tx_hash: str) -> PollOutcome:
        try:
            result = await self._node.query_tx(tx_hash)
        except NodeError as exc:
            if is_not_found_error(exc):
                return PollOutcome.not_found_yet()
            return PollOutcome.fatal(exc)
        return PollOutcome.found(result)

    async def _wait(self, seconds: float, cancel_event: asyncio.Event | None) -> bool:
        """Sleep for the interval. False if cancellation fired first (it wins ties)."""
        if cancel_event is None:
            await self._clock.sleep(seconds)
            return True

        sleeper = asyncio.ensure_future(self._clock.sleep(seconds))
        canceller = asyncio.ensure_future(cancel_event.wait())
        try:
            await asyncio.wait({sleeper, canceller}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            for task in (sleeper, canceller):
                if not task.done():
                    task.cancel()
        return not cancel_event.is_set()

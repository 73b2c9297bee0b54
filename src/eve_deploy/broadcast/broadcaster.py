"""Broadcaster: encode a SignedTx and submit it under an acknowledgement mode.

    ASYNC  fire-and-forget; whatever the node returns immediately
    SYNC   returns once the node accepted the tx into its mempool
    BLOCK  waits for block inclusion; if the node's own wait times out,
           the RetryPoller takes over with the tx hash

A non-zero delivery code is a completed result, not an error. Only BLOCK
mode has post-hoc retry support.
"""

from __future__ import annotations

from dataclasses import replace
from typing import TYPE_CHECKING

from eve_deploy.domain.enums import BroadcastMode
from eve_deploy.domain.exceptions import BroadcastError, RetryableTimeout
from eve_deploy.logging_config import get_logger
from eve_deploy.node.errors import NodeError, NodeErrorKind, classify_node_error
from eve_deploy.tx.encoding import TxEncoder, tx_hash

if TYPE_CHECKING:
    import asyncio

    from eve_deploy.broadcast.poller import RetryPoller
    from eve_deploy.domain.results import BroadcastResult
    from eve_deploy.node.client import NodeClient
    from eve_deploy.tx.models import SignedTx

logger = get_logger(__name__)


class Broadcaster:
    def __init__(
        self,
        node: NodeClient,
        poller: RetryPoller,
        encoder: TxEncoder | None = None,
    ) -> None:
        self._node = node
        self._poller = poller
        self._encoder = encoder or TxEncoder()

    async def broadcast(
        self,
        signed: SignedTx,
        mode: BroadcastMode = BroadcastMode.BLOCK,
        cancel_event: asyncio.Event | None = None,
    ) -> BroadcastResult:
        """Submit the transaction and resolve its outcome.

        Raises:
            EncodingError: The SignedTx could not be encoded.
            BroadcastError: The node rejected the submission or was unreachable.
            DeadlineExceededError / PollCancelledError: From the RetryPoller.
        """
        tx_bytes = self._encoder.encode(signed)
        local_hash = tx_hash(tx_bytes)
        logger.info("broadcast.submitting", tx_hash=local_hash, mode=str(mode))

        try:
            return await self._submit(tx_bytes, local_hash, BroadcastMode(mode))
        except RetryableTimeout as timeout:
            logger.warning("broadcast.timeout_handoff", tx_hash=timeout.tx_hash)
            return await self._poller.poll(
                timeout.tx_hash,
                last_response=None,
                cancel_event=cancel_event,
            )

    async def _submit(self, tx_bytes: bytes, local_hash: str, mode: BroadcastMode) -> BroadcastResult:
        try:
            if mode is BroadcastMode.ASYNC:
                result = await self._node.broadcast_tx_async(tx_bytes)
            elif mode is BroadcastMode.SYNC:
                result = await self._node.broadcast_tx_sync(tx_bytes)
            else:
                result = await self._node.broadcast_tx_commit(tx_bytes)
        except NodeError as exc:
            if mode is BroadcastMode.BLOCK and classify_node_error(exc) is NodeErrorKind.TIMEOUT:
                raise RetryableTimeout(local_hash, str(exc)) from exc
            logger.error("broadcast.failed", tx_hash=local_hash, mode=str(mode), error=str(exc))
            raise BroadcastError(str(exc), tx_hash=local_hash) from exc

        if not result.tx_hash:
            result = replace(result, tx_hash=local_hash)
        logger.info(
            "broadcast.completed",
            tx_hash=result.tx_hash,
            code=result.code,
            height=result.height,
        )
        return result

"""Transaction submission pipeline.

Flow for one submission:
    1. validate messages locally (TxAssembler)
    2. resolve the signing key and the signer's account
    3. estimate gas when the gas setting is "auto" (GasEstimator)
    4. assemble the UnsignedTx (TxAssembler)
    5. ask the operator (ConfirmationGate); a decline ends here
    6. sign (Signer)
    7. broadcast, polling after a block-commit timeout (Broadcaster)

Each run owns its UnsignedTx/SignedTx and its state machine; only the
keyring and the node client are shared between runs. Callers that need
an overall time limit wrap submit() in their own asyncio.timeout().
"""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING

import structlog
from pydantic import BaseModel

from eve_deploy.broadcast.broadcaster import Broadcaster
from eve_deploy.broadcast.poller import RetryPoller
from eve_deploy.domain.enums import BroadcastMode, ConfirmationDecision
from eve_deploy.domain.exceptions import AccountLookupError, TxPipelineError, ValidationError
from eve_deploy.domain.results import AbortedByOperator, BroadcastResult
from eve_deploy.domain.state_machine import SubmissionStateMachine
from eve_deploy.logging_config import get_logger
from eve_deploy.node.client import TendermintRPCClient
from eve_deploy.node.errors import NodeError
from eve_deploy.tx.builder import TxAssembler
from eve_deploy.tx.confirm import ConfirmationGate
from eve_deploy.tx.encoding import TxEncoder
from eve_deploy.tx.gas import GasEstimator
from eve_deploy.tx.signing import Signer

if TYPE_CHECKING:
    import asyncio
    from collections.abc import Iterable

    from eve_deploy.config import Settings
    from eve_deploy.domain.messages import DomainMessage
    from eve_deploy.domain.results import AccountInfo
    from eve_deploy.keyring import KeyInfo
    from eve_deploy.node.client import NodeClient
    from eve_deploy.tx.fees import FeeConfig

logger = get_logger(__name__)

SubmitOutcome = BroadcastResult | AbortedByOperator


class TxPipeline:
    """Reusable submission pipeline bound to one node.

    Usage:
        pipeline = TxPipeline(node)
        outcome = await pipeline.submit(msg, fee_config, skip_confirm=True)
        if isinstance(outcome, AbortedByOperator):
            ...
    """

    def __init__(
        self,
        node: NodeClient,
        *,
        gate: ConfirmationGate | None = None,
        poller: RetryPoller | None = None,
        encoder: TxEncoder | None = None,
        mode: BroadcastMode = BroadcastMode.BLOCK,
    ) -> None:
        self._node = node
        self._mode = BroadcastMode(mode)
        self._encoder = encoder or TxEncoder()
        self._gate = gate or ConfirmationGate(encoder=self._encoder)
        self._poller = poller or RetryPoller(node)
        self._assembler = TxAssembler()
        self._estimator = GasEstimator(node, self._encoder)
        self._broadcaster = Broadcaster(node, self._poller, self._encoder)

    @property
    def node(self) -> NodeClient:
        return self._node

    @property
    def mode(self) -> BroadcastMode:
        """Broadcast mode used when submit() is not given one."""
        return self._mode

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        gate: ConfirmationGate | None = None,
        node: NodeClient | None = None,
    ) -> TxPipeline:
        """Build a pipeline from settings; node overrides the RPC client."""
        if node is None:
            node = TendermintRPCClient(settings.rpc_url, timeout=settings.rpc_timeout_seconds)
        poller = RetryPoller(
            node,
            timeout=settings.broadcast_timeout_seconds,
            interval=settings.broadcast_retry_period_seconds,
        )
        return cls(
            node,
            gate=gate or ConfirmationGate(skip=settings.skip_confirm),
            poller=poller,
            mode=settings.broadcast_mode,
        )

    async def submit(
        self,
        messages: DomainMessage | Iterable[DomainMessage],
        fee_config: FeeConfig,
        mode: BroadcastMode | None = None,
        skip_confirm: bool = False,
        cancel_event: asyncio.Event | None = None,
    ) -> SubmitOutcome:
        """Build, confirm, sign and broadcast one transaction.

        mode defaults to the pipeline's own mode (BLOCK unless configured).

        Returns:
            The BroadcastResult (a non-zero code is still a result), or
            AbortedByOperator if the operator declined.

        Raises:
            TxPipelineError: One of its subclasses, per failing stage.
        """
        with structlog.contextvars.bound_contextvars(submission_id=uuid.uuid4().hex[:12]):
            return await self._run(
                messages,
                fee_config,
                BroadcastMode(mode) if mode is not None else self._mode,
                skip_confirm,
                cancel_event,
            )

    async def _run(
        self,
        messages: DomainMessage | Iterable[DomainMessage],
        fee_config: FeeConfig,
        mode: BroadcastMode,
        skip_confirm: bool,
        cancel_event: asyncio.Event | None,
    ) -> SubmitOutcome:
        if isinstance(messages, BaseModel):
            messages = (messages,)
        messages = self._assembler.validate(messages)

        signer = fee_config.keyring.lookup(fee_config.from_name)
        _check_signers(messages, signer)
        account = await self._lookup_account(fee_config, signer.address)

        gas_limit = fee_config.gas.limit
        if fee_config.gas.simulate:
            gas_limit = await self._estimator.estimate(
                messages, fee_config, signer, account.sequence
            )

        unsigned = self._assembler.build(messages, fee_config, gas_limit, account)
        state = SubmissionStateMachine()

        gate = ConfirmationGate(skip=True) if skip_confirm else self._gate
        if gate.confirm(unsigned) is ConfirmationDecision.DECLINED:
            state.decline()
            logger.info("pipeline.aborted", status=state.status)
            return AbortedByOperator()
        state.approve()

        try:
            signed = Signer(fee_config.keyring, self._encoder).sign(
                unsigned, fee_config.from_name, fee_config.fee_granter
            )
            state.sign()
            state.submit()
            result = await self._broadcaster.broadcast(signed, mode, cancel_event)
        except TxPipelineError as exc:
            state.fail()
            logger.error("pipeline.failed", status=state.status, code=exc.code, error=exc.message)
            raise

        state.settle()
        logger.info("pipeline.finished", status=state.status, **result.to_dict())
        return result

    async def _lookup_account(self, fee_config: FeeConfig, address: str) -> AccountInfo:
        try:
            return await fee_config.account_retriever.get_account(address)
        except NodeError as exc:
            raise AccountLookupError(address, str(exc)) from exc


def _check_signers(messages: tuple[DomainMessage, ...], signer: KeyInfo) -> None:
    for index, message in enumerate(messages):
        if signer.address not in message.signers():
            raise ValidationError(
                f"must be signed by {', '.join(message.signers())}, "
                f"not key {signer.name!r} ({signer.address})",
                index=index,
                msg_type=message.type_url,
            )


async def submit(
    messages: DomainMessage | Iterable[DomainMessage],
    fee_config: FeeConfig,
    *,
    node: NodeClient,
    mode: BroadcastMode | None = None,
    skip_confirm: bool = False,
    gate: ConfirmationGate | None = None,
    poller: RetryPoller | None = None,
    cancel_event: asyncio.Event | None = None,
) -> SubmitOutcome:
    """One-shot entry point: build a TxPipeline for this call and submit."""
    pipeline = TxPipeline(node, gate=gate, poller=poller)
    return await pipeline.submit(
        messages,
        fee_config,
        mode=mode,
        skip_confirm=skip_confirm,
        cancel_event=cancel_event,
    )

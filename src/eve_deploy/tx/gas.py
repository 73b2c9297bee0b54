"""GasEstimator: simulate against the node and scale by the adjustment.

Only used when the gas setting is "auto". A rejected simulation is
surfaced immediately as SimulationError; a malformed message will not
become valid on retry.
"""

from __future__ import annotations

import math
from decimal import Decimal
from typing import TYPE_CHECKING

from eve_deploy.domain.exceptions import SimulationError
from eve_deploy.logging_config import get_logger
from eve_deploy.node.errors import NodeError
from eve_deploy.tx.encoding import TxEncoder

if TYPE_CHECKING:
    from collections.abc import Sequence

    from eve_deploy.domain.messages import DomainMessage
    from eve_deploy.keyring import KeyInfo
    from eve_deploy.node.client import Simulator
    from eve_deploy.tx.fees import FeeConfig

logger = get_logger(__name__)


def adjusted_gas(gas_used: int, adjustment: float) -> int:
    """Scale a simulated estimate, rounding up to a whole gas unit."""
    return math.ceil(Decimal(str(adjustment)) * gas_used)


class GasEstimator:
    def __init__(self, node: Simulator, encoder: TxEncoder | None = None) -> None:
        self._node = node
        self._encoder = encoder or TxEncoder()

    async def estimate(
        self,
        messages: Sequence[DomainMessage],
        fee_config: FeeConfig,
        signer: KeyInfo,
        sequence: int,
    ) -> int:
        """Return the effective gas limit for the given messages.

        Raises:
            SimulationError: If the node rejects the dry run or returns
                a non-positive estimate.
        """
        tx_bytes = self._encoder.encode_for_simulation(
            messages,
            public_key=signer.public_key,
            sequence=sequence,
            memo=fee_config.memo,
        )
        try:
            gas_used = await self._node.simulate(tx_bytes)
        except NodeError as exc:
            logger.warning("gas.simulation_rejected", error=str(exc))
            raise SimulationError(f"simulation failed: {exc}") from exc

        if gas_used <= 0:
            raise SimulationError(f"simulation returned a non-positive gas estimate: {gas_used}")

        gas_limit = adjusted_gas(gas_used, fee_config.gas_adjustment)
        logger.info(
            "gas.estimated",
            gas_used=gas_used,
            adjustment=fee_config.gas_adjustment,
            gas_limit=gas_limit,
        )
        return gas_limit

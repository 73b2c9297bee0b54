"""FeeFactory: turns raw fee/gas inputs into an immutable FeeConfig.

Raw inputs arrive as strings (environment variables, flags) and are
parsed here, once, so every later stage works with typed values:

    gas             "auto" | positive integer | "" (default limit)
    gas_adjustment  non-negative float         | "" (1.0)
    gas_prices      "0.025uakt[,0.1uatom]"     | "" (no fee)

No side effects and no network calls.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import TYPE_CHECKING

from eve_deploy.domain.exceptions import ConfigError
from eve_deploy.domain.messages import Coin, DecCoin

if TYPE_CHECKING:
    from eve_deploy.config import Settings
    from eve_deploy.keyring import KeySource
    from eve_deploy.node.client import AccountRetriever

GAS_AUTO = "auto"
DEFAULT_GAS_LIMIT = 200_000
DEFAULT_GAS_ADJUSTMENT = 1.0


@dataclass(frozen=True)
class GasSetting:
    """Either a fixed gas limit or "simulate and adjust"."""

    simulate: bool
    limit: int = DEFAULT_GAS_LIMIT

    @classmethod
    def parse(cls, value: str | int | None) -> GasSetting:
        if value is None or (isinstance(value, str) and not value.strip()):
            return cls(simulate=False, limit=DEFAULT_GAS_LIMIT)
        if isinstance(value, str) and value.strip().lower() == GAS_AUTO:
            return cls(simulate=True, limit=0)
        if isinstance(value, bool):
            raise ConfigError(f"invalid gas setting {value!r}")
        try:
            limit = int(value)
        except (TypeError, ValueError):
            raise ConfigError(
                f"invalid gas setting {value!r}: expected 'auto' or a positive integer"
            ) from None
        if limit <= 0:
            raise ConfigError(f"invalid gas setting {value!r}: gas limit must be positive")
        return cls(simulate=False, limit=limit)

    def __str__(self) -> str:
        return GAS_AUTO if self.simulate else str(self.limit)


def parse_gas_adjustment(value: str | float | None) -> float:
    if value is None or (isinstance(value, str) and not value.strip()):
        return DEFAULT_GAS_ADJUSTMENT
    if isinstance(value, bool):
        raise ConfigError(f"invalid gas adjustment {value!r}")
    try:
        adjustment = float(value)
    except (TypeError, ValueError):
        raise ConfigError(f"invalid gas adjustment {value!r}: expected a float") from None
    if math.isnan(adjustment) or math.isinf(adjustment) or adjustment < 0:
        raise ConfigError(f"invalid gas adjustment {value!r}: must be a non-negative number")
    return adjustment


def parse_gas_prices(value: str | None) -> tuple[DecCoin, ...]:
    if not value or not value.strip():
        return ()
    prices = []
    for part in value.split(","):
        try:
            prices.append(DecCoin.parse(part))
        except ValueError:
            raise ConfigError(f"invalid gas prices {value!r}") from None
    denoms = [price.denom for price in prices]
    if len(set(denoms)) != len(denoms):
        raise ConfigError(f"invalid gas prices {value!r}: duplicate denomination")
    return tuple(prices)


def fee_for_gas(prices: tuple[DecCoin, ...], gas_limit: int) -> tuple[Coin, ...]:
    """Fee amounts owed for a gas limit, rounded up per denomination."""
    return tuple(
        Coin(denom=price.denom, amount=math.ceil(price.amount * gas_limit))
        for price in prices
    )


@dataclass(frozen=True)
class FeeConfig:
    """Signing and fee parameters shared by every later pipeline stage.

    Attributes:
        chain_id: Chain the transaction is signed for.
        gas: Fixed limit, or simulate-and-adjust.
        gas_adjustment: Multiplier on the simulated estimate; ignored
            unless gas.simulate is set.
        gas_prices: Parsed prices; the fee is price * gas limit.
        gas_prices_raw: The original string, kept for display.
        account_retriever: Looks up account number and sequence.
        keyring: Key source holding from_name.
        from_name: Name of the signing key.
        fee_granter: Optional account paying fees on the signer's behalf.
        memo: Free-form transaction memo.
    """

    chain_id: str
    gas: GasSetting
    gas_adjustment: float
    gas_prices: tuple[DecCoin, ...]
    gas_prices_raw: str
    account_retriever: AccountRetriever
    keyring: KeySource
    from_name: str
    fee_granter: str | None = None
    memo: str = ""


class FeeFactory:
    """Builds FeeConfig instances from raw inputs.

    Usage:
        fee_config = FeeFactory.create(
            gas="auto", gas_adjustment="1.5", gas_prices="0.025uakt",
            chain_id="akashnet-2", account_retriever=node,
            keyring=keyring, from_name="deploy",
        )
    """

    @staticmethod
    def create(
        *,
        gas: str | int | None,
        gas_adjustment: str | float | None,
        gas_prices: str | None,
        chain_id: str,
        account_retriever: AccountRetriever,
        keyring: KeySource,
        from_name: str,
        fee_granter: str | None = None,
        memo: str = "",
    ) -> FeeConfig:
        """Parse and validate raw inputs.

        Raises:
            ConfigError: If any input cannot be parsed.
        """
        if not chain_id or not chain_id.strip():
            raise ConfigError("chain id must not be empty")
        if not from_name:
            raise ConfigError("signing key name must not be empty")

        return FeeConfig(
            chain_id=chain_id.strip(),
            gas=GasSetting.parse(gas),
            gas_adjustment=parse_gas_adjustment(gas_adjustment),
            gas_prices=parse_gas_prices(gas_prices),
            gas_prices_raw=gas_prices or "",
            account_retriever=account_retriever,
            keyring=keyring,
            from_name=from_name,
            fee_granter=fee_granter or None,
            memo=memo,
        )

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        account_retriever: AccountRetriever,
        keyring: KeySource,
    ) -> FeeConfig:
        return cls.create(
            gas=settings.gas,
            gas_adjustment=settings.gas_adjustment,
            gas_prices=settings.gas_prices,
            chain_id=settings.chain_id,
            account_retriever=account_retriever,
            keyring=keyring,
            from_name=settings.from_name,
            fee_granter=settings.fee_granter,
        )

"""TxAssembler: validated domain messages + FeeConfig -> UnsignedTx.

Structural validation runs locally and synchronously; no network call is
made for a transaction whose messages are invalid.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING

from eve_deploy.domain.address import is_valid_address
from eve_deploy.domain.exceptions import TxFrozenError, ValidationError
from eve_deploy.logging_config import get_logger
from eve_deploy.tx.fees import fee_for_gas
from eve_deploy.tx.models import Fee

if TYPE_CHECKING:
    from eve_deploy.domain.messages import DomainMessage
    from eve_deploy.domain.results import AccountInfo
    from eve_deploy.tx.fees import FeeConfig

logger = get_logger(__name__)


class UnsignedTx:
    """Append-only envelope for one submission.

    Owned by a single pipeline run. The Signer seals it; after that any
    mutation raises TxFrozenError and a fresh UnsignedTx must be built.
    """

    def __init__(
        self,
        *,
        chain_id: str,
        account_number: int,
        sequence: int,
        fee: Fee,
        memo: str = "",
        messages: Iterable[DomainMessage] = (),
    ) -> None:
        self.chain_id = chain_id
        self.account_number = account_number
        self.sequence = sequence
        self._fee = fee
        self._memo = memo
        self._messages: list[DomainMessage] = list(messages)
        self._sealed = False

    @property
    def messages(self) -> tuple[DomainMessage, ...]:
        return tuple(self._messages)

    @property
    def fee(self) -> Fee:
        return self._fee

    @property
    def memo(self) -> str:
        return self._memo

    @property
    def is_sealed(self) -> bool:
        return self._sealed

    def add_message(self, message: DomainMessage) -> None:
        self._check_open()
        self._messages.append(message)

    def set_memo(self, memo: str) -> None:
        self._check_open()
        self._memo = memo

    def set_fee_granter(self, granter: str | None) -> None:
        self._check_open()
        if granter and not is_valid_address(granter):
            raise ValidationError(f"fee granter {granter!r} is not a valid account address")
        self._fee = self._fee.model_copy(update={"granter": granter or None})

    def seal(self) -> None:
        self._check_open()
        self._sealed = True

    def _check_open(self) -> None:
        if self._sealed:
            raise TxFrozenError()

    def __repr__(self) -> str:
        return (
            f"UnsignedTx(chain_id={self.chain_id!r}, messages={len(self._messages)}, "
            f"gas_limit={self._fee.gas_limit}, sealed={self._sealed})"
        )


class TxAssembler:
    """Builds UnsignedTx envelopes."""

    @staticmethod
    def validate(messages: Iterable[DomainMessage]) -> tuple[DomainMessage, ...]:
        """Run validate_basic() on each message.

        Raises:
            ValidationError: Naming the index and type of the first invalid message.
        """
        messages = tuple(messages)
        if not messages:
            raise ValidationError("transaction must contain at least one message")
        for index, message in enumerate(messages):
            try:
                message.validate_basic()
            except ValidationError as exc:
                raise exc.at(index, message.type_url) from None
        return messages

    def build(
        self,
        messages: Iterable[DomainMessage],
        fee_config: FeeConfig,
        gas_limit: int,
        account: AccountInfo,
    ) -> UnsignedTx:
        """Assemble an UnsignedTx with the effective gas limit and its fee."""
        messages = self.validate(messages)
        if gas_limit <= 0:
            raise ValidationError(f"gas limit must be positive, got {gas_limit}")

        fee = Fee(amount=fee_for_gas(fee_config.gas_prices, gas_limit), gas_limit=gas_limit)
        unsigned = UnsignedTx(
            chain_id=fee_config.chain_id,
            account_number=account.account_number,
            sequence=account.sequence,
            fee=fee,
            memo=fee_config.memo,
            messages=messages,
        )
        logger.info(
            "tx.assembled",
            messages=len(messages),
            gas_limit=gas_limit,
            fee=",".join(str(c) for c in fee.amount),
            sequence=account.sequence,
        )
        return unsigned

"""Signer: attaches exactly one signature to an UnsignedTx."""

from __future__ import annotations

from typing import TYPE_CHECKING

from eve_deploy.logging_config import get_logger
from eve_deploy.tx.encoding import TxEncoder

if TYPE_CHECKING:
    from eve_deploy.keyring import KeySource
    from eve_deploy.tx.builder import UnsignedTx
    from eve_deploy.tx.models import SignedTx

logger = get_logger(__name__)


class Signer:
    def __init__(self, keyring: KeySource, encoder: TxEncoder | None = None) -> None:
        self._keyring = keyring
        self._encoder = encoder or TxEncoder()

    def sign(
        self,
        unsigned: UnsignedTx,
        key_name: str,
        fee_granter: str | None = None,
    ) -> SignedTx:
        """Sign with the named key and freeze the transaction.

        The key is resolved before anything is mutated, so a missing or
        locked key leaves the UnsignedTx untouched.

        Raises:
            SigningError: Missing key or locked keyring.
            TxFrozenError: The transaction was already signed.
        """
        key = self._keyring.lookup(key_name)
        if fee_granter is not None:
            unsigned.set_fee_granter(fee_granter)
        unsigned.seal()

        signature = self._keyring.sign(key_name, self._encoder.sign_bytes(unsigned))
        signed = self._encoder.assemble(unsigned, key.public_key, signature)
        logger.info(
            "tx.signed",
            key=key_name,
            signer=key.address,
            fee_granter=signed.fee.granter,
        )
        return signed

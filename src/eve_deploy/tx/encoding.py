"""Transaction codec.

Canonical form is compact JSON with sorted keys, so the same transaction
always produces the same bytes (and therefore the same hash). Three
representations are produced here:

    sign bytes   what the signature covers (chain id, account number,
                 sequence, fee, memo, messages)
    wire bytes   the SignedTx submitted to the node
    preview      indented JSON of an UnsignedTx for the operator
"""

from __future__ import annotations

import base64
import hashlib
import json
from typing import TYPE_CHECKING

import pydantic

from eve_deploy.domain.exceptions import EncodingError
from eve_deploy.tx.models import AuthInfo, Fee, SignedTx, SignerInfo, TxBody

if TYPE_CHECKING:
    from collections.abc import Iterable

    from eve_deploy.domain.messages import DomainMessage
    from eve_deploy.tx.builder import UnsignedTx


def _canonical(payload: object) -> bytes:
    return json.dumps(payload, sort_keys=True, separators=(",", ":")).encode("utf-8")


def _dump_messages(messages: Iterable[DomainMessage]) -> list[dict]:
    return [message.model_dump(mode="json", by_alias=True) for message in messages]


def tx_hash(tx_bytes: bytes) -> str:
    """Node-style transaction hash: upper-case hex sha256 of the wire bytes."""
    return hashlib.sha256(tx_bytes).hexdigest().upper()


class TxEncoder:
    """Encodes and decodes transactions in the node's wire format."""

    def sign_bytes(self, unsigned: UnsignedTx) -> bytes:
        return _canonical(
            {
                "account_number": str(unsigned.account_number),
                "chain_id": unsigned.chain_id,
                "fee": unsigned.fee.model_dump(mode="json", by_alias=True),
                "memo": unsigned.memo,
                "msgs": _dump_messages(unsigned.messages),
                "sequence": str(unsigned.sequence),
            }
        )

    def assemble(self, unsigned: UnsignedTx, public_key: bytes, signature: bytes) -> SignedTx:
        """Attach a signature to an UnsignedTx, producing the frozen SignedTx."""
        try:
            return SignedTx(
                body=TxBody(messages=unsigned.messages, memo=unsigned.memo),
                auth_info=AuthInfo(
                    signer_infos=(
                        SignerInfo(
                            public_key=base64.b64encode(public_key).decode("ascii"),
                            sequence=unsigned.sequence,
                        ),
                    ),
                    fee=unsigned.fee,
                ),
                signatures=(base64.b64encode(signature).decode("ascii"),),
            )
        except pydantic.ValidationError as exc:
            raise EncodingError(f"cannot assemble signed transaction: {exc}") from exc

    def encode(self, signed: SignedTx) -> bytes:
        try:
            return _canonical(signed.model_dump(mode="json", by_alias=True))
        except (TypeError, ValueError) as exc:
            raise EncodingError(f"cannot encode transaction: {exc}") from exc

    def decode(self, tx_bytes: bytes) -> SignedTx:
        try:
            return SignedTx.model_validate_json(tx_bytes)
        except pydantic.ValidationError as exc:
            raise EncodingError(f"cannot decode transaction: {exc}") from exc

    def encode_for_simulation(
        self,
        messages: Iterable[DomainMessage],
        public_key: bytes,
        sequence: int,
        memo: str = "",
    ) -> bytes:
        """Wire bytes for a dry run: real messages and signer, empty signature."""
        try:
            simulated = SignedTx(
                body=TxBody(messages=tuple(messages), memo=memo),
                auth_info=AuthInfo(
                    signer_infos=(
                        SignerInfo(
                            public_key=base64.b64encode(public_key).decode("ascii"),
                            sequence=sequence,
                        ),
                    ),
                    fee=Fee(gas_limit=0),
                ),
                signatures=("",),
            )
        except pydantic.ValidationError as exc:
            raise EncodingError(f"cannot build simulation transaction: {exc}") from exc
        return self.encode(simulated)

    def to_json(self, unsigned: UnsignedTx) -> str:
        """Readable preview of an unsigned transaction."""
        return json.dumps(
            {
                "body": {
                    "messages": _dump_messages(unsigned.messages),
                    "memo": unsigned.memo,
                },
                "auth_info": {
                    "fee": unsigned.fee.model_dump(mode="json", by_alias=True),
                },
                "chain_id": unsigned.chain_id,
                "account_number": str(unsigned.account_number),
                "sequence": str(unsigned.sequence),
            },
            indent=2,
        )

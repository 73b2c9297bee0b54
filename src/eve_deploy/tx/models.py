"""Wire-level transaction models.

SignedTx mirrors the node's transaction layout (body, auth_info,
signatures). It is frozen: once a signature is attached, the messages
and fee metadata cannot change.
"""

from __future__ import annotations

from pydantic import field_serializer, model_validator

from eve_deploy.domain.messages import Coin, DomainMessage, FrozenModel


class Fee(FrozenModel):
    amount: tuple[Coin, ...] = ()
    gas_limit: int
    granter: str | None = None

    @field_serializer("gas_limit")
    def _gas_as_string(self, gas_limit: int) -> str:
        return str(gas_limit)


class TxBody(FrozenModel):
    messages: tuple[DomainMessage, ...]
    memo: str = ""


class SignerInfo(FrozenModel):
    """Signer public key (base64 ed25519) and the sequence it signed at."""

    public_key: str
    sequence: int

    @field_serializer("sequence")
    def _sequence_as_string(self, sequence: int) -> str:
        return str(sequence)


class AuthInfo(FrozenModel):
    signer_infos: tuple[SignerInfo, ...]
    fee: Fee


class SignedTx(FrozenModel):
    body: TxBody
    auth_info: AuthInfo
    signatures: tuple[str, ...]

    @model_validator(mode="after")
    def _exactly_one_signer(self) -> SignedTx:
        if len(self.signatures) != 1 or len(self.auth_info.signer_infos) != 1:
            raise ValueError("a transaction carries exactly one signer and one signature")
        if not self.body.messages:
            raise ValueError("a transaction carries at least one message")
        return self

    @property
    def messages(self) -> tuple[DomainMessage, ...]:
        return self.body.messages

    @property
    def fee(self) -> Fee:
        return self.auth_info.fee

    @property
    def signature(self) -> str:
        return self.signatures[0]

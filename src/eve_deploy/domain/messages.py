"""Domain messages carried inside a transaction.

These pydantic models are immutable once constructed. Type checking
happens at construction; the ledger's structural rules (non-empty groups,
positive deposit, well-formed addresses, ...) are enforced by
validate_basic(), which the TxAssembler runs before a message is
included in a transaction.

On the wire every message carries its type URL under "@type", which is
what DomainMessage discriminates on when decoding.
"""

from __future__ import annotations

import re
from decimal import Decimal, InvalidOperation
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, field_serializer

from eve_deploy.domain.address import is_valid_address
from eve_deploy.domain.exceptions import ValidationError

MAX_UINT64 = 2**64 - 1
VERSION_LENGTH = 32  # sha256 of the deployment manifest

_DENOM_RE = re.compile(r"^[a-zA-Z][a-zA-Z0-9/:._-]{2,127}$")
_COIN_RE = re.compile(r"^\s*([0-9]+(?:\.[0-9]+)?)\s*([a-zA-Z][a-zA-Z0-9/:._-]{2,127})\s*$")


def is_valid_denom(denom: str) -> bool:
    return bool(_DENOM_RE.match(denom))


class FrozenModel(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid")


# ---------------------------------------------------------------------------
# Coins
# ---------------------------------------------------------------------------


class Coin(FrozenModel):
    """An integer amount of a denomination, e.g. 5000000uakt."""

    denom: str
    amount: int

    @field_serializer("amount")
    def _amount_as_string(self, amount: int) -> str:
        return str(amount)

    @classmethod
    def parse(cls, value: str) -> Coin:
        """Parse "<int><denom>". Raises ValueError on malformed input."""
        match = _COIN_RE.match(value or "")
        if match is None or "." in match.group(1):
            raise ValueError(f"invalid coin expression: {value!r}")
        return cls(denom=match.group(2), amount=int(match.group(1)))

    def __str__(self) -> str:
        return f"{self.amount}{self.denom}"


class DecCoin(FrozenModel):
    """A decimal amount of a denomination, e.g. 0.025uakt (used for prices)."""

    denom: str
    amount: Decimal

    @field_serializer("amount")
    def _amount_as_string(self, amount: Decimal) -> str:
        return format(amount, "f")

    @classmethod
    def parse(cls, value: str) -> DecCoin:
        match = _COIN_RE.match(value or "")
        if match is None:
            raise ValueError(f"invalid decimal coin expression: {value!r}")
        try:
            amount = Decimal(match.group(1))
        except InvalidOperation as exc:
            raise ValueError(f"invalid decimal coin expression: {value!r}") from exc
        return cls(denom=match.group(2), amount=amount)

    def __str__(self) -> str:
        return f"{format(self.amount, 'f')}{self.denom}"


# ---------------------------------------------------------------------------
# Deployment building blocks
# ---------------------------------------------------------------------------


class DeploymentID(FrozenModel):
    owner: str
    dseq: int

    def validate_basic(self) -> None:
        if not is_valid_address(self.owner):
            raise ValidationError(f"owner {self.owner!r} is not a valid account address")
        if not 0 < self.dseq <= MAX_UINT64:
            raise ValidationError(f"dseq must be a non-zero uint64, got {self.dseq}")


class ResourceUnits(FrozenModel):
    cpu_millis: int
    memory_bytes: int
    storage_bytes: int = 0


class Resource(FrozenModel):
    units: ResourceUnits
    count: int
    price: DecCoin


class PlacementRequirements(FrozenModel):
    signed_by_all_of: tuple[str, ...] = ()
    signed_by_any_of: tuple[str, ...] = ()
    attributes: tuple[tuple[str, str], ...] = ()


class GroupSpec(FrozenModel):
    name: str
    requirements: PlacementRequirements = PlacementRequirements()
    resources: tuple[Resource, ...]

    def validate_basic(self) -> None:
        if not self.name.strip():
            raise ValidationError("group name must not be empty")
        if not self.resources:
            raise ValidationError(f"group {self.name!r} has no resources")
        for resource in self.resources:
            if resource.count <= 0:
                raise ValidationError(f"group {self.name!r}: resource count must be positive")
            if resource.units.cpu_millis <= 0 or resource.units.memory_bytes <= 0:
                raise ValidationError(
                    f"group {self.name!r}: cpu and memory must be positive"
                )
            if resource.units.storage_bytes < 0:
                raise ValidationError(f"group {self.name!r}: storage must not be negative")
            if not is_valid_denom(resource.price.denom) or resource.price.amount < 0:
                raise ValidationError(f"group {self.name!r}: invalid price {resource.price}")
        for address in self.requirements.signed_by_all_of + self.requirements.signed_by_any_of:
            if not is_valid_address(address):
                raise ValidationError(
                    f"group {self.name!r}: invalid auditor address {address!r}"
                )


def _validate_version(version: str) -> None:
    try:
        raw = bytes.fromhex(version)
    except ValueError:
        raise ValidationError("version must be hex encoded") from None
    if len(raw) != VERSION_LENGTH:
        raise ValidationError(f"version must be {VERSION_LENGTH} bytes, got {len(raw)}")


# ---------------------------------------------------------------------------
# Messages
# ---------------------------------------------------------------------------


class MsgCreateDeployment(FrozenModel):
    type_url: Literal["/akash.deployment.v1beta2.MsgCreateDeployment"] = Field(
        default="/akash.deployment.v1beta2.MsgCreateDeployment",
        alias="@type",
    )
    id: DeploymentID
    groups: tuple[GroupSpec, ...]
    version: str
    deposit: Coin
    depositor: str

    def validate_basic(self) -> None:
        self.id.validate_basic()
        if not self.groups:
            raise ValidationError("deployment must have at least one group")
        for group in self.groups:
            group.validate_basic()
        _validate_version(self.version)
        if not is_valid_denom(self.deposit.denom) or self.deposit.amount <= 0:
            raise ValidationError(f"deposit must be positive, got {self.deposit}")
        if not is_valid_address(self.depositor):
            raise ValidationError(f"depositor {self.depositor!r} is not a valid account address")

    def signers(self) -> tuple[str, ...]:
        return (self.id.owner,)


class MsgUpdateDeployment(FrozenModel):
    type_url: Literal["/akash.deployment.v1beta2.MsgUpdateDeployment"] = Field(
        default="/akash.deployment.v1beta2.MsgUpdateDeployment",
        alias="@type",
    )
    id: DeploymentID
    version: str

    def validate_basic(self) -> None:
        self.id.validate_basic()
        _validate_version(self.version)

    def signers(self) -> tuple[str, ...]:
        return (self.id.owner,)


class MsgCloseDeployment(FrozenModel):
    type_url: Literal["/akash.deployment.v1beta2.MsgCloseDeployment"] = Field(
        default="/akash.deployment.v1beta2.MsgCloseDeployment",
        alias="@type",
    )
    id: DeploymentID

    def validate_basic(self) -> None:
        self.id.validate_basic()

    def signers(self) -> tuple[str, ...]:
        return (self.id.owner,)


DomainMessage = Annotated[
    MsgCreateDeployment | MsgUpdateDeployment | MsgCloseDeployment,
    Field(discriminator="type_url"),
]

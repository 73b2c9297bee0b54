"""Tests for domain messages and their structural validation."""

from __future__ import annotations

from decimal import Decimal

import pydantic
import pytest

from eve_deploy.domain.exceptions import ValidationError
from eve_deploy.domain.messages import (
    Coin,
    DecCoin,
    DeploymentID,
    GroupSpec,
    MsgCloseDeployment,
    MsgCreateDeployment,
    MsgUpdateDeployment,
    PlacementRequirements,
    Resource,
    ResourceUnits,
)


class TestCoin:
    def test_parse(self) -> None:
        coin = Coin.parse("5000000uakt")
        assert coin == Coin(denom="uakt", amount=5_000_000)
        assert str(coin) == "5000000uakt"

    @pytest.mark.parametrize("value", ["", "uakt", "5", "1.5uakt", "-3uakt", "5 u"])
    def test_parse_rejects(self, value: str) -> None:
        with pytest.raises(ValueError):
            Coin.parse(value)

    def test_amount_serialized_as_string(self) -> None:
        assert Coin(denom="uakt", amount=7).model_dump() == {"denom": "uakt", "amount": "7"}

    def test_frozen(self) -> None:
        coin = Coin(denom="uakt", amount=1)
        with pytest.raises(pydantic.ValidationError):
            coin.amount = 2


class TestDecCoin:
    def test_parse(self) -> None:
        coin = DecCoin.parse("0.025uakt")
        assert coin.amount == Decimal("0.025")
        assert str(coin) == "0.025uakt"

    def test_parse_integer_amount(self) -> None:
        assert DecCoin.parse("1uakt").amount == Decimal(1)

    def test_parse_rejects(self) -> None:
        with pytest.raises(ValueError):
            DecCoin.parse("cheap")


class TestDeploymentID:
    def test_valid(self, owner: str) -> None:
        DeploymentID(owner=owner, dseq=1).validate_basic()

    def test_bad_owner(self) -> None:
        with pytest.raises(ValidationError, match="owner"):
            DeploymentID(owner="akash1bogus", dseq=1).validate_basic()

    @pytest.mark.parametrize("dseq", [0, -1, 2**64])
    def test_bad_dseq(self, owner: str, dseq: int) -> None:
        with pytest.raises(ValidationError, match="dseq"):
            DeploymentID(owner=owner, dseq=dseq).validate_basic()


class TestGroupSpec:
    def test_valid(self, group: GroupSpec) -> None:
        group.validate_basic()

    def test_empty_name(self, group: GroupSpec) -> None:
        with pytest.raises(ValidationError, match="name"):
            group.model_copy(update={"name": "  "}).validate_basic()

    def test_no_resources(self, group: GroupSpec) -> None:
        with pytest.raises(ValidationError, match="no resources"):
            group.model_copy(update={"resources": ()}).validate_basic()

    def test_zero_count(self, group: GroupSpec) -> None:
        resource = group.resources[0].model_copy(update={"count": 0})
        with pytest.raises(ValidationError, match="count"):
            group.model_copy(update={"resources": (resource,)}).validate_basic()

    def test_zero_cpu(self) -> None:
        group = GroupSpec(
            name="g",
            resources=(
                Resource(
                    units=ResourceUnits(cpu_millis=0, memory_bytes=1),
                    count=1,
                    price=DecCoin(denom="uakt", amount=Decimal(1)),
                ),
            ),
        )
        with pytest.raises(ValidationError, match="cpu"):
            group.validate_basic()

    def test_invalid_auditor(self, group: GroupSpec) -> None:
        requirements = PlacementRequirements(signed_by_any_of=("nope",))
        with pytest.raises(ValidationError, match="auditor"):
            group.model_copy(update={"requirements": requirements}).validate_basic()


class TestMsgCreateDeployment:
    def test_valid(self, create_msg: MsgCreateDeployment) -> None:
        create_msg.validate_basic()
        assert create_msg.signers() == (create_msg.id.owner,)

    def test_no_groups(self, create_msg: MsgCreateDeployment) -> None:
        with pytest.raises(ValidationError, match="at least one group"):
            create_msg.model_copy(update={"groups": ()}).validate_basic()

    def test_zero_deposit(self, create_msg: MsgCreateDeployment) -> None:
        deposit = Coin(denom="uakt", amount=0)
        with pytest.raises(ValidationError, match="deposit"):
            create_msg.model_copy(update={"deposit": deposit}).validate_basic()

    @pytest.mark.parametrize("version", ["", "zz" * 32, "ab" * 31])
    def test_bad_version(self, create_msg: MsgCreateDeployment, version: str) -> None:
        with pytest.raises(ValidationError, match="version"):
            create_msg.model_copy(update={"version": version}).validate_basic()

    def test_bad_depositor(self, create_msg: MsgCreateDeployment) -> None:
        with pytest.raises(ValidationError, match="depositor"):
            create_msg.model_copy(update={"depositor": "x"}).validate_basic()

    def test_type_url_alias(self, create_msg: MsgCreateDeployment) -> None:
        dumped = create_msg.model_dump(by_alias=True)
        assert dumped["@type"] == "/akash.deployment.v1beta2.MsgCreateDeployment"


class TestOtherMessages:
    def test_update(self, owner: str) -> None:
        msg = MsgUpdateDeployment(id=DeploymentID(owner=owner, dseq=9), version="ab" * 32)
        msg.validate_basic()
        assert msg.signers() == (owner,)

    def test_update_bad_version(self, owner: str) -> None:
        msg = MsgUpdateDeployment(id=DeploymentID(owner=owner, dseq=9), version="ab")
        with pytest.raises(ValidationError, match="32 bytes"):
            msg.validate_basic()

    def test_close(self, owner: str) -> None:
        msg = MsgCloseDeployment(id=DeploymentID(owner=owner, dseq=9))
        msg.validate_basic()
        assert msg.signers() == (owner,)

    def test_close_bad_dseq(self, owner: str) -> None:
        with pytest.raises(ValidationError):
            MsgCloseDeployment(id=DeploymentID(owner=owner, dseq=0)).validate_basic()

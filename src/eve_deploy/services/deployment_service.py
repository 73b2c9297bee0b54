"""Deployment message helpers.

Builds the deployment messages the deploy commands submit. The caller
resolves values such as the dseq from its own state store; nothing here
reads files or talks to the node.
"""

from __future__ import annotations

import hashlib
import secrets
from typing import TYPE_CHECKING

from eve_deploy.domain.messages import (
    MAX_UINT64,
    Coin,
    DeploymentID,
    MsgCloseDeployment,
    MsgCreateDeployment,
    MsgUpdateDeployment,
)
from eve_deploy.logging_config import get_logger

if TYPE_CHECKING:
    from collections.abc import Iterable

    from eve_deploy.domain.messages import GroupSpec

logger = get_logger(__name__)

DEFAULT_DEPOSIT = "5000000uakt"


def new_dseq() -> int:
    """Random non-zero uint64 deployment sequence."""
    return secrets.randbelow(MAX_UINT64) + 1


def manifest_version(manifest: bytes) -> str:
    """Version of a deployment manifest: hex sha256 of its bytes."""
    return hashlib.sha256(manifest).hexdigest()


def new_create_deployment_msg(
    owner: str,
    groups: Iterable[GroupSpec],
    version: str,
    deposit: str | Coin = DEFAULT_DEPOSIT,
    dseq: int | None = None,
    depositor: str | None = None,
) -> MsgCreateDeployment:
    """Build a MsgCreateDeployment. A random dseq is chosen when none is given.

    Raises:
        ValueError: If the deposit expression cannot be parsed.
    """
    deployment_id = DeploymentID(owner=owner, dseq=dseq if dseq is not None else new_dseq())
    msg = MsgCreateDeployment(
        id=deployment_id,
        groups=tuple(groups),
        version=version,
        deposit=deposit if isinstance(deposit, Coin) else Coin.parse(deposit),
        depositor=depositor or owner,
    )
    logger.debug("deployment.create_msg", owner=owner, dseq=deployment_id.dseq, groups=len(msg.groups))
    return msg


def new_update_deployment_msg(owner: str, dseq: int, version: str) -> MsgUpdateDeployment:
    return MsgUpdateDeployment(id=DeploymentID(owner=owner, dseq=dseq), version=version)


def new_close_deployment_msg(owner: str, dseq: int) -> MsgCloseDeployment:
    return MsgCloseDeployment(id=DeploymentID(owner=owner, dseq=dseq))

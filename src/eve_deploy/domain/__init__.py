"""Domain layer: messages, results, errors. No network or I/O."""

from eve_deploy.domain.enums import (
    BroadcastMode,
    ConfirmationDecision,
    SubmissionStatus,
)
from eve_deploy.domain.exceptions import (
    ConfigError,
    DeadlineExceededError,
    TxPipelineError,
    ValidationError,
)
from eve_deploy.domain.messages import (
    Coin,
    DecCoin,
    DeploymentID,
    DomainMessage,
    GroupSpec,
    MsgCloseDeployment,
    MsgCreateDeployment,
    MsgUpdateDeployment,
)
from eve_deploy.domain.results import AbortedByOperator, AccountInfo, BroadcastResult
from eve_deploy.domain.state_machine import SubmissionStateMachine

__all__ = [
    "BroadcastMode",
    "ConfirmationDecision",
    "SubmissionStatus",
    "ConfigError",
    "DeadlineExceededError",
    "TxPipelineError",
    "ValidationError",
    "Coin",
    "DecCoin",
    "DeploymentID",
    "DomainMessage",
    "GroupSpec",
    "MsgCloseDeployment",
    "MsgCreateDeployment",
    "MsgUpdateDeployment",
    "AbortedByOperator",
    "AccountInfo",
    "BroadcastResult",
    "SubmissionStateMachine",
]

"""Transaction submission and confirmation pipeline for deployments."""

from eve_deploy.domain.enums import BroadcastMode
from eve_deploy.domain.results import AbortedByOperator, BroadcastResult
from eve_deploy.keyring import Keyring
from eve_deploy.pipeline import TxPipeline, submit
from eve_deploy.tx.fees import FeeConfig, FeeFactory

__version__ = "0.1.0"

__all__ = [
    "AbortedByOperator",
    "BroadcastMode",
    "BroadcastResult",
    "FeeConfig",
    "FeeFactory",
    "Keyring",
    "TxPipeline",
    "submit",
]

"""Transaction construction: fees, gas, assembly, confirmation, signing, codec."""

from eve_deploy.tx.builder import TxAssembler, UnsignedTx
from eve_deploy.tx.confirm import ConfirmationGate
from eve_deploy.tx.encoding import TxEncoder, tx_hash
from eve_deploy.tx.fees import FeeConfig, FeeFactory, GasSetting
from eve_deploy.tx.gas import GasEstimator
from eve_deploy.tx.models import Fee, SignedTx
from eve_deploy.tx.signing import Signer

__all__ = [
    "ConfirmationGate",
    "Fee",
    "FeeConfig",
    "FeeFactory",
    "GasEstimator",
    "GasSetting",
    "SignedTx",
    "Signer",
    "TxAssembler",
    "TxEncoder",
    "UnsignedTx",
    "tx_hash",
]

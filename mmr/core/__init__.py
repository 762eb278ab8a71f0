"""MMR core: node log, peak arithmetic, engines, proofs and storage"""
from mmr.core.errors import (
    MMRError,
    AppendOverflow,
    IndexOutOfRange,
    ProofError,
    ProofMalformed,
    ProofVerificationFailed,
    RootMismatch,
)
from mmr.core.node_log import Node, NodeLog
from mmr.core.config import MMRConfig, load_config
from mmr.core.proof import Proof, VerifyStatus, verify, verify_or_raise, verify_leaf_data, bag_peaks
from mmr.core.engine import BaseMMR, EagerMMR, LazyMMR, create_mmr

__all__ = [
    "MMRError",
    "AppendOverflow",
    "IndexOutOfRange",
    "ProofError",
    "ProofMalformed",
    "ProofVerificationFailed",
    "RootMismatch",
    "Node",
    "NodeLog",
    "MMRConfig",
    "load_config",
    "Proof",
    "VerifyStatus",
    "verify",
    "verify_or_raise",
    "verify_leaf_data",
    "bag_peaks",
    "BaseMMR",
    "EagerMMR",
    "LazyMMR",
    "create_mmr",
]

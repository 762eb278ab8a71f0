"""Leaf-inclusion proofs: record, codecs and stateless verification"""
from mmr.core.proof.proof import Proof
from mmr.core.proof.schema import ProofDocument
from mmr.core.proof.verifier import (
    VerifyStatus,
    bag_peaks,
    recompute_peak,
    check_structure,
    verify,
    verify_or_raise,
    verify_leaf_data,
)

__all__ = [
    "Proof",
    "ProofDocument",
    "VerifyStatus",
    "bag_peaks",
    "recompute_peak",
    "check_structure",
    "verify",
    "verify_or_raise",
    "verify_leaf_data",
]

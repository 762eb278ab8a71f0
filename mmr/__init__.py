"""
Merkle Mountain Range engine

An append-only authenticated log:
- Append content as leaves, merging equal-height trees as it goes
- Bag the peaks into one short root
- Prove and verify that a leaf sits at a given index under a root
- Eager and lazy engine variants, pluggable hashers (SHA-256, Keccak-256, Poseidon)
"""
from mmr.core import (
    MMRError,
    AppendOverflow,
    IndexOutOfRange,
    ProofMalformed,
    ProofVerificationFailed,
    RootMismatch,
    MMRConfig,
    load_config,
    Proof,
    VerifyStatus,
    verify,
    verify_or_raise,
    EagerMMR,
    LazyMMR,
    create_mmr,
)
from mmr.crypto import get_hasher, Sha256Hasher, Keccak256Hasher, PoseidonHasher

__version__ = "0.1.0"

"""
Cryptographic primitives for the MMR engine.

This module provides:
- Byte hashing functions (SHA-256, Keccak-256)
- Hex helpers used by the JSON proof form
- The pluggable hashers an engine is built with (SHA-256, Keccak-256, Poseidon)

Design Notes:
-------------
SHA-256 is the default for logs that are only verified off-chain.
Keccak-256 matches EVM conventions for on-chain verifiers.
Poseidon is used when inclusion proofs are checked inside an arithmetic
circuit, where a bit-oriented hash would be far too expensive.
"""

import hashlib

from Crypto.Hash import keccak


# =============================================================================
# Hashing
# =============================================================================


def sha256(data: bytes) -> bytes:
    """Compute SHA-256 hash."""
    return hashlib.sha256(data).digest()


def keccak256(data: bytes) -> bytes:
    """
    Compute Keccak-256 hash (Ethereum-style).

    Note this is the original Keccak padding, not NIST SHA3-256.
    """
    k = keccak.new(digest_bits=256)
    k.update(data)
    return k.digest()


# =============================================================================
# Utility Functions
# =============================================================================


def bytes_to_hex(data: bytes) -> str:
    """Convert bytes to hex string with 0x prefix."""
    return "0x" + data.hex()


def hex_to_bytes(hex_str: str) -> bytes:
    """Convert hex string (with or without 0x prefix) to bytes."""
    if hex_str.startswith("0x") or hex_str.startswith("0X"):
        hex_str = hex_str[2:]
    return bytes.fromhex(hex_str)


# =============================================================================
# Hashers
# =============================================================================

from mmr.crypto.poseidon import (
    poseidon_hash,
    poseidon1,
    poseidon2,
    poseidon_bytes,
    int_to_bytes32,
    bytes32_to_int,
    FIELD_PRIME,
    DOMAIN_MMR_LEAF,
    DOMAIN_MMR_NODE,
)
from mmr.crypto.hasher import (
    Hasher,
    Sha256Hasher,
    Keccak256Hasher,
    PoseidonHasher,
    HASHERS,
    DEFAULT_HASHER,
    get_hasher,
    empty_root,
)

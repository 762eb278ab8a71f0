"""
Pluggable hashers for the MMR engine.

An engine receives one hasher at construction and calls exactly two
operations on it: ``leaf_hash(data)`` for appended content and
``node_hash(left, right)`` for merges and bagging. Every value the engine
stores or returns is produced by one of these calls.

Byte hashers use RFC 6962 style domain separation so that an internal node
can never be reinterpreted as a leaf:

    leaf = H(0x00 || data)
    node = H(0x01 || left || right)

The Poseidon hasher separates the two call shapes with distinct capacity
domains instead.
"""

from typing import Callable, Dict, Protocol, runtime_checkable

from mmr.crypto import keccak256, sha256
from mmr.crypto.poseidon import (
    DOMAIN_MMR_LEAF,
    DOMAIN_MMR_NODE,
    bytes32_to_int,
    int_to_bytes32,
    poseidon2,
    poseidon_bytes,
)

LEAF_PREFIX = b"\x00"
NODE_PREFIX = b"\x01"


@runtime_checkable
class Hasher(Protocol):
    """Fixed-arity, deterministic hash capability."""

    name: str
    digest_size: int

    def leaf_hash(self, data: bytes) -> bytes:
        ...

    def node_hash(self, left: bytes, right: bytes) -> bytes:
        ...

    def check_value(self, value: bytes) -> None:
        """Raise ValueError if ``value`` can never be a ``node_hash`` input."""
        ...


class _PrefixHasher:
    """Shared domain-separated construction over a bytes -> digest function."""

    name = ""
    digest_size = 32

    def _digest(self, data: bytes) -> bytes:
        raise NotImplementedError

    def check_value(self, value: bytes) -> None:
        if len(value) != self.digest_size:
            raise ValueError(f"{self.name} values must be {self.digest_size} bytes, got {len(value)}")

    def leaf_hash(self, data: bytes) -> bytes:
        return self._digest(LEAF_PREFIX + bytes(data))

    def node_hash(self, left: bytes, right: bytes) -> bytes:
        if len(left) != self.digest_size or len(right) != self.digest_size:
            raise ValueError(
                f"{self.name} node inputs must be {self.digest_size} bytes, "
                f"got {len(left)} and {len(right)}"
            )
        return self._digest(NODE_PREFIX + left + right)

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class Sha256Hasher(_PrefixHasher):
    """SHA-256 with RFC 6962 prefixes. The default hasher."""

    name = "sha256"

    def _digest(self, data: bytes) -> bytes:
        return sha256(data)


class Keccak256Hasher(_PrefixHasher):
    """Keccak-256 with RFC 6962 prefixes, for EVM-side verifiers."""

    name = "keccak256"

    def _digest(self, data: bytes) -> bytes:
        return keccak256(data)


class PoseidonHasher:
    """
    Poseidon over BN254, values encoded as 32-byte big-endian field elements.

    ``node_hash`` raises ValueError for inputs that are not canonical field
    elements; the verifier reports that as a malformed proof.
    """

    name = "poseidon"
    digest_size = 32

    def leaf_hash(self, data: bytes) -> bytes:
        return int_to_bytes32(poseidon_bytes(bytes(data), DOMAIN_MMR_LEAF))

    def node_hash(self, left: bytes, right: bytes) -> bytes:
        return int_to_bytes32(
            poseidon2(bytes32_to_int(left), bytes32_to_int(right), DOMAIN_MMR_NODE)
        )

    def check_value(self, value: bytes) -> None:
        bytes32_to_int(value)

    def __repr__(self) -> str:
        return "PoseidonHasher()"


# =============================================================================
# Registry
# =============================================================================

HASHERS: Dict[str, Callable[[], Hasher]] = {
    Sha256Hasher.name: Sha256Hasher,
    Keccak256Hasher.name: Keccak256Hasher,
    PoseidonHasher.name: PoseidonHasher,
}

DEFAULT_HASHER = Sha256Hasher.name


def get_hasher(name: str = DEFAULT_HASHER) -> Hasher:
    """
    Build a hasher by registry name.

    Raises:
        ValueError: If the name is unknown
    """
    try:
        factory = HASHERS[name.lower()]
    except KeyError:
        raise ValueError(f"Unknown hasher '{name}', expected one of {sorted(HASHERS)}") from None
    return factory()


def empty_root(hasher: Hasher) -> bytes:
    """Root sentinel for an MMR with no leaves."""
    return bytes(hasher.digest_size)

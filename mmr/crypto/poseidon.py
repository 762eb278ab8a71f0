"""
Poseidon Hash Function for circuit-side MMR verification.

Poseidon is an arithmetic-friendly hash: a proving circuit that checks an
MMR inclusion proof re-implements ``poseidon2`` as gates, so node hashing
must use exactly the parameters below.

Parameters (BN254 / alt_bn128 scalar field):
- t=3 (2 inputs + 1 capacity element carrying the domain separator)
- rounds_f=8 (full rounds), rounds_p=57 (partial rounds)
- alpha=5 (S-box exponent)
- round constants: SHAKE256(b"poseidon") read as 32-byte words mod p
- MDS: Cauchy matrix M[i][j] = 1 / (x_i + y_j), x_i = i+1, y_j = t+j+1

References:
- Poseidon paper: https://eprint.iacr.org/2019/458
"""

import hashlib
from dataclasses import dataclass
from functools import lru_cache
from typing import List, Sequence, Tuple

from py_ecc.bn128 import curve_order

# BN254 scalar field prime
FIELD_PRIME = curve_order

# Domain separators for MMR hashing
DOMAIN_MMR_LEAF = 0x30
DOMAIN_MMR_NODE = 0x31

# Bytes per input chunk when absorbing arbitrary data (31 bytes always < p)
CHUNK_SIZE = 31


# =============================================================================
# Parameters
# =============================================================================


@dataclass(frozen=True)
class PoseidonParams:
    """Round constants and MDS matrix for one state width."""
    t: int
    rounds_f: int
    rounds_p: int
    round_constants: Tuple[int, ...]
    mds: Tuple[Tuple[int, ...], ...]


@lru_cache(maxsize=None)
def get_params(t: int = 3, rounds_f: int = 8, rounds_p: int = 57, seed: bytes = b"poseidon") -> PoseidonParams:
    """Derive (and cache) the parameter set for a state width."""
    count = (rounds_f + rounds_p) * t
    stream = hashlib.shake_256(seed).digest(count * 32)
    constants = tuple(
        int.from_bytes(stream[i * 32:(i + 1) * 32], "big") % FIELD_PRIME
        for i in range(count)
    )

    xs = [i + 1 for i in range(t)]
    ys = [t + j + 1 for j in range(t)]
    mds = tuple(
        tuple(pow((x + y) % FIELD_PRIME, FIELD_PRIME - 2, FIELD_PRIME) for y in ys)
        for x in xs
    )

    return PoseidonParams(t, rounds_f, rounds_p, constants, mds)


# =============================================================================
# Permutation
# =============================================================================


def _mix(state: List[int], mds: Sequence[Sequence[int]]) -> List[int]:
    return [sum(m * s for m, s in zip(row, state)) % FIELD_PRIME for row in mds]


def permute(state: List[int], params: PoseidonParams) -> List[int]:
    """Apply the Poseidon permutation to a state of width ``params.t``."""
    if len(state) != params.t:
        raise ValueError(f"State must have {params.t} elements, got {len(state)}")

    half_f = params.rounds_f // 2
    total = params.rounds_f + params.rounds_p
    rc = params.round_constants

    for r in range(total):
        offset = r * params.t
        state = [(s + rc[offset + i]) % FIELD_PRIME for i, s in enumerate(state)]
        if r < half_f or r >= half_f + params.rounds_p:
            state = [pow(s, 5, FIELD_PRIME) for s in state]
        else:
            state[0] = pow(state[0], 5, FIELD_PRIME)
        state = _mix(state, params.mds)

    return state


def poseidon_hash(inputs: Sequence[int], domain_sep: int = 0) -> int:
    """
    Hash up to two field elements.

    Args:
        inputs: Field elements (integers in [0, FIELD_PRIME))
        domain_sep: Domain separator placed in the capacity element

    Returns:
        Hash as a field element

    Raises:
        ValueError: If there are more than two inputs or one is out of range
    """
    if len(inputs) > 2:
        raise ValueError(f"Poseidon t=3 takes at most 2 inputs, got {len(inputs)}")

    for i, val in enumerate(inputs):
        if not (0 <= val < FIELD_PRIME):
            raise ValueError(f"Input {i} out of field range: {val}")

    padded = list(inputs) + [0] * (2 - len(inputs))
    state = [domain_sep % FIELD_PRIME, padded[0], padded[1]]
    return permute(state, get_params())[1]


# =============================================================================
# Convenience Functions
# =============================================================================


def poseidon2(a: int, b: int, domain_sep: int = 0) -> int:
    """Hash two field elements."""
    return poseidon_hash([a, b], domain_sep)


def poseidon1(a: int, domain_sep: int = 0) -> int:
    """Hash one field element."""
    return poseidon_hash([a], domain_sep)


def poseidon_bytes(data: bytes, domain_sep: int = 0) -> int:
    """
    Hash arbitrary bytes.

    The data is split into 31-byte big-endian chunks and absorbed as a
    chain ``h = poseidon2(h, chunk)`` starting from the domain separator.
    The byte length is absorbed last so that trailing zero bytes matter.
    """
    h = domain_sep % FIELD_PRIME
    for i in range(0, len(data), CHUNK_SIZE):
        h = poseidon2(h, int.from_bytes(data[i:i + CHUNK_SIZE], "big"))
    return poseidon2(h, len(data))


def int_to_bytes32(val: int) -> bytes:
    """Convert field element to 32 bytes."""
    return val.to_bytes(32, byteorder="big")


def bytes32_to_int(data: bytes) -> int:
    """Convert 32 bytes to a canonical field element."""
    if len(data) != 32:
        raise ValueError(f"Expected 32 bytes, got {len(data)}")
    val = int.from_bytes(data, byteorder="big")
    if val >= FIELD_PRIME:
        raise ValueError(f"Value {val} exceeds field prime")
    return val

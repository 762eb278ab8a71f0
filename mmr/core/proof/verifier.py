"""
Stateless verification of MMR leaf-inclusion proofs.

Verification needs only the hasher, the claimed root, the leaf value and
the proof; it never consults an engine. The steps are:

1. Structural checks (hash sizes, index bounds, peak/height consistency).
2. Fold the leaf value with the sibling path, bottom to top, using the
   direction bits of ``leaf_index`` (see ``mmr.core.proof.proof``).
3. Compare the result with ``peaks[own_peak_position]``.
4. Bag the peaks right to left and compare with the root.

``verify`` is total: every input maps to a ``VerifyStatus`` and nothing is
raised. ``verify_or_raise`` maps the same outcomes onto exceptions.
"""

from enum import IntEnum
from typing import Optional, Sequence, Tuple

from mmr.core.errors import ProofMalformed, ProofVerificationFailed, RootMismatch
from mmr.core.peaks import popcount
from mmr.core.proof.proof import Proof
from mmr.crypto.hasher import Hasher, Sha256Hasher, empty_root
from mmr.utils.logger import get_logger
from mmr.utils.validation import validate_hash, validate_hash_list, validate_integer

logger = get_logger("proof")


class VerifyStatus(IntEnum):
    """Outcome of proof verification."""
    ACCEPT = 0
    PROOF_MALFORMED = 1
    PROOF_VERIFICATION_FAILED = 2
    ROOT_MISMATCH = 3

    @property
    def accepted(self) -> bool:
        return self is VerifyStatus.ACCEPT


_ERRORS = {
    VerifyStatus.PROOF_MALFORMED: ProofMalformed,
    VerifyStatus.PROOF_VERIFICATION_FAILED: ProofVerificationFailed,
    VerifyStatus.ROOT_MISMATCH: RootMismatch,
}


# =============================================================================
# Shared folds
# =============================================================================


def bag_peaks(hasher: Hasher, peaks: Sequence[bytes]) -> bytes:
    """
    Fold peaks into a single root, right to left.

    A single peak bags to itself; no peaks bag to the empty-root sentinel.
    """
    if not peaks:
        return empty_root(hasher)
    bag = peaks[-1]
    for peak in reversed(peaks[:-1]):
        bag = hasher.node_hash(peak, bag)
    return bag


def recompute_peak(
    hasher: Hasher,
    leaf_value: bytes,
    leaf_index: int,
    sibling_path: Sequence[bytes],
) -> bytes:
    """Fold a leaf value up its sibling path to the subtree peak."""
    current = leaf_value
    for level, sibling in enumerate(sibling_path):
        if (leaf_index >> level) & 1:
            current = hasher.node_hash(sibling, current)
        else:
            current = hasher.node_hash(current, sibling)
    return current


# =============================================================================
# Structure
# =============================================================================


def check_structure(proof: Proof, digest_size: int) -> Tuple[bool, str]:
    """
    Check a proof is well formed before any hashing.

    Returns:
        (is_valid, error_message)
    """
    if not isinstance(proof, Proof):
        return False, f"proof must be Proof, got {type(proof).__name__}"

    valid, err = validate_integer(proof.leaf_index, "leaf_index")
    if not valid:
        return False, err

    valid, err = validate_hash_list(proof.sibling_path, "sibling_path", digest_size)
    if not valid:
        return False, err

    valid, err = validate_hash_list(proof.peaks, "peaks", digest_size)
    if not valid:
        return False, err
    if not proof.peaks:
        return False, "peaks must not be empty"

    valid, err = validate_integer(
        proof.own_peak_position, "own_peak_position", 0, len(proof.peaks) - 1
    )
    if not valid:
        return False, err

    height = len(proof.sibling_path)
    # Every taller peak covers a multiple of 2^height leaves and has a
    # distinct height, so the bits above the subtree count them exactly.
    taller = popcount(proof.leaf_index >> height)
    if taller != proof.own_peak_position:
        return False, (
            f"leaf_index {proof.leaf_index} with height {height} implies peak "
            f"position {taller}, proof claims {proof.own_peak_position}"
        )

    shorter = len(proof.peaks) - proof.own_peak_position - 1
    if shorter > height:
        return False, f"{shorter} peaks cannot all be shorter than height {height}"

    if proof.leaf_value is not None:
        valid, err = validate_hash(proof.leaf_value, "proof.leaf_value", digest_size)
        if not valid:
            return False, err

    return True, ""


# =============================================================================
# Verification
# =============================================================================


def _evaluate(
    root: bytes,
    leaf_value: bytes,
    proof: Proof,
    hasher: Hasher,
) -> Tuple[VerifyStatus, str]:
    for value, name in ((root, "root"), (leaf_value, "leaf_value")):
        valid, err = validate_hash(value, name, hasher.digest_size)
        if not valid:
            return VerifyStatus.PROOF_MALFORMED, err

    valid, err = check_structure(proof, hasher.digest_size)
    if not valid:
        return VerifyStatus.PROOF_MALFORMED, err

    if proof.leaf_value is not None and proof.leaf_value != leaf_value:
        return VerifyStatus.PROOF_VERIFICATION_FAILED, "leaf value differs from the one in the proof"

    try:
        peak = recompute_peak(hasher, leaf_value, proof.leaf_index, proof.sibling_path)
        if peak != proof.peaks[proof.own_peak_position]:
            return VerifyStatus.PROOF_VERIFICATION_FAILED, (
                f"recomputed peak does not match peak {proof.own_peak_position}"
            )
        bagged = bag_peaks(hasher, proof.peaks)
    except ValueError as e:
        # e.g. a Poseidon input that is not a canonical field element
        return VerifyStatus.PROOF_MALFORMED, f"hasher rejected proof value: {e}"

    if bagged != root:
        return VerifyStatus.ROOT_MISMATCH, "bagged peaks do not match root"

    return VerifyStatus.ACCEPT, ""


def verify(
    root: bytes,
    leaf_value: bytes,
    proof: Proof,
    hasher: Optional[Hasher] = None,
) -> VerifyStatus:
    """
    Verify a leaf-inclusion proof.

    Args:
        root: Root the proof is checked against
        leaf_value: Leaf hash (``hasher.leaf_hash(data)``)
        proof: Proof to check
        hasher: Hasher the MMR was built with (SHA-256 if omitted)

    Returns:
        VerifyStatus; never raises
    """
    hasher = hasher or Sha256Hasher()
    status, reason = _evaluate(root, leaf_value, proof, hasher)
    if not status.accepted:
        logger.debug(f"Proof rejected ({status.name}): {reason}")
    return status


def verify_or_raise(
    root: bytes,
    leaf_value: bytes,
    proof: Proof,
    hasher: Optional[Hasher] = None,
) -> None:
    """
    Verify a proof, raising on rejection.

    Raises:
        ProofMalformed, ProofVerificationFailed, RootMismatch
    """
    hasher = hasher or Sha256Hasher()
    status, reason = _evaluate(root, leaf_value, proof, hasher)
    if not status.accepted:
        raise _ERRORS[status](reason)


def verify_leaf_data(
    root: bytes,
    data: bytes,
    proof: Proof,
    hasher: Optional[Hasher] = None,
) -> VerifyStatus:
    """Verify a proof for raw leaf content rather than its hash."""
    hasher = hasher or Sha256Hasher()
    return verify(root, hasher.leaf_hash(data), proof, hasher)


__all__ = [
    "VerifyStatus",
    "bag_peaks",
    "recompute_peak",
    "check_structure",
    "verify",
    "verify_or_raise",
    "verify_leaf_data",
]

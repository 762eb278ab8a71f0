"""
Error kinds raised by the MMR engine and the proof verifier.

The verifier itself reports failures as ``VerifyStatus`` values; the proof
exceptions below exist for callers that prefer ``verify_or_raise``.
"""


class MMRError(Exception):
    """Base class for all MMR errors."""


class AppendOverflow(MMRError):
    """The node position counter would exceed its representable range."""


class IndexOutOfRange(MMRError, IndexError):
    """A leaf index outside ``[0, leaf_count)`` was requested."""


class ProofError(MMRError):
    """Base class for proof rejection."""


class ProofMalformed(ProofError):
    """The proof is structurally invalid and cannot be recomputed."""


class ProofVerificationFailed(ProofError):
    """The recomputed subtree hash does not match the claimed peak."""


class RootMismatch(ProofError):
    """The bagged peaks do not match the supplied root."""

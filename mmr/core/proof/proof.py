"""
Leaf-inclusion proof and its serialized forms.

Wire format (big-endian, published for independent verifiers)::

    u8   sibling_count                  subtree height, at most 64
    sibling_count * D bytes             sibling hashes, bottom to top
    u64  leaf_index
    u8   peak_count                     at most 64
    peak_count * D bytes                peak hashes, tallest (left) first
    u64  own_peak_index

``D`` is the hasher's digest size (32 for every built-in hasher). The leaf
value itself is not part of the wire form; the verifier receives it
separately.

Direction rule: the leaf's offset inside its subtree is
``leaf_index mod 2^height``. Bit ``k`` of that offset is 1 when the running
hash is the right child at level ``k`` (sibling on the left), 0 otherwise.

Bagging rule: peaks fold right to left,
``bag = peaks[-1]; bag = node_hash(peaks[i], bag)`` for ``i`` descending.
"""

import json
import struct
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from mmr.core.errors import ProofMalformed
from mmr.core.proof.schema import ProofDocument
from mmr.crypto import bytes_to_hex, hex_to_bytes, bytes32_to_int
from mmr.utils.validation import DEFAULT_HASH_SIZE, MAX_PATH_LENGTH, validate_integer


@dataclass
class Proof:
    """
    Inclusion proof for one leaf against one set of peaks.

    Attributes:
        leaf_index: Index of the leaf among leaves (not a node position)
        leaf_value: Leaf hash, or None when decoded from the wire form
        sibling_path: Sibling hashes from the leaf up to its peak
        own_peak_position: Index of the leaf's peak in ``peaks``
        peaks: Every peak at proof time, tallest first
    """
    leaf_index: int
    leaf_value: Optional[bytes]
    sibling_path: List[bytes] = field(default_factory=list)
    own_peak_position: int = 0
    peaks: List[bytes] = field(default_factory=list)

    @property
    def height(self) -> int:
        """Height of the subtree holding the leaf."""
        return len(self.sibling_path)

    @property
    def own_peak(self) -> bytes:
        return self.peaks[self.own_peak_position]

    def path_bits(self) -> List[int]:
        """Direction bits, bottom to top (1 = sibling on the left)."""
        return [(self.leaf_index >> level) & 1 for level in range(self.height)]

    # =========================================================================
    # Binary wire form
    # =========================================================================

    def to_bytes(self) -> bytes:
        """Encode to the wire format."""
        if self.height > MAX_PATH_LENGTH or len(self.peaks) > MAX_PATH_LENGTH:
            raise ValueError("Sibling path and peak list are limited to 64 entries")
        for value, name in ((self.leaf_index, "leaf_index"), (self.own_peak_position, "own_peak_position")):
            valid, err = validate_integer(value, name)
            if not valid:
                raise ValueError(err)
        sizes = {len(h) for h in self.sibling_path + self.peaks}
        if len(sizes) > 1:
            raise ValueError(f"All hashes must share one size, got {sorted(sizes)}")

        parts = [struct.pack(">B", self.height)]
        parts.extend(self.sibling_path)
        parts.append(struct.pack(">Q", self.leaf_index))
        parts.append(struct.pack(">B", len(self.peaks)))
        parts.extend(self.peaks)
        parts.append(struct.pack(">Q", self.own_peak_position))
        return b"".join(parts)

    @classmethod
    def from_bytes(
        cls,
        data: bytes,
        digest_size: int = DEFAULT_HASH_SIZE,
        leaf_value: Optional[bytes] = None,
    ) -> "Proof":
        """
        Decode the wire format.

        Raises:
            ProofMalformed: On truncation, trailing bytes or oversized counts
        """
        reader = _Reader(bytes(data))

        sibling_count = reader.u8("sibling_count")
        if sibling_count > MAX_PATH_LENGTH:
            raise ProofMalformed(f"sibling_count {sibling_count} exceeds {MAX_PATH_LENGTH}")
        siblings = [reader.take(digest_size, f"sibling[{i}]") for i in range(sibling_count)]

        leaf_index = reader.u64("leaf_index")

        peak_count = reader.u8("peak_count")
        if peak_count > MAX_PATH_LENGTH:
            raise ProofMalformed(f"peak_count {peak_count} exceeds {MAX_PATH_LENGTH}")
        peaks = [reader.take(digest_size, f"peak[{i}]") for i in range(peak_count)]

        own_peak_position = reader.u64("own_peak_index")
        reader.finish()

        return cls(
            leaf_index=leaf_index,
            leaf_value=leaf_value,
            sibling_path=siblings,
            own_peak_position=own_peak_position,
            peaks=peaks,
        )

    # =========================================================================
    # JSON form
    # =========================================================================

    def to_dict(self) -> dict:
        """Convert to JSON-serializable dict."""
        return {
            "leaf_index": self.leaf_index,
            "leaf_value": bytes_to_hex(self.leaf_value) if self.leaf_value is not None else None,
            "sibling_path": [bytes_to_hex(h) for h in self.sibling_path],
            "own_peak_position": self.own_peak_position,
            "peaks": [bytes_to_hex(p) for p in self.peaks],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Proof":
        """
        Create from dict, validating every field.

        Raises:
            ProofMalformed: If the document does not validate
        """
        try:
            doc = ProofDocument.model_validate(data)
        except ValidationError as e:
            raise ProofMalformed(f"Invalid proof document: {e.error_count()} error(s): {e}") from e

        return cls(
            leaf_index=doc.leaf_index,
            leaf_value=hex_to_bytes(doc.leaf_value) if doc.leaf_value is not None else None,
            sibling_path=[hex_to_bytes(h) for h in doc.sibling_path],
            own_peak_position=doc.own_peak_position,
            peaks=[hex_to_bytes(p) for p in doc.peaks],
        )

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2)

    @classmethod
    def from_json(cls, text: str) -> "Proof":
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise ProofMalformed(f"Proof is not valid JSON: {e}") from e
        return cls.from_dict(data)

    # =========================================================================
    # Circuit witness
    # =========================================================================

    def circuit_witness(self, root: bytes) -> Dict[str, Any]:
        """
        Flatten the proof into field-element inputs for a proving circuit.

        Only meaningful for MMRs hashed with Poseidon, where every value is a
        32-byte canonical field element. Field elements are decimal strings,
        matching the snarkjs ``input.json`` convention.

        Raises:
            ValueError: If the leaf value is missing or a value is not a field element
        """
        if self.leaf_value is None:
            raise ValueError("Circuit witness needs the leaf value")

        def fe(value: bytes) -> str:
            return str(bytes32_to_int(value))

        return {
            "leaf": fe(self.leaf_value),
            "siblings": [fe(h) for h in self.sibling_path],
            "path_bits": self.path_bits(),
            "peaks": [fe(p) for p in self.peaks],
            "peak_selector": [int(i == self.own_peak_position) for i in range(len(self.peaks))],
            "own_peak_position": self.own_peak_position,
            "root": fe(root),
        }


class _Reader:
    """Bounds-checked cursor over wire bytes."""

    def __init__(self, data: bytes):
        self.data = data
        self.offset = 0

    def take(self, n: int, what: str) -> bytes:
        end = self.offset + n
        if end > len(self.data):
            raise ProofMalformed(f"Truncated proof while reading {what}")
        chunk = self.data[self.offset:end]
        self.offset = end
        return chunk

    def u8(self, what: str) -> int:
        return struct.unpack(">B", self.take(1, what))[0]

    def u64(self, what: str) -> int:
        return struct.unpack(">Q", self.take(8, what))[0]

    def finish(self) -> None:
        if self.offset != len(self.data):
            raise ProofMalformed(f"{len(self.data) - self.offset} trailing bytes after proof")

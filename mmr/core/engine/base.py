"""
MMR engine contract shared by the eager and lazy variants.

Conceptual Background:
---------------------
A Merkle Mountain Range is a forest of perfect binary Merkle trees whose
sizes are the binary digits of the leaf count. Appending a leaf works like
incrementing a binary counter: the new leaf becomes a height-0 peak, and
while the previous peak has the same height the two are merged into a
taller one (the carry).

Every hash ever computed goes into the Node Log in append order, so the
log alone determines the forest. The two variants differ only in what
they cache on top of it:

- EagerMMR keeps the peak stack and a leaf -> position table.
- LazyMMR keeps nothing but the log and re-derives peaks on demand.

Concurrency:
-----------
Appends are serialized by a lock (single writer). After each append the
writer publishes an immutable Snapshot in a single attribute assignment;
readers grab the current snapshot once and only read log entries below
its node count, so they never observe a half-finished cascade.

Properties:
----------
- Append: O(1) amortized, O(log n) worst case
- Root: O(log n) (cached per leaf count)
- Prove: O(log n)
"""

import threading
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

from mmr.core.errors import AppendOverflow, IndexOutOfRange, MMRError
from mmr.core.node_log import Node, NodeLog
from mmr.core.peaks import leaf_count_for_nodes, locate_leaf, sibling_positions
from mmr.core.proof import Proof, VerifyStatus, bag_peaks, verify
from mmr.core.storage import NodeStore
from mmr.crypto.hasher import Hasher, Sha256Hasher
from mmr.utils.logger import get_logger
from mmr.utils.validation import validate_hash

logger = get_logger("engine")

# Node positions are encoded as u64 on the wire.
MAX_POSITIONS = 2**64

# (height, node position) of one peak
PeakRef = Tuple[int, int]


@dataclass(frozen=True)
class Snapshot:
    """Consistent view published after each append."""
    leaf_count: int
    node_count: int
    # Cached peak stack; None when the variant derives peaks on demand.
    peaks: Optional[Tuple[PeakRef, ...]] = None


class BaseMMR:
    """
    Append-only Merkle Mountain Range.

    Attributes:
        hasher: Hash capability fixed at construction
        log: Node Log holding every leaf and internal node
        max_positions: Node count the engine refuses to exceed
        store: Optional SQLite persistence for the log
    """

    variant = "base"

    def __init__(
        self,
        hasher: Optional[Hasher] = None,
        max_positions: int = MAX_POSITIONS,
        store: Optional[NodeStore] = None,
    ):
        if max_positions < 1:
            raise ValueError(f"max_positions must be >= 1, got {max_positions}")

        self.hasher: Hasher = hasher or Sha256Hasher()
        self.max_positions = max_positions
        self.log = NodeLog()
        self.store = store
        self._write_lock = threading.Lock()
        self._root_cache: Optional[Tuple[int, bytes]] = None
        self._snapshot = Snapshot(leaf_count=0, node_count=0, peaks=self._empty_peaks())

        if store is not None:
            self._load_from_store()

    # =========================================================================
    # Variant hooks
    # =========================================================================

    def _empty_peaks(self) -> Optional[Tuple[PeakRef, ...]]:
        return None

    def _open_peaks(self, snapshot: Snapshot) -> List[PeakRef]:
        """Peak stack for a snapshot, tallest first."""
        raise NotImplementedError

    def _leaf_position(self, leaf_index: int) -> int:
        """Node position of a leaf known to exist."""
        raise NotImplementedError

    def _next_snapshot(
        self,
        previous: Snapshot,
        stack: List[PeakRef],
        leaf_pos: int,
        node_count: int,
    ) -> Snapshot:
        """Build the snapshot to publish after an append."""
        raise NotImplementedError

    def _restore(self, leaf_count: int) -> Snapshot:
        """Rebuild variant caches after the log was loaded from storage."""
        raise NotImplementedError

    # =========================================================================
    # Append
    # =========================================================================

    def append(self, data: bytes) -> int:
        """
        Append content as a new leaf.

        Args:
            data: Raw leaf content, hashed with ``hasher.leaf_hash``

        Returns:
            Node position of the new leaf

        Raises:
            AppendOverflow: If the node count would exceed ``max_positions``
        """
        if not isinstance(data, (bytes, bytearray)):
            raise TypeError(f"Leaf data must be bytes, got {type(data).__name__}")
        return self.append_hash(self.hasher.leaf_hash(bytes(data)))

    def append_hash(self, leaf_value: bytes) -> int:
        """
        Append a precomputed leaf hash.

        Returns:
            Node position of the new leaf

        Raises:
            ValueError: If the hasher cannot take the value as a node input
        """
        valid, err = validate_hash(leaf_value, "leaf_value", self.hasher.digest_size)
        if not valid:
            raise ValueError(err)
        leaf_value = bytes(leaf_value)
        # Leaf values must be valid node_hash inputs.
        self.hasher.check_value(leaf_value)

        with self._write_lock:
            previous = self._snapshot
            stack = self._open_peaks(previous)

            # Cascade: merge with the newest peak while it has the same height.
            leaf_pos = previous.node_count
            pending = [Node(leaf_pos, 0, leaf_value)]
            current = leaf_value
            height = 0
            while stack and stack[-1][0] == height:
                _, left = stack.pop()
                current = self.hasher.node_hash(self.log.value(left), current)
                height += 1
                pending.append(Node(leaf_pos + len(pending), height, current))
            stack.append((height, pending[-1].position))

            node_count = pending[-1].position + 1
            if node_count > self.max_positions:
                raise AppendOverflow(
                    f"Appending leaf {previous.leaf_count} needs {node_count} positions, "
                    f"limit is {self.max_positions}"
                )

            if self.store is not None:
                self.store.append_nodes(pending)
            for node in pending:
                self.log.append(node.height, node.value)

            self._snapshot = self._next_snapshot(previous, stack, leaf_pos, node_count)

        logger.debug(
            f"Appended leaf {previous.leaf_count} at position {leaf_pos} "
            f"({len(pending) - 1} merges, {len(stack)} peaks)"
        )
        return leaf_pos

    def extend(self, items: Iterable[bytes]) -> List[int]:
        """Append several leaves in order, returning their positions."""
        return [self.append(data) for data in items]

    # =========================================================================
    # Reads
    # =========================================================================

    @property
    def leaf_count(self) -> int:
        return self._snapshot.leaf_count

    @property
    def node_count(self) -> int:
        return self._snapshot.node_count

    def snapshot(self) -> Snapshot:
        """Current consistent view (leaf count, node count, cached peaks)."""
        return self._snapshot

    def peaks(self) -> List[Tuple[int, bytes]]:
        """Current peaks as (height, value), tallest first."""
        snapshot = self._snapshot
        return [(h, self.log.value(p)) for h, p in self._open_peaks(snapshot)]

    def root(self) -> bytes:
        """
        Bag the current peaks into the root.

        Returns the all-zero sentinel when no leaf has been appended.
        """
        snapshot = self._snapshot
        cached = self._root_cache
        if cached is not None and cached[0] == snapshot.leaf_count:
            return cached[1]

        values = [self.log.value(p) for _, p in self._open_peaks(snapshot)]
        root = bag_peaks(self.hasher, values)
        self._root_cache = (snapshot.leaf_count, root)
        return root

    def get_leaf(self, leaf_index: int) -> bytes:
        """Stored hash of a leaf."""
        snapshot = self._snapshot
        self._check_leaf_index(leaf_index, snapshot)
        return self.log.value(self._leaf_position(leaf_index))

    # =========================================================================
    # Proofs
    # =========================================================================

    def generate_proof(self, leaf_index: int) -> Proof:
        """
        Build an inclusion proof for a leaf.

        Raises:
            IndexOutOfRange: If ``leaf_index`` is not in ``[0, leaf_count)``
        """
        snapshot = self._snapshot
        self._check_leaf_index(leaf_index, snapshot)

        peak_index, slot = locate_leaf(snapshot.leaf_count, leaf_index)
        peaks = self._open_peaks(snapshot)
        if peaks[peak_index] != (slot.height, slot.position):
            raise MMRError(
                f"Peak {peak_index} is {peaks[peak_index]}, expected "
                f"{(slot.height, slot.position)} for {snapshot.leaf_count} leaves"
            )

        leaf_pos = self._leaf_position(leaf_index)
        offset = leaf_index - slot.first_leaf
        path = sibling_positions(leaf_pos, offset, slot.height)

        proof = Proof(
            leaf_index=leaf_index,
            leaf_value=self.log.value(leaf_pos),
            sibling_path=[self.log.value(p) for p in path],
            own_peak_position=peak_index,
            peaks=[self.log.value(p) for _, p in peaks],
        )
        logger.debug(
            f"Proof for leaf {leaf_index}: height {slot.height}, "
            f"peak {peak_index}/{len(peaks)}"
        )
        return proof

    def verify(self, root: bytes, leaf_value: bytes, proof: Proof) -> VerifyStatus:
        """Verify a proof with this engine's hasher."""
        return verify(root, leaf_value, proof, self.hasher)

    def _check_leaf_index(self, leaf_index: int, snapshot: Snapshot) -> None:
        if isinstance(leaf_index, bool) or not isinstance(leaf_index, int):
            raise TypeError(f"Leaf index must be int, got {type(leaf_index).__name__}")
        if not 0 <= leaf_index < snapshot.leaf_count:
            raise IndexOutOfRange(
                f"Leaf index {leaf_index} out of range [0, {snapshot.leaf_count})"
            )

    # =========================================================================
    # Persistence
    # =========================================================================

    def _load_from_store(self) -> None:
        """Replay the persisted Node Log into memory."""
        stored_hasher = self.store.get_meta("hasher")
        if stored_hasher is None:
            self.store.set_meta("hasher", self.hasher.name)
        elif stored_hasher != self.hasher.name:
            raise MMRError(
                f"Store was built with hasher '{stored_hasher}', engine uses '{self.hasher.name}'"
            )

        for node in self.store.load_nodes():
            if node.position != len(self.log):
                raise MMRError(f"Stored node log has a gap at position {len(self.log)}")
            self.log.append(node.height, node.value)

        try:
            leaf_count = leaf_count_for_nodes(len(self.log))
        except ValueError as e:
            raise MMRError(f"Stored node log is truncated: {e}") from e

        self._snapshot = self._restore(leaf_count)
        logger.info(
            f"Loaded {self.variant} MMR from {self.store.db_path}: "
            f"{leaf_count} leaves, {len(self.log)} nodes"
        )

    # =========================================================================
    # Introspection
    # =========================================================================

    def __len__(self) -> int:
        return self.leaf_count

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(leaves={self.leaf_count}, "
            f"nodes={self.node_count}, hasher={self.hasher.name})"
        )

    def stats(self) -> dict:
        """Get engine statistics."""
        snapshot = self._snapshot
        return {
            "variant": self.variant,
            "hasher": self.hasher.name,
            "leaf_count": snapshot.leaf_count,
            "node_count": snapshot.node_count,
            "peak_count": len(self._open_peaks(snapshot)),
            "persistent": self.store is not None,
        }

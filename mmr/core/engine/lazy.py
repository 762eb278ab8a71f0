"""
Lazy MMR - retains only the Node Log.

Peaks are re-derived from the leaf count on every read: each set bit ``b``
of the leaf count is a subtree of ``2^b`` leaves, and its peak is reached
by walking the merge path upward from the subtree's first leaf. A left
child of height ``k`` at position ``p`` has its parent at
``p + 2^(k+1)``, so the walk is O(log n) per peak and O(log^2 n) overall.
"""

from typing import List

from mmr.core.engine.base import BaseMMR, PeakRef, Snapshot
from mmr.core.errors import MMRError
from mmr.core.peaks import leaf_position


class LazyMMR(BaseMMR):
    """MMR with the minimal memory footprint: the Node Log alone."""

    variant = "lazy"

    def _open_peaks(self, snapshot: Snapshot) -> List[PeakRef]:
        return self._walk_peaks(snapshot.leaf_count)

    def _walk_peaks(self, leaf_count: int) -> List[PeakRef]:
        peaks: List[PeakRef] = []
        start = 0
        for height in range(leaf_count.bit_length() - 1, -1, -1):
            if not (leaf_count >> height) & 1:
                continue
            position = start
            if self.log.height(position) != 0:
                raise MMRError(f"Node log inconsistent: position {position} is not a leaf")
            for level in range(height):
                position += 1 << (level + 1)
                if self.log.height(position) != level + 1:
                    raise MMRError(
                        f"Node log inconsistent: position {position} has height "
                        f"{self.log.height(position)}, expected {level + 1}"
                    )
            peaks.append((height, position))
            start = position + 1
        return peaks

    def _leaf_position(self, leaf_index: int) -> int:
        return leaf_position(leaf_index)

    def _next_snapshot(
        self,
        previous: Snapshot,
        stack: List[PeakRef],
        leaf_pos: int,
        node_count: int,
    ) -> Snapshot:
        return Snapshot(leaf_count=previous.leaf_count + 1, node_count=node_count)

    def _restore(self, leaf_count: int) -> Snapshot:
        # Walking once validates the recorded heights of every peak path.
        self._walk_peaks(leaf_count)
        return Snapshot(leaf_count=leaf_count, node_count=len(self.log))

"""
Eager MMR - keeps the peak stack and leaf positions cached.

The peak stack is exactly what the append cascade leaves behind, so it is
carried from one snapshot to the next at no extra hashing cost. Leaf
positions are recorded as leaves are appended, making proof lookups O(1)
before the O(log n) sibling walk.
"""

from typing import List, Optional, Tuple

from mmr.core.engine.base import BaseMMR, PeakRef, Snapshot
from mmr.core.errors import MMRError
from mmr.core.peaks import leaf_position, peak_plan


class EagerMMR(BaseMMR):
    """MMR that trades memory for latency by caching derived structure."""

    variant = "eager"

    def __init__(self, *args, **kwargs):
        self._leaf_positions: List[int] = []
        super().__init__(*args, **kwargs)

    def _empty_peaks(self) -> Optional[Tuple[PeakRef, ...]]:
        return ()

    def _open_peaks(self, snapshot: Snapshot) -> List[PeakRef]:
        return list(snapshot.peaks)

    def _leaf_position(self, leaf_index: int) -> int:
        return self._leaf_positions[leaf_index]

    def _next_snapshot(
        self,
        previous: Snapshot,
        stack: List[PeakRef],
        leaf_pos: int,
        node_count: int,
    ) -> Snapshot:
        # Recorded before publishing so readers of the new snapshot find it.
        self._leaf_positions.append(leaf_pos)
        return Snapshot(
            leaf_count=previous.leaf_count + 1,
            node_count=node_count,
            peaks=tuple(stack),
        )

    def _restore(self, leaf_count: int) -> Snapshot:
        self._leaf_positions = [leaf_position(i) for i in range(leaf_count)]
        peaks = tuple((slot.height, slot.position) for slot in peak_plan(leaf_count))
        for height, position in peaks:
            if self.log.height(position) != height:
                raise MMRError(
                    f"Stored node at position {position} has height "
                    f"{self.log.height(position)}, expected a peak of height {height}"
                )
        return Snapshot(leaf_count=leaf_count, node_count=len(self.log), peaks=peaks)

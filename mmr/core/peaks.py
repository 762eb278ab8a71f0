"""
Peak arithmetic for Merkle Mountain Ranges.

The forest shape is fully determined by the leaf count: each set bit ``b``
of ``leaf_count`` is one perfect subtree of ``2^b`` leaves, read from the
most significant bit (oldest, tallest) to the least significant bit
(newest, smallest). A subtree of height ``b`` occupies ``2^(b+1) - 1``
consecutive node positions in post-order, so its peak is the last of them.

Example, 7 leaves (node positions shown)::

           6
         /   \\
        2     5       9
       / \\   / \\    / \\
      0   1 3   4  7   8   10

    peak_plan(7) -> heights [2, 1, 0] at positions [6, 9, 10]

Everything here is pure integer arithmetic; nothing touches hashes.
"""

from dataclasses import dataclass
from typing import List, Tuple


@dataclass(frozen=True)
class PeakSlot:
    """Shape of one perfect subtree in the forest."""
    height: int
    position: int      # node position of the peak
    first_leaf: int    # leaf index of the subtree's leftmost leaf
    leaf_span: int     # 2^height

    @property
    def first_position(self) -> int:
        """Node position of the subtree's leftmost leaf."""
        return self.position - subtree_size(self.height) + 1

    def contains(self, leaf_index: int) -> bool:
        return self.first_leaf <= leaf_index < self.first_leaf + self.leaf_span


def popcount(n: int) -> int:
    """Number of set bits; equals the peak count for ``n`` leaves."""
    return bin(n).count("1")


def trailing_ones(n: int) -> int:
    """Number of trailing one-bits of ``n``."""
    count = 0
    while n & 1:
        count += 1
        n >>= 1
    return count


def subtree_size(height: int) -> int:
    """Node count of a perfect subtree of the given height."""
    return (1 << (height + 1)) - 1


def node_count(leaf_count: int) -> int:
    """Total node count (leaves plus internal nodes) for ``leaf_count`` leaves."""
    if leaf_count < 0:
        raise ValueError(f"Leaf count must be >= 0, got {leaf_count}")
    return 2 * leaf_count - popcount(leaf_count)


def leaf_count_for_nodes(count: int) -> int:
    """
    Inverse of ``node_count``.

    The result, read as a bitmap, also tells which heights currently hold a
    peak (bit ``b`` set means a peak of height ``b``).

    Raises:
        ValueError: If ``count`` is not a node count any MMR can have
    """
    if count < 0:
        raise ValueError(f"Node count must be >= 0, got {count}")

    # Try the largest subtree that could fit, then every smaller one once.
    size = (1 << count.bit_length()) - 1
    remaining = count
    leaves = 0
    while size > 0:
        if remaining >= size:
            leaves += (size + 1) // 2
            remaining -= size
        size >>= 1

    if remaining:
        raise ValueError(f"{count} is not a valid MMR node count")
    return leaves


def leaf_position(leaf_index: int) -> int:
    """
    Node position of a leaf.

    Every set bit ``b`` of ``leaf_index`` stands for a completed subtree of
    ``2^(b+1) - 1`` nodes that precedes the leaf.
    """
    if leaf_index < 0:
        raise ValueError(f"Leaf index must be >= 0, got {leaf_index}")
    position = 0
    height = 0
    while leaf_index:
        if leaf_index & 1:
            position += subtree_size(height)
        leaf_index >>= 1
        height += 1
    return position


def peak_plan(leaf_count: int) -> List[PeakSlot]:
    """
    Shape of every peak for ``leaf_count`` leaves, tallest first.

    Returns:
        One PeakSlot per set bit of ``leaf_count``
    """
    if leaf_count < 0:
        raise ValueError(f"Leaf count must be >= 0, got {leaf_count}")

    slots: List[PeakSlot] = []
    next_position = 0
    next_leaf = 0
    for height in range(leaf_count.bit_length() - 1, -1, -1):
        if not (leaf_count >> height) & 1:
            continue
        size = subtree_size(height)
        slots.append(PeakSlot(
            height=height,
            position=next_position + size - 1,
            first_leaf=next_leaf,
            leaf_span=1 << height,
        ))
        next_position += size
        next_leaf += 1 << height
    return slots


def locate_leaf(leaf_count: int, leaf_index: int) -> Tuple[int, PeakSlot]:
    """
    Find the peak whose subtree holds ``leaf_index``.

    Returns:
        (index into the peak list, PeakSlot)

    Raises:
        IndexError: If ``leaf_index`` is not in ``[0, leaf_count)``
    """
    if not 0 <= leaf_index < leaf_count:
        raise IndexError(f"Leaf index {leaf_index} out of range [0, {leaf_count})")
    plan = peak_plan(leaf_count)
    peak_index = next(i for i, slot in enumerate(plan) if slot.contains(leaf_index))
    return peak_index, plan[peak_index]


def sibling_positions(leaf_pos: int, offset: int, height: int) -> List[int]:
    """
    Positions of the sibling path from a leaf up to its subtree peak.

    Args:
        leaf_pos: Node position of the leaf
        offset: Leaf offset inside its subtree (its bits give the direction)
        height: Subtree height

    At level ``k`` a left child's sibling root sits ``2^(k+1) - 1``
    positions to its right and their parent right after it; a right
    child's sibling sits the same distance to its left and the parent
    immediately follows the right child.
    """
    path: List[int] = []
    pos = leaf_pos
    for level in range(height):
        span = subtree_size(level)
        if (offset >> level) & 1:
            path.append(pos - span)
            pos += 1
        else:
            path.append(pos + span)
            pos += span + 1
    return path

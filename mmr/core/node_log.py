"""
Node Log - append-ordered record of every hash the engine computes.

Leaves and merge results share one position space: position ``p`` is the
``p``-th node ever appended. Heights are kept in a parallel flat list so
that relationships are always recomputed from position/height arithmetic
and no node refers to another.
"""

from dataclasses import dataclass
from typing import Iterator, List, Optional


@dataclass(frozen=True)
class Node:
    """One entry of the Node Log."""
    position: int   # 0-based index in append order across all nodes
    height: int     # 0 for leaves, h+1 for the merge of two height-h nodes
    value: bytes


class NodeLog:
    """
    Arena of node values and heights indexed by position.

    Entries are never mutated once written, so a reader that captured
    ``len(log)`` earlier can keep reading below that bound while a writer
    appends.
    """

    def __init__(self):
        self._values: List[bytes] = []
        self._heights: List[int] = []

    def append(self, height: int, value: bytes) -> int:
        """
        Append a node.

        Returns:
            Position of the new node
        """
        if height < 0:
            raise ValueError(f"Height must be >= 0, got {height}")
        position = len(self._values)
        # Height first: a reader bounds itself by len(self._values).
        self._heights.append(height)
        self._values.append(value)
        return position

    def get(self, position: int) -> Node:
        self._check(position)
        return Node(position, self._heights[position], self._values[position])

    def value(self, position: int) -> bytes:
        self._check(position)
        return self._values[position]

    def height(self, position: int) -> int:
        self._check(position)
        return self._heights[position]

    def nodes(self, start: int = 0, stop: Optional[int] = None) -> List[Node]:
        """Nodes in ``[start, stop)``, stop defaulting to the current size."""
        if start < 0:
            raise IndexError(f"Start position must be >= 0, got {start}")
        stop = len(self) if stop is None else min(stop, len(self))
        return [Node(p, self._heights[p], self._values[p]) for p in range(start, stop)]

    def _check(self, position: int) -> None:
        if position < 0 or position >= len(self._values):
            raise IndexError(f"Node position {position} out of range [0, {len(self._values)})")

    def __len__(self) -> int:
        return len(self._values)

    def __iter__(self) -> Iterator[Node]:
        return iter(self.nodes())

    def __repr__(self) -> str:
        return f"NodeLog(size={len(self)})"

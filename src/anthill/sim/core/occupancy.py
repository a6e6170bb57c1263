from __future__ import annotations

from typing import Dict, Iterator, List, Tuple

from .position import Position


class OccupancyGrid:
    """
    Position key -> indices of the agents standing on that cell.

    Buckets are yielded in the order their cell was first occupied, and indices within a bucket
    keep insertion order, so inserting agents in creation order gives creation-ordered buckets.
    `clear` drops every key; the grid on an unbounded world only ever holds occupied cells.
    """

    def __init__(self) -> None:
        self._cells: Dict[Tuple[int, int], List[int]] = {}

    def __len__(self) -> int:
        return len(self._cells)

    def clear(self) -> None:
        self._cells = {}

    def insert(self, index: int, position: Position) -> None:
        key = position.key
        bucket = self._cells.get(key)
        if bucket is None:
            bucket = []
            self._cells[key] = bucket
        bucket.append(index)

    def buckets(self) -> Iterator[Tuple[Tuple[int, int], List[int]]]:
        return iter(self._cells.items())

    def max_occupancy(self) -> int:
        return max((len(bucket) for bucket in self._cells.values()), default=0)

"""Utility types and helpers shared by the board engine and the solver."""

from contextlib import contextmanager
from dataclasses import dataclass
from functools import total_ordering
from typing import Dict, Iterator, List, Set, Tuple

TILE_NEIGHBOUR_COUNT = 8

# Module-level cache: (width, height) -> ((neighbour_idx, ...), ...) per tile
_NEIGHBOURS_CACHE: Dict[Tuple[int, int], Tuple[Tuple[int, ...], ...]] = {}


@total_ordering
@dataclass(frozen=True)
class Position:
    """Board coordinate ordered row-major: y first, then x."""

    x: int
    y: int

    def __add__(self, other: "Position") -> "Position":
        return Position(self.x + other.x, self.y + other.y)

    def __sub__(self, other: "Position") -> "Position":
        return Position(self.x - other.x, self.y - other.y)

    def __neg__(self) -> "Position":
        return Position(-self.x, -self.y)

    def __lt__(self, other: "Position") -> bool:
        if not isinstance(other, Position):
            return NotImplemented
        return self.compare(other) == -1

    def compare(self, other: "Position") -> int:
        """Return -1, 0 or 1 comparing rows first and columns second."""
        mine = (self.y, self.x)
        theirs = (other.y, other.x)
        if mine < theirs:
            return -1
        if theirs < mine:
            return 1
        return 0


def get_neighbour_indices(width: int, height: int) -> Tuple[Tuple[int, ...], ...]:
    """
    Precompute and cache the in-bounds 8-neighbourhood of every tile index.

    Column checks use ``idx % width`` against the left and right walls so that
    an index next to one wall never picks up a tile from the opposite wall of
    the adjacent row.

    Args:
        width: Grid width (number of columns). Must be positive.
        height: Grid height (number of rows). Must be positive.

    Returns:
        Tuple indexed by tile index; each entry holds that tile's neighbour
        indices (3 for a corner, 5 for an edge, 8 for an interior tile).

    Raises:
        ValueError: If width or height is non-positive.
    """
    if width <= 0 or height <= 0:
        raise ValueError("width and height must be positive.")

    key = (width, height)
    cached = _NEIGHBOURS_CACHE.get(key)
    if cached is not None:
        return cached

    tile_count = width * height
    table: List[Tuple[int, ...]] = []
    for idx in range(tile_count):
        nbrs: List[int] = []
        has_up = idx >= width
        has_down = idx < tile_count - width

        if has_up:
            nbrs.append(idx - width)
        if has_down:
            nbrs.append(idx + width)
        # Not against the left wall.
        if idx % width != 0:
            if has_up:
                nbrs.append(idx - width - 1)
            nbrs.append(idx - 1)
            if has_down:
                nbrs.append(idx + width - 1)
        # Not against the right wall.
        if idx % width != width - 1:
            if has_up:
                nbrs.append(idx - width + 1)
            nbrs.append(idx + 1)
            if has_down:
                nbrs.append(idx + width + 1)

        table.append(tuple(nbrs))

    result = tuple(table)
    _NEIGHBOURS_CACHE[key] = result
    return result


class ScratchSpace:
    """
    Pool of reusable temporary lists.

    The solver borrows a list per pass instead of allocating fresh ones for
    every tile it inspects. A borrowed list is always handed out empty.
    """

    def __init__(self, space_size: int = 0) -> None:
        self._free: List[List[int]] = [[] for _ in range(space_size)]

    def space_size(self) -> int:
        """Return the number of idle lists currently held by the pool."""
        return len(self._free)

    @contextmanager
    def acquire(self) -> Iterator[List[int]]:
        buf = self._free.pop() if self._free else []
        try:
            yield buf
        finally:
            buf.clear()
            self._free.append(buf)


def parse_layout(width: int, height: int, layout: str) -> Set[int]:
    """
    Read a literal mine layout and return the indices of its mines.

    ``*`` marks a mine; any other non-whitespace character is a safe tile.
    Whitespace is ignored so layouts can be written one row per line.

    Raises:
        ValueError: If the layout does not hold exactly ``width * height`` tiles.
    """
    cells = "".join(layout.split())
    if len(cells) != width * height:
        raise ValueError(
            f"Layout holds {len(cells)} tiles, expected {width * height}."
        )
    return {idx for idx, ch in enumerate(cells) if ch == "*"}

"""Single board tile: a value (empty, number or mine) plus open and flag state."""

TILE_EMPTY = 0
TILE_MAX_NUMBER = 8
TILE_MINE = 9


class Tile:
    """
    One cell of a Minesweeper board.

    The value is 0 for an empty tile, 1-8 for the count of neighbouring mines
    and 9 for a mine. Flagging and opening are mutually exclusive through the
    guarded mutators; the ``*_unguarded`` variants are for board internals
    that restore the rule themselves.
    """

    __slots__ = ("_value", "_open", "_flagged")

    def __init__(
        self, value: int = TILE_EMPTY, flagged: bool = False, is_open: bool = False
    ) -> None:
        self._value: int = value
        self._flagged: bool = flagged
        self._open: bool = is_open

    def __repr__(self) -> str:
        return (
            f"Tile(value={self._value}, flagged={self._flagged}, "
            f"is_open={self._open})"
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Tile):
            return NotImplemented
        return (self._value, self._flagged, self._open) == (
            other._value,
            other._flagged,
            other._open,
        )

    @property
    def value(self) -> int:
        return self._value

    def set_value(self, value: int) -> None:
        self._value = value

    def is_mine(self) -> bool:
        return self._value == TILE_MINE

    def is_empty(self) -> bool:
        return self._value == TILE_EMPTY

    def is_number(self) -> bool:
        """Return True for values 1-8."""
        return TILE_EMPTY < self._value < TILE_MINE

    def is_open(self) -> bool:
        return self._open

    def is_flagged(self) -> bool:
        return self._flagged

    def set_mine(self) -> None:
        self._value = TILE_MINE

    def set_empty(self) -> None:
        self._value = TILE_EMPTY

    def set_open(self) -> None:
        """Open the tile unless it carries a flag."""
        if not self._flagged:
            self._open = True

    def set_open_unguarded(self) -> None:
        self._open = True

    def set_closed(self) -> None:
        self._open = False

    def set_flagged(self) -> None:
        """Flag the tile unless it is already open."""
        if not self._open:
            self._flagged = True

    def set_flagged_unguarded(self) -> None:
        self._flagged = True

    def set_unflagged(self) -> None:
        self._flagged = False

    def toggle_flag(self) -> None:
        if self._flagged:
            self.set_unflagged()
        else:
            self.set_flagged()

    def promote(self) -> None:
        """
        Raise the value by one while numbering the board.

        Mines and tiles already at 8 are left as they are.
        """
        if self._value < TILE_MAX_NUMBER:
            self._value += 1

    def reset(self) -> None:
        """Close and unflag the tile, keeping its value."""
        self.set_closed()
        self.set_unflagged()

    def clear(self) -> None:
        self.reset()
        self.set_empty()

"""Minesweeper board engine with deferred, first-move-safe mine placement."""

import logging
import random
from enum import Enum
from typing import List, Optional, Tuple

from .tile import Tile
from .utils import TILE_NEIGHBOUR_COUNT, Position, get_neighbour_indices, parse_layout

logger = logging.getLogger(__name__)


class BoardState(Enum):
    """Lifecycle of a board from construction to a finished game."""

    UNINITIALIZED = "uninitialized"
    FIRST_MOVE = "first_move"
    NEXT_MOVE = "next_move"
    GAME_WIN = "game_win"
    GAME_LOSE = "game_lose"


class BoardAllocationError(MemoryError):
    """Raised when tile storage for a board cannot be allocated."""


class Board:
    """
    Flat, row-major collection of tiles plus the game state machine.

    Mines are laid lazily on the first ``open_tile`` call so that the opened
    tile and all of its neighbours are always safe. Every mutator silently
    ignores out-of-range indices; callers may pass ``tile_count`` as an
    "outside the board" sentinel.
    """

    def __init__(
        self,
        width: Optional[int] = None,
        height: Optional[int] = None,
        seed: int = 0,
        mine_count: int = 0,
    ) -> None:
        """
        Create a board, initialising it right away when dimensions are given.

        Args:
            width: Board width (number of columns). Leave as None to create an
                UNINITIALIZED board and call ``init`` later.
            height: Board height (number of rows).
            seed: Seed for mine placement; combined with the dimensions.
            mine_count: Requested number of mines.
        """
        self._tiles: List[Tile] = []
        # Empty tiles whose region has already been flooded.
        self._expanded: List[bool] = []
        self._neighbours: Tuple[Tuple[int, ...], ...] = ()
        self._width: int = 0
        self._height: int = 0
        self._seed: int = 0
        self._mine_count: int = 0
        self._state: BoardState = BoardState.UNINITIALIZED
        # Count of flags taken off. Anything derived from the old flags is
        # stale once it moves.
        self._flag_removals: int = 0

        if width is not None and height is not None:
            self.init(width, height, seed, mine_count)

    def __repr__(self) -> str:
        return (
            f"Board(width={self._width}, height={self._height}, "
            f"seed={self._seed}, mine_count={self._mine_count}, "
            f"state={self._state.name})"
        )

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def init(self, width: int, height: int, seed: int, mine_count: int) -> None:
        """
        Resize and clear the board and wait for the first move.

        Args:
            width: Board width, must be > 0.
            height: Board height, must be > 0.
            seed: Non-negative seed for mine placement.
            mine_count: Requested number of mines, must be >= 0. It is clamped
                on the first move so the starting area stays clear.

        Raises:
            ValueError: If a parameter is out of range.
            BoardAllocationError: If tile storage cannot be allocated.
        """
        if width <= 0 or height <= 0:
            raise ValueError("Width and height must be positive.")
        if mine_count < 0:
            raise ValueError("mine_count must be non-negative.")
        if seed < 0:
            raise ValueError("seed must be non-negative.")

        self.resize(width, height)
        self._clear()
        self._flag_removals += 1
        self._seed = seed
        self._mine_count = mine_count
        self._state = BoardState.FIRST_MOVE

    def resize(self, width: int, height: int) -> None:
        """
        Set the board dimensions and reallocate tile storage.

        Raises:
            BoardAllocationError: If the storage cannot be allocated. The board
                keeps its previous dimensions in that case.
        """
        try:
            tiles = [Tile() for _ in range(width * height)]
            expanded = [False] * (width * height)
        except MemoryError as exc:
            logger.error(
                "Couldn't reserve memory for a %dx%d board: %s", width, height, exc
            )
            raise BoardAllocationError(
                f"Couldn't reserve memory for a {width}x{height} board."
            ) from exc

        self._tiles = tiles
        self._expanded = expanded
        self._width = width
        self._height = height
        self._neighbours = get_neighbour_indices(width, height)

    def reset(self) -> None:
        """Return the board to UNINITIALIZED; ``init`` starts a new game."""
        self._state = BoardState.UNINITIALIZED

    def load_layout(self, width: int, height: int, layout: str) -> None:
        """
        Lay mines from a literal layout instead of the random generator.

        The board is numbered and put straight into NEXT_MOVE, so the first
        ``open_tile`` only opens. ``mine_count`` becomes the number of ``*``
        characters in the layout.

        Raises:
            ValueError: If the layout size does not match the dimensions.
        """
        mines = parse_layout(width, height, layout)
        self.init(width, height, self._seed, 0)
        for idx in mines:
            self._tiles[idx].set_mine()
        self._mine_count = len(mines)
        self._set_numbered_tiles()
        self._state = BoardState.NEXT_MOVE

    def copy(self) -> "Board":
        """Return an independent copy of the board, tiles and state included."""
        other = Board()
        other._tiles = [
            Tile(t.value, flagged=t.is_flagged(), is_open=t.is_open())
            for t in self._tiles
        ]
        other._expanded = list(self._expanded)
        other._neighbours = self._neighbours
        other._width = self._width
        other._height = self._height
        other._seed = self._seed
        other._mine_count = self._mine_count
        other._state = self._state
        other._flag_removals = self._flag_removals
        return other

    # -------------------------------------------------------------------------
    # Player actions
    # -------------------------------------------------------------------------

    def open_tile(self, idx: int) -> BoardState:
        """
        Open the tile at ``idx`` and return the resulting board state.

        The first open lays the mines. Opening an empty tile floods its whole
        connected empty region. Opening an already open number "chords": when
        exactly ``value`` neighbours are flagged, every other neighbour opens.
        """
        if self._state is BoardState.UNINITIALIZED:
            logger.warning("open_tile(%d) called on an uninitialized board.", idx)
            return self._state
        if not self.is_inside_bounds(idx) or self._tiles[idx].is_flagged():
            return self._state

        if self._state is BoardState.FIRST_MOVE:
            self._on_first_move(idx)
        elif self._state is BoardState.NEXT_MOVE:
            self._on_next_move(idx)
        return self._state

    def flag_tile(self, idx: int) -> None:
        """Toggle the flag on a closed tile; open tiles cannot be flagged."""
        if not self.is_inside_bounds(idx):
            return
        tile = self._tiles[idx]
        if tile.is_flagged():
            self._flag_removals += 1
        tile.toggle_flag()

    def mark_flagged(self, idx: int) -> bool:
        """Flag a closed tile. Returns True if the flag was newly placed."""
        if not self.is_inside_bounds(idx):
            return False
        tile = self._tiles[idx]
        if tile.is_flagged() or tile.is_open():
            return False
        tile.set_flagged()
        return True

    def unmark_flagged(self, idx: int) -> bool:
        """Remove a flag. Returns True if a flag was removed."""
        if not self.is_inside_bounds(idx) or not self._tiles[idx].is_flagged():
            return False
        self._tiles[idx].set_unflagged()
        self._flag_removals += 1
        return True

    def _on_first_move(self, idx: int) -> None:
        self._set_mines(self._mine_count, idx)
        self._set_numbered_tiles()
        self._state = BoardState.NEXT_MOVE
        self._flood_open(idx)
        self._check_win()

    def _on_next_move(self, idx: int) -> None:
        self._flood_open(idx)
        self._check_win()

    def _check_win(self) -> None:
        if self._state is not BoardState.NEXT_MOVE:
            return
        if self.tile_count - self._mine_count == self.open_tile_count():
            self._state = BoardState.GAME_WIN
            logger.info("Board solved: all %d safe tiles open.", self.open_tile_count())

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    @property
    def tile_count(self) -> int:
        return self._width * self._height

    @property
    def mine_count(self) -> int:
        return self._mine_count

    @property
    def seed(self) -> int:
        return self._seed

    @property
    def state(self) -> BoardState:
        return self._state

    @property
    def flag_removals(self) -> int:
        """Counter bumped each time flags come off, including a re-init."""
        return self._flag_removals

    def tile(self, idx: int) -> Tile:
        """Return the tile at ``idx``. Raises IndexError when out of range."""
        if not self.is_inside_bounds(idx):
            raise IndexError(f"Tile index {idx} is outside the board.")
        return self._tiles[idx]

    def value(self, idx: int) -> int:
        return self.tile(idx).value

    def is_open(self, idx: int) -> bool:
        return self.tile(idx).is_open()

    def is_flagged(self, idx: int) -> bool:
        return self.tile(idx).is_flagged()

    def is_mine(self, idx: int) -> bool:
        return self.tile(idx).is_mine()

    def is_empty(self, idx: int) -> bool:
        return self.tile(idx).is_empty()

    def is_number(self, idx: int) -> bool:
        return self.tile(idx).is_number()

    def open_tile_count(self) -> int:
        return sum(1 for tile in self._tiles if tile.is_open())

    def flagged_tile_count(self) -> int:
        return sum(1 for tile in self._tiles if tile.is_flagged())

    def mine_indices(self) -> List[int]:
        """Return the indices of every mine, in board order."""
        return [idx for idx, tile in enumerate(self._tiles) if tile.is_mine()]

    def is_inside_bounds(self, idx: int) -> bool:
        return 0 <= idx < self.tile_count

    def to_position(self, idx: int) -> Position:
        return Position(idx % self._width, idx // self._width)

    def to_index(self, pos: Position) -> int:
        """Convert a position to an index, or ``tile_count`` if it is off the board."""
        if 0 <= pos.x < self._width and 0 <= pos.y < self._height:
            return pos.y * self._width + pos.x
        return self.tile_count

    def tile_neighbours(self, idx: int) -> Tuple[int, ...]:
        """Return the in-bounds neighbour indices of ``idx`` (empty if off the board)."""
        if not self.is_inside_bounds(idx):
            return ()
        return self._neighbours[idx]

    def neighbour_count(self, idx: int) -> int:
        """Return 3 for a corner, 5 for an edge and 8 for an interior tile."""
        if self._width < 2 or self._height < 2:
            return len(self.tile_neighbours(idx))

        vertical_edge = idx % self._width in (0, self._width - 1)
        horizontal_edge = idx < self._width or idx >= self.tile_count - self._width
        if vertical_edge and horizontal_edge:
            return 3
        if vertical_edge or horizontal_edge:
            return 5
        return TILE_NEIGHBOUR_COUNT

    # -------------------------------------------------------------------------
    # Board generation
    # -------------------------------------------------------------------------

    def _clear(self) -> None:
        for tile in self._tiles:
            tile.clear()
        self._expanded = [False] * self.tile_count

    def _set_mines(self, mine_count: int, start_idx: int) -> None:
        """
        Lay mines at random, keeping ``start_idx`` and its neighbours clear.

        The count is clamped to what fits outside that starting area, which
        also bounds the rejection-sampling loop below.
        """
        self._mine_count = max(
            0, min(mine_count, self.tile_count - self.neighbour_count(start_idx) - 1)
        )

        rng = random.Random(self._seed + self._width + self._height)
        excluded = set(self._neighbours[start_idx])
        excluded.add(start_idx)

        placed = 0
        while placed < self._mine_count:
            idx = rng.randrange(self.tile_count)
            if idx in excluded or self._tiles[idx].is_mine():
                continue
            self._tiles[idx].set_mine()
            placed += 1

        logger.debug(
            "Placed %d mines on a %dx%d board (start=%d, seed=%d).",
            placed,
            self._width,
            self._height,
            start_idx,
            self._seed,
        )

    def _set_numbered_tiles(self) -> None:
        """Promote every neighbour of every mine; mines themselves never change."""
        for idx, tile in enumerate(self._tiles):
            if not tile.is_mine():
                continue
            for n in self._neighbours[idx]:
                self._tiles[n].promote()

    # -------------------------------------------------------------------------
    # Opening
    # -------------------------------------------------------------------------

    def _flood_open(self, idx: int) -> None:
        tile = self._tiles[idx]
        if tile.is_open():
            if tile.is_number():
                self._chord(idx)
            return

        self._open_single(idx)
        if tile.is_empty():
            self._open_neighbours(self._empty_area(idx))

    def _chord(self, idx: int) -> None:
        neighbours = self._neighbours[idx]
        flagged = sum(1 for n in neighbours if self._tiles[n].is_flagged())
        if flagged != self._tiles[idx].value:
            return

        for n in neighbours:
            if self._tiles[n].is_open() or self._tiles[n].is_flagged():
                continue
            self._open_single(n)
            self._open_neighbours(self._empty_area(n))

    def _empty_area(self, idx: int) -> List[int]:
        """
        Collect the connected region of empty tiles that contains ``idx``.

        Uses an explicit stack. Flagged tiles stop the flood, and a region
        that was already flooded comes back empty.
        """
        if not self._tiles[idx].is_empty() or self._expanded[idx]:
            return []

        area: List[int] = []
        stack: List[int] = [idx]
        checked = {idx}

        while stack:
            cur = stack.pop()
            area.append(cur)
            for n in self._neighbours[cur]:
                if n in checked:
                    continue
                tile = self._tiles[n]
                if tile.is_empty() and not tile.is_flagged():
                    checked.add(n)
                    stack.append(n)

        for i in area:
            self._expanded[i] = True
        return area

    def _open_neighbours(self, area: List[int]) -> None:
        for idx in area:
            for n in self._neighbours[idx]:
                self._open_single(n)

    def _open_single(self, idx: int) -> None:
        tile = self._tiles[idx]
        if tile.is_flagged():
            return
        if tile.is_mine() and self._state is not BoardState.GAME_LOSE:
            self._state = BoardState.GAME_LOSE
            logger.info("Mine hit at index %d.", idx)
        tile.set_open_unguarded()

    # -------------------------------------------------------------------------
    # Display methods
    # -------------------------------------------------------------------------

    _ANSI_RESET = "\033[0m"
    _ANSI_COORD = "\033[96m"
    _ANSI_MINE = "\033[91m"

    def _c(self, s: str) -> str:
        """Wrap string in coordinate color."""
        return f"{self._ANSI_COORD}{s}{self._ANSI_RESET}"

    def _m(self, s: str) -> str:
        """Wrap string in mine color (red)."""
        return f"{self._ANSI_MINE}{s}{self._ANSI_RESET}"

    def format_board(self, reveal_all: bool = False) -> str:
        """
        Render the board as a multi-line string for terminal display.

        Args:
            reveal_all: If True, show mines and all underlying values.

        Returns:
            A formatted multi-line string with coordinate labels and the board
            grid. Closed tiles are ".", flags "F", empty tiles "-".
        """
        w, h = self._width, self._height

        def cell_str(idx: int) -> str:
            tile = self._tiles[idx]
            if reveal_all or tile.is_open():
                if tile.is_mine():
                    return self._m("M")
                if tile.is_empty():
                    return "-"
                return str(tile.value)
            if tile.is_flagged():
                return "F"
            return "."

        # Header: x coordinates
        header_cells = " ".join(f"{x:2d}" for x in range(w))
        out = [self._c("   ") + self._c(header_cells)]

        sep = self._c("   " + "-" * (3 * w - 1))
        out.append(sep)

        # Rows with y coordinate at left
        for y in range(h):
            row_cells = " ".join(f" {cell_str(y * w + x)}" for x in range(w))
            out.append(self._c(f"{y:2d} ") + self._c("|") + row_cells)

        return "\n".join(out)

    def print_board(self) -> None:
        """Print the current visible board state to stdout."""
        print(self.format_board(reveal_all=False))

    def print_full_board(self) -> None:
        """Print the fully revealed underlying board to stdout (for debugging)."""
        print(self.format_board(reveal_all=True))


def play_cli(board: Board, solver=None) -> None:
    """
    Run a simple terminal UI for playing on ``board``.

    Commands: ``x y`` opens a tile, ``f x y`` toggles a flag, ``s`` runs the
    solver (when one is given) and ``q`` quits.

    Args:
        board: An initialised Board to play on.
        solver: Optional solver bound to the same board.
    """
    print(
        "Minesweeper CLI (enter: x y, f x y to flag, s to solve). "
        "Coordinates are 0-based. Type 'q' to quit.\n"
    )
    print(board.format_board(reveal_all=False))

    while True:
        s = input("\nMove: ").strip()
        if s.lower() in {"q", "quit", "exit"}:
            print("Quit.")
            return

        if s.lower() == "s":
            if solver is None:
                print("No solver attached.")
                continue
            changed = solver.solve()
            print("\nSolver made progress.\n" if changed else "\nSolver is stuck.\n")
            print(board.format_board(reveal_all=False))
        else:
            parts = s.replace(",", " ").split()
            flag = bool(parts) and parts[0].lower() == "f"
            if flag:
                parts = parts[1:]
            if len(parts) != 2:
                print("Invalid input. Example: 3 5")
                continue

            try:
                x = int(parts[0])
                y = int(parts[1])
            except ValueError:
                print("Invalid input. Coordinates must be integers.")
                continue

            idx = board.to_index(Position(x, y))
            if flag:
                board.flag_tile(idx)
                print(f"\nYou toggled the flag on ({x}, {y}).\n")
            else:
                board.open_tile(idx)
                print(f"\nYou decided to open ({x}, {y}).\n")
            print(board.format_board(reveal_all=False))

        if board.state is BoardState.GAME_LOSE:
            print("\nYou hit a mine. You lost.")
            print("\nFull board:")
            print(board.format_board(reveal_all=True))
            return

        if board.state is BoardState.GAME_WIN:
            print("\nYou opened all safe tiles. You won!")
            print("\nFull board:")
            print(board.format_board(reveal_all=True))
            return

"""Logic-based Minesweeper solver working directly on a Board's tiles."""

import itertools
import logging
from collections import defaultdict
from typing import DefaultDict, Dict, Iterator, List, Optional, Protocol, Set, Tuple

from .engine import Board, BoardState
from .tile import Tile
from .utils import Position, ScratchSpace

logger = logging.getLogger(__name__)

# Above this many undetermined tiles the brute-force pass gives up.
SHUFFLE_LIMIT = 20

# Direction from a tile to its orthogonal partner in the 2-1 pattern.
_PATTERN_DIRECTIONS: Tuple[Position, ...] = (
    Position(1, 0),
    Position(-1, 0),
    Position(0, 1),
    Position(0, -1),
)


class BoardAccess(Protocol):
    """The slice of a board the solver reads and writes."""

    @property
    def tile_count(self) -> int: ...

    @property
    def mine_count(self) -> int: ...

    @property
    def state(self) -> BoardState: ...

    @property
    def flag_removals(self) -> int: ...

    def tile(self, idx: int) -> Tile: ...

    def tile_neighbours(self, idx: int) -> Tuple[int, ...]: ...

    def to_position(self, idx: int) -> Position: ...

    def to_index(self, pos: Position) -> int: ...

    def is_inside_bounds(self, idx: int) -> bool: ...

    def open_tile(self, idx: int) -> BoardState: ...

    def mark_flagged(self, idx: int) -> bool: ...


def _popcount(x: int) -> int:
    return bin(x).count("1")


class MineBoardSolver:
    """
    Constraint-propagation solver bound to a single board.

    Deduction passes, cheapest first:
    1. overlap_solve: a number equal to its closed neighbours flags them all
    2. common_solve: set difference between neighbouring numbers
    3. pattern_solve: the 2-1 pattern between orthogonal neighbours
    4. open_by_flagged: chord every satisfied number
    5. shuffle_solve: exhaustive search over small undetermined sets

    Every pass returns True iff it changed the board and does nothing once the
    game is over. The solver never guesses.
    """

    def __init__(self, board: BoardAccess, shuffle_limit: int = SHUFFLE_LIMIT) -> None:
        """
        Bind a solver to ``board``.

        Args:
            board: The board to solve; it is borrowed, not owned.
            shuffle_limit: Largest number of undetermined tiles shuffle_solve
                will enumerate.

        Raises:
            ValueError: If shuffle_limit is negative.
        """
        if shuffle_limit < 0:
            raise ValueError("shuffle_limit must be non-negative.")

        self.board = board
        self.shuffle_limit: int = shuffle_limit

        # resolved[idx] is True once every neighbour of open number idx is
        # open or flagged; such tiles carry no further information.
        self._resolved: List[bool] = []
        self._seen_removals: int = 0
        self._scratch = ScratchSpace(2)

        # Metrics / counters (for analysis)
        self.inferred_counts: DefaultDict[str, int] = defaultdict(int)
        self.attempted_counts: DefaultDict[str, int] = defaultdict(int)

    def reset(self) -> None:
        """Forget resolved tiles and counters; call after starting a new game."""
        self._resolved = []
        self._seen_removals = self.board.flag_removals
        self.inferred_counts.clear()
        self.attempted_counts.clear()

    # -------------------------------------------------------------------------
    # Board helpers
    # -------------------------------------------------------------------------

    def _playing(self) -> bool:
        return self.board.state is BoardState.NEXT_MOVE

    def _sync_resolved(self) -> None:
        """Rebuild the resolved mask after a resize or once a flag came off."""
        board = self.board
        if (
            len(self._resolved) != board.tile_count
            or self._seen_removals != board.flag_removals
        ):
            self._resolved = [False] * board.tile_count
            self._seen_removals = board.flag_removals

    def _numbered_open(self) -> Iterator[int]:
        board = self.board
        for idx in range(board.tile_count):
            tile = board.tile(idx)
            if tile.is_open() and tile.is_number():
                yield idx

    def _collect_closed(self, idx: int, out: List[int]) -> List[int]:
        """Append the closed, unflagged neighbours of ``idx`` to ``out``."""
        board = self.board
        for n in board.tile_neighbours(idx):
            tile = board.tile(n)
            if not tile.is_open() and not tile.is_flagged():
                out.append(n)
        return out

    def _closed_set(self, idx: int) -> Set[int]:
        with self._scratch.acquire() as buf:
            return set(self._collect_closed(idx, buf))

    def _flagged_count(self, idx: int) -> int:
        board = self.board
        return sum(1 for n in board.tile_neighbours(idx) if board.tile(n).is_flagged())

    def _effective_value(self, idx: int) -> int:
        """Mines still unaccounted for around ``idx`` after subtracting flags."""
        return self.board.tile(idx).value - self._flagged_count(idx)

    def _is_open_number(self, idx: int) -> bool:
        tile = self.board.tile(idx)
        return tile.is_open() and tile.is_number()

    def _open(self, idx: int) -> bool:
        """Open a closed, unflagged tile. Returns True if it was opened."""
        tile = self.board.tile(idx)
        if tile.is_open() or tile.is_flagged() or not self._playing():
            return False
        self.board.open_tile(idx)
        return True

    def _sorted(self, indices: Set[int]) -> List[int]:
        return sorted(indices, key=self.board.to_position)

    # -------------------------------------------------------------------------
    # Deduction passes
    # -------------------------------------------------------------------------

    def open_by_flagged(self) -> bool:
        """
        Chord every open number whose flagged neighbours equal its value.

        Returns:
            True if any tile was opened.
        """
        if not self._playing():
            return False
        self._sync_resolved()
        self.attempted_counts["open_by_flagged"] += 1

        board = self.board
        changed = False
        for idx in range(board.tile_count):
            if self._resolved[idx] or not self._is_open_number(idx):
                continue

            with self._scratch.acquire() as closed:
                self._collect_closed(idx, closed)
                if closed and self._flagged_count(idx) == board.tile(idx).value:
                    for n in closed:
                        if self._open(n):
                            self.inferred_counts["open_by_flagged"] += 1
                            changed = True
                    closed.clear()
                    self._collect_closed(idx, closed)
                if not closed:
                    self._resolved[idx] = True

            if not self._playing():
                break

        logger.debug("open_by_flagged changed=%s", changed)
        return changed

    def overlap_solve(self) -> bool:
        """
        Flag every closed neighbour of a number that has exactly that many
        not-open neighbours.

        Returns:
            True if any new flag was placed.
        """
        if not self._playing():
            return False
        self.attempted_counts["overlap"] += 1

        board = self.board
        changed = False
        for idx in self._numbered_open():
            not_open = [
                n for n in board.tile_neighbours(idx) if not board.tile(n).is_open()
            ]
            if len(not_open) != board.tile(idx).value:
                continue
            for n in not_open:
                if board.mark_flagged(n):
                    self.inferred_counts["overlap"] += 1
                    changed = True

        logger.debug("overlap_solve changed=%s", changed)
        return changed

    def pattern_solve(self) -> bool:
        """
        Apply the 2-1 pattern between orthogonally adjacent numbers.

        For numbers ``a`` and ``b`` one step apart whose flag-adjusted values
        differ by one, ``a`` has at least one mine among the three tiles on
        its far side from ``b``. When only one of those is still closed it is
        the mine, and then the tiles on ``b``'s far side from ``a`` are safe.

        Returns:
            True if a tile was flagged or opened.
        """
        if not self._playing():
            return False
        self.attempted_counts["pattern"] += 1

        board = self.board
        changed = False
        for a_idx in self._numbered_open():
            a_pos = board.to_position(a_idx)
            for d in _PATTERN_DIRECTIONS:
                if not self._playing():
                    return changed

                b_idx = board.to_index(a_pos + d)
                if not board.is_inside_bounds(b_idx) or not self._is_open_number(b_idx):
                    continue
                if self._effective_value(a_idx) - self._effective_value(b_idx) != 1:
                    continue

                a_tips = self._pattern_tips(a_pos - d, d)
                if len(a_tips) != 1:
                    continue

                if board.mark_flagged(a_tips[0]):
                    self.inferred_counts["pattern"] += 1
                    changed = True

                for n in self._pattern_tips(a_pos + d + d, d):
                    if self._open(n):
                        self.inferred_counts["pattern"] += 1
                        changed = True

        logger.debug("pattern_solve changed=%s", changed)
        return changed

    def _pattern_tips(self, centre: Position, d: Position) -> List[int]:
        """Closed, unflagged tiles in the line through ``centre`` across ``d``."""
        board = self.board
        across = Position(d.y, d.x)
        tips: List[int] = []
        for k in (-1, 0, 1):
            idx = board.to_index(centre + Position(across.x * k, across.y * k))
            if not board.is_inside_bounds(idx):
                continue
            tile = board.tile(idx)
            if not tile.is_open() and not tile.is_flagged():
                tips.append(idx)
        return tips

    def common_solve(self) -> bool:
        """
        Compare the closed neighbour sets of neighbouring numbers.

        With ``A`` and ``B`` the closed, unflagged neighbours of ``a`` and
        ``b``:
        - ``B`` a strict subset of ``A`` with equal flag-adjusted values means
          every tile of ``A - B`` is safe;
        - a value difference equal to ``|A - B|`` means every tile of
          ``A - B`` is a mine.

        Returns:
            True if a tile was flagged or opened.
        """
        if not self._playing():
            return False
        self.attempted_counts["common"] += 1

        board = self.board
        changed = False
        for a_idx in self._numbered_open():
            for b_idx in board.tile_neighbours(a_idx):
                if not self._playing():
                    return changed
                if not self._is_open_number(b_idx):
                    continue

                a_closed = self._closed_set(a_idx)
                if not a_closed:
                    break
                b_closed = self._closed_set(b_idx)
                a_eff = self._effective_value(a_idx)
                b_eff = self._effective_value(b_idx)
                only_a = a_closed - b_closed

                if a_eff == b_eff and b_closed < a_closed:
                    for n in self._sorted(only_a):
                        if self._open(n):
                            self.inferred_counts["common"] += 1
                            changed = True
                elif only_a and a_eff - b_eff == len(only_a):
                    for n in self._sorted(only_a):
                        if board.mark_flagged(n):
                            self.inferred_counts["common"] += 1
                            changed = True

        logger.debug("common_solve changed=%s", changed)
        return changed

    def shuffle_solve(self) -> bool:
        """
        Brute-force every mine placement over the undetermined tiles.

        Gives up when more than ``shuffle_limit`` tiles are undetermined.
        Otherwise every combination that spends exactly the remaining mine
        budget is checked against all open tiles. A unique consistent
        combination is committed: its mines get flagged and the rest opened.
        Candidates are tested on bitmasks, so an ambiguous or inconsistent
        search leaves the board untouched.

        Returns:
            True if a unique solution was found and applied.
        """
        if not self._playing():
            return False

        board = self.board
        undetermined = [
            idx
            for idx in range(board.tile_count)
            if not board.tile(idx).is_open() and not board.tile(idx).is_flagged()
        ]
        if not undetermined:
            return False
        if len(undetermined) > self.shuffle_limit:
            logger.debug(
                "shuffle_solve skipped: %d undetermined tiles (limit %d).",
                len(undetermined),
                self.shuffle_limit,
            )
            return False

        self.attempted_counts["shuffle"] += 1

        flagged_total = sum(
            1 for idx in range(board.tile_count) if board.tile(idx).is_flagged()
        )
        remaining = board.mine_count - flagged_total
        if remaining < 0 or remaining > len(undetermined):
            return False

        bit: Dict[int, int] = {idx: 1 << k for k, idx in enumerate(undetermined)}
        constraints = self._shuffle_constraints(bit)
        if constraints is None:
            return False

        solution: Optional[int] = None
        found = 0
        for combo in itertools.combinations(bit.values(), remaining):
            mines = sum(combo)
            if all(_popcount(mines & mask) == need for mask, need in constraints):
                found += 1
                if found > 1:
                    break
                solution = mines

        if found != 1 or solution is None:
            logger.debug("shuffle_solve found %s consistent placements.", found)
            return False

        for idx, b in bit.items():
            if solution & b:
                board.mark_flagged(idx)
                self.inferred_counts["shuffle"] += 1
        for idx, b in bit.items():
            if not solution & b and self._open(idx):
                self.inferred_counts["shuffle"] += 1

        logger.debug("shuffle_solve committed a unique placement.")
        return True

    def _shuffle_constraints(self, bit: Dict[int, int]) -> Optional[List[Tuple[int, int]]]:
        """
        Build ``(mask, mines_needed)`` pairs for every open tile.

        Returns None when a constraint can never be met, which makes every
        candidate placement inconsistent.
        """
        board = self.board
        constraints: List[Tuple[int, int]] = []
        for idx in range(board.tile_count):
            tile = board.tile(idx)
            if not tile.is_open() or tile.is_mine():
                continue

            mask = 0
            flagged = 0
            for n in board.tile_neighbours(idx):
                if n in bit:
                    mask |= bit[n]
                elif board.tile(n).is_flagged():
                    flagged += 1

            need = tile.value - flagged
            if need < 0 or need > _popcount(mask):
                return None
            if mask:
                constraints.append((mask, need))
        return constraints

    # -------------------------------------------------------------------------
    # Main solving loop
    # -------------------------------------------------------------------------

    def solve(self) -> bool:
        """
        Run the cheap passes to a fixpoint, then try shuffle_solve once.

        Returns:
            True if the board changed at all.
        """
        changed = False
        while self._playing():
            progress = self.overlap_solve()
            progress = self.common_solve() or progress
            progress = self.pattern_solve() or progress
            progress = self.open_by_flagged() or progress
            if not progress:
                break
            changed = True

        if self.shuffle_solve():
            changed = True
            self.open_by_flagged()

        logger.debug("solve changed=%s state=%s", changed, self.board.state.name)
        return changed


def is_solvable(
    board: Board, start_idx: int, shuffle_limit: int = SHUFFLE_LIMIT
) -> bool:
    """
    Check whether ``board`` can be won from ``start_idx`` without guessing.

    Works on a copy, so ``board`` itself is left as it was.

    Args:
        board: An initialised board, before or after its first move.
        start_idx: Index of the tile to open first.
        shuffle_limit: Passed through to the solver.

    Returns:
        True if pure deduction opens every safe tile.
    """
    trial = board.copy()
    trial.open_tile(start_idx)

    solver = MineBoardSolver(trial, shuffle_limit=shuffle_limit)
    while solver.solve():
        pass
    return trial.state is BoardState.GAME_WIN

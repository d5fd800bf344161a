"""Glue between pointer input, sprite sheets and the board engine."""

import logging
from enum import Enum
from typing import Optional, Tuple

from .engine import Board, BoardState
from .solver import MineBoardSolver

logger = logging.getLogger(__name__)

# Sprite sheet columns: 0-8 numbers, then mine, closed, flag, exploded mine.
SPRITE_MINE = 9
SPRITE_CLOSED = 10
SPRITE_FLAGGED = 11
SPRITE_EXPLODED = 12


class Button(Enum):
    LEFT = "left"
    MIDDLE = "middle"
    RIGHT = "right"


class GameController:
    """
    Translates pixel clicks into board actions and tiles into sprite clips.

    Holds no rendering state itself; whatever draws the board asks for a
    ``clip_rect`` per tile and forwards clicks to ``handle_click``.
    """

    def __init__(
        self,
        board: Board,
        solver: Optional[MineBoardSolver] = None,
        tile_size: int = 16,
        origin: Tuple[int, int] = (0, 0),
    ) -> None:
        if tile_size <= 0:
            raise ValueError("tile_size must be positive.")
        self.board = board
        self.solver = solver if solver is not None else MineBoardSolver(board)
        self.tile_size = tile_size
        self.origin = origin
        self._requested_mines = board.mine_count
        self._exploded: Optional[int] = None

    def index_at(self, px: int, py: int) -> int:
        """Return the tile index under a pixel, or ``tile_count`` when outside the board."""
        dx = px - self.origin[0]
        dy = py - self.origin[1]
        if dx < 0 or dy < 0:
            return self.board.tile_count
        x, y = dx // self.tile_size, dy // self.tile_size
        if x >= self.board.width or y >= self.board.height:
            return self.board.tile_count
        return y * self.board.width + x

    def sprite_index(self, idx: int) -> int:
        tile = self.board.tile(idx)
        if tile.is_open():
            if tile.is_mine() and idx == self._exploded:
                return SPRITE_EXPLODED
            return tile.value
        if tile.is_flagged():
            return SPRITE_FLAGGED
        return SPRITE_CLOSED

    def clip_rect(self, idx: int) -> Tuple[int, int, int, int]:
        """Return the ``(x, y, w, h)`` source rectangle for the tile's sprite."""
        size = self.tile_size
        return (self.sprite_index(idx) * size, 0, size, size)

    def handle_click(self, px: int, py: int, button: Button) -> BoardState:
        """Open on LEFT, flag on RIGHT and run the solver on MIDDLE."""
        if button is Button.MIDDLE:
            self.solver.solve()
            return self.board.state

        idx = self.index_at(px, py)
        if button is Button.LEFT:
            before = self.board.state
            state = self.board.open_tile(idx)
            if state is BoardState.GAME_LOSE and before is not BoardState.GAME_LOSE:
                self._exploded = next(
                    i for i in self.board.mine_indices() if self.board.is_open(i)
                )
            return state

        self.board.flag_tile(idx)
        return self.board.state

    def new_game(self, seed: Optional[int] = None) -> None:
        """
        Start over with the same dimensions and requested mine count.

        A board that was never given dimensions has nothing to restart; the
        call is logged and ignored.
        """
        board = self.board
        if board.tile_count == 0:
            logger.warning("new_game() called on a board without dimensions.")
            return
        board.init(
            board.width,
            board.height,
            board.seed if seed is None else seed,
            self._requested_mines,
        )
        self.solver.reset()
        self._exploded = None

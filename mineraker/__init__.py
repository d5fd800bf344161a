"""
Mineraker: Minesweeper engine and logic solver

A board engine with first-move-safe mine placement and cascade opening, plus
a solver that combines several deduction strategies:
- Overlap: a number equal to its closed neighbours flags them all
- Common: set difference between neighbouring numbers
- Pattern: the 2-1 pattern between orthogonal numbers
- Shuffle: exhaustive search once few tiles remain undetermined
"""

from .engine import Board, BoardAllocationError, BoardState, play_cli
from .solver import SHUFFLE_LIMIT, MineBoardSolver, is_solvable
from .tile import Tile
from .utils import Position
from .boardformat import format_seed, parse_seed, board_from_seed, format_layout
from .controller import Button, GameController

__version__ = "1.0.0"

__all__ = [
    # Core classes
    "Board",
    "BoardState",
    "BoardAllocationError",
    "MineBoardSolver",
    "Tile",
    "Position",
    "SHUFFLE_LIMIT",
    "is_solvable",
    # Formats
    "format_seed",
    "parse_seed",
    "board_from_seed",
    "format_layout",
    # Glue
    "GameController",
    "Button",
    # CLI
    "play_cli",
]

"""Text formats for boards: the seed string and the literal mine layout."""

import re
from typing import Set, Tuple

from .engine import Board
from .utils import parse_layout as _parse_layout

_SEED_RE = re.compile(r"^\[(\d+)\]\[(\d+)\];$")


def format_seed(board: Board) -> str:
    """Return ``"[<mine_count>][<seed>];"`` for ``board``."""
    return f"[{board.mine_count}][{board.seed}];"


def parse_seed(text: str) -> Tuple[int, int]:
    """
    Parse a seed string produced by :func:`format_seed`.

    Args:
        text: String of the form ``"[<mine_count>][<seed>];"``. Surrounding
            whitespace is ignored.

    Returns:
        Tuple of (mine_count, seed).

    Raises:
        ValueError: If the string is malformed.
    """
    match = _SEED_RE.match(text.strip())
    if match is None:
        raise ValueError(f"Malformed board seed string: {text!r}")
    return int(match.group(1)), int(match.group(2))


def board_from_seed(text: str, width: int, height: int) -> Board:
    """Create a board ready for its first move from a seed string."""
    mine_count, seed = parse_seed(text)
    return Board(width, height, seed=seed, mine_count=mine_count)


def format_layout(board: Board) -> str:
    """
    Render the full layout, one row per line.

    Mines are ``*``, empty tiles ``-`` and numbers their digit. The output
    can be fed back to :meth:`Board.load_layout`.
    """
    rows = []
    for y in range(board.height):
        row = []
        for x in range(board.width):
            tile = board.tile(y * board.width + x)
            if tile.is_mine():
                row.append("*")
            elif tile.is_empty():
                row.append("-")
            else:
                row.append(str(tile.value))
        rows.append("".join(row))
    return "\n".join(rows)


def parse_layout(width: int, height: int, text: str) -> Set[int]:
    """Return the mine indices of a literal layout. Raises ValueError on size mismatch."""
    return _parse_layout(width, height, text)

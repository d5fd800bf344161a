"""Analysis and benchmarking tools for the Minesweeper solver."""

from typing import Dict, List, Tuple

import matplotlib.pyplot as plt
import numpy as np

from .engine import Board, BoardState
from .solver import SHUFFLE_LIMIT, MineBoardSolver

STRATEGIES: Tuple[str, ...] = (
    "overlap",
    "common",
    "pattern",
    "open_by_flagged",
    "shuffle",
)

# Standard difficulty levels: name -> (width, height, mines)
LEVELS: Dict[str, Tuple[int, int, int]] = {
    "beginner": (9, 9, 10),
    "intermediate": (16, 16, 40),
    "expert": (30, 16, 99),
}


def format_solver_knowledge(
    solver: MineBoardSolver, *, show_coords: bool = True
) -> str:
    """
    Format what the solver can see of its board as a human-readable string.

    Args:
        solver: Solver instance whose board will be displayed.
        show_coords: If True, include coordinate labels and a header.

    Returns:
        A text grid where closed tiles are shown as '.', flags as 'F', empty
        tiles as '-' and numbers as their digit.
    """
    board = solver.board
    w, h = board.width, board.height

    def cell_char(idx: int) -> str:
        tile = board.tile(idx)
        if tile.is_flagged():
            return "F"
        if not tile.is_open():
            return "."
        if tile.is_mine():
            return "!"
        if tile.is_empty():
            return "-"
        return str(tile.value)

    lines: List[str] = []
    if show_coords:
        header = " ".join(f"{x:2d}" for x in range(w))
        lines.append("   " + header)
        lines.append("   " + "-" * (3 * w - 1))

    for y in range(h):
        row = " ".join(f" {cell_char(y * w + x)}" for x in range(w))
        lines.append(f"{y:2d} |" + row if show_coords else row)

    return "\n".join(lines)


def run_solver_single_test(
    width: int,
    height: int,
    mine_count: int,
    seed: int,
    *,
    show_boards: bool = False,
    shuffle_limit: int = SHUFFLE_LIMIT,
) -> Dict[str, float]:
    """
    Open the centre tile of a fresh board and let the solver run to a standstill.

    Args:
        width: Board width.
        height: Board height.
        mine_count: Requested number of mines.
        seed: Board seed.
        show_boards: If True, print the underlying board and the solver's final
            view.
        shuffle_limit: Passed through to the solver.

    Returns:
        Metrics dict with "status" (1 win, 0 stuck, -1 loss), tile counts,
        "solved_fraction" and per-strategy inferred/attempted counts.
    """
    board = Board(width, height, seed=seed, mine_count=mine_count)
    start = (height // 2) * width + width // 2
    board.open_tile(start)

    solver = MineBoardSolver(board, shuffle_limit=shuffle_limit)
    while solver.solve():
        pass

    if board.state is BoardState.GAME_WIN:
        status = 1
    elif board.state is BoardState.GAME_LOSE:
        status = -1
    else:
        status = 0

    safe_tiles = board.tile_count - board.mine_count
    out: Dict[str, float] = {
        "status": status,
        "mine_count": board.mine_count,
        "open_tiles_count": board.open_tile_count(),
        "flagged_tiles_count": board.flagged_tile_count(),
        "solved_fraction": board.open_tile_count() / safe_tiles if safe_tiles else 1.0,
    }
    for name in STRATEGIES:
        out[f"inferred_{name}_count"] = solver.inferred_counts[name]
        out[f"attempted_{name}_count"] = solver.attempted_counts[name]

    if show_boards:
        print("Underlying board (mines visible):")
        print(board.format_board(reveal_all=True))
        print()
        print("Solver view (closed tiles shown as '.'):")
        print(format_solver_knowledge(solver, show_coords=True))
        print()
        print(f"Finished with status {status}.")

    return out


def run_solver_many_tests(
    width: int,
    height: int,
    mine_count: int,
    runs: int,
    *,
    seed: int = 0,
    shuffle_limit: int = SHUFFLE_LIMIT,
) -> Dict[str, float]:
    """
    Run many independent boards (seeds ``seed .. seed + runs - 1``) and average.

    Returns:
        Averages of every single-test metric (prefixed with "avg_"), plus
        win_rate, stuck_rate and loss_rate.

    Raises:
        ValueError: If runs is not positive.
    """
    if runs <= 0:
        raise ValueError("runs must be positive.")

    results = [
        run_solver_single_test(
            width, height, mine_count, seed + i, shuffle_limit=shuffle_limit
        )
        for i in range(runs)
    ]

    statuses = np.array([r["status"] for r in results])
    out: Dict[str, float] = {
        f"avg_{key}": float(np.mean([r[key] for r in results]))
        for key in results[0]
        if key != "status"
    }
    out["win_rate"] = float(np.mean(statuses == 1))
    out["stuck_rate"] = float(np.mean(statuses == 0))
    out["loss_rate"] = float(np.mean(statuses == -1))
    return out


def run_solver_level_analysis(
    runs: int, *, seed: int = 0, show: bool = True
) -> Dict[str, Dict[str, float]]:
    """
    Run aggregated solver tests on the standard difficulty levels and plot summaries.

    Args:
        runs: Number of boards per difficulty level.
        seed: First seed used on every level.
        show: If True, display the charts with matplotlib.

    Returns:
        Mapping from level name to statistics dict returned by
        run_solver_many_tests().
    """
    results: Dict[str, Dict[str, float]] = {}
    for level, (w, h, m) in LEVELS.items():
        results[level] = run_solver_many_tests(w, h, m, runs, seed=seed)

    if not show:
        return results

    level_names = list(LEVELS.keys())
    x = np.arange(len(level_names))

    # 1) Inferences made (by strategy)
    bar_w = 0.8 / len(STRATEGIES)
    plt.figure()  # type: ignore[misc]
    for i, name in enumerate(STRATEGIES):
        inferred = [results[n][f"avg_inferred_{name}_count"] for n in level_names]
        offset = (i - (len(STRATEGIES) - 1) / 2) * bar_w
        plt.bar(x + offset, inferred, width=bar_w, label=name)  # type: ignore[misc]
    plt.xticks(x, level_names)  # type: ignore[misc]
    plt.ylabel("Average inferred tiles")  # type: ignore[misc]
    plt.title("Average inferences by strategy (per game)")  # type: ignore[misc]
    plt.legend()  # type: ignore[misc]
    plt.tight_layout()
    plt.show()  # type: ignore[misc]

    # 2) Outcome by level
    bar_w = 0.25
    wins = [results[n]["win_rate"] for n in level_names]
    stuck = [results[n]["stuck_rate"] for n in level_names]
    solved = [results[n]["avg_solved_fraction"] for n in level_names]

    plt.figure()  # type: ignore[misc]
    plt.bar(x - bar_w, wins, width=bar_w, label="win rate")  # type: ignore[misc]
    plt.bar(x, stuck, width=bar_w, label="stuck rate")  # type: ignore[misc]
    plt.bar(x + bar_w, solved, width=bar_w, label="solved fraction")  # type: ignore[misc]
    plt.xticks(x, level_names)  # type: ignore[misc]
    plt.ylim(0.0, 1.0)  # type: ignore[misc]
    plt.title("Solver outcome by difficulty level")  # type: ignore[misc]
    plt.legend()  # type: ignore[misc]
    plt.tight_layout()
    plt.show()  # type: ignore[misc]

    return results

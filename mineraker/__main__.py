"""Command-line entry point: ``python -m mineraker``."""

import argparse
import logging
import random

from .engine import Board, BoardState, play_cli
from .solver import SHUFFLE_LIMIT, MineBoardSolver

logger = logging.getLogger("mineraker")


def main(argv=None) -> int:
    ap = argparse.ArgumentParser(description="Play or auto-solve Minesweeper.")
    ap.add_argument("--width", type=int, default=9)
    ap.add_argument("--height", type=int, default=9)
    ap.add_argument("--mines", type=int, default=10)
    ap.add_argument("--seed", type=int, default=None, help="Random if omitted.")
    ap.add_argument("--solve", action="store_true", help="Open the centre and let the solver play.")
    ap.add_argument("--shuffle-limit", type=int, default=SHUFFLE_LIMIT)
    ap.add_argument("--verbose", action="store_true")
    args = ap.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    seed = args.seed if args.seed is not None else random.getrandbits(32)
    board = Board(args.width, args.height, seed=seed, mine_count=args.mines)
    solver = MineBoardSolver(board, shuffle_limit=args.shuffle_limit)
    logger.info("New %dx%d board, %d mines, seed %d.", args.width, args.height, args.mines, seed)

    if not args.solve:
        play_cli(board, solver)
        return 0

    board.open_tile((args.height // 2) * args.width + args.width // 2)
    while solver.solve():
        pass
    board.print_board()
    logger.info("Solver finished in state %s.", board.state.name)
    return 0 if board.state is BoardState.GAME_WIN else 1


if __name__ == "__main__":
    raise SystemExit(main())

"""
Quickstart example for Mineraker.

This script demonstrates basic usage of the board engine and solver.
"""

from mineraker import Board, BoardState, MineBoardSolver, format_seed, is_solvable
from mineraker.analysis import run_solver_many_tests


def main():
    print("=" * 60)
    print("Mineraker - Quickstart Example")
    print("=" * 60)

    # Example 1: Solve a single game
    print("\n1. Solving a single Intermediate game (16x16, 40 mines)...")
    print("-" * 60)

    board = Board(width=16, height=16, seed=7, mine_count=40)
    print(f"Board seed string: {format_seed(board)}")

    start = 8 * 16 + 8
    print(f"Solvable without guessing from the centre: {is_solvable(board, start)}")

    board.open_tile(start)
    solver = MineBoardSolver(board)
    while solver.solve():
        pass

    result = {
        BoardState.GAME_WIN: "WON",
        BoardState.GAME_LOSE: "LOST",
    }.get(board.state, "STUCK (needs a guess)")
    print(f"Result: {result}")
    print(f"Tiles open: {board.open_tile_count()}")
    print(f"Flags placed: {board.flagged_tile_count()}")
    for name, count in sorted(solver.inferred_counts.items()):
        print(f"{name} inferences: {count}")

    # Example 2: Show final board state
    print("\n2. Final board state:")
    print("-" * 60)
    print(board.format_board(reveal_all=False))

    # Example 3: Run multiple games for statistics
    print("\n3. Running 50 games for win rate statistics...")
    print("-" * 60)

    results = run_solver_many_tests(width=16, height=16, mine_count=40, runs=50)

    print(f"Win rate: {results['win_rate']*100:.1f}%")
    print(f"Stuck rate: {results['stuck_rate']*100:.1f}%")
    print(f"Average solved fraction: {results['avg_solved_fraction']*100:.1f}%")

    # Example 4: Compare difficulty levels
    print("\n4. Win rates by difficulty level (10 games each)...")
    print("-" * 60)

    difficulties = [
        ("Beginner", 9, 9, 10),
        ("Intermediate", 16, 16, 40),
        ("Expert", 30, 16, 99),
    ]

    for name, w, h, m in difficulties:
        results = run_solver_many_tests(width=w, height=h, mine_count=m, runs=10)
        print(f"{name:15s} ({w}x{h}, {m:2d} mines): {results['win_rate']*100:5.1f}% win rate")

    print("\n" + "=" * 60)
    print("Done!")
    print("=" * 60)


if __name__ == "__main__":
    main()

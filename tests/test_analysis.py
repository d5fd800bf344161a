import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt
import pytest

from mineraker import Board, MineBoardSolver
from mineraker.analysis import (
    LEVELS,
    STRATEGIES,
    format_solver_knowledge,
    run_solver_level_analysis,
    run_solver_many_tests,
    run_solver_single_test,
)


def test_format_solver_knowledge():
    board = Board()
    board.load_layout(3, 3, "*........")
    board.open_tile(4)
    board.flag_tile(0)
    solver = MineBoardSolver(board)

    assert format_solver_knowledge(solver, show_coords=False).split("\n") == [
        " F  .  .",
        " .  1  .",
        " .  .  .",
    ]
    assert len(format_solver_knowledge(solver).split("\n")) == 5


def test_single_test_metrics():
    out = run_solver_single_test(9, 9, 10, seed=4)
    assert out["status"] in (0, 1)
    assert 0.0 < out["solved_fraction"] <= 1.0
    for name in STRATEGIES:
        assert f"inferred_{name}_count" in out
        assert f"attempted_{name}_count" in out


def test_single_test_prints_boards(capsys):
    run_solver_single_test(9, 9, 10, seed=4, show_boards=True)
    out = capsys.readouterr().out
    assert "Solver view" in out
    assert "Finished with status" in out


def test_many_tests_rates_add_up():
    out = run_solver_many_tests(9, 9, 10, runs=4)
    assert out["win_rate"] + out["stuck_rate"] + out["loss_rate"] == pytest.approx(1.0)
    assert out["loss_rate"] == 0.0
    assert "avg_solved_fraction" in out


def test_many_tests_needs_runs():
    with pytest.raises(ValueError):
        run_solver_many_tests(9, 9, 10, runs=0)


def test_level_analysis(monkeypatch):
    monkeypatch.setattr(plt, "show", lambda *args, **kwargs: None)
    results = run_solver_level_analysis(1, seed=3, show=True)
    assert set(results) == set(LEVELS)
    plt.close("all")

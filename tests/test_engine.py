import logging

import pytest

import mineraker.engine as engine
from mineraker import Board, BoardAllocationError, BoardState, Position, play_cli


def _open_set(board):
    return {idx for idx in range(board.tile_count) if board.is_open(idx)}


def _chord_board():
    """3x3 with a single mine in the top-left corner and the centre opened."""
    board = Board()
    board.load_layout(3, 3, "*........")
    board.open_tile(4)
    return board


# ---------------------------------------------------------------------------
# Lifecycle
# ---------------------------------------------------------------------------


def test_uninitialized_board_ignores_moves(caplog):
    board = Board()
    assert board.state is BoardState.UNINITIALIZED
    with caplog.at_level(logging.WARNING, logger="mineraker.engine"):
        assert board.open_tile(0) is BoardState.UNINITIALIZED
    assert "uninitialized" in caplog.text


def test_new_board_waits_for_first_move():
    board = Board(9, 9, seed=3, mine_count=10)
    assert board.state is BoardState.FIRST_MOVE
    assert board.tile_count == 81
    assert board.mine_indices() == []


@pytest.mark.parametrize(
    "width,height,seed,mines",
    [(0, 5, 0, 1), (5, 0, 0, 1), (5, 5, 0, -1), (5, 5, -1, 1)],
)
def test_init_rejects_bad_parameters(width, height, seed, mines):
    with pytest.raises(ValueError):
        Board(width, height, seed=seed, mine_count=mines)


def test_allocation_failure_is_logged_and_raised(monkeypatch, caplog):
    def no_memory(*args, **kwargs):
        raise MemoryError

    monkeypatch.setattr(engine, "Tile", no_memory)
    with caplog.at_level(logging.ERROR, logger="mineraker.engine"):
        with pytest.raises(BoardAllocationError) as excinfo:
            Board(4, 4)
    assert isinstance(excinfo.value, MemoryError)
    assert "4x4" in caplog.text


def test_reset_returns_to_uninitialized():
    board = Board(3, 3)
    board.reset()
    assert board.state is BoardState.UNINITIALIZED
    board.init(3, 3, 0, 0)
    assert board.state is BoardState.FIRST_MOVE


def test_copy_is_independent():
    board = Board(5, 5, seed=1, mine_count=3)
    board.open_tile(12)
    clone = board.copy()
    assert clone.state is board.state
    assert clone.mine_indices() == board.mine_indices()

    closed = next(i for i in range(clone.tile_count) if not clone.is_open(i))
    clone.flag_tile(closed)
    assert clone.is_flagged(closed)
    assert not board.is_flagged(closed)


# ---------------------------------------------------------------------------
# Mine placement
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("seed", range(8))
def test_first_move_and_neighbours_are_never_mines(seed):
    board = Board(4, 4, seed=seed, mine_count=2)
    board.open_tile(0)
    for idx in (0, 1, 4, 5):
        assert not board.is_mine(idx)
    assert len(board.mine_indices()) == board.mine_count == 2


def test_mine_count_is_clamped_to_fit_outside_start_area():
    board = Board(4, 4, seed=1, mine_count=15)
    board.open_tile(0)
    assert board.mine_count == 12
    assert len(board.mine_indices()) == 12
    assert board.state is BoardState.GAME_WIN


def test_same_seed_gives_same_layout():
    a = Board(16, 16, seed=42, mine_count=40)
    b = Board(16, 16, seed=42, mine_count=40)
    a.open_tile(100)
    b.open_tile(100)
    assert a.mine_indices() == b.mine_indices()


@pytest.mark.parametrize("seed", [0, 5, 17, 99])
def test_numbers_count_neighbouring_mines(seed):
    board = Board(8, 8, seed=seed, mine_count=12)
    board.open_tile(27)
    mines = set(board.mine_indices())
    for idx in range(board.tile_count):
        if idx in mines:
            continue
        expected = sum(1 for n in board.tile_neighbours(idx) if n in mines)
        assert board.value(idx) == expected


def test_zero_mines_wins_on_first_move():
    board = Board(3, 3, mine_count=0)
    assert board.open_tile(4) is BoardState.GAME_WIN
    assert board.open_tile_count() == 9


# ---------------------------------------------------------------------------
# Opening
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("seed", [2, 11, 23])
def test_cascade_opens_the_empty_region_and_its_border(seed):
    board = Board(10, 10, seed=seed, mine_count=15)
    start = 55
    board.open_tile(start)

    region = set()
    stack = [start]
    while stack:
        cur = stack.pop()
        if cur in region:
            continue
        region.add(cur)
        stack.extend(n for n in board.tile_neighbours(cur) if board.is_empty(n))
    expected = set(region)
    for idx in region:
        expected.update(board.tile_neighbours(idx))

    assert _open_set(board) == expected


def test_out_of_bounds_open_is_ignored():
    board = Board(3, 3, mine_count=1)
    assert board.open_tile(board.tile_count) is BoardState.FIRST_MOVE
    assert board.open_tile(-1) is BoardState.FIRST_MOVE
    assert board.open_tile_count() == 0


def test_flagged_tile_does_not_open():
    board = Board(3, 3, mine_count=1)
    board.flag_tile(0)
    assert board.open_tile(0) is BoardState.FIRST_MOVE
    assert not board.is_open(0)


def test_flags_stop_the_flood():
    board = Board()
    board.load_layout(3, 3, ".........")
    board.flag_tile(1)
    board.open_tile(8)
    assert _open_set(board) == set(range(9)) - {1}
    assert board.is_flagged(1)
    assert board.state is BoardState.NEXT_MOVE


def test_opening_a_mine_loses_and_freezes_the_board():
    board = _chord_board()
    assert board.open_tile(0) is BoardState.GAME_LOSE
    opened = board.open_tile_count()
    assert board.open_tile(8) is BoardState.GAME_LOSE
    assert board.open_tile_count() == opened


def test_load_layout_sets_mines_and_numbers():
    board = Board()
    board.load_layout(3, 3, "*.*\n...\n...")
    assert board.state is BoardState.NEXT_MOVE
    assert board.mine_count == 2
    assert [board.value(i) for i in (1, 3, 4, 5, 6)] == [2, 1, 2, 1, 0]

    board.open_tile(1)
    assert _open_set(board) == {1}


# ---------------------------------------------------------------------------
# Chording
# ---------------------------------------------------------------------------


def test_chord_needs_exactly_value_flags():
    board = _chord_board()
    board.flag_tile(1)
    board.flag_tile(2)
    board.open_tile(4)
    assert _open_set(board) == {4}

    # One wrong flag matching the value opens the real mine.
    board.flag_tile(2)
    assert board.open_tile(4) is BoardState.GAME_LOSE
    assert board.is_open(0)


def test_chord_with_correct_flag_wins():
    board = _chord_board()
    board.flag_tile(0)
    assert board.open_tile(4) is BoardState.GAME_WIN
    assert board.open_tile_count() == 8


# ---------------------------------------------------------------------------
# Flags and queries
# ---------------------------------------------------------------------------


def test_flag_toggle_is_an_involution():
    board = Board(3, 3)
    board.flag_tile(2)
    board.flag_tile(2)
    assert not board.is_flagged(2)
    board.flag_tile(board.tile_count)


def test_mark_and_unmark_report_changes():
    board = _chord_board()
    assert board.mark_flagged(0)
    assert not board.mark_flagged(0)
    assert not board.mark_flagged(4)
    assert board.flagged_tile_count() == 1
    assert board.unmark_flagged(0)
    assert not board.unmark_flagged(0)
    assert not board.unmark_flagged(-1)


def test_positions_and_indices():
    board = Board(4, 3)
    assert board.to_position(6) == Position(2, 1)
    assert board.to_index(Position(2, 1)) == 6
    assert board.to_index(Position(4, 0)) == board.tile_count
    assert board.to_index(Position(0, -1)) == board.tile_count
    assert board.tile_neighbours(board.tile_count) == ()
    with pytest.raises(IndexError):
        board.tile(-1)


def test_neighbour_count():
    board = Board(4, 4)
    assert board.neighbour_count(0) == 3
    assert board.neighbour_count(2) == 5
    assert board.neighbour_count(8) == 5
    assert board.neighbour_count(5) == 8
    assert Board(1, 3).neighbour_count(1) == 2


def test_format_board_shows_flags_and_reveals_mines():
    board = _chord_board()
    board.flag_tile(0)
    text = board.format_board()
    assert "F" in text and "M" not in text
    assert "M" in board.format_board(reveal_all=True)


def test_play_cli_runs_until_win(monkeypatch, capsys):
    board = Board(3, 3, mine_count=0)
    moves = iter(["nonsense", "a b", "1 1"])
    monkeypatch.setattr("builtins.input", lambda prompt="": next(moves))
    play_cli(board)
    out = capsys.readouterr().out
    assert "Invalid input" in out
    assert "You won" in out
    assert board.state is BoardState.GAME_WIN


def test_play_cli_quit(monkeypatch, capsys):
    board = Board(3, 3, mine_count=1)
    moves = iter(["f 0 0", "s", "q"])
    monkeypatch.setattr("builtins.input", lambda prompt="": next(moves))
    play_cli(board)
    out = capsys.readouterr().out
    assert "No solver attached." in out
    assert "Quit." in out
    assert board.is_flagged(0)


def test_flag_removals_count_every_flag_taken_off():
    board = Board(3, 3)
    start = board.flag_removals
    board.flag_tile(0)
    assert board.flag_removals == start
    board.flag_tile(0)
    board.mark_flagged(1)
    board.unmark_flagged(1)
    assert board.flag_removals == start + 2
    board.init(3, 3, 0, 0)
    assert board.flag_removals == start + 3

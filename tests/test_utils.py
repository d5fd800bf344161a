import pytest

from mineraker.utils import Position, ScratchSpace, get_neighbour_indices, parse_layout


def test_position_arithmetic():
    a = Position(2, 3)
    b = Position(1, -1)
    assert a + b == Position(3, 2)
    assert a - b == Position(1, 4)
    assert -a == Position(-2, -3)


def test_position_orders_rows_first():
    assert Position(5, 0) < Position(0, 1)
    assert Position(0, 1) < Position(1, 1)
    assert Position(1, 1).compare(Position(1, 1)) == 0
    assert sorted([Position(1, 1), Position(3, 0), Position(0, 1)]) == [
        Position(3, 0),
        Position(0, 1),
        Position(1, 1),
    ]


def test_neighbour_counts_per_tile_kind():
    nbrs = get_neighbour_indices(4, 3)
    assert len(nbrs[0]) == 3
    assert len(nbrs[1]) == 5
    assert len(nbrs[4]) == 5
    assert len(nbrs[5]) == 8
    assert len(nbrs[11]) == 3


def test_neighbours_do_not_wrap_across_rows():
    nbrs = get_neighbour_indices(4, 4)
    # Right wall of row 0 and left wall of row 1 are not adjacent.
    assert 4 not in nbrs[3]
    assert 3 not in nbrs[4]
    assert sorted(nbrs[3]) == [2, 6, 7]


def test_neighbour_table_is_symmetric():
    nbrs = get_neighbour_indices(5, 4)
    for idx, row in enumerate(nbrs):
        for n in row:
            assert idx in nbrs[n]


def test_neighbour_table_is_cached():
    assert get_neighbour_indices(6, 2) is get_neighbour_indices(6, 2)


@pytest.mark.parametrize("width,height", [(0, 3), (3, 0), (-1, 2)])
def test_neighbour_indices_reject_bad_dimensions(width, height):
    with pytest.raises(ValueError):
        get_neighbour_indices(width, height)


def test_scratch_space_hands_out_empty_lists():
    scratch = ScratchSpace(1)
    with scratch.acquire() as buf:
        buf.extend([1, 2, 3])
    assert scratch.space_size() == 1
    with scratch.acquire() as buf:
        assert buf == []
        with scratch.acquire() as other:
            assert other is not buf
    assert scratch.space_size() == 2


def test_parse_layout_ignores_whitespace():
    assert parse_layout(3, 2, "*..\n..*") == {0, 5}


def test_parse_layout_rejects_wrong_size():
    with pytest.raises(ValueError):
        parse_layout(3, 3, "*..")

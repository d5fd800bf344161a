from mineraker.tile import TILE_MAX_NUMBER, TILE_MINE, Tile


def test_new_tile_is_closed_empty_and_unflagged():
    tile = Tile()
    assert tile.is_empty()
    assert not tile.is_open()
    assert not tile.is_flagged()
    assert not tile.is_number()


def test_open_and_flag_are_mutually_exclusive():
    tile = Tile()
    tile.set_flagged()
    tile.set_open()
    assert tile.is_flagged() and not tile.is_open()

    tile.set_unflagged()
    tile.set_open()
    tile.set_flagged()
    assert tile.is_open() and not tile.is_flagged()


def test_toggle_flag_twice_restores_state():
    tile = Tile(3)
    tile.toggle_flag()
    assert tile.is_flagged()
    tile.toggle_flag()
    assert tile == Tile(3)


def test_toggle_flag_on_open_tile_is_noop():
    tile = Tile(2, is_open=True)
    tile.toggle_flag()
    assert not tile.is_flagged()


def test_promote_stops_at_eight_and_skips_mines():
    tile = Tile(TILE_MAX_NUMBER - 1)
    tile.promote()
    tile.promote()
    assert tile.value == TILE_MAX_NUMBER

    mine = Tile()
    mine.set_mine()
    mine.promote()
    assert mine.value == TILE_MINE
    assert mine.is_mine() and not mine.is_number()


def test_reset_keeps_value_and_clear_drops_it():
    tile = Tile(5, is_open=True)
    tile.reset()
    assert tile.value == 5 and not tile.is_open()

    tile.set_flagged_unguarded()
    tile.clear()
    assert tile == Tile()

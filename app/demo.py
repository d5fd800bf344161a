"""
Mineraker - Interactive Demo

Run with: streamlit run app/demo.py
"""

import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

import streamlit as st
from typing import Dict, Tuple

from mineraker import Board, BoardState, Button, GameController, format_seed
from mineraker.analysis import LEVELS, STRATEGIES
from mineraker.controller import SPRITE_CLOSED, SPRITE_EXPLODED, SPRITE_FLAGGED, SPRITE_MINE

# Per-sprite (text, background, foreground). Numbers share one background.
NUMBER_COLORS = ["#000000", "#0000ff", "#008000", "#ff0000", "#000080",
                 "#800000", "#008080", "#000000", "#808080"]
SPRITE_STYLES: Dict[int, Tuple[str, str, str]] = {
    SPRITE_MINE: ("M", "#ffcccc", "#ff0000"),
    SPRITE_CLOSED: (".", "#c0c0c0", "#666666"),
    SPRITE_FLAGGED: ("F", "#ffa500", "#ffffff"),
    SPRITE_EXPLODED: ("M", "#ff0000", "#ffffff"),
}
LEGEND = [
    (SPRITE_CLOSED, "Closed"),
    (SPRITE_FLAGGED, "Flagged"),
    (SPRITE_EXPLODED, "Hit mine"),
    (SPRITE_MINE, "Mine (shown at end)"),
]


def sprite_style(sprite: int) -> Tuple[str, str, str]:
    if sprite in SPRITE_STYLES:
        return SPRITE_STYLES[sprite]
    bg = "#f0f0f0" if sprite == 0 else "#ffffff"
    return (str(sprite) if sprite else "&nbsp;", bg, NUMBER_COLORS[sprite])


def cell_metrics(width: int) -> Tuple[int, str]:
    """Pick cell size and font size so wide boards still fit the column."""
    for min_width, size, font in ((30, 14, "10px"), (25, 16, "11px"), (16, 20, "13px")):
        if width >= min_width:
            return size, font
    return 26, "15px"


def render_board_html(controller: GameController, show_mines: bool = False) -> str:
    """Render the board as an HTML table, one sprite per cell."""
    board = controller.board
    size, font = cell_metrics(board.width)

    rows = []
    for y in range(board.height):
        cells = []
        for x in range(board.width):
            idx = y * board.width + x
            sprite = controller.sprite_index(idx)
            if show_mines and sprite == SPRITE_CLOSED and board.is_mine(idx):
                sprite = SPRITE_MINE
            text, bg, fg = sprite_style(sprite)
            cells.append(
                f'<td style="width: {size}px; height: {size}px; text-align: center; '
                f'background: {bg}; border: 1px solid #999; color: {fg}; '
                f'font-weight: bold; font-size: {font};">{text}</td>'
            )
        rows.append("<tr>" + "".join(cells) + "</tr>")

    return (
        '<div style="font-family: monospace; line-height: 1.2;">'
        '<table style="border-collapse: collapse; margin: auto;">'
        + "".join(rows)
        + "</table></div>"
    )


def render_legend_html() -> str:
    spans = []
    for sprite, label in LEGEND:
        text, bg, fg = sprite_style(sprite)
        spans.append(
            f'<span style="background: {bg}; color: {fg}; padding: 2px 6px; '
            f'margin: 0 4px; font-weight: bold;">{text}</span> {label}'
        )
    return '<div style="font-size: 12px; margin-top: 10px;"><b>Legend:</b> ' + " ".join(spans) + "</div>"


def start_game(width: int, height: int, mines: int, seed: int) -> None:
    board = Board(width, height, seed=seed, mine_count=mines)
    st.session_state.controller = GameController(board)


def click(controller: GameController, x: int, y: int, button: Button) -> None:
    """Forward a click on tile (x, y) as if it came from the pointer."""
    half = controller.tile_size // 2
    controller.handle_click(
        x * controller.tile_size + half, y * controller.tile_size + half, button
    )


def main():
    st.set_page_config(page_title="Mineraker", page_icon="💣", layout="wide")

    st.title("Mineraker")
    st.markdown(
        "Minesweeper with a solver that only makes moves it can prove. "
        "When deduction runs out it stops instead of guessing."
    )

    # Sidebar configuration
    st.sidebar.header("Game Configuration")
    options = [name.title() for name in LEVELS] + ["Custom"]
    preset = st.sidebar.selectbox("Difficulty Preset", options)

    if preset != "Custom":
        width, height, mines = LEVELS[preset.lower()]
    else:
        width = st.sidebar.slider("Width", 5, 30, 16)
        height = st.sidebar.slider("Height", 5, 30, 16)
        max_mines = width * height - 9
        mines = st.sidebar.slider("Mines", 1, max_mines, min(40, max_mines))
    seed = int(st.sidebar.number_input("Seed", min_value=0, value=0, step=1))

    # Start a fresh game whenever the settings change
    settings = (width, height, mines, seed)
    if st.session_state.get("settings") != settings:
        start_game(width, height, mines, seed)
        st.session_state.settings = settings

    controller: GameController = st.session_state.controller
    board = controller.board
    solver = controller.solver

    col1, col2 = st.columns([3, 1])

    with col1:
        st.subheader("Game Board")
        st.caption(f"Seed string: {format_seed(board)}")

        b1, b2, b3 = st.columns(3)
        if b1.button("New Game", type="primary"):
            controller.new_game()
            st.rerun()
        if b2.button("Solver Step"):
            click(controller, 0, 0, Button.MIDDLE)
            st.rerun()
        if b3.button("Solve"):
            if board.state is BoardState.FIRST_MOVE:
                click(controller, width // 2, height // 2, Button.LEFT)
            while solver.solve():
                pass
            st.rerun()

        x_col, y_col, open_col, flag_col = st.columns(4)
        x = int(x_col.number_input("x", min_value=0, max_value=width - 1, value=width // 2))
        y = int(y_col.number_input("y", min_value=0, max_value=height - 1, value=height // 2))
        if open_col.button("Open"):
            click(controller, x, y, Button.LEFT)
            st.rerun()
        if flag_col.button("Flag"):
            click(controller, x, y, Button.RIGHT)
            st.rerun()

        finished = board.state in (BoardState.GAME_WIN, BoardState.GAME_LOSE)
        st.markdown(render_board_html(controller, show_mines=finished), unsafe_allow_html=True)
        st.markdown(render_legend_html(), unsafe_allow_html=True)

        if board.state is BoardState.GAME_WIN:
            st.success("Solved! Every safe tile is open.")
        elif board.state is BoardState.GAME_LOSE:
            st.error("Boom. A mine was opened.")

    with col2:
        st.subheader("Board")
        st.metric("State", board.state.name.replace("_", " ").title())
        st.metric("Open Tiles", f"{board.open_tile_count()} / {board.tile_count - board.mine_count}")
        st.metric("Flags", f"{board.flagged_tile_count()} / {board.mine_count}")

        st.markdown("---")
        st.subheader("Solver Statistics")
        st.table(
            {
                "strategy": list(STRATEGIES),
                "inferred": [solver.inferred_counts[name] for name in STRATEGIES],
                "passes": [solver.attempted_counts[name] for name in STRATEGIES],
            }
        )


if __name__ == "__main__":
    main()

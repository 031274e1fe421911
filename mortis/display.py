"""Terminal rendering of the agent playing, with a preview of the next piece."""

from __future__ import annotations

import random
import sys
import time
from typing import TextIO

from .agent import Action, best_action, random_piece
from .board import BOARD_HEIGHT, BOARD_WIDTH, PIECE_COLORS, WEIGHTS, Board
from .piece import PieceType, rotation

PREVIEW_SIZE = 4
PANEL_ROWS = 6

_BLOCK = "\u25a0"
_RESET = "\x1b[0m"
_DEFAULT_COLOR = "\x1b[37m"


def _block(color: str) -> str:
    return f"{color}{_BLOCK}{_RESET}"


def next_preview(piece_type: PieceType | int) -> tuple[tuple[bool, ...], ...]:
    """A 4x4 mask of the piece in its first rotation, centred horizontally."""
    piece = rotation(piece_type, 0)
    offset_x = (PREVIEW_SIZE - piece.width) // 2
    offset_y = 1
    filled = {
        (row + offset_y, col + offset_x)
        for row, col in piece.cells()
        if row + offset_y < PREVIEW_SIZE and col + offset_x < PREVIEW_SIZE
    }
    return tuple(
        tuple((row, col) in filled for col in range(PREVIEW_SIZE))
        for row in range(PREVIEW_SIZE)
    )


def _cell_color(board: Board, y: int, x: int) -> str:
    index = board.color_grid[y][x]
    index = 0 if index is None else index
    return PIECE_COLORS[index] if 0 <= index < len(PIECE_COLORS) else _DEFAULT_COLOR


def render_game(
    board: Board,
    current_piece: PieceType | int,
    next_piece: PieceType | int,
    action: Action,
) -> str:
    """The board framed next to a NEXT panel, followed by the move just made."""
    preview_mask = next_preview(next_piece)
    next_color = PIECE_COLORS[int(next_piece)]
    blank = " " * BOARD_WIDTH

    lines = [
        "╔" + "═" * BOARD_WIDTH + "╗    ╔══════╗",
        "║" + blank + "║    ║ NEXT ║",
        "║" + blank + "║    ╠══════╣",
        "║" + blank + "║    ║      ║",
        "║" + blank + "║    ║      ║",
        "║" + blank + "║    ║      ║",
    ]

    for y in reversed(range(BOARD_HEIGHT)):
        cells = "".join(
            _block(_cell_color(board, y, x)) if board.grid[y][x] else " "
            for x in range(BOARD_WIDTH)
        )
        preview_row = BOARD_HEIGHT - y - 1
        if preview_row < PANEL_ROWS:
            if 1 <= preview_row <= PREVIEW_SIZE:
                inner = "".join(
                    _block(next_color) if filled else " "
                    for filled in preview_mask[preview_row - 1]
                )
            else:
                inner = " " * PREVIEW_SIZE
            panel = "║    ║ " + inner + " ║"
        else:
            panel = "║    ║      ║"
        lines.append("║" + cells + panel)

    lines.append("╚" + "═" * BOARD_WIDTH + "╝    ╚══════╝")

    current = PieceType(current_piece)
    lines.append(
        f"当前: {PIECE_COLORS[current]}{current.symbol()}{_RESET}"
        f"(旋转: {action.rotate}, 位置: {action.x})"
    )
    return "\n".join(lines)


def preview(
    rng: random.Random | None = None,
    delay: float = 0.1,
    out: TextIO | None = None,
    max_steps: int | None = None,
) -> Board:
    """Let the agent play with the built-in weights, drawing every move.

    Stops when no piece fits, when one move scores more than a single line
    clear, after ``max_steps`` moves, or on Ctrl+C. Returns the final board.
    """
    rng = rng if rng is not None else random.Random()
    out = out if out is not None else sys.stdout

    def emit(text: str) -> None:
        print(text, file=out, flush=True)

    board = Board()
    emit("Tetris AI Preview (按Ctrl+C退出)")

    current = random_piece(rng)
    upcoming = random_piece(rng)
    last_score = 0
    steps = 0

    try:
        while max_steps is None or steps < max_steps:
            action = best_action(board, current, WEIGHTS)
            if action is None:
                emit(f"游戏结束！无法放置方块: {current.symbol()}")
                break

            board.apply(current, action.x, action.rotate)
            steps += 1
            score = board.score

            emit("╔══════════════════════════════════════╗")
            emit(f"║ Tetris AI Preview - Score: {score:<9} ║")
            emit("╚══════════════════════════════════════╝")
            emit(render_game(board, current, upcoming, action))

            current, upcoming = upcoming, random_piece(rng)

            if score - last_score > 100:
                break
            last_score = score

            if delay > 0:
                time.sleep(delay)
    except KeyboardInterrupt:
        pass
    return board
import io
import random

import pytest

from mortis.agent import Action
from mortis.board import BOARD_HEIGHT, BOARD_WIDTH, PIECE_COLORS, Board
from mortis.display import next_preview, preview, render_game
from mortis.piece import PieceType, rotation

BLOCK = "\u25a0"
HEADER_ROWS = 6


@pytest.mark.parametrize("piece_type", list(PieceType))
def test_next_preview_holds_every_cell(piece_type):
    mask = next_preview(piece_type)
    assert len(mask) == 4
    assert all(len(row) == 4 for row in mask)
    filled = sum(sum(row) for row in mask)
    assert filled == len(rotation(piece_type, 0).cells())


@pytest.mark.parametrize("piece_type", list(PieceType))
def test_next_preview_top_row_empty(piece_type):
    assert tuple(next_preview(piece_type)[0]) == (False, False, False, False)


def test_next_preview_i_piece_fills_second_row():
    mask = next_preview(PieceType.I)
    assert mask[1] == (True, True, True, True)


def test_next_preview_o_piece_is_centred():
    mask = next_preview(PieceType.O)
    assert mask[1][1] and mask[1][2] and mask[2][1] and mask[2][2]
    assert not mask[1][0] and not mask[1][3]


def test_render_game_frame_shape():
    board = Board()
    text = render_game(board, PieceType.T, PieceType.O, Action(0, 0, 0.0))
    lines = text.split("\n")
    assert len(lines) == BOARD_HEIGHT + HEADER_ROWS + 2
    assert lines[0] == "╔" + "═" * BOARD_WIDTH + "╗    ╔══════╗"
    assert lines[1].endswith("║ NEXT ║")
    assert lines[-2] == "╚" + "═" * BOARD_WIDTH + "╝    ╚══════╝"
    assert all(line.startswith("║") for line in lines[1:-2])


def test_render_game_empty_board_shows_only_next_piece():
    text = render_game(Board(), PieceType.T, PieceType.O, Action(0, 0, 0.0))
    assert text.count(BLOCK) == len(rotation(PieceType.O, 0).cells())


def test_render_game_counts_board_blocks():
    board = Board()
    board.apply(PieceType.L, 0, 0)
    board.apply(PieceType.T, 5, 2)
    text = render_game(board, PieceType.T, PieceType.S, Action(2, 5, 1.5))
    on_board = sum(sum(row) for row in board.grid)
    assert text.count(BLOCK) == on_board + len(rotation(PieceType.S, 0).cells())
    assert PIECE_COLORS[PieceType.L] + BLOCK in text


def test_render_game_next_piece_row_position():
    text = render_game(Board(), PieceType.Z, PieceType.I, Action(0, 0, 0.0))
    lines = text.split("\n")
    assert lines[HEADER_ROWS + 2].count(BLOCK) == len(rotation(PieceType.I, 0).cells())
    assert lines[HEADER_ROWS + 1].count(BLOCK) == 0


def test_render_game_reports_move():
    text = render_game(Board(), PieceType.J, PieceType.O, Action(2, 3, 0.0))
    last = text.split("\n")[-1]
    assert last.startswith("当前: " + PIECE_COLORS[PieceType.J] + "J")
    assert last.endswith("(旋转: 2, 位置: 3)")


def test_preview_runs_requested_steps():
    out = io.StringIO()
    board = preview(rng=random.Random(7), delay=0, out=out, max_steps=3)
    text = out.getvalue()
    assert text.startswith("Tetris AI Preview (按Ctrl+C退出)")
    assert text.count("Tetris AI Preview - Score:") == 3
    placed = sum(sum(row) for row in board.grid) + 10 * (board.score // 100)
    assert placed == 3 * 4


def test_preview_is_deterministic_for_seed():
    first, second = io.StringIO(), io.StringIO()
    preview(rng=random.Random(11), delay=0, out=first, max_steps=4)
    preview(rng=random.Random(11), delay=0, out=second, max_steps=4)
    assert first.getvalue() == second.getvalue()
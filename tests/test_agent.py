import random

import pytest

from mortis.agent import Action, best_action, evaluate_actions, random_piece, simulate_game
from mortis.board import BOARD_HEIGHT, BOARD_WIDTH, FEATURES, WEIGHTS, Board, PlacementError
from mortis.piece import PieceType


def _full_board() -> Board:
    board = Board()
    board.grid = [[True] * BOARD_WIDTH for _ in range(BOARD_HEIGHT)]
    board.heights = [BOARD_HEIGHT] * BOARD_WIDTH
    return board


def test_random_piece_covers_all_types():
    rng = random.Random(42)
    drawn = {random_piece(rng) for _ in range(500)}
    assert drawn == set(PieceType)


def test_random_piece_is_reproducible():
    first = [random_piece(random.Random(7)) for _ in range(1)]
    second = [random_piece(random.Random(7)) for _ in range(1)]
    assert first == second


@pytest.mark.parametrize("piece_type", list(PieceType))
def test_evaluate_actions_matches_legal_placements(piece_type):
    board = Board()
    board.apply(PieceType.T, 2, 0)
    actions = evaluate_actions(board, piece_type, WEIGHTS)
    found = {(a.rotate, a.x) for a in actions}
    legal = set()
    for rotate in range(4):
        for x in range(BOARD_WIDTH):
            try:
                board.check(piece_type, x, rotate)
            except PlacementError:
                continue
            legal.add((rotate, x))
    assert found == legal


def test_evaluate_actions_zero_weights_give_zero_scores():
    actions = evaluate_actions(Board(), PieceType.L, [0.0] * FEATURES)
    assert actions
    assert all(a.score == 0.0 for a in actions)


def test_best_action_is_minimum_score():
    board = Board()
    board.apply(PieceType.S, 0, 0)
    actions = evaluate_actions(board, PieceType.I, WEIGHTS)
    best = best_action(board, PieceType.I, WEIGHTS)
    assert best.score == min(a.score for a in actions)
    assert best in actions


def test_best_action_ties_take_first():
    best = best_action(Board(), PieceType.O, [0.0] * FEATURES)
    assert best == Action(rotate=0, x=0, score=0.0)


def test_best_action_on_full_board_is_none():
    board = _full_board()
    assert evaluate_actions(board, PieceType.T, WEIGHTS) == []
    assert best_action(board, PieceType.T, WEIGHTS) is None


def test_wrong_weight_count_raises():
    with pytest.raises(ValueError):
        evaluate_actions(Board(), PieceType.I, [1.0, 2.0])
    with pytest.raises(ValueError):
        simulate_game([1.0] * (FEATURES + 1), random.Random(0), 5)


def test_simulate_game_zero_pieces_scores_nothing():
    assert simulate_game(WEIGHTS, random.Random(1), 0) == 0


def test_simulate_game_is_reproducible_and_scores_whole_clears():
    first = simulate_game(WEIGHTS, random.Random(3), 60)
    second = simulate_game(WEIGHTS, random.Random(3), 60)
    assert first == second
    assert first >= 0
    assert first % 100 == 0
"""Greedy placement agent driven by a weighted sum of board features."""

from __future__ import annotations

import random
from collections.abc import Sequence
from dataclasses import dataclass

from .board import BOARD_WIDTH, FEATURES, Board
from .piece import ROTATION_COUNT, PieceType, rotation

DEFAULT_MAX_PIECES = 1_000_000


@dataclass(frozen=True)
class Action:
    """A candidate drop: rotation state, left column and its weighted score."""

    rotate: int
    x: int
    score: float


def random_piece(rng: random.Random) -> PieceType:
    """Draw one of the seven piece types uniformly."""
    return PieceType(rng.randrange(len(PieceType)))


def _as_weights(weights: Sequence[float]) -> tuple[float, ...]:
    values = tuple(float(w) for w in weights)
    if len(values) != FEATURES:
        raise ValueError(f"expected {FEATURES} weights, got {len(values)}")
    return values


def evaluate_actions(
    board: Board, piece_type: PieceType | int, weights: Sequence[float]
) -> list[Action]:
    """Score every legal drop of ``piece_type``, in rotation then column order."""
    weights = _as_weights(weights)
    actions = []
    for rotate in range(ROTATION_COUNT):
        piece = rotation(piece_type, rotate)
        for x in range(BOARD_WIDTH - piece.width + 1):
            result = board.simulate(piece_type, x, rotate)
            if result is None:
                continue
            _, features = result
            score = sum(f * w for f, w in zip(features, weights))
            actions.append(Action(rotate, x, score))
    return actions


def best_action(
    board: Board, piece_type: PieceType | int, weights: Sequence[float]
) -> Action | None:
    """The lowest-scoring legal drop (first one on ties), or ``None`` if none fits."""
    actions = evaluate_actions(board, piece_type, weights)
    if not actions:
        return None
    return min(actions, key=lambda action: action.score)


def simulate_game(
    weights: Sequence[float],
    rng: random.Random | None = None,
    max_pieces: int = DEFAULT_MAX_PIECES,
) -> int:
    """Play a game with random pieces until no piece fits; return the score."""
    weights = _as_weights(weights)
    rng = rng if rng is not None else random.Random()
    board = Board()
    for _ in range(max_pieces):
        piece_type = random_piece(rng)
        action = best_action(board, piece_type, weights)
        if action is None:
            break
        board.apply(piece_type, action.x, action.rotate)
    return board.score
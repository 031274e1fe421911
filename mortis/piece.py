"""Tetromino kinds and their four rotation states."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum

SHAPE_SIZE = 4
ROTATION_COUNT = 4


class PieceType(IntEnum):
    """The seven tetromino kinds; the value doubles as the colour index."""

    I = 0  # noqa: E741
    T = 1
    O = 2  # noqa: E741
    J = 3
    L = 4
    S = 5
    Z = 6

    @classmethod
    def from_char(cls, char: str) -> PieceType:
        """Return the piece type named by a single letter such as ``"T"``."""
        try:
            return cls[char]
        except KeyError:
            raise ValueError(f"unknown piece type: {char!r}") from None

    def symbol(self) -> str:
        """The single-letter name of this piece type."""
        return self.name


@dataclass(frozen=True)
class Piece:
    """One rotation state of a tetromino.

    ``shape[row][col]`` is 1 where the piece has a block; row 0 is the bottom
    row of the piece.
    """

    shape: tuple[tuple[int, ...], ...]
    width: int
    height: int
    leftmost: tuple[int, ...]
    rightmost: tuple[int, ...]

    def cells(self) -> tuple[tuple[int, int], ...]:
        """The ``(row, col)`` offsets of the piece's blocks, row by row."""
        return tuple(
            (row, col)
            for row, line in enumerate(self.shape)
            for col, value in enumerate(line)
            if value
        )


def _piece(rows: tuple[str, ...], leftmost: tuple[int, ...], rightmost: tuple[int, ...]) -> Piece:
    shape = tuple(
        tuple(1 if row < len(rows) and col < len(rows[row]) and rows[row][col] == "X" else 0
              for col in range(SHAPE_SIZE))
        for row in range(SHAPE_SIZE)
    )
    filled = [(r, c) for r, line in enumerate(shape) for c, v in enumerate(line) if v]
    return Piece(
        shape=shape,
        width=max(c for _, c in filled) + 1,
        height=max(r for r, _ in filled) + 1,
        leftmost=leftmost,
        rightmost=rightmost,
    )


def _build_rotations() -> dict[PieceType, tuple[Piece, ...]]:
    i_flat = _piece(("XXXX",), (0, 0, 0, 0), (3, 0, 0, 0))
    i_tall = _piece(("X", "X", "X", "X"), (0, 0, 0, 0), (0, 0, 0, 0))
    o_block = _piece(("XX", "XX"), (0, 0, 0, 0), (1, 1, 0, 0))
    s_flat = _piece(("XX.", ".XX"), (0, 0, 0, 0), (1, 2, 0, 0))
    s_tall = _piece((".X", "XX", "X."), (0, 0, 0, 0), (1, 1, 0, 0))
    z_flat = _piece((".XX", "XX."), (1, 0, 0, 0), (2, 1, 0, 0))
    z_tall = _piece(("X.", "XX", ".X"), (0, 0, 0, 0), (0, 1, 0, 0))
    return {
        PieceType.I: (i_flat, i_tall, i_flat, i_tall),
        PieceType.T: (
            _piece(("XXX", ".X."), (0, 1, 0, 0), (2, 1, 0, 0)),
            _piece(("X.", "XX", "X."), (0, 0, 0, 0), (1, 0, 0, 0)),
            _piece((".X.", "XXX"), (1, 0, 0, 0), (1, 2, 0, 0)),
            _piece((".X", "XX", ".X"), (0, 0, 0, 0), (1, 1, 0, 0)),
        ),
        PieceType.O: (o_block,) * ROTATION_COUNT,
        PieceType.J: (
            _piece(("XXX", "X.."), (0, 0, 0, 0), (2, 0, 0, 0)),
            _piece(("X.", "X.", "XX"), (0, 0, 0, 0), (1, 1, 0, 0)),
            _piece(("..X", "XXX"), (2, 0, 0, 0), (2, 2, 0, 0)),
            _piece(("XX", ".X", ".X"), (0, 0, 0, 0), (1, 1, 0, 0)),
        ),
        PieceType.L: (
            _piece(("XXX", "..X"), (0, 0, 0, 0), (2, 0, 0, 0)),
            _piece(("XX", "X.", "X."), (0, 0, 0, 0), (1, 0, 0, 0)),
            _piece(("X..", "XXX"), (0, 0, 0, 0), (2, 0, 0, 0)),
            _piece((".X", ".X", "XX"), (0, 0, 0, 0), (1, 1, 0, 0)),
        ),
        PieceType.S: (s_flat, s_tall, s_flat, s_tall),
        PieceType.Z: (z_flat, z_tall, z_flat, z_tall),
    }


ROTATIONS: dict[PieceType, tuple[Piece, ...]] = _build_rotations()


def rotation(piece_type: PieceType | int, rotate: int) -> Piece:
    """Return rotation state ``rotate`` (0-3) of ``piece_type``."""
    if not 0 <= rotate < ROTATION_COUNT:
        raise ValueError(f"rotation must be in 0..{ROTATION_COUNT - 1}, got {rotate}")
    return ROTATIONS[PieceType(piece_type)][rotate]
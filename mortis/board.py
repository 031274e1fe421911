"""The playing field: piece placement, line clears and placement features."""

from __future__ import annotations

import math

from .piece import PieceType, rotation

BOARD_HEIGHT = 15
BOARD_WIDTH = 10
FEATURES = 13

WEIGHTS: tuple[float, ...] = (
    1464772.166456,
    -2535297.130013,
    2638462.645342,
    372351.515440,
    -1782742.689903,
    1883234.918781,
    -4420.968667,
    9988776.620538,
    -948594.666888,
    -3610431.536749,
    3355542.370633,
    1120426.582938,
    3233372.471683,
)

CLEAR_SCORES = {1: 100, 2: 300, 3: 500, 4: 800}
_ERODED_FACTORS = {1: 100, 2: 150, 3: 166, 4: 200}

_CLEAR_SCREEN = "\x1b[2J\x1b[1;1H"
_RESET = "\x1b[0m"
_BLOCK = "\u25a0"
PIECE_COLORS = (
    "\x1b[36m",  # I: cyan
    "\x1b[35m",  # T: purple
    "\x1b[33m",  # O: yellow
    "\x1b[34m",  # J: blue
    "\x1b[31m",  # L: red
    "\x1b[32m",  # S: green
    "\x1b[91m",  # Z: bright red
)
_DEFAULT_COLOR = "\x1b[37m"

Grid = list[list[bool]]


class PlacementError(ValueError):
    """Raised when a piece cannot be dropped at the requested column."""


def _column_heights(grid: Grid) -> list[int]:
    heights = []
    for x in range(BOARD_WIDTH):
        top = next((y + 1 for y in reversed(range(BOARD_HEIGHT)) if grid[y][x]), 0)
        heights.append(top)
    return heights


def _full_rows(grid: Grid) -> list[int]:
    return [y for y, row in enumerate(grid) if all(row)]


def _transitions(lines) -> int:
    total = 0
    for line in lines:
        prev = True
        for cell in line:
            if cell != prev:
                total += 1
            prev = cell
        if not prev:
            total += 1
    return total


def _features(
    grid: Grid,
    heights: list[int],
    blocks: list[tuple[int, int]],
    full_rows: list[int],
) -> tuple[float, ...]:
    cleared = len(full_rows)
    landing_height = max((y for y, _ in blocks), default=0)

    eroded = sum(1 for y, _ in blocks if y in full_rows)
    eroded_value = eroded * _ERODED_FACTORS.get(cleared, 0)

    row_trans = _transitions(grid)
    columns = [[grid[y][x] for y in range(BOARD_HEIGHT)] for x in range(BOARD_WIDTH)]
    col_trans = _transitions(columns)

    holes = 0
    for column in columns:
        top = next((y for y in reversed(range(BOARD_HEIGHT)) if column[y]), None)
        if top is not None:
            holes += sum(1 for cell in column[:top] if not cell)

    wells = 0
    for x, current in enumerate(heights):
        left = heights[x - 1] if x > 0 else current
        right = heights[x + 1] if x < BOARD_WIDTH - 1 else current
        if current < left and current < right:
            wells += min(left, right) - current

    hole_depth = sum(
        height - y
        for column, height in zip(columns, heights)
        for y in range(height)
        if not column[y]
    )

    rows_with_holes = sum(
        1
        for y in range(BOARD_HEIGHT)
        if any(not grid[y][x] and heights[x] > y for x in range(BOARD_WIDTH))
    )

    diversity = sum(abs(b - a) for a, b in zip(heights, heights[1:]))

    mean_height = sum(heights) / BOARD_WIDTH
    h = float(BOARD_HEIGHT)
    rbf = tuple(
        math.exp(-((mean_height - i * h / 3.0) ** 2) / (2.0 * (h / 5.0) ** 2))
        for i in range(4)
    )

    return (
        float(landing_height),
        float(eroded_value),
        float(row_trans),
        float(col_trans),
        float(holes),
        float(wells),
        float(hole_depth),
        float(rows_with_holes),
        float(diversity),
        *rbf,
    )


class Board:
    """A 10x15 field; row 0 is the bottom row."""

    def __init__(self) -> None:
        self.grid: Grid = [[False] * BOARD_WIDTH for _ in range(BOARD_HEIGHT)]
        self.color_grid: list[list[int | None]] = [
            [None] * BOARD_WIDTH for _ in range(BOARD_HEIGHT)
        ]
        self.heights: list[int] = [0] * BOARD_WIDTH
        self.score: int = 0

    def _drop(self, piece_type: PieceType | int, x: int, rotate: int) -> list[tuple[int, int]]:
        """Cells the piece would occupy when dropped; raises if it cannot land."""
        piece = rotation(piece_type, rotate)
        if x < 0 or x + piece.width > BOARD_WIDTH:
            raise PlacementError("Piece out of bounds")

        required_y = 0
        for dx in range(piece.width):
            h_col = self.heights[x + dx]
            rows = [i for i in range(piece.height) if piece.shape[i][dx]]
            if rows:
                required_y = max(required_y, max(max(h_col - i for i in rows), 0))

        blocks = []
        for i, j in piece.cells():
            y = required_y + i
            col = x + j
            if y >= BOARD_HEIGHT or self.grid[y][col]:
                raise PlacementError("Piece doesn't fit")
            blocks.append((y, col))
        return blocks

    def simulate(
        self, piece_type: PieceType | int, x: int, rotate: int
    ) -> tuple[int, tuple[float, ...]] | None:
        """Evaluate a drop without changing the board.

        Returns the number of cleared rows and the feature vector, or ``None``
        when the piece cannot be placed there.
        """
        try:
            blocks = self._drop(piece_type, x, rotate)
        except PlacementError:
            return None

        temp_grid = [row[:] for row in self.grid]
        temp_heights = self.heights[:]
        for y, col in blocks:
            temp_grid[y][col] = True
            temp_heights[col] = max(temp_heights[col], y + 1)

        full_rows = _full_rows(temp_grid)
        if full_rows:
            new_grid: Grid = [[False] * BOARD_WIDTH for _ in range(BOARD_HEIGHT)]
            shift = 0
            for y in reversed(range(BOARD_HEIGHT)):
                if shift < len(full_rows) and y == full_rows[len(full_rows) - 1 - shift]:
                    shift += 1
                    continue
                new_y = y + shift
                if new_y < BOARD_HEIGHT:
                    new_grid[new_y] = temp_grid[y]
            temp_grid = new_grid
            temp_heights = _column_heights(temp_grid)

        return len(full_rows), _features(temp_grid, temp_heights, blocks, full_rows)

    def check(self, piece_type: PieceType | int, x: int, rotate: int) -> None:
        """Raise :class:`PlacementError` if the piece cannot be dropped there."""
        self._drop(piece_type, x, rotate)

    def apply(self, piece_type: PieceType | int, x: int, rotate: int) -> None:
        """Drop the piece, clear full rows and update the score."""
        blocks = self._drop(piece_type, x, rotate)
        color = int(piece_type)

        for y, col in blocks:
            self.grid[y][col] = True
            self.color_grid[y][col] = color
            self.heights[col] = max(self.heights[col], y + 1)

        full_rows = _full_rows(self.grid)
        if not full_rows:
            return

        kept = [y for y in range(BOARD_HEIGHT) if y not in full_rows]
        padding = BOARD_HEIGHT - len(kept)
        self.grid = [self.grid[y] for y in kept] + [
            [False] * BOARD_WIDTH for _ in range(padding)
        ]
        self.color_grid = [self.color_grid[y] for y in kept] + [
            [None] * BOARD_WIDTH for _ in range(padding)
        ]
        self.heights = _column_heights(self.grid)
        self.score += CLEAR_SCORES.get(len(full_rows), 0)

    def start_y(self, piece_type: PieceType | int, x: int, rotate: int) -> int:
        """Starting row for a piece, based on the lowest column it spans."""
        piece = rotation(piece_type, rotate)
        left = x + piece.leftmost[rotate]
        right = x + piece.rightmost[rotate]
        if left < 0 or right >= BOARD_WIDTH:
            return 0
        i_max = next((i for i in reversed(range(4)) if any(piece.shape[i])), 0)
        min_height = min(self.heights[j] for j in range(x, x + piece.width))
        return min_height - i_max

    def render(self) -> str:
        """Plain text picture of the board, top row first."""
        lines = [f"Score: {self.score}"]
        for row in reversed(self.grid):
            lines.append("|" + "".join(_BLOCK if cell else " " for cell in row) + "|")
        lines.append("-" * 26)
        return _CLEAR_SCREEN + "\n".join(lines) + "\n"

    def render_colored(self) -> str:
        """Framed picture of the board with ANSI colours per piece type."""
        lines = [f"Score: {self.score}", "╔" + "═" * BOARD_WIDTH + "╗"]
        for y in reversed(range(BOARD_HEIGHT)):
            cells = []
            for x in range(BOARD_WIDTH):
                if self.grid[y][x]:
                    index = self.color_grid[y][x]
                    color = (
                        PIECE_COLORS[index]
                        if index is not None and 0 <= index < len(PIECE_COLORS)
                        else _DEFAULT_COLOR
                    )
                    cells.append(f"{color}{_BLOCK}{_RESET}")
                else:
                    cells.append(" ")
            lines.append("║" + "".join(cells) + "║")
        lines.append("╚" + "═" * BOARD_WIDTH + "╝")
        return _CLEAR_SCREEN + "\n".join(lines) + "\n"
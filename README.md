# mortis

A Tetris-playing agent for a 10 × 15 board. Every legal drop of the current
piece is scored as a weighted sum of 13 board features (landing height,
eroded cells, row and column transitions, holes, wells, hole depth, rows
with holes, surface diversity and four radial-basis terms of the mean column
height). The agent takes the drop with the lowest score; on ties the first
one in rotation-then-column order wins.

The package does three things:

* **preview**: watch the agent play with its built-in weights in the
  terminal, with coloured pieces and a "NEXT" box.
* **train**: search for feature weights with CMA-ES, using the mean score
  over many simulated games as the objective.
* **check**: run an external player program, send it pieces over stdin,
  read its moves and reported scores from stdout, and replay them on a
  reference board to confirm that each move is legal and each score matches.

## Installation

```
pip install .
```

For the test suite:

```
pip install ".[test]"
pytest
```

## Command line

```
mortis preview
mortis train [generations] [target]
mortis check <executable>
mortis help
```

* `mortis preview` draws the board after every move, 0.1 s apart. It stops
  when no piece fits, when a single move scores more than one line clear
  (100 points), or on Ctrl+C.
* `mortis train 50 2000000` runs at most 50 generations of 240 candidates,
  each scored as the mean over 100 games, and stops early once the best mean
  score passes 2,000,000. The defaults are 20 generations and a target of
  1,000,000; arguments that cannot be read fall back to these. A status line
  is printed every 50 generations. Ctrl+C stops the run and prints the best
  candidate of the last finished generation. The printed weights are the raw
  search point; games are played with them scaled to unit length.
* `mortis check ./player` starts `./player` and plays it against the
  reference board for up to 1,000,000 pieces.
* `mortis help` (also `-h`, `--help`, or no arguments) prints the usage.

`mortis` exits with status 0 on success, 1 for an unknown command and 2 when
`check` is given no executable.

### The check protocol

The checker first writes one line with two piece letters (current and next),
for example `IT`. After that, for each piece, the player writes two lines:

```
<rotation> <x>
<score>
```

where `rotation` is 0–3, `x` is the left column of the piece, and `score` is
the player's running score. Numbers that cannot be read count as 0; a move
line with fewer than two fields ends the game. The checker then writes the
next piece letter on its own line, or `E` when the game ends. Once 10 seconds
have passed it reports the placement rate and also sends `E`. An illegal
move ends the game. Piece letters are `I T O J L S Z`. Scoring is 100, 300,
500 and 800 points for clearing 1, 2, 3 and 4 rows.

When play stops, the checker waits one second for the program to exit and
kills it otherwise.

## Library use

```python
import random

from mortis.agent import best_action, simulate_game
from mortis.board import WEIGHTS, Board, PlacementError
from mortis.piece import PieceType

board = Board()
action = best_action(board, PieceType.T, WEIGHTS)
board.apply(PieceType.T, action.x, action.rotate)
print(board.render_colored())

score = simulate_game(WEIGHTS, random.Random(1), max_pieces=500)
```

* `mortis.piece`: `PieceType` (an `IntEnum`, with `from_char` and `symbol`),
  `Piece` with its `cells()`, and `rotation(piece_type, rotate)`.
* `mortis.board`: `Board` with `simulate`, `check`, `apply`, `start_y`,
  `render` and `render_colored`. `apply` and `check` raise `PlacementError`
  (a `ValueError`) when a piece does not fit or leaves the board; `simulate`
  returns `None` in that case and otherwise the number of cleared rows and
  the feature tuple of the resulting position. Both render methods return a
  string that begins with a clear-screen escape.
* `mortis.agent`: `Action`, `random_piece`, `evaluate_actions`,
  `best_action` and `simulate_game`.
* `mortis.training`: the ask/tell optimiser `CMAES` (`ask`, `tell`, `best`),
  `Individual`, `normalize`, `objective`, `format_results` and `train`, which
  takes the population size, games per candidate, pieces per game, a seed
  and an output stream as well.
* `mortis.display`: `next_preview`, `render_game` and `preview`, which takes
  a random generator, a delay, an output stream and a step limit, and
  returns the final board.
* `mortis.checker`: `parse_move` and `check`, which accepts a path or an
  argument list and returns a `CheckResult` with the pieces placed, the
  final score, the number of score mismatches and the program's exit status.

## What it does not do

There is no game for a human to play: pieces are only ever placed by the
agent or by the program under check. Training reports progress as text
lines only; it does not draw charts or save results to files.
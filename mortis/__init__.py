"""Tetris-playing agent with feature-based evaluation, CMA-ES training, a terminal preview and a move checker."""

__version__ = "0.1.0"
__all__ = ["agent", "board", "checker", "cli", "display", "piece", "training"]
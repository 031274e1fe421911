"""Command line entry point: preview, train or check."""

from __future__ import annotations

import re
import sys

from .checker import check
from .display import preview
from .training import train

USAGE = "\n".join(
    (
        "Usage: mortis [preview|train <generations>|check <executable>]",
        "  preview: Show AI gameplay visualization",
        "  train: Train the AI with specified generations",
        "  check: Check the AI's performance against a given executable",
    )
)

DEFAULT_GENERATIONS = 20
DEFAULT_TARGET = 1_000_000.0


def _parse_generations(args: list[str]) -> int:
    if args and re.fullmatch(r"\+?\d+", args[0]):
        return int(args[0])
    return DEFAULT_GENERATIONS


def _parse_target(args: list[str]) -> float:
    if len(args) > 1:
        try:
            return float(args[1])
        except ValueError:
            pass
    return DEFAULT_TARGET


def main(argv: list[str] | None = None) -> int:
    """Run the command named by ``argv`` and return the exit status."""
    args = list(sys.argv[1:] if argv is None else argv)
    if not args:
        print(USAGE)
        return 0

    command, rest = args[0], args[1:]
    if command == "preview":
        preview()
        return 0
    if command == "train":
        train(_parse_generations(rest), _parse_target(rest))
        return 0
    if command == "check":
        if not rest:
            print("check needs the path of an executable", file=sys.stderr)
            print(USAGE, file=sys.stderr)
            return 2
        check(rest[0])
        return 0
    if command in ("--help", "-h", "help"):
        print(USAGE)
        return 0

    print("Unknown command. Use 'preview', 'train' or 'check'")
    return 1


if __name__ == "__main__":
    sys.exit(main())
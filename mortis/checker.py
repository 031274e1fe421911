"""Referee that plays an external agent program and verifies its moves and score."""

from __future__ import annotations

import contextlib
import os
import random
import re
import subprocess
import sys
import time
from collections.abc import Sequence
from dataclasses import dataclass
from typing import TextIO

from .board import Board
from .piece import PieceType

DEFAULT_PIECES = 1_000_000
DEFAULT_TIME_LIMIT = 10.0
END_MARKER = "E\n"
_WAIT_SECONDS = 1.0

_UNSIGNED = re.compile(r"\+?\d+")
_SIGNED = re.compile(r"[+-]?\d+")


@dataclass(frozen=True)
class CheckResult:
    """Outcome of a check run."""

    placed: int
    score: int
    mismatches: int
    exit_status: int | None


def _parse_unsigned(text: str) -> int:
    return int(text) if _UNSIGNED.fullmatch(text) else 0


def _parse_signed(text: str) -> int:
    return int(text) if _SIGNED.fullmatch(text) else 0


def parse_move(line: str) -> tuple[int, int]:
    """Parse ``"<rotation> <x>"``; unreadable numbers count as 0.

    Raises ``ValueError`` when the line has fewer than two fields.
    """
    parts = line.split()
    if len(parts) < 2:
        raise ValueError(f"malformed move line: {line!r}")
    return _parse_unsigned(parts[0]), _parse_unsigned(parts[1])


def _strip_eol(line: str) -> str:
    if line.endswith("\n"):
        line = line[:-1]
        if line.endswith("\r"):
            line = line[:-1]
    return line


def _command(executable_path: str | os.PathLike | Sequence[str]) -> list[str]:
    if isinstance(executable_path, (str, os.PathLike)):
        return [os.fspath(executable_path)]
    return [os.fspath(arg) for arg in executable_path]


def check(
    executable_path: str | os.PathLike | Sequence[str],
    num_pieces: int = DEFAULT_PIECES,
    time_limit: float = DEFAULT_TIME_LIMIT,
    rng: random.Random | None = None,
    out: TextIO | None = None,
) -> CheckResult:
    """Feed random pieces to the program and replay its moves on a board.

    The program first receives the current and next piece on one line, then
    one piece per line after each move, and ``E`` when the game ends. For each
    piece it answers with a ``"<rotation> <x>"`` line and its score on the
    next line.
    """
    if num_pieces < 2:
        raise ValueError("num_pieces must be at least 2")
    rng = rng if rng is not None else random.Random()
    out = out if out is not None else sys.stdout

    def emit(text: str) -> None:
        print(text, file=out, flush=True)

    start = time.monotonic()
    proc = subprocess.Popen(
        _command(executable_path),
        stdin=subprocess.PIPE,
        stdout=subprocess.PIPE,
        text=True,
        encoding="utf-8",
        errors="replace",
    )
    assert proc.stdin is not None and proc.stdout is not None
    stdin, stdout = proc.stdin, proc.stdout

    def send(text: str) -> None:
        stdin.write(text)
        stdin.flush()

    symbols = [piece.symbol() for piece in PieceType]
    pieces = [rng.choice(symbols) for _ in range(num_pieces)]
    board = Board()
    mismatches = 0
    current_idx = 0
    next_idx = 1

    try:
        send(f"{pieces[0]}{pieces[1]}\n")
    except OSError as exc:
        emit(f"写入初始输入失败: {exc}")
    else:
        while current_idx < num_pieces and next_idx < len(pieces):
            current_piece = PieceType.from_char(pieces[current_idx])

            raw = stdout.readline()
            if not raw:
                emit("程序已退出，游戏结束")
                break
            response = _strip_eol(raw)
            emit(response)

            try:
                rotate, x = parse_move(response)
            except ValueError:
                emit(f"程序输出格式错误: {response}")
                break

            raw_score = stdout.readline()
            if not raw_score:
                emit("程序在提供分数前退出，游戏结束")
                break
            program_score = _parse_signed(_strip_eol(raw_score))

            try:
                board.check(current_piece, x, rotate)
            except ValueError:
                emit(f"警告: 程序选择了无效的行动 (旋转={rotate}, 位置={x})")
                with contextlib.suppress(OSError):
                    send(END_MARKER)
                emit("已发送游戏结束标记")
                break

            board.apply(current_piece, x, rotate)
            if board.score != program_score:
                mismatches += 1
                emit(f"警告: 分数不匹配！程序={program_score}, 实际={board.score}")

            current_idx += 1
            next_idx += 1

            elapsed = time.monotonic() - start
            if elapsed > time_limit:
                rate = current_idx / elapsed if elapsed > 0 else float("inf")
                emit(f"当前放置了 {current_idx} 个方块，平均速度: {rate:.2f} 个方块/秒")
                emit("正在发送结束标记...")
                try:
                    send(END_MARKER)
                except OSError as exc:
                    emit(f"写入结束标记失败: {exc}")
                    break

            if next_idx < len(pieces):
                try:
                    send(f"{pieces[next_idx]}\n")
                except OSError as exc:
                    emit(f"写入下一方块失败: {exc}")
                    emit("程序可能已退出，游戏结束")
                    break
            else:
                try:
                    send(END_MARKER)
                except OSError as exc:
                    emit(f"写入结束标记失败: {exc}")
                    break
                emit("已发送游戏结束标记")

    emit("正在检查目标程序状态...")
    try:
        status = proc.wait(timeout=_WAIT_SECONDS)
        emit(f"目标程序已退出，状态码: {status}")
    except subprocess.TimeoutExpired:
        emit("目标程序仍在运行，正在终止...")
        proc.kill()
        status = proc.wait()
        emit("目标程序已终止")
    finally:
        for stream in (stdin, stdout):
            with contextlib.suppress(OSError):
                stream.close()

    emit(f"验证完成！总共放置了 {current_idx} 个方块")
    emit(f"最终分数: {board.score}")
    return CheckResult(current_idx, board.score, mismatches, status)
"""Presentation-independent helpers: game status, score display, move lists."""

from enum import Enum
from typing import Dict, List, Sequence, Tuple

import chess

from pawnstorm.core.board import ChessBoard, MoveRecord
from pawnstorm.core.search import SearchStats


class GameStatus(str, Enum):
    ONGOING = "ongoing"
    CHECK = "check"
    CHECKMATE = "checkmate"
    STALEMATE = "stalemate"
    FIFTY_MOVES = "fifty_moves"
    THREEFOLD_REPETITION = "threefold_repetition"
    INSUFFICIENT_MATERIAL = "insufficient_material"

    @property
    def is_terminal(self) -> bool:
        return self not in (GameStatus.ONGOING, GameStatus.CHECK)


def game_status(board: ChessBoard) -> GameStatus:
    if board.is_checkmate():
        return GameStatus.CHECKMATE
    if board.is_fifty_moves():
        return GameStatus.FIFTY_MOVES
    if board.is_stalemate():
        return GameStatus.STALEMATE
    if board.is_threefold_repetition():
        return GameStatus.THREEFOLD_REPETITION
    if board.is_insufficient_material():
        return GameStatus.INSUFFICIENT_MATERIAL
    if board.is_check():
        return GameStatus.CHECK
    return GameStatus.ONGOING


def side_name(color: chess.Color) -> str:
    return "White" if color == chess.WHITE else "Black"


def status_message(board: ChessBoard) -> str:
    """Human-readable status line; empty while the game simply goes on."""
    status = game_status(board)
    if status == GameStatus.CHECKMATE:
        return f"Checkmate! {side_name(not board.turn)} wins."
    if status == GameStatus.FIFTY_MOVES:
        return "Draw - 50 move rule"
    if status == GameStatus.STALEMATE:
        return "Draw - Stalemate"
    if status == GameStatus.THREEFOLD_REPETITION:
        return "Draw - Threefold repetition"
    if status == GameStatus.INSUFFICIENT_MATERIAL:
        return "Draw - Insufficient material"
    if status == GameStatus.CHECK:
        return f"{side_name(board.turn)} is in check"
    return ""


def format_score(score: float) -> str:
    """Running score in pawns, e.g. ``+1.8`` or ``-0.5``."""
    pawns = score / 100
    return f"+{pawns:.1f}" if pawns > 0 else f"{pawns:.1f}"


def eval_bar_percentage(score: float) -> float:
    """50 means level, 100 means the reference side is winning outright."""
    return max(0.0, min(100.0, 50 + (score / 100) * 5))


def move_rows(sans: Sequence[str]) -> List[Tuple[int, str, str]]:
    """Group SAN moves into numbered (move, white, black) rows."""
    rows = []
    for i in range(0, len(sans), 2):
        black = sans[i + 1] if i + 1 < len(sans) else ""
        rows.append((i // 2 + 1, sans[i], black))
    return rows


def captured_pieces(history: Sequence[MoveRecord]) -> Dict[str, List[str]]:
    """Symbols of the pieces each side has lost, keyed ``white`` / ``black``."""
    lost = {"white": [], "black": []}
    for record in history:
        if record.captured is None:
            continue
        victim = not record.color
        lost["white" if victim == chess.WHITE else "black"].append(
            chess.Piece(record.captured, victim).symbol()
        )
    return lost


def format_stats(stats: SearchStats) -> str:
    return (
        f"positions {stats.positions:,} time {stats.elapsed:.2f}s "
        f"nps {stats.nodes_per_second:,}"
    )

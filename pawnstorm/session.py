"""GameSession: one game's board, running score, redo history and engine."""

import logging
import random
from enum import Enum
from typing import Dict, List, Optional, Tuple

import chess

from pawnstorm.config import CONFIG
from pawnstorm.core.board import ChessBoard, MoveRecord
from pawnstorm.core.evaluator import Evaluator
from pawnstorm.core.history import HistoryEntry, HistoryStack
from pawnstorm.core.search import SearchEngine, SearchResult, SearchStats
from pawnstorm.core.utils import (
    GameStatus,
    captured_pieces,
    game_status,
    move_rows,
    status_message,
)

logger = logging.getLogger(__name__)


class Outcome(str, Enum):
    OK = "ok"
    NOTHING_TO_UNDO = "nothing_to_undo"
    NOTHING_TO_REDO = "nothing_to_redo"


def parse_side(name: str) -> chess.Color:
    """``"white"`` / ``"black"`` (any case) to a python-chess color."""
    try:
        return chess.COLOR_NAMES.index(name.strip().lower()) == 1
    except ValueError:
        raise ValueError(f"Unknown side {name!r}, expected 'white' or 'black'") from None


class GameSession:
    """Everything one game needs, passed around explicitly.

    The running score is always relative to ``reference_side``: positive
    numbers favor that side whoever is to move.
    """

    def __init__(self, fen: Optional[str] = None, depth: Optional[int] = None,
                 reference_side: Optional[chess.Color] = None,
                 auto_queen_promotion: Optional[bool] = None,
                 rng: Optional[random.Random] = None,
                 evaluator: Optional[Evaluator] = None,
                 history_capacity: Optional[int] = None):
        cfg = CONFIG.search
        self.depth = cfg.depth if depth is None else depth
        self.auto_queen_promotion = (
            cfg.auto_queen_promotion if auto_queen_promotion is None else auto_queen_promotion
        )
        self.reference_side = (
            parse_side(CONFIG.ui.reference_side) if reference_side is None else reference_side
        )
        if rng is None and cfg.seed is not None:
            rng = random.Random(cfg.seed)
        self.evaluator = evaluator or Evaluator()
        self.engine = SearchEngine(self.evaluator, rng)
        capacity = history_capacity or cfg.history_capacity
        # undo and redo move whole pairs of plies
        if capacity % 2:
            raise ValueError(f"history capacity must be even, got {capacity}")
        self.history = HistoryStack(capacity)
        self.board = ChessBoard(fen)
        self._scores: List[int] = []  # running score after each recorded ply
        self.last_stats: Optional[SearchStats] = None

    # ── Game lifecycle ──────────────────────────────────────

    def new_game(self, fen: Optional[str] = None):
        """Back to the start (or ``fen``) with a zero score and no redo history."""
        if fen:
            self.board.set_fen(fen)
        else:
            self.board.reset()
        self._scores.clear()
        self.history.clear()
        self.last_stats = None
        logger.info("New game from %s", self.board.get_fen())

    def current_score(self) -> int:
        return self._scores[-1] if self._scores else 0

    def _push(self, record: MoveRecord):
        self.board.apply(record)
        self._scores.append(
            self.evaluator.evaluate(self.board, record, self.current_score(), self.reference_side)
        )

    def commit(self, record: MoveRecord):
        """Play a real move. The redo branch no longer applies afterwards."""
        self._push(record)
        self.history.clear()

    # ── Moves ───────────────────────────────────────────────

    def play_move(self, move_str: str) -> Optional[MoveRecord]:
        """Play a human move given in UCI. Returns None if it is not legal."""
        record = self.board.parse_move(move_str, auto_queen=self.auto_queen_promotion)
        if record is None:
            return None
        self.commit(record)
        return record

    def request_move(self, depth: Optional[int] = None) -> SearchResult:
        """Best move for the side to move, without playing it.

        Used both for the computer's reply and for hints. The value is
        reported relative to ``reference_side``.
        """
        side = self.board.turn
        sign = 1 if side == self.reference_side else -1
        result = self.engine.find_best_move(
            self.board, self.depth if depth is None else depth, sign * self.current_score(), side
        )
        self.last_stats = result.stats
        return SearchResult(result.move, sign * result.value, result.stats)

    def play_computer_move(self, depth: Optional[int] = None) -> SearchResult:
        result = self.request_move(depth)
        if result.move is not None:
            self.commit(result.move)
        return result

    # ── Undo / redo ─────────────────────────────────────────

    def undo(self) -> Outcome:
        """Take back the last two plies (the computer's reply and the player's move)."""
        if self.board.ply_count < 2:
            return Outcome.NOTHING_TO_UNDO
        for _ in range(2):
            record = self.board.reverse()
            self._scores.pop()
            self.history.push(HistoryEntry(record))
        logger.debug("Undo: %d redo entries", len(self.history))
        return Outcome.OK

    def redo(self) -> Outcome:
        if len(self.history) < 2:
            return Outcome.NOTHING_TO_REDO
        for _ in range(2):
            self._push(self.history.pop().record)
        return Outcome.OK

    # ── Queries for the presentation layer ──────────────────

    def status(self) -> GameStatus:
        return game_status(self.board)

    def status_message(self) -> str:
        return status_message(self.board)

    def is_game_over(self) -> bool:
        return self.board.is_game_over()

    def last_move(self) -> Optional[MoveRecord]:
        history = self.board.history()
        return history[-1] if history else None

    def move_list(self) -> List[Tuple[int, str, str]]:
        return move_rows(self.board.san_history())

    def captured_pieces(self) -> Dict[str, List[str]]:
        return captured_pieces(self.board.history())

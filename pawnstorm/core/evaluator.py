"""Incremental evaluator: folds one played move into the running score."""

from typing import Dict, Optional

import chess

from pawnstorm.config import CONFIG, PIECE_VALUES
from pawnstorm.core.board import ChessBoard, MoveRecord


class Evaluator:
    """Scores moves relative to a reference side.

    The score is never recomputed from the whole board. Each call starts from
    the score before ``move`` and adds the check bonus, the captured material
    and the promotion gain, all signed by whether the mover is the reference
    side. Checkmate and draws replace the score outright.
    """

    def __init__(self, piece_values: Optional[Dict[str, int]] = None,
                 check_bonus: Optional[int] = None, mate_score: Optional[int] = None):
        cfg = CONFIG.eval
        names = {**PIECE_VALUES, **(piece_values or cfg.piece_values)}
        self.values = {pt: names[chess.piece_name(pt).upper()] for pt in chess.PIECE_TYPES}
        self.check_bonus = cfg.check_bonus if check_bonus is None else check_bonus
        self.mate_score = cfg.mate_score if mate_score is None else mate_score

    def evaluate(self, board: ChessBoard, move: MoveRecord, previous: int,
                 reference_side: chess.Color) -> int:
        """Return the running score after ``move`` has been pushed on ``board``."""
        sign = 1 if move.color == reference_side else -1

        # Checkmate must be tested before draws and before any material term.
        if board.is_checkmate():
            return sign * self.mate_score
        if board.is_draw():
            return 0

        score = previous
        if board.is_check():
            score += sign * self.check_bonus
        if move.captured is not None:
            score += sign * self.values[move.captured]
        if move.promotion is not None:
            score += sign * (self.values[move.promotion] - self.values[chess.PAWN])
        return score

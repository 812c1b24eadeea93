import logging
import math
import random
import time
from dataclasses import dataclass
from typing import Callable, Optional, Tuple

import chess

from pawnstorm.core.board import ChessBoard, MoveRecord
from pawnstorm.core.evaluator import Evaluator

logger = logging.getLogger(__name__)

INF = math.inf


@dataclass(frozen=True)
class SearchStats:
    positions: int
    elapsed: float  # seconds

    @property
    def nodes_per_second(self) -> int:
        return int(self.positions / self.elapsed) if self.elapsed > 0 else 0


@dataclass(frozen=True)
class SearchResult:
    move: Optional[MoveRecord]
    value: float
    stats: SearchStats


class SearchEngine:
    """Depth-bounded alpha-beta minimax over the legal moves of a ChessBoard.

    Candidate moves are shuffled with ``rng`` at every node, so equal-valued
    moves are picked in a different order from run to run. Pass a seeded
    ``random.Random`` for repeatable games.
    """

    def __init__(self, evaluator: Optional[Evaluator] = None, rng: Optional[random.Random] = None):
        self.evaluator = evaluator or Evaluator()
        self.rng = rng or random.Random()

    def find_best_move(self, board: ChessBoard, depth: int, score: int = 0,
                       side: Optional[chess.Color] = None) -> SearchResult:
        """Search for the side to move.

        ``score`` is the running score seen from ``side`` (the side to move
        by default); the returned value uses the same perspective.
        """
        side = board.turn if side is None else side
        depth = max(1, int(depth))
        nodes = 0

        def count():
            nonlocal nodes
            nodes += 1

        start_time = time.perf_counter()
        move, value = self.search(board, depth, -INF, INF, True, score, side, count)
        stats = SearchStats(nodes, time.perf_counter() - start_time)
        logger.debug(
            "depth %d best %s value %s positions %d time %.3fs",
            depth, move.uci if move else "-", value, stats.positions, stats.elapsed,
        )
        return SearchResult(move, value, stats)

    def search(self, board: ChessBoard, depth: int, alpha: float, beta: float,
               maximizing: bool, score: int, reference_side: chess.Color,
               on_visit: Callable[[], None]) -> Tuple[Optional[MoveRecord], float]:
        on_visit()

        if depth <= 0:
            return None, score
        moves = board.legal_moves()
        if not moves:
            return None, score
        self.rng.shuffle(moves)

        best_move = None
        best_value = -INF if maximizing else INF

        for move in moves:
            with board.applied(move):
                new_score = self.evaluator.evaluate(board, move, score, reference_side)
                _, value = self.search(board, depth - 1, alpha, beta, not maximizing,
                                       new_score, reference_side, on_visit)

            if maximizing:
                if value > best_value:
                    best_value = value
                    best_move = move
                alpha = max(alpha, value)
            else:
                if value < best_value:
                    best_value = value
                    best_move = move
                beta = min(beta, value)

            if beta <= alpha:
                break

        return best_move, best_value

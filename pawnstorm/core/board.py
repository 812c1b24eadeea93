"""Board wrapper over python-chess exposing the move records the engine consumes."""

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator, List, Optional

import chess

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MoveRecord:
    """One legal move plus the facts the evaluator reads from it."""

    move: chess.Move
    color: chess.Color
    captured: Optional[chess.PieceType] = None
    is_en_passant: bool = False
    is_castling: bool = False

    @property
    def promotion(self) -> Optional[chess.PieceType]:
        return self.move.promotion

    @property
    def is_capture(self) -> bool:
        return self.captured is not None

    @property
    def from_square(self) -> chess.Square:
        return self.move.from_square

    @property
    def to_square(self) -> chess.Square:
        return self.move.to_square

    @property
    def uci(self) -> str:
        return self.move.uci()


def make_record(board: chess.Board, move: chess.Move) -> MoveRecord:
    """Describe ``move`` as seen from ``board`` before it is pushed."""
    en_passant = board.is_en_passant(move)
    if en_passant:
        captured = chess.PAWN
    else:
        captured = board.piece_type_at(move.to_square)
        # castling in python-chess is encoded as king-takes-own-rook in chess960 only
        if captured is not None and board.color_at(move.to_square) == board.turn:
            captured = None
    return MoveRecord(
        move=move,
        color=board.turn,
        captured=captured,
        is_en_passant=en_passant,
        is_castling=board.is_castling(move),
    )


class ChessBoard:
    def __init__(self, fen: str = None):
        """Initialize from FEN or the standard starting position."""
        self.board = chess.Board(fen) if fen else chess.Board()
        self._records: List[MoveRecord] = []

    def reset(self):
        """Reset to the initial position."""
        self.board.reset()
        self._records.clear()

    def set_fen(self, fen: str):
        """Set board state from a FEN string. Raises ValueError on bad input."""
        self.board.set_fen(fen)
        self._records.clear()

    def get_fen(self) -> str:
        """Return the current FEN."""
        return self.board.fen()

    def copy(self) -> "ChessBoard":
        clone = ChessBoard.__new__(ChessBoard)
        clone.board = self.board.copy()
        clone._records = list(self._records)
        return clone

    @property
    def turn(self) -> chess.Color:
        return self.board.turn

    @property
    def ply_count(self) -> int:
        """Half-moves played since the last reset or FEN."""
        return len(self._records)

    def legal_moves(self, square: Optional[chess.Square] = None) -> List[MoveRecord]:
        """Return legal moves as records, optionally only those leaving ``square``."""
        moves = self.board.legal_moves
        if square is not None:
            moves = self.board.generate_legal_moves(from_mask=chess.BB_SQUARES[square])
        return [make_record(self.board, m) for m in moves]

    def parse_move(self, move_str: str, auto_queen: bool = True) -> Optional[MoveRecord]:
        """Turn a UCI string into a legal record, or None if it is not legal here."""
        try:
            move = chess.Move.from_uci(move_str)
        except ValueError:
            logger.debug("Rejected malformed move %r", move_str)
            return None
        if (
            auto_queen
            and move.promotion is None
            and self.board.piece_type_at(move.from_square) == chess.PAWN
            and chess.square_rank(move.to_square) in (0, 7)
        ):
            move = chess.Move(move.from_square, move.to_square, promotion=chess.QUEEN)
        if move not in self.board.legal_moves:
            logger.debug("Rejected illegal move %s in %s", move_str, self.get_fen())
            return None
        return make_record(self.board, move)

    def apply(self, record: MoveRecord):
        """Push a record produced by legal_moves() or parse_move()."""
        self.board.push(record.move)
        self._records.append(record)

    def reverse(self) -> Optional[MoveRecord]:
        """Pop the last move and return its record, or None at the start."""
        if not self._records:
            return None
        self.board.pop()
        return self._records.pop()

    @contextmanager
    def applied(self, record: MoveRecord) -> Iterator[MoveRecord]:
        """Apply ``record`` for the duration of the block, always reversing it."""
        self.apply(record)
        try:
            yield record
        finally:
            self.reverse()

    def history(self) -> List[MoveRecord]:
        """Records of every move played since the last reset or FEN."""
        return list(self._records)

    def san_history(self) -> List[str]:
        """SAN of every recorded move, replayed from the starting position."""
        replay = self.board.copy()
        for _ in self._records:
            replay.pop()
        sans = []
        for record in self._records:
            sans.append(replay.san(record.move))
            replay.push(record.move)
        return sans

    def is_check(self) -> bool:
        return self.board.is_check()

    def is_checkmate(self) -> bool:
        return self.board.is_checkmate()

    def is_stalemate(self) -> bool:
        return self.board.is_stalemate()

    def is_insufficient_material(self) -> bool:
        return self.board.is_insufficient_material()

    def is_fifty_moves(self) -> bool:
        return self.board.halfmove_clock >= 100

    def is_threefold_repetition(self) -> bool:
        return self.board.is_repetition(3)

    def is_draw(self) -> bool:
        """Stalemate, insufficient material, fifty-move rule or threefold repetition."""
        return (
            self.is_fifty_moves()
            or self.is_stalemate()
            or self.is_insufficient_material()
            or self.is_threefold_repetition()
        )

    def is_game_over(self) -> bool:
        """Check if the game has ended."""
        return self.is_checkmate() or self.is_draw()

    def __str__(self) -> str:
        return str(self.board)

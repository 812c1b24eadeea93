"""Engine-versus-engine self-play paced by a cooperative scheduler.

The controller never loops. Every ply is a separate deferred call handed to a
scheduler, so the host event loop keeps handling input and rendering between
plies. Any object with ``call_later(delay, callback)`` returning a handle
with ``cancel()`` works as a scheduler; an ``asyncio`` event loop is one.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Protocol

import chess

from pawnstorm.config import CONFIG
from pawnstorm.core.board import MoveRecord
from pawnstorm.core.search import SearchStats
from pawnstorm.core.utils import GameStatus, side_name

logger = logging.getLogger(__name__)


class Cancellable(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    def call_later(self, delay: float, callback: Callable[[], None]) -> Cancellable: ...


class AutoplayState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"


@dataclass(frozen=True)
class AutoplayUpdate:
    ply: int
    move: MoveRecord
    score: int
    stats: SearchStats
    fen: str
    status: GameStatus


class AutoplayController:
    def __init__(self, session, scheduler: Scheduler, delay: Optional[float] = None,
                 depth: Optional[int] = None,
                 on_update: Optional[Callable[[AutoplayUpdate], None]] = None,
                 on_finish: Optional[Callable[[str], None]] = None):
        self.session = session
        self.scheduler = scheduler
        self.delay = CONFIG.search.autoplay_delay_ms / 1000 if delay is None else delay
        self.depth = depth
        self.on_update = on_update
        self.on_finish = on_finish
        self.plies_played = 0
        self.finish_reason: Optional[str] = None
        self._state = AutoplayState.IDLE
        self._handle: Optional[Cancellable] = None

    @property
    def state(self) -> AutoplayState:
        return self._state

    @property
    def is_running(self) -> bool:
        return self._state is AutoplayState.RUNNING

    @property
    def side(self) -> chess.Color:
        """The side the next ply is searched for."""
        return self.session.board.turn

    def start(self, starting_side: Optional[chess.Color] = None, fen: Optional[str] = None):
        """Reset the game and begin self-play. A running game is stopped first.

        ``starting_side`` defaults to whoever is to move in the start position.
        """
        turn = chess.Board(fen).turn if fen else chess.WHITE
        if starting_side is None:
            starting_side = turn
        if turn != starting_side:
            raise ValueError(f"{side_name(starting_side)} is not to move in this position")
        self.stop()
        self.session.new_game(fen)
        self.plies_played = 0
        self.finish_reason = None
        self._state = AutoplayState.RUNNING
        logger.info("Autoplay started, %s to move", side_name(starting_side))
        self._schedule(0)

    def toggle(self, starting_side: Optional[chess.Color] = None) -> AutoplayState:
        """One control for both: stop when running, start otherwise."""
        if self.is_running:
            self.stop()
        else:
            self.start(starting_side)
        return self._state

    def stop(self, reason: str = "stopped"):
        """Cancel the pending ply, if any. Does nothing when idle."""
        if not self.is_running:
            return
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
        self._state = AutoplayState.IDLE
        self.finish_reason = reason
        logger.info("Autoplay finished after %d plies: %s", self.plies_played, reason)
        if self.on_finish:
            self.on_finish(reason)

    def _schedule(self, delay: float):
        self._handle = self.scheduler.call_later(delay, self._step)

    def _step(self):
        self._handle = None
        if not self.is_running:
            return
        try:
            self._advance()
        except Exception:
            logger.exception("Autoplay failed after %d plies", self.plies_played)
            self.stop("error")
            raise

    def _advance(self):
        status = self.session.status()
        if status.is_terminal:
            self.stop(status.value)
            return

        result = self.session.request_move(self.depth)
        if result.move is None:
            self.stop("no legal move")
            return
        self.session.commit(result.move)
        self.plies_played += 1

        status = self.session.status()
        update = AutoplayUpdate(
            ply=self.plies_played,
            move=result.move,
            score=self.session.current_score(),
            stats=result.stats,
            fen=self.session.board.get_fen(),
            status=status,
        )
        logger.debug("Autoplay ply %d: %s %s", update.ply, update.move.uci, update.score)
        if self.on_update:
            self.on_update(update)

        if status.is_terminal:
            self.stop(status.value)
            return
        # on_update may have stopped us
        if not self.is_running:
            return
        self._schedule(self.delay)

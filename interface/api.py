"""FastAPI REST interface for a single game session.

Every endpoint is ``async`` so the session is only ever touched from the event
loop thread, which is also where autoplay plies run.
"""

import asyncio
import logging

import chess
from fastapi import FastAPI, HTTPException
from pydantic import BaseModel
from typing import Optional

from pawnstorm import __version__
from pawnstorm.config import CONFIG
from pawnstorm.core.autoplay import AutoplayController
from pawnstorm.core.search import SearchResult
from pawnstorm.core.utils import eval_bar_percentage, format_score, side_name
from pawnstorm.session import GameSession, Outcome, parse_side

logger = logging.getLogger(__name__)

app = FastAPI(title=CONFIG.ui.engine_name, version=__version__)

# Shared game state; the scheduler is bound to the running loop on start.
session = GameSession()
autoplay = AutoplayController(session, scheduler=None)


class FenRequest(BaseModel):
    fen: str


class MoveRequest(BaseModel):
    move: str  # UCI format e.g. "e2e4"
    reply: bool = False  # let the computer answer straight away
    depth: Optional[int] = None


class SearchRequest(BaseModel):
    depth: Optional[int] = None


class AutoplayRequest(BaseModel):
    side: Optional[str] = None  # defaults to the side to move
    fen: Optional[str] = None


def _board_state() -> dict:
    board = session.board
    score = session.current_score()
    return {
        "fen": board.get_fen(),
        "turn": "white" if board.turn == chess.WHITE else "black",
        "legal_moves": [r.uci for r in board.legal_moves()],
        "is_game_over": board.is_game_over(),
        "status": session.status().value,
        "message": session.status_message(),
        "score": score,
        "evaluation": format_score(score),
        "eval_bar": eval_bar_percentage(score),
        "moves": [list(row) for row in session.move_list()],
        "captured": session.captured_pieces(),
    }


def _result_payload(result: SearchResult) -> dict:
    return {
        "best_move": result.move.uci if result.move else None,
        "score": result.value,
        "positions": result.stats.positions,
        "elapsed": result.stats.elapsed,
        "nps": result.stats.nodes_per_second,
    }


def _autoplay_state() -> dict:
    return {
        "state": autoplay.state.value,
        "plies": autoplay.plies_played,
        "reason": autoplay.finish_reason,
        "fen": session.board.get_fen(),
        "score": session.current_score(),
    }


@app.get("/board")
async def get_board():
    return _board_state()


@app.get("/moves/{square}")
async def get_moves(square: str):
    try:
        sq = chess.parse_square(square)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Invalid square: {square}")
    return {
        "square": square,
        "moves": [
            {"to": chess.square_name(r.to_square), "uci": r.uci, "capture": r.is_capture}
            for r in session.board.legal_moves(sq)
        ],
    }


@app.post("/position")
async def set_position(req: FenRequest):
    autoplay.stop("interrupted")
    try:
        session.new_game(req.fen)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=f"Invalid FEN: {e}")
    return {"fen": session.board.get_fen()}


@app.post("/move")
async def make_move(req: MoveRequest):
    autoplay.stop("interrupted")
    if session.is_game_over():
        raise HTTPException(status_code=400, detail="Game is already over")
    record = session.play_move(req.move)
    if record is None:
        raise HTTPException(status_code=400, detail=f"Illegal move: {req.move}")
    payload = {"fen": session.board.get_fen(), "move": record.uci, "reply": None}
    if req.reply and not session.is_game_over():
        result = session.play_computer_move(req.depth)
        payload["reply"] = _result_payload(result)
        payload["fen"] = session.board.get_fen()
    payload["message"] = session.status_message()
    return payload


@app.post("/search")
async def search_move(req: SearchRequest = SearchRequest()):
    """Hint for the side to move; the game itself is left untouched.

    In a finished game ``best_move`` is null and ``message`` says why.
    """
    payload = _result_payload(session.request_move(req.depth))
    payload["message"] = session.status_message()
    return payload


@app.post("/computer-move")
async def computer_move(req: SearchRequest = SearchRequest()):
    autoplay.stop("interrupted")
    payload = _result_payload(session.play_computer_move(req.depth))
    payload["fen"] = session.board.get_fen()
    payload["message"] = session.status_message()
    return payload


@app.post("/undo")
async def undo():
    autoplay.stop("interrupted")
    outcome = session.undo()
    return {
        "ok": outcome is Outcome.OK,
        "message": "" if outcome is Outcome.OK else "Nothing to undo",
        "fen": session.board.get_fen(),
    }


@app.post("/redo")
async def redo():
    autoplay.stop("interrupted")
    outcome = session.redo()
    return {
        "ok": outcome is Outcome.OK,
        "message": "" if outcome is Outcome.OK else "Nothing to redo",
        "fen": session.board.get_fen(),
    }


@app.post("/reset")
async def reset_board():
    autoplay.stop("interrupted")
    session.new_game()
    return {"fen": session.board.get_fen()}


@app.get("/autoplay")
async def get_autoplay():
    return _autoplay_state()


def _start_autoplay(req: AutoplayRequest):
    try:
        side = parse_side(req.side) if req.side else None
        autoplay.scheduler = asyncio.get_running_loop()
        autoplay.start(side, fen=req.fen)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    logger.info("Autoplay requested, %s to move", side_name(autoplay.side))


@app.post("/autoplay/start")
async def start_autoplay(req: AutoplayRequest = AutoplayRequest()):
    _start_autoplay(req)
    return _autoplay_state()


@app.post("/autoplay/stop")
async def stop_autoplay():
    autoplay.stop()
    return _autoplay_state()


@app.post("/autoplay/toggle")
async def toggle_autoplay(req: AutoplayRequest = AutoplayRequest()):
    if autoplay.is_running:
        autoplay.stop()
    else:
        _start_autoplay(req)
    return _autoplay_state()

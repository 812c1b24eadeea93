"""Terminal front-end: play White against the engine, or watch it play itself."""

import asyncio
from typing import Optional

import chess

from pawnstorm.config import CONFIG, configure_logging
from pawnstorm.core.autoplay import AutoplayController, AutoplayUpdate
from pawnstorm.core.utils import format_score, format_stats
from pawnstorm.session import GameSession, Outcome


HELP = (
    "Commands: <uci move> (e.g. e2e4), hint, undo, redo, new, depth N, "
    "auto (computer vs computer), board, help, quit"
)


def _describe_reply(session: GameSession) -> str:
    result = session.play_computer_move()
    if result.move is None:
        return ""
    return (
        f"Engine plays: {result.move.uci} | Eval: {format_score(session.current_score())}"
        f" | {format_stats(result.stats)}"
    )


def handle_command(session: GameSession, line: str) -> str:
    """Run one command and return what should be printed."""
    cmd = line.strip()
    if not cmd:
        return ""
    word = cmd.split()[0].lower()

    if word == "help":
        return HELP
    if word == "board":
        return str(session.board)
    if word == "new":
        session.new_game()
        return "New game started"
    if word == "depth":
        parts = cmd.split()
        if len(parts) != 2 or not parts[1].isdigit() or int(parts[1]) < 1:
            return "Usage: depth N (N >= 1)"
        session.depth = int(parts[1])
        return f"Search depth set to {session.depth}"
    if word == "undo":
        return "Undone" if session.undo() is Outcome.OK else "Nothing to undo"
    if word == "redo":
        return "Redone" if session.redo() is Outcome.OK else "Nothing to redo"
    if word == "hint":
        if session.is_game_over():
            return session.status_message()
        result = session.request_move()
        if result.move is None:
            return "No legal moves"
        return f"Hint: {result.move.uci} ({format_stats(result.stats)})"

    if session.is_game_over():
        return session.status_message()
    record = session.play_move(cmd)
    if record is None:
        return "Illegal move, try again."
    lines = []
    if not session.is_game_over():
        lines.append(_describe_reply(session))
    message = session.status_message()
    if message:
        lines.append(message)
    return "\n".join(text for text in lines if text)


async def run_autoplay(session: GameSession, out=print, fen: Optional[str] = None) -> str:
    """Let the engine play both sides until the game ends; returns the reason."""
    loop = asyncio.get_running_loop()
    finished = loop.create_future()

    def on_update(update: AutoplayUpdate):
        side = "White" if update.move.color == chess.WHITE else "Black"
        out(f"{update.ply:3d}. {side} {update.move.uci}  eval {format_score(update.score)}")

    def on_finish(reason: str):
        # already cancelled when the user interrupts
        if not finished.done():
            finished.set_result(reason)

    controller = AutoplayController(session, loop, on_update=on_update, on_finish=on_finish)
    controller.start(fen=fen)
    try:
        return await finished
    finally:
        controller.stop()


def main():
    configure_logging()
    session = GameSession()
    print(f"{CONFIG.ui.engine_name} - depth {session.depth}. {HELP}")

    while True:
        print(session.board)
        print("----------------------------")
        try:
            line = input("> ")
        except EOFError:
            break
        if line.strip().lower() in ("quit", "exit"):
            break
        if line.strip().lower() == "auto":
            try:
                reason = asyncio.run(run_autoplay(session))
            except KeyboardInterrupt:
                reason = "interrupted"
            print(f"Autoplay finished: {reason}. {session.status_message()}")
            continue
        output = handle_command(session, line)
        if output:
            print(output)

    print("Game Over")
    print(f"Result: {session.board.board.result(claim_draw=True)}")


if __name__ == "__main__":
    main()

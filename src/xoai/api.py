"""FastAPI service for playing tic-tac-toe against the XO AI."""

from __future__ import annotations

import logging
import threading
import uuid
from dataclasses import dataclass, field
from typing import Dict, List, Literal, Optional, Tuple

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, ConfigDict, Field, field_validator

from .ai import INITIAL_DEPTH, MoveSelector
from .board import (
    EMPTY,
    SIZE,
    Marker,
    empty_cells,
    has_winning_line,
    move_record,
    other,
    position_key,
    to_dense_board,
)

logger = logging.getLogger(__name__)

MIN_DEPTH = 1
MAX_DEPTH = 9


@dataclass
class GameSession:
    """An open game: the position so far and the AI session playing it."""

    selector: MoveSelector
    ai_moves_first: bool
    position: Dict[str, Dict[str, object]] = field(default_factory=dict)
    move_log: List[Dict[str, int | str]] = field(default_factory=list)
    winner: Optional[Marker] = None
    drawn: bool = False
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    @property
    def ai_marker(self) -> Marker:
        return "X" if self.ai_moves_first else "O"

    @property
    def human_marker(self) -> Marker:
        return other(self.ai_marker)

    @property
    def finished(self) -> bool:
        return self.winner is not None or self.drawn

    def current_player(self) -> Optional[Marker]:
        if self.finished:
            return None
        return "X" if len(self.move_log) % 2 == 0 else "O"


SESSIONS: Dict[str, GameSession] = {}
app = FastAPI(title="XO AI", description="Tic-tac-toe against a minimax opponent")


class NewGameRequest(BaseModel):
    """Request payload for starting a new game."""

    model_config = ConfigDict(populate_by_name=True)

    ai_moves_first: bool = Field(default=False, alias="aiMovesFirst")
    depth: int = Field(
        default=INITIAL_DEPTH,
        ge=MIN_DEPTH,
        le=MAX_DEPTH,
        description="Search depth of the AI's first move; it grows every turn",
    )


class MoveRequest(BaseModel):
    """Request payload for submitting a move on an existing game."""

    row: int = Field(ge=0, le=SIZE - 1)
    col: int = Field(ge=0, le=SIZE - 1)


class MoveRecord(BaseModel):
    direction: Tuple[int, int]
    content: Literal["X", "O"]

    @field_validator("direction")
    @classmethod
    def ensure_on_board(cls, value: Tuple[int, int]) -> Tuple[int, int]:
        row, col = value
        if not (0 <= row < SIZE and 0 <= col < SIZE):
            raise ValueError(f"Cell {value} is outside the {SIZE}x{SIZE} board")
        return value


class SelectMoveRequest(BaseModel):
    """Stateless move selection for a caller that keeps its own position."""

    model_config = ConfigDict(populate_by_name=True)

    position: Dict[str, MoveRecord] = Field(default_factory=dict)
    ai_moves_first: bool = Field(default=False, alias="aiMovesFirst")
    depth: int = Field(default=INITIAL_DEPTH, ge=MIN_DEPTH, le=MAX_DEPTH)


def _create_session(ai_moves_first: bool, depth: int) -> Tuple[str, GameSession]:
    """Create a new game session and register it for later access."""

    session = GameSession(selector=MoveSelector(depth=depth), ai_moves_first=ai_moves_first)
    session_id = uuid.uuid4().hex
    SESSIONS[session_id] = session
    logger.info(
        "Created game %s (ai=%s, depth=%d)", session_id, session.ai_marker, depth
    )
    return session_id, session


def _get_session(game_id: str) -> GameSession:
    try:
        return SESSIONS[game_id]
    except KeyError as exc:
        raise HTTPException(status_code=404, detail="Game not found") from exc


def _place(game_id: str, session: GameSession, row: int, col: int, marker: Marker) -> None:
    """Record a move and update the result. Caller holds the lock."""

    session.position[position_key(row, col)] = move_record(row, col, marker)
    session.move_log.append({"player": marker, "row": row, "col": col})

    if has_winning_line(session.position, SIZE, SIZE, (row, col)):
        session.winner = marker
    elif not empty_cells(to_dense_board(session.position)):
        session.drawn = True

    if session.finished:
        logger.info(
            "Game %s finished: %s", game_id, session.winner or "draw"
        )


def _run_ai_turn(game_id: str, session: GameSession) -> None:
    """Let the AI answer. Caller holds the lock."""

    if session.finished or session.current_player() != session.ai_marker:
        return
    row, col = session.selector.select_move(session.position, session.ai_moves_first)
    _place(game_id, session, row, col, session.ai_marker)


def _serialize_session(game_id: str, session: GameSession) -> Dict[str, object]:
    with session.lock:
        board = to_dense_board(session.position)
        state: Dict[str, object] = {
            "id": game_id,
            "aiMarker": session.ai_marker,
            "humanMarker": session.human_marker,
            "currentPlayer": session.current_player(),
            "board": [[c if c != EMPTY else "" for c in row] for row in board],
            "winner": session.winner,
            "drawn": session.drawn,
            "depth": session.selector.depth,
            "moveLog": list(session.move_log),
        }
        if session.move_log:
            state["lastMove"] = session.move_log[-1]
        return state


def _apply_player_move(game_id: str, session: GameSession, row: int, col: int) -> None:
    with session.lock:
        if session.finished:
            raise HTTPException(status_code=400, detail="Game already finished")

        if session.current_player() != session.human_marker:
            raise HTTPException(status_code=400, detail="It is not your turn")

        if position_key(row, col) in session.position:
            raise HTTPException(status_code=400, detail="Cell already occupied")

        _place(game_id, session, row, col, session.human_marker)
        _run_ai_turn(game_id, session)


@app.post("/api/game")
def create_game(request: NewGameRequest) -> Dict[str, object]:
    game_id, session = _create_session(request.ai_moves_first, request.depth)
    with session.lock:
        _run_ai_turn(game_id, session)
    return _serialize_session(game_id, session)


@app.get("/api/game/{game_id}")
def get_game(game_id: str) -> Dict[str, object]:
    session = _get_session(game_id)
    return _serialize_session(game_id, session)


@app.post("/api/game/{game_id}/move")
def make_move(game_id: str, request: MoveRequest) -> Dict[str, object]:
    session = _get_session(game_id)
    _apply_player_move(game_id, session, request.row, request.col)
    return _serialize_session(game_id, session)


@app.post("/api/move")
def select_move(request: SelectMoveRequest) -> Dict[str, int]:
    position = {key: record.model_dump() for key, record in request.position.items()}
    selector = MoveSelector(depth=request.depth)
    try:
        row, col = selector.select_move(position, request.ai_moves_first)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return {"row": row, "col": col}

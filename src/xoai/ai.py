"""Depth-limited minimax with alpha-beta pruning for 3x3 tic-tac-toe."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional
import logging
import math

from .board import (
    CENTER,
    CORNERS,
    SIZE,
    Board,
    Cell,
    Marker,
    Position,
    empty_cells,
    has_winning_line,
    is_game_over,
    move_record,
    other,
    placed,
    position_key,
    to_dense_board,
)

logger = logging.getLogger(__name__)

INITIAL_DEPTH = 2
# Try every empty cell for an instant win once this few remain.
SHORT_CIRCUIT_THRESHOLD = 5
PARITY_BONUS = 50


@dataclass(frozen=True)
class SearchContext:
    """Markers and session depth shared by every node of one search."""

    current: Marker
    opponent: Marker
    session_depth: int

    @classmethod
    def for_side(cls, ai_moves_first: bool, session_depth: int) -> "SearchContext":
        current = "X" if ai_moves_first else "O"
        return cls(current=current, opponent=other(current), session_depth=session_depth)


@dataclass
class SearchResult:
    score: float
    row: Optional[int] = None
    col: Optional[int] = None

    @property
    def move(self) -> Optional[Cell]:
        if self.row is None or self.col is None:
            return None
        return self.row, self.col


@dataclass
class LineProfile:
    """Pieces one player holds per row, column, diagonal, corner and center."""

    horizontal: List[int] = field(default_factory=lambda: [0, 0, 0])
    vertical: List[int] = field(default_factory=lambda: [0, 0, 0])
    diagonal: List[int] = field(default_factory=lambda: [0, 0])
    corners: int = 0
    center: int = 0

    def lines(self) -> List[int]:
        return [*self.horizontal, *self.vertical, *self.diagonal]

    def score(self) -> int:
        return (
            sum(10**count for count in self.lines())
            + 5 * self.corners
            + 10 * self.center
        )


@dataclass
class MoveSelector:
    """A play session against the AI.

    ``depth`` is the search depth for the next move. It starts at
    ``INITIAL_DEPTH`` and grows by one after every selected move, so the
    opponent gets stronger as the session goes on.

      - MoveSelector().select_move(position, ai_moves_first) -> (row, col)
    """

    depth: int = INITIAL_DEPTH

    # ---- public API ----

    def select_move(self, position: Position, ai_moves_first: bool) -> Cell:
        board = to_dense_board(position)
        cells = empty_cells(board)
        if not cells:
            raise ValueError("No empty cell left to play")

        context = SearchContext.for_side(ai_moves_first, self.depth)
        move = self._choose(board, cells, position, context)
        self.depth += 1
        return move

    # ---- internals ----

    def _choose(
        self,
        board: Board,
        cells: List[Cell],
        position: Position,
        context: SearchContext,
    ) -> Cell:
        if len(cells) <= SHORT_CIRCUIT_THRESHOLD:
            for row, col in cells:
                trial = dict(position)
                trial[position_key(row, col)] = move_record(row, col, context.current)
                if has_winning_line(trial, SIZE, SIZE, (row, col)):
                    logger.debug("Immediate win for %s at %s", context.current, (row, col))
                    return row, col

        best = minimax(board, True, -math.inf, math.inf, context.session_depth, context)
        move = best.move
        if move is None:
            # Board already decided; any empty cell will do.
            move = cells[0]
        logger.debug(
            "Search at depth %d picked %s (score %s)",
            context.session_depth,
            move,
            best.score,
        )
        return move


def select_move(
    position: Position,
    ai_moves_first: bool,
    selector: Optional[MoveSelector] = None,
) -> Cell:
    """Pick the AI's move, using a fresh session when none is given."""

    if selector is None:
        selector = MoveSelector()
    return selector.select_move(position, ai_moves_first)


# ---- core search ----


def minimax(
    board: Board,
    maximizing: bool,
    alpha: float,
    beta: float,
    depth: int,
    context: SearchContext,
) -> SearchResult:
    """Alpha-beta search; ``board`` is mutated during the walk and restored."""

    cells = empty_cells(board)
    if depth == 0 or is_game_over(board) or not cells:
        return SearchResult(score=evaluate(board, context))

    best: Optional[SearchResult] = None

    if maximizing:
        value = -math.inf
        for row, col in cells:
            with placed(board, row, col, context.current):
                child = minimax(board, False, alpha, beta, depth - 1, context)
            if child.score > value:
                value = child.score
                best = SearchResult(score=child.score, row=row, col=col)
            alpha = max(alpha, value)
            if alpha >= beta:
                break
    else:
        value = math.inf
        for row, col in cells:
            with placed(board, row, col, context.opponent):
                child = minimax(board, True, alpha, beta, depth - 1, context)
            if child.score < value:
                value = child.score
                best = SearchResult(score=child.score, row=row, col=col)
            beta = min(beta, value)
            if alpha >= beta:
                break

    if best is None:
        return SearchResult(score=evaluate(board, context))
    return best


# ---- evaluation ----


def line_profile(board: Board, marker: Marker) -> LineProfile:
    profile = LineProfile()
    for row in range(SIZE):
        for col in range(SIZE):
            if board[row][col] != marker:
                continue
            profile.horizontal[row] += 1
            profile.vertical[col] += 1
            if row == col:
                profile.diagonal[0] += 1
            if row + col == SIZE - 1:
                profile.diagonal[1] += 1
            if (row, col) in CORNERS:
                profile.corners += 1
            if (row, col) == CENTER:
                profile.center += 1
    return profile


def parity_bonus(current: LineProfile, opponent: LineProfile, session_depth: int) -> int:
    """Reward or punish near-complete lines by the parity of the session depth.

    The session depth, not the recursion depth, decides whose turn is assumed.
    """
    diffs = [mine - theirs for mine, theirs in zip(current.lines(), opponent.lines())]
    if session_depth % 2 == 0:
        if 2 in diffs or 3 in diffs:
            return PARITY_BONUS
    elif -2 in diffs or -3 in diffs:
        return -PARITY_BONUS
    return 0


def evaluate(board: Board, context: SearchContext) -> int:
    """Static score from the AI's point of view (higher is better)."""

    mine = line_profile(board, context.current)
    theirs = line_profile(board, context.opponent)
    bonus = parity_bonus(mine, theirs, context.session_depth)
    return mine.score() + bonus - theirs.score()


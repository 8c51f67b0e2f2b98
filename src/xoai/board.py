"""Board representation, win detection and the win-check helper for XO AI."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Mapping, Tuple

Marker = str  # "X" or "O"
Board = List[List[str]]
Position = Mapping[str, Mapping[str, Any]]
Cell = Tuple[int, int]

EMPTY = "-"
SIZE = 3

WINNING_LINES: Tuple[Tuple[Cell, Cell, Cell], ...] = (
    # rows
    ((0, 0), (0, 1), (0, 2)),
    ((1, 0), (1, 1), (1, 2)),
    ((2, 0), (2, 1), (2, 2)),
    # columns
    ((0, 0), (1, 0), (2, 0)),
    ((0, 1), (1, 1), (2, 1)),
    ((0, 2), (1, 2), (2, 2)),
    # diagonals
    ((0, 0), (1, 1), (2, 2)),
    ((0, 2), (1, 1), (2, 0)),
)

CORNERS: Tuple[Cell, ...] = ((0, 0), (0, 2), (2, 0), (2, 2))
CENTER: Cell = (1, 1)


def other(marker: Marker) -> Marker:
    return "O" if marker == "X" else "X"


def position_key(row: int, col: int) -> str:
    return f"{row}-{col}"


def move_record(row: int, col: int, marker: Marker) -> Dict[str, Any]:
    """Build a sparse move record as stored in a position."""

    return {"direction": (row, col), "content": marker}


# ---------- Dense board ----------


def to_dense_board(position: Position) -> Board:
    """Expand a sparse position into a 3x3 grid.

    Coordinates are trusted; the caller keeps them inside ``[0, 2]``.
    """
    board: Board = [[EMPTY] * SIZE for _ in range(SIZE)]
    for record in position.values():
        row, col = record["direction"]
        board[row][col] = record["content"]
    return board


def empty_cells(board: Board) -> List[Cell]:
    """Empty coordinates in row-major order."""

    return [
        (row, col)
        for row, cells in enumerate(board)
        for col, value in enumerate(cells)
        if value == EMPTY
    ]


def check_winner(board: Board) -> str:
    """Return the first completed line's marker, or ``EMPTY``."""

    for a, b, c in WINNING_LINES:
        v = board[a[0]][a[1]]
        if v != EMPTY and v == board[b[0]][b[1]] == board[c[0]][c[1]]:
            return v
    return EMPTY


def is_game_over(board: Board) -> bool:
    return check_winner(board) != EMPTY


@contextmanager
def placed(board: Board, row: int, col: int, marker: Marker) -> Iterator[Board]:
    """Temporarily put ``marker`` on ``board``; the cell is restored on exit."""

    previous = board[row][col]
    board[row][col] = marker
    try:
        yield board
    finally:
        board[row][col] = previous


# ---------- Win check on sparse positions ----------

_DIRECTIONS: Tuple[Cell, ...] = ((0, 1), (1, 0), (1, 1), (1, -1))


def has_winning_line(
    position: Position,
    rows: int,
    cols: int,
    last_move: Cell,
    length: int = 3,
) -> bool:
    """Whether the piece at ``last_move`` sits in a run of ``length`` equal markers.

    Runs are counted horizontally, vertically and along both diagonals of a
    ``rows`` x ``cols`` grid. An unoccupied ``last_move`` never wins.
    """
    grid: Dict[Cell, str] = {}
    for record in position.values():
        row, col = record["direction"]
        grid[(row, col)] = record["content"]

    marker = grid.get(tuple(last_move))
    if marker is None:
        return False

    row, col = last_move
    for dr, dc in _DIRECTIONS:
        run = 1
        for sign in (1, -1):
            r, c = row + sign * dr, col + sign * dc
            while 0 <= r < rows and 0 <= c < cols and grid.get((r, c)) == marker:
                run += 1
                r += sign * dr
                c += sign * dc
        if run >= length:
            return True
    return False

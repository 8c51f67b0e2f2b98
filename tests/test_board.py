"""Unit tests for the dense board and win detection."""

import pytest

from xoai.board import (
    EMPTY,
    WINNING_LINES,
    check_winner,
    empty_cells,
    has_winning_line,
    is_game_over,
    placed,
    to_dense_board,
)


def test_to_dense_board_places_markers(make_position):
    board = to_dense_board(make_position(X=[(0, 0), (2, 1)], O=[(1, 2)]))
    assert board == [
        ["X", EMPTY, EMPTY],
        [EMPTY, EMPTY, "O"],
        [EMPTY, "X", EMPTY],
    ]


def test_empty_cells_are_row_major(make_position):
    board = to_dense_board(make_position(X=[(0, 1), (1, 1)], O=[(2, 0)]))
    assert empty_cells(board) == [(0, 0), (0, 2), (1, 0), (1, 2), (2, 1), (2, 2)]


@pytest.mark.parametrize("line", WINNING_LINES)
def test_every_line_is_detected(line, make_position):
    board = to_dense_board(make_position(O=list(line)))
    for row, col in empty_cells(board)[:2]:
        board[row][col] = "X"
    assert check_winner(board) == "O"
    assert is_game_over(board)


def test_no_winner_on_drawn_board():
    board = [list("XOX"), list("XOO"), list("OXX")]
    assert check_winner(board) == EMPTY
    assert not is_game_over(board)


def test_empty_board_has_no_winner():
    assert check_winner(to_dense_board({})) == EMPTY


def test_first_line_in_scan_order_wins():
    board = [list("XXX"), list("---"), list("OOO")]
    assert check_winner(board) == "X"


def test_placed_restores_cell():
    board = to_dense_board({})
    with placed(board, 1, 1, "X"):
        assert board[1][1] == "X"
    assert board[1][1] == EMPTY


def test_placed_restores_cell_on_error():
    board = to_dense_board({})
    with pytest.raises(RuntimeError):
        with placed(board, 0, 2, "O"):
            raise RuntimeError("boom")
    assert board[0][2] == EMPTY


def test_has_winning_line_detects_runs(make_position):
    row = make_position(X=[(1, 0), (1, 1), (1, 2)])
    assert has_winning_line(row, 3, 3, (1, 1))

    anti = make_position(O=[(0, 2), (1, 1), (2, 0)])
    assert has_winning_line(anti, 3, 3, (2, 0))

    column = make_position(X=[(0, 2), (1, 2), (2, 2)])
    assert has_winning_line(column, 3, 3, (0, 2))


def test_has_winning_line_needs_a_full_run(make_position):
    position = make_position(X=[(0, 0), (0, 1)], O=[(0, 2)])
    assert not has_winning_line(position, 3, 3, (0, 1))


def test_has_winning_line_ignores_empty_last_move(make_position):
    position = make_position(X=[(0, 0), (0, 1), (0, 2)])
    assert not has_winning_line(position, 3, 3, (2, 2))


def test_has_winning_line_on_larger_grid(make_position):
    position = make_position(X=[(1, 1), (2, 2), (3, 3)])
    assert has_winning_line(position, 4, 4, (2, 2))
    assert not has_winning_line(position, 4, 4, (2, 2), length=4)

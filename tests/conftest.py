"""Shared fixtures for the XO AI tests."""

import pytest

from xoai.board import move_record, position_key


@pytest.fixture
def make_position():
    """``make_position(X=[(0, 0)], O=[(1, 1)])`` -> sparse position."""

    def build(**cells):
        position = {}
        for marker, coords in cells.items():
            for row, col in coords:
                position[position_key(row, col)] = move_record(row, col, marker)
        return position

    return build

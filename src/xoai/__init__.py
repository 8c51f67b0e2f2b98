"""XO AI package exposing the tic-tac-toe move selector and its web service."""

from .ai import MoveSelector, select_move
from .api import app

__all__ = ["MoveSelector", "app", "select_move"]

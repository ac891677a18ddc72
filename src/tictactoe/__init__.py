"""Tic-tac-toe package exposing game logic, the computer player, and the web application."""

from .ai import choose_move
from .game import Outcome, TicTacToeGame, evaluate
from .ui import app

__all__ = ["Outcome", "TicTacToeGame", "app", "choose_move", "evaluate"]

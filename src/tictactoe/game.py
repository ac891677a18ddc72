"""Core rules for tic-tac-toe: board, outcome evaluation and the game session."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple
import logging
import random

logger = logging.getLogger(__name__)

Player = str  # "X" or "O"
EMPTY = " "

HUMAN_VS_HUMAN = "pvp"
HUMAN_VS_COMPUTER = "pvc"
MODES: Tuple[str, ...] = (HUMAN_VS_HUMAN, HUMAN_VS_COMPUTER)

WINNING_LINES: Tuple[Tuple[int, int, int], ...] = (
    (0, 1, 2),
    (3, 4, 5),
    (6, 7, 8),
    (0, 3, 6),
    (1, 4, 7),
    (2, 5, 8),
    (0, 4, 8),
    (2, 4, 6),
)


def opponent(player: Player) -> Player:
    return "O" if player == "X" else "X"


# ---------- Errors ----------


class InvalidMoveError(ValueError):
    """Raised when a move is rejected; the session is left untouched."""


class InvalidCellIndexError(InvalidMoveError):
    pass


class CellOccupiedError(InvalidMoveError):
    pass


class SessionEndedError(InvalidMoveError):
    pass


# ---------- Outcome ----------

IN_PROGRESS = "in_progress"
WIN = "win"
TIE = "tie"


@dataclass(frozen=True)
class Outcome:
    state: str = IN_PROGRESS
    winner: Optional[Player] = None
    line: Optional[Tuple[int, int, int]] = None

    @property
    def finished(self) -> bool:
        return self.state != IN_PROGRESS


def evaluate(cells: Sequence[str]) -> Outcome:
    """Classify a 9-cell board as in progress, a win along a line, or a tie.

    Lines are checked in ``WINNING_LINES`` order and the first complete one is
    reported. The input is never mutated.
    """
    for a, b, c in WINNING_LINES:
        v = cells[a]
        if v != EMPTY and v == cells[b] == cells[c]:
            return Outcome(WIN, v, (a, b, c))
    if all(v != EMPTY for v in cells):
        return Outcome(TIE)
    return Outcome()


def winning_cells(cells: Sequence[str], player: Player) -> List[int]:
    """Empty cells where ``player`` would complete a line, ascending."""
    found = []
    for idx, v in enumerate(cells):
        if v != EMPTY:
            continue
        for line in WINNING_LINES:
            if idx not in line:
                continue
            if all(cells[i] == player for i in line if i != idx):
                found.append(idx)
                break
    return found


# ---------- Board ----------


@dataclass
class Board:
    # 'X', 'O', or ' ' (space) for empty
    cells: List[str] = field(default_factory=lambda: [EMPTY] * 9)

    def is_full(self) -> bool:
        return all(c != EMPTY for c in self.cells)

    def empty_cells(self) -> List[int]:
        return [i for i, c in enumerate(self.cells) if c == EMPTY]

    def place(self, idx: int, player: Player) -> None:
        if isinstance(idx, bool) or not isinstance(idx, int) or not 0 <= idx <= 8:
            raise InvalidCellIndexError(f"Cell index {idx!r} is outside 0-8")
        if self.cells[idx] != EMPTY:
            raise CellOccupiedError("Cell already occupied")
        self.cells[idx] = player

    def clear(self, idx: int) -> None:
        self.cells[idx] = EMPTY


# ---------- Session ----------


@dataclass(frozen=True)
class Move:
    index: int
    player: Player


@dataclass
class ScoreTally:
    x: int = 0
    o: int = 0
    ties: int = 0

    def record(self, outcome: Outcome) -> None:
        if outcome.state == TIE:
            self.ties += 1
        elif outcome.winner == "X":
            self.x += 1
        elif outcome.winner == "O":
            self.o += 1

    def reset(self) -> None:
        self.x = self.o = self.ties = 0

    def as_dict(self) -> Dict[str, int]:
        return {"X": self.x, "O": self.o, "T": self.ties}


@dataclass
class TicTacToeGame:
    mode: str = HUMAN_VS_HUMAN
    board: Board = field(default_factory=Board)
    current_player: Player = "X"
    running: bool = True
    outcome: Outcome = field(default_factory=Outcome)
    history: List[Move] = field(default_factory=list)
    scores: ScoreTally = field(default_factory=ScoreTally)
    rng: Optional[random.Random] = field(default=None, repr=False, compare=False)
    human: Player = field(default="X", init=False)
    computer: Player = field(default="O", init=False)

    def __post_init__(self) -> None:
        if self.mode not in MODES:
            raise ValueError(f"Unknown mode {self.mode!r}")

    # ---- queries ----

    @property
    def turn(self) -> Optional[Player]:
        return self.current_player if self.running else None

    @property
    def winning_line(self) -> Optional[Tuple[int, int, int]]:
        return self.outcome.line

    @property
    def can_undo(self) -> bool:
        return bool(self.history)

    @property
    def status_message(self) -> str:
        if self.outcome.state == WIN:
            return f"Player {self.outcome.winner} wins!"
        if self.outcome.state == TIE:
            return "It's a tie!"
        return ""

    # ---- operations ----

    def apply_move(self, idx: int, player: Optional[Player] = None) -> Outcome:
        """Place ``player`` (default: whoever is to move) on cell ``idx``.

        Raises an ``InvalidMoveError`` subclass without touching any state if
        the round is over, the index is not 0-8, or the cell is taken.
        """
        if not self.running:
            raise SessionEndedError("Game already finished")
        mark = player or self.current_player
        if mark not in ("X", "O"):
            raise InvalidMoveError(f"Unknown player {mark!r}")
        self.board.place(idx, mark)
        self.history.append(Move(idx, mark))
        self.current_player = opponent(mark)

        outcome = evaluate(self.board.cells)
        if outcome.finished:
            self.running = False
            self.outcome = outcome
            self.scores.record(outcome)
            logger.debug("Round over: %s (winner=%s)", outcome.state, outcome.winner)
        return outcome

    def step(self) -> Optional[int]:
        """Let the computer answer in human-vs-computer mode.

        Returns the cell played, or None when it is not the computer's move.
        """
        if self.mode != HUMAN_VS_COMPUTER or not self.running:
            return None
        if self.current_player != self.computer:
            return None
        from .ai import choose_move

        idx = choose_move(self.board.cells, self.computer, self.human, rng=self.rng)
        if idx is None:
            return None
        self.apply_move(idx, self.computer)
        return idx

    def play(self, idx: int) -> Outcome:
        self.apply_move(idx)
        self.step()
        return self.outcome

    def undo(self) -> bool:
        if not self.history:
            return False
        last = self.history.pop()
        self.board.clear(last.index)
        if (
            self.mode == HUMAN_VS_COMPUTER
            and last.player == self.computer
            and self.history
        ):
            prev = self.history.pop()
            self.board.clear(prev.index)

        self.running = True
        self.outcome = Outcome()
        self.current_player = (
            opponent(self.history[-1].player) if self.history else "X"
        )
        logger.debug("Undo: %d moves remain", len(self.history))
        return True

    def restart(self, full_reset: bool = False) -> None:
        self.board = Board()
        self.history = []
        self.current_player = "X"
        self.running = True
        self.outcome = Outcome()
        if full_reset:
            self.scores.reset()
        logger.debug("Restart (full_reset=%s)", full_reset)

    def set_mode(self, mode: str) -> None:
        if mode not in MODES:
            raise ValueError(f"Unknown mode {mode!r}")
        self.mode = mode
        self.restart(full_reset=False)

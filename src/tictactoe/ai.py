"""Greedy computer opponent: win, block, then center > corner > edge."""

from __future__ import annotations

from typing import Any, Optional, Sequence, Tuple
import random

from .game import EMPTY, Player, winning_cells

CENTER = 4
CORNERS: Tuple[int, ...] = (0, 2, 6, 8)
EDGES: Tuple[int, ...] = (1, 3, 5, 7)


def choose_move(
    cells: Sequence[str],
    computer: Player,
    human: Player,
    rng: Optional[Any] = None,
) -> Optional[int]:
    """Pick a cell for ``computer``, or None if the board is full.

    Priority, first match wins:
      1. lowest cell that completes a line for the computer
      2. lowest cell that completes a line for the human (block)
      3. the center
      4. a random empty corner
      5. a random empty edge
      6. the lowest empty cell
    """
    chooser = rng if rng is not None else random
    empty = [i for i, c in enumerate(cells) if c == EMPTY]
    if not empty:
        return None

    wins = winning_cells(cells, computer)
    if wins:
        return wins[0]
    blocks = winning_cells(cells, human)
    if blocks:
        return blocks[0]

    if cells[CENTER] == EMPTY:
        return CENTER
    corners = [i for i in CORNERS if cells[i] == EMPTY]
    if corners:
        return chooser.choice(corners)
    edges = [i for i in EDGES if cells[i] == EMPTY]
    if edges:
        return chooser.choice(edges)
    return empty[0]


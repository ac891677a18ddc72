"""Tests for the greedy computer player."""

import random

from tictactoe.ai import choose_move


class RecordingChoice:
    """Stand-in RNG that remembers the candidates it was offered."""

    def __init__(self):
        self.offered = None

    def choice(self, seq):
        self.offered = list(seq)
        return self.offered[-1]


def _cells(layout: str):
    return [" " if c == "." else c for c in layout]


def test_takes_immediate_win_over_block():
    cells = _cells("XX.OO....")
    assert choose_move(cells, "O", "X") == 5


def test_takes_only_winning_cell():
    cells = _cells("OXXXOOXO.")
    assert choose_move(cells, "O", "X") == 8


def test_prefers_lowest_winning_cell():
    cells = _cells("O.O.O..XX")
    assert choose_move(cells, "O", "X") == 1


def test_blocks_opponent():
    cells = _cells("XX..O....")
    assert choose_move(cells, "O", "X") == 2


def test_blocks_lowest_threat():
    cells = _cells("X.X.O.X..")
    assert choose_move(cells, "O", "X") == 1


def test_takes_center_when_free():
    assert choose_move([" "] * 9, "O", "X") == 4
    assert choose_move(_cells("X........"), "O", "X") == 4


def test_block_wins_over_corner():
    rng = RecordingChoice()
    move = choose_move(_cells("X...X...."), "O", "X", rng=rng)
    # X threatens 8 along the diagonal, so that is a block, not a corner pick.
    assert move == 8
    assert rng.offered is None


def test_random_corner_uses_only_empty_corners():
    rng = RecordingChoice()
    move = choose_move(_cells("O...X...."), "O", "X", rng=rng)
    assert rng.offered == [2, 6, 8]
    assert move == 8


def test_seeded_corner_choice_is_a_corner():
    for seed in range(10):
        move = choose_move(_cells("....X...."), "O", "X", rng=random.Random(seed))
        assert move in (0, 2, 6, 8)


def test_falls_back_to_edges():
    rng = RecordingChoice()
    move = choose_move(_cells("XOX.X.OXO"), "O", "X", rng=rng)
    assert rng.offered == [3, 5]
    assert move == 5


def test_full_board_has_no_move():
    assert choose_move(_cells("XOXOXOOXO"), "O", "X") is None

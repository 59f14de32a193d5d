"""
Shared fixtures for the percolation tests.
"""

import random

import pytest

from square_percolation import Percolation


class ScriptedRandom:
    """randint() stand-in that replays a fixed list of values."""

    def __init__(self, values):
        self._values = iter(values)

    def randint(self, lo, hi):
        value = next(self._values)
        assert lo <= value <= hi
        return value


@pytest.fixture
def rng() -> random.Random:
    return random.Random(20190420)


@pytest.fixture
def scripted_random():
    return ScriptedRandom


@pytest.fixture
def open_all():
    """Open every site of a grid, row by row."""

    def _open_all(grid: Percolation) -> Percolation:
        for row in range(1, grid.size + 1):
            for col in range(1, grid.size + 1):
                grid.open(row, col)
        return grid

    return _open_all

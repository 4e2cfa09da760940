"""Shared fixtures for the Inverse Invader tests."""

import random

import pytest

from invader.simulation import InvaderGame


class FixedRandom(random.Random):
    """Random source whose ``random()`` always returns the same value."""

    def __init__(self, value: float = 0.99):
        super().__init__(0)
        self.value = value

    def random(self):
        return self.value


@pytest.fixture
def quiet_rng():
    """High draws: enemies never fire, new minions start moving left."""
    return FixedRandom(0.99)


@pytest.fixture
def game(quiet_rng):
    """A started 800x600 round with deterministic, non-firing enemies."""
    g = InvaderGame(800, 600, rng=quiet_rng)
    g.start()
    return g

import random

import pytest


class FixedRandom:
    """Hands out a fixed sequence of die faces and records every request."""

    def __init__(self, values):
        self._values = iter(values)
        self.calls = []

    def randint(self, a, b):
        self.calls.append((a, b))
        return next(self._values)


@pytest.fixture
def fixed_rng():
    return FixedRandom


@pytest.fixture
def seeded_rng():
    return random.Random(1234)

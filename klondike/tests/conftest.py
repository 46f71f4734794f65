"""
Pytest fixtures for Klondike tests.
"""

import random

import pytest

from ..engine_core.deal import deal
from ..engine_core.reducer import Reducer
from ..engine_core.state import GameState
from .factories import nearly_won_state


@pytest.fixture
def rng() -> random.Random:
    """Seeded random source so deals are reproducible."""
    return random.Random(1234)


@pytest.fixture
def reducer(rng: random.Random) -> Reducer:
    """Reducer used for normal play."""
    return Reducer(rng=rng)


@pytest.fixture
def harness_reducer(rng: random.Random) -> Reducer:
    """Reducer that accepts LOAD_STATE."""
    return Reducer(rng=rng, allow_state_load=True)


@pytest.fixture
def fresh_deal(rng: random.Random) -> GameState:
    """A draw-1 deal."""
    return deal(1, rng)


@pytest.fixture
def fresh_deal_draw_three(rng: random.Random) -> GameState:
    """A draw-3 deal."""
    return deal(3, rng)


@pytest.fixture
def nearly_won() -> GameState:
    """One card short of a win."""
    return nearly_won_state()

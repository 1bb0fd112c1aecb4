"""
Shared pytest fixtures for baozi tests.

Provides ready-built decks, a seeded generator, and a session-wide
full-deck simulation shared by the slower statistical tests.
"""

from __future__ import annotations

import numpy as np
import pytest

from baozi.analysis.simulator import AggregateStats, run_simulation
from baozi.engine.cards import FULL_DECK_COUNTS
from baozi.engine.deck import create_deck


@pytest.fixture
def full_deck() -> np.ndarray:
    """Return the 32-card deck (four of each rank)."""
    return create_deck(FULL_DECK_COUNTS)


@pytest.fixture
def rng() -> np.random.Generator:
    return np.random.default_rng(12345)


@pytest.fixture(scope="session")
def full_deck_stats() -> AggregateStats:
    """200k-trial run over the full deck (run once per session)."""
    return run_simulation(create_deck(FULL_DECK_COUNTS), 200_000, seed=2024)

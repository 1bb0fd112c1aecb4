"""Tests for baozi/engine/deck.py — deck creation and Fisher–Yates shuffling."""

from __future__ import annotations

from collections import Counter

import numpy as np
import pytest
from scipy import stats

from baozi.engine.deck import create_deck, rank_counts, shuffle_batch, shuffle_deck
from baozi.engine.errors import InsufficientDeck, InvalidConfig


class TestCreateDeck:
    def test_length(self, full_deck):
        assert len(full_deck) == 32

    def test_dtype_int8(self, full_deck):
        assert full_deck.dtype == np.int8

    def test_each_rank_appears_count_times(self):
        deck = create_deck([2, 0, 1, 0, 0, 0, 0, 5])
        assert deck.tolist() == [1, 1, 3, 8, 8, 8, 8, 8]

    def test_rank_counts_round_trip(self):
        counts = [0, 1, 2, 3, 4, 3, 2, 1]
        assert rank_counts(create_deck(counts)).tolist() == counts

    def test_read_only(self, full_deck):
        with pytest.raises(ValueError):
            full_deck[0] = 8

    def test_independent_between_calls(self):
        deck1 = create_deck([4] * 8)
        deck2 = create_deck([4] * 8)
        assert deck1 is not deck2
        assert np.array_equal(deck1, deck2)

    def test_insufficient_raises(self):
        with pytest.raises(InsufficientDeck):
            create_deck([1, 1, 1, 1, 1, 1, 1, 0])

    def test_invalid_raises(self):
        with pytest.raises(InvalidConfig):
            create_deck([5, 4, 4, 4, 4, 4, 4, 4])


class TestShuffleDeck:
    def test_same_multiset(self, full_deck, rng):
        shuffled = shuffle_deck(full_deck, rng)
        assert Counter(shuffled.tolist()) == Counter(full_deck.tolist())

    def test_does_not_mutate_input(self, rng):
        deck = create_deck([1] * 8)
        before = deck.copy()
        shuffle_deck(deck, rng)
        assert np.array_equal(deck, before)

    def test_returns_new_writable_array(self, full_deck, rng):
        shuffled = shuffle_deck(full_deck, rng)
        assert shuffled is not full_deck
        shuffled[0] = 1  # writable

    def test_seed_reproducible(self, full_deck):
        a = shuffle_deck(full_deck, np.random.default_rng(7))
        b = shuffle_deck(full_deck, np.random.default_rng(7))
        assert np.array_equal(a, b)

    def test_default_rng(self, full_deck):
        shuffled = shuffle_deck(full_deck)
        assert sorted(shuffled.tolist()) == full_deck.tolist()

    def test_single_card(self):
        assert shuffle_deck(np.array([5], dtype=np.int8)).tolist() == [5]

    def test_every_permutation_of_three_reachable(self):
        deck = np.array([1, 2, 3], dtype=np.int8)
        rng = np.random.default_rng(0)
        seen = {tuple(shuffle_deck(deck, rng).tolist()) for _ in range(600)}
        assert len(seen) == 6


class TestShuffleBatch:
    def test_shape(self, full_deck, rng):
        assert shuffle_batch(full_deck, 50, rng).shape == (50, 32)

    def test_each_row_is_permutation(self, full_deck, rng):
        batch = shuffle_batch(full_deck, 200, rng)
        expected = full_deck.tolist()
        for row in batch:
            assert sorted(row.tolist()) == expected

    def test_does_not_mutate_input(self, full_deck, rng):
        before = full_deck.copy()
        shuffle_batch(full_deck, 10, rng)
        assert np.array_equal(full_deck, before)

    def test_rows_differ(self, full_deck, rng):
        batch = shuffle_batch(full_deck, 20, rng)
        assert len({tuple(row) for row in batch.tolist()}) > 1

    def test_seed_reproducible(self, full_deck):
        a = shuffle_batch(full_deck, 100, np.random.default_rng(3))
        b = shuffle_batch(full_deck, 100, np.random.default_rng(3))
        assert np.array_equal(a, b)

    def test_zero_rows(self, full_deck, rng):
        assert shuffle_batch(full_deck, 0, rng).shape == (0, 32)


# ─── Uniformity ───────────────────────────────────────────────────────────────


class TestShuffleUniformity:
    """Chi-square check that every position's occupant is uniform.

    Deck of 8 distinct ranks, 100k shuffles: each (position, rank) cell
    expects 12,500 hits. Threshold is Bonferroni-adjusted over 8 positions.
    """

    N: int = 100_000

    def test_batch_positions_uniform(self):
        deck = create_deck([1] * 8)
        batch = shuffle_batch(deck, self.N, np.random.default_rng(99))
        for position in range(8):
            observed = np.bincount(batch[:, position], minlength=9)[1:]
            assert observed.sum() == self.N
            _, p_value = stats.chisquare(observed)
            assert p_value > 1e-4 / 8, f"position {position}: p={p_value}"

    def test_single_shuffle_positions_uniform(self):
        deck = create_deck([1] * 8)
        rng = np.random.default_rng(100)
        n = 20_000
        counts = np.zeros((8, 8), dtype=np.int64)
        for _ in range(n):
            shuffled = shuffle_deck(deck, rng)
            counts[np.arange(8), shuffled - 1] += 1
        for position in range(8):
            _, p_value = stats.chisquare(counts[position])
            assert p_value > 1e-4 / 8, f"position {position}: p={p_value}"

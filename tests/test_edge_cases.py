"""
End-to-end scenarios for the full pipeline.

Scenarios:
    1. Full 32-card deck, 1M trials: win rate 0.45–0.48, leopard rate ≈ 9.68%
    2. Seven-card deck is rejected, never dealt short
    3. Pair-free deck: sampled and theoretical pair rate both 0
    4. Exactly equal EVs rank in listed order
    5. Same seed → bit-identical statistics through analyse_deck
    6. Pair hands beat 9 but still lose to a higher pair dealer
"""

from __future__ import annotations

import numpy as np
import pytest

from baozi.analysis.strategy import ExpectedValues, analyse_deck, rank_bets
from baozi.engine.errors import InsufficientDeck
from baozi.engine.game_state import play_round


def deal(dealer, x, y, z) -> np.ndarray:
    """Deck whose first eight cards deal the given dealer, X, Y, Z hands."""
    return np.array([*dealer, *x, *y, *z], dtype=np.int8)


class TestFullDeckMillionTrials:
    @pytest.fixture(scope="class")
    def report(self):
        return analyse_deck([4, 4, 4, 4, 4, 4, 4, 4], n_trials=1_000_000, seed=2025, n_workers=2)

    def test_win_rate(self, report):
        assert 0.45 <= report.stats.avg_win <= 0.48

    def test_theoretical_leopard(self, report):
        assert round(report.theoretical_pair_probability * 100, 2) == 9.68

    def test_sampled_leopard_close(self, report):
        assert abs(report.stats.avg_pair_rate - report.theoretical_pair_probability) < 0.01

    def test_probabilities_close_to_one(self, report):
        s = report.stats
        for i in range(3):
            assert s.pair_win[i] + s.normal_win[i] + s.lose[i] == pytest.approx(1.0)

    def test_two_or_more_and_all_three_plausible(self, report):
        s = report.stats
        assert 0.0 < s.all_three < s.two_or_more < 1.0


class TestSevenCardDeck:
    def test_rejected(self):
        with pytest.raises(InsufficientDeck):
            analyse_deck([1, 1, 1, 1, 1, 1, 1, 0], n_trials=1_000)


class TestPairFreeDeck:
    def test_no_pairs(self):
        report = analyse_deck([1] * 8, n_trials=20_000, seed=1)
        assert report.theoretical_pair_probability == 0.0
        assert report.stats.avg_pair_rate == 0.0
        assert report.stats.avg_pair_win == 0.0


class TestEqualEvRanking:
    def test_listed_order_on_exact_tie(self):
        report = analyse_deck([4, 0, 0, 4, 0, 0, 0, 0], n_trials=10_000, seed=4)
        tied = ExpectedValues(player=-1.0, two_or_more=-1.0, all_three=-1.0)
        ranked = rank_bets(tied, report.stats)
        assert [b.name for b in ranked] == ["player", "two_or_more", "all_three"]

    def test_two_rank_deck_consistent(self):
        # four 1s and four 4s: hands are 1-4 (5), 1-1 (11) or 4-4 (14)
        report = analyse_deck([4, 0, 0, 4, 0, 0, 0, 0], n_trials=10_000, seed=4)
        s = report.stats
        assert report.theoretical_pair_probability == pytest.approx(12 / 28)
        assert s.avg_pair_win + s.avg_normal_win + s.avg_lose == pytest.approx(1.0)


class TestSeedReproducible:
    def test_identical(self):
        a = analyse_deck([2, 3, 4, 1, 0, 4, 2, 3], n_trials=10_000, seed=77)
        b = analyse_deck([2, 3, 4, 1, 0, 4, 2, 3], n_trials=10_000, seed=77, n_workers=3)
        assert a.stats == b.stats
        assert a.expected_values == b.expected_values


class TestPairComparison:
    def test_pair_beats_nine(self):
        outcome = play_round(deal((1, 8), (1, 1), (2, 3), (3, 5)))
        assert outcome.won == (True, False, False)

    def test_higher_pair_dealer_wins(self):
        outcome = play_round(deal((7, 7), (6, 6), (8, 8), (7, 2)))
        assert outcome.won == (False, True, False)

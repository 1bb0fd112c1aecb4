"""Tests for baozi/engine/hand.py — two-card scoring."""

from __future__ import annotations

import itertools

import numpy as np

from baozi.engine.cards import RANKS
from baozi.engine.hand import HandScore, calc_points, is_pair, score_hand, score_hands

ALL_HANDS = list(itertools.product(RANKS, repeat=2))


class TestCalcPoints:
    def test_pair_scores_ten_plus_rank(self):
        assert calc_points(1, 1) == 11
        assert calc_points(8, 8) == 18

    def test_non_pair_mod_ten(self):
        assert calc_points(3, 4) == 7
        assert calc_points(7, 5) == 2

    def test_sum_ten_is_zero(self):
        assert calc_points(2, 8) == 0
        assert calc_points(4, 6) == 0

    def test_order_independent(self):
        for a, b in ALL_HANDS:
            assert calc_points(a, b) == calc_points(b, a)

    def test_non_pair_range(self):
        for a, b in ALL_HANDS:
            if a != b:
                assert 0 <= calc_points(a, b) <= 9

    def test_pair_range(self):
        for r in RANKS:
            assert 11 <= calc_points(r, r) <= 18

    def test_pairs_outrank_every_non_pair(self):
        lowest_pair = min(calc_points(r, r) for r in RANKS)
        highest_normal = max(calc_points(a, b) for a, b in ALL_HANDS if a != b)
        assert lowest_pair > highest_normal

    def test_pair_beats_non_pair_with_same_digit(self):
        # 3-3 (13) vs 6-7 (3): same last digit, pair ranks higher.
        assert calc_points(3, 3) > calc_points(6, 7)
        assert calc_points(6, 7) == 3


class TestIsPair:
    def test_pair(self):
        assert is_pair(5, 5) is True

    def test_not_pair(self):
        assert is_pair(5, 6) is False


class TestScoreHand:
    def test_named_tuple(self):
        score = score_hand(2, 2)
        assert isinstance(score, HandScore)
        assert score.points == 12
        assert score.is_pair is True

    def test_normal_hand(self):
        assert score_hand(1, 8) == HandScore(9, False)


class TestScoreHands:
    def test_matches_scalar(self):
        first = np.array([a for a, _ in ALL_HANDS], dtype=np.int8)
        second = np.array([b for _, b in ALL_HANDS], dtype=np.int8)
        points, pairs = score_hands(first, second)
        for i, (a, b) in enumerate(ALL_HANDS):
            assert int(points[i]) == calc_points(a, b)
            assert bool(pairs[i]) == is_pair(a, b)

    def test_no_int8_overflow(self):
        points, _ = score_hands(np.array([8], dtype=np.int8), np.array([8], dtype=np.int8))
        assert int(points[0]) == 18

"""
Expected value, bet ranking, and the end-to-end analysis pipeline.

Everything here is deterministic given an AggregateStats: no further sampling.

EV per unit staked (payouts from rules.py):
    Player hand:  P(pair win)*2 + P(normal win)*1 - P(lose)*1
                  using the probabilities averaged over X, Y, Z
    Two-or-more:  P(2+ win)*1 - (1 - P(2+ win))*1
    All-three:    P(3 win)*3  - (1 - P(3 win))*1

The theoretical pair probability (chance that two cards drawn from the deck
share a rank) is closed-form:

    sum_r C(count_r, 2) / C(total, 2)

and serves as a sanity check against the sampled pair rate.

Usage:
    report = analyse_deck([4] * 8, n_trials=1_000_000, seed=42)
    report.recommendation.best   # BetOption(name='player', ev=..., win_rate=...)
"""

from __future__ import annotations

import math
import time
from collections.abc import Sequence
from dataclasses import dataclass
from typing import NamedTuple

from scipy import stats as sp_stats

from baozi.analysis.simulator import (
    DEFAULT_TRIALS,
    AggregateStats,
    ProgressCallback,
    run_simulation,
)
from baozi.engine.cards import total_cards, validate_counts
from baozi.engine.deck import create_deck
from baozi.engine.rules import (
    ALL_THREE_PAYOUT,
    BET_ALL_THREE,
    BET_ORDER,
    BET_PLAYER,
    BET_TWO_OR_MORE,
    LOSS_PAYOUT,
    NORMAL_PAYOUT,
    PAIR_PAYOUT,
    TWO_OR_MORE_PAYOUT,
)

# ─── Result types ─────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class ExpectedValues:
    """EV per unit staked for each bet type.

    Attributes:
        player:       Player-hand bet, from position-averaged probabilities.
        two_or_more:  Two-or-more-winners bet.
        all_three:    All-three-winners bet.
        per_position: Player-hand EV for X, Y, Z individually.
    """

    player: float
    two_or_more: float
    all_three: float
    per_position: tuple[float, ...] = ()

    def as_dict(self) -> dict[str, float]:
        return {
            BET_PLAYER: self.player,
            BET_TWO_OR_MORE: self.two_or_more,
            BET_ALL_THREE: self.all_three,
        }


class BetOption(NamedTuple):
    name: str
    ev: float
    win_rate: float


@dataclass(frozen=True)
class Recommendation:
    """Bets ordered by descending EV; ties keep BET_ORDER."""

    ranked: list[BetOption]
    has_positive_ev: bool

    @property
    def best(self) -> BetOption:
        return self.ranked[0]


@dataclass(frozen=True)
class AnalysisReport:
    """Everything a UI needs to present one analysis run."""

    counts: tuple[int, ...]
    stats: AggregateStats
    expected_values: ExpectedValues
    theoretical_pair_probability: float
    recommendation: Recommendation
    elapsed_seconds: float

    @property
    def total_cards(self) -> int:
        return self.stats.total_cards


# ─── Expected value ───────────────────────────────────────────────────────────


def position_expected_value(pair_win: float, normal_win: float, win: float) -> float:
    """EV of a one-unit player-hand bet.

    Examples:
        >>> position_expected_value(0.0, 0.5, 0.5)
        0.0
        >>> round(position_expected_value(0.1, 0.3, 0.4), 10)
        -0.1
    """
    return pair_win * PAIR_PAYOUT + normal_win * NORMAL_PAYOUT + (1.0 - win) * LOSS_PAYOUT


def binary_bet_expected_value(p_win: float, payout: int) -> float:
    """EV of a bet paying `payout` on a win and losing one unit otherwise.

    Examples:
        >>> binary_bet_expected_value(0.5, 1)
        0.0
        >>> binary_bet_expected_value(0.25, 3)
        0.0
    """
    return p_win * payout + (1.0 - p_win) * LOSS_PAYOUT


def compute_expected_values(stats: AggregateStats) -> ExpectedValues:
    """Compute the EV of every bet type from simulated probabilities."""
    per_position = tuple(
        position_expected_value(pw, nw, w)
        for pw, nw, w in zip(stats.pair_win, stats.normal_win, stats.win)
    )
    return ExpectedValues(
        player=position_expected_value(stats.avg_pair_win, stats.avg_normal_win, stats.avg_win),
        two_or_more=binary_bet_expected_value(stats.two_or_more, TWO_OR_MORE_PAYOUT),
        all_three=binary_bet_expected_value(stats.all_three, ALL_THREE_PAYOUT),
        per_position=per_position,
    )


# ─── Theoretical pair probability ─────────────────────────────────────────────


def theoretical_pair_probability(counts: Sequence[int]) -> float:
    """Probability that two cards drawn without replacement share a rank.

    Examples:
        >>> round(theoretical_pair_probability([4] * 8), 4)   # 48 / 496
        0.0968
        >>> theoretical_pair_probability([1] * 8)
        0.0
    """
    total = total_cards(counts)
    if total < 2:
        return 0.0
    same_rank = sum(math.comb(int(c), 2) for c in counts)
    return same_rank / math.comb(total, 2)


def pair_rate_check(stats: AggregateStats, counts: Sequence[int]) -> float:
    """Sampled minus theoretical pair rate (should shrink towards 0 as N grows)."""
    return stats.avg_pair_rate - theoretical_pair_probability(counts)


def win_rate_interval(p: float, n: int, confidence: float = 0.95) -> tuple[float, float]:
    """Normal-approximation confidence interval for a sampled probability.

    Clipped to [0, 1].

    Examples:
        >>> low, high = win_rate_interval(0.5, 10_000)
        >>> round(low, 4), round(high, 4)
        (0.4902, 0.5098)
    """
    if n <= 0:
        raise ValueError(f"n must be positive, got {n}.")
    z = float(sp_stats.norm.ppf(0.5 + confidence / 2.0))
    margin = z * math.sqrt(p * (1.0 - p) / n)
    return max(0.0, p - margin), min(1.0, p + margin)


# ─── Ranking ──────────────────────────────────────────────────────────────────


def rank_bets(evs: ExpectedValues, stats: AggregateStats) -> list[BetOption]:
    """Order the three bets by descending EV.

    sorted() is stable, so equal EVs keep BET_ORDER: player, two-or-more,
    all-three.
    """
    win_rates = {
        BET_PLAYER: stats.avg_win,
        BET_TWO_OR_MORE: stats.two_or_more,
        BET_ALL_THREE: stats.all_three,
    }
    by_name = evs.as_dict()
    options = [BetOption(name, by_name[name], win_rates[name]) for name in BET_ORDER]
    return sorted(options, key=lambda opt: -opt.ev)


def recommend(evs: ExpectedValues, stats: AggregateStats) -> Recommendation:
    ranked = rank_bets(evs, stats)
    return Recommendation(ranked=ranked, has_positive_ev=ranked[0].ev > 0)


# ─── Pipeline ─────────────────────────────────────────────────────────────────


def analyse_deck(
    counts: Sequence[int],
    n_trials: int = DEFAULT_TRIALS,
    progress_callback: ProgressCallback | None = None,
    **simulation_kwargs,
) -> AnalysisReport:
    """Validate a deck composition, simulate it, and derive EV + advice.

    Args:
        counts:            8 per-rank counts, index 0 = rank 1.
        n_trials:          Rounds to simulate.
        progress_callback: Passed through to run_simulation.
        **simulation_kwargs: seed, n_workers, cancel_event, report_every.

    Returns:
        AnalysisReport.

    Raises:
        InvalidConfig, InsufficientDeck, InvalidTrialCount, Cancelled
    """
    valid = validate_counts(counts)
    deck = create_deck(valid)

    started = time.perf_counter()
    stats = run_simulation(deck, n_trials, progress_callback, **simulation_kwargs)
    elapsed = time.perf_counter() - started

    evs = compute_expected_values(stats)
    return AnalysisReport(
        counts=valid,
        stats=stats,
        expected_values=evs,
        theoretical_pair_probability=theoretical_pair_probability(valid),
        recommendation=recommend(evs, stats),
        elapsed_seconds=elapsed,
    )

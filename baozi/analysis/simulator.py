"""
Monte Carlo trial aggregator for the baozi betting game.

Runs N independent rounds over a fixed deck composition and turns the event
counts into probabilities (AggregateStats). Each round reshuffles the same
deck; the deck itself is never rebuilt or mutated.

Batching:
    Trials are processed in ~100 batches (batch_size = max(1, N // 100)).
    A batch is shuffled and settled in one vectorised pass
    (shuffle_batch → play_rounds) and owns its own RNG stream, spawned from a
    single SeedSequence. Results depend only on (deck, N, seed), not on
    worker count or completion order, and the same seed reproduces
    bit-identical statistics.

Progress:
    The callback receives the completed-batch percentage after every
    `report_every` batches (default: every 10th batch of 100) and always
    receives 100.0 once the last batch is merged. At most PROGRESS_REPORTS
    calls per run with the default cadence. Exceptions raised by the callback
    are logged and ignored.

Cancellation:
    An optional threading.Event is checked at each batch boundary; once set,
    the run raises Cancelled instead of returning partial statistics.

Concurrency:
    n_workers > 1 runs batches on a ThreadPoolExecutor. Each batch returns
    local TrialCounters; the calling thread merges them (a plain sum) and
    reports progress in completion order.

Usage:
    deck = create_deck([4] * 8)
    stats = run_simulation(deck, 1_000_000, progress_callback=print, seed=42)
"""

from __future__ import annotations

import asyncio
import inspect
import logging
import math
import threading
import time
from collections.abc import Callable, Iterator
from concurrent.futures import ThreadPoolExecutor, as_completed
from contextlib import closing
from dataclasses import dataclass

import numpy as np

from baozi.engine.cards import CARDS_PER_ROUND, PLAYER_POSITIONS
from baozi.engine.deck import shuffle_batch
from baozi.engine.errors import Cancelled, InsufficientDeck, InvalidTrialCount
from baozi.engine.game_state import NUM_PLAYERS, TrialCounters, play_rounds

logger = logging.getLogger(__name__)

MIN_TRIALS: int = 1_000
DEFAULT_TRIALS: int = 1_000_000
TARGET_BATCHES: int = 100
PROGRESS_REPORTS: int = 10

# progress_callback(percent_complete) — return value ignored (awaited if async).
ProgressCallback = Callable[[float], object]


# ─── Result type ──────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class AggregateStats:
    """Event probabilities estimated from a simulation run.

    Per-position tuples are ordered X, Y, Z. The three player positions play
    identical rules, so the avg_* fields pool them into a single estimate.

    Attributes:
        n_trials:       Rounds simulated.
        total_cards:    Cards in the deck.
        win:            P(player hand beats the dealer), per position.
        pair_win:       P(win holding a pair), per position.
        normal_win:     P(win holding a non-pair), per position.
        lose:           P(lose or tie), per position.
        pair_rate:      P(player hand is a pair), per position.
        two_or_more:    P(at least two player hands win).
        all_three:      P(all three player hands win).
        avg_win, avg_pair_win, avg_normal_win, avg_lose, avg_pair_rate:
                        The per-position fields averaged over X, Y, Z.
    """

    n_trials: int
    total_cards: int
    win: tuple[float, ...]
    pair_win: tuple[float, ...]
    normal_win: tuple[float, ...]
    lose: tuple[float, ...]
    pair_rate: tuple[float, ...]
    two_or_more: float
    all_three: float
    avg_win: float
    avg_pair_win: float
    avg_normal_win: float
    avg_lose: float
    avg_pair_rate: float

    @classmethod
    def from_counters(cls, counters: TrialCounters, total_cards: int) -> AggregateStats:
        """Normalise raw counts by the number of rounds."""
        n = counters.n_rounds
        pooled = NUM_PLAYERS * n

        def per_position(counts: np.ndarray) -> tuple[float, ...]:
            return tuple(float(c) / n for c in counts)

        win = per_position(counters.wins)
        avg_win = float(counters.wins.sum()) / pooled
        return cls(
            n_trials=n,
            total_cards=total_cards,
            win=win,
            pair_win=per_position(counters.pair_wins),
            normal_win=per_position(counters.normal_wins),
            lose=tuple(1.0 - w for w in win),
            pair_rate=per_position(counters.pairs_dealt),
            two_or_more=counters.two_or_more / n,
            all_three=counters.all_three / n,
            avg_win=avg_win,
            avg_pair_win=float(counters.pair_wins.sum()) / pooled,
            avg_normal_win=float(counters.normal_wins.sum()) / pooled,
            avg_lose=1.0 - avg_win,
            avg_pair_rate=float(counters.pairs_dealt.sum()) / pooled,
        )

    def position(self, label: str) -> dict[str, float]:
        """Return the per-position probabilities for 'X', 'Y' or 'Z'."""
        i = PLAYER_POSITIONS.index(label)
        return {
            "win": self.win[i],
            "pair_win": self.pair_win[i],
            "normal_win": self.normal_win[i],
            "lose": self.lose[i],
            "pair_rate": self.pair_rate[i],
        }

    def __str__(self) -> str:
        return (
            f"Trials: {self.n_trials:,} | Cards: {self.total_cards} | "
            f"Win: {self.avg_win:.4f} (pair {self.avg_pair_win:.4f}, "
            f"normal {self.avg_normal_win:.4f}) | "
            f"2+: {self.two_or_more:.4f} | 3: {self.all_three:.4f}"
        )


# ─── Batch planning ───────────────────────────────────────────────────────────


@dataclass(frozen=True)
class BatchPlan:
    """How a run of n_trials is split into batches and progress reports."""

    n_trials: int
    batch_size: int
    n_batches: int
    report_every: int

    def batch_sizes(self) -> list[int]:
        """Size of every batch; the last one takes the remainder."""
        sizes = [self.batch_size] * self.n_batches
        sizes[-1] = self.n_trials - self.batch_size * (self.n_batches - 1)
        return sizes

    def is_report_point(self, completed: int) -> bool:
        return completed % self.report_every == 0 or completed == self.n_batches


def plan_batches(n_trials: int, report_every: int | None = None) -> BatchPlan:
    """Split a run into ~TARGET_BATCHES batches.

    Examples:
        >>> plan_batches(1_000_000)
        BatchPlan(n_trials=1000000, batch_size=10000, n_batches=100, report_every=10)
        >>> plan_batches(1_050).n_batches
        105
    """
    batch_size = max(1, n_trials // TARGET_BATCHES)
    n_batches = math.ceil(n_trials / batch_size)
    if report_every is None:
        report_every = math.ceil(n_batches / PROGRESS_REPORTS)
    if report_every < 1:
        raise ValueError(f"report_every must be >= 1, got {report_every}.")
    return BatchPlan(n_trials, batch_size, n_batches, report_every)


# ─── Input validation ─────────────────────────────────────────────────────────


def validate_trial_count(n_trials: int) -> int:
    """Return n_trials as int, or raise InvalidTrialCount.

    Examples:
        >>> validate_trial_count(1000)
        1000
    """
    if isinstance(n_trials, bool) or not isinstance(n_trials, (int, np.integer)):
        raise InvalidTrialCount(f"Trial count must be an integer, got {n_trials!r}.")
    if n_trials < MIN_TRIALS:
        raise InvalidTrialCount(f"Trial count must be at least {MIN_TRIALS:,}, got {n_trials}.")
    return int(n_trials)


def _check_deck(deck: np.ndarray) -> np.ndarray:
    deck = np.asarray(deck)
    if deck.ndim != 1 or len(deck) < CARDS_PER_ROUND:
        raise InsufficientDeck(
            f"Deck has {deck.size} cards; at least {CARDS_PER_ROUND} are needed to deal a round."
        )
    return deck


# ─── Core run ─────────────────────────────────────────────────────────────────


def _simulate_batch(
    deck: np.ndarray, size: int, seed_seq: np.random.SeedSequence
) -> TrialCounters:
    rng = np.random.default_rng(seed_seq)
    return play_rounds(shuffle_batch(deck, size, rng))


def _notify(callback: ProgressCallback | None, percent: float) -> object:
    """Invoke the progress callback; failures are logged, never raised."""
    if callback is None:
        return None
    try:
        return callback(percent)
    except Exception:
        logger.exception("Progress callback failed at %.1f%%; simulation continues", percent)
        return None


class _SimulationRun:
    """State of one aggregation run. Owns its counters exclusively."""

    def __init__(
        self,
        deck: np.ndarray,
        n_trials: int,
        seed: int | None,
        n_workers: int,
        cancel_event: threading.Event | None,
        report_every: int | None,
    ) -> None:
        self.deck = _check_deck(deck)
        self.n_trials = validate_trial_count(n_trials)
        if n_workers < 1:
            raise ValueError(f"n_workers must be >= 1, got {n_workers}.")
        self.n_workers = n_workers
        self.cancel_event = cancel_event
        self.plan = plan_batches(self.n_trials, report_every)
        self.seed_seq = np.random.SeedSequence(seed)
        self.counters = TrialCounters()
        self._started = 0.0

    def _cancel_requested(self) -> bool:
        return self.cancel_event is not None and self.cancel_event.is_set()

    def _cancel(self) -> Cancelled:
        logger.warning(
            "Simulation cancelled after %d of %d trials", self.counters.n_rounds, self.n_trials
        )
        return Cancelled(self.counters.n_rounds, self.n_trials)

    def _sequential_batches(self, jobs: list) -> Iterator[TrialCounters]:
        for size, seed_seq in jobs:
            if self._cancel_requested():
                raise self._cancel()
            yield _simulate_batch(self.deck, size, seed_seq)

    def _threaded_batches(self, jobs: list) -> Iterator[TrialCounters]:
        executor = ThreadPoolExecutor(max_workers=self.n_workers)
        try:
            futures = [executor.submit(_simulate_batch, self.deck, s, ss) for s, ss in jobs]
            for future in as_completed(futures):
                if self._cancel_requested():
                    raise self._cancel()
                yield future.result()
        finally:
            executor.shutdown(wait=True, cancel_futures=True)

    def progress(self) -> Iterator[float]:
        """Run every batch, yielding the percentage at each report point."""
        plan = self.plan
        jobs = list(zip(plan.batch_sizes(), self.seed_seq.spawn(plan.n_batches)))
        logger.info(
            "Simulating %d trials on a %d-card deck (%d batches of %d, %d worker(s))",
            self.n_trials, len(self.deck), plan.n_batches, plan.batch_size, self.n_workers,
        )
        logger.debug("Seed entropy %s", self.seed_seq.entropy)

        if self._cancel_requested():
            raise self._cancel()

        self._started = time.perf_counter()
        if self.n_workers == 1:
            batches = self._sequential_batches(jobs)
        else:
            batches = self._threaded_batches(jobs)

        with closing(batches):
            for completed, counts in enumerate(batches, start=1):
                self.counters.merge(counts)
                if plan.is_report_point(completed):
                    yield completed / plan.n_batches * 100.0

    def result(self) -> AggregateStats:
        elapsed = time.perf_counter() - self._started
        logger.info("Simulated %d trials in %.2fs", self.counters.n_rounds, elapsed)
        return AggregateStats.from_counters(self.counters, len(self.deck))


# ─── Public entry points ──────────────────────────────────────────────────────


def run_simulation(
    deck: np.ndarray,
    n_trials: int = DEFAULT_TRIALS,
    progress_callback: ProgressCallback | None = None,
    *,
    seed: int | None = None,
    n_workers: int = 1,
    cancel_event: threading.Event | None = None,
    report_every: int | None = None,
) -> AggregateStats:
    """Simulate n_trials rounds and return the estimated probabilities.

    Args:
        deck:              Deck from create_deck() (not mutated).
        n_trials:          Rounds to simulate; at least MIN_TRIALS.
        progress_callback: Called with percent complete (0–100], at most
                           PROGRESS_REPORTS times with the default cadence.
        seed:              Seed for reproducible runs. None for fresh entropy.
        n_workers:         Worker threads; 1 runs in the calling thread.
        cancel_event:      Set it to abort the run at the next batch boundary.
        report_every:      Batches between progress reports. Defaults to
                           ceil(n_batches / PROGRESS_REPORTS).

    Returns:
        AggregateStats for the run.

    Raises:
        InsufficientDeck:  The deck has fewer than 8 cards.
        InvalidTrialCount: n_trials is not an integer >= MIN_TRIALS.
        Cancelled:         cancel_event was set before the run completed.
    """
    run = _SimulationRun(deck, n_trials, seed, n_workers, cancel_event, report_every)
    for percent in run.progress():
        _notify(progress_callback, percent)
    return run.result()


async def run_simulation_async(
    deck: np.ndarray,
    n_trials: int = DEFAULT_TRIALS,
    progress_callback: ProgressCallback | None = None,
    *,
    seed: int | None = None,
    n_workers: int = 1,
    cancel_event: threading.Event | None = None,
    report_every: int | None = None,
) -> AggregateStats:
    """Coroutine form of run_simulation for event-loop callers.

    Control returns to the event loop after every progress report, so a UI
    sharing the loop stays responsive between reports. The callback may be a
    plain function or a coroutine function.
    """
    run = _SimulationRun(deck, n_trials, seed, n_workers, cancel_event, report_every)
    for percent in run.progress():
        pending = _notify(progress_callback, percent)
        if inspect.isawaitable(pending):
            try:
                await pending
            except Exception:
                logger.exception("Progress callback failed at %.1f%%; simulation continues", percent)
        await asyncio.sleep(0)
    return run.result()

"""
Error taxonomy for the baozi engine and simulator.

Every input error is raised before the first trial runs; nothing is retried
internally. Input errors also subclass ValueError so callers that only catch
ValueError keep working.
"""

from __future__ import annotations


class BaoziError(Exception):
    """Base class for all errors raised by this package."""


class InvalidConfig(BaoziError, ValueError):
    """A per-rank count is not an integer in [0, 4], or the config has the wrong length."""


class InsufficientDeck(BaoziError, ValueError):
    """The deck holds fewer than the 8 cards needed to deal one round."""


# The aggregator's name for the same condition.
EmptyDeck = InsufficientDeck


class InvalidTrialCount(BaoziError, ValueError):
    """The trial count is not an integer or is below the minimum."""


class Cancelled(BaoziError):
    """A simulation run was aborted through its cancellation signal.

    Attributes:
        completed_trials: Trials whose results had been merged when the
                          abort was observed. They are discarded.
    """

    def __init__(self, completed_trials: int, n_trials: int) -> None:
        self.completed_trials = completed_trials
        self.n_trials = n_trials
        super().__init__(
            f"Simulation cancelled after {completed_trials:,} of {n_trials:,} trials."
        )

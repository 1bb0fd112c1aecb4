"""
Deck creation and shuffling.

The deck is a read-only numpy int8 array of rank values (1–8), built once per
run from a per-rank count configuration:

    counts = [2, 0, 1, 0, 0, 0, 0, 5]  ->  deck = [1, 1, 3, 8, 8, 8, 8, 8]

Shuffling never touches the built deck. Every shuffle runs Fisher–Yates on a
copy, either a single copy (shuffle_deck) or a matrix of independent copies
shuffled row-wise in one pass (shuffle_batch). The batch form is the hot path
of the simulator: its cost is O(len(deck)) vectorised steps per batch rather
than per trial.
"""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np

from .cards import RANKS, validate_counts


def create_deck(counts: Sequence[int]) -> np.ndarray:
    """Expand a per-rank count configuration into a deck of rank values.

    Args:
        counts: 8 per-rank counts, index 0 = rank 1. Validated here even if
                the caller already did.

    Returns:
        np.ndarray: read-only int8 array, ranks in ascending order.

    Raises:
        InvalidConfig: A count is not an integer in [0, 4].
        InsufficientDeck: The counts sum to fewer than 8 cards.

    Examples:
        >>> deck = create_deck([4, 4, 4, 4, 4, 4, 4, 4])
        >>> len(deck)
        32
        >>> create_deck([2, 0, 1, 0, 0, 0, 0, 5]).tolist()
        [1, 1, 3, 8, 8, 8, 8, 8]
    """
    valid = validate_counts(counts)
    deck = np.repeat(np.array(RANKS, dtype=np.int8), valid)
    deck.flags.writeable = False
    return deck


def rank_counts(deck: np.ndarray) -> np.ndarray:
    """Return the per-rank counts of a deck (inverse of create_deck).

    Examples:
        >>> rank_counts(create_deck([1, 2, 0, 0, 0, 0, 0, 5])).tolist()
        [1, 2, 0, 0, 0, 0, 0, 5]
    """
    return np.bincount(np.asarray(deck, dtype=np.intp), minlength=len(RANKS) + 1)[1:]


def shuffle_deck(deck: np.ndarray, rng: np.random.Generator | None = None) -> np.ndarray:
    """Return a uniformly shuffled copy of the deck.

    Fisher–Yates from the last index down to 1: position i is swapped with a
    uniformly chosen j in [0, i]. The caller's deck is not modified.

    Args:
        deck: Deck array (not mutated).
        rng:  NumPy Generator; a fresh default_rng() if omitted.

    Returns:
        np.ndarray: new array holding the same multiset in random order.

    Examples:
        >>> deck = create_deck([1, 1, 1, 1, 1, 1, 1, 1])
        >>> shuffled = shuffle_deck(deck, np.random.default_rng(0))
        >>> sorted(shuffled.tolist()) == deck.tolist()
        True
    """
    if rng is None:
        rng = np.random.default_rng()

    arr = np.array(deck, copy=True)
    n = len(arr)
    if n < 2:
        return arr

    # One uniform draw per step, consumed from the top index down.
    draws = rng.random(n - 1)
    for k, i in enumerate(range(n - 1, 0, -1)):
        j = int(draws[k] * (i + 1))
        arr[i], arr[j] = arr[j], arr[i]
    return arr


def shuffle_batch(
    deck: np.ndarray,
    n: int,
    rng: np.random.Generator | None = None,
) -> np.ndarray:
    """Shuffle n independent copies of the deck in a single vectorised pass.

    Same Fisher–Yates as shuffle_deck, run row-wise: at step i every row swaps
    column i with its own uniformly chosen column j in [0, i].

    Args:
        deck: Deck array (not mutated).
        n:    Number of independent shuffles (rows).
        rng:  NumPy Generator; a fresh default_rng() if omitted.

    Returns:
        np.ndarray: array of shape (n, len(deck)); each row a permutation.

    Examples:
        >>> deck = create_deck([4, 4, 4, 4, 4, 4, 4, 4])
        >>> shuffle_batch(deck, 3, np.random.default_rng(0)).shape
        (3, 32)
    """
    if rng is None:
        rng = np.random.default_rng()

    length = len(deck)
    batch = np.tile(np.asarray(deck), (n, 1))
    if length < 2 or n == 0:
        return batch

    rows = np.arange(n)
    for i in range(length - 1, 0, -1):
        j = (rng.random(n) * (i + 1)).astype(np.intp)
        held = batch[:, i].copy()
        batch[:, i] = batch[rows, j]
        batch[rows, j] = held
    return batch

"""
Two-card hand scoring.

    Pair ("leopard", both cards the same rank r): points = 10 + r   (11–18)
    Anything else:                                 points = (a + b) % 10  (0–9)

A pair therefore outranks every non-pair hand, and a higher pair outranks a
lower one. The scalar functions are used for single rounds and tests; the
vectorised score_hands applies the same rule across numpy arrays for the
batch simulator.
"""

from __future__ import annotations

from typing import NamedTuple

import numpy as np

PAIR_BASE: int = 10


class HandScore(NamedTuple):
    points: int
    is_pair: bool


def is_pair(a: int, b: int) -> bool:
    """Return True if both cards share a rank.

    Examples:
        >>> is_pair(3, 3)
        True
        >>> is_pair(3, 4)
        False
    """
    return a == b


def calc_points(a: int, b: int) -> int:
    """Return the point value of a two-card hand.

    Examples:
        >>> calc_points(8, 8)    # pair of eights
        18
        >>> calc_points(7, 5)    # 12 -> 2
        2
        >>> calc_points(2, 8)    # 10 -> 0
        0
    """
    if a == b:
        return PAIR_BASE + a
    return (a + b) % 10


def score_hand(a: int, b: int) -> HandScore:
    """Score a hand, returning both its points and whether it is a pair.

    Examples:
        >>> score_hand(4, 4)
        HandScore(points=14, is_pair=True)
        >>> score_hand(4, 9 - 4)
        HandScore(points=9, is_pair=False)
    """
    return HandScore(calc_points(a, b), is_pair(a, b))


def score_hands(first: np.ndarray, second: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
    """Vectorised score_hand over two equal-length arrays of ranks.

    Args:
        first:  First card of each hand.
        second: Second card of each hand.

    Returns:
        (points, pairs): int16 points array and boolean pair mask.
    """
    a = np.asarray(first, dtype=np.int16)
    b = np.asarray(second, dtype=np.int16)
    pairs = a == b
    points = np.where(pairs, PAIR_BASE + a, (a + b) % 10)
    return points, pairs

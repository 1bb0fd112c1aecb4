"""
Rank constants and deck-composition validation.

Cards carry no suit, only a rank value 1–8. A deck composition (DeckConfig)
is a sequence of 8 counts where index r-1 holds the number of cards of rank r:

    counts = [4, 4, 4, 4, 4, 4, 4, 4]   ->  full 32-card deck
    counts = [1, 1, 1, 1, 1, 1, 1, 1]   ->  8 cards, no pair possible

Validation lives here so the deck builder and the analytics layer agree on
what a legal composition is.
"""

from __future__ import annotations

import numbers
from collections.abc import Sequence

from .errors import InsufficientDeck, InvalidConfig

NUM_RANKS: int = 8          # ranks 1..8
MAX_PER_RANK: int = 4       # at most four cards of one rank
CARDS_PER_ROUND: int = 8    # dealer + three players, two cards each

RANKS: tuple[int, ...] = tuple(range(1, NUM_RANKS + 1))

# Display names for the three player positions (dealer is position 0).
PLAYER_POSITIONS: tuple[str, ...] = ('X', 'Y', 'Z')

FULL_DECK_COUNTS: tuple[int, ...] = (MAX_PER_RANK,) * NUM_RANKS


def validate_counts(counts: Sequence[int]) -> tuple[int, ...]:
    """Validate a deck composition and return it as a tuple of plain ints.

    Args:
        counts: Per-rank card counts, index 0 = rank 1.

    Returns:
        The counts as a tuple of int.

    Raises:
        InvalidConfig: Wrong length, non-integer entry, or count outside [0, 4].
        InsufficientDeck: Fewer than 8 cards in total.

    Examples:
        >>> validate_counts([4, 4, 4, 4, 4, 4, 4, 4])
        (4, 4, 4, 4, 4, 4, 4, 4)
        >>> validate_counts([1, 1, 1, 1, 1, 1, 1, 0])
        Traceback (most recent call last):
        ...
        baozi.engine.errors.InsufficientDeck: Deck has 7 cards; at least 8 are needed to deal a round.
    """
    if isinstance(counts, (str, bytes)) or not isinstance(counts, Sequence):
        try:
            counts = list(counts)  # type: ignore[arg-type]
        except TypeError:
            raise InvalidConfig(f"Deck config must be a sequence of {NUM_RANKS} counts.") from None

    if len(counts) != NUM_RANKS:
        raise InvalidConfig(
            f"Deck config must have exactly {NUM_RANKS} counts, got {len(counts)}."
        )

    normalised = []
    for rank, count in zip(RANKS, counts):
        # bool is an Integral subclass but never a meaningful card count.
        if isinstance(count, bool) or not isinstance(count, numbers.Integral):
            raise InvalidConfig(f"Count for rank {rank} must be an integer, got {count!r}.")
        count = int(count)
        if not 0 <= count <= MAX_PER_RANK:
            raise InvalidConfig(
                f"Count for rank {rank} must be between 0 and {MAX_PER_RANK}, got {count}."
            )
        normalised.append(count)

    total = sum(normalised)
    if total < CARDS_PER_ROUND:
        raise InsufficientDeck(
            f"Deck has {total} cards; at least {CARDS_PER_ROUND} are needed to deal a round."
        )
    return tuple(normalised)


def total_cards(counts: Sequence[int]) -> int:
    """Return the number of cards a composition describes (no validation).

    Examples:
        >>> total_cards(FULL_DECK_COUNTS)
        32
    """
    return int(sum(counts))

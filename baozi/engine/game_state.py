"""
Round dealing and settlement.

One round uses the first eight cards of a shuffled deck, dealt in fixed pairs:

    cards (0, 1) -> dealer
    cards (2, 3) -> player X
    cards (4, 5) -> player Y
    cards (6, 7) -> player Z

Each player hand is settled independently against the dealer (see rules.py).
Round-level results (two-or-more winners, all three winners) follow from the
number of winning player hands.

Two entry points:
    play_round(shuffled)        — one deck, returns a RoundOutcome.
    play_rounds(shuffled_batch) — (n, L) matrix of shuffled decks, returns the
                                  summed TrialCounters for all n rounds.

Both are pure functions of their input; they hold no shared state and may be
called concurrently on independent arrays.
"""

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np

from .cards import CARDS_PER_ROUND, PLAYER_POSITIONS
from .errors import InsufficientDeck
from .hand import score_hand, score_hands
from .rules import all_three_won, player_wins, two_or_more_won

NUM_PLAYERS: int = len(PLAYER_POSITIONS)

# Card indices of each hand within the first eight cards.
DEALER_CARDS: tuple[int, int] = (0, 1)
PLAYER_CARDS: tuple[tuple[int, int], ...] = ((2, 3), (4, 5), (6, 7))


# ─── Result types ─────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class RoundOutcome:
    """Settled result of one round, from the players' side."""
    dealer_points: int
    player_points: tuple[int, ...]
    won: tuple[bool, ...]
    is_pair: tuple[bool, ...]

    @property
    def win_count(self) -> int:
        return sum(self.won)

    @property
    def two_or_more_won(self) -> bool:
        return two_or_more_won(self.win_count)

    @property
    def all_three_won(self) -> bool:
        return all_three_won(self.win_count)

    def __str__(self) -> str:
        hands = ' | '.join(
            f"{pos}: {pts}{'*' if pair else ''} {'WIN' if won else 'LOSS'}"
            for pos, pts, pair, won in zip(
                PLAYER_POSITIONS, self.player_points, self.is_pair, self.won
            )
        )
        return f"Dealer: {self.dealer_points} | {hands}"


def _zeros() -> np.ndarray:
    return np.zeros(NUM_PLAYERS, dtype=np.int64)


@dataclass
class TrialCounters:
    """Integer event counts accumulated over a number of rounds.

    Per-position arrays are indexed 0=X, 1=Y, 2=Z.

    Attributes:
        n_rounds:    Rounds counted.
        wins:        Player hand beat the dealer.
        pair_wins:   Won holding a pair.
        normal_wins: Won holding a non-pair hand.
        pairs_dealt: Player hand was a pair, win or lose.
        two_or_more: Rounds with at least two winning player hands.
        all_three:   Rounds with all three player hands winning.
    """
    n_rounds: int = 0
    wins: np.ndarray = field(default_factory=_zeros)
    pair_wins: np.ndarray = field(default_factory=_zeros)
    normal_wins: np.ndarray = field(default_factory=_zeros)
    pairs_dealt: np.ndarray = field(default_factory=_zeros)
    two_or_more: int = 0
    all_three: int = 0

    def add_round(self, outcome: RoundOutcome) -> None:
        """Count a single RoundOutcome."""
        self.n_rounds += 1
        for i, (won, pair) in enumerate(zip(outcome.won, outcome.is_pair)):
            if pair:
                self.pairs_dealt[i] += 1
            if won:
                self.wins[i] += 1
                if pair:
                    self.pair_wins[i] += 1
                else:
                    self.normal_wins[i] += 1
        if outcome.two_or_more_won:
            self.two_or_more += 1
        if outcome.all_three_won:
            self.all_three += 1

    def merge(self, other: TrialCounters) -> None:
        """Add another accumulator's counts into this one (plain sum)."""
        self.n_rounds += other.n_rounds
        self.wins += other.wins
        self.pair_wins += other.pair_wins
        self.normal_wins += other.normal_wins
        self.pairs_dealt += other.pairs_dealt
        self.two_or_more += other.two_or_more
        self.all_three += other.all_three


# ─── Round play ───────────────────────────────────────────────────────────────

def play_round(shuffled: np.ndarray) -> RoundOutcome:
    """Deal and settle one round from the top of a shuffled deck.

    Args:
        shuffled: Shuffled deck; only the first eight cards are used.

    Returns:
        RoundOutcome for the three player positions.

    Raises:
        InsufficientDeck: The deck holds fewer than eight cards.

    Examples:
        >>> outcome = play_round(np.array([1, 2, 4, 4, 5, 6, 2, 8]))
        >>> outcome.dealer_points, outcome.player_points
        (3, (14, 1, 0))
        >>> outcome.won
        (True, False, False)
    """
    if len(shuffled) < CARDS_PER_ROUND:
        raise InsufficientDeck(
            f"Need {CARDS_PER_ROUND} cards to deal a round, got {len(shuffled)}."
        )

    cards = [int(c) for c in shuffled[:CARDS_PER_ROUND]]
    dealer = score_hand(cards[DEALER_CARDS[0]], cards[DEALER_CARDS[1]])
    players = [score_hand(cards[a], cards[b]) for a, b in PLAYER_CARDS]

    return RoundOutcome(
        dealer_points=dealer.points,
        player_points=tuple(p.points for p in players),
        won=tuple(player_wins(p.points, dealer.points) for p in players),
        is_pair=tuple(p.is_pair for p in players),
    )


def play_rounds(shuffled_batch: np.ndarray) -> TrialCounters:
    """Settle every row of a matrix of shuffled decks and count the results.

    Equivalent to calling play_round on each row and feeding the outcomes to
    TrialCounters.add_round, but vectorised across rows.

    Args:
        shuffled_batch: Array of shape (n, L) with L >= 8.

    Returns:
        TrialCounters for the n rounds.
    """
    if shuffled_batch.ndim != 2 or shuffled_batch.shape[1] < CARDS_PER_ROUND:
        raise InsufficientDeck(
            f"Need {CARDS_PER_ROUND} cards per row to deal a round, "
            f"got shape {shuffled_batch.shape}."
        )

    dealt = shuffled_batch[:, :CARDS_PER_ROUND]
    dealer_points, _ = score_hands(dealt[:, DEALER_CARDS[0]], dealt[:, DEALER_CARDS[1]])

    counters = TrialCounters(n_rounds=int(dealt.shape[0]))
    win_count = np.zeros(dealt.shape[0], dtype=np.int8)
    for i, (a, b) in enumerate(PLAYER_CARDS):
        points, pairs = score_hands(dealt[:, a], dealt[:, b])
        won = points > dealer_points
        win_count += won
        counters.wins[i] = int(np.count_nonzero(won))
        counters.pair_wins[i] = int(np.count_nonzero(won & pairs))
        counters.normal_wins[i] = int(np.count_nonzero(won & ~pairs))
        counters.pairs_dealt[i] = int(np.count_nonzero(pairs))

    counters.two_or_more = int(np.count_nonzero(win_count >= 2))
    counters.all_three = int(np.count_nonzero(win_count == 3))
    return counters

"""
House rules: hand comparison and bet payouts.

Comparison:
    Each player hand is compared with the dealer hand on points alone.
    The player wins only with strictly more points; equal points go to the
    dealer. This tie rule is the source of the house edge and is not
    configurable.

Bets and payouts (from the bettor's perspective, per unit staked):
    Player hand    — win with a pair   -> +2
                     win with a normal -> +1
                     lose or tie       -> -1
    Two-or-more    — at least two of the three player hands win -> +1, else -1
    All-three      — all three player hands win                 -> +3, else -1
"""

from __future__ import annotations

from enum import Enum, auto

PAIR_PAYOUT: int = 2
NORMAL_PAYOUT: int = 1
TWO_OR_MORE_PAYOUT: int = 1
ALL_THREE_PAYOUT: int = 3
LOSS_PAYOUT: int = -1

BET_PLAYER: str = 'player'
BET_TWO_OR_MORE: str = 'two_or_more'
BET_ALL_THREE: str = 'all_three'

# Listed order doubles as the tie-break order when bets are ranked.
BET_ORDER: tuple[str, ...] = (BET_PLAYER, BET_TWO_OR_MORE, BET_ALL_THREE)

BET_LABELS: dict[str, str] = {
    BET_PLAYER: 'Player hand',
    BET_TWO_OR_MORE: 'Two-or-more winners',
    BET_ALL_THREE: 'All-three winners',
}


class Outcome(Enum):
    WIN = auto()
    LOSS = auto()


def player_wins(player_points: int, dealer_points: int) -> bool:
    """Return True if the player hand beats the dealer (ties lose).

    Examples:
        >>> player_wins(7, 6)
        True
        >>> player_wins(6, 6)
        False
    """
    return player_points > dealer_points


def settle_position(player_points: int, dealer_points: int) -> Outcome:
    """Return the Outcome of one player hand against the dealer."""
    return Outcome.WIN if player_wins(player_points, dealer_points) else Outcome.LOSS


def player_bet_payout(won: bool, pair: bool) -> int:
    """Payout of a one-unit player-hand bet.

    Examples:
        >>> player_bet_payout(True, True)
        2
        >>> player_bet_payout(False, True)
        -1
    """
    if not won:
        return LOSS_PAYOUT
    return PAIR_PAYOUT if pair else NORMAL_PAYOUT


def two_or_more_won(win_count: int) -> bool:
    return win_count >= 2


def all_three_won(win_count: int) -> bool:
    return win_count == 3

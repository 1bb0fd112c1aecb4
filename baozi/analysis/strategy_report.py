"""Plain-text report for a baozi analysis run.

Public functions format an AnalysisReport for the terminal:

    print_deck_summary(report)      — composition, trials, pair-rate check
    print_expected_values(report)   — win rate and EV per bet type
    print_position_details(report)  — X / Y / Z breakdown
    print_recommendation(report)    — ranked bets and advice
    print_report(report)            — all of the above

Usage (standalone report for the full 32-card deck):
    python -m baozi.analysis.strategy_report
"""

from __future__ import annotations

from baozi.analysis.strategy import AnalysisReport, Recommendation, win_rate_interval
from baozi.engine.cards import PLAYER_POSITIONS, RANKS
from baozi.engine.rules import BET_ALL_THREE, BET_LABELS, BET_PLAYER, BET_TWO_OR_MORE

_WIDTH: int = 56


def _signed(value: float) -> str:
    return f"{value:+.4f}"


def _header(title: str) -> None:
    print("=" * _WIDTH)
    print(title)
    print("=" * _WIDTH)


# ─── Advice ───────────────────────────────────────────────────────────────────


def format_advice(recommendation: Recommendation) -> str:
    """Return the betting advice for a ranked recommendation.

    With a positive best EV the advice names that bet; otherwise it warns that
    every bet loses on average and names the cheapest one.
    """
    best = recommendation.best
    lines = []
    if recommendation.has_positive_ev:
        lines.append(f"Recommended bet: {BET_LABELS[best.name]}")
        lines.append(
            f"Expected value: {_signed(best.ev)} units (win rate {best.win_rate * 100:.2f}%)"
        )
        lines.append("Other options:")
        for option in recommendation.ranked[1:]:
            lines.append(f"  {BET_LABELS[option.name]}: {_signed(option.ev)} units")
    else:
        lines.append("Warning: every bet has negative expected value.")
        lines.append(f"Smallest loss: {BET_LABELS[best.name]} ({_signed(best.ev)} units)")
        lines.append("Advice: skip this deck or wait for a better composition.")
    return "\n".join(lines)


# ─── Sections ─────────────────────────────────────────────────────────────────


def print_deck_summary(report: AnalysisReport) -> None:
    stats = report.stats
    _header("Deck Summary")
    composition = "  ".join(f"{rank}:{count}" for rank, count in zip(RANKS, report.counts))
    print(f"  Composition:       {composition}")
    print(f"  Total cards:       {report.total_cards}")
    print(f"  Trials:            {stats.n_trials:,}")
    print(f"  Elapsed:           {report.elapsed_seconds:.2f}s")
    print(f"  Pair rate (theory): {report.theoretical_pair_probability * 100:.2f}%")
    print(f"  Pair rate (sample): {stats.avg_pair_rate * 100:.2f}%")
    print()


def print_expected_values(report: AnalysisReport) -> None:
    stats = report.stats
    evs = report.expected_values
    _header("Expected Value per Bet")
    print(f"  {'Bet':<22}  {'Win rate':>8}  {'95% CI':>17}  {'EV':>8}")
    rows = [
        (BET_PLAYER, stats.avg_win, evs.player, stats.n_trials * len(PLAYER_POSITIONS)),
        (BET_TWO_OR_MORE, stats.two_or_more, evs.two_or_more, stats.n_trials),
        (BET_ALL_THREE, stats.all_three, evs.all_three, stats.n_trials),
    ]
    for name, rate, ev, n in rows:
        low, high = win_rate_interval(rate, n)
        print(
            f"  {BET_LABELS[name]:<22}  {rate * 100:>7.2f}%  "
            f"[{low * 100:6.2f}, {high * 100:6.2f}]%  {_signed(ev):>8}"
        )
    print(f"    of which pair wins:   {stats.avg_pair_win * 100:>7.2f}%")
    print(f"    of which normal wins: {stats.avg_normal_win * 100:>7.2f}%")
    print()


def print_position_details(report: AnalysisReport) -> None:
    stats = report.stats
    _header("Player Positions")
    print(f"  {'Pos':>3}  {'Win':>7}  {'Pair win':>8}  {'Lose':>7}  {'EV':>8}")
    for i, label in enumerate(PLAYER_POSITIONS):
        print(
            f"  {label:>3}  {stats.win[i] * 100:>6.2f}%  {stats.pair_win[i] * 100:>7.2f}%  "
            f"{stats.lose[i] * 100:>6.2f}%  {_signed(report.expected_values.per_position[i]):>8}"
        )
    print()


def print_recommendation(report: AnalysisReport) -> None:
    _header("Strategy")
    for line in format_advice(report.recommendation).splitlines():
        print(f"  {line}")
    print()


def print_report(report: AnalysisReport) -> None:
    print_deck_summary(report)
    print_expected_values(report)
    print_position_details(report)
    print_recommendation(report)


# ─── __main__ ─────────────────────────────────────────────────────────────────

if __name__ == "__main__":
    import logging

    from baozi.analysis.strategy import analyse_deck
    from baozi.engine.cards import FULL_DECK_COUNTS

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s %(levelname)s %(message)s")
    print("Baozi Monte Carlo — full 32-card deck, 1,000,000 trials\n")
    result = analyse_deck(
        FULL_DECK_COUNTS,
        n_trials=1_000_000,
        progress_callback=lambda pct: print(f"  progress {pct:5.1f}%"),
        seed=42,
    )
    print()
    print_report(result)

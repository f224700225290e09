"""Behavioural pattern detection over a trader's recent history.

Scans a trailing window of journalled trades for the habits that most
often erode a discretionary trader's edge, and turns the findings into
short plain-language insights:

- **Overtrading**: days where the trade count exceeded the personal
  daily limit.
- **Revenge trading**: a trade tagged with the ``revenge`` mood opened
  within a short gap after a losing trade.  This is a tagging rule on
  the trader's own mood label, not an inference from the loss sequence.
- **Mood and setup breakdown**: count and P&L per mood; count, P&L and
  win/loss split per setup.
- **Rule breaks**: trades outside the plan, without a stop loss, or
  with a planned risk-reward below 1:1.
- **Most active weekday**.

Usage::

    report = analyze_behavior(trades, daily_trade_limit=8)
    for line in report.insights:
        print(line)
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any

from ..core.enums import WEEKDAY_NAMES, Mood, Setup
from ..core.models import ZERO, Trade, round_money
from .filters import TradeLike, chronological, coerce_trades

logger = logging.getLogger(__name__)

DEFAULT_DAILY_TRADE_LIMIT = 10
DEFAULT_REVENGE_WINDOW_MINUTES = 30
DEFAULT_POOR_RR_SHARE = 0.3


@dataclass(frozen=True)
class OvertradingDay:
    date: date
    trade_count: int
    net_pnl: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "date": self.date.isoformat(),
            "tradeCount": self.trade_count,
            "netPnl": self.net_pnl,
        }


@dataclass
class _SetupStats:
    """Accumulator for one setup tag."""

    count: int = 0
    total_pnl: Decimal = ZERO
    wins: int = 0
    losses: int = 0

    def record(self, trade: Trade) -> None:
        self.count += 1
        self.total_pnl += trade.pnl
        if trade.pnl > 0:
            self.wins += 1
        elif trade.pnl < 0:
            self.losses += 1

    def to_dict(self) -> dict[str, Any]:
        win_rate = Decimal(self.wins) / Decimal(self.count) * 100 if self.count else ZERO
        return {
            "count": self.count,
            "totalPnl": round_money(self.total_pnl),
            "wins": self.wins,
            "losses": self.losses,
            "winRate": round_money(win_rate),
        }


@dataclass(frozen=True)
class BehaviorReport:
    total_trades: int = 0
    overtrading_days: list[OvertradingDay] = field(default_factory=list)
    revenge_trading_count: int = 0
    mood_distribution: dict[Mood, int] = field(default_factory=dict)
    mood_pnl: dict[Mood, float] = field(default_factory=dict)
    setup_performance: dict[Setup, dict[str, Any]] = field(default_factory=dict)
    rule_breaks: int = 0
    trades_without_sl: int = 0
    poor_rr_trades: int = 0
    most_active_day: str | None = None
    insights: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "overtradingDays": [d.to_dict() for d in self.overtrading_days],
            "revengeTradingCount": self.revenge_trading_count,
            "moodDistribution": {m.value: n for m, n in self.mood_distribution.items()},
            "moodPnl": {m.value: p for m, p in self.mood_pnl.items()},
            "setupPerformance": {
                s.value: dict(stats) for s, stats in self.setup_performance.items()
            },
            "ruleBreaks": self.rule_breaks,
            "tradesWithoutSL": self.trades_without_sl,
            "poorRRTrades": self.poor_rr_trades,
            "mostActiveDay": self.most_active_day,
            "insights": list(self.insights),
            "totalTrades": self.total_trades,
        }


def analyze_behavior(
    trades: Iterable[TradeLike],
    daily_trade_limit: int | None = None,
    *,
    revenge_window_minutes: int = DEFAULT_REVENGE_WINDOW_MINUTES,
    poor_rr_share: float = DEFAULT_POOR_RR_SHARE,
) -> BehaviorReport:
    """Detect behavioural patterns in a trade history.

    Parameters
    ----------
    trades : iterable of Trade or mapping
        The trader's trades for the window being analysed.  They are
        ordered by (date, time) before scanning.
    daily_trade_limit : int | None
        The trader's configured limit.  ``None`` means the default of 10.
    revenge_window_minutes : int
        Maximum gap after a losing trade for the next trade to count as
        a revenge trade.  Default 30.
    poor_rr_share : float
        Share of all trades with RR below 1:1 above which the poor-RR
        insight is emitted.  Default 0.3.

    Returns
    -------
    BehaviorReport
        Empty report for an empty input.
    """
    limit = DEFAULT_DAILY_TRADE_LIMIT if daily_trade_limit is None else daily_trade_limit
    items = chronological(coerce_trades(trades))
    if not items:
        return BehaviorReport()

    overtrading = overtrading_days(items, limit)
    revenge = count_revenge_trades(items, revenge_window_minutes)
    mood_counts, mood_pnl = _mood_breakdown(items)
    setups = _setup_breakdown(items)

    rule_breaks = sum(1 for t in items if not t.followed_plan)
    without_sl = sum(1 for t in items if not t.has_stop_loss)
    poor_rr = sum(1 for t in items if 0 < t.rr_ratio < 1)

    mood_pnl_out = {m: round_money(p) for m, p in mood_pnl.items()}
    insights = build_insights(
        total_trades=len(items),
        overtrading_day_count=len(overtrading),
        revenge_count=revenge,
        mood_pnl=mood_pnl,
        trades_without_sl=without_sl,
        poor_rr_trades=poor_rr,
        poor_rr_share=poor_rr_share,
    )

    report = BehaviorReport(
        total_trades=len(items),
        overtrading_days=overtrading,
        revenge_trading_count=revenge,
        mood_distribution=mood_counts,
        mood_pnl=mood_pnl_out,
        setup_performance={s: stats.to_dict() for s, stats in setups.items()},
        rule_breaks=rule_breaks,
        trades_without_sl=without_sl,
        poor_rr_trades=poor_rr,
        most_active_day=most_active_weekday(items),
        insights=insights,
    )
    if insights:
        logger.info("Behaviour analysis: %d insight(s) over %d trades", len(insights), len(items))
    return report


# ---------------------------------------------------------------------- #
# Individual detectors                                                    #
# ---------------------------------------------------------------------- #

def overtrading_days(trades: list[Trade], limit: int) -> list[OvertradingDay]:
    """Days whose trade count is strictly above ``limit``, ascending."""
    by_day: dict[date, list[Trade]] = {}
    for trade in trades:
        by_day.setdefault(trade.date, []).append(trade)

    flagged = []
    for day in sorted(by_day):
        day_trades = by_day[day]
        if len(day_trades) > limit:
            net = sum((t.pnl for t in day_trades), ZERO)
            flagged.append(OvertradingDay(day, len(day_trades), round_money(net)))
    return flagged


def count_revenge_trades(trades: list[Trade], window_minutes: int) -> int:
    """Pairwise scan over adjacent trades in (date, time) order.

    ``curr`` counts when ``prev`` lost money, ``curr`` opened at most
    ``window_minutes`` after ``prev``, and ``curr`` is tagged revenge.
    """
    count = 0
    for prev, curr in zip(trades, trades[1:]):
        gap = int((curr.opened_at - prev.opened_at).total_seconds() // 60)
        if prev.pnl < 0 and gap <= window_minutes and curr.mood == Mood.REVENGE:
            count += 1
    return count


def most_active_weekday(trades: list[Trade]) -> str | None:
    """Weekday name with the most trades; ties go to the earliest day.

    Buckets run Sunday (0) through Saturday (6).
    """
    if not trades:
        return None
    buckets = [0] * 7
    for trade in trades:
        buckets[(trade.date.weekday() + 1) % 7] += 1

    best_idx, best_count = 0, 0
    for idx, n in enumerate(buckets):
        if n > best_count:
            best_idx, best_count = idx, n
    return WEEKDAY_NAMES[best_idx]


def _mood_breakdown(trades: list[Trade]) -> tuple[dict[Mood, int], dict[Mood, Decimal]]:
    counts: dict[Mood, int] = {}
    pnl: dict[Mood, Decimal] = {}
    for trade in trades:
        counts[trade.mood] = counts.get(trade.mood, 0) + 1
        pnl[trade.mood] = pnl.get(trade.mood, ZERO) + trade.pnl
    return counts, pnl


def _setup_breakdown(trades: list[Trade]) -> dict[Setup, _SetupStats]:
    stats: dict[Setup, _SetupStats] = {}
    for trade in trades:
        stats.setdefault(trade.setup, _SetupStats()).record(trade)
    return stats


# ---------------------------------------------------------------------- #
# Insights                                                                #
# ---------------------------------------------------------------------- #

def build_insights(
    *,
    total_trades: int,
    overtrading_day_count: int,
    revenge_count: int,
    mood_pnl: dict[Mood, Decimal],
    trades_without_sl: int,
    poor_rr_trades: int,
    poor_rr_share: float = DEFAULT_POOR_RR_SHARE,
) -> list[str]:
    """Plain-language findings, always in the same order.

    Overtrading, revenge trading, worst mood, missing stop losses, poor
    risk-reward.  Each line appears only when its condition holds.
    """
    insights: list[str] = []

    if overtrading_day_count > 0:
        insights.append(
            f"You exceeded your daily limit on {overtrading_day_count} day(s)"
        )

    if revenge_count > 0:
        insights.append(f"Detected {revenge_count} potential revenge trades")

    if mood_pnl:
        # min() keeps the first mood seen on ties
        worst_mood = min(mood_pnl, key=lambda m: mood_pnl[m])
        if mood_pnl[worst_mood] < 0:
            insights.append(f'Most losses occur during "{worst_mood.value}" trades')

    if trades_without_sl > 0:
        insights.append(f"{trades_without_sl} trades without stop loss")

    if poor_rr_trades > total_trades * poor_rr_share:
        insights.append(
            f"{poor_rr_trades} trades have poor risk-reward ratio (<1:1)"
        )

    return insights

"""Performance summary over a set of closed trades.

Computes the headline numbers of the dashboard: trade counts, win rate,
net and average P&L, average planned risk-reward, single-trade and
single-day extrema, profit factor and maximum drawdown of the running
P&L curve.

All arithmetic runs on ``Decimal`` at full precision; values are rounded
to cents only when the summary is emitted, so long series of sub-cent
amounts do not drift.

Usage::

    summary = compute_summary(trades)
    print(summary.win_rate, summary.max_drawdown)
    payload = summary.to_dict()  # camelCase keys for the API layer
"""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any

from ..core.models import ZERO, Trade, round_money
from .filters import TradeLike, chronological, coerce_trades, in_month

logger = logging.getLogger(__name__)

_HUNDRED = Decimal("100")


@dataclass(frozen=True)
class DayPnl:
    """Net P&L of one trading day."""

    date: date | None = None
    pnl: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "date": self.date.isoformat() if self.date else None,
            "pnl": self.pnl,
        }


@dataclass(frozen=True)
class MetricsSummary:
    """Aggregate statistics for a trade set.  Money fields are rounded to 2 dp."""

    total_trades: int = 0
    winning_trades: int = 0
    losing_trades: int = 0
    win_rate: float = 0.0        # Percent, 2 dp
    net_pnl: float = 0.0
    avg_pnl: float = 0.0
    avg_rr: float = 0.0          # Over trades with a planned RR only
    best_trade: float = 0.0
    worst_trade: float = 0.0
    max_drawdown: float = 0.0
    profit_factor: float = 0.0   # 0 when there are no losses
    best_day: DayPnl = field(default_factory=DayPnl)
    worst_day: DayPnl = field(default_factory=DayPnl)

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalTrades": self.total_trades,
            "winningTrades": self.winning_trades,
            "losingTrades": self.losing_trades,
            "winRate": self.win_rate,
            "netPnl": self.net_pnl,
            "avgPnl": self.avg_pnl,
            "avgRR": self.avg_rr,
            "bestTrade": self.best_trade,
            "worstTrade": self.worst_trade,
            "maxDrawdown": self.max_drawdown,
            "profitFactor": self.profit_factor,
            "bestDay": self.best_day.to_dict(),
            "worstDay": self.worst_day.to_dict(),
        }


def compute_summary(trades: Iterable[TradeLike]) -> MetricsSummary:
    """Summarise a trade set.

    Parameters
    ----------
    trades : iterable of Trade or mapping
        Closed trades already scoped by the caller (user, date range).
        Order does not matter; the drawdown scan sorts internally.

    Returns
    -------
    MetricsSummary
        All-zero summary (with null best/worst day) for an empty input.

    Raises
    ------
    MalformedTradeError
        If any record is missing a required field such as ``date`` or
        ``pnl``.
    """
    items = coerce_trades(trades)
    if not items:
        return MetricsSummary()

    total = len(items)
    wins = [t for t in items if t.pnl > 0]
    losses = [t for t in items if t.pnl < 0]

    net = sum((t.pnl for t in items), ZERO)
    gains = sum((t.pnl for t in wins), ZERO)
    gross_loss = abs(sum((t.pnl for t in losses), ZERO))

    win_rate = Decimal(len(wins)) / Decimal(total) * _HUNDRED
    profit_factor = gains / gross_loss if gross_loss > 0 else ZERO

    with_rr = [t.rr_ratio for t in items if t.rr_ratio > 0]
    avg_rr = sum(with_rr, ZERO) / len(with_rr) if with_rr else ZERO

    best_day, worst_day = _day_extrema(items)

    summary = MetricsSummary(
        total_trades=total,
        winning_trades=len(wins),
        losing_trades=len(losses),
        win_rate=round_money(win_rate),
        net_pnl=round_money(net),
        avg_pnl=round_money(net / total),
        avg_rr=round_money(avg_rr),
        best_trade=round_money(max(t.pnl for t in items)),
        worst_trade=round_money(min(t.pnl for t in items)),
        max_drawdown=round_money(max_drawdown(items)),
        profit_factor=round_money(profit_factor),
        best_day=best_day,
        worst_day=worst_day,
    )
    logger.debug(
        "Summary over %d trades: net=%s win_rate=%s", total, summary.net_pnl, summary.win_rate
    )
    return summary


def summary_for_month(
    trades: Iterable[TradeLike], year: int, month: int
) -> MetricsSummary:
    """Summary restricted to one calendar month."""
    return compute_summary(in_month(coerce_trades(trades), year, month))


def max_drawdown(trades: Iterable[Trade]) -> Decimal:
    """Largest peak-to-trough fall of cumulative P&L.

    The peak starts at zero, so an opening losing streak counts as
    drawdown.  Trades are scanned in (date, time) order.
    """
    running = ZERO
    peak = ZERO
    worst = ZERO
    for trade in chronological(trades):
        running += trade.pnl
        if running > peak:
            peak = running
        drawdown = peak - running
        if drawdown > worst:
            worst = drawdown
    return worst


def daily_pnl(trades: Iterable[Trade]) -> dict[date, Decimal]:
    """Net P&L per trading day, keyed by real dates."""
    by_day: dict[date, Decimal] = defaultdict(lambda: ZERO)
    for trade in trades:
        by_day[trade.date] += trade.pnl
    return dict(by_day)


def _day_extrema(trades: list[Trade]) -> tuple[DayPnl, DayPnl]:
    best_pnl = Decimal("-Infinity")
    worst_pnl = Decimal("Infinity")
    best_date: date | None = None
    worst_date: date | None = None

    for day, pnl in sorted(daily_pnl(trades).items()):
        if pnl > best_pnl:
            best_pnl, best_date = pnl, day
        if pnl < worst_pnl:
            worst_pnl, worst_date = pnl, day

    best = DayPnl(best_date, round_money(best_pnl)) if best_date else DayPnl()
    worst = DayPnl(worst_date, round_money(worst_pnl)) if worst_date else DayPnl()
    return best, worst

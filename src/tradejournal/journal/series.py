"""Equity-curve and volume time series for charting.

Buckets trades by trading day (the calendar ``date`` of the trade, not
its timestamp), orders days by their real date value and runs a
cumulative P&L sum over them.  Days without trades are absent: the
series is sparse, never zero-filled.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Union

from ..core.enums import BucketMode, ChartView
from ..core.models import ZERO, round_money
from .filters import TradeLike, chronological, coerce_trades, within_window
from .metrics import daily_pnl

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EquityPoint:
    date: date
    pnl: float
    cumulative_pnl: float
    time: str | None = None  # Only set in per-trade mode

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "date": self.date.isoformat(),
            "pnl": self.pnl,
            "cumulativePnl": self.cumulative_pnl,
        }
        if self.time is not None:
            out["time"] = self.time
        return out


@dataclass(frozen=True)
class EquityCurve:
    points: list[EquityPoint] = field(default_factory=list)
    final_pnl: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "equityCurve": [p.to_dict() for p in self.points],
            "finalPnl": self.final_pnl,
        }


@dataclass(frozen=True)
class VolumePoint:
    date: date
    value: int

    def to_dict(self) -> dict[str, Any]:
        return {"date": self.date.isoformat(), "value": self.value}


@dataclass(frozen=True)
class ChartPayload:
    """Chart-ready series: ``{title, chartType, data: [{date, value}]}``."""

    title: str
    chart_type: str  # "line" or "bar"
    data: list[dict[str, Any]]

    def to_dict(self) -> dict[str, Any]:
        return {"title": self.title, "chartType": self.chart_type, "data": self.data}


def build_equity_series(
    trades: Iterable[TradeLike],
    bucket_mode: BucketMode | str = BucketMode.DAILY,
    window_days: int | None = None,
    *,
    today: date | None = None,
) -> EquityCurve:
    """Cumulative P&L curve.

    Parameters
    ----------
    trades : iterable of Trade or mapping
        Trades in any order.
    bucket_mode : BucketMode or str
        ``daily`` sums P&L per trading day; ``trade`` emits one point
        per trade in (date, time) order.
    window_days : int | None
        Keep only trades dated on or after ``today - window_days``.
        ``None`` keeps everything.
    today : date | None
        Anchor for the window.  Defaults to the current date.
    """
    mode = BucketMode(bucket_mode)
    items = within_window(coerce_trades(trades), window_days, today)

    running = ZERO
    points: list[EquityPoint] = []

    if mode == BucketMode.DAILY:
        for day, pnl in sorted(daily_pnl(items).items()):
            running += pnl
            points.append(EquityPoint(day, round_money(pnl), round_money(running)))
    else:
        for trade in chronological(items):
            running += trade.pnl
            points.append(
                EquityPoint(
                    trade.date,
                    round_money(trade.pnl),
                    round_money(running),
                    time=trade.time,
                )
            )

    logger.debug("Equity series (%s): %d points", mode.value, len(points))
    return EquityCurve(points=points, final_pnl=round_money(running))


def build_volume_series(
    trades: Iterable[TradeLike],
    window_days: int | None = None,
    *,
    today: date | None = None,
) -> list[VolumePoint]:
    """Traded quantity per day, ascending by date.  No running total."""
    items = within_window(coerce_trades(trades), window_days, today)
    by_day: dict[date, int] = defaultdict(int)
    for trade in items:
        by_day[trade.date] += trade.quantity
    return [VolumePoint(day, qty) for day, qty in sorted(by_day.items())]


_CHARTS = {
    ChartView.PNL: ("Cumulative P&L", "line"),
    ChartView.VOLUME: ("Trading Volume", "bar"),
}


def chart_payload(
    view: ChartView | str,
    points: Union[EquityCurve, Sequence[EquityPoint], Sequence[VolumePoint]],
) -> ChartPayload:
    """Shape a series for the chart widget.

    The P&L view plots cumulative P&L as a line; the volume view plots
    daily quantity as bars.
    """
    view = ChartView(view)
    title, chart_type = _CHARTS[view]
    series = points.points if isinstance(points, EquityCurve) else points

    data: list[dict[str, Any]] = []
    for p in series:
        if isinstance(p, EquityPoint):
            value: float | int = p.cumulative_pnl
        else:
            value = p.value
        data.append({"date": p.date.isoformat(), "value": value})
    return ChartPayload(title=title, chart_type=chart_type, data=data)

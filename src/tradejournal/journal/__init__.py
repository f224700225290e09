"""Trade journal analytics.

Pure, stateless computations over a trade list the caller has already
scoped (user, date range, status).  Nothing here touches storage.

Key components
--------------
compute_summary       Win rate, P&L, profit factor, drawdown, best/worst day
build_equity_series   Daily or per-trade cumulative P&L curve
build_volume_series   Traded quantity per day
chart_payload         Chart-ready ``{title, chartType, data}`` series
analyze_behavior      Overtrading, revenge trades, mood/setup breakdown, insights
ensure_within_daily_limit  Per-day logging guard
"""

from .behavior import BehaviorReport, OvertradingDay, analyze_behavior
from .filters import coerce_trades, ensure_within_daily_limit, in_month, within_window
from .metrics import DayPnl, MetricsSummary, compute_summary, summary_for_month
from .series import (
    ChartPayload,
    EquityCurve,
    EquityPoint,
    VolumePoint,
    build_equity_series,
    build_volume_series,
    chart_payload,
)

__all__ = [
    "BehaviorReport",
    "ChartPayload",
    "DayPnl",
    "EquityCurve",
    "EquityPoint",
    "MetricsSummary",
    "OvertradingDay",
    "VolumePoint",
    "analyze_behavior",
    "build_equity_series",
    "build_volume_series",
    "chart_payload",
    "coerce_trades",
    "compute_summary",
    "ensure_within_daily_limit",
    "in_month",
    "summary_for_month",
    "within_window",
]

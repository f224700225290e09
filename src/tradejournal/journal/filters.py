"""Trade-set helpers shared by the analytics.

The analytics never query storage; callers hand over an already-scoped
list.  These helpers cover the remaining input concerns: coercing store
documents into ``Trade`` objects (failing fast on malformed records),
trailing-window and calendar-month filters, chronological ordering and
the per-day logging limit.
"""

from __future__ import annotations

import calendar
import logging
from collections.abc import Iterable, Mapping
from datetime import date, timedelta
from typing import Any, Union

from pydantic import ValidationError

from ..core.enums import TradeStatus
from ..core.errors import DailyTradeLimitExceeded, MalformedTradeError
from ..core.models import Trade, parse_trade_date

logger = logging.getLogger(__name__)

TradeLike = Union[Trade, Mapping[str, Any]]


def coerce_trades(items: Iterable[TradeLike]) -> list[Trade]:
    """Validate every input as a ``Trade``.

    ``Trade`` instances pass through; mappings are validated with the
    model.  The first record that fails validation aborts the call with
    :class:`MalformedTradeError` rather than being skipped, since a
    silently dropped trade would skew every aggregate.
    """
    trades: list[Trade] = []
    for index, item in enumerate(items):
        if isinstance(item, Trade):
            trades.append(item)
            continue
        if not isinstance(item, Mapping):
            raise MalformedTradeError(
                f"expected a trade mapping, got {type(item).__name__}",
                index=index,
            )
        try:
            trades.append(Trade.model_validate(item))
        except ValidationError as exc:
            trade_id = item.get("id") or item.get("_id")
            raise MalformedTradeError(
                _describe(exc),
                index=index,
                trade_id=str(trade_id) if trade_id else None,
            ) from exc
    return trades


def _describe(exc: ValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ())) or "<root>"
        parts.append(f"{loc}: {err.get('msg', 'invalid')}")
    return "; ".join(parts)


def closed_only(trades: Iterable[Trade]) -> list[Trade]:
    return [t for t in trades if t.status == TradeStatus.CLOSED]


def chronological(trades: Iterable[Trade]) -> list[Trade]:
    """Stable sort ascending by (date, time)."""
    return sorted(trades, key=lambda t: (t.date, t.time))


def window_start(days: int, today: date | None = None) -> date:
    """First calendar day inside a trailing ``days`` window."""
    anchor = today or date.today()
    return anchor - timedelta(days=days)


def within_window(
    trades: Iterable[Trade],
    days: int | None,
    today: date | None = None,
) -> list[Trade]:
    """Keep trades dated on or after ``today - days``.

    ``days=None`` disables the filter.
    """
    if days is None:
        return list(trades)
    if days < 0:
        raise ValueError("days must be >= 0")
    start = window_start(days, today)
    return [t for t in trades if t.date >= start]


def month_bounds(year: int, month: int) -> tuple[date, date]:
    if not 1 <= month <= 12:
        raise ValueError(f"month must be 1-12, got {month}")
    last = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last)


def in_month(trades: Iterable[Trade], year: int, month: int) -> list[Trade]:
    start, end = month_bounds(year, month)
    return [t for t in trades if start <= t.date <= end]


def ensure_within_daily_limit(
    existing: Iterable[TradeLike],
    trade_date: date | str,
    limit: int = 10,
) -> int:
    """Guard a new entry against the per-day logging limit.

    Counts the trades already logged on ``trade_date`` and raises
    :class:`DailyTradeLimitExceeded` when that count has reached
    ``limit``.  Returns the current count otherwise.
    """
    day = parse_trade_date(trade_date)
    count = sum(1 for t in coerce_trades(existing) if t.date == day)
    if count >= limit:
        logger.info(
            "Daily trade limit reached for %s (%d/%d)", day.isoformat(), count, limit
        )
        raise DailyTradeLimitExceeded(current_count=count, limit=limit)
    return count

"""Tests for trade-set helpers: coercion, windows and the daily limit."""

from datetime import date

import pytest

from tradejournal.core.enums import TradeStatus
from tradejournal.core.errors import DailyTradeLimitExceeded, MalformedTradeError
from tradejournal.journal.filters import (
    chronological,
    closed_only,
    coerce_trades,
    ensure_within_daily_limit,
    in_month,
    month_bounds,
    window_start,
    within_window,
)


class TestCoerceTrades:
    def test_trades_pass_through(self, make_trade):
        trade = make_trade(5)
        assert coerce_trades([trade])[0] is trade

    def test_mixed_input(self, make_trade):
        items = [make_trade(5), {"date": "2024-01-02", "pnl": "7.5"}]
        trades = coerce_trades(items)
        assert [str(t.pnl) for t in trades] == ["5", "7.5"]

    def test_error_carries_position_and_id(self):
        with pytest.raises(MalformedTradeError) as exc_info:
            coerce_trades([{"_id": "abc", "date": "not-a-date", "pnl": 1}])
        err = exc_info.value
        assert err.index == 0
        assert err.trade_id == "abc"
        assert "date" in str(err)

    def test_bad_quantity_rejected(self):
        with pytest.raises(MalformedTradeError, match="quantity"):
            coerce_trades([{"date": "2024-01-02", "pnl": 1, "quantity": 0}])


class TestOrdering:
    def test_chronological_by_date_then_time(self, make_trade):
        trades = [
            make_trade(1, "2024-01-02", "09:00"),
            make_trade(2, "2024-01-01", "15:00"),
            make_trade(3, "2024-01-01", "09:30"),
        ]
        assert [int(t.pnl) for t in chronological(trades)] == [3, 2, 1]

    def test_stable_for_equal_keys(self, make_trade):
        trades = [make_trade(i, "2024-01-01", "09:00") for i in range(5)]
        assert [int(t.pnl) for t in chronological(trades)] == [0, 1, 2, 3, 4]

    def test_closed_only(self, make_trade):
        trades = [make_trade(1), make_trade(0, status=TradeStatus.OPEN)]
        assert len(closed_only(trades)) == 1


class TestWindow:
    def test_window_start(self):
        assert window_start(30, date(2024, 3, 31)) == date(2024, 3, 1)

    def test_boundary_inclusive(self, make_trade):
        today = date(2024, 3, 31)
        trades = [make_trade(1, "2024-02-29"), make_trade(1, "2024-03-01")]
        kept = within_window(trades, 30, today)
        assert [t.date for t in kept] == [date(2024, 3, 1)]

    def test_zero_days_keeps_today(self, make_trade):
        today = date(2024, 3, 31)
        trades = [make_trade(1, "2024-03-30"), make_trade(1, "2024-03-31")]
        assert len(within_window(trades, 0, today)) == 1

    def test_none_disables(self, make_trade):
        trades = [make_trade(1, "1999-01-01")]
        assert within_window(trades, None) == trades

    def test_negative_rejected(self, make_trade):
        with pytest.raises(ValueError):
            within_window([make_trade(1)], -1)


class TestMonth:
    def test_leap_february(self):
        assert month_bounds(2024, 2) == (date(2024, 2, 1), date(2024, 2, 29))

    def test_in_month(self, make_trade):
        trades = [make_trade(1, "2023-12-31"), make_trade(1, "2024-1-1")]
        assert [t.date.year for t in in_month(trades, 2024, 1)] == [2024]

    def test_bad_month(self):
        with pytest.raises(ValueError):
            month_bounds(2024, 0)


class TestDailyLimit:
    def test_below_limit_returns_count(self, make_trade):
        existing = [make_trade(1, "2024-03-04"), make_trade(1, "2024-03-05")]
        assert ensure_within_daily_limit(existing, "2024-03-04", limit=2) == 1

    def test_at_limit_raises(self, make_trade):
        existing = [make_trade(1, "2024-03-04", f"09:0{i}") for i in range(3)]
        with pytest.raises(DailyTradeLimitExceeded) as exc_info:
            ensure_within_daily_limit(existing, date(2024, 3, 4), limit=3)
        err = exc_info.value
        assert err.current_count == 3
        assert err.limit == 3
        assert "3" in err.user_message

    def test_other_days_ignored(self, make_trade):
        existing = [make_trade(1, "2024-03-05") for _ in range(20)]
        assert ensure_within_daily_limit(existing, "2024-3-4") == 0

    def test_default_limit_ten(self, make_trade):
        existing = [make_trade(1, "2024-03-04") for _ in range(10)]
        with pytest.raises(DailyTradeLimitExceeded):
            ensure_within_daily_limit(existing, "2024-03-04")

"""Shared fixtures for the tradejournal test suite."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Any

import pytest

from tradejournal.core.models import Trade


def build_trade(
    pnl: float | str = 0,
    day: date | str = "2024-01-15",
    time: str = "10:00",
    **fields: Any,
) -> Trade:
    """Trade with the given precomputed P&L and sensible defaults."""
    payload: dict[str, Any] = {
        "date": day,
        "time": time,
        "instrument": "RELIANCE",
        "side": "LONG",
        "entry_price": Decimal("100"),
        "exit_price": Decimal("100"),
        "quantity": 1,
        "pnl": Decimal(str(pnl)),
    }
    payload.update(fields)
    return Trade.model_validate(payload)


@pytest.fixture
def make_trade():
    """Factory fixture: ``make_trade(pnl, day, time, **fields)``."""
    return build_trade


@pytest.fixture
def sample_trades() -> list[Trade]:
    """A small mixed week of trades."""
    return [
        build_trade(100, "2024-01-15", "09:30", setup="breakout", mood="calm",
                    stop_loss=Decimal("95"), rr_ratio=Decimal("2")),
        build_trade(-30, "2024-01-15", "11:00", setup="scalp", mood="fomo",
                    rr_ratio=Decimal("0.5"), stop_loss=Decimal("99")),
        build_trade(-50, "2024-01-16", "10:00", setup="trend", mood="anxious",
                    followed_plan=False),
        build_trade(80, "2024-01-17", "14:15", setup="breakout", mood="confident",
                    stop_loss=Decimal("90"), rr_ratio=Decimal("1.5")),
    ]

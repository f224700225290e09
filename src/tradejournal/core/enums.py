"""Enumerations used across the trade journal."""

from __future__ import annotations

from enum import Enum


class Side(str, Enum):
    LONG = "LONG"
    SHORT = "SHORT"

    @classmethod
    def normalize(cls, token: str) -> Side:
        """Map broker verbs onto a position side.

        ``BUY``/``BOUGHT``/``LONG`` become LONG and ``SELL``/``SOLD``/``SHORT``
        become SHORT.  Anything else raises ``ValueError``.
        """
        key = token.strip().upper()
        if key in _LONG_TOKENS:
            return cls.LONG
        if key in _SHORT_TOKENS:
            return cls.SHORT
        raise ValueError(f"Unrecognised side token: {token!r}")

    @property
    def multiplier(self) -> int:
        return 1 if self is Side.LONG else -1


_LONG_TOKENS = frozenset({"BUY", "BOUGHT", "LONG"})
_SHORT_TOKENS = frozenset({"SELL", "SOLD", "SHORT"})


class Segment(str, Enum):
    EQUITY = "equity"
    FUTURES = "futures"
    OPTIONS = "options"


class Setup(str, Enum):
    BREAKOUT = "breakout"
    TREND = "trend"
    REVERSAL = "reversal"
    SCALP = "scalp"
    OTHER = "other"


class Mood(str, Enum):
    CALM = "calm"
    FOMO = "fomo"
    REVENGE = "revenge"
    ANXIOUS = "anxious"
    CONFIDENT = "confident"
    NEUTRAL = "neutral"


class TradeStatus(str, Enum):
    OPEN = "OPEN"
    CLOSED = "CLOSED"


class TradeOutcome(str, Enum):
    """Win / loss / break-even classification by P&L sign."""

    WIN = "win"
    LOSS = "loss"
    BREAKEVEN = "breakeven"


class BucketMode(str, Enum):
    DAILY = "daily"  # One point per trading day
    TRADE = "trade"  # One point per trade


class ChartView(str, Enum):
    PNL = "pnl"
    VOLUME = "volume"


WEEKDAY_NAMES = [
    "Sunday",
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
]

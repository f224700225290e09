"""Core types, settings and errors shared by the journal packages."""

from .enums import (
    BucketMode,
    ChartView,
    Mood,
    Segment,
    Setup,
    Side,
    TradeOutcome,
    TradeStatus,
)
from .models import Trade

__all__ = [
    "BucketMode",
    "ChartView",
    "Mood",
    "Segment",
    "Setup",
    "Side",
    "Trade",
    "TradeOutcome",
    "TradeStatus",
]

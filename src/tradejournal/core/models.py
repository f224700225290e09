"""Core domain models used across the trade journal.

``Trade`` is the read-only record the analytics consume.  It is owned
and persisted by the trade store; ``pnl`` and ``rr_ratio`` arrive
precomputed and are treated as facts, never recomputed from prices.
"""

from __future__ import annotations

import datetime as dt
import re
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from .enums import Mood, Segment, Setup, Side, TradeOutcome, TradeStatus

CENT = Decimal("0.01")
ZERO = Decimal("0")

_DATE_RE = re.compile(r"^\s*(\d{4})-(\d{1,2})-(\d{1,2})")
_TIME_RE = re.compile(r"^([0-1]?[0-9]|2[0-3]):([0-5][0-9])$")


def quantize_money(value: Decimal) -> Decimal:
    """Round half-up to whole cents."""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def round_money(value: Decimal | float | int) -> float:
    """Emit a monetary value rounded to 2 decimal places."""
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return float(quantize_money(value))


def parse_trade_date(value: Any) -> dt.date:
    """Coerce a trading-day key into a real ``date``.

    Accepts ``date``/``datetime`` instances and ``YYYY-M-D`` strings with
    or without zero padding (a trailing time component is ignored), so
    ``"2024-2-1"`` and ``"2024-02-01T00:00:00Z"`` both parse.
    """
    if isinstance(value, dt.datetime):
        return value.date()
    if isinstance(value, dt.date):
        return value
    if isinstance(value, str):
        m = _DATE_RE.match(value)
        if m:
            year, month, day = (int(g) for g in m.groups())
            return dt.date(year, month, day)
    raise ValueError(f"Invalid trade date: {value!r}")


class Trade(BaseModel):
    """A journalled trade as supplied by the trade store.

    Field names are snake_case; camelCase aliases (``entryPrice``,
    ``followedPlan``, ``rrRatio`` ...) are accepted on input so store
    documents validate directly.
    """

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
    )

    id: str | None = None
    user_id: str = ""
    date: dt.date
    time: str = "00:00"  # HH:MM
    instrument: str = ""
    segment: Segment = Segment.EQUITY
    side: Side = Side.LONG
    setup: Setup = Setup.OTHER
    entry_price: Decimal = ZERO
    exit_price: Decimal | None = None
    quantity: int = Field(default=1, ge=1)
    stop_loss: Decimal | None = None
    target: Decimal | None = None
    mood: Mood = Mood.NEUTRAL
    followed_plan: bool = True
    status: TradeStatus = TradeStatus.CLOSED
    notes: str = ""

    # Derived by the trade store at write time
    pnl: Decimal
    rr_ratio: Decimal = ZERO

    # ------------------------------------------------------------------ #
    # Input normalisation                                                  #
    # ------------------------------------------------------------------ #

    @field_validator("date", mode="before")
    @classmethod
    def _parse_date(cls, v: Any) -> dt.date:
        return parse_trade_date(v)

    @field_validator("time", mode="before")
    @classmethod
    def _parse_time(cls, v: Any) -> str:
        if not isinstance(v, str):
            raise ValueError("Time must be in HH:MM format")
        m = _TIME_RE.match(v.strip())
        if not m:
            raise ValueError("Time must be in HH:MM format")
        return f"{int(m.group(1)):02d}:{m.group(2)}"

    @field_validator("side", mode="before")
    @classmethod
    def _parse_side(cls, v: Any) -> Any:
        if isinstance(v, str):
            return Side.normalize(v)
        return v

    @field_validator("instrument", mode="before")
    @classmethod
    def _upper_instrument(cls, v: Any) -> Any:
        return v.strip().upper() if isinstance(v, str) else v

    @field_validator("segment", "setup", "mood", mode="before")
    @classmethod
    def _lower_tag(cls, v: Any) -> Any:
        return v.strip().lower() if isinstance(v, str) else v

    @field_validator("status", mode="before")
    @classmethod
    def _upper_status(cls, v: Any) -> Any:
        return v.strip().upper() if isinstance(v, str) else v

    # ------------------------------------------------------------------ #
    # Computed properties                                                  #
    # ------------------------------------------------------------------ #

    @property
    def opened_at(self) -> dt.datetime:
        """Trading day and entry time combined."""
        hh, mm = self.time.split(":")
        return dt.datetime.combine(self.date, dt.time(int(hh), int(mm)))

    @property
    def outcome(self) -> TradeOutcome:
        if self.pnl > 0:
            return TradeOutcome.WIN
        if self.pnl < 0:
            return TradeOutcome.LOSS
        return TradeOutcome.BREAKEVEN

    @property
    def has_stop_loss(self) -> bool:
        return bool(self.stop_loss)

    # ------------------------------------------------------------------ #
    # Trade-store formula                                                  #
    # ------------------------------------------------------------------ #

    @classmethod
    def from_store(cls, **fields: Any) -> Trade:
        """Build a trade, deriving ``pnl`` and ``rr_ratio`` from prices.

        Reproduces the store's write-time formula for callers that only
        hold the raw fields.  Explicit ``pnl``/``rr_ratio`` values are
        overwritten.
        """
        draft = cls.model_validate({**fields, "pnl": ZERO, "rr_ratio": ZERO})
        return draft.model_copy(
            update={
                "pnl": compute_pnl(
                    draft.side,
                    draft.entry_price,
                    draft.exit_price,
                    draft.quantity,
                    draft.status,
                ),
                "rr_ratio": compute_rr_ratio(
                    draft.entry_price, draft.stop_loss, draft.target
                ),
            }
        )


def compute_pnl(
    side: Side,
    entry_price: Decimal,
    exit_price: Decimal | None,
    quantity: int,
    status: TradeStatus = TradeStatus.CLOSED,
) -> Decimal:
    """Realised P&L, zero while the trade is open."""
    if status != TradeStatus.CLOSED or exit_price is None:
        return ZERO
    raw = (exit_price - entry_price) * side.multiplier * quantity
    return quantize_money(raw)


def compute_rr_ratio(
    entry_price: Decimal,
    stop_loss: Decimal | None,
    target: Decimal | None,
) -> Decimal:
    """Planned reward over planned risk, zero when either leg is unset."""
    if not stop_loss or not target:
        return ZERO
    risk = abs(entry_price - stop_loss)
    if risk <= 0:
        return ZERO
    reward = abs(target - entry_price)
    return quantize_money(reward / risk)

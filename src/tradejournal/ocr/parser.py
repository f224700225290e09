"""Trade-field extraction from OCR text.

Deterministic regex matching only.  The text is upper-cased once, then
each field walks its own ordered list of ``(pattern, extractor)`` rules
and takes the first rule that matches; later rules for that field are
not tried.  Rule order encodes priority (an exchange-prefixed symbol
beats a ``SYMBOL:`` label, which beats an index name) and must not be
reshuffled.

A field with no matching rule stays ``None``.  Nothing is inferred or
defaulted, so downstream auto-fill can tell "not on the screenshot"
from a real value.

Known limitation: the last-resort entry-price rule takes the first bare
``₹ <amount>`` in the text, which on a screenshot with several rupee
amounts and no price label may be the wrong one.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Sequence
from dataclasses import dataclass, fields
from decimal import Decimal, InvalidOperation
from typing import Any

from ..core.enums import Side

Extractor = Callable[[re.Match], Any]
Rule = tuple[re.Pattern, Extractor]

_NUM = r"(\d[\d,]*(?:\.\d+)?)"
_SEP = r"\s*[:\-]?\s*"
_RUPEE = r"₹?\s*"


def _price(m: re.Match[str]) -> Decimal | None:
    try:
        return Decimal(m.group(1).replace(",", ""))
    except InvalidOperation:
        return None


def _int(m: re.Match[str]) -> int:
    return int(m.group(1))


def _token(m: re.Match[str]) -> str:
    return m.group(1).strip()


def _side(m: re.Match[str]) -> Side:
    return Side.normalize(m.group(1))


def _labelled_price(label: str) -> re.Pattern[str]:
    return re.compile(label + _SEP + _RUPEE + _NUM)


# ---------------------------------------------------------------------------
# Ordered rules per field (first match wins)
# ---------------------------------------------------------------------------

SIDE_RULES: Sequence[Rule] = (
    (re.compile(r"\b(BUY|SELL|LONG|SHORT|BOUGHT|SOLD)\b"), _side),
)

SYMBOL_RULES: Sequence[Rule] = (
    (re.compile(r"(?:NSE|BSE):\s*([A-Z0-9]+)"), _token),          # NSE:RELIANCE
    (re.compile(r"SYMBOL" + _SEP + r"([A-Z0-9]+)"), _token),      # Symbol: RELIANCE
    (re.compile(r"SCRIP" + _SEP + r"([A-Z0-9]+)"), _token),       # Scrip: INFY
    (re.compile(r"\b(NIFTY|BANKNIFTY|FINNIFTY)\s*\d*"), _token),  # Index names
    (re.compile(r"\b([A-Z]{2,})\s+(?:CE|PE|FUT)\b"), _token),         # TATAMOTORS CE
)

QUANTITY_RULES: Sequence[Rule] = (
    (re.compile(r"QTY" + _SEP + r"(\d+)"), _int),
    (re.compile(r"QUANTITY" + _SEP + r"(\d+)"), _int),
    (re.compile(r"LOT\s*SIZE" + _SEP + r"(\d+)"), _int),
    (re.compile(r"LOTS" + _SEP + r"(\d+)"), _int),
    (re.compile(r"(\d+)\s*(?:SHARES|QTY|LOTS)\b"), _int),
)

ENTRY_RULES: Sequence[Rule] = (
    (_labelled_price(r"(?:ENTRY|BUY|PURCHASE|AVG)\s*PRICE"), _price),
    (_labelled_price(r"\b(?:PRICE|RATE)"), _price),
    (re.compile(r"₹\s*" + _NUM), _price),
)

EXIT_RULES: Sequence[Rule] = (
    (_labelled_price(r"(?:EXIT|SELL)\s*PRICE"), _price),
    (_labelled_price(r"SOLD\s*AT"), _price),
)

STOP_LOSS_RULES: Sequence[Rule] = (
    (_labelled_price(r"STOP\s*-?\s*LOSS"), _price),
    (_labelled_price(r"\bSL"), _price),
    (_labelled_price(r"TRIGGER\s*PRICE"), _price),
)

TARGET_RULES: Sequence[Rule] = (
    (_labelled_price(r"\bTARGET(?:\s*PRICE)?"), _price),
    (_labelled_price(r"\bTGT"), _price),
    (_labelled_price(r"\bTP"), _price),
)

TIMESTAMP_RULES: Sequence[Rule] = (
    (
        re.compile(
            r"\b(\d{1,2}[-/]\d{1,2}[-/]\d{2,4}\s+\d{1,2}:\d{2}(?::\d{2})?(?:\s*[AP]M)?)"
        ),
        _token,
    ),
    (re.compile(r"(\d{4}-\d{2}-\d{2}\s+\d{2}:\d{2}(?::\d{2})?)"), _token),
    (re.compile(r"\b(?:DATE|TIME|TIMESTAMP)" + _SEP + r"(\d[0-9/\-: \t]*)"), _token),
)


def first_match(text: str, rules: Sequence[Rule]) -> Any:
    """Value of the first rule whose pattern matches ``text``, else None."""
    for pattern, extract in rules:
        m = pattern.search(text)
        if m:
            return extract(m)
    return None


# ---------------------------------------------------------------------------
# Result
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ExtractedTradeFields:
    """Fields lifted from one screenshot.  Every field is independently
    nullable; ``raw_text`` is always the untouched OCR output."""

    symbol: str | None = None
    side: Side | None = None
    entry_price: Decimal | None = None
    exit_price: Decimal | None = None
    quantity: int | None = None
    stop_loss: Decimal | None = None
    target: Decimal | None = None
    timestamp: str | None = None
    raw_text: str = ""

    @property
    def fields_extracted(self) -> int:
        """Number of parsed (non-null) fields, excluding the raw text."""
        return sum(
            1
            for f in fields(self)
            if f.name != "raw_text" and getattr(self, f.name) is not None
        )

    def extracted_dict(self) -> dict[str, Any]:
        """Parsed fields with camelCase keys and JSON-friendly values."""
        return {
            "symbol": self.symbol,
            "side": self.side.value if self.side else None,
            "entryPrice": _num(self.entry_price),
            "exitPrice": _num(self.exit_price),
            "quantity": self.quantity,
            "stopLoss": _num(self.stop_loss),
            "target": _num(self.target),
            "timestamp": self.timestamp,
        }

    def to_dict(self) -> dict[str, Any]:
        return {**self.extracted_dict(), "rawText": self.raw_text}


def _num(value: Decimal | None) -> float | None:
    return float(value) if value is not None else None


def extract_trade_fields(ocr_text: str) -> ExtractedTradeFields:
    """Parse trade fields out of raw OCR text.

    Never raises on unrecognised input; a text with no trade details
    yields every field ``None``.
    """
    text = (ocr_text or "").upper()
    return ExtractedTradeFields(
        symbol=first_match(text, SYMBOL_RULES),
        side=first_match(text, SIDE_RULES),
        entry_price=first_match(text, ENTRY_RULES),
        exit_price=first_match(text, EXIT_RULES),
        quantity=first_match(text, QUANTITY_RULES),
        stop_loss=first_match(text, STOP_LOSS_RULES),
        target=first_match(text, TARGET_RULES),
        timestamp=first_match(text, TIMESTAMP_RULES),
        raw_text=ocr_text or "",
    )

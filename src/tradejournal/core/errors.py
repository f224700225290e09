"""Custom exception hierarchy for the trade journal."""

from __future__ import annotations


class JournalError(Exception):
    """Base exception for all trade journal errors."""

    user_message = "Something went wrong. Please try again."


# --- Configuration ---
class ConfigError(JournalError):
    """Invalid or missing configuration."""


# --- Analytics ---
class AnalyticsError(JournalError):
    """Analytics computation failure."""

    user_message = "Failed to load analytics. Please try again."


class MalformedTradeError(AnalyticsError):
    """A trade record is missing a field the analytics depend on."""

    def __init__(self, reason: str, *, index: int | None = None, trade_id: str | None = None):
        self.reason = reason
        self.index = index
        self.trade_id = trade_id
        where = []
        if index is not None:
            where.append(f"index {index}")
        if trade_id:
            where.append(f"id {trade_id}")
        prefix = f"Malformed trade ({', '.join(where)})" if where else "Malformed trade"
        super().__init__(f"{prefix}: {reason}")


class DailyTradeLimitExceeded(AnalyticsError):
    """The configured number of trades for a calendar day is already logged."""

    def __init__(self, current_count: int, limit: int):
        self.current_count = current_count
        self.limit = limit
        super().__init__(
            f"Daily trade limit exceeded. Maximum {limit} trades per day allowed."
        )
        self.user_message = str(self)


# --- Screenshot scanning ---
class ScanError(JournalError):
    """Screenshot scanning failure."""

    user_message = (
        "OCR processing failed. Please enter the trade details manually."
    )


class ImageValidationError(ScanError):
    """Upload rejected before any processing started."""


class UnsupportedFormatError(ImageValidationError):
    """Upload content type is not an accepted image format."""


class ImageTooLargeError(ImageValidationError):
    """Upload exceeds the maximum accepted size."""

    def __init__(self, size: int, max_size: int):
        self.size = size
        self.max_size = max_size
        super().__init__(
            f"File too large ({size} bytes). Maximum size: "
            f"{max_size // (1024 * 1024)}MB"
        )


class PreprocessingError(ScanError):
    """The image could not be decoded or normalised."""


class OCRUnavailableError(ScanError):
    """The OCR engine failed to start or crashed."""

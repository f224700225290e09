"""OCR engine boundary.

The scan pipeline depends only on the :class:`OcrEngine` protocol: an
image path in, text out.  :class:`TesseractEngine` is the production
implementation over pytesseract; tests substitute a fake.

Engine availability is checked with :func:`check_engine_health`, whose
result is memoised in a caller-owned :class:`HealthCache` so repeated
checks within the TTL do not spawn the OCR binary again.
"""

from __future__ import annotations

import logging
import tempfile
import threading
import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol, runtime_checkable

import pytesseract
from PIL import Image

from ..core.errors import OCRUnavailableError

logger = logging.getLogger(__name__)

DEFAULT_TESSERACT_CMD = "tesseract"

_CMD_LOCK = threading.RLock()


@runtime_checkable
class OcrEngine(Protocol):
    """Text recognition over a preprocessed image file."""

    def extract_text(self, image_path: Path) -> str: ...

    def version(self) -> str: ...


class TesseractEngine:
    """Tesseract via pytesseract.

    pytesseract reads the binary path from a module attribute, so each
    call swaps this engine's path in under a lock and restores the
    previous one afterwards.  Engines with different binaries never see
    each other's setting.

    Parameters
    ----------
    language : str
        Tesseract language pack.  Default ``"eng"``.
    tesseract_cmd : str | None
        Path to the ``tesseract`` binary when it is not on ``PATH``.
    """

    def __init__(self, *, language: str = "eng", tesseract_cmd: str | None = None) -> None:
        self._language = language
        self._cmd = tesseract_cmd or DEFAULT_TESSERACT_CMD

    @property
    def tesseract_cmd(self) -> str:
        return self._cmd

    @contextmanager
    def _binary(self) -> Iterator[None]:
        with _CMD_LOCK:
            previous = pytesseract.pytesseract.tesseract_cmd
            pytesseract.pytesseract.tesseract_cmd = self._cmd
            try:
                yield
            finally:
                pytesseract.pytesseract.tesseract_cmd = previous

    def extract_text(self, image_path: Path) -> str:
        try:
            with self._binary():
                return pytesseract.image_to_string(str(image_path), lang=self._language)
        except (pytesseract.TesseractNotFoundError, pytesseract.TesseractError, OSError, RuntimeError) as exc:
            raise OCRUnavailableError(f"OCR extraction failed: {exc}") from exc

    def version(self) -> str:
        # get_tesseract_version memoises its first result; query this binary
        query_version = getattr(
            pytesseract.get_tesseract_version, "__wrapped__", pytesseract.get_tesseract_version
        )
        try:
            with self._binary():
                return str(query_version())
        except (pytesseract.TesseractNotFoundError, OSError) as exc:
            raise OCRUnavailableError(f"Tesseract not available: {exc}") from exc


# ---------------------------------------------------------------------------
# Health check
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class EngineHealth:
    healthy: bool
    detail: str
    checked_at: float

    def to_dict(self) -> dict[str, object]:
        return {
            "healthy": self.healthy,
            "status": "operational" if self.healthy else "unavailable",
            "detail": self.detail,
        }


class HealthCache:
    """Holds the last health check result for ``ttl_seconds``.

    Owned by whoever wires the engine (one per app, one per test), so
    state never leaks between callers.
    """

    def __init__(
        self,
        ttl_seconds: float = 60.0,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._ttl = ttl_seconds
        self._clock = clock
        self._entry: EngineHealth | None = None

    def get(self) -> EngineHealth | None:
        if self._entry is None:
            return None
        if self._clock() - self._entry.checked_at >= self._ttl:
            self._entry = None
            return None
        return self._entry

    def put(self, health: EngineHealth) -> None:
        self._entry = health

    def reset(self) -> None:
        self._entry = None

    def now(self) -> float:
        return self._clock()


def check_engine_health(engine: OcrEngine, cache: HealthCache | None = None) -> EngineHealth:
    """Check the engine by recognising a blank 1x1 image."""
    if cache is not None:
        cached = cache.get()
        if cached is not None:
            return cached

    checked_at = cache.now() if cache is not None else time.monotonic()
    with tempfile.TemporaryDirectory(prefix="tradejournal-health-") as tmp:
        blank = Path(tmp) / "blank.png"
        Image.new("L", (1, 1), color=255).save(blank, format="PNG")
        try:
            engine.extract_text(blank)
            health = EngineHealth(True, engine.version(), checked_at)
        except OCRUnavailableError as exc:
            logger.warning("OCR engine unavailable: %s", exc)
            health = EngineHealth(False, str(exc), checked_at)

    if cache is not None:
        cache.put(health)
    return health

"""Screenshot-to-trade-fields scan pipeline.

Flow::

    validate upload -> write temp original -> preprocess -> OCR -> parse

Each stage needs the previous one's output, so they run strictly in
order.  Validation happens before anything touches disk; every temp
file created afterwards is removed on every exit path, success or
failure.  No retries: a failed stage surfaces immediately so the caller
can prompt for manual entry.

An all-``None`` parse is a valid outcome ("nothing recognisable on the
screenshot") and is distinct from :class:`OCRUnavailableError`.
"""

from __future__ import annotations

import logging
import tempfile
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from ..core.config import OcrConfig
from ..observability.logger import trace_scope
from .engine import EngineHealth, HealthCache, OcrEngine, TesseractEngine, check_engine_health
from .parser import ExtractedTradeFields, extract_trade_fields
from .preprocess import preprocess_file, validate_upload

logger = logging.getLogger(__name__)

_SUFFIXES = {
    "image/png": ".png",
    "image/jpeg": ".jpg",
    "image/jpg": ".jpg",
    "image/webp": ".webp",
}


@dataclass(frozen=True)
class Upload:
    """An uploaded screenshot as received from the request layer."""

    content: bytes
    content_type: str
    filename: str = ""

    @property
    def size(self) -> int:
        return len(self.content)

    @classmethod
    def from_path(cls, path: str | Path, content_type: str | None = None) -> Upload:
        path = Path(path)
        if content_type is None:
            ext = path.suffix.lower()
            content_type = {
                ".png": "image/png",
                ".jpg": "image/jpeg",
                ".jpeg": "image/jpeg",
                ".webp": "image/webp",
            }.get(ext, "application/octet-stream")
        return cls(content=path.read_bytes(), content_type=content_type, filename=path.name)


@dataclass(frozen=True)
class ScanResult:
    extracted: ExtractedTradeFields
    ocr_text_length: int
    raw_text_preview: str

    @property
    def fields_extracted(self) -> int:
        return self.extracted.fields_extracted

    def to_dict(self) -> dict[str, Any]:
        return {
            "extracted": self.extracted.extracted_dict(),
            "metadata": {
                "ocrTextLength": self.ocr_text_length,
                "fieldsExtracted": self.fields_extracted,
                "rawTextPreview": self.raw_text_preview,
            },
        }


class ScanPipeline:
    """Validate, normalise, recognise and parse a broker screenshot.

    Parameters
    ----------
    engine : OcrEngine | None
        Text recogniser.  Defaults to :class:`TesseractEngine` built from
        ``config``.
    config : OcrConfig | None
        Upload limits, image bound, temp directory and preview length.
    """

    def __init__(
        self,
        engine: OcrEngine | None = None,
        config: OcrConfig | None = None,
    ) -> None:
        self._config = config or OcrConfig()
        self._engine = engine if engine is not None else TesseractEngine(
            language=self._config.language,
            tesseract_cmd=self._config.tesseract_cmd,
        )
        self._health = HealthCache(self._config.health_ttl_seconds)

    def health(self) -> EngineHealth:
        """Engine availability, re-checked at most once per health TTL."""
        return check_engine_health(self._engine, self._health)

    def scan(self, upload: Upload) -> ScanResult:
        """Run the full pipeline on one upload.

        Raises
        ------
        ImageValidationError
            Upload rejected; nothing was written to disk.
        PreprocessingError
            The image could not be decoded.
        OCRUnavailableError
            The OCR engine failed.
        """
        with trace_scope():
            validate_upload(upload.content_type, upload.size, self._config)

            logger.info(
                "Processing trade screenshot %s (%.2f KB)",
                upload.filename or "<upload>",
                upload.size / 1024,
            )

            with self._scratch() as scratch:
                original = scratch(_SUFFIXES.get(upload.content_type.lower(), ".img"))
                original.write_bytes(upload.content)

                processed = scratch(".png")
                preprocess_file(original, processed, self._config.max_dimension)

                logger.info("Running OCR")
                text = self._engine.extract_text(processed)

            extracted = extract_trade_fields(text)
            logger.info(
                "OCR completed: %d characters, %d field(s) extracted",
                len(text),
                extracted.fields_extracted,
            )
        return ScanResult(
            extracted=extracted,
            ocr_text_length=len(text),
            raw_text_preview=text[: self._config.preview_chars],
        )

    @contextmanager
    def _scratch(self) -> Iterator[Any]:
        """Hand out temp file paths and delete them all on exit."""
        created: list[Path] = []
        base = Path(self._config.temp_dir or tempfile.gettempdir())

        def new_path(suffix: str) -> Path:
            path = base / f"tradejournal-scan-{uuid.uuid4().hex}{suffix}"
            created.append(path)
            return path

        try:
            yield new_path
        finally:
            _cleanup(created)


def _cleanup(paths: list[Path]) -> None:
    for path in paths:
        try:
            path.unlink(missing_ok=True)
        except OSError as exc:
            # Never mask the scan's own error with a cleanup failure
            logger.warning("Failed to delete %s: %s", path, exc)
        else:
            logger.debug("Deleted temporary file: %s", path)

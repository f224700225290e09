"""Tests for the screenshot scan pipeline, using a fake OCR engine."""

import io
from pathlib import Path

import pytest
from PIL import Image

from tradejournal.core.config import OcrConfig
from tradejournal.core.errors import (
    OCRUnavailableError,
    PreprocessingError,
    UnsupportedFormatError,
)
from tradejournal.ocr.engine import OcrEngine
from tradejournal.ocr.pipeline import ScanPipeline, Upload


class FakeEngine:
    """Returns canned text and records what it was asked to read."""

    def __init__(self, text: str = "", error: Exception | None = None):
        self.text = text
        self.error = error
        self.seen: list[Path] = []
        self.seen_modes: list[str] = []

    def extract_text(self, image_path: Path) -> str:
        self.seen.append(image_path)
        with Image.open(image_path) as img:
            self.seen_modes.append(img.mode)
        if self.error is not None:
            raise self.error
        return self.text

    def version(self) -> str:
        return "fake 1.0"


def _png(size=(64, 32)) -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", size, "white").save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture
def config(tmp_path):
    return OcrConfig(temp_dir=str(tmp_path))


class TestScan:
    def test_fake_satisfies_protocol(self):
        assert isinstance(FakeEngine(), OcrEngine)

    def test_extracts_fields_and_metadata(self, config):
        engine = FakeEngine("NSE:SBIN BUY QTY: 10 ENTRY PRICE: 600.5")
        result = ScanPipeline(engine, config).scan(Upload(_png(), "image/png", "ticket.png"))

        payload = result.to_dict()
        assert payload["extracted"]["symbol"] == "SBIN"
        assert payload["extracted"]["side"] == "LONG"
        assert payload["extracted"]["quantity"] == 10
        assert payload["extracted"]["entryPrice"] == 600.5
        assert payload["metadata"] == {
            "ocrTextLength": len(engine.text),
            "fieldsExtracted": 4,
            "rawTextPreview": engine.text,
        }

    def test_engine_sees_preprocessed_png(self, config):
        engine = FakeEngine("x")
        ScanPipeline(engine, config).scan(Upload(_png(), "image/png"))
        assert engine.seen[0].suffix == ".png"
        assert engine.seen_modes == ["L"]

    def test_preview_truncated(self, config):
        engine = FakeEngine("A" * 1200)
        result = ScanPipeline(engine, config).scan(Upload(_png(), "image/png"))
        assert result.ocr_text_length == 1200
        assert len(result.raw_text_preview) == 500

    def test_nothing_recognised_is_not_an_error(self, config):
        result = ScanPipeline(FakeEngine(""), config).scan(Upload(_png(), "image/png"))
        assert result.fields_extracted == 0
        assert result.to_dict()["metadata"]["ocrTextLength"] == 0


class TestTempFiles:
    def test_removed_after_success(self, config, tmp_path):
        engine = FakeEngine("BUY")
        ScanPipeline(engine, config).scan(Upload(_png(), "image/png"))
        assert engine.seen and not engine.seen[0].exists()
        assert list(tmp_path.iterdir()) == []

    def test_removed_after_ocr_failure(self, config, tmp_path):
        engine = FakeEngine(error=OCRUnavailableError("engine crashed"))
        with pytest.raises(OCRUnavailableError):
            ScanPipeline(engine, config).scan(Upload(_png(), "image/png"))
        assert list(tmp_path.iterdir()) == []

    def test_removed_after_preprocessing_failure(self, config, tmp_path):
        engine = FakeEngine("BUY")
        with pytest.raises(PreprocessingError):
            ScanPipeline(engine, config).scan(Upload(b"not an image", "image/png"))
        assert engine.seen == []
        assert list(tmp_path.iterdir()) == []

    def test_rejected_upload_never_touches_disk(self, tmp_path):
        scratch = tmp_path / "scratch"
        scratch.mkdir()
        engine = FakeEngine("BUY")
        pipeline = ScanPipeline(engine, OcrConfig(temp_dir=str(scratch)))
        with pytest.raises(UnsupportedFormatError):
            pipeline.scan(Upload(_png(), "image/gif"))
        assert list(scratch.iterdir()) == []
        assert engine.seen == []


class TestHealth:
    def test_health_reports_engine_version(self, config):
        health = ScanPipeline(FakeEngine(), config).health()
        assert health.healthy
        assert health.detail == "fake 1.0"

    def test_health_cached_per_pipeline(self, config):
        engine = FakeEngine()
        pipeline = ScanPipeline(engine, config)
        first = pipeline.health()
        assert pipeline.health() is first
        assert len(engine.seen) == 1

    def test_failed_check_is_unhealthy(self, config):
        engine = FakeEngine(error=OCRUnavailableError("no binary"))
        assert not ScanPipeline(engine, config).health().healthy


class TestUpload:
    def test_from_path_infers_content_type(self, tmp_path):
        path = tmp_path / "shot.JPEG"
        path.write_bytes(b"abc")
        upload = Upload.from_path(path)
        assert upload.content_type == "image/jpeg"
        assert upload.size == 3
        assert upload.filename == "shot.JPEG"

    def test_unknown_extension(self, tmp_path):
        path = tmp_path / "notes.txt"
        path.write_bytes(b"abc")
        assert Upload.from_path(path).content_type == "application/octet-stream"

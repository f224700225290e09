"""Broker-screenshot scanning: preprocess, OCR, regex field extraction."""

from .engine import EngineHealth, HealthCache, OcrEngine, TesseractEngine, check_engine_health
from .parser import ExtractedTradeFields, extract_trade_fields
from .pipeline import ScanPipeline, ScanResult, Upload
from .preprocess import preprocess_image, validate_upload

__all__ = [
    "EngineHealth",
    "ExtractedTradeFields",
    "HealthCache",
    "OcrEngine",
    "ScanPipeline",
    "ScanResult",
    "TesseractEngine",
    "Upload",
    "check_engine_health",
    "extract_trade_fields",
    "preprocess_image",
    "validate_upload",
]

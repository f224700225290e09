"""Settings for the analytics, the scan pipeline and logging.

Values come from `TRADEJOURNAL_*` environment variables (nested with
`__`, e.g. `TRADEJOURNAL_OCR__LANGUAGE`).  An optional TOML file and
explicit overrides take precedence over the environment.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationError
from pydantic_settings import BaseSettings

from .errors import ConfigError


# ---------------------------------------------------------------------------
# Sub-configs
# ---------------------------------------------------------------------------

class AnalyticsConfig(BaseModel):
    daily_trade_limit: int = Field(default=10, ge=1)
    revenge_window_minutes: int = Field(default=30, ge=0)
    poor_rr_share: float = Field(default=0.3, ge=0.0, le=1.0)  # Of total trades
    default_window_days: int = Field(default=30, ge=1)


class OcrConfig(BaseModel):
    max_upload_bytes: int = 10 * 1024 * 1024  # 10MB
    allowed_content_types: list[str] = Field(
        default_factory=lambda: [
            "image/png",
            "image/jpeg",
            "image/jpg",
            "image/webp",
        ]
    )
    max_dimension: int = 2000  # px, both axes
    language: str = "eng"
    tesseract_cmd: str | None = None  # Binary path override
    health_ttl_seconds: float = 60.0
    preview_chars: int = 500
    temp_dir: str | None = None  # None = system temp dir


class ObservabilityConfig(BaseModel):
    log_level: str = "INFO"
    log_format: str = "json"  # "json" or "console"


# ---------------------------------------------------------------------------
# Top-level settings
# ---------------------------------------------------------------------------

class Settings(BaseSettings):
    """All tradejournal settings, grouped by concern."""

    analytics: AnalyticsConfig = Field(default_factory=AnalyticsConfig)
    ocr: OcrConfig = Field(default_factory=OcrConfig)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)

    model_config = {"env_prefix": "TRADEJOURNAL_", "env_nested_delimiter": "__"}


def load_settings(
    config_path: str | Path | None = None,
    overrides: dict[str, Any] | None = None,
) -> Settings:
    """Build validated settings.

    Args:
        config_path: TOML file; a missing file is skipped.
        overrides: Per-section dicts merged over the file values.

    Raises:
        ConfigError: The file is not valid TOML or a value fails validation.
    """
    data: dict[str, Any] = {}

    if config_path:
        path = Path(config_path)
        if path.exists():
            import tomli

            with open(path, "rb") as f:
                try:
                    data = tomli.load(f)
                except tomli.TOMLDecodeError as exc:
                    raise ConfigError(f"Invalid config file {path}: {exc}") from exc

    if overrides:
        for key, value in overrides.items():
            if isinstance(value, dict) and isinstance(data.get(key), dict):
                data[key] = {**data[key], **value}
            else:
                data[key] = value

    try:
        return Settings(**data)
    except ValidationError as exc:
        raise ConfigError(str(exc)) from exc

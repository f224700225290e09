"""CLI entry point for the trade journal."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import click

from .core.config import Settings, load_settings
from .core.enums import BucketMode, ChartView
from .core.errors import JournalError
from .observability.logger import setup_logging


def _load_trades(path: str) -> list[dict[str, Any]]:
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    except ValueError as exc:
        raise click.ClickException(f"Trades file is not valid JSON: {exc}") from exc
    if isinstance(data, dict):
        data = data.get("trades", [])
    if not isinstance(data, list):
        raise click.ClickException("Trades file must hold a JSON array of trades")
    return data


def _emit(payload: dict[str, Any] | list[Any]) -> None:
    click.echo(json.dumps(payload, indent=2, ensure_ascii=False))


def _fail(exc: JournalError) -> click.ClickException:
    return click.ClickException(f"{exc.user_message} ({exc})")


@click.group()
@click.option("--config", default=None, help="Config file path (TOML)")
@click.option("--log-level", default=None, help="Override log level")
@click.pass_context
def main(ctx: click.Context, config: str | None, log_level: str | None) -> None:
    """Trade journal analytics and screenshot scanning."""
    overrides: dict[str, Any] = {}
    if log_level:
        overrides["observability"] = {"log_level": log_level}
    try:
        settings = load_settings(config, overrides)
    except JournalError as exc:
        raise _fail(exc) from exc
    setup_logging(
        level=settings.observability.log_level,
        format=settings.observability.log_format,
    )
    ctx.obj = settings


@main.command()
@click.argument("trades_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--month", default=None, type=click.IntRange(1, 12), help="Calendar month (1-12)")
@click.option("--year", default=None, type=int, help="Calendar year")
def summary(trades_file: str, month: int | None, year: int | None) -> None:
    """Performance summary of closed trades."""
    from .journal.filters import closed_only, coerce_trades
    from .journal.metrics import compute_summary, summary_for_month

    try:
        trades = closed_only(coerce_trades(_load_trades(trades_file)))
        if month and year:
            result = summary_for_month(trades, year, month)
        else:
            result = compute_summary(trades)
    except JournalError as exc:
        raise _fail(exc) from exc
    _emit(result.to_dict())


@main.command()
@click.argument("trades_file", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--bucket",
    default=BucketMode.DAILY.value,
    type=click.Choice([m.value for m in BucketMode]),
    help="One point per day or per trade",
)
@click.option("--days", default=None, type=click.IntRange(min=0), help="Trailing window in days")
@click.option("--chart", is_flag=True, help="Emit chart payload instead of raw curve")
@click.pass_obj
def equity(settings: Settings, trades_file: str, bucket: str, days: int | None, chart: bool) -> None:
    """Cumulative P&L curve."""
    from .journal.series import build_equity_series, chart_payload

    window = days if days is not None else settings.analytics.default_window_days
    try:
        curve = build_equity_series(_load_trades(trades_file), bucket, window)
    except JournalError as exc:
        raise _fail(exc) from exc
    _emit(chart_payload(ChartView.PNL, curve).to_dict() if chart else curve.to_dict())


@main.command()
@click.argument("trades_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--days", default=None, type=click.IntRange(min=0), help="Trailing window in days")
@click.pass_obj
def volume(settings: Settings, trades_file: str, days: int | None) -> None:
    """Traded quantity per day."""
    from .journal.series import build_volume_series, chart_payload

    window = days if days is not None else settings.analytics.default_window_days
    try:
        points = build_volume_series(_load_trades(trades_file), window)
    except JournalError as exc:
        raise _fail(exc) from exc
    _emit(chart_payload(ChartView.VOLUME, points).to_dict())


@main.command()
@click.argument("trades_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--limit", default=None, type=int, help="Daily trade limit")
@click.option("--days", default=None, type=click.IntRange(min=0), help="Trailing window in days")
@click.pass_obj
def behavior(settings: Settings, trades_file: str, limit: int | None, days: int | None) -> None:
    """Behavioural patterns and insights."""
    from .journal.behavior import analyze_behavior
    from .journal.filters import coerce_trades, within_window

    cfg = settings.analytics
    window = days if days is not None else cfg.default_window_days
    try:
        trades = within_window(coerce_trades(_load_trades(trades_file)), window)
        report = analyze_behavior(
            trades,
            limit if limit is not None else cfg.daily_trade_limit,
            revenge_window_minutes=cfg.revenge_window_minutes,
            poor_rr_share=cfg.poor_rr_share,
        )
    except JournalError as exc:
        raise _fail(exc) from exc
    _emit(report.to_dict())


@main.command()
@click.argument("text_file", type=click.Path(exists=True, dir_okay=False))
def parse(text_file: str) -> None:
    """Extract trade fields from saved OCR text."""
    from .ocr.parser import extract_trade_fields

    fields = extract_trade_fields(Path(text_file).read_text(encoding="utf-8"))
    _emit(fields.to_dict())


@main.command()
@click.argument("image", type=click.Path(exists=True, dir_okay=False))
@click.pass_obj
def scan(settings: Settings, image: str) -> None:
    """Scan a broker screenshot and extract trade fields."""
    from .ocr.pipeline import ScanPipeline, Upload

    pipeline = ScanPipeline(config=settings.ocr)
    try:
        result = pipeline.scan(Upload.from_path(image))
    except JournalError as exc:
        raise _fail(exc) from exc
    _emit(result.to_dict())


@main.command()
@click.pass_obj
def health(settings: Settings) -> None:
    """Check that the OCR engine is available."""
    from .ocr.pipeline import ScanPipeline

    result = ScanPipeline(config=settings.ocr).health()
    _emit(result.to_dict())
    if not result.healthy:
        raise SystemExit(1)

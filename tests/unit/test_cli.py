"""Tests for the click command-line interface."""

import json
import logging

import pytest
from click.testing import CliRunner

from tradejournal.cli import main
from tradejournal.ocr.engine import EngineHealth

TRADES = [
    {"id": "a", "date": "2024-01-15", "time": "09:30", "pnl": -40, "mood": "calm",
     "setup": "breakout", "quantity": 10, "stopLoss": 95, "rrRatio": 2},
    {"id": "b", "date": "2024-01-15", "time": "09:40", "pnl": 100, "mood": "revenge",
     "setup": "scalp", "quantity": 5},
    {"id": "c", "date": "2024-01-16", "time": "11:00", "pnl": 25, "mood": "calm",
     "setup": "trend", "quantity": 20, "status": "OPEN"},
]


@pytest.fixture(autouse=True)
def restore_logging():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers = handlers
    root.setLevel(level)


@pytest.fixture
def trades_file(tmp_path):
    path = tmp_path / "trades.json"
    path.write_text(json.dumps(TRADES))
    return path


def invoke(*args):
    result = CliRunner().invoke(main, ["--log-level", "WARNING", *map(str, args)])
    return result


class TestSummary:
    def test_closed_trades_only(self, trades_file):
        result = invoke("summary", trades_file)
        assert result.exit_code == 0, result.output
        payload = json.loads(result.output)
        assert payload["totalTrades"] == 2
        assert payload["netPnl"] == 60.0

    def test_wrapped_document(self, tmp_path):
        path = tmp_path / "wrapped.json"
        path.write_text(json.dumps({"trades": TRADES[:1]}))
        payload = json.loads(invoke("summary", path).output)
        assert payload["totalTrades"] == 1

    def test_month_filter(self, trades_file):
        payload = json.loads(invoke("summary", trades_file, "--month", 2, "--year", 2024).output)
        assert payload["totalTrades"] == 0

    def test_malformed_trade(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text(json.dumps([{"id": "x", "date": "2024-01-15"}]))
        result = invoke("summary", path)
        assert result.exit_code != 0
        assert "Failed to load analytics" in result.output


class TestBadInput:
    def test_invalid_json(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("[{not json")
        result = invoke("summary", path)
        assert result.exit_code == 1
        assert "not valid JSON" in result.output
        assert not isinstance(result.exception, ValueError)

    @pytest.mark.parametrize("command", ["equity", "volume", "behavior"])
    def test_negative_days_rejected(self, trades_file, command):
        result = invoke(command, trades_file, "--days", -1)
        assert result.exit_code == 2
        assert "--days" in result.output


class TestSeries:
    def test_equity_all_time(self, trades_file):
        result = invoke("equity", trades_file, "--days", 100000)
        payload = json.loads(result.output)
        assert [p["cumulativePnl"] for p in payload["equityCurve"]] == [60.0, 85.0]

    def test_equity_chart(self, trades_file):
        payload = json.loads(invoke("equity", trades_file, "--days", 100000, "--chart").output)
        assert payload["chartType"] == "line"

    def test_volume(self, trades_file):
        payload = json.loads(invoke("volume", trades_file, "--days", 100000).output)
        assert payload["chartType"] == "bar"
        assert [p["value"] for p in payload["data"]] == [15, 20]


class TestBehavior:
    def test_report(self, trades_file):
        result = invoke("behavior", trades_file, "--days", 100000, "--limit", 1)
        payload = json.loads(result.output)
        assert payload["revengeTradingCount"] == 1
        assert payload["overtradingDays"][0]["tradeCount"] == 2
        assert payload["insights"][0] == "You exceeded your daily limit on 1 day(s)"


class TestParse:
    def test_parse_text(self, tmp_path):
        path = tmp_path / "ocr.txt"
        path.write_text("NSE:TCS SELL QTY: 4", encoding="utf-8")
        payload = json.loads(invoke("parse", path).output)
        assert payload["symbol"] == "TCS"
        assert payload["side"] == "SHORT"
        assert payload["quantity"] == 4
        assert payload["rawText"] == "NSE:TCS SELL QTY: 4"


class TestScan:
    def test_rejected_format(self, tmp_path):
        path = tmp_path / "shot.gif"
        path.write_bytes(b"GIF89a")
        result = invoke("scan", path)
        assert result.exit_code != 0
        assert "manually" in result.output


class TestHealth:
    def test_unhealthy_exits_nonzero(self, monkeypatch):
        monkeypatch.setattr(
            "tradejournal.ocr.pipeline.check_engine_health",
            lambda engine, cache=None: EngineHealth(False, "missing", 0.0),
        )
        result = invoke("health")
        assert result.exit_code == 1
        assert json.loads(result.output)["status"] == "unavailable"

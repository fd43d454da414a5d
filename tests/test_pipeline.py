"""Tests for the analysis pipeline."""

import json
import random

import pytest

from dex_trade_forensics.config import Settings
from dex_trade_forensics.pipeline import AnalysisPipeline, AnalysisResult, PipelineError


class TestRun:
    def test_pump_scenario(self, base_ts: int, pump_rows: list[dict[str, object]]) -> None:
        result = AnalysisPipeline(Settings()).run(pump_rows)

        assert result.stats.rows_received == 11
        assert result.stats.trades_normalized == 11
        assert result.stats.wallets_profiled == 10
        assert result.time_range == (base_ts, base_ts + 1000)

        assert len(result.price_changes) == 1
        assert result.price_changes[0].percent_change == pytest.approx(50.0)
        assert len(result.pump_and_dumps) == 1
        candidate = result.pump_and_dumps[0]
        assert candidate.retail_buys_count == 9
        assert candidate.whale_sells_count == 2
        assert candidate.suspicious_wallets == ("dumper",)

        assert result.suspected_manipulators[0].address == "dumper"
        assert result.market_impacts[0].address == "dumper"
        assert result.total_value == pytest.approx(8 * 50 + 60 + 6000 + 1500)
        assert result.risk_warnings is None

    def test_malformed_rows_are_noted(self, sample_rows: list[dict[str, object]]) -> None:
        result = AnalysisPipeline(Settings()).run(sample_rows)
        assert result.stats.rows_dropped == 1
        assert "1 malformed rows dropped" in result.stats.notes
        assert len(result.trades) == 2

    def test_empty_dataset(self) -> None:
        result = AnalysisPipeline(Settings()).run([])

        assert result.is_empty
        assert result.time_range is None
        assert result.price_extrema is None
        assert result.suspected_manipulators == []
        assert result.market_periods == []
        assert result.charts.price == []
        assert any("insufficient data" in note for note in result.stats.notes)
        assert json.loads(json.dumps(result.to_dict()))["time_range"] is None

    def test_idempotent(self, pump_rows: list[dict[str, object]]) -> None:
        pipeline = AnalysisPipeline(Settings())
        first = json.dumps(pipeline.run(pump_rows).to_dict(), sort_keys=True)
        second = json.dumps(pipeline.run(pump_rows).to_dict(), sort_keys=True)
        assert first == second

    def test_input_order_does_not_matter(self, pump_rows: list[dict[str, object]]) -> None:
        shuffled = pump_rows[:]
        random.Random(3).shuffle(shuffled)
        pipeline = AnalysisPipeline(Settings())
        assert pipeline.run(shuffled).to_dict() == pipeline.run(pump_rows).to_dict()

    def test_to_dict_is_json_serializable(self, pump_rows: list[dict[str, object]]) -> None:
        data = json.loads(json.dumps(AnalysisPipeline(Settings()).run(pump_rows).to_dict()))
        assert data["wallet_count"] == 10
        assert data["pump_and_dumps"][0]["whale_sells_count"] == 2

    def test_settings_flow_into_detectors(
        self, monkeypatch: pytest.MonkeyPatch, pump_rows: list[dict[str, object]]
    ) -> None:
        monkeypatch.setenv("PUMP_MIN_RETAIL_BUYS", "20")
        result = AnalysisPipeline(Settings()).run(pump_rows)
        assert result.pump_and_dumps == []

    def test_default_settings(self) -> None:
        assert AnalysisPipeline().settings.intervals.coarse_seconds == 600


class TestAnalysisResult:
    def test_defaults(self) -> None:
        result = AnalysisResult()
        assert result.is_empty
        assert result.flagged_wallets == []
        assert not result.has_wash_trading


def test_pipeline_error_is_exception() -> None:
    assert issubclass(PipelineError, Exception)

"""Tests for MarketCycleDetector."""

import pytest

from dex_trade_forensics.detector.market_cycle import MarketCycleDetector
from dex_trade_forensics.detector.models import MarketCyclePhase
from dex_trade_forensics.ingestor.models import TradeRecord, TradeSide


def _trade(ts: int, price: float, side: TradeSide = TradeSide.BUY, wallet: str = "w") -> TradeRecord:
    return TradeRecord(timestamp=ts, side=side, wallet_address=wallet, amount=10, price=price)


@pytest.fixture
def cycle_trades(base_ts: int) -> list[TradeRecord]:
    """Six 1000s periods: flat, rally, flat with selling, drop, flat, flat."""
    sell = TradeSide.SELL
    return [
        _trade(base_ts, 1.0),
        _trade(base_ts + 900, 1.0),
        _trade(base_ts + 1000, 1.0),
        _trade(base_ts + 1900, 1.5),
        _trade(base_ts + 2000, 1.5, sell),
        _trade(base_ts + 2900, 1.5, sell),
        _trade(base_ts + 3000, 1.5),
        _trade(base_ts + 3900, 0.75),
        _trade(base_ts + 4000, 1.0),
        _trade(base_ts + 4900, 1.0),
        _trade(base_ts + 5000, 1.0),
        _trade(base_ts + 6000, 1.0),
    ]


class TestPeriods:
    def test_equal_slices_cover_every_trade(self, base_ts: int, cycle_trades: list[TradeRecord]) -> None:
        periods = MarketCycleDetector().periods(cycle_trades)

        assert len(periods) == 6
        assert [p.start_time for p in periods] == [base_ts + 1000 * i for i in range(6)]
        assert all(p.transaction_count == 2 for p in periods)
        assert periods[-1].end_time == base_ts + 6000
        assert periods[1].price_change == pytest.approx(50.0)
        assert periods[2].buy_to_sell_ratio.below(1)

    def test_uneven_span_keeps_trailing_trades(self, base_ts: int) -> None:
        # 3605s does not divide into six whole periods
        trades = [
            _trade(base_ts, 1.0),
            _trade(base_ts + 3000, 1.0),
            _trade(base_ts + 3599, 1.0),
            _trade(base_ts + 3605, 2.0),
        ]
        periods = MarketCycleDetector().periods(trades)

        assert sum(p.transaction_count for p in periods) == 4
        last = periods[-1]
        assert last.start_time == base_ts + 3000
        assert last.end_time == base_ts + 3605
        assert last.transaction_count == 3
        assert last.price_at_end == 2.0
        assert last.price_change == pytest.approx(100.0)

    def test_single_trade_lands_in_last_period(self, base_ts: int) -> None:
        periods = MarketCycleDetector().periods([_trade(base_ts, 1.0)])
        assert [p.transaction_count for p in periods] == [0, 0, 0, 0, 0, 1]
        assert periods[0].price_change is None

    def test_empty(self) -> None:
        assert MarketCycleDetector().periods([]) == []


class TestPhases:
    def test_transitions(self, base_ts: int, cycle_trades: list[TradeRecord]) -> None:
        detector = MarketCycleDetector()
        transitions = detector.phases(detector.periods(cycle_trades))

        assert [(t.phase, t.start_period, t.end_period) for t in transitions] == [
            (MarketCyclePhase.ACCUMULATION_TO_MARKUP, 1, 2),
            (MarketCyclePhase.MARKUP_TO_DISTRIBUTION, 2, 3),
            (MarketCyclePhase.DISTRIBUTION_TO_MARKDOWN, 3, 4),
        ]
        assert transitions[0].price_change == pytest.approx(50.0)
        assert transitions[1].price_change == pytest.approx(50.0)
        assert transitions[2].price_change == pytest.approx(-50.0)
        assert transitions[0].start_time == base_ts
        assert transitions[0].end_time == base_ts + 2000

    def test_empty_periods_are_skipped(self, base_ts: int) -> None:
        trades = [_trade(base_ts, 1.0), _trade(base_ts + 6000, 2.0)]
        detector = MarketCycleDetector()
        assert detector.phases(detector.periods(trades)) == []

    def test_descriptions(self) -> None:
        assert "markup" in MarketCyclePhase.ACCUMULATION_TO_MARKUP.description

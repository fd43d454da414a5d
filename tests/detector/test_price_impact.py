"""Tests for PriceImpactDetector."""

from dex_trade_forensics.detector.models import PriceChangeEvent, PriceImpactKind
from dex_trade_forensics.detector.price_impact import PriceImpactDetector
from dex_trade_forensics.ingestor.models import TradeRecord, TradeSide


def _event(start: int, change: float) -> PriceChangeEvent:
    return PriceChangeEvent(
        start_timestamp=start,
        end_timestamp=start + 600,
        start_price=1.0,
        end_price=1.0 + change / 100,
        percent_change=change,
        buy_volume=0.0,
        sell_volume=0.0,
        is_significant=True,
        is_extreme=abs(change) > 10,
    )


def _trade(ts: int, side: TradeSide, value: float, wallet: str = "w") -> TradeRecord:
    return TradeRecord(timestamp=ts, side=side, wallet_address=wallet, amount=value, price=1.0)


class TestDetect:
    def test_whale_buy_before_rise(self, base_ts: int) -> None:
        event = _event(base_ts + 3600, 12.0)
        trades = [_trade(base_ts + 3600 - 1800, TradeSide.BUY, 15_000)]
        impacts = PriceImpactDetector().detect([event], trades)

        assert [(i.kind, i.trade_count) for i in impacts] == [(PriceImpactKind.WHALE_BUY, 1)]
        assert impacts[0].timestamp == event.start_timestamp

    def test_trades_outside_lookback_ignored(self, base_ts: int) -> None:
        event = _event(base_ts + 3600, 12.0)
        trades = [
            _trade(base_ts + 3600 - 1801, TradeSide.BUY, 15_000),
            _trade(base_ts + 3601, TradeSide.BUY, 15_000),
        ]
        assert PriceImpactDetector().detect([event], trades) == []

    def test_retail_follow_needs_more_than_ten(self, base_ts: int) -> None:
        event = _event(base_ts + 3600, 6.0)
        ten = [_trade(base_ts + 3000 + i, TradeSide.BUY, 20) for i in range(10)]
        detector = PriceImpactDetector()
        assert detector.detect([event], ten) == []

        eleven = ten + [_trade(base_ts + 3500, TradeSide.BUY, 20)]
        impacts = detector.detect([event], eleven)
        assert [(i.kind, i.trade_count) for i in impacts] == [(PriceImpactKind.RETAIL_FOLLOW, 11)]

    def test_whale_sell_before_drop(self, base_ts: int) -> None:
        event = _event(base_ts + 3600, -20.0)
        trades = [
            _trade(base_ts + 3000, TradeSide.SELL, 50_000),
            _trade(base_ts + 3100, TradeSide.BUY, 50_000),
        ]
        impacts = PriceImpactDetector().detect([event], trades)
        assert [i.kind for i in impacts] == [PriceImpactKind.WHALE_SELL]
        assert impacts[0].percent_change == -20.0

    def test_kinds_are_grouped(self, base_ts: int) -> None:
        rise = _event(base_ts + 3600, 8.0)
        drop = _event(base_ts + 7200, -8.0)
        trades = [_trade(base_ts + 3500, TradeSide.BUY, 10_000)]
        trades += [_trade(base_ts + 3400 + i, TradeSide.BUY, 50) for i in range(11)]
        trades += [_trade(base_ts + 7000, TradeSide.SELL, 10_000)]
        trades.sort(key=lambda t: t.timestamp)

        impacts = PriceImpactDetector().detect([drop, rise], trades)
        assert [i.kind for i in impacts] == [
            PriceImpactKind.WHALE_BUY,
            PriceImpactKind.RETAIL_FOLLOW,
            PriceImpactKind.WHALE_SELL,
        ]

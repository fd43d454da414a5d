"""Tests for IntervalActivityDetector."""

from dex_trade_forensics.detector.interval_activity import IntervalActivityDetector
from dex_trade_forensics.ingestor.intervals import IntervalAggregator, summarize_bucket
from dex_trade_forensics.ingestor.models import TradeRecord, TradeSide, ValueThresholds


def _trade(ts: int, side: TradeSide, wallet: str, value: float = 10.0) -> TradeRecord:
    return TradeRecord(timestamp=ts, side=side, wallet_address=wallet, amount=value, price=1.0)


def _bucket(base_ts: int, trades: list[TradeRecord]):
    return summarize_bucket(base_ts, 300, trades, ValueThresholds())


class TestScoreBucket:
    def test_balanced_distinct_wallets_score_zero(self, base_ts: int) -> None:
        trades = [_trade(base_ts, TradeSide.BUY, "a"), _trade(base_ts + 1, TradeSide.SELL, "b")]
        assert IntervalActivityDetector().score_bucket(_bucket(base_ts, trades)) == 0

    def test_wash_traders_score_two_each(self, base_ts: int) -> None:
        trades = [
            _trade(base_ts, TradeSide.BUY, "a"),
            _trade(base_ts + 1, TradeSide.SELL, "a"),
            _trade(base_ts + 2, TradeSide.BUY, "b"),
            _trade(base_ts + 3, TradeSide.SELL, "b"),
        ]
        assert IntervalActivityDetector().score_bucket(_bucket(base_ts, trades)) == 4

    def test_concentrated_skewed_whale_cluster(self, base_ts: int) -> None:
        # 22 buys from 2 wallets, 4 of them whale-sized, no sells
        trades = [_trade(base_ts + i, TradeSide.BUY, "a" if i % 2 else "b") for i in range(18)]
        trades += [_trade(base_ts + 20 + i, TradeSide.BUY, "a", value=20_000) for i in range(4)]
        # concentrated (3) + infinite ratio (2) + whale cluster (3)
        assert IntervalActivityDetector().score_bucket(_bucket(base_ts, trades)) == 8

    def test_single_buy_is_skewed(self, base_ts: int) -> None:
        bucket = _bucket(base_ts, [_trade(base_ts, TradeSide.BUY, "a")])
        assert IntervalActivityDetector().score_bucket(bucket) == 2


class TestDetect:
    def test_sorted_by_score_and_filters_zero(self, base_ts: int) -> None:
        trades = [
            # bucket 0: one buy only -> skewed (2)
            _trade(base_ts, TradeSide.BUY, "a"),
            # bucket 1: balanced -> 0
            _trade(base_ts + 300, TradeSide.BUY, "a"),
            _trade(base_ts + 301, TradeSide.SELL, "b"),
            # bucket 2: two wash traders -> 4
            _trade(base_ts + 600, TradeSide.BUY, "c"),
            _trade(base_ts + 601, TradeSide.SELL, "c"),
            _trade(base_ts + 602, TradeSide.BUY, "d"),
            _trade(base_ts + 603, TradeSide.SELL, "d"),
        ]
        intervals = IntervalActivityDetector().detect(IntervalAggregator(300).aggregate(trades))

        assert [(i.timestamp, i.suspicious_score) for i in intervals] == [
            (base_ts + 600, 4),
            (base_ts, 2),
        ]
        assert intervals[0].potential_wash_traders == ("c", "d")
        assert intervals[0].wash_trading_count == 2


class TestCoordinated:
    def test_requires_two_distinct_whale_wallets(self, base_ts: int) -> None:
        one_whale = [_trade(base_ts + i, TradeSide.BUY, "w1", value=20_000) for i in range(4)]
        two_whales = [
            _trade(base_ts + 300 + i, TradeSide.BUY, f"w{i % 2}", value=20_000) for i in range(4)
        ]
        detector = IntervalActivityDetector()
        intervals = detector.detect(IntervalAggregator(300).aggregate(one_whale + two_whales))
        # both buckets: skewed (2) + whale cluster (3) = 5
        assert [i.suspicious_score for i in intervals] == [5, 5]

        coordinated = detector.coordinated(intervals)
        assert len(coordinated) == 1
        assert coordinated[0].timestamp == base_ts + 300
        assert coordinated[0].whale_count == 2
        assert coordinated[0].buy_to_sell_ratio.is_infinite

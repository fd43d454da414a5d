"""Tests for RiskWarningDetector."""

from dex_trade_forensics.detector.models import PriceExtrema, SuspiciousInterval
from dex_trade_forensics.detector.risk_warnings import RiskWarningDetector
from dex_trade_forensics.ingestor.intervals import IntervalAggregator
from dex_trade_forensics.ingestor.models import TradeRecord, TradeSide
from dex_trade_forensics.stats import Ratio


def _extrema(max_price: float, min_price: float) -> PriceExtrema:
    return PriceExtrema(max_price=max_price, max_timestamp=1, min_price=min_price, min_timestamp=2)


def _interval(ts: int, transactions: int, wallets: int, score: int) -> SuspiciousInterval:
    return SuspiciousInterval(
        timestamp=ts,
        total_transactions=transactions,
        unique_wallets=wallets,
        transactions_per_wallet=transactions / wallets,
        large_transactions_count=0,
        buy_count=transactions,
        sell_count=0,
        buy_to_sell_ratio=Ratio.of(transactions, 0),
        potential_wash_traders=(),
        whale_transactions_count=0,
        unique_whale_wallets=0,
        suspicious_score=score,
    )


def _trade(ts: int, side: TradeSide, amount: float) -> TradeRecord:
    return TradeRecord(timestamp=ts, side=side, wallet_address="w", amount=amount, price=1.0)


class TestDetect:
    def test_gated_on_fluctuation(self) -> None:
        detector = RiskWarningDetector()
        assert detector.detect(_extrema(999, 1), [], []) is None
        assert detector.detect(_extrema(1000, 1), [], []) is None
        assert detector.detect(None, [], []) is None

    def test_extreme_range_gathers_evidence(self, base_ts: int) -> None:
        trades = [
            _trade(base_ts, TradeSide.BUY, 10),
            _trade(base_ts + 1, TradeSide.SELL, 25),
            _trade(base_ts + 300, TradeSide.BUY, 10),
            _trade(base_ts + 301, TradeSide.SELL, 80),
            _trade(base_ts + 600, TradeSide.SELL, 1_000),
        ]
        fine = IntervalAggregator(300).aggregate(trades)
        intervals = [_interval(base_ts, 30, 12, 9), _interval(base_ts + 300, 25, 4, 6)]

        warnings = RiskWarningDetector().detect(_extrema(2.0, 0.001), fine, intervals)

        assert warnings is not None
        assert warnings.liquidity_imbalance is not None
        assert warnings.liquidity_imbalance.timestamp == base_ts + 300
        assert warnings.liquidity_imbalance.sell_to_buy_volume_ratio == 8.0
        assert warnings.concentrated_interval is not None
        assert warnings.concentrated_interval.timestamp == base_ts + 300

    def test_no_evidence_found(self) -> None:
        warnings = RiskWarningDetector().detect(_extrema(5.0, 0.001), [], [])
        assert warnings is not None
        assert warnings.liquidity_imbalance is None
        assert warnings.concentrated_interval is None
        assert warnings.to_dict()["liquidity_imbalance"] is None

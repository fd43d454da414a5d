"""Analysis pipeline orchestrator for DEX Trade Forensics.

This module provides the AnalysisPipeline class that wires together the
normalizer, aggregators and detectors and runs them as one synchronous,
deterministic pass over a trade log.

Pipeline flow:
    Raw rows -> Normalizer -> Wallet / Interval Aggregators
             -> Price Movement -> Suspicion Scorer -> Pattern Detectors
             -> Market Impact -> AnalysisResult
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping

from dex_trade_forensics.charts.series import ChartConfig, ChartSeries, ChartSeriesBuilder
from dex_trade_forensics.config import Settings, get_settings
from dex_trade_forensics.detector.interval_activity import IntervalActivityDetector
from dex_trade_forensics.detector.market_cycle import MarketCycleConfig, MarketCycleDetector
from dex_trade_forensics.detector.market_impact import MarketImpactCalculator
from dex_trade_forensics.detector.models import (
    CoordinatedActivity,
    MarketCycleTransition,
    MarketImpact,
    MarketPeriod,
    PriceChangeEvent,
    PriceExtrema,
    PriceImpactEvent,
    PumpAndDumpCandidate,
    RiskWarnings,
    SuspicionProfile,
    SuspiciousInterval,
    WhaleEntryEvent,
)
from dex_trade_forensics.detector.price_impact import PriceImpactConfig, PriceImpactDetector
from dex_trade_forensics.detector.price_movement import PriceMovementConfig, PriceMovementDetector
from dex_trade_forensics.detector.pump_and_dump import PumpAndDumpConfig, PumpAndDumpDetector
from dex_trade_forensics.detector.risk_warnings import RiskWarningDetector
from dex_trade_forensics.detector.scorer import SuspicionConfig, SuspicionScorer
from dex_trade_forensics.detector.whale_entry import (
    WhaleEntryConfig,
    WhaleEntryDetector,
    total_token_volume,
)
from dex_trade_forensics.ingestor.intervals import IntervalAggregator, IntervalBucket
from dex_trade_forensics.ingestor.models import TradeRecord
from dex_trade_forensics.ingestor.normalizer import NormalizerConfig, TradeNormalizer
from dex_trade_forensics.profiler.models import WalletProfile
from dex_trade_forensics.profiler.wallets import WalletActivityAggregator

logger = logging.getLogger(__name__)


class PipelineError(Exception):
    """Raised when the pipeline is misconfigured."""


@dataclass
class PipelineStats:
    """Diagnostics for one pipeline run."""

    rows_received: int = 0
    trades_normalized: int = 0
    rows_dropped: int = 0
    anomalous_prices: int = 0
    wallets_profiled: int = 0
    notes: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, object]:
        return {
            "rows_received": self.rows_received,
            "trades_normalized": self.trades_normalized,
            "rows_dropped": self.rows_dropped,
            "anomalous_prices": self.anomalous_prices,
            "wallets_profiled": self.wallets_profiled,
            "notes": list(self.notes),
        }


@dataclass
class AnalysisResult:
    """Everything the analysis exposes to report and chart collaborators."""

    trades: list[TradeRecord] = field(default_factory=list)
    wallets: dict[str, WalletProfile] = field(default_factory=dict)
    suspicion_profiles: list[SuspicionProfile] = field(default_factory=list)
    suspected_manipulators: list[SuspicionProfile] = field(default_factory=list)
    coarse_intervals: list[IntervalBucket] = field(default_factory=list)
    fine_intervals: list[IntervalBucket] = field(default_factory=list)
    hourly_intervals: list[IntervalBucket] = field(default_factory=list)
    price_changes: list[PriceChangeEvent] = field(default_factory=list)
    price_extrema: PriceExtrema | None = None
    pump_and_dumps: list[PumpAndDumpCandidate] = field(default_factory=list)
    suspicious_intervals: list[SuspiciousInterval] = field(default_factory=list)
    coordinated_activities: list[CoordinatedActivity] = field(default_factory=list)
    whale_entries: list[WhaleEntryEvent] = field(default_factory=list)
    market_periods: list[MarketPeriod] = field(default_factory=list)
    market_cycles: list[MarketCycleTransition] = field(default_factory=list)
    market_impacts: list[MarketImpact] = field(default_factory=list)
    price_impacts: list[PriceImpactEvent] = field(default_factory=list)
    risk_warnings: RiskWarnings | None = None
    charts: ChartSeries = field(default_factory=ChartSeries)
    total_token_volume: float = 0.0
    total_value: float = 0.0
    stats: PipelineStats = field(default_factory=PipelineStats)

    @property
    def is_empty(self) -> bool:
        return not self.trades

    @property
    def time_range(self) -> tuple[int, int] | None:
        if not self.trades:
            return None
        return self.trades[0].timestamp, self.trades[-1].timestamp

    @property
    def flagged_wallets(self) -> list[SuspicionProfile]:
        return [p for p in self.suspected_manipulators if p.is_flagged]

    @property
    def has_wash_trading(self) -> bool:
        return any(i.wash_trading_count > 0 for i in self.suspicious_intervals)

    def to_dict(self) -> dict[str, Any]:
        """Serialize the derived outputs (raw trades and buckets omitted)."""
        return {
            "time_range": list(self.time_range) if self.time_range else None,
            "total_token_volume": self.total_token_volume,
            "total_value": self.total_value,
            "wallet_count": len(self.wallets),
            "suspected_manipulators": [p.to_dict() for p in self.suspected_manipulators],
            "price_changes": [e.to_dict() for e in self.price_changes],
            "price_extrema": self.price_extrema.to_dict() if self.price_extrema else None,
            "pump_and_dumps": [c.to_dict() for c in self.pump_and_dumps],
            "suspicious_intervals": [i.to_dict() for i in self.suspicious_intervals],
            "coordinated_activities": [c.to_dict() for c in self.coordinated_activities],
            "whale_entries": [w.to_dict() for w in self.whale_entries],
            "market_periods": [p.to_dict() for p in self.market_periods],
            "market_cycles": [c.to_dict() for c in self.market_cycles],
            "market_impacts": [m.to_dict() for m in self.market_impacts],
            "price_impacts": [p.to_dict() for p in self.price_impacts],
            "risk_warnings": self.risk_warnings.to_dict() if self.risk_warnings else None,
            "charts": self.charts.to_dict(),
            "stats": self.stats.to_dict(),
        }


class AnalysisPipeline:
    """Runs the full manipulation analysis over a trade log.

    Example:
        ```python
        from dex_trade_forensics.ingestor.csv_source import read_trade_rows
        from dex_trade_forensics.pipeline import AnalysisPipeline

        result = AnalysisPipeline().run(read_trade_rows("trades.csv"))
        for wallet in result.flagged_wallets:
            print(wallet.address, wallet.suspicion_score)
        ```
    """

    def __init__(self, settings: Settings | None = None) -> None:
        """Initialize the pipeline.

        Args:
            settings: Application settings. If not provided, uses get_settings().
        """
        self._settings = settings or get_settings()
        s = self._settings
        thresholds = s.thresholds.to_value_thresholds()

        widths = (s.intervals.fine_seconds, s.intervals.coarse_seconds, s.intervals.hourly_seconds)
        if any(w <= 0 for w in widths):
            raise PipelineError(f"Interval widths must be positive: {widths}")

        self._normalizer = TradeNormalizer(
            config=NormalizerConfig(
                min_sane_price=s.price.min_sane_price,
                max_sane_price=s.price.max_sane_price,
            )
        )
        self._wallet_aggregator = WalletActivityAggregator()
        self._fine = IntervalAggregator(s.intervals.fine_seconds, thresholds)
        self._coarse = IntervalAggregator(s.intervals.coarse_seconds, thresholds)
        self._hourly = IntervalAggregator(s.intervals.hourly_seconds, thresholds)
        self._price_detector = PriceMovementDetector(
            config=PriceMovementConfig(
                record_threshold_pct=s.price.record_threshold_pct,
                extreme_threshold_pct=s.price.extreme_threshold_pct,
                fluctuation_risk_multiplier=s.price.fluctuation_risk_multiplier,
            )
        )
        self._scorer = SuspicionScorer(
            config=SuspicionConfig(
                thresholds=thresholds,
                top_n=s.suspicion.top_n,
                flagged_score=s.suspicion.flagged_score,
                high_score=s.suspicion.high_score,
            )
        )
        self._pump_detector = PumpAndDumpDetector(
            config=PumpAndDumpConfig(
                thresholds=thresholds,
                pump_threshold_pct=s.price.extreme_threshold_pct,
                follow_window_seconds=s.pump.follow_window_seconds,
                min_retail_buys=s.pump.min_retail_buys,
                accumulation_price_factor=s.pump.accumulation_price_factor,
            )
        )
        self._interval_detector = IntervalActivityDetector()
        self._whale_detector = WhaleEntryDetector(config=WhaleEntryConfig(thresholds=thresholds))
        self._cycle_detector = MarketCycleDetector(
            config=MarketCycleConfig(thresholds=thresholds, period_count=s.cycle.period_count)
        )
        self._impact_calculator = MarketImpactCalculator()
        self._price_impact_detector = PriceImpactDetector(
            config=PriceImpactConfig(
                thresholds=thresholds,
                lookback_seconds=s.pump.impact_lookback_seconds,
                move_threshold_pct=s.price.record_threshold_pct,
            )
        )
        self._risk_detector = RiskWarningDetector()
        self._charts = ChartSeriesBuilder(
            config=ChartConfig(
                max_price_points=s.chart.max_price_points,
                top_wallets=s.chart.top_wallets,
                ratio_cap=s.chart.ratio_cap,
            ),
            is_abnormal_price=self._normalizer.is_anomalous_price,
        )

    @property
    def settings(self) -> Settings:
        return self._settings

    def run(self, rows: Iterable[Mapping[str, Any]]) -> AnalysisResult:
        """Normalize raw rows and run every analysis stage."""
        normalized = self._normalizer.normalize(rows)
        stats = PipelineStats(
            rows_received=normalized.rows_received,
            trades_normalized=len(normalized.trades),
            rows_dropped=normalized.dropped,
            anomalous_prices=len(normalized.anomalous_prices),
        )
        if normalized.dropped:
            stats.notes.append(f"{normalized.dropped} malformed rows dropped")

        result = self.analyze(normalized.trades, stats=stats)
        return result

    def analyze(
        self,
        trades: list[TradeRecord],
        *,
        stats: PipelineStats | None = None,
    ) -> AnalysisResult:
        """Run every analysis stage over already normalized, sorted trades."""
        stats = stats or PipelineStats(trades_normalized=len(trades))
        result = AnalysisResult(trades=trades, stats=stats)

        if not trades:
            stats.notes.append("insufficient data: no valid trades")
            logger.warning("No valid trades to analyze")
            return result

        logger.info("Analyzing %d trades", len(trades))

        result.wallets = self._wallet_aggregator.aggregate(trades)
        stats.wallets_profiled = len(result.wallets)

        result.coarse_intervals = self._coarse.aggregate(trades)
        result.fine_intervals = self._fine.aggregate(trades)
        result.hourly_intervals = self._hourly.aggregate(trades)

        result.price_changes = self._price_detector.detect(result.coarse_intervals)
        result.price_extrema = self._price_detector.extrema(trades)

        result.suspicion_profiles = self._scorer.profile_all(result.wallets)
        result.suspected_manipulators = self._scorer.rank(result.suspicion_profiles)

        result.pump_and_dumps = self._pump_detector.detect(result.price_changes, trades)
        result.suspicious_intervals = self._interval_detector.detect(result.fine_intervals)
        result.coordinated_activities = self._interval_detector.coordinated(
            result.suspicious_intervals
        )

        result.total_token_volume = total_token_volume(trades)
        result.whale_entries = self._whale_detector.detect(
            result.hourly_intervals, result.total_token_volume
        )

        result.market_periods = self._cycle_detector.periods(trades)
        result.market_cycles = self._cycle_detector.phases(result.market_periods)

        result.total_value = sum(t.value for t in trades)
        result.market_impacts = self._impact_calculator.calculate(
            result.suspected_manipulators, result.wallets, result.total_value
        )

        result.price_impacts = self._price_impact_detector.detect(result.price_changes, trades)
        result.risk_warnings = self._risk_detector.detect(
            result.price_extrema, result.fine_intervals, result.suspicious_intervals
        )

        result.charts = self._charts.build(
            trades,
            result.hourly_intervals,
            self._hourly,
            result.wallets,
            result.suspicion_profiles,
        )

        logger.info(
            "Analysis complete: wallets=%d, flagged=%d, price_changes=%d, pumps=%d, "
            "suspicious_intervals=%d, whale_entries=%d",
            len(result.wallets),
            len(result.flagged_wallets),
            len(result.price_changes),
            len(result.pump_and_dumps),
            len(result.suspicious_intervals),
            len(result.whale_entries),
        )
        return result

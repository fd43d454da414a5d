"""Manipulation detection layer - Suspicious pattern identification."""

from dex_trade_forensics.detector.interval_activity import IntervalActivityDetector
from dex_trade_forensics.detector.market_cycle import MarketCycleDetector
from dex_trade_forensics.detector.market_impact import MarketImpactCalculator
from dex_trade_forensics.detector.models import (
    PriceChangeEvent,
    PumpAndDumpCandidate,
    SuspicionProfile,
    SuspiciousInterval,
    WhaleEntryEvent,
)
from dex_trade_forensics.detector.price_impact import PriceImpactDetector
from dex_trade_forensics.detector.price_movement import PriceMovementDetector
from dex_trade_forensics.detector.pump_and_dump import PumpAndDumpDetector
from dex_trade_forensics.detector.risk_warnings import RiskWarningDetector
from dex_trade_forensics.detector.scorer import SuspicionScorer
from dex_trade_forensics.detector.whale_entry import WhaleEntryDetector

__all__ = [
    "IntervalActivityDetector",
    "MarketCycleDetector",
    "MarketImpactCalculator",
    "PriceChangeEvent",
    "PriceImpactDetector",
    "PriceMovementDetector",
    "PumpAndDumpCandidate",
    "PumpAndDumpDetector",
    "RiskWarningDetector",
    "SuspicionProfile",
    "SuspicionScorer",
    "SuspiciousInterval",
    "WhaleEntryDetector",
    "WhaleEntryEvent",
]

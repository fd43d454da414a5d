"""Data ingestion layer - Trade log parsing, normalization and bucketing."""

from dex_trade_forensics.ingestor.csv_source import CsvSourceError, read_trade_rows
from dex_trade_forensics.ingestor.intervals import IntervalAggregator, IntervalBucket
from dex_trade_forensics.ingestor.models import (
    TradeNormalizationError,
    TradeRecord,
    TradeSide,
    ValueThresholds,
)
from dex_trade_forensics.ingestor.normalizer import NormalizationResult, TradeNormalizer

__all__ = [
    "CsvSourceError",
    "IntervalAggregator",
    "IntervalBucket",
    "NormalizationResult",
    "TradeNormalizationError",
    "TradeNormalizer",
    "TradeRecord",
    "TradeSide",
    "ValueThresholds",
    "read_trade_rows",
]

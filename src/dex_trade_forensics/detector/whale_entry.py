"""Whale entry detection over hourly buckets."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

from dex_trade_forensics.detector.models import WhaleEntryEvent
from dex_trade_forensics.ingestor.intervals import IntervalBucket
from dex_trade_forensics.ingestor.models import TradeRecord, ValueThresholds
from dex_trade_forensics.stats import safe_percent

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WhaleEntryConfig:
    thresholds: ValueThresholds = ValueThresholds()
    min_whale_buys: int = 2


def total_token_volume(trades: Sequence[TradeRecord]) -> float:
    """Sum of buy and sell token amounts across the dataset."""
    return sum(t.amount for t in trades)


class WhaleEntryDetector:
    def __init__(self, *, config: WhaleEntryConfig | None = None) -> None:
        self._cfg = config or WhaleEntryConfig()

    def detect(self, buckets: Sequence[IntervalBucket], total_volume: float) -> list[WhaleEntryEvent]:
        """Hours with at least ``min_whale_buys`` whale-sized buys."""
        th = self._cfg.thresholds
        entries: list[WhaleEntryEvent] = []

        for bucket in buckets:
            whale_buys = [t for t in bucket.trades if t.is_buy and th.is_whale(t.value)]
            if len(whale_buys) < self._cfg.min_whale_buys:
                continue
            buy_volume = sum(t.amount for t in whale_buys)
            entries.append(
                WhaleEntryEvent(
                    timestamp=bucket.start,
                    whale_count=len({t.wallet_address for t in whale_buys if t.wallet_address}),
                    total_buy_volume=buy_volume,
                    percent_of_total_volume=safe_percent(buy_volume, total_volume),
                    transactions=len(whale_buys),
                )
            )

        logger.info("Detected %d whale entries", len(entries))
        return entries

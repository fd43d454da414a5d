"""Price movement detection over the coarse interval series."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

import numpy as np

from dex_trade_forensics.detector.models import PriceChangeEvent, PriceExtrema, PricePoint
from dex_trade_forensics.ingestor.intervals import IntervalBucket
from dex_trade_forensics.ingestor.models import TradeRecord
from dex_trade_forensics.stats import percent_change

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PriceMovementConfig:
    record_threshold_pct: float = 5.0
    extreme_threshold_pct: float = 10.0
    fluctuation_risk_multiplier: float = 1000.0


class PriceMovementDetector:
    """Flags significant moves between adjacent priced buckets.

    Buckets without a derivable price are removed before adjacency is
    computed, so an event may span a gap in trading.
    """

    def __init__(self, *, config: PriceMovementConfig | None = None) -> None:
        self._cfg = config or PriceMovementConfig()

    @staticmethod
    def price_series(buckets: Sequence[IntervalBucket]) -> list[tuple[IntervalBucket, float]]:
        series: list[tuple[IntervalBucket, float]] = []
        for bucket in sorted(buckets, key=lambda b: b.start):
            price = bucket.price
            if price:
                series.append((bucket, price))
        return series

    def detect(self, buckets: Sequence[IntervalBucket]) -> list[PriceChangeEvent]:
        series = self.price_series(buckets)
        events: list[PriceChangeEvent] = []

        for (prev, prev_price), (curr, curr_price) in zip(series, series[1:]):
            try:
                change = percent_change(prev_price, curr_price)
            except ZeroDivisionError:
                logger.warning("Skipping price pair at %d: zero start price", prev.start)
                continue

            magnitude = abs(change)
            if magnitude <= self._cfg.record_threshold_pct:
                continue

            events.append(
                PriceChangeEvent(
                    start_timestamp=prev.start,
                    end_timestamp=curr.start,
                    start_price=prev_price,
                    end_price=curr_price,
                    percent_change=change,
                    buy_volume=curr.buy_volume,
                    sell_volume=curr.sell_volume,
                    is_significant=True,
                    is_extreme=magnitude > self._cfg.extreme_threshold_pct,
                )
            )

        logger.info(
            "Detected %d price changes (%d extreme) over %d priced buckets",
            len(events),
            sum(1 for e in events if e.is_extreme),
            len(series),
        )
        return events

    def extrema(self, trades: Sequence[TradeRecord]) -> PriceExtrema | None:
        """Global max/min trade price; earliest trade wins ties."""
        if not trades:
            return None
        prices = np.array([t.price for t in trades], dtype=float)
        hi = int(np.argmax(prices))
        lo = int(np.argmin(prices))
        return PriceExtrema(
            max_price=float(prices[hi]),
            max_timestamp=trades[hi].timestamp,
            min_price=float(prices[lo]),
            min_timestamp=trades[lo].timestamp,
            fluctuation_risk_multiplier=self._cfg.fluctuation_risk_multiplier,
        )

    @staticmethod
    def points(buckets: Sequence[IntervalBucket]) -> list[PricePoint]:
        return [PricePoint(b.start, p) for b, p in PriceMovementDetector.price_series(buckets)]

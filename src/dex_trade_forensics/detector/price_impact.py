"""Attribute price moves to the trades that preceded them."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

from dex_trade_forensics.detector.models import PriceChangeEvent, PriceImpactEvent, PriceImpactKind
from dex_trade_forensics.ingestor.models import TradeRecord, ValueThresholds

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PriceImpactConfig:
    thresholds: ValueThresholds = ValueThresholds()
    lookback_seconds: int = 1800
    move_threshold_pct: float = 5.0
    min_retail_buys: int = 10


class PriceImpactDetector:
    """Looks back from each price move for whale or retail bursts.

    For rises: whale buys (any) or retail buys (more than 10) in the
    lookback window before the move. For drops: whale sells (any).
    """

    def __init__(self, *, config: PriceImpactConfig | None = None) -> None:
        self._cfg = config or PriceImpactConfig()

    def _window(self, event: PriceChangeEvent, trades: Sequence[TradeRecord]) -> list[TradeRecord]:
        start = event.start_timestamp - self._cfg.lookback_seconds
        return [t for t in trades if start <= t.timestamp <= event.start_timestamp]

    def detect(
        self,
        events: Sequence[PriceChangeEvent],
        trades: Sequence[TradeRecord],
    ) -> list[PriceImpactEvent]:
        cfg = self._cfg
        th = cfg.thresholds
        rises = [e for e in events if e.percent_change > cfg.move_threshold_pct]
        drops = [e for e in events if e.percent_change < -cfg.move_threshold_pct]
        impacts: list[PriceImpactEvent] = []

        for event in rises:
            whale_buys = [t for t in self._window(event, trades) if t.is_buy and th.is_whale(t.value)]
            if whale_buys:
                impacts.append(self._impact(PriceImpactKind.WHALE_BUY, event, len(whale_buys)))

        for event in rises:
            retail_buys = [t for t in self._window(event, trades) if t.is_buy and th.is_retail(t.value)]
            if len(retail_buys) > cfg.min_retail_buys:
                impacts.append(self._impact(PriceImpactKind.RETAIL_FOLLOW, event, len(retail_buys)))

        for event in drops:
            whale_sells = [t for t in self._window(event, trades) if t.is_sell and th.is_whale(t.value)]
            if whale_sells:
                impacts.append(self._impact(PriceImpactKind.WHALE_SELL, event, len(whale_sells)))

        logger.debug("Attributed %d price impacts", len(impacts))
        return impacts

    @staticmethod
    def _impact(kind: PriceImpactKind, event: PriceChangeEvent, count: int) -> PriceImpactEvent:
        return PriceImpactEvent(
            kind=kind,
            timestamp=event.start_timestamp,
            percent_change=event.percent_change,
            trade_count=count,
        )

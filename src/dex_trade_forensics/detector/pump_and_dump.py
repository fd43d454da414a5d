"""Pump-and-dump detection.

Looks for: 1) an extreme upward price move, 2) a burst of retail-sized
buys during the move, and 3) larger sells shortly after it peaks.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

from dex_trade_forensics.detector.models import PriceChangeEvent, PumpAndDumpCandidate, PumpEvidence
from dex_trade_forensics.ingestor.models import TradeRecord, ValueThresholds

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PumpAndDumpConfig:
    thresholds: ValueThresholds = ValueThresholds()
    pump_threshold_pct: float = 10.0
    follow_window_seconds: int = 1800
    min_retail_buys: int = 5
    accumulation_price_factor: float = 0.8
    min_small_buys: int = 5


class PumpAndDumpDetector:
    def __init__(self, *, config: PumpAndDumpConfig | None = None) -> None:
        self._cfg = config or PumpAndDumpConfig()

    def detect(
        self,
        events: Sequence[PriceChangeEvent],
        trades: Sequence[TradeRecord],
    ) -> list[PumpAndDumpCandidate]:
        """Confirm pump-and-dump candidates among upward price events.

        A candidate is confirmed when more than ``min_retail_buys`` retail
        buys fall inside the event window and at least one medium-or-larger
        sell follows within ``follow_window_seconds`` of the window end.
        """
        candidates: list[PumpAndDumpCandidate] = []
        for pump in events:
            if pump.percent_change <= self._cfg.pump_threshold_pct:
                continue
            candidate = self._evaluate(pump, trades)
            if candidate is not None:
                candidates.append(candidate)

        logger.info("Confirmed %d pump-and-dump candidates", len(candidates))
        return candidates

    def _evaluate(
        self,
        pump: PriceChangeEvent,
        trades: Sequence[TradeRecord],
    ) -> PumpAndDumpCandidate | None:
        th = self._cfg.thresholds
        start, end = pump.start_timestamp, pump.end_timestamp
        follow_end = end + self._cfg.follow_window_seconds

        retail_buys = [
            t for t in trades if t.is_buy and start <= t.timestamp <= end and th.is_retail(t.value)
        ]
        whale_sells = [
            t
            for t in trades
            if t.is_sell and end < t.timestamp <= follow_end and th.is_medium_or_larger(t.value)
        ]

        if len(retail_buys) <= self._cfg.min_retail_buys or not whale_sells:
            logger.debug(
                "Pump at %d not confirmed: retail_buys=%d, whale_sells=%d",
                start,
                len(retail_buys),
                len(whale_sells),
            )
            return None

        sellers = dict.fromkeys(t.wallet_address for t in whale_sells if t.wallet_address)
        return PumpAndDumpCandidate(
            pump=pump,
            retail_buys_count=len(retail_buys),
            retail_buys_value=sum(t.value for t in retail_buys),
            whale_sells_count=len(whale_sells),
            whale_sells_value=sum(t.value for t in whale_sells),
            suspicious_wallets=tuple(sellers),
            evidence=self.evidence(pump, trades, retail_buys_count=len(retail_buys)),
        )

    def evidence(
        self,
        pump: PriceChangeEvent,
        trades: Sequence[TradeRecord],
        *,
        retail_buys_count: int,
    ) -> PumpEvidence:
        """Gather supporting evidence for a confirmed pump."""
        th = self._cfg.thresholds
        start, end = pump.start_timestamp, pump.end_timestamp
        window = end - start
        accumulation_ceiling = pump.start_price * self._cfg.accumulation_price_factor

        accumulation = sum(
            1
            for t in trades
            if t.is_buy
            and th.is_whale(t.value)
            and t.timestamp < start
            and t.price < accumulation_ceiling
        )
        small_buys = sum(
            1
            for t in trades
            if t.is_buy and 0 < t.value < th.medium and start <= t.timestamp <= end
        )
        prior_retail = sum(
            1
            for t in trades
            if t.is_buy and th.is_retail(t.value) and start - window <= t.timestamp < start
        )
        increase = retail_buys_count / prior_retail if prior_retail else float(retail_buys_count)

        return PumpEvidence(
            low_price_accumulation_count=accumulation,
            small_buys_during_pump=small_buys,
            retail_activity_increase=increase,
            is_typical_pattern=accumulation > 0 and small_buys >= self._cfg.min_small_buys,
        )

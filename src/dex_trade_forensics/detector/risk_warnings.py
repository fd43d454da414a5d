"""Risk warnings raised only for extreme price ranges.

When the global max/min price ratio exceeds the fluctuation multiplier,
two more pieces of evidence are gathered: the worst sell-side liquidity
imbalance among fine buckets and the most concentrated suspicious
interval. Below that multiplier nothing is computed.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

from dex_trade_forensics.detector.models import (
    LiquidityImbalance,
    PriceExtrema,
    RiskWarnings,
    SuspiciousInterval,
)
from dex_trade_forensics.ingestor.intervals import IntervalBucket

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RiskWarningConfig:
    imbalance_ratio: float = 2.0
    concentration_min_transactions: int = 20
    concentration_max_wallets: int = 10
    concentration_min_score: int = 5


class RiskWarningDetector:
    def __init__(self, *, config: RiskWarningConfig | None = None) -> None:
        self._cfg = config or RiskWarningConfig()

    def detect(
        self,
        extrema: PriceExtrema | None,
        fine_buckets: Sequence[IntervalBucket],
        intervals: Sequence[SuspiciousInterval],
    ) -> RiskWarnings | None:
        if extrema is None or not extrema.is_fluctuation_risk:
            return None

        logger.warning(
            "Extreme price range: %.3g to %.3g (x%.2e)",
            extrema.min_price,
            extrema.max_price,
            extrema.volatility_multiplier,
        )
        return RiskWarnings(
            extrema=extrema,
            liquidity_imbalance=self.worst_imbalance(fine_buckets),
            concentrated_interval=self.most_concentrated(intervals),
        )

    def worst_imbalance(self, buckets: Sequence[IntervalBucket]) -> LiquidityImbalance | None:
        worst: LiquidityImbalance | None = None
        for b in buckets:
            if b.buy_volume <= 0 or b.sell_volume <= 0:
                continue
            ratio = b.sell_volume / b.buy_volume
            if ratio <= self._cfg.imbalance_ratio:
                continue
            if worst is None or ratio > worst.sell_to_buy_volume_ratio:
                worst = LiquidityImbalance(
                    timestamp=b.start,
                    sell_to_buy_volume_ratio=ratio,
                    buy_volume=b.buy_volume,
                    sell_volume=b.sell_volume,
                )
        return worst

    def most_concentrated(self, intervals: Sequence[SuspiciousInterval]) -> SuspiciousInterval | None:
        """First qualifying interval; callers pass intervals highest score first."""
        cfg = self._cfg
        for i in intervals:
            if (
                i.total_transactions > cfg.concentration_min_transactions
                and i.unique_wallets < cfg.concentration_max_wallets
                and i.suspicious_score > cfg.concentration_min_score
            ):
                return i
        return None

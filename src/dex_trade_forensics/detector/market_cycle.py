"""Market cycle phase classification.

Splits the observed time range into equal periods and labels transitions
between adjacent periods (accumulation -> markup -> distribution ->
markdown) from their price change and buy/sell ratio.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

import numpy as np

from dex_trade_forensics.detector.models import MarketCyclePhase, MarketCycleTransition, MarketPeriod
from dex_trade_forensics.ingestor.models import TradeRecord, ValueThresholds
from dex_trade_forensics.stats import mean_or_none

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MarketCycleConfig:
    thresholds: ValueThresholds = ValueThresholds()
    period_count: int = 6
    flat_pct: float = 5.0
    rally_pct: float = 10.0
    drop_pct: float = -10.0


class MarketCycleDetector:
    def __init__(self, *, config: MarketCycleConfig | None = None) -> None:
        self._cfg = config or MarketCycleConfig()

    def periods(self, trades: Sequence[TradeRecord]) -> list[MarketPeriod]:
        """Split sorted trades into ``period_count`` equal time slices.

        Each period covers ``[start, end)``. The last one runs to the latest
        trade and includes it, so a span not divisible by ``period_count``
        leaves no trailing trades uncovered.
        """
        if not trades:
            return []

        n = self._cfg.period_count
        timestamps = np.array([t.timestamp for t in trades], dtype=np.int64)
        earliest = int(timestamps[0])
        latest = int(timestamps[-1])
        duration = (latest - earliest) // n

        periods: list[MarketPeriod] = []
        for i in range(n):
            start = earliest + i * duration
            end = latest if i == n - 1 else earliest + (i + 1) * duration
            side = "right" if i == n - 1 else "left"
            lo = int(np.searchsorted(timestamps, start, side="left"))
            hi = int(np.searchsorted(timestamps, end, side=side))
            periods.append(self._summarize(i + 1, start, end, trades[lo:hi]))
        return periods

    def _summarize(
        self,
        number: int,
        start: int,
        end: int,
        members: Sequence[TradeRecord],
    ) -> MarketPeriod:
        th = self._cfg.thresholds
        whales = [t for t in members if th.is_whale(t.value)]
        return MarketPeriod(
            period_number=number,
            start_time=start,
            end_time=end,
            transaction_count=len(members),
            buy_count=sum(1 for t in members if t.is_buy),
            sell_count=sum(1 for t in members if t.is_sell),
            avg_price=mean_or_none(t.price for t in members),
            price_at_start=members[0].price if members else None,
            price_at_end=members[-1].price if members else None,
            active_wallets=len({t.wallet_address for t in members if t.wallet_address}),
            whale_transactions=len(whales),
            whale_wallets=len({t.wallet_address for t in whales if t.wallet_address}),
        )

    def phases(self, periods: Sequence[MarketPeriod]) -> list[MarketCycleTransition]:
        """Apply the adjacent-period transition rules.

        Rules are checked in order and may all fire for the same pair.
        Pairs where either period has no price change are skipped.
        """
        cfg = self._cfg
        transitions: list[MarketCycleTransition] = []

        for current, following in zip(periods, periods[1:]):
            cur_change = current.price_change
            next_change = following.price_change
            if cur_change is None or next_change is None:
                continue

            def emit(phase: MarketCyclePhase, change: float) -> None:
                transitions.append(
                    MarketCycleTransition(
                        phase=phase,
                        start_period=current.period_number,
                        end_period=following.period_number,
                        start_time=current.start_time,
                        end_time=following.end_time,
                        price_change=change,
                    )
                )

            if cur_change < cfg.flat_pct and next_change > cfg.rally_pct:
                emit(MarketCyclePhase.ACCUMULATION_TO_MARKUP, next_change)
            if (
                cur_change > cfg.rally_pct
                and next_change < cfg.flat_pct
                and following.buy_to_sell_ratio.below(1)
            ):
                emit(MarketCyclePhase.MARKUP_TO_DISTRIBUTION, cur_change)
            if (
                cur_change < cfg.flat_pct
                and current.buy_to_sell_ratio.below(1)
                and next_change < cfg.drop_pct
            ):
                emit(MarketCyclePhase.DISTRIBUTION_TO_MARKDOWN, next_change)

        logger.info("Identified %d market cycle transitions", len(transitions))
        return transitions

"""Chart-ready series derived from the analysis stages.

Only data is produced here; rendering belongs to the presentation layer.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Sequence

from dex_trade_forensics.detector.models import SuspicionProfile
from dex_trade_forensics.ingestor.intervals import IntervalAggregator, IntervalBucket
from dex_trade_forensics.ingestor.models import TradeRecord
from dex_trade_forensics.profiler.models import WalletProfile

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChartConfig:
    max_price_points: int = 3000
    top_wallets: int = 10
    ratio_cap: float = 5.0


@dataclass(frozen=True)
class PriceSample:
    timestamp: int
    price: float
    side: str
    is_extreme: bool = False
    is_abnormal: bool = False

    def to_dict(self) -> dict[str, object]:
        return {
            "timestamp": self.timestamp,
            "price": self.price,
            "side": self.side,
            "is_extreme": self.is_extreme,
            "is_abnormal": self.is_abnormal,
        }


@dataclass(frozen=True)
class VolumePoint:
    timestamp: int
    buy_volume: float
    sell_volume: float
    buy_count: int
    sell_count: int

    def to_dict(self) -> dict[str, object]:
        return {
            "timestamp": self.timestamp,
            "buy_volume": self.buy_volume,
            "sell_volume": self.sell_volume,
            "buy_count": self.buy_count,
            "sell_count": self.sell_count,
        }


@dataclass(frozen=True)
class WalletActivityBar:
    address: str
    buys: int
    sells: int
    suspicious: bool

    def to_dict(self) -> dict[str, object]:
        return {
            "address": self.address,
            "buys": self.buys,
            "sells": self.sells,
            "suspicious": self.suspicious,
        }


@dataclass
class ChartSeries:
    price: list[PriceSample] = field(default_factory=list)
    volume: list[VolumePoint] = field(default_factory=list)
    buy_sell_ratio: list[tuple[int, float]] = field(default_factory=list)
    wallet_activity: list[WalletActivityBar] = field(default_factory=list)

    @property
    def active_hours(self) -> int:
        return sum(1 for p in self.volume if p.buy_count or p.sell_count)

    def to_dict(self) -> dict[str, object]:
        return {
            "price": [p.to_dict() for p in self.price],
            "volume": [v.to_dict() for v in self.volume],
            "buy_sell_ratio": [{"timestamp": ts, "ratio": r} for ts, r in self.buy_sell_ratio],
            "wallet_activity": [w.to_dict() for w in self.wallet_activity],
        }


class ChartSeriesBuilder:
    def __init__(
        self,
        *,
        config: ChartConfig | None = None,
        is_abnormal_price: Callable[[float], bool] | None = None,
    ) -> None:
        self._cfg = config or ChartConfig()
        self._is_abnormal = is_abnormal_price or (lambda _price: False)

    def build(
        self,
        trades: Sequence[TradeRecord],
        hourly: Sequence[IntervalBucket],
        hourly_aggregator: IntervalAggregator,
        wallets: dict[str, WalletProfile],
        suspicion: Sequence[SuspicionProfile],
    ) -> ChartSeries:
        return ChartSeries(
            price=self.price_samples(trades, hourly),
            volume=self.volume_series(hourly_aggregator.fill_gaps(hourly)),
            buy_sell_ratio=self.ratio_series(hourly),
            wallet_activity=self.wallet_activity(wallets, suspicion),
        )

    def price_samples(
        self,
        trades: Sequence[TradeRecord],
        hourly: Sequence[IntervalBucket],
    ) -> list[PriceSample]:
        """Every trade price, or an hourly downsample for large inputs.

        The downsample keeps each hour's first and last trade plus its
        highest and lowest price, and every abnormal-price trade.
        """
        if len(trades) <= self._cfg.max_price_points:
            return [self._sample(t) for t in trades]

        samples: list[PriceSample] = []
        for bucket in hourly:
            members = bucket.trades
            if not members:
                continue
            first, last = members[0], members[-1]
            samples.append(self._sample(first))
            if len(members) == 1:
                continue
            samples.append(self._sample(last))
            highest = max(members, key=lambda t: t.price)
            lowest = min(members, key=lambda t: t.price)
            for extreme in {id(t): t for t in (highest, lowest)}.values():
                if extreme is not first and extreme is not last:
                    samples.append(self._sample(extreme, is_extreme=True))

        samples.extend(
            PriceSample(t.timestamp, t.price, t.side.value, is_abnormal=True)
            for t in trades
            if self._is_abnormal(t.price)
        )
        samples.sort(key=lambda s: s.timestamp)
        logger.debug("Downsampled %d trades to %d price points", len(trades), len(samples))
        return samples

    def _sample(self, trade: TradeRecord, *, is_extreme: bool = False) -> PriceSample:
        return PriceSample(
            timestamp=trade.timestamp,
            price=trade.price,
            side=trade.side.value,
            is_extreme=is_extreme,
            is_abnormal=self._is_abnormal(trade.price),
        )

    @staticmethod
    def volume_series(filled: Sequence[IntervalBucket]) -> list[VolumePoint]:
        return [
            VolumePoint(
                timestamp=b.start,
                buy_volume=b.buy_volume,
                sell_volume=b.sell_volume,
                buy_count=b.buy_count,
                sell_count=b.sell_count,
            )
            for b in filled
        ]

    def ratio_series(self, hourly: Sequence[IntervalBucket]) -> list[tuple[int, float]]:
        """Buy/sell count ratio per traded hour, capped for display."""
        return [(b.start, b.buy_to_sell_ratio.capped(self._cfg.ratio_cap)) for b in hourly]

    def wallet_activity(
        self,
        wallets: dict[str, WalletProfile],
        suspicion: Sequence[SuspicionProfile],
    ) -> list[WalletActivityBar]:
        flagged = {p.address for p in suspicion if p.is_flagged}
        most_active = sorted(
            wallets.values(),
            key=lambda w: w.buys.count + w.sells.count,
            reverse=True,
        )[: self._cfg.top_wallets]
        return [
            WalletActivityBar(
                address=w.address,
                buys=w.buys.count,
                sells=w.sells.count,
                suspicious=w.address in flagged,
            )
            for w in most_active
        ]

"""Fixed-width time bucketing of trades.

A single primitive, ``bucket_start(ts, width)``, keys every bucket series.
The pipeline instantiates it three times: 600s (headline price series and
pump detection), 300s (wash trading / coordinated activity) and 3600s
(whale entries and volume charts).
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Iterable, Sequence

from dex_trade_forensics.ingestor.models import TradeRecord, ValueThresholds
from dex_trade_forensics.stats import Ratio, mean_or_none

logger = logging.getLogger(__name__)

FINE_INTERVAL_SECONDS = 300
COARSE_INTERVAL_SECONDS = 600
HOURLY_INTERVAL_SECONDS = 3600


def bucket_start(timestamp: int, width: int) -> int:
    """Start of the ``width``-second bucket containing ``timestamp``."""
    return (timestamp // width) * width


@dataclass(frozen=True)
class IntervalBucket:
    """Statistics for trades in ``[start, start + width)``.

    ``trades`` keeps the bucket's records in timestamp order. Buckets
    synthesized by ``IntervalAggregator.fill_gaps`` have no trades and
    ``synthetic=True``.
    """

    start: int
    width: int
    trades: tuple[TradeRecord, ...] = ()
    buy_count: int = 0
    sell_count: int = 0
    buy_volume: float = 0.0
    sell_volume: float = 0.0
    buy_value: float = 0.0
    sell_value: float = 0.0
    avg_buy_price: float | None = None
    avg_sell_price: float | None = None
    unique_wallets: frozenset[str] = frozenset()
    whale_transactions: int = 0
    whale_wallets: frozenset[str] = frozenset()
    large_transactions: int = 0
    wash_trader_candidates: tuple[str, ...] = ()
    synthetic: bool = False

    @property
    def end(self) -> int:
        return self.start + self.width

    @property
    def total_transactions(self) -> int:
        return self.buy_count + self.sell_count

    @property
    def total_volume(self) -> float:
        return self.buy_volume + self.sell_volume

    @property
    def total_value(self) -> float:
        return self.buy_value + self.sell_value

    @property
    def price(self) -> float | None:
        """Representative price: mean buy price, else mean sell price."""
        return self.avg_buy_price if self.avg_buy_price is not None else self.avg_sell_price

    @property
    def buy_to_sell_ratio(self) -> Ratio:
        return Ratio.of(self.buy_count, self.sell_count)

    @property
    def wash_trading_count(self) -> int:
        return len(self.wash_trader_candidates)

    @property
    def transactions_per_wallet(self) -> float:
        return self.total_transactions / (len(self.unique_wallets) or 1)

    def to_dict(self) -> dict[str, object]:
        return {
            "start": self.start,
            "width": self.width,
            "buy_count": self.buy_count,
            "sell_count": self.sell_count,
            "buy_volume": self.buy_volume,
            "sell_volume": self.sell_volume,
            "buy_value": self.buy_value,
            "sell_value": self.sell_value,
            "avg_buy_price": self.avg_buy_price,
            "avg_sell_price": self.avg_sell_price,
            "price": self.price,
            "unique_wallets": len(self.unique_wallets),
            "whale_transactions": self.whale_transactions,
            "large_transactions": self.large_transactions,
            "wash_trading_count": self.wash_trading_count,
            "buy_to_sell_ratio": self.buy_to_sell_ratio.to_json(),
            "synthetic": self.synthetic,
        }


def summarize_bucket(
    start: int,
    width: int,
    trades: Sequence[TradeRecord],
    thresholds: ValueThresholds,
) -> IntervalBucket:
    """Compute the derived statistics for one bucket's trades."""
    buys = [t for t in trades if t.is_buy]
    sells = [t for t in trades if t.is_sell]

    # wallet -> (has_buy, has_sell), in first-appearance order
    actions: dict[str, list[bool]] = {}
    for t in trades:
        if not t.wallet_address:
            continue
        flags = actions.setdefault(t.wallet_address, [False, False])
        if t.is_buy:
            flags[0] = True
        else:
            flags[1] = True

    whales = [t for t in trades if thresholds.is_whale(t.value)]

    return IntervalBucket(
        start=start,
        width=width,
        trades=tuple(trades),
        buy_count=len(buys),
        sell_count=len(sells),
        buy_volume=sum(t.amount for t in buys),
        sell_volume=sum(t.amount for t in sells),
        buy_value=sum(t.value for t in buys),
        sell_value=sum(t.value for t in sells),
        avg_buy_price=mean_or_none(t.price for t in buys),
        avg_sell_price=mean_or_none(t.price for t in sells),
        unique_wallets=frozenset(actions),
        whale_transactions=len(whales),
        whale_wallets=frozenset(t.wallet_address for t in whales if t.wallet_address),
        large_transactions=sum(1 for t in trades if thresholds.is_medium_or_larger(t.value)),
        wash_trader_candidates=tuple(w for w, (b, s) in actions.items() if b and s),
    )


@dataclass
class IntervalAggregator:
    """Buckets a sorted trade sequence into fixed-width windows."""

    width: int
    thresholds: ValueThresholds = field(default_factory=ValueThresholds)

    def __post_init__(self) -> None:
        if self.width <= 0:
            raise ValueError("Interval width must be positive")

    def group(self, trades: Iterable[TradeRecord]) -> dict[int, list[TradeRecord]]:
        groups: dict[int, list[TradeRecord]] = defaultdict(list)
        for t in trades:
            groups[bucket_start(t.timestamp, self.width)].append(t)
        return groups

    def aggregate(self, trades: Iterable[TradeRecord]) -> list[IntervalBucket]:
        """Return non-empty buckets ordered by start time."""
        buckets: list[IntervalBucket] = []
        for start, members in sorted(self.group(trades).items()):
            try:
                buckets.append(summarize_bucket(start, self.width, members, self.thresholds))
            except (ArithmeticError, ValueError) as e:
                logger.warning("Skipping %ds bucket at %d: %s", self.width, start, e)
        logger.debug("Aggregated %d buckets at width=%ds", len(buckets), self.width)
        return buckets

    def fill_gaps(self, buckets: Sequence[IntervalBucket]) -> list[IntervalBucket]:
        """Insert zero-valued buckets so the series has no missing steps.

        Used only for chart axes; detector series never contain synthetic
        buckets.
        """
        if not buckets:
            return []
        by_start = {b.start: b for b in buckets}
        first = min(by_start)
        last = max(by_start)
        return [
            by_start.get(start) or IntervalBucket(start=start, width=self.width, synthetic=True)
            for start in range(first, last + self.width, self.width)
        ]

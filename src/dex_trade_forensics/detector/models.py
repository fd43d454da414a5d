"""Data models for the detector module.

Every model here is a frozen value computed by one detector from the
outputs of earlier stages. None holds a reference back to the raw trade
sequence except where a detector records the trades it matched as evidence.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from dex_trade_forensics.stats import Ratio


@dataclass(frozen=True)
class PricePoint:
    timestamp: int
    price: float


@dataclass(frozen=True)
class PriceChangeEvent:
    """A price move between two chronologically adjacent priced buckets.

    Attributes:
        start_timestamp: Start of the earlier bucket.
        end_timestamp: Start of the later bucket.
        start_price: Representative price of the earlier bucket.
        end_price: Representative price of the later bucket.
        percent_change: (end - start) / start * 100.
        buy_volume: Token buy volume in the later bucket.
        sell_volume: Token sell volume in the later bucket.
        is_significant: |percent_change| above the recording threshold (5%).
        is_extreme: |percent_change| above the extreme threshold (10%).
    """

    start_timestamp: int
    end_timestamp: int
    start_price: float
    end_price: float
    percent_change: float
    buy_volume: float
    sell_volume: float
    is_significant: bool
    is_extreme: bool

    @property
    def is_upward(self) -> bool:
        return self.percent_change > 0

    def to_dict(self) -> dict[str, object]:
        return {
            "start_timestamp": self.start_timestamp,
            "end_timestamp": self.end_timestamp,
            "start_price": self.start_price,
            "end_price": self.end_price,
            "percent_change": self.percent_change,
            "buy_volume": self.buy_volume,
            "sell_volume": self.sell_volume,
            "is_significant": self.is_significant,
            "is_extreme": self.is_extreme,
        }


@dataclass(frozen=True)
class PriceExtrema:
    """Global price extremes across all trades."""

    max_price: float
    max_timestamp: int
    min_price: float
    min_timestamp: int
    fluctuation_risk_multiplier: float = 1000.0

    @property
    def volatility_multiplier(self) -> float:
        return self.max_price / self.min_price

    @property
    def is_fluctuation_risk(self) -> bool:
        return self.volatility_multiplier > self.fluctuation_risk_multiplier

    def to_dict(self) -> dict[str, object]:
        return {
            "max_price": self.max_price,
            "max_timestamp": self.max_timestamp,
            "min_price": self.min_price,
            "min_timestamp": self.min_timestamp,
            "volatility_multiplier": self.volatility_multiplier,
            "is_fluctuation_risk": self.is_fluctuation_risk,
        }


@dataclass(frozen=True)
class SuspicionProfile:
    """Derived behaviour metrics and composite score for one wallet."""

    address: str
    total_value: float
    buy_to_sell_ratio: Ratio
    transaction_count: int
    active_duration_hours: float
    transaction_frequency: float
    net_quote_change: float
    buy_count: int
    sell_count: int
    suspicion_score: int = 0
    flagged_score: int = 3
    high_score: int = 5

    @property
    def is_flagged(self) -> bool:
        return self.suspicion_score >= self.flagged_score

    @property
    def is_high_suspicion(self) -> bool:
        return self.suspicion_score >= self.high_score

    def to_dict(self) -> dict[str, object]:
        return {
            "address": self.address,
            "total_value": self.total_value,
            "buy_to_sell_ratio": self.buy_to_sell_ratio.to_json(),
            "transaction_count": self.transaction_count,
            "active_duration_hours": self.active_duration_hours,
            "transaction_frequency": self.transaction_frequency,
            "net_quote_change": self.net_quote_change,
            "buy_count": self.buy_count,
            "sell_count": self.sell_count,
            "suspicion_score": self.suspicion_score,
            "is_flagged": self.is_flagged,
            "is_high_suspicion": self.is_high_suspicion,
        }


@dataclass(frozen=True)
class PumpEvidence:
    """Narrative evidence around a pump; does not gate detection."""

    low_price_accumulation_count: int
    small_buys_during_pump: int
    retail_activity_increase: float
    is_typical_pattern: bool

    def to_dict(self) -> dict[str, object]:
        return {
            "low_price_accumulation_count": self.low_price_accumulation_count,
            "small_buys_during_pump": self.small_buys_during_pump,
            "retail_activity_increase": self.retail_activity_increase,
            "is_typical_pattern": self.is_typical_pattern,
        }


@dataclass(frozen=True)
class PumpAndDumpCandidate:
    """An extreme upward move with retail buying and follow-up whale selling."""

    pump: PriceChangeEvent
    retail_buys_count: int
    retail_buys_value: float
    whale_sells_count: int
    whale_sells_value: float
    suspicious_wallets: tuple[str, ...]
    evidence: PumpEvidence

    def to_dict(self) -> dict[str, object]:
        return {
            "pump": self.pump.to_dict(),
            "retail_buys_count": self.retail_buys_count,
            "retail_buys_value": self.retail_buys_value,
            "whale_sells_count": self.whale_sells_count,
            "whale_sells_value": self.whale_sells_value,
            "suspicious_wallets": list(self.suspicious_wallets),
            "evidence": self.evidence.to_dict(),
        }


@dataclass(frozen=True)
class SuspiciousInterval:
    """A fine-grained bucket with a positive composite activity score."""

    timestamp: int
    total_transactions: int
    unique_wallets: int
    transactions_per_wallet: float
    large_transactions_count: int
    buy_count: int
    sell_count: int
    buy_to_sell_ratio: Ratio
    potential_wash_traders: tuple[str, ...]
    whale_transactions_count: int
    unique_whale_wallets: int
    suspicious_score: int

    @property
    def wash_trading_count(self) -> int:
        return len(self.potential_wash_traders)

    def to_dict(self) -> dict[str, object]:
        return {
            "timestamp": self.timestamp,
            "total_transactions": self.total_transactions,
            "unique_wallets": self.unique_wallets,
            "transactions_per_wallet": self.transactions_per_wallet,
            "large_transactions_count": self.large_transactions_count,
            "buy_count": self.buy_count,
            "sell_count": self.sell_count,
            "buy_to_sell_ratio": self.buy_to_sell_ratio.to_json(),
            "potential_wash_traders": list(self.potential_wash_traders),
            "wash_trading_count": self.wash_trading_count,
            "whale_transactions_count": self.whale_transactions_count,
            "unique_whale_wallets": self.unique_whale_wallets,
            "suspicious_score": self.suspicious_score,
        }


@dataclass(frozen=True)
class CoordinatedActivity:
    timestamp: int
    suspicious_score: int
    whale_count: int
    transaction_count: int
    buy_to_sell_ratio: Ratio

    def to_dict(self) -> dict[str, object]:
        return {
            "timestamp": self.timestamp,
            "suspicious_score": self.suspicious_score,
            "whale_count": self.whale_count,
            "transaction_count": self.transaction_count,
            "buy_to_sell_ratio": self.buy_to_sell_ratio.to_json(),
        }


@dataclass(frozen=True)
class WhaleEntryEvent:
    """An hour with at least two whale-sized buys."""

    timestamp: int
    whale_count: int
    total_buy_volume: float
    percent_of_total_volume: float
    transactions: int

    def to_dict(self) -> dict[str, object]:
        return {
            "timestamp": self.timestamp,
            "whale_count": self.whale_count,
            "total_buy_volume": self.total_buy_volume,
            "percent_of_total_volume": self.percent_of_total_volume,
            "transactions": self.transactions,
        }


@dataclass(frozen=True)
class MarketPeriod:
    """One of the equal-duration slices of the observed time range."""

    period_number: int
    start_time: int
    end_time: int
    transaction_count: int
    buy_count: int
    sell_count: int
    avg_price: float | None
    price_at_start: float | None
    price_at_end: float | None
    active_wallets: int
    whale_transactions: int
    whale_wallets: int

    @property
    def buy_to_sell_ratio(self) -> Ratio:
        return Ratio.of(self.buy_count, self.sell_count)

    @property
    def price_change(self) -> float | None:
        if self.price_at_start is None or self.price_at_end is None or self.price_at_start <= 0:
            return None
        return (self.price_at_end - self.price_at_start) / self.price_at_start * 100

    def to_dict(self) -> dict[str, object]:
        return {
            "period_number": self.period_number,
            "start_time": self.start_time,
            "end_time": self.end_time,
            "transaction_count": self.transaction_count,
            "buy_count": self.buy_count,
            "sell_count": self.sell_count,
            "buy_to_sell_ratio": self.buy_to_sell_ratio.to_json(),
            "avg_price": self.avg_price,
            "price_at_start": self.price_at_start,
            "price_at_end": self.price_at_end,
            "price_change": self.price_change,
            "active_wallets": self.active_wallets,
            "whale_transactions": self.whale_transactions,
            "whale_wallets": self.whale_wallets,
        }


class MarketCyclePhase(str, Enum):
    ACCUMULATION_TO_MARKUP = "accumulation_to_markup"
    MARKUP_TO_DISTRIBUTION = "markup_to_distribution"
    DISTRIBUTION_TO_MARKDOWN = "distribution_to_markdown"

    @property
    def description(self) -> str:
        return _PHASE_DESCRIPTIONS[self]


_PHASE_DESCRIPTIONS = {
    MarketCyclePhase.ACCUMULATION_TO_MARKUP: "Potential accumulation to markup",
    MarketCyclePhase.MARKUP_TO_DISTRIBUTION: "Potential markup to distribution",
    MarketCyclePhase.DISTRIBUTION_TO_MARKDOWN: "Potential distribution to markdown",
}


@dataclass(frozen=True)
class MarketCycleTransition:
    phase: MarketCyclePhase
    start_period: int
    end_period: int
    start_time: int
    end_time: int
    price_change: float

    def to_dict(self) -> dict[str, object]:
        return {
            "type": self.phase.value,
            "description": self.phase.description,
            "start_period": self.start_period,
            "end_period": self.end_period,
            "start_time": self.start_time,
            "end_time": self.end_time,
            "price_change": self.price_change,
        }


@dataclass(frozen=True)
class MarketImpact:
    address: str
    suspicion_score: int
    wallet_value: float
    market_impact: float

    def to_dict(self) -> dict[str, object]:
        return {
            "address": self.address,
            "suspicion_score": self.suspicion_score,
            "wallet_value": self.wallet_value,
            "market_impact": self.market_impact,
        }


class PriceImpactKind(str, Enum):
    WHALE_BUY = "whale_buy"
    RETAIL_FOLLOW = "retail_follow"
    WHALE_SELL = "whale_sell"


@dataclass(frozen=True)
class PriceImpactEvent:
    """A price move preceded by a characteristic burst of trades."""

    kind: PriceImpactKind
    timestamp: int
    percent_change: float
    trade_count: int

    def to_dict(self) -> dict[str, object]:
        return {
            "kind": self.kind.value,
            "timestamp": self.timestamp,
            "percent_change": self.percent_change,
            "trade_count": self.trade_count,
        }


@dataclass(frozen=True)
class LiquidityImbalance:
    timestamp: int
    sell_to_buy_volume_ratio: float
    buy_volume: float
    sell_volume: float

    def to_dict(self) -> dict[str, object]:
        return {
            "timestamp": self.timestamp,
            "sell_to_buy_volume_ratio": self.sell_to_buy_volume_ratio,
            "buy_volume": self.buy_volume,
            "sell_volume": self.sell_volume,
        }


@dataclass(frozen=True)
class RiskWarnings:
    """Extra evidence computed only when the price range is extreme."""

    extrema: PriceExtrema
    liquidity_imbalance: LiquidityImbalance | None
    concentrated_interval: SuspiciousInterval | None

    def to_dict(self) -> dict[str, object]:
        return {
            "extrema": self.extrema.to_dict(),
            "liquidity_imbalance": (
                self.liquidity_imbalance.to_dict() if self.liquidity_imbalance else None
            ),
            "concentrated_interval": (
                self.concentrated_interval.to_dict() if self.concentrated_interval else None
            ),
        }

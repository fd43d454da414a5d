"""Data models for the profiler module."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class SideTotals:
    """Count, token volume and quote value for one trade side."""

    count: int = 0
    volume: float = 0.0
    value: float = 0.0

    def add(self, amount: float, value: float) -> None:
        self.count += 1
        self.volume += amount
        self.value += value

    def merged(self, other: "SideTotals") -> "SideTotals":
        return SideTotals(
            count=self.count + other.count,
            volume=self.volume + other.volume,
            value=self.value + other.value,
        )

    def to_dict(self) -> dict[str, object]:
        return {"count": self.count, "volume": self.volume, "value": self.value}


@dataclass
class WalletProfile:
    """Lifetime trading statistics for one wallet.

    Only WalletActivityAggregator mutates a profile, during its fold;
    consumers treat it as read-only.
    """

    address: str
    first_seen: int
    last_seen: int
    buys: SideTotals = field(default_factory=SideTotals)
    sells: SideTotals = field(default_factory=SideTotals)
    total_transactions: int = 0
    net_quote_change: float = 0.0

    @property
    def total_value(self) -> float:
        return self.buys.value + self.sells.value

    @property
    def active_seconds(self) -> int:
        return self.last_seen - self.first_seen

    def to_dict(self) -> dict[str, object]:
        return {
            "address": self.address,
            "first_seen": self.first_seen,
            "last_seen": self.last_seen,
            "buys": self.buys.to_dict(),
            "sells": self.sells.to_dict(),
            "total_transactions": self.total_transactions,
            "net_quote_change": self.net_quote_change,
        }

"""Data models for the ingestor module."""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping

# Epoch values above this are treated as milliseconds.
MILLISECOND_EPOCH_CUTOFF = 1e12


class TradeNormalizationError(Exception):
    """Raised when a raw row cannot be turned into a TradeRecord."""


class TradeSide(str, Enum):
    """Direction of a trade from the trader's point of view."""

    BUY = "BUY"
    SELL = "SELL"

    @classmethod
    def parse(cls, raw: object) -> "TradeSide":
        """Parse a side tag such as ``TOKEN_BUY`` or ``sell``."""
        tag = str(raw or "").strip().upper()
        if tag in ("TOKEN_BUY", "BUY"):
            return cls.BUY
        if tag in ("TOKEN_SELL", "SELL"):
            return cls.SELL
        raise TradeNormalizationError(f"Unknown trade side: {raw!r}")


@dataclass(frozen=True)
class ValueThresholds:
    """Quote-currency value thresholds used to classify single trades."""

    whale: float = 10_000.0
    medium: float = 1_000.0
    retail: float = 100.0

    def is_whale(self, value: float) -> bool:
        return value >= self.whale

    def is_medium_or_larger(self, value: float) -> bool:
        return value >= self.medium

    def is_retail(self, value: float) -> bool:
        return 0 < value <= self.retail


def _parse_float(raw: object) -> float | None:
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, str):
        raw = raw.strip()
        if not raw:
            return None
    try:
        value = float(raw)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None
    if math.isnan(value) or math.isinf(value):
        return None
    return value


def _parse_timestamp(raw: object) -> int:
    value = _parse_float(raw)
    if value is None or value <= 0:
        raise TradeNormalizationError(f"Invalid trade timestamp: {raw!r}")
    if value > MILLISECOND_EPOCH_CUTOFF:
        value /= 1000.0
    return int(value)


@dataclass(frozen=True)
class TradeRecord:
    """A single normalized DEX trade.

    Attributes:
        timestamp: Unix epoch seconds.
        side: Buy or sell.
        wallet_address: Trader wallet ("" when the row carried none).
        amount: Token amount for the active side.
        price: Quote price per token for the active side.
        net_quote_change: Signed quote-currency (e.g. SOL) balance delta.
        transaction_id: Transaction signature, if present.
    """

    timestamp: int
    side: TradeSide
    wallet_address: str
    amount: float
    price: float
    net_quote_change: float = 0.0
    transaction_id: str = ""

    @property
    def value(self) -> float:
        """Quote-currency value of the trade (amount * price)."""
        return self.amount * self.price

    @property
    def is_buy(self) -> bool:
        return self.side is TradeSide.BUY

    @property
    def is_sell(self) -> bool:
        return self.side is TradeSide.SELL

    @classmethod
    def from_row(cls, data: Mapping[str, Any]) -> "TradeRecord":
        """Create a TradeRecord from a raw trade export row.

        The side-specific ``buy_*`` / ``sell_*`` columns are read according
        to the row's ``type``.

        Raises:
            TradeNormalizationError: If the timestamp, side, amount or price
                for the active side is missing or unparsable.
        """
        timestamp = _parse_timestamp(data.get("trade_timestamp", data.get("timestamp")))
        side = TradeSide.parse(data.get("type", data.get("side")))

        prefix = "buy" if side is TradeSide.BUY else "sell"
        amount = _parse_float(data.get(f"{prefix}_amount"))
        if amount is None or amount <= 0:
            raise TradeNormalizationError(f"Missing {prefix} amount")
        price = _parse_float(data.get(f"{prefix}_price"))
        if price is None or price <= 0:
            raise TradeNormalizationError(f"Missing {prefix} price")

        wallet = data.get("trader_wallet_address", data.get("wallet_address"))
        net_change = _parse_float(data.get("net_sol_balance_change", data.get("net_quote_change")))
        tx_id = data.get("transaction_signature", data.get("transaction_id"))

        return cls(
            timestamp=timestamp,
            side=side,
            wallet_address=str(wallet).strip() if wallet is not None else "",
            amount=amount,
            price=price,
            net_quote_change=net_change or 0.0,
            transaction_id=str(tx_id) if tx_id is not None else "",
        )

    def to_dict(self) -> dict[str, object]:
        return {
            "timestamp": self.timestamp,
            "side": self.side.value,
            "wallet_address": self.wallet_address,
            "amount": self.amount,
            "price": self.price,
            "value": self.value,
            "net_quote_change": self.net_quote_change,
            "transaction_id": self.transaction_id,
        }

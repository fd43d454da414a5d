"""Trade record normalization.

Turns raw, untyped export rows into a timestamp-sorted sequence of
TradeRecord values. Malformed rows are dropped and counted; anomalous
prices are only logged for operator review.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping

from dex_trade_forensics.ingestor.models import TradeNormalizationError, TradeRecord

logger = logging.getLogger(__name__)

DEFAULT_MIN_SANE_PRICE = 1e-8
DEFAULT_MAX_SANE_PRICE = 1000.0


@dataclass(frozen=True)
class NormalizerConfig:
    min_sane_price: float = DEFAULT_MIN_SANE_PRICE
    max_sane_price: float = DEFAULT_MAX_SANE_PRICE


@dataclass
class NormalizationResult:
    """Output of a normalization pass.

    Attributes:
        trades: Valid records sorted ascending by timestamp (stable).
        rows_received: Number of raw rows seen.
        dropped: Number of malformed rows excluded.
        anomalous_prices: Records whose price fell outside the sane range.
            They are kept in ``trades``.
    """

    trades: list[TradeRecord] = field(default_factory=list)
    rows_received: int = 0
    dropped: int = 0
    anomalous_prices: list[TradeRecord] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.trades

    @property
    def time_range(self) -> tuple[int, int] | None:
        if not self.trades:
            return None
        return self.trades[0].timestamp, self.trades[-1].timestamp


class TradeNormalizer:
    """Validates raw rows and produces sorted TradeRecords."""

    def __init__(self, *, config: NormalizerConfig | None = None) -> None:
        self._cfg = config or NormalizerConfig()

    def is_anomalous_price(self, price: float) -> bool:
        return price > self._cfg.max_sane_price or price < self._cfg.min_sane_price

    def normalize(self, rows: Iterable[Mapping[str, Any]]) -> NormalizationResult:
        result = NormalizationResult()
        valid: list[TradeRecord] = []

        for index, row in enumerate(rows):
            result.rows_received += 1
            try:
                record = TradeRecord.from_row(row)
            except TradeNormalizationError as e:
                result.dropped += 1
                logger.warning("Dropping malformed trade row %d: %s", index, e)
                continue

            if self.is_anomalous_price(record.price):
                result.anomalous_prices.append(record)
                logger.warning(
                    "Anomalous price: ts=%d, price=%g, side=%s, tx=%s",
                    record.timestamp,
                    record.price,
                    record.side.value,
                    record.transaction_id or "(none)",
                )
            valid.append(record)

        # sorted() is stable; equal timestamps keep arrival order.
        result.trades = sorted(valid, key=lambda t: t.timestamp)

        logger.info(
            "Normalized %d of %d rows (%d dropped, %d anomalous prices)",
            len(result.trades),
            result.rows_received,
            result.dropped,
            len(result.anomalous_prices),
        )
        return result

"""Wash trading and coordinated activity over fine-grained intervals."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

from dex_trade_forensics.detector.models import CoordinatedActivity, SuspiciousInterval
from dex_trade_forensics.ingestor.intervals import IntervalBucket

logger = logging.getLogger(__name__)

SCORE_CONCENTRATED = 3
SCORE_PER_WASH_TRADER = 2
SCORE_SKEWED_RATIO = 2
SCORE_WHALE_CLUSTER = 3


@dataclass(frozen=True)
class IntervalActivityConfig:
    concentrated_min_transactions: int = 20
    concentrated_max_wallets: int = 5
    skew_high: float = 10.0
    skew_low: float = 0.1
    whale_cluster_min_transactions: int = 3
    coordinated_min_score: int = 5
    coordinated_min_whale_wallets: int = 2


class IntervalActivityDetector:
    """Scores each fine bucket for wash trading and concentrated activity.

    Bucket score:
        +3 if more than 20 trades come from fewer than 5 wallets
        +2 per wallet that both bought and sold in the bucket
        +2 if the buy/sell count ratio is above 10 or below 0.1
        +3 if more than 3 whale-sized trades occurred
    """

    def __init__(self, *, config: IntervalActivityConfig | None = None) -> None:
        self._cfg = config or IntervalActivityConfig()

    def score_bucket(self, bucket: IntervalBucket) -> int:
        cfg = self._cfg
        score = 0
        if (
            bucket.total_transactions > cfg.concentrated_min_transactions
            and len(bucket.unique_wallets) < cfg.concentrated_max_wallets
        ):
            score += SCORE_CONCENTRATED
        score += SCORE_PER_WASH_TRADER * bucket.wash_trading_count
        if bucket.buy_to_sell_ratio.is_skewed(cfg.skew_high, cfg.skew_low):
            score += SCORE_SKEWED_RATIO
        if bucket.whale_transactions > cfg.whale_cluster_min_transactions:
            score += SCORE_WHALE_CLUSTER
        return score

    def detect(self, buckets: Sequence[IntervalBucket]) -> list[SuspiciousInterval]:
        """Buckets with a positive score, highest score first (stable)."""
        intervals: list[SuspiciousInterval] = []
        for bucket in buckets:
            try:
                score = self.score_bucket(bucket)
                if score <= 0:
                    continue
                intervals.append(
                    SuspiciousInterval(
                        timestamp=bucket.start,
                        total_transactions=bucket.total_transactions,
                        unique_wallets=len(bucket.unique_wallets),
                        transactions_per_wallet=bucket.transactions_per_wallet,
                        large_transactions_count=bucket.large_transactions,
                        buy_count=bucket.buy_count,
                        sell_count=bucket.sell_count,
                        buy_to_sell_ratio=bucket.buy_to_sell_ratio,
                        potential_wash_traders=bucket.wash_trader_candidates,
                        whale_transactions_count=bucket.whale_transactions,
                        unique_whale_wallets=len(bucket.whale_wallets),
                        suspicious_score=score,
                    )
                )
            except (ArithmeticError, ValueError) as e:
                logger.warning("Skipping interval at %d: %s", bucket.start, e)

        intervals.sort(key=lambda i: i.suspicious_score, reverse=True)
        logger.info(
            "Found %d suspicious intervals (%d with wash trading)",
            len(intervals),
            sum(1 for i in intervals if i.wash_trading_count),
        )
        return intervals

    def coordinated(self, intervals: Sequence[SuspiciousInterval]) -> list[CoordinatedActivity]:
        """High-scoring intervals involving several distinct whale wallets."""
        cfg = self._cfg
        return [
            CoordinatedActivity(
                timestamp=i.timestamp,
                suspicious_score=i.suspicious_score,
                whale_count=i.unique_whale_wallets,
                transaction_count=i.total_transactions,
                buy_to_sell_ratio=i.buy_to_sell_ratio,
            )
            for i in intervals
            if i.suspicious_score >= cfg.coordinated_min_score
            and i.unique_whale_wallets >= cfg.coordinated_min_whale_wallets
        ]

"""Per-wallet suspicion scoring.

This module provides the SuspicionScorer class that turns final wallet
profiles into integer suspicion scores and a ranked shortlist.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Iterable, Mapping

from dex_trade_forensics.detector.models import SuspicionProfile
from dex_trade_forensics.ingestor.models import ValueThresholds
from dex_trade_forensics.profiler.models import WalletProfile
from dex_trade_forensics.stats import Ratio

logger = logging.getLogger(__name__)

# Default configuration
DEFAULT_TOP_N = 20
DEFAULT_FLAGGED_SCORE = 3
DEFAULT_HIGH_SCORE = 5

# Score increments
SCORE_MEGA_WHALE = 5
SCORE_WHALE = 3
SCORE_SKEWED_RATIO = 3
SCORE_VERY_FREQUENT = 3
SCORE_FREQUENT = 2
SCORE_BURST = 4
SCORE_PROFIT = 3


@dataclass(frozen=True)
class SuspicionConfig:
    thresholds: ValueThresholds = ValueThresholds()
    top_n: int = DEFAULT_TOP_N
    flagged_score: int = DEFAULT_FLAGGED_SCORE
    high_score: int = DEFAULT_HIGH_SCORE
    skew_high: float = 10.0
    skew_low: float = 0.1
    very_frequent_per_hour: float = 10.0
    frequent_per_hour: float = 5.0
    burst_max_hours: float = 1.0
    burst_min_transactions: int = 20
    profit_threshold: float = 10.0


class SuspicionScorer:
    """Additive heuristic scorer for wallet behaviour.

    Scoring rules (independent, summed):
        +5 if total value > 10 x whale threshold, else +3 if > whale threshold
        +3 if buy/sell count ratio > 10 or < 0.1
        +3 if transactions per active hour > 10, else +2 if > 5
        +4 if active for under an hour with more than 20 transactions
        +3 if net quote change > 10

    Example:
        ```python
        scorer = SuspicionScorer()
        ranked = scorer.rank(wallets)
        flagged = [p for p in ranked if p.is_flagged]
        ```
    """

    def __init__(self, *, config: SuspicionConfig | None = None) -> None:
        self._cfg = config or SuspicionConfig()

    def profile(self, wallet: WalletProfile) -> SuspicionProfile:
        """Derive behaviour metrics for a wallet and score them."""
        hours = wallet.active_seconds / 3600
        frequency = wallet.total_transactions / hours if hours > 0 else float(wallet.total_transactions)

        unscored = SuspicionProfile(
            address=wallet.address,
            total_value=wallet.total_value,
            buy_to_sell_ratio=Ratio.of(wallet.buys.count, wallet.sells.count),
            transaction_count=wallet.total_transactions,
            active_duration_hours=hours,
            transaction_frequency=frequency,
            net_quote_change=wallet.net_quote_change,
            buy_count=wallet.buys.count,
            sell_count=wallet.sells.count,
            flagged_score=self._cfg.flagged_score,
            high_score=self._cfg.high_score,
        )
        return replace(unscored, suspicion_score=self.score(unscored))

    def score(self, p: SuspicionProfile) -> int:
        cfg = self._cfg
        whale = cfg.thresholds.whale
        score = 0

        if p.total_value > whale * 10:
            score += SCORE_MEGA_WHALE
        elif p.total_value > whale:
            score += SCORE_WHALE

        if p.buy_to_sell_ratio.is_skewed(cfg.skew_high, cfg.skew_low):
            score += SCORE_SKEWED_RATIO

        if p.transaction_frequency > cfg.very_frequent_per_hour:
            score += SCORE_VERY_FREQUENT
        elif p.transaction_frequency > cfg.frequent_per_hour:
            score += SCORE_FREQUENT

        if p.active_duration_hours < cfg.burst_max_hours and p.transaction_count > cfg.burst_min_transactions:
            score += SCORE_BURST

        if p.net_quote_change > cfg.profit_threshold:
            score += SCORE_PROFIT

        return score

    def profile_all(self, wallets: Mapping[str, WalletProfile]) -> list[SuspicionProfile]:
        return [self.profile(w) for w in wallets.values()]

    def rank(self, profiles: Iterable[SuspicionProfile]) -> list[SuspicionProfile]:
        """Top-N profiles by score; equal scores keep encounter order."""
        ranked = sorted(profiles, key=lambda p: p.suspicion_score, reverse=True)
        top = ranked[: self._cfg.top_n]
        if top:
            logger.info(
                "Ranked %d wallets: top score=%d, flagged=%d",
                len(ranked),
                top[0].suspicion_score,
                sum(1 for p in top if p.is_flagged),
            )
        return top

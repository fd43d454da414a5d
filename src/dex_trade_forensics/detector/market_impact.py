"""Market impact of the top suspicious wallets."""

from __future__ import annotations

from typing import Mapping, Sequence

from dex_trade_forensics.detector.models import MarketImpact, SuspicionProfile
from dex_trade_forensics.profiler.models import WalletProfile
from dex_trade_forensics.stats import safe_percent


class MarketImpactCalculator:
    def calculate(
        self,
        top_wallets: Sequence[SuspicionProfile],
        wallets: Mapping[str, WalletProfile],
        total_value: float,
    ) -> list[MarketImpact]:
        """Each wallet's traded value as a percent of ``total_value``."""
        impacts: list[MarketImpact] = []
        for suspect in top_wallets:
            profile = wallets.get(suspect.address)
            wallet_value = profile.total_value if profile is not None else 0.0
            impacts.append(
                MarketImpact(
                    address=suspect.address,
                    suspicion_score=suspect.suspicion_score,
                    wallet_value=wallet_value,
                    market_impact=safe_percent(wallet_value, total_value),
                )
            )
        return impacts

    @staticmethod
    def flagged_impact(impacts: Sequence[MarketImpact], *, min_score: int = 3) -> float:
        """Combined market share of wallets scoring at least ``min_score``."""
        return sum(i.market_impact for i in impacts if i.suspicion_score >= min_score)

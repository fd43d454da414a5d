"""Per-wallet lifetime activity aggregation.

Folds the sorted trade sequence into one WalletProfile per address in a
single pass. Every update is a sum or a min/max, so partial folds over
disjoint partitions can be combined with ``merge``.
"""

from __future__ import annotations

import logging
from typing import Iterable, Mapping

from dex_trade_forensics.ingestor.models import TradeRecord
from dex_trade_forensics.profiler.models import WalletProfile

logger = logging.getLogger(__name__)


class WalletActivityAggregator:
    """Builds address -> WalletProfile mappings."""

    def aggregate(self, trades: Iterable[TradeRecord]) -> dict[str, WalletProfile]:
        wallets: dict[str, WalletProfile] = {}
        skipped = 0

        for trade in trades:
            if not trade.wallet_address:
                skipped += 1
                continue

            profile = wallets.get(trade.wallet_address)
            if profile is None:
                profile = WalletProfile(
                    address=trade.wallet_address,
                    first_seen=trade.timestamp,
                    last_seen=trade.timestamp,
                )
                wallets[trade.wallet_address] = profile

            profile.first_seen = min(profile.first_seen, trade.timestamp)
            profile.last_seen = max(profile.last_seen, trade.timestamp)

            if trade.is_buy:
                profile.buys.add(trade.amount, trade.value)
            else:
                profile.sells.add(trade.amount, trade.value)

            profile.total_transactions += 1
            profile.net_quote_change += trade.net_quote_change

        if skipped:
            logger.debug("Skipped %d trades without a wallet address", skipped)
        logger.info("Profiled %d wallets", len(wallets))
        return wallets

    @staticmethod
    def merge(
        left: Mapping[str, WalletProfile],
        right: Mapping[str, WalletProfile],
    ) -> dict[str, WalletProfile]:
        """Combine two partial aggregations into new profiles.

        Neither input is modified. Keys from ``left`` keep their order,
        new keys from ``right`` follow.
        """
        merged: dict[str, WalletProfile] = {}
        for address in [*left, *(a for a in right if a not in left)]:
            a = left.get(address) or right[address]
            b = right.get(address) if address in left else None
            if b is None:
                b = WalletProfile(address=address, first_seen=a.first_seen, last_seen=a.last_seen)
            merged[address] = WalletProfile(
                address=address,
                first_seen=min(a.first_seen, b.first_seen),
                last_seen=max(a.last_seen, b.last_seen),
                buys=a.buys.merged(b.buys),
                sells=a.sells.merged(b.sells),
                total_transactions=a.total_transactions + b.total_transactions,
                net_quote_change=a.net_quote_change + b.net_quote_change,
            )
        return merged

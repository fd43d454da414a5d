"""Wallet profiling layer - Per-wallet lifetime activity."""

from dex_trade_forensics.profiler.models import SideTotals, WalletProfile
from dex_trade_forensics.profiler.wallets import WalletActivityAggregator

__all__ = [
    "SideTotals",
    "WalletActivityAggregator",
    "WalletProfile",
]

"""Markdown report formatter.

This module turns an AnalysisResult into a human-readable Markdown report
covering key findings, wallet behaviour, market cycles, whale activity,
price impact factors and risk warnings.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Literal

from dex_trade_forensics.detector.market_impact import MarketImpactCalculator
from dex_trade_forensics.detector.models import PriceImpactKind, RiskWarnings, SuspicionProfile
from dex_trade_forensics.pipeline import AnalysisResult

TIME_FORMAT = "%Y-%m-%d %H:%M:%S UTC"

# Whale entries listed in the report
TOP_WHALE_ENTRIES = 5

# Suspicion levels
HIGH_SUSPICION_LABEL = "HIGH"
FLAGGED_LABEL = "FLAGGED"

_IMPACT_LABELS = {
    PriceImpactKind.WHALE_BUY: "Whale buy",
    PriceImpactKind.RETAIL_FOLLOW: "Retail follow-through",
    PriceImpactKind.WHALE_SELL: "Whale sell",
}


def truncate_address(address: str, chars: int = 4) -> str:
    """Shorten a wallet address to ABCD...WXYZ form."""
    if len(address) < chars * 2 + 3:
        return address
    return f"{address[:chars]}...{address[-chars:]}"


def format_usd(amount: float) -> str:
    """Format a value with commas and 2 decimal places."""
    return f"${amount:,.2f}"


def format_time(timestamp: int) -> str:
    return datetime.fromtimestamp(timestamp, tz=timezone.utc).strftime(TIME_FORMAT)


def format_pct(value: float, *, signed: bool = False) -> str:
    return f"{value:+.2f}%" if signed else f"{value:.2f}%"


def get_suspicion_level(profile: SuspicionProfile) -> str:
    """Get human-readable suspicion level for a wallet."""
    if profile.is_high_suspicion:
        return HIGH_SUSPICION_LABEL
    if profile.is_flagged:
        return FLAGGED_LABEL
    return "LOW"


def detected(flag: bool) -> str:
    return "Detected" if flag else "Not detected"


class ReportFormatter:
    """Formats an AnalysisResult into a Markdown report.

    Supports two verbosity levels:
    - compact: overview and key findings only
    - detailed: every section, including risk warnings and conclusions
    """

    def __init__(
        self,
        verbosity: Literal["compact", "detailed"] = "detailed",
        title: str = "Token Trading Analysis Report",
    ) -> None:
        self.verbosity = verbosity
        self.title = title

    def format(self, result: AnalysisResult, *, generated_at: datetime | None = None) -> str:
        """Render the report.

        Args:
            result: Output of AnalysisPipeline.run().
            generated_at: Timestamp for the footer. Defaults to now (UTC).

        Returns:
            The Markdown document.
        """
        generated_at = generated_at or datetime.now(timezone.utc)

        if result.is_empty:
            sections = [f"# {self.title}", self._build_empty(result)]
        else:
            sections = [
                f"# {self.title}",
                self._build_overview(result),
                self._build_key_findings(result),
            ]
            if self.verbosity == "detailed":
                sections += [
                    self._build_detailed_analysis(result),
                    self._build_price_impacts(result),
                    self._build_risk_warnings(result.risk_warnings),
                    self._build_conclusion(result),
                ]

        footer = (
            "---\n"
            "*Generated automatically for reference only. Not investment advice.*\n"
            f"*Generated at: {generated_at.strftime(TIME_FORMAT)}*"
        )
        sections.append(footer)
        return "\n\n".join(sections) + "\n"

    def _build_empty(self, result: AnalysisResult) -> str:
        lines = ["## 1. Overview", "Insufficient data: no valid trades to analyze."]
        stats = result.stats
        lines.append(f"Rows received: {stats.rows_received}, dropped: {stats.rows_dropped}")
        return "\n".join(lines)

    def _build_overview(self, result: AnalysisResult) -> str:
        start, end = result.time_range
        extrema = result.price_extrema
        if extrema is not None:
            price_range = f"{extrema.min_price:.6e} - {extrema.max_price:.6f}"
            multiplier = f"{extrema.volatility_multiplier:.2e}"
        else:
            price_range = multiplier = "N/A"

        lines = [
            "## 1. Overview",
            f"Time range: {format_time(start)} to {format_time(end)}",
            f"Total records: {len(result.trades)}",
            f"Price range: {price_range}",
            f"Price fluctuation multiple: {multiplier}",
        ]
        if result.stats.rows_dropped:
            lines.append(f"Malformed rows dropped: {result.stats.rows_dropped}")
        return "\n".join(lines)

    def _build_key_findings(self, result: AnalysisResult) -> str:
        flagged = result.flagged_wallets
        impact = MarketImpactCalculator.flagged_impact(result.market_impacts)
        top = result.suspected_manipulators[0] if result.suspected_manipulators else None

        extreme = [e for e in result.price_changes if e.is_extreme]
        biggest_rise = max(result.price_changes, key=lambda e: e.percent_change, default=None)
        biggest_drop = min(result.price_changes, key=lambda e: e.percent_change, default=None)

        lines = [
            "## 2. Key Findings",
            "",
            "### 2.1 Suspicious Wallet Activity",
            f"- {len(flagged)} highly suspicious wallet addresses identified",
            f"- These addresses account for {format_pct(impact)} of total traded value",
        ]
        if top is not None:
            lines.append(
                f"- Most suspicious wallet: {top.address}, score: {top.suspicion_score} "
                f"({get_suspicion_level(top)})"
            )
        else:
            lines.append("- Most suspicious wallet: N/A")

        lines += [
            "",
            "### 2.2 Price Movement",
            f"- {len(extreme)} significant price changes detected (>10%)",
            "- Largest single rise: "
            + (format_pct(biggest_rise.percent_change, signed=True) if biggest_rise else "N/A"),
            "- Largest single drop: "
            + (format_pct(biggest_drop.percent_change, signed=True) if biggest_drop else "N/A"),
            "",
            "### 2.3 Trading Patterns",
            f"- Pump and dump: {detected(bool(result.pump_and_dumps))}",
            f"- Wash trading: {detected(result.has_wash_trading)}",
            f"- Coordinated activity: {detected(bool(result.coordinated_activities))}",
        ]

        if result.pump_and_dumps:
            lines.append("")
            lines.append(self._build_pump_evidence(result))
        return "\n".join(lines)

    def _build_pump_evidence(self, result: AnalysisResult) -> str:
        candidate = result.pump_and_dumps[0]
        evidence = candidate.evidence
        if not evidence.is_typical_pattern:
            return "No typical pump-and-dump pattern detected"
        return "\n".join(
            [
                "1. Whale addresses accumulated at low prices.",
                "2. Price was pushed up through small buy orders.",
                "3. Retail buying increased "
                f"{evidence.retail_activity_increase:.1f}x during the rise.",
                "4. After the price peaked "
                f"({format_time(candidate.pump.end_timestamp)}), whale addresses sold in batches.",
                f"   - Amount sold: about {format_usd(candidate.whale_sells_value)}.",
            ]
        )

    def _build_detailed_analysis(self, result: AnalysisResult) -> str:
        suspects = result.suspected_manipulators
        lines = ["## 3. Detailed Analysis", "", "### 3.1 Wallet Behaviour"]
        if suspects:
            busiest = max(suspects, key=lambda p: p.transaction_count)
            richest = max(suspects, key=lambda p: p.net_quote_change)
            lines.append(
                f"- Most active wallet: {busiest.address} "
                f"({busiest.transaction_count} transactions)"
            )
            lines.append(
                f"- Most profitable wallet: {richest.address} "
                f"(net gain {richest.net_quote_change:.2f})"
            )
        else:
            lines.append("- No wallet activity")

        lines += ["", "### 3.2 Market Cycles"]
        if result.market_cycles:
            for cycle in result.market_cycles:
                lines.append(
                    f"- {cycle.phase.description}: {format_time(cycle.start_time)} to "
                    f"{format_time(cycle.end_time)} ({format_pct(cycle.price_change, signed=True)})"
                )
        else:
            lines.append("- No market cycle transitions detected")

        lines += ["", "### 3.3 Whale Activity"]
        entries = sorted(result.whale_entries, key=lambda w: w.total_buy_volume, reverse=True)
        if entries:
            for entry in entries[:TOP_WHALE_ENTRIES]:
                lines.append(
                    f"- {entry.whale_count} whale addresses entered at "
                    f"{format_time(entry.timestamp)}, holding "
                    f"{format_pct(entry.percent_of_total_volume)} of traded tokens"
                )
        else:
            lines.append("- No significant whale entries detected")
        return "\n".join(lines)

    def _build_price_impacts(self, result: AnalysisResult) -> str:
        lines = ["## 4. Price Impact Factors"]
        if not result.price_impacts:
            lines.append("- No price impact events detected")
        for impact in result.price_impacts:
            lines.append(
                f"- {format_time(impact.timestamp)}: {_IMPACT_LABELS[impact.kind]} -> price "
                f"{format_pct(impact.percent_change, signed=True)}"
            )
        return "\n".join(lines)

    def _build_risk_warnings(self, warnings: RiskWarnings | None) -> str:
        lines = ["## 5. Risk Warnings", ""]
        if warnings is None:
            lines += ["### 5.1 Trading Risk", "No obvious trading risk detected"]
            return "\n".join(lines)

        extrema = warnings.extrema
        lines += [
            "### 5.1 Price Manipulation Risk",
            f"- Evidence: between {format_time(extrema.max_timestamp)} and "
            f"{format_time(extrema.min_timestamp)} price fluctuated more than "
            f"{extrema.volatility_multiplier:.2e}x",
            f"- Highest price: {extrema.max_price:.6f} at {format_time(extrema.max_timestamp)}",
            f"- Lowest price: {extrema.min_price:.6e} at {format_time(extrema.min_timestamp)}",
            "",
            "### 5.2 Liquidity Risk",
        ]
        imbalance = warnings.liquidity_imbalance
        if imbalance is not None:
            lines.append(
                f"- Evidence: at {format_time(imbalance.timestamp)} sell volume was "
                f"{imbalance.sell_to_buy_volume_ratio:.1f}x buy volume"
            )
            lines.append("- Impact: rapid price decline")
        else:
            lines.append("- No significant liquidity imbalance found")

        lines += ["", "### 5.3 Market Manipulation Risk"]
        interval = warnings.concentrated_interval
        if interval is not None:
            lines.append(
                f"- Evidence: at {format_time(interval.timestamp)} {interval.unique_wallets} wallets "
                f"completed {interval.total_transactions} transactions"
            )
            lines.append("- Impact: trading highly concentrated in a few wallets")
        else:
            lines.append("- No obvious trading concentration found")
        return "\n".join(lines)

    def _build_conclusion(self, result: AnalysisResult) -> str:
        manipulated = bool(result.pump_and_dumps) or any(
            i.suspicious_score > 5 for i in result.suspicious_intervals
        )
        lines = ["## 6. Conclusions", ""]
        if manipulated:
            lines.append("- Trading shows clear signs of manipulation; exercise caution.")
            lines.append("- The suspicious wallets listed above warrant further investigation.")
        else:
            lines.append("- No obvious manipulation detected, but volatility remains high.")

        extrema = result.price_extrema
        if extrema is not None:
            lines.append(
                f"- Price ranged from {extrema.min_price:.6e} to {extrema.max_price:.6f}."
            )
        else:
            lines.append("- Insufficient price data for a complete assessment.")

        if result.coordinated_activities:
            lines.append("- Coordinated activity detected; possible market manipulation.")
        else:
            lines.append("- No obvious coordinated activity detected.")
        return "\n".join(lines)

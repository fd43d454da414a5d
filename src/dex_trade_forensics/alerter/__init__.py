"""Report rendering for analysis results."""

from dex_trade_forensics.alerter.formatter import ReportFormatter

__all__ = ["ReportFormatter"]

"""Derived time series for visualization."""

from dex_trade_forensics.charts.series import ChartSeriesBuilder, ChartSeries

__all__ = ["ChartSeries", "ChartSeriesBuilder"]

"""Aggregate statistics over combined listings."""

from .summary import SaleStatistics, calculate_stats

__all__ = ["SaleStatistics", "calculate_stats"]

"""Aggregate price change statistics over combined listings."""

import math
import statistics
from dataclasses import dataclass, field
from typing import Dict, Iterable

from reconciler.domain.models import NormalizedRecord


@dataclass
class SaleStatistics:
    """
    Price change statistics for one set of listings.

    Attributes:
        average: Mean percentChange of the counted records (0 when none)
        median: Median percentChange of the counted records (0 when none)
        count: Number of records contributing to average and median
        excluded_count: Secondary records left out of the statistics
        source_counts: Counted records per source value
    """

    average: float = 0.0
    median: float = 0.0
    count: int = 0
    excluded_count: int = 0
    source_counts: Dict[str, int] = field(default_factory=dict)

    def to_output(self) -> Dict:
        """Serialize with camelCase keys for JSON output."""
        return {
            "average": self.average,
            "median": self.median,
            "count": self.count,
            "excludedCount": self.excluded_count,
            "sourceCounts": dict(self.source_counts),
        }


def calculate_stats(records: Iterable[NormalizedRecord]) -> SaleStatistics:
    """Average and median percentChange, skipping secondaries and non-finite values.

    Example:
        >>> calculate_stats([]).average
        0.0
    """
    values = []
    excluded = 0
    source_counts: Dict[str, int] = {}

    for record in records:
        if not record.counts_in_stats:
            excluded += 1
            continue
        if not math.isfinite(record.percent_change):
            continue
        values.append(record.percent_change)
        source_counts[record.source.value] = source_counts.get(record.source.value, 0) + 1

    if not values:
        return SaleStatistics(excluded_count=excluded, source_counts=source_counts)

    return SaleStatistics(
        average=statistics.fmean(values),
        median=float(statistics.median(values)),
        count=len(values),
        excluded_count=excluded,
        source_counts=source_counts,
    )

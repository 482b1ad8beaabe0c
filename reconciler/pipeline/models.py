"""Data models for pipeline execution tracking and reporting."""

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from reconciler.stats import SaleStatistics


@dataclass
class SourceRunStats:
    """
    Statistics for a single source's input within a pipeline run.

    Attributes:
        source_id: Source value ("booli" or "hemnet")
        input_path: File the records were read from
        read_count: Number of raw records read from the file
        kept_count: Number of records left after cleaning
        dropped_count: Number of records removed by cleaning
        unmatched_count: Number of records that passed through unmatched
        cleaned: Whether cleaning was applied to this source
    """

    source_id: str
    input_path: Optional[Path] = None
    read_count: int = 0
    kept_count: int = 0
    dropped_count: int = 0
    unmatched_count: int = 0
    cleaned: bool = False


@dataclass
class PipelineRunResult:
    """
    Aggregate results from a complete pipeline execution.

    Attributes:
        run_id: Identifier attached to every log line of the run
        run_started_at: UTC timestamp when the run began
        run_finished_at: UTC timestamp when the run completed
        total_duration_seconds: Total time for the entire run
        group_count: Number of accepted match groups
        combined_count: Number of records in the combined output
        total_read: Raw records read across both sources
        total_dropped: Records removed by cleaning across both sources
        source_stats: Per-source input statistics
        stats: Price change statistics over the combined records
        output_path: Where the combined document was written, if anywhere
    """

    run_id: str
    run_started_at: datetime
    run_finished_at: datetime
    total_duration_seconds: float = 0.0
    group_count: int = 0
    combined_count: int = 0
    total_read: int = 0
    total_dropped: int = 0
    source_stats: List[SourceRunStats] = field(default_factory=list)
    stats: SaleStatistics = field(default_factory=SaleStatistics)
    output_path: Optional[Path] = None

    def __post_init__(self):
        """Compute aggregate statistics from source stats if not already set."""
        if self.source_stats and self.total_read == 0:
            self.total_read = sum(s.read_count for s in self.source_stats)
            self.total_dropped = sum(s.dropped_count for s in self.source_stats)

        if self.total_duration_seconds == 0.0:
            delta = self.run_finished_at - self.run_started_at
            self.total_duration_seconds = delta.total_seconds()

    def summary_line(self) -> str:
        """One-line human readable summary for the CLI."""
        per_source = ", ".join(f"{s.source_id}={s.kept_count}" for s in self.source_stats)
        return (
            f"Merged {per_source} into {self.combined_count} records "
            f"({self.group_count} groups, {self.total_dropped} dropped); "
            f"average {self.stats.average:.2f}%, median {self.stats.median:.2f}%"
        )

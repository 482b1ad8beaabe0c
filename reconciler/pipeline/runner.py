"""Pipeline orchestration for one reconciliation run."""

import json
import time
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union
from uuid import uuid4

from reconciler.config.environment import EnvironmentConfig
from reconciler.config.models import AppConfig, SourceTag
from reconciler.logging import get_logger
from reconciler.logging.context import log_context
from reconciler.matching.engine import GroupMerger
from reconciler.matching.models import MergeResult
from reconciler.matching.scorer import MatchScorer
from reconciler.matching.utils import serialize_group
from reconciler.normalization.service import RecordNormalizer
from reconciler.stats import SaleStatistics, calculate_stats
from reconciler.utils.timestamps import utc_now

from .cleaning import clean_listings
from .exceptions import InputDataError
from .models import PipelineRunResult, SourceRunStats

logger = get_logger(__name__, component="pipeline")

PathLike = Union[str, Path]


class ReconcilePipeline:
    """
    Orchestrates a single reconciliation of a Booli and a Hemnet export.

    The pipeline coordinates reading both input files, cleaning scraped
    records, merging them into one combined list, computing statistics and
    writing the combined document.
    """

    def __init__(
        self,
        app_config: Optional[AppConfig] = None,
        env_config: Optional[EnvironmentConfig] = None,
        merger: Optional[GroupMerger] = None,
    ):
        """
        Initialize the reconcile pipeline.

        Args:
            app_config: Application configuration (defaults to AppConfig())
            env_config: Environment configuration (defaults to EnvironmentConfig())
            merger: GroupMerger to use (defaults to one built from app_config)
        """
        self.app_config = app_config or AppConfig()
        self.env_config = env_config or EnvironmentConfig()
        self.merger = merger or GroupMerger(
            matching_config=self.app_config.matching,
            normalizer=RecordNormalizer(self.app_config.sources),
            scorer=MatchScorer(self.app_config.matching),
        )

    def run_once(
        self,
        booli_path: PathLike,
        hemnet_path: PathLike,
        output_path: Optional[PathLike] = None,
    ) -> PipelineRunResult:
        """
        Execute a complete reconciliation.

        This method:
        1. Reads both input files (each must hold a JSON array)
        2. Cleans each source where cleaning is enabled
        3. Merges the two collections
        4. Computes price change statistics over the combined records
        5. Writes the combined document when an output path is given

        Args:
            booli_path: Booli export (JSON array)
            hemnet_path: Hemnet export (JSON array)
            output_path: Optional destination for the combined document

        Returns:
            PipelineRunResult with counts, statistics and timing

        Raises:
            InputDataError: If an input file is missing, unreadable or not a list,
                or the output cannot be written
        """
        run_started_at = utc_now()
        run_id = uuid4().hex

        with log_context(run_id=run_id):
            logger.info(
                "Pipeline run started",
                extra={
                    "event": "pipeline.run.started",
                    "booli_path": str(booli_path),
                    "hemnet_path": str(hemnet_path),
                },
            )

            booli_raw, booli_stats = self._load_source(booli_path, SourceTag.BOOLI)
            hemnet_raw, hemnet_stats = self._load_source(hemnet_path, SourceTag.HEMNET)

            merge_start = time.time()
            merge_result = self.merger.merge(booli_raw, hemnet_raw)
            stats = calculate_stats(merge_result.combined)

            summary = merge_result.summary()
            booli_stats.unmatched_count = summary["unmatched_booli_count"]
            hemnet_stats.unmatched_count = summary["unmatched_hemnet_count"]

            logger.info(
                "Merge finished",
                extra={
                    "event": "pipeline.merge.completed",
                    "duration_ms": int((time.time() - merge_start) * 1000),
                    "average": stats.average,
                    "median": stats.median,
                    **summary,
                },
            )

            written_path = None
            if output_path is not None:
                written_path = self.write_output(output_path, merge_result, stats)

            result = PipelineRunResult(
                run_id=run_id,
                run_started_at=run_started_at,
                run_finished_at=utc_now(),
                group_count=len(merge_result.groups),
                combined_count=len(merge_result.combined),
                source_stats=[booli_stats, hemnet_stats],
                stats=stats,
                output_path=written_path,
            )

            logger.info(
                "Pipeline run completed",
                extra={
                    "event": "pipeline.run.completed",
                    "duration_ms": int(result.total_duration_seconds * 1000),
                    "total_read": result.total_read,
                    "total_dropped": result.total_dropped,
                    "group_count": result.group_count,
                    "combined_count": result.combined_count,
                },
            )

            return result

    def _load_source(self, path: PathLike, source: SourceTag) -> Tuple[List[Any], SourceRunStats]:
        """Read and optionally clean one source export."""
        input_path = self.resolve_input_path(path)

        with log_context(source_id=source.value):
            records = read_records(input_path)
            settings = self.app_config.sources.for_tag(source)

            kept = clean_listings(records, source) if settings.clean_inputs else records

            stats = SourceRunStats(
                source_id=source.value,
                input_path=input_path,
                read_count=len(records),
                kept_count=len(kept),
                dropped_count=len(records) - len(kept),
                cleaned=settings.clean_inputs,
            )

            logger.info(
                f"Loaded {stats.kept_count} {source.value} records",
                extra={
                    "event": "source.input.loaded",
                    "input_path": str(input_path),
                    "read_count": stats.read_count,
                    "kept_count": stats.kept_count,
                    "dropped_count": stats.dropped_count,
                    "cleaned": stats.cleaned,
                },
            )

            return kept, stats

    def resolve_input_path(self, path: PathLike) -> Path:
        """Resolve a relative input path, falling back to the data directory."""
        path = Path(path).expanduser()
        if path.is_absolute() or path.exists():
            return path

        candidate = self.env_config.data_dir / path
        if candidate.exists():
            return candidate
        return path

    def write_output(
        self, output_path: PathLike, merge_result: MergeResult, stats: SaleStatistics
    ) -> Path:
        """
        Write the combined document as JSON.

        Args:
            output_path: Destination file (parent directories are created)
            merge_result: Result of the merge
            stats: Statistics over the combined records

        Returns:
            Path the document was written to

        Raises:
            InputDataError: If the file cannot be written
        """
        path = Path(output_path).expanduser()
        document = build_output_document(merge_result, stats)

        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, "w", encoding="utf-8") as f:
                json.dump(document, f, ensure_ascii=False, indent=2)
        except OSError as e:
            raise InputDataError(
                f"Failed to write output file: {path}",
                errors=[str(e)],
                suggestions=["Check that the output directory is writable"],
            )

        logger.info(
            f"Wrote combined output to {path}",
            extra={
                "event": "pipeline.output.written",
                "output_path": str(path),
                "record_count": len(document["combined"]),
            },
        )

        return path


def build_output_document(merge_result: MergeResult, stats: SaleStatistics) -> Dict[str, Any]:
    """Combined records, groups and statistics with camelCase keys."""
    return {
        "combined": [record.to_output() for record in merge_result.combined],
        "groups": [serialize_group(group) for group in merge_result.groups],
        "stats": stats.to_output(),
    }


def read_records(path: PathLike) -> List[Any]:
    """
    Read one source export.

    Args:
        path: JSON file holding an array of raw records

    Returns:
        The decoded list

    Raises:
        InputDataError: If the file is missing, unreadable, not JSON or not a list
    """
    path = Path(path)

    if not path.exists():
        raise InputDataError(
            f"Input file not found: {path}",
            suggestions=[
                "Check the path passed on the command line",
                "Relative paths are also looked up in RECONCILER_DATA_DIR",
            ],
        )

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise InputDataError(
            f"Input file is not valid JSON: {path}",
            errors=[f"Line {e.lineno}, column {e.colno}: {e.msg}"],
        )
    except (OSError, UnicodeDecodeError) as e:
        raise InputDataError(f"Failed to read input file: {path}", errors=[str(e)])

    if not isinstance(data, list):
        raise InputDataError(
            f"Input file must contain a JSON array of listings: {path}",
            errors=[f"Top-level value is {type(data).__name__}"],
            suggestions=["Export the scraped listings as a list of objects"],
        )

    return data

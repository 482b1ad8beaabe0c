"""Pipeline orchestration for reading, cleaning, merging and writing listings."""

from .cleaning import clean_listings
from .exceptions import InputDataError
from .models import PipelineRunResult, SourceRunStats
from .runner import ReconcilePipeline, build_output_document, read_records

__all__ = [
    "ReconcilePipeline",
    "PipelineRunResult",
    "SourceRunStats",
    "InputDataError",
    "clean_listings",
    "build_output_document",
    "read_records",
]

"""Field normalization for heterogeneous listing records.

This module provides:
- RecordNormalizer: converts raw Booli/Hemnet records into NormalizedRecord
- parse_price / parse_percentage: wrapper-aware value parsers
- compute_percent_change: final vs asking price in percentage points
"""

from .parsers import first_parsed, parse_percentage, parse_price, unwrapping
from .service import RecordNormalizer, compute_percent_change

__all__ = [
    "RecordNormalizer",
    "compute_percent_change",
    "parse_price",
    "parse_percentage",
    "first_parsed",
    "unwrapping",
]

"""Cross-source matching for sold listings.

This module provides:
- GroupMerger: greedy one-to-one matching and group record construction
- merge_sources: convenience entry point over raw Booli and Hemnet records
- MatchScorer: pairwise scoring with hard rejects
- AddressIndex: address blocking index
- MatchGroup / MergeResult: merge output structures
- Utility functions for rationale and output serialization
"""

from .blocking import AddressIndex, address_key, build_index, normalize_address_key
from .engine import GroupMerger, merge_sources
from .models import SOURCE_PRIORITY, CombinedRecord, MatchGroup, MergeResult
from .scorer import MatchScorer, percent_difference
from .utils import build_group_rationale, format_group_summary, serialize_group

__all__ = [
    "GroupMerger",
    "merge_sources",
    "MatchScorer",
    "percent_difference",
    "AddressIndex",
    "address_key",
    "build_index",
    "normalize_address_key",
    "MatchGroup",
    "MergeResult",
    "CombinedRecord",
    "SOURCE_PRIORITY",
    "build_group_rationale",
    "format_group_summary",
    "serialize_group",
]

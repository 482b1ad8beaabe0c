"""Data models for the matching engine.

This module defines the match group produced for every accepted pair and the
result of one merge over two source collections.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Union

from reconciler.config.models import SourceTag
from reconciler.domain.models import MatchScore, MergedRecord, NormalizedRecord

# Hemnet members take precedence as primary and as price source
SOURCE_PRIORITY = (SourceTag.HEMNET, SourceTag.BOOLI)

CombinedRecord = Union[MergedRecord, NormalizedRecord]


@dataclass(frozen=True)
class MatchGroup:
    """A set of records from both sources judged to describe one sale.

    Attributes:
        id: Group identifier, unique within one merge
        members: Member records, Hemnet member first
        match_score: Score of the accepted pair
    """

    id: str
    members: List[NormalizedRecord]
    match_score: MatchScore

    def members_by_priority(self) -> List[NormalizedRecord]:
        """Members ordered by SOURCE_PRIORITY, stable within one source."""
        rank = {tag: i for i, tag in enumerate(SOURCE_PRIORITY)}
        return sorted(self.members, key=lambda record: rank[record.source])

    def members_by_source(self) -> Dict[str, List[NormalizedRecord]]:
        """Members keyed by source value, for display."""
        grouped: Dict[str, List[NormalizedRecord]] = {}
        for record in self.members_by_priority():
            grouped.setdefault(record.source.value, []).append(record)
        return grouped

    def member_ids(self) -> Dict[str, List[str]]:
        return {
            source: [record.id for record in records]
            for source, records in self.members_by_source().items()
        }


@dataclass
class MergeResult:
    """Output of one merge.

    Attributes:
        combined: Primaries, then secondaries, then unmatched Booli records,
            then unmatched Hemnet records
        groups: Accepted match groups in creation order
        booli_count: Number of Booli input records
        hemnet_count: Number of Hemnet input records
    """

    combined: List[CombinedRecord] = field(default_factory=list)
    groups: List[MatchGroup] = field(default_factory=list)
    booli_count: int = 0
    hemnet_count: int = 0

    @property
    def primaries(self) -> List[MergedRecord]:
        return [r for r in self.combined if isinstance(r, MergedRecord) and r.is_primary]

    @property
    def secondaries(self) -> List[MergedRecord]:
        return [r for r in self.combined if isinstance(r, MergedRecord) and not r.is_primary]

    @property
    def unmatched(self) -> List[NormalizedRecord]:
        return [r for r in self.combined if not isinstance(r, MergedRecord)]

    def summary(self) -> Dict[str, int]:
        """Counts for logging and reporting."""
        unmatched = self.unmatched
        return {
            "booli_count": self.booli_count,
            "hemnet_count": self.hemnet_count,
            "group_count": len(self.groups),
            "combined_count": len(self.combined),
            "unmatched_booli_count": sum(1 for r in unmatched if r.source == SourceTag.BOOLI),
            "unmatched_hemnet_count": sum(1 for r in unmatched if r.source == SourceTag.HEMNET),
        }

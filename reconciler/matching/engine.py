"""Group merger for reconciling Booli and Hemnet sold listings.

This module implements the matching logic that:
1. Normalizes both source collections
2. Indexes Hemnet records by address key
3. Walks Booli records in input order and greedily claims the best unclaimed
   Hemnet candidate whose score is within the acceptance threshold
4. Builds one primary record plus secondary shadow records per group
5. Passes unmatched records through unchanged

Matching is greedy and order dependent: a Hemnet record claimed by an earlier
Booli record is never reconsidered, even if a later Booli record would have
scored better against it.
"""

import logging
from typing import Any, Iterable, List, Optional, Sequence, Set, Tuple

from reconciler.config.models import MatchingConfig, SourceTag
from reconciler.domain.models import MatchRole, MatchScore, MergedRecord, NormalizedRecord
from reconciler.logging import get_logger
from reconciler.normalization.parsers import as_finite_float
from reconciler.normalization.service import RecordNormalizer, compute_percent_change

from .blocking import address_key, build_index
from .models import MatchGroup, MergeResult
from .scorer import MatchScorer

logger = get_logger(__name__, component="matching")


def _first_nonzero(values: Iterable[float]) -> Optional[float]:
    """First value that is finite and not zero."""
    for value in values:
        if value and as_finite_float(value) is not None:
            return value
    return None


def _to_merged(member: NormalizedRecord, **overrides: Any) -> MergedRecord:
    data = member.model_dump()
    data.update(overrides)
    return MergedRecord.model_validate(data)


class GroupMerger:
    """Merges two normalized source collections into one combined record set.

    Responsibilities:
    - One-to-one greedy matching via the address index and MatchScorer
    - Primary selection and merged canonical prices
    - Secondary shadow records excluded from statistics
    - Output ordering: primaries, secondaries, unmatched Booli, unmatched Hemnet
    """

    def __init__(
        self,
        matching_config: Optional[MatchingConfig] = None,
        normalizer: Optional[RecordNormalizer] = None,
        scorer: Optional[MatchScorer] = None,
        logger_instance: Optional[logging.Logger] = None,
    ):
        """Initialize GroupMerger.

        Args:
            matching_config: Thresholds and weights (defaults to MatchingConfig())
            normalizer: RecordNormalizer for raw input (defaults to built-in source settings)
            scorer: MatchScorer (defaults to one built from matching_config)
            logger_instance: Logger instance (defaults to module logger)
        """
        self.config = matching_config or MatchingConfig()
        self.normalizer = normalizer or RecordNormalizer()
        self.scorer = scorer or MatchScorer(self.config)
        self.logger = logger_instance or logger

    def merge(self, booli_raw: Iterable[Any], hemnet_raw: Iterable[Any]) -> MergeResult:
        """Normalize and merge two raw source collections.

        Args:
            booli_raw: Raw Booli records (source A)
            hemnet_raw: Raw Hemnet records (source B)

        Returns:
            MergeResult with combined records and accepted groups
        """
        booli = self.normalizer.process_batch(booli_raw, SourceTag.BOOLI)
        hemnet = self.normalizer.process_batch(hemnet_raw, SourceTag.HEMNET)
        return self.merge_normalized(booli, hemnet)

    def merge_normalized(
        self, booli: Sequence[NormalizedRecord], hemnet: Sequence[NormalizedRecord]
    ) -> MergeResult:
        """Merge two already normalized collections.

        Args:
            booli: Normalized Booli records, in input order
            hemnet: Normalized Hemnet records, in input order

        Returns:
            MergeResult with combined records and accepted groups
        """
        groups = self._match(booli, hemnet)

        # Claims are tracked by object identity; scraped ids may repeat
        matched_refs: Set[int] = {id(member) for group in groups for member in group.members}

        primaries: List[MergedRecord] = []
        secondaries: List[MergedRecord] = []
        for group in groups:
            primary, group_secondaries = self.build_group_records(group)
            primaries.append(primary)
            secondaries.extend(group_secondaries)

        unmatched_booli = [r for r in booli if id(r) not in matched_refs]
        unmatched_hemnet = [r for r in hemnet if id(r) not in matched_refs]

        result = MergeResult(
            combined=[*primaries, *secondaries, *unmatched_booli, *unmatched_hemnet],
            groups=groups,
            booli_count=len(booli),
            hemnet_count=len(hemnet),
        )

        self.logger.info(
            f"Merge completed: {len(groups)} groups from {len(booli)} booli "
            f"and {len(hemnet)} hemnet records",
            extra={"event": "matching.merge.completed", **result.summary()},
        )

        return result

    def _match(
        self, booli: Sequence[NormalizedRecord], hemnet: Sequence[NormalizedRecord]
    ) -> List[MatchGroup]:
        """Greedy single-pass matching of Booli records against indexed Hemnet records."""
        index = build_index(hemnet)
        claimed_hemnet: Set[int] = set()
        groups: List[MatchGroup] = []

        self.logger.debug(
            "Built address index",
            extra={
                "event": "matching.index.built",
                "key_count": len(index),
                "indexed_count": index.record_count,
                "skipped_count": index.skipped_count,
            },
        )

        for booli_record in booli:
            key = address_key(booli_record)
            if not key:
                continue

            best = self._best_candidate(booli_record, index.candidates(key), claimed_hemnet)
            if best is None:
                continue

            hemnet_record, match_score = best
            if match_score.score > self.config.max_score:
                self.logger.debug(
                    f"Best candidate for {booli_record.id} above threshold",
                    extra={
                        "event": "matching.pair.above_threshold",
                        "booli_id": booli_record.id,
                        "hemnet_id": hemnet_record.id,
                        "score": match_score.score,
                    },
                )
                continue

            claimed_hemnet.add(id(hemnet_record))
            group = MatchGroup(
                id=f"match-{len(groups) + 1}",
                members=[hemnet_record, booli_record],
                match_score=match_score,
            )
            groups.append(group)

            self.logger.debug(
                f"Matched {booli_record.id} with {hemnet_record.id}",
                extra={
                    "event": "matching.pair.accepted",
                    "group_id": group.id,
                    "booli_id": booli_record.id,
                    "hemnet_id": hemnet_record.id,
                    "score": match_score.score,
                },
            )

        return groups

    def _best_candidate(
        self,
        record: NormalizedRecord,
        candidates: Sequence[NormalizedRecord],
        claimed: Set[int],
    ) -> Optional[Tuple[NormalizedRecord, MatchScore]]:
        """Lowest scoring unclaimed candidate; the earlier candidate wins ties."""
        best: Optional[Tuple[NormalizedRecord, MatchScore]] = None
        for candidate in candidates:
            if id(candidate) in claimed:
                continue
            match_score = self.scorer.score(record, candidate)
            if match_score is None:
                continue
            if best is None or match_score.score < best[1].score:
                best = (candidate, match_score)
        return best

    def build_group_records(self, group: MatchGroup) -> Tuple[MergedRecord, List[MergedRecord]]:
        """Build the primary and secondary records of one group.

        The primary is the first member in source priority order (Hemnet
        first). Its prices are the first non-zero value found scanning the
        members in that order; the price change is recomputed from those
        prices when both are known.

        Args:
            group: Accepted match group

        Returns:
            Tuple of (primary record, secondary records)
        """
        ordered = group.members_by_priority()
        primary_member = ordered[0]
        entries = group.members_by_source()

        asking_price = _first_nonzero(m.asking_price for m in ordered) or 0
        final_price = _first_nonzero(m.final_price for m in ordered) or 0
        percent_change = compute_percent_change(asking_price, final_price)
        if percent_change is None:
            percent_change = _first_nonzero(m.percent_change for m in ordered) or 0.0

        primary = _to_merged(
            primary_member,
            asking_price=asking_price,
            final_price=final_price,
            percent_change=percent_change,
            match_group_id=group.id,
            match_role=MatchRole.PRIMARY,
            exclude_from_stats=False,
            matched_entries=entries,
            match_score=group.match_score,
        )

        secondaries = [
            _to_merged(
                member,
                match_group_id=group.id,
                match_role=MatchRole.SECONDARY,
                exclude_from_stats=True,
                primary_id=primary.id,
                matched_entries=entries,
                match_score=group.match_score,
            )
            for member in ordered[1:]
        ]

        return primary, secondaries


def merge_sources(
    booli_raw: Iterable[Any],
    hemnet_raw: Iterable[Any],
    matching_config: Optional[MatchingConfig] = None,
) -> MergeResult:
    """Convenience wrapper: merge two raw collections with default settings.

    Args:
        booli_raw: Raw Booli records
        hemnet_raw: Raw Hemnet records
        matching_config: Optional thresholds and weights

    Returns:
        MergeResult
    """
    return GroupMerger(matching_config=matching_config).merge(booli_raw, hemnet_raw)

"""Pre-merge cleaning of scraped listing records.

Scrapers occasionally emit placeholder cards (no address, no prices, ids
taken from tracking links). Such records would only ever pass through the
merge unmatched and distort the statistics, so they are dropped before
normalization when cleaning is enabled for a source.
"""

import logging
from typing import Any, Iterable, List, Mapping, Optional

from reconciler.config.models import SourceTag
from reconciler.logging import get_logger
from reconciler.normalization.parsers import first_identifier, first_parsed, first_text, parse_price
from reconciler.normalization.service import (
    ADDRESS_FIELDS,
    ASKING_PRICE_FIELDS,
    FINAL_PRICE_FIELDS,
    ID_FIELDS,
)

logger = get_logger(__name__, component="cleaning")

MIN_HEMNET_ID_LENGTH = 10


def rejection_reason(raw: Any, source: SourceTag) -> Optional[str]:
    """Why a raw record would be dropped, or None when it is kept.

    Args:
        raw: Raw scraped record
        source: Source the record came from

    Returns:
        Short reason code, or None
    """
    if not isinstance(raw, Mapping):
        return "not_an_object"

    if first_text(raw, ADDRESS_FIELDS) is None:
        return "missing_address"

    asking_price = first_parsed(raw, ASKING_PRICE_FIELDS, parse_price) or 0
    final_price = first_parsed(raw, FINAL_PRICE_FIELDS, parse_price) or 0
    if asking_price <= 0 and final_price <= 0:
        return "missing_price"

    if SourceTag(source) == SourceTag.HEMNET:
        listing_id = first_identifier(raw, ID_FIELDS) or ""
        if len(listing_id) < MIN_HEMNET_ID_LENGTH or not listing_id.isdigit():
            return "invalid_id"

    return None


def clean_listings(
    records: Iterable[Any],
    source: SourceTag,
    logger_instance: Optional[logging.Logger] = None,
) -> List[Any]:
    """Drop scraped records that cannot describe a real sale.

    A record is kept when it has a non-blank street address, a positive
    asking or final price and, for Hemnet, an all-digit id of at least
    MIN_HEMNET_ID_LENGTH characters.

    Args:
        records: Raw records from one source, in scrape order
        source: Source the records came from
        logger_instance: Logger instance (defaults to module logger)

    Returns:
        Kept raw records, order preserved
    """
    log = logger_instance or logger
    source = SourceTag(source)
    kept: List[Any] = []
    dropped = 0

    for raw in records:
        reason = rejection_reason(raw, source)
        if reason is None:
            kept.append(raw)
            continue

        dropped += 1
        log.debug(
            f"Dropping {source.value} record",
            extra={
                "event": "cleaning.record.dropped",
                "source": source.value,
                "reason": reason,
                "record_id": first_identifier(raw, ID_FIELDS) if isinstance(raw, Mapping) else None,
            },
        )

    log.info(
        f"Cleaned {source.value} records: kept {len(kept)}, dropped {dropped}",
        extra={
            "event": "cleaning.batch.completed",
            "source": source.value,
            "kept_count": len(kept),
            "dropped_count": dropped,
        },
    )

    return kept

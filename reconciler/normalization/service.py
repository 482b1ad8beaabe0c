"""Listing normalization service for converting raw source records to NormalizedRecord.

This module implements the normalization logic that:
1. Extracts prices and price change from source-specific field names and shapes
2. Picks display address and area
3. Builds absolute listing URLs from relative links or listing ids
4. Keeps the raw record alongside the canonical fields

Normalization is total: any mapping (or even a non-mapping) yields a record.
"""

import logging
import math
import re
import uuid
from typing import Any, Iterable, List, Mapping, Optional

from reconciler.config.models import SourceSettings, SourcesConfig, SourceTag
from reconciler.domain.models import NO_ADDRESS_PLACEHOLDER, NormalizedRecord
from reconciler.logging import get_logger
from reconciler.utils.text import clean_display_text

from .parsers import (
    as_finite_float,
    first_identifier,
    first_parsed,
    first_text,
    parse_percentage,
    parse_price,
)

logger = get_logger(__name__, component="normalization")

ASKING_PRICE_FIELDS = ("askingPrice", "listPrice", "askPrice", "price")
FINAL_PRICE_FIELDS = ("finalPrice", "soldPrice", "salePrice")
PERCENT_CHANGE_FIELDS = ("percentChange", "soldPricePercentageDiff", "percentageChange")
ADDRESS_FIELDS = ("streetAddress", "address")
AREA_FIELDS = ("descriptiveAreaName", "area")
ID_FIELDS = ("id", "booliId")
# Ids that may fill a source's listing URL template
URL_ID_FIELDS = {
    SourceTag.BOOLI: ("id", "booliId"),
    SourceTag.HEMNET: ("id",),
}

_SYNTHESIZED_ID_RE = re.compile(r"^(?:booli|hemnet)-[0-9a-f]{32}$")


def is_synthesized_id(record_id: Optional[str]) -> bool:
    """Whether an id was generated by the normalizer rather than scraped."""
    return bool(record_id) and _SYNTHESIZED_ID_RE.match(record_id) is not None


def compute_percent_change(asking_price: float, final_price: float) -> Optional[float]:
    """Final price relative to asking price in percentage points.

    Returns None unless both prices are known (positive) and the result is finite.
    """
    if not (asking_price > 0 and final_price > 0):
        return None
    asking, final = as_finite_float(asking_price), as_finite_float(final_price)
    if asking is None or final is None:
        return None
    change = (final - asking) / asking * 100
    return change if math.isfinite(change) else None


class RecordNormalizer:
    """Normalizes raw Booli and Hemnet records into NormalizedRecord instances.

    Responsibilities:
    - Parse asking/final price and price change from any supported field shape
    - Derive price change from the prices when the source omits it
    - Resolve display address and area
    - Build absolute listing URLs using per-source settings
    - Synthesize ids for records that lack one
    """

    def __init__(
        self,
        sources: Optional[SourcesConfig] = None,
        logger_instance: Optional[logging.Logger] = None,
    ):
        """Initialize RecordNormalizer.

        Args:
            sources: Per-source URL settings (defaults to the built-in Booli/Hemnet layout)
            logger_instance: Logger instance (defaults to module logger)
        """
        self.sources = sources or SourcesConfig.model_validate({})
        self.logger = logger_instance or logger

    def normalize(self, raw: Any, source: SourceTag) -> NormalizedRecord:
        """Normalize a single raw record.

        Args:
            raw: Raw record as scraped (expected to be a mapping)
            source: Source the record came from

        Returns:
            NormalizedRecord with every field populated
        """
        source = SourceTag(source)
        settings = self.sources.for_tag(source)

        if not isinstance(raw, Mapping):
            self.logger.warning(
                f"Raw {source.value} record is not an object; normalizing as empty",
                extra={
                    "event": "normalization.record.not_mapping",
                    "source": source.value,
                    "raw_type": type(raw).__name__,
                },
            )
            raw = {}

        asking_price = first_parsed(raw, ASKING_PRICE_FIELDS, parse_price)
        if asking_price is None:
            asking_price = 0
        final_price = first_parsed(raw, FINAL_PRICE_FIELDS, parse_price)
        if final_price is None:
            final_price = 0

        percent_change = first_parsed(raw, PERCENT_CHANGE_FIELDS, parse_percentage)
        if percent_change is None:
            percent_change = compute_percent_change(asking_price, final_price)
        if percent_change is None:
            percent_change = 0.0

        raw_id = first_identifier(raw, ID_FIELDS)
        record_id = raw_id or f"{source.value}-{uuid.uuid4().hex}"
        url_id = first_identifier(raw, URL_ID_FIELDS[source])
        if is_synthesized_id(url_id):
            url_id = None

        address = first_text(raw, ADDRESS_FIELDS)

        record = NormalizedRecord(
            id=record_id,
            source=source,
            address=clean_display_text(address) if address else NO_ADDRESS_PLACEHOLDER,
            area=self._extract_area(raw),
            asking_price=asking_price,
            final_price=final_price,
            percent_change=percent_change,
            sold_date=clean_display_text(raw.get("soldDate")),
            url=self._build_url(raw.get("url"), url_id, settings),
            raw=dict(raw),
        )

        if raw_id is None:
            self.logger.debug(
                f"Synthesized id for {source.value} record without one",
                extra={
                    "event": "normalization.record.id_synthesized",
                    "source": source.value,
                    "record_id": record_id,
                },
            )

        return record

    def process_batch(self, raws: Iterable[Any], source: SourceTag) -> List[NormalizedRecord]:
        """Normalize a whole source collection, preserving order.

        Args:
            raws: Raw records from one source
            source: Source the records came from

        Returns:
            List of NormalizedRecord, one per input record
        """
        source = SourceTag(source)
        records = [self.normalize(raw, source) for raw in raws]

        self.logger.info(
            f"Normalized {len(records)} {source.value} records",
            extra={
                "event": "normalization.batch.completed",
                "source": source.value,
                "record_count": len(records),
                "without_address": sum(1 for r in records if not r.has_address),
                "without_final_price": sum(1 for r in records if r.final_price == 0),
            },
        )

        return records

    @staticmethod
    def _extract_area(raw: Mapping[str, Any]) -> str:
        """Resolve the neighborhood/municipality display name.

        Prefers a nested location object (region.municipalityName, then area),
        then a flat location string, then descriptiveAreaName/area.
        """
        location = raw.get("location")

        if isinstance(location, str) and location.strip():
            return clean_display_text(location)

        if isinstance(location, Mapping):
            region = location.get("region")
            if isinstance(region, Mapping):
                municipality = clean_display_text(region.get("municipalityName"))
                if municipality:
                    return municipality
            nested_area = clean_display_text(location.get("area"))
            if nested_area:
                return nested_area

        return clean_display_text(first_text(raw, AREA_FIELDS))

    @staticmethod
    def _build_url(url: Any, url_id: Optional[str], settings: SourceSettings) -> Optional[str]:
        """Resolve an absolute listing URL.

        Absolute links are kept, root-relative links get the source's base
        URL, and otherwise the listing id is put into the source's template.
        """
        if isinstance(url, str):
            url = url.strip()
            if url.startswith("http"):
                return url
            if url.startswith("//"):
                return f"https:{url}"
            if url.startswith("/"):
                return settings.absolute_url(url)

        if url_id:
            return settings.listing_url(url_id)

        return None

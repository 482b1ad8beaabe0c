"""Core domain models for sold listings and their merged output.

This module defines the data structures shared by every layer:
- NormalizedRecord: canonical shape of one listing, whatever its source
- MatchScore: how well one Booli listing and one Hemnet listing agree
- MergedRecord: a NormalizedRecord that belongs to a match group, either as
  the primary (counted in statistics) or as a secondary shadow (displayed only)

All models are immutable and serialize with camelCase keys, the shape the
presentation layer consumes.
"""

import math
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field, NonNegativeFloat, NonNegativeInt, field_validator
from pydantic.alias_generators import to_camel

from reconciler.config.models import SourceTag

NO_ADDRESS_PLACEHOLDER = "Ingen adress"

Price = Union[NonNegativeInt, NonNegativeFloat]


class MatchRole(str, Enum):
    """Position of a record inside its match group."""

    PRIMARY = "primary"
    SECONDARY = "secondary"


class NormalizedRecord(BaseModel):
    """A listing after field normalization.

    Every field has a safe default so a record can be built from any raw
    input. The untouched source record is kept in ``raw`` for display.
    """

    id: str = Field(..., min_length=1, description="Listing id, unique within its source")
    source: SourceTag = Field(..., description="Source the listing was scraped from")
    address: str = Field(NO_ADDRESS_PLACEHOLDER, description="Display street address")
    area: str = Field("", description="Neighborhood or municipality")
    asking_price: Price = Field(0, description="Asking price in SEK, 0 if unknown")
    final_price: Price = Field(0, description="Final price in SEK, 0 if unknown")
    percent_change: float = Field(0.0, description="Final vs asking price, percentage points")
    sold_date: str = Field("", description="Sold date as published by the source")
    url: Optional[str] = Field(None, description="Absolute link to the listing")
    raw: Dict[str, Any] = Field(default_factory=dict, repr=False, description="Source record")

    model_config = {
        "frozen": True,
        "populate_by_name": True,
        "alias_generator": to_camel,
        "json_schema_extra": {
            "example": {
                "id": "1382753718204968142",
                "source": "hemnet",
                "address": "Vasagatan 12",
                "area": "Mora",
                "askingPrice": 3100000,
                "finalPrice": 3010000,
                "percentChange": -2.9,
                "soldDate": "2024-05-03",
                "url": "https://www.hemnet.se/salda/1382753718204968142",
            }
        },
    }

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v: Any) -> Any:
        """Accept numeric ids as produced by Booli."""
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        if isinstance(v, float) and math.isfinite(v):
            return str(int(v)) if v.is_integer() else str(v)
        return v

    @property
    def has_address(self) -> bool:
        """Whether the listing carried a real address."""
        return bool(self.address.strip()) and self.address != NO_ADDRESS_PLACEHOLDER

    @property
    def counts_in_stats(self) -> bool:
        """Whether aggregate statistics should include this record."""
        return True

    def to_output(self) -> Dict[str, Any]:
        """Serialize with camelCase keys for JSON output."""
        return self.model_dump(mode="json", by_alias=True)


class MatchScore(BaseModel):
    """Compatibility of one Booli/Hemnet candidate pair. Lower is better.

    The optional components are None when they could not be computed and
    the fixed penalty was used in their place.
    """

    score: float = Field(..., ge=0, description="Composite score")
    date_diff_days: float = Field(..., ge=0, description="Sold date distance in days")
    final_price_diff_pct: float = Field(..., ge=0, description="Final price difference, percent")
    asking_price_diff_pct: Optional[NonNegativeFloat] = Field(
        None, description="Asking price difference, percent"
    )
    percent_change_diff_pct: Optional[NonNegativeFloat] = Field(
        None, description="Price change difference, percent"
    )

    model_config = {"frozen": True, "populate_by_name": True, "alias_generator": to_camel}


class MergedRecord(NormalizedRecord):
    """A listing that belongs to a match group.

    The primary carries the group's merged prices and is counted in
    statistics; secondaries carry their own member data, are excluded from
    statistics and point back to the primary.
    """

    match_group_id: str = Field(..., description="Id of the owning match group")
    match_role: MatchRole = Field(..., description="primary or secondary")
    exclude_from_stats: bool = Field(False, description="True for secondary shadow records")
    primary_id: Optional[str] = Field(None, description="Primary record id (secondaries only)")
    matched_entries: Dict[str, List[NormalizedRecord]] = Field(
        default_factory=dict, description="All group members keyed by source, for display"
    )
    match_score: Optional[MatchScore] = Field(None, description="Score that formed the group")

    @property
    def is_primary(self) -> bool:
        return self.match_role == MatchRole.PRIMARY

    @property
    def counts_in_stats(self) -> bool:
        return not self.exclude_from_stats

"""Domain models for the Sold Price Reconciler."""

from .models import (
    NO_ADDRESS_PLACEHOLDER,
    MatchRole,
    MatchScore,
    MergedRecord,
    NormalizedRecord,
)

__all__ = [
    "NormalizedRecord",
    "MergedRecord",
    "MatchScore",
    "MatchRole",
    "NO_ADDRESS_PLACEHOLDER",
]

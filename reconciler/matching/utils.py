"""Utility functions for preparing merge results for downstream consumers.

This module provides helpers for serializing match groups into the output
document and for structuring the rationale behind each accepted match.
"""

from typing import Dict, Optional

from reconciler.domain.models import MatchScore

from .models import MatchGroup


def _round(value: Optional[float], digits: int = 3) -> Optional[float]:
    return None if value is None else round(value, digits)


def build_group_rationale(group: MatchGroup) -> Dict:
    """Build a lightweight rationale dict for one match group.

    Useful for logs and for explaining in a UI why two listings were merged.

    Args:
        group: Accepted match group

    Returns:
        Dict with keys:
        - group_id: Group identifier
        - member_ids: Source value -> list of member ids
        - score: Composite score (lower is closer)
        - date_diff_days: Sold date distance in days
        - final_price_diff_pct: Final price difference in percent
        - asking_price_diff_pct: Asking price difference, None when unknown
        - percent_change_diff_pct: Price change difference, None when unknown
        - summary: One-line human readable description
    """
    match_score: MatchScore = group.match_score
    return {
        "group_id": group.id,
        "member_ids": group.member_ids(),
        "score": _round(match_score.score),
        "date_diff_days": _round(match_score.date_diff_days),
        "final_price_diff_pct": _round(match_score.final_price_diff_pct),
        "asking_price_diff_pct": _round(match_score.asking_price_diff_pct),
        "percent_change_diff_pct": _round(match_score.percent_change_diff_pct),
        "summary": format_group_summary(group),
    }


def format_group_summary(group: MatchGroup) -> str:
    """One-line summary of a match group.

    Example:
        "match-1: hemnet 1234567890 + booli 42 (score 0.42, 0.0 days, final 0.33%)"
    """
    members = " + ".join(f"{record.source.value} {record.id}" for record in group.members)
    score = group.match_score
    return (
        f"{group.id}: {members} "
        f"(score {score.score:.2f}, {score.date_diff_days:.1f} days, "
        f"final {score.final_price_diff_pct:.2f}%)"
    )


def serialize_group(group: MatchGroup) -> Dict:
    """Serialize a match group for the output document (camelCase keys)."""
    return {
        "id": group.id,
        "members": group.member_ids(),
        "matchScore": group.match_score.model_dump(mode="json", by_alias=True),
    }

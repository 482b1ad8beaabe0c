"""Match scorer for Booli/Hemnet candidate pairs.

Encodes the domain tolerances as hard rejects (sold date distance, final
price difference) and ranks the surviving pairs by a weighted composite
score where lower means a closer match.
"""

import logging
import math
from typing import Optional

from reconciler.config.models import MatchingConfig
from reconciler.domain.models import MatchScore, NormalizedRecord
from reconciler.logging import get_logger
from reconciler.utils.timestamps import days_between, parse_sold_date

logger = get_logger(__name__, component="matching")


def percent_difference(x: float, y: float) -> float:
    """Difference between two numbers relative to their mean, in percent.

    Falls back to the larger magnitude as denominator when the mean is zero.
    Returns infinity when either value is not finite (or too large for a
    float) or both are zero, so the result never passes a finite threshold.

    Example:
        >>> round(percent_difference(3_000_000, 3_010_000), 3)
        0.333
    """
    try:
        x, y = float(x), float(y)
    except OverflowError:
        return math.inf
    if not (math.isfinite(x) and math.isfinite(y)):
        return math.inf
    if x == 0 and y == 0:
        return math.inf

    diff = abs(x - y)
    mean = abs(x / 2 + y / 2)
    if mean == 0:
        result = diff / max(abs(x), abs(y)) * 100
    else:
        result = diff / mean * 100
    return result if math.isfinite(result) else math.inf


class MatchScorer:
    """Scores one Booli record (a) against one Hemnet candidate (b).

    Hard rejects (no score):
    - either sold date does not parse
    - sold dates further apart than max_date_diff_days
    - final price difference not finite or above max_final_price_diff_pct

    Composite score for the rest:
        date_diff_days * date_weight
        + final_price_diff_pct
        + asking_price_diff_pct / asking_price_divisor
        + percent_change_diff_pct / percent_change_divisor

    An unknown asking price on either side, or a non-finite asking price or
    price change difference, is replaced by its missing-field penalty before
    division.
    """

    def __init__(
        self,
        config: Optional[MatchingConfig] = None,
        logger_instance: Optional[logging.Logger] = None,
    ):
        self.config = config or MatchingConfig()
        self.logger = logger_instance or logger

    def score(self, a: NormalizedRecord, b: NormalizedRecord) -> Optional[MatchScore]:
        """Score a candidate pair.

        Args:
            a: Booli-side record
            b: Hemnet-side candidate

        Returns:
            MatchScore, or None when the pair is rejected outright
        """
        cfg = self.config

        sold_a = parse_sold_date(a.sold_date)
        sold_b = parse_sold_date(b.sold_date)
        if sold_a is None or sold_b is None:
            self._log_reject(a, b, "unparseable_sold_date")
            return None

        date_diff_days = days_between(sold_a, sold_b)
        if date_diff_days > cfg.max_date_diff_days:
            self._log_reject(a, b, "sold_date_too_far", date_diff_days=date_diff_days)
            return None

        final_price_diff_pct = percent_difference(a.final_price, b.final_price)
        if not math.isfinite(final_price_diff_pct) or final_price_diff_pct > cfg.max_final_price_diff_pct:
            self._log_reject(
                a, b, "final_price_too_far", final_price_diff_pct=final_price_diff_pct
            )
            return None

        # Zero is the unknown-price default, so a one-sided zero counts as missing
        if a.asking_price > 0 and b.asking_price > 0:
            asking_price_diff_pct = percent_difference(a.asking_price, b.asking_price)
        else:
            asking_price_diff_pct = math.inf
        percent_change_diff_pct = percent_difference(a.percent_change, b.percent_change)

        asking_component = (
            asking_price_diff_pct
            if math.isfinite(asking_price_diff_pct)
            else cfg.missing_asking_price_penalty
        )
        percent_change_component = (
            percent_change_diff_pct
            if math.isfinite(percent_change_diff_pct)
            else cfg.missing_percent_change_penalty
        )

        composite = (
            date_diff_days * cfg.date_weight
            + final_price_diff_pct
            + asking_component / cfg.asking_price_divisor
            + percent_change_component / cfg.percent_change_divisor
        )

        return MatchScore(
            score=composite,
            date_diff_days=date_diff_days,
            final_price_diff_pct=final_price_diff_pct,
            asking_price_diff_pct=(
                asking_price_diff_pct if math.isfinite(asking_price_diff_pct) else None
            ),
            percent_change_diff_pct=(
                percent_change_diff_pct if math.isfinite(percent_change_diff_pct) else None
            ),
        )

    def _log_reject(self, a: NormalizedRecord, b: NormalizedRecord, reason: str, **details) -> None:
        self.logger.debug(
            f"Rejected candidate pair {a.id} / {b.id}",
            extra={
                "event": "matching.pair.rejected",
                "booli_id": a.id,
                "hemnet_id": b.id,
                "reason": reason,
                **details,
            },
        )

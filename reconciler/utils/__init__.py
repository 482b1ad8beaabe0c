"""Utility functions for text cleanup and date handling."""

from .text import clean_display_text, collapse_whitespace, strip_diacritics
from .timestamps import (
    days_between,
    ensure_utc,
    parse_day_month_year,
    parse_iso_datetime,
    parse_sold_date,
    utc_now,
)

__all__ = [
    # Text
    "strip_diacritics",
    "collapse_whitespace",
    "clean_display_text",
    # Timestamps
    "utc_now",
    "ensure_utc",
    "parse_iso_datetime",
    "parse_day_month_year",
    "parse_sold_date",
    "days_between",
]

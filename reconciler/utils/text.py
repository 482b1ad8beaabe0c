"""Text normalization helpers shared by the normalizer and the blocking index."""

import re
import unicodedata
from typing import Optional

_WHITESPACE_RE = re.compile(r"\s+")


def strip_diacritics(text: str) -> str:
    """Decompose text (NFKD) and drop combining marks.

    Example:
        >>> strip_diacritics("Åsvägen 3, Mora")
        'Asvagen 3, Mora'
    """
    decomposed = unicodedata.normalize("NFKD", text)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def collapse_whitespace(text: Optional[str]) -> str:
    """Trim and collapse runs of whitespace to a single space."""
    if not text:
        return ""
    return _WHITESPACE_RE.sub(" ", text).strip()


def clean_display_text(value) -> str:
    """Coerce a raw display value to a trimmed single-line string.

    Non-string values (numbers, nested objects) yield an empty string.
    """
    if not isinstance(value, str):
        return ""
    return collapse_whitespace(value)

"""Address blocking index.

Candidate pairs are only ever scored when both records share the same
canonical address key. Address equality is a near-exact gate: the key only
folds case, diacritics, punctuation and whitespace.
"""

import re
from typing import Dict, Iterable, Iterator, List

from reconciler.domain.models import NormalizedRecord
from reconciler.utils.text import collapse_whitespace, strip_diacritics

_DISALLOWED_RE = re.compile(r"[^a-z0-9 ]")


def normalize_address_key(address: str) -> str:
    """Canonical blocking key for a display address.

    Example:
        >>> normalize_address_key("  Östra Långgatan 12 B, ")
        'ostra langgatan 12 b'
    """
    if not address:
        return ""
    folded = strip_diacritics(address.lower())
    # Whitespace of any kind becomes a plain space before filtering
    folded = collapse_whitespace(folded)
    return collapse_whitespace(_DISALLOWED_RE.sub("", folded))


def address_key(record: NormalizedRecord) -> str:
    """Blocking key of a record; empty for records without a real address."""
    if not record.has_address:
        return ""
    return normalize_address_key(record.address)


class AddressIndex:
    """Ordered mapping from address key to the records sharing it.

    Both the keys and the records under each key keep insertion order, which
    decides ties between equally scored candidates.
    """

    def __init__(self) -> None:
        self._buckets: Dict[str, List[NormalizedRecord]] = {}
        self.skipped_count = 0

    def add(self, record: NormalizedRecord) -> bool:
        """Index a record. Returns False when it has no usable key."""
        key = address_key(record)
        if not key:
            self.skipped_count += 1
            return False
        self._buckets.setdefault(key, []).append(record)
        return True

    def candidates(self, key: str) -> List[NormalizedRecord]:
        """Records indexed under key, in insertion order."""
        if not key:
            return []
        return list(self._buckets.get(key, ()))

    def keys(self) -> Iterator[str]:
        return iter(self._buckets)

    def __contains__(self, key: str) -> bool:
        return key in self._buckets

    def __len__(self) -> int:
        return len(self._buckets)

    @property
    def record_count(self) -> int:
        return sum(len(bucket) for bucket in self._buckets.values())


def build_index(records: Iterable[NormalizedRecord]) -> AddressIndex:
    """Build an AddressIndex over one source's records."""
    index = AddressIndex()
    for record in records:
        index.add(record)
    return index

"""Value parsers for heterogeneous listing fields.

Each parser takes one raw value and returns the parsed value or None. Parsers
are composed left to right: ``first_parsed`` tries an ordered list of field
names and returns the first value a parser accepts, and ``unwrapping`` teaches
a scalar parser to look inside ``{raw, value, formatted}`` wrapper objects.
"""

import math
import re
from typing import Any, Callable, Iterable, Mapping, Optional, TypeVar, Union

T = TypeVar("T")
Parser = Callable[[Any], Optional[T]]

WRAPPER_KEYS = ("raw", "value", "formatted")
MAX_UNWRAP_DEPTH = 3

_NON_DIGITS_RE = re.compile(r"\D")
# Leading float prefix, the part JavaScript's parseFloat would consume
_FLOAT_PREFIX_RE = re.compile(r"^[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def as_finite_float(value: Any) -> Optional[float]:
    """Convert a number to float, or None when it overflows or is not finite."""
    try:
        converted = float(value)
    except (OverflowError, TypeError, ValueError):
        return None
    return converted if math.isfinite(converted) else None


def parse_price_scalar(value: Any) -> Optional[Union[int, float]]:
    """Parse a price from a number or a formatted string.

    Numbers pass through when finite and non-negative. Strings keep only their
    digits ("4 500 000 kr" -> 4500000); a string without digits is rejected.
    Values too large to represent as a float are rejected.
    """
    if _is_number(value):
        converted = as_finite_float(value)
        if converted is not None and converted >= 0:
            return value
        return None

    if isinstance(value, str):
        digits = _NON_DIGITS_RE.sub("", value)
        if not digits:
            return None
        try:
            parsed = int(digits)
        except ValueError:
            # Digit strings beyond the interpreter's int conversion limit
            return None
        return parsed if as_finite_float(parsed) is not None else None

    return None


def parse_percentage_scalar(value: Any) -> Optional[float]:
    """Parse a signed percentage from a number or a formatted string.

    Strings lose their percent signs and use a period as decimal separator
    before the leading number is read ("-3,5 %" -> -3.5).
    """
    if _is_number(value):
        return as_finite_float(value)

    if isinstance(value, str):
        normalized = value.replace("%", "").replace(",", ".").strip()
        match = _FLOAT_PREFIX_RE.match(normalized)
        if not match:
            return None
        return as_finite_float(match.group(0))

    return None


def unwrapping(parser: Parser[T], max_depth: int = MAX_UNWRAP_DEPTH) -> Parser[T]:
    """Extend a scalar parser to look inside wrapper objects.

    The first of ``raw``, ``value`` and ``formatted`` present in a mapping
    decides the result; when its value does not parse the whole wrapper is
    unparseable and the caller moves on to its next field. Nesting deeper
    than max_depth is treated as unparseable.
    """

    def parse(value: Any, depth: int = 0) -> Optional[T]:
        if isinstance(value, Mapping):
            if depth >= max_depth:
                return None
            for key in WRAPPER_KEYS:
                if key in value:
                    return parse(value[key], depth + 1)
            return None
        return parser(value)

    return parse


parse_price = unwrapping(parse_price_scalar)
parse_percentage = unwrapping(parse_percentage_scalar)


def first_parsed(raw: Mapping[str, Any], fields: Iterable[str], parser: Parser[T]) -> Optional[T]:
    """Return the first field value the parser accepts, in field order."""
    for field_name in fields:
        parsed = parser(raw.get(field_name))
        if parsed is not None:
            return parsed
    return None


def first_text(raw: Mapping[str, Any], fields: Iterable[str]) -> Optional[str]:
    """Return the first non-blank string value among the fields."""
    for field_name in fields:
        value = raw.get(field_name)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None


def first_identifier(raw: Mapping[str, Any], fields: Iterable[str]) -> Optional[str]:
    """Return the first usable id (non-blank string or integral number) as a string."""
    for field_name in fields:
        value = raw.get(field_name)
        if isinstance(value, str) and value.strip():
            return value.strip()
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        if isinstance(value, float) and math.isfinite(value):
            return str(int(value)) if value.is_integer() else str(value)
    return None

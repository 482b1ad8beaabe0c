"""Unit tests for the field value parsers."""

import math

import pytest

from reconciler.normalization.parsers import (
    MAX_UNWRAP_DEPTH,
    first_identifier,
    first_parsed,
    first_text,
    parse_percentage,
    parse_percentage_scalar,
    parse_price,
    parse_price_scalar,
    unwrapping,
)


class TestParsePrice:
    """Test suite for price parsing."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            (4500000, 4500000),
            (4500000.0, 4500000.0),
            ("4 500 000 kr", 4500000),
            ("4 500 000 kr", 4500000),
            ("Slutpris 3 010 000 kr", 3010000),
            (0, 0),
        ],
    )
    def test_parses_numbers_and_formatted_strings(self, value, expected):
        assert parse_price_scalar(value) == expected

    @pytest.mark.parametrize("value", [None, "", "kr", "Pris saknas", True, -100, math.nan, math.inf, [1]])
    def test_rejects_unparseable_values(self, value):
        assert parse_price_scalar(value) is None

    def test_unwraps_raw_wrapper(self):
        """A {raw: "4 500 000 kr"} wrapper yields 4500000."""
        assert parse_price({"raw": "4 500 000 kr"}) == 4500000

    def test_wrapper_key_order(self):
        assert parse_price({"formatted": "1 kr", "value": 2, "raw": 3}) == 3
        assert parse_price({"formatted": "1 kr", "value": 2}) == 2
        assert parse_price({"formatted": "1 kr"}) == 1

    def test_first_present_wrapper_key_decides(self):
        assert parse_price({"raw": "saknas", "formatted": "2 500 000 kr"}) is None
        assert parse_price({"raw": None, "value": 2500000}) is None

    def test_unparseable_wrapper_falls_through_to_next_field(self):
        raw = {"askingPrice": {"raw": "n/a", "formatted": "1 000 kr"}, "listPrice": 2000}

        assert first_parsed(raw, ("askingPrice", "listPrice"), parse_price) == 2000

    def test_rejects_values_too_large_for_a_float(self):
        assert parse_price_scalar("9" * 400) is None
        assert parse_price_scalar(10**400) is None
        assert parse_price_scalar("9" * 5000) is None
        assert parse_price_scalar("9" * 300) == int("9" * 300)

    def test_nested_wrappers_within_depth(self):
        assert parse_price({"value": {"raw": 1200000}}) == 1200000

    def test_nesting_beyond_max_depth_is_rejected(self):
        value = 1200000
        for _ in range(MAX_UNWRAP_DEPTH + 1):
            value = {"raw": value}
        assert parse_price(value) is None

    def test_wrapper_without_known_keys(self):
        assert parse_price({"amount": 1200000}) is None


class TestParsePercentage:
    """Test suite for percentage parsing."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("-3,5 %", -3.5),
            ("+4,2%", 4.2),
            ("12%", 12.0),
            ("0", 0.0),
            (-2.5, -2.5),
            (3, 3.0),
            ("7.25 procent", 7.25),
        ],
    )
    def test_parses_signed_percentages(self, value, expected):
        assert parse_percentage_scalar(value) == pytest.approx(expected)

    @pytest.mark.parametrize("value", [None, "", "%", "ca -3", False, math.nan, {}])
    def test_rejects_unparseable_values(self, value):
        assert parse_percentage(value) is None

    def test_unwraps_value_wrapper(self):
        assert parse_percentage({"value": "-3,5 %"}) == pytest.approx(-3.5)

    @pytest.mark.parametrize("value", [10**400, "1" + "0" * 400, {"raw": 10**400}])
    def test_rejects_values_too_large_for_a_float(self, value):
        assert parse_percentage(value) is None


class TestUnwrapping:
    """Test suite for the unwrapping combinator."""

    def test_applies_custom_parser(self):
        parse_upper = unwrapping(lambda v: v.upper() if isinstance(v, str) else None, max_depth=1)

        assert parse_upper("abc") == "ABC"
        assert parse_upper({"raw": "abc"}) == "ABC"
        assert parse_upper({"raw": {"raw": "abc"}}) is None


class TestFieldHelpers:
    """Test suite for first_parsed, first_text and first_identifier."""

    def test_first_parsed_follows_field_order(self):
        raw = {"soldPrice": "3 000 000 kr", "finalPrice": None, "salePrice": 1}

        assert first_parsed(raw, ("finalPrice", "soldPrice", "salePrice"), parse_price) == 3000000

    def test_first_parsed_none_when_nothing_parses(self):
        assert first_parsed({"finalPrice": "okänt"}, ("finalPrice",), parse_price) is None

    def test_first_text_skips_blank_and_non_strings(self):
        raw = {"streetAddress": "   ", "address": 12, "title": " Storgatan 1 "}

        assert first_text(raw, ("streetAddress", "address", "title")) == "Storgatan 1"
        assert first_text(raw, ("streetAddress", "address")) is None

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ({"id": "abc"}, "abc"),
            ({"id": 5512345}, "5512345"),
            ({"id": 5512345.0}, "5512345"),
            ({"id": "", "booliId": 42}, "42"),
            ({"id": None}, None),
            ({"id": True}, None),
            ({"id": 10**400}, "1" + "0" * 400),
            ({"id": math.inf, "booliId": 7}, "7"),
        ],
    )
    def test_first_identifier(self, raw, expected):
        assert first_identifier(raw, ("id", "booliId")) == expected

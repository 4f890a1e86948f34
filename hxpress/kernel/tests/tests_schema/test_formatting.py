"""
hxpress Formatting -- Value Conversion and Encoding Tests

Canonical string forms, placeholder counting, substitution and the
percent-encoding applied to request arguments.
"""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from urllib.parse import unquote

import pytest

from hxpress.kernel.errors import SchemaError
from hxpress.kernel.formatting import (
    field_value,
    percent_encode,
    placeholder_count,
    substitute,
    to_text,
)

# ============================================================================
# Canonical strings
# ============================================================================


class Color(Enum):
    RED = "red"


class TestToText:
    @pytest.mark.parametrize(
        "value, expected",
        [
            ("plain", "plain"),
            ("", ""),
            (True, "true"),
            (False, "false"),
            (0, "0"),
            (69, "69"),
            (-12, "-12"),
            (10**20, "100000000000000000000"),
            (1.5, "1.5"),
            (1.0, "1"),
            (-0.0, "-0"),
            (0.1, "0.1"),
            (1e20, "100000000000000000000"),
            (1e-7, "0.0000001"),
            (float("nan"), "NaN"),
            (float("inf"), "inf"),
            (float("-inf"), "-inf"),
            (None, ""),
            (Decimal("2.50"), "2.50"),
        ],
    )
    def test_conversions(self, value, expected):
        assert to_text(value) == expected

    def test_other_objects_use_str(self):
        assert to_text(Color.RED) == "Color.RED"

    def test_strings_are_verbatim(self):
        assert to_text('<a href="x">&amp;</a>') == '<a href="x">&amp;</a>'


# ============================================================================
# Templates
# ============================================================================


class TestPlaceholders:
    @pytest.mark.parametrize(
        "template, count",
        [
            ("", 0),
            ("no slots", 0),
            ("{}", 1),
            ("{} and {}", 2),
            ("{{}}", 0),
            ("{{{}}}", 1),
            ("{:>4}", 1),
        ],
    )
    def test_counts(self, template, count):
        assert placeholder_count(template) == count

    def test_named_rejected(self):
        with pytest.raises(ValueError, match="positional"):
            placeholder_count("{x}")

    def test_conversion_rejected(self):
        with pytest.raises(ValueError, match="conversions"):
            placeholder_count("{!r}")

    def test_numeric_spec_rejected(self):
        with pytest.raises(ValueError, match="does not apply to text"):
            placeholder_count("{:.2f}")


class TestSubstitute:
    def test_values_in_order(self):
        assert substitute("{}-{}", ["a", 1]) == "a-1"

    def test_values_converted(self):
        assert substitute("{}/{}", [True, 2.0]) == "true/2"

    def test_no_values_collapses_braces(self):
        assert substitute("{{x}}", []) == "{x}"

    def test_format_spec_applies_to_text(self):
        assert substitute("[{:>3}]", [7]) == "[  7]"

    def test_count_mismatch_fails_loudly(self):
        with pytest.raises(SchemaError, match="1 placeholder"):
            substitute("{}", ["a", "b"])


# ============================================================================
# Percent-encoding
# ============================================================================


class TestPercentEncode:
    def test_space(self):
        assert percent_encode("crazy param") == "crazy%20param"

    @pytest.mark.parametrize(
        "value, expected",
        [
            ("a/b", "a%2Fb"),
            ("a&b=c", "a%26b%3Dc"),
            ("100%", "100%25"),
            ("é", "%C3%A9"),
            ("safe-._~", "safe-._~"),
            ('"q"', "%22q%22"),
        ],
    )
    def test_reserved_characters(self, value, expected):
        assert percent_encode(value) == expected

    @pytest.mark.parametrize("text", ["crazy param", "a/b?c=d&e", "ünïcödé 🎉", "", "%20"])
    def test_round_trip(self, text):
        assert unquote(percent_encode(text)) == text

    def test_non_strings_encoded_from_canonical_text(self):
        assert percent_encode(False) == "false"
        assert percent_encode(2.5) == "2.5"

    def test_safe_characters_from_settings(self, hx_settings):
        hx_settings.URLENCODE_SAFE = "/"
        assert percent_encode("a/b c") == "a/b%20c"


# ============================================================================
# Record access
# ============================================================================


@dataclass
class Row:
    name: str


class TestFieldValue:
    def test_object_attribute(self):
        assert field_value(Row("x"), "name") == "x"

    def test_mapping_key(self):
        assert field_value({"name": "y"}, "name") == "y"

    def test_missing_mapping_key_is_none(self):
        assert field_value({}, "name") is None

    def test_missing_attribute_raises(self):
        with pytest.raises(AttributeError):
            field_value(Row("x"), "nope")

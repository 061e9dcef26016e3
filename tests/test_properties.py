"""Tests for property normalisation — numeric parsing, units and key resolution."""

from __future__ import annotations

import pytest

from bimtalk.properties import (
    METADATA_ALWAYS_INCLUDE,
    PROPERTY_FIELDS,
    FieldKind,
    FieldResolver,
    convert_length_to_meters,
    extract_thickness_from_text,
    parse_numeric,
    pick,
    resolve_category,
    resolve_length,
    resolve_metadata_properties,
    resolve_name,
    resolve_numeric,
    resolve_string,
    resolve_thickness,
)
from bimtalk.properties.numeric import round_half_up, split_numeric


# ---------------------------------------------------------------------------
# Numeric parsing
# ---------------------------------------------------------------------------


class TestParseNumeric:
    def test_numbers_pass_through(self) -> None:
        assert parse_numeric(7) == 7.0
        assert parse_numeric(2.5) == 2.5

    def test_none_bool_and_non_finite(self) -> None:
        assert parse_numeric(None) is None
        assert parse_numeric(True) is None
        assert parse_numeric(float("nan")) is None
        assert parse_numeric(float("inf")) is None

    def test_unparseable_text(self) -> None:
        assert parse_numeric("abc") is None
        assert parse_numeric("") is None
        assert parse_numeric(["1"]) is None

    def test_thousands_separator(self) -> None:
        assert parse_numeric("1,200") == 1200.0
        assert parse_numeric("1,234,567") == 1234567.0

    def test_decimal_comma(self) -> None:
        assert parse_numeric("3,5") == 3.5
        assert parse_numeric("1 200,5") == 1200.5

    def test_leading_zero_comma_is_decimal(self) -> None:
        assert parse_numeric("0,125") == 0.125
        assert parse_numeric("-0,5") == -0.5
        assert parse_numeric("0,125 m³") == 0.125

    def test_thousands_with_decimal_point(self) -> None:
        assert parse_numeric("1,200.5") == 1200.5

    def test_unit_suffix_ignored(self) -> None:
        assert parse_numeric("2.500 m³") == 2.5
        assert parse_numeric("150 mm") == 150.0

    def test_negative(self) -> None:
        assert parse_numeric("-12.5") == -12.5

    def test_split_numeric_keeps_unit_text(self) -> None:
        value, rest = split_numeric("3,5 m")
        assert value == 3.5
        assert rest.strip() == "m"


class TestRoundHalfUp:
    def test_halves_round_up(self) -> None:
        assert round_half_up(149.5) == 150
        assert round_half_up(150.5) == 151
        assert round_half_up(150.4) == 150

    def test_negative_halves_round_away_from_zero(self) -> None:
        assert round_half_up(-2.5) == -3


# ---------------------------------------------------------------------------
# Length units
# ---------------------------------------------------------------------------


class TestConvertLengthToMeters:
    def test_explicit_units(self) -> None:
        assert convert_length_to_meters(2, "mm") == pytest.approx(0.002)
        assert convert_length_to_meters(300, "cm") == pytest.approx(3.0)
        assert convert_length_to_meters(7, "m") == 7
        assert convert_length_to_meters(10, "ft") == pytest.approx(3.048)
        assert convert_length_to_meters(12, "in") == pytest.approx(0.3048)

    def test_unitless_small_value_is_metres(self) -> None:
        assert convert_length_to_meters(7) == 7

    def test_unitless_large_value_is_millimetres(self) -> None:
        assert convert_length_to_meters(7000) == pytest.approx(7.0)

    def test_threshold_is_exclusive(self) -> None:
        assert convert_length_to_meters(50) == 50
        assert convert_length_to_meters(51) == pytest.approx(0.051)

    def test_none(self) -> None:
        assert convert_length_to_meters(None) is None


# ---------------------------------------------------------------------------
# Key resolution
# ---------------------------------------------------------------------------


class TestResolvers:
    def test_exact_key_beats_substring(self) -> None:
        bag = {"Volume Net": 1, "Volume": 2}
        assert pick(bag, ("Volume",)) == 2

    def test_substring_pass_is_opt_in(self) -> None:
        bag = {"Volume (m³) total": "3.2"}
        assert resolve_numeric(bag, ("Volume",)) is None
        assert resolve_numeric(bag, ("Volume",), substring=True) == pytest.approx(3.2)

    def test_candidate_order(self) -> None:
        bag = {"Volume": "5", "체적": "4"}
        assert resolve_numeric(bag, ("체적", "Volume")) == 4.0

    def test_unparseable_candidate_is_skipped(self) -> None:
        bag = {"체적": "n/a", "Volume": "4"}
        assert resolve_numeric(bag, ("체적", "Volume")) == 4.0

    def test_length_with_unit(self) -> None:
        assert resolve_length({"Height": "7 m"}, ("Height",)) == pytest.approx(7.0)
        assert resolve_length({"Height": "3000"}, ("Height",)) == pytest.approx(3.0)
        assert resolve_length({"Height": 2800}, ("Height",)) == pytest.approx(2.8)

    def test_unitless_height_heuristic(self) -> None:
        assert resolve_length({"Height": 7}, ("Height",)) == 7
        assert resolve_length({"Height": 7000}, ("Height",)) == pytest.approx(7.0)

    def test_height_fallback_regex(self) -> None:
        bag = {"Wall Height Custom": "2.8"}
        assert PROPERTY_FIELDS["height"].resolve(bag) == pytest.approx(2.8)

    def test_string_miss_is_empty(self) -> None:
        assert resolve_string({}, ("Level",)) == ""
        assert resolve_string({"Level": "  1F "}, ("Level",)) == "1F"

    def test_category_and_name(self) -> None:
        bag = {"__name": "기본 벽 [1234]", "Category": "Revit 벽"}
        assert resolve_category(bag) == "Revit 벽"
        assert resolve_name(bag) == "기본 벽 [1234]"

    def test_category_and_name_by_key_substring(self) -> None:
        assert resolve_category({"Category Name": "Walls"}) == "Walls"
        assert resolve_name({"Element Name Text": "W1"}) == "W1"

    def test_exact_category_key_beats_substring(self) -> None:
        bag = {"Category Name": "Walls", "카테고리": "벽"}
        assert resolve_category(bag) == "벽"

    def test_field_resolver_string_miss_is_none(self) -> None:
        resolver = FieldResolver("level", FieldKind.STRING, ("Level",))
        assert resolver.resolve({"Level": "  "}) is None
        assert resolver.resolve({"Level": "B1"}) == "B1"


class TestThicknessFromText:
    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("Basic Wall T150", 150),
            ("WALL_200", 200),
            ("wall-180", 180),
            ("Generic 250 mm", 250),
            ("Generic", None),
            (None, None),
            ("t150", None),
        ],
    )
    def test_patterns(self, text: str | None, expected: int | None) -> None:
        assert extract_thickness_from_text(text) == expected

    def test_t_prefix_wins_over_mm(self) -> None:
        assert extract_thickness_from_text("T120 + 30mm finish") == 120

    def test_numeric_key_wins_and_rounds(self) -> None:
        bag = {"Thickness": "149.5"}
        assert resolve_thickness(bag, ("Thickness",), ["T300"]) == 150

    def test_falls_back_to_texts(self) -> None:
        assert resolve_thickness({}, ("Thickness",), [None, "WALL-200"]) == 200
        assert resolve_thickness({}, ("Thickness",), ["plain"]) is None


# ---------------------------------------------------------------------------
# Metadata export lists
# ---------------------------------------------------------------------------


class TestResolveMetadataProperties:
    def test_always_included_first(self) -> None:
        names = resolve_metadata_properties(["Volume", "Area"])
        assert names[: len(METADATA_ALWAYS_INCLUDE)] == list(METADATA_ALWAYS_INCLUDE)
        assert names[-2:] == ["Volume", "Area"]

    def test_duplicates_ignore_case(self) -> None:
        names = resolve_metadata_properties(["category", "VOLUME", "Volume"])
        assert names.count("Category") == 1
        assert "category" not in names
        assert names[-1] == "VOLUME"
        assert "Volume" not in names

    def test_empty_and_none(self) -> None:
        assert resolve_metadata_properties(None) == list(METADATA_ALWAYS_INCLUDE)
        assert resolve_metadata_properties(["", None]) == list(METADATA_ALWAYS_INCLUDE)

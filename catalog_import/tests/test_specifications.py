"""Tests for specification normalization and derived product attributes."""

import math

import pytest

from catalog_import.specifications import (
    determine_product_color,
    determine_product_ip,
    extract_h_number,
    find_specifications_table,
    normalize_value,
    parse_number_value,
    process_specifications,
)


class TestNormalizeValue:

    @pytest.mark.parametrize("value,expected", [
        ("  220V ", "220V"),
        (None, ""),
        (18, "18"),
        (18.0, "18"),
        (0.95, "0.95"),
        (True, "true"),
        (["a", "b"], '["a", "b"]'),
        ({"k": "قيمة"}, '{"k": "قيمة"}'),
    ])
    def test_shapes(self, value, expected):
        assert normalize_value(value) == expected


class TestProcessSpecifications:
    """Tests for label -> canonical field mapping."""

    def test_maps_english_labels(self):
        spec = process_specifications({"Input": " 220V ", "Maximum wattage": 18, "BULB": "GU10"}, "en")
        assert spec.input == "220V"
        assert spec.maximum_wattage == "18"
        assert spec.bulb == "GU10"
        assert spec.custom_specs is None

    def test_maps_arabic_labels(self):
        spec = process_specifications({"المدخل": "220 فولت", "درجة الحماية": "٦٥"}, "ar")
        assert spec.input == "220 فولت"
        assert spec.ip == "٦٥"

    def test_unmapped_keys_go_to_custom_specs_verbatim(self):
        spec = process_specifications({"Input": "220V", "Warranty": 2, "Extras": ["clip"]}, "en")
        assert spec.custom_specs == {"Warranty": 2, "Extras": ["clip"]}

    def test_unit_count_and_max_ip_keys_are_excluded(self):
        spec = process_specifications({"Hnumber": 5, "عدد الوحدات": "3", "MaxIP": 65, "maxIP": 44}, "ar")
        assert spec.custom_specs is None
        assert spec.canonical_fields() == {}

    def test_unknown_language_maps_nothing(self):
        spec = process_specifications({"Input": "220V"}, "fr")
        assert spec.input is None
        assert spec.custom_specs == {"Input": "220V"}

    def test_empty_table(self):
        spec = process_specifications(None, "en")
        assert spec.canonical_fields() == {}
        assert spec.custom_specs is None

    def test_canonical_fields_lists_present_fields_only(self):
        spec = process_specifications({"CRI": ">80", "Finished": "Black"}, "en")
        assert spec.canonical_fields() == {"cri": ">80", "finish": "Black"}


class TestProductColor:

    @pytest.mark.parametrize("specs,expected", [
        ({"Color Temperature": "3000K"}, "warm"),
        ({"Color Temperature": "4000K"}, "cool"),
        ({"Color Temperature": "6500K"}, "white"),
        ({"درجة حرارة لون الإضاءة": "٤٠٠٠"}, "cool"),
        ({"درجة حرارة لون الاضاءة": "٦٥٠٠ كلفن"}, "white"),
        ({"Color Temperature": "2700K"}, "warm"),
        ({}, "warm"),
        (None, "warm"),
    ])
    def test_buckets(self, specs, expected):
        assert determine_product_color(specs) == expected

    def test_first_truthy_key_wins(self):
        specs = {"Color Temperature": "", "درجة حرارة لون الإضاءة": "6500"}
        assert determine_product_color(specs) == "white"


class TestProductIP:

    @pytest.mark.parametrize("specs,expected", [
        ({"IP": "65"}, "IP65"),
        ({"IP": 44}, "IP44"),
        ({"IP": "IP54"}, "IP54"),
        ({"IP": " ip68 "}, "IP68"),
        ({"درجة الحماية": "٦٥"}, "IP65"),
        ({"IP": "67"}, "IP20"),
        ({}, "IP20"),
    ])
    def test_buckets(self, specs, expected):
        assert determine_product_ip(specs) == expected


class TestParseNumberValue:
    """Tests for the typed number parse per input shape."""

    def test_bool(self):
        assert parse_number_value(True).value == 1
        assert parse_number_value(False).value == 0

    def test_int(self):
        parsed = parse_number_value(12)
        assert parsed.ok and parsed.value == 12

    def test_float_is_floored(self):
        assert parse_number_value(3.9).value == 3

    @pytest.mark.parametrize("value", [math.nan, math.inf, -math.inf])
    def test_non_finite_float_fails(self, value):
        parsed = parse_number_value(value)
        assert not parsed.ok
        assert parsed.value is None

    def test_string_keeps_digits_only(self):
        assert parse_number_value("12 units").value == 12
        assert parse_number_value("IP65").value == 65

    def test_arabic_indic_digits(self):
        assert parse_number_value("٣ وحدات").value == 3

    @pytest.mark.parametrize("value", ["", "units", "   "])
    def test_string_without_digits_fails(self, value):
        parsed = parse_number_value(value)
        assert not parsed.ok
        assert parsed.reason

    @pytest.mark.parametrize("value", [None, [1], {"n": 1}])
    def test_other_types_fail(self, value):
        assert not parse_number_value(value).ok

    @pytest.mark.parametrize("value", ["EAN 12345678901234567890", 2 ** 63, -(2 ** 63), 1e30])
    def test_out_of_integer_range_fails(self, value):
        parsed = parse_number_value(value)
        assert not parsed.ok
        assert parsed.value is None

    def test_largest_stored_integer(self):
        assert parse_number_value(str(2 ** 63 - 1)).value == 2 ** 63 - 1


class TestExtractHNumber:

    def test_record_wins_over_specs(self):
        assert extract_h_number({"Hnumber": "12 units"}, {"Hnumber": 5}) == 12

    def test_specs_used_when_record_has_none(self):
        assert extract_h_number({"productName": "x"}, {"hNumber": 5}) == 5

    def test_arabic_spec_labels(self):
        assert extract_h_number(None, {"عدد الوحدات": "٤"}) == 4
        assert extract_h_number(None, {"وحدات": 7}) == 7

    def test_arabic_labels_not_read_from_record(self):
        assert extract_h_number({"عدد الوحدات": 4}, None) is None

    def test_empty_and_non_positive_values_skipped(self):
        assert extract_h_number({"Hnumber": "", "hnumber": 0, "HNumber": None, "units": 2}) == 2

    def test_oversized_unit_count_falls_through(self):
        assert extract_h_number({"number": "EAN 12345678901234567890"}, {"hNumber": 6}) == 6
        assert extract_h_number({"number": "EAN 12345678901234567890"}) is None

    def test_none_when_missing(self):
        assert extract_h_number({}, {}) is None
        assert extract_h_number(None, None) is None


class TestFindSpecificationsTable:

    def test_searches_every_lighting_type_list(self):
        overlay = {"categories": {"B": {"indoor": {
            "Spots": [{"A": {"specificationsTable": {"Input": "1"}}}],
            "Tracks": [{"C": {"productName": "no table"}}, {"D": {"specificationsTable": {"Input": "2"}}}],
        }}}}
        assert find_specifications_table(overlay, "B", "indoor", "D") == {"Input": "2"}
        assert find_specifications_table(overlay, "B", "indoor", "C") is None

    def test_missing_paths(self):
        assert find_specifications_table(None, "B", "c", "p") is None
        assert find_specifications_table({"categories": {}}, "B", "c", "p") is None
        assert find_specifications_table({"categories": {"B": {"c": []}}}, "B", "c", "p") is None

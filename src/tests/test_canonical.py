"""Unit tests for front matter value canonicalization."""

from datetime import date, datetime, timedelta, timezone

import yaml

from pressroom.core.canonical import (
    canonical_json,
    canonicalize,
    canonicalize_mapping,
    fold_instants,
    format_instant,
    parse_instant,
)


# ============================================================
# Scalars
# ============================================================


class TestScalars:
    def test_int_and_float_compare_equal(self):
        assert canonicalize({"a": 5}) == canonicalize({"a": 5.0})
        assert canonicalize({"a": 5}) == {"a": 5.0}

    def test_bool_is_not_a_number(self):
        assert canonicalize(True) is True
        assert canonicalize(False) is False

    def test_none_passes_through(self):
        assert canonicalize(None) is None

    def test_plain_string_unchanged(self):
        assert canonicalize("hello") == "hello"

    def test_invalid_date_string_unchanged(self):
        assert canonicalize("2024-13-45") == "2024-13-45"


# ============================================================
# Dates and instants
# ============================================================


class TestDates:
    def test_native_and_string_timestamp_equal(self):
        native = yaml.safe_load("date: 2024-01-02T03:04:05Z")
        string = {"date": "2024-01-02T03:04:05Z"}
        assert isinstance(native["date"], datetime)
        assert canonicalize(native) == canonicalize(string)
        assert canonicalize(string) == {"date": "2024-01-02T03:04:05Z"}

    def test_offset_converted_to_utc(self):
        assert canonicalize("2024-01-02T05:04:05+02:00") == "2024-01-02T03:04:05Z"

    def test_compact_offset(self):
        assert canonicalize("2024-01-02T05:04:05+0200") == "2024-01-02T03:04:05Z"

    def test_zero_fraction_dropped(self):
        assert canonicalize("2024-01-02T03:04:05.000Z") == "2024-01-02T03:04:05Z"

    def test_nonzero_fraction_kept_without_trailing_zeros(self):
        dt = datetime(2024, 1, 2, 3, 4, 5, 500000, tzinfo=timezone.utc)
        assert canonicalize(dt) == "2024-01-02T03:04:05.5Z"

    def test_long_fraction_truncated_to_microseconds(self):
        assert (
            canonicalize("2024-01-02T03:04:05.123456789Z")
            == "2024-01-02T03:04:05.123456Z"
        )

    def test_bare_date_is_midnight_utc(self):
        assert canonicalize(date(2024, 1, 2)) == "2024-01-02T00:00:00Z"
        assert canonicalize("2024-01-02") == "2024-01-02T00:00:00Z"

    def test_naive_datetime_is_utc(self):
        assert canonicalize(datetime(2024, 1, 2, 3, 4, 5)) == "2024-01-02T03:04:05Z"

    def test_space_separated_timestamp(self):
        assert canonicalize("2024-01-02 03:04:05") == "2024-01-02T03:04:05Z"

    def test_format_instant_other_timezone(self):
        tz = timezone(timedelta(hours=-5))
        dt = datetime(2024, 1, 1, 22, 0, 0, tzinfo=tz)
        assert format_instant(dt) == "2024-01-02T03:00:00Z"

    def test_parse_instant_rejects_text(self):
        assert parse_instant("yesterday") is None
        assert parse_instant("2024-01-02T03:04") is None


# ============================================================
# Containers
# ============================================================


class TestContainers:
    def test_non_string_keys_stringified(self):
        assert canonicalize({1: "a", False: "b", 2.5: "c"}) == {
            "1": "a",
            "false": "b",
            "2.5": "c",
        }

    def test_nested_values(self):
        value = {"outer": {"n": 1, "when": date(2024, 1, 2)}, "list": [1, "x", (2, 3)]}
        assert canonicalize(value) == {
            "outer": {"n": 1.0, "when": "2024-01-02T00:00:00Z"},
            "list": [1.0, "x", [2.0, 3.0]],
        }

    def test_idempotent(self):
        value = {
            "title": "T",
            "n": 3,
            "date": datetime(2024, 1, 2, 3, 4, 5, 120000, tzinfo=timezone.utc),
            "tags": ["a", 1, None, {"k": date(2020, 5, 6)}],
            7: True,
        }
        once = canonicalize(value)
        assert canonicalize(once) == once

    def test_key_order_irrelevant(self):
        a = canonicalize({"a": 1, "b": {"x": 1, "y": 2}})
        b = canonicalize({"b": {"y": 2, "x": 1}, "a": 1})
        assert a == b
        assert canonical_json(a) == canonical_json(b)

    def test_canonicalize_mapping_none(self):
        assert canonicalize_mapping(None) == {}


class TestCanonicalJson:
    def test_deterministic_encoding(self):
        assert (
            canonical_json({"b": 1.0, "a": [True, None]})
            == b'{"a":[true,null],"b":1.0}'
        )

    def test_unicode_kept(self):
        assert canonical_json({"t": "日本"}) == '{"t":"日本"}'.encode("utf-8")

    def test_unencodable_values_fall_back_to_str(self):
        from datetime import time

        assert canonical_json({"t": time(7, 30)}) == b'{"t":"07:30:00"}'


class TestFoldInstants:
    def test_native_and_string_spellings_agree(self):
        native = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
        assert fold_instants(native) == "2024-01-02T03:04:05Z"
        assert fold_instants("2024-01-02T03:04:05+00:00") == "2024-01-02T03:04:05Z"
        assert fold_instants(date(2024, 1, 2)) == "2024-01-02T00:00:00Z"

    def test_other_types_kept(self):
        value = {"n": 5, "ok": True, "t": "text", "none": None}
        folded = fold_instants(value)
        assert folded == value
        assert isinstance(folded["n"], int)

    def test_nested(self):
        value = {"meta": {"when": date(2024, 1, 2)}, "dates": ["2024-01-02 03:04:05"]}
        assert fold_instants(value) == {
            "meta": {"when": "2024-01-02T00:00:00Z"},
            "dates": ["2024-01-02T03:04:05Z"],
        }

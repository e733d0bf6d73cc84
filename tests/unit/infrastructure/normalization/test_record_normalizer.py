"""
Unit tests for RecordNormalizer.
"""

import copy
from datetime import timezone

import pytest

from cluster_dao.infrastructure.normalization.record_normalizer import RecordNormalizer

EPOCH_UTC = "1970-01-01T00:00:00+00:00"


@pytest.fixture
def normalizer():
    return RecordNormalizer(["U.us_no", "`name`", "U.ctime"], tz=timezone.utc)


class TestSelectAndRename:
    """Tests for select_and_rename / split_record."""

    def test_renames_prefixed_columns(self, normalizer):
        row = {"us_us_no": 1, "us_name": "kim", "ch_name": "news"}
        assert normalizer.select_and_rename(row, "us_") == {"us_no": 1, "name": "kim"}

    def test_source_record_is_not_mutated(self, normalizer):
        row = {"us_us_no": 1, "us_name": "kim"}
        normalizer.select_and_rename(row, "us_")
        assert row == {"us_us_no": 1, "us_name": "kim"}

    def test_residual_holds_unconsumed_columns(self, normalizer):
        row = {"us_us_no": 1, "us_name": "kim", "ch_no": 9, "ch_name": "news"}
        parsed = normalizer.split_record(row, "us_")

        assert parsed.record == {"us_no": 1, "name": "kim"}
        assert parsed.residual == {"ch_no": 9, "ch_name": "news"}

        channel = normalizer.select_and_rename(parsed.residual, "ch_", ["no", "name"])
        assert channel == {"no": 9, "name": "news"}

    def test_missing_columns_are_skipped(self, normalizer):
        assert normalizer.select_and_rename({"us_name": "kim"}, "us_") == {"name": "kim"}

    def test_none_value_is_kept(self, normalizer):
        assert normalizer.select_and_rename({"name": None}) == {"name": None}

    def test_no_match_without_copy_is_empty(self, normalizer):
        assert normalizer.select_and_rename({"other": 1}, "us_") == {}

    def test_copy_whole_record_is_deep_copy(self, normalizer):
        row = {"other": {"nested": [1, 2]}, "utime": 0}
        result = normalizer.select_and_rename(row, "zz_", copy_whole_record=True)

        assert result == {"other": {"nested": [1, 2]}, "utime": EPOCH_UTC}
        assert result["other"] is not row["other"]
        assert row["utime"] == 0

    def test_copy_overlays_renamed_fields(self, normalizer):
        row = {"us_name": "kim", "x": 1}
        result = normalizer.select_and_rename(row, "us_", copy_whole_record=True)
        assert result == {"us_name": "kim", "x": 1, "name": "kim"}

    def test_explicit_fields_override_defaults(self, normalizer):
        row = {"a": 1, "name": "kim"}
        assert normalizer.select_and_rename(row, "", ["T.a"]) == {"a": 1}

    def test_empty_field_list_is_respected(self, normalizer):
        assert normalizer.select_and_rename({"name": "kim"}, "", []) == {}

    def test_duplicate_fields_last_wins(self):
        normalizer = RecordNormalizer(["A.name", "B.name"])
        assert normalizer.select_and_rename({"name": "kim"}) == {"name": "kim"}

    def test_timestamps_are_coerced(self, normalizer):
        row = {"us_ctime": 86400}
        assert normalizer.select_and_rename(row, "us_") == {"ctime": "1970-01-02T00:00:00+00:00"}


class TestCoerceTimestamps:
    """Tests for coerce_timestamps."""

    def test_epoch_start(self, normalizer):
        assert normalizer.coerce_timestamps({"utime": 0}) == {"utime": EPOCH_UTC}

    def test_both_fields_in_place(self, normalizer):
        record = {"utime": 0, "ctime": 60, "name": "kim"}
        result = normalizer.coerce_timestamps(record)

        assert result is record
        assert record == {
            "utime": EPOCH_UTC,
            "ctime": "1970-01-01T00:01:00+00:00",
            "name": "kim",
        }

    def test_absent_fields_untouched(self, normalizer):
        assert normalizer.coerce_timestamps({"name": "kim"}) == {"name": "kim"}

    def test_null_stays_null(self, normalizer):
        assert normalizer.coerce_timestamps({"utime": None}) == {"utime": None}

    def test_numeric_string(self, normalizer):
        assert normalizer.coerce_timestamps({"ctime": "0"}) == {"ctime": EPOCH_UTC}


class TestNormalizeMany:
    """Tests for normalize / normalize_many."""

    def test_in_place_and_ordered(self, normalizer):
        rows = [{"name": "a", "ctime": 0}, {"name": "b", "extra": 1}]
        result = normalizer.normalize_many(rows)

        assert result is rows
        assert rows == [{"name": "a", "ctime": EPOCH_UTC}, {"name": "b", "extra": 1}]

    def test_empty(self, normalizer):
        assert normalizer.normalize_many([]) == []


class TestNested:
    """Tests for split_nested / merge_nested."""

    def test_split(self):
        record = {"id": 1, "addr": {"city": "Seoul", "zip": "04524"}}
        result = RecordNormalizer.split_nested(record, "addr", ["city", "zip"])

        assert result == {"id": 1, "addr_city": "Seoul", "addr_zip": "04524"}

    def test_split_absent_target_is_noop(self):
        record = {"id": 1}
        assert RecordNormalizer.split_nested(record, "addr", ["city"]) == {"id": 1}

    def test_split_none_target_is_noop(self):
        record = {"addr": None}
        assert RecordNormalizer.split_nested(record, "addr", ["city"]) == {"addr": None}

    def test_merge(self):
        record = {"id": 1, "addr_city": "Seoul", "addr_zip": "04524"}
        result = RecordNormalizer.merge_nested(record, "addr", ["city", "zip"])

        assert result == {"id": 1, "addr": {"city": "Seoul", "zip": "04524"}}

    def test_merge_into_existing_target(self):
        record = {"addr": {"country": "KR"}, "addr_city": "Seoul"}
        RecordNormalizer.merge_nested(record, "addr", ["city"])
        assert record == {"addr": {"country": "KR", "city": "Seoul"}}

    def test_merge_missing_flat_key_gives_none(self):
        record = {}
        RecordNormalizer.merge_nested(record, "addr", ["city"])
        assert record == {"addr": {"city": None}}

    def test_split_then_merge_round_trip(self):
        original = {"id": 1, "addr": {"city": "Seoul", "zip": "04524"}}
        record = copy.deepcopy(original)

        RecordNormalizer.split_nested(record, "addr", ["city", "zip"])
        RecordNormalizer.merge_nested(record, "addr", ["city", "zip"])

        assert record == original


class TestFromSettings:
    """Tests for RecordNormalizer.from_settings."""

    def test_uses_configured_timezone(self, monkeypatch):
        monkeypatch.setenv("DAO_TIMEZONE", "UTC")
        normalizer = RecordNormalizer.from_settings(["name"])

        assert normalizer.fields == ["name"]
        assert normalizer.coerce_timestamps({"utime": 0}) == {"utime": EPOCH_UTC}

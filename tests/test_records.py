"""
Tests for optional-safe record access.
"""

from datetime import UTC, date, datetime, timedelta, timezone

import pytest

from projectdesk.records import (
    as_records,
    days_between,
    first,
    flag,
    is_outbound,
    number,
    parse_timestamp,
    record_id,
    status_key,
    text,
    timestamp,
)


class TestAsRecords:
    @pytest.mark.parametrize("value", [None, "emails", b"x", 42, {"id": 1}, 3.5])
    def test_non_collections_are_empty(self, value):
        assert as_records(value) == []

    def test_drops_non_mapping_elements(self):
        assert as_records([{"id": 1}, None, "x", 5, {"id": 2}]) == [{"id": 1}, {"id": 2}]

    def test_tuples_and_generators(self):
        assert as_records(({"id": 1},)) == [{"id": 1}]
        assert as_records(r for r in [{"id": 2}]) == [{"id": 2}]


class TestFieldAccess:
    def test_first_skips_empty(self):
        assert first({"a": "", "b": None, "c": "x"}, "a", "b", "c") == "x"

    def test_first_on_non_mapping(self):
        assert first(None, "a") is None
        assert first(["a"], "a") is None

    def test_first_keeps_false_and_zero(self):
        assert first({"a": False}, "a") is False
        assert first({"a": 0}, "a") == 0

    def test_text_strips_and_defaults(self):
        assert text({"a": "  hi "}, "a") == "hi"
        assert text({"a": "   "}, "a", default="?") == "?"
        assert text({}, "a") == ""

    def test_flag_strings(self):
        assert flag({"a": "true"}, "a") is True
        assert flag({"a": "Yes"}, "a") is True
        assert flag({"a": "false"}, "a") is False
        assert flag({"a": "no"}, "a") is False
        assert flag({}, "a") is False

    def test_number(self):
        assert number({"a": "12.5"}, "a") == 12.5
        assert number({"a": 3}, "a") == 3.0
        assert number({"a": "abc"}, "a") is None
        assert number({"a": True}, "a") is None
        assert number({"a": float("nan")}, "a") is None
        assert number({"a": [1]}, "a") is None

    def test_record_id(self):
        assert record_id({"id": 7}) == "7"
        assert record_id({"_id": "x"}) == "x"
        assert record_id({}) is None

    def test_status_key(self):
        assert status_key("In Storage") == "instorage"
        assert status_key("in_loading-bay") == "inloadingbay"
        assert status_key(None) == ""


class TestParseTimestamp:
    def test_zulu_string(self):
        assert parse_timestamp("2026-03-01T10:00:00Z") == datetime(2026, 3, 1, 10, tzinfo=UTC)

    def test_offset_string_is_converted_to_utc(self):
        parsed = parse_timestamp("2026-03-01T14:00:00+04:00")
        assert parsed == datetime(2026, 3, 1, 10, tzinfo=UTC)
        assert parsed.utcoffset() == timedelta(0)

    def test_naive_string_taken_as_utc(self):
        assert parse_timestamp("2026-03-01T10:00:00") == datetime(2026, 3, 1, 10, tzinfo=UTC)

    def test_date_only(self):
        assert parse_timestamp("2026-03-01") == datetime(2026, 3, 1, tzinfo=UTC)
        assert parse_timestamp(date(2026, 3, 1)) == datetime(2026, 3, 1, tzinfo=UTC)

    def test_datetime_passthrough(self):
        aware = datetime(2026, 3, 1, 12, tzinfo=timezone(timedelta(hours=2)))
        assert parse_timestamp(aware) == datetime(2026, 3, 1, 10, tzinfo=UTC)

    def test_epoch_seconds_and_millis(self):
        assert parse_timestamp(0) == datetime(1970, 1, 1, tzinfo=UTC)
        assert parse_timestamp(1_700_000_000_000) == parse_timestamp(1_700_000_000)

    @pytest.mark.parametrize("value", [None, "", "   ", "not a date", "2026-13-45", True, [], {}])
    def test_unparseable_is_none(self, value):
        assert parse_timestamp(value) is None

    def test_timestamp_fallback_keys(self):
        record = {"sent_at": "garbage", "created_at": "2026-03-01T00:00:00Z"}
        assert timestamp(record, "sent_at", "created_at") == datetime(2026, 3, 1, tzinfo=UTC)

    def test_days_between_floors(self):
        start = datetime(2026, 3, 1, tzinfo=UTC)
        assert days_between(start, start + timedelta(days=2, hours=23)) == 2
        assert days_between(start, start) == 0


class TestIsOutbound:
    def test_explicit_flag_wins(self):
        assert is_outbound({"is_outbound": True, "direction": "inbound"}) is True
        assert is_outbound({"is_outbound": False, "direction": "outbound"}) is False

    def test_direction(self):
        assert is_outbound({"direction": "Outbound"}) is True
        assert is_outbound({"direction": "inbound"}) is False
        assert is_outbound({}) is False

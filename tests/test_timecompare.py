"""Unit tests for timestamp comparison."""

from datetime import UTC, date, datetime, timedelta, timezone

import pytest

from webcal_mirror.models import EventDateTime
from webcal_mirror.timecompare import (
    MalformedTimestampError,
    equivalent,
    matches_kind,
    parse_stored_time,
    to_instant,
)


class TestEquivalent:
    def test_dates(self):
        assert equivalent(date(2026, 10, 20), date(2026, 10, 20))
        assert not equivalent(date(2026, 10, 20), date(2026, 10, 21))

    def test_instants_ignore_sub_second(self):
        a = datetime(2026, 10, 20, 10, 0, 0, 100, tzinfo=UTC)
        b = datetime(2026, 10, 20, 10, 0, 0, 999999, tzinfo=UTC)

        assert equivalent(a, b)

    def test_instants_differing_by_a_second(self):
        a = datetime(2026, 10, 20, 10, 0, 0, tzinfo=UTC)

        assert not equivalent(a, a + timedelta(seconds=1))

    def test_instants_across_offsets(self):
        utc = datetime(2026, 10, 20, 10, 0, tzinfo=UTC)
        plus_two = datetime(2026, 10, 20, 12, 0, tzinfo=timezone(timedelta(hours=2)))

        assert equivalent(utc, plus_two)

    def test_date_against_midnight_instant(self):
        assert equivalent(date(2026, 10, 20), datetime(2026, 10, 20, tzinfo=UTC))
        assert not equivalent(date(2026, 10, 20), datetime(2026, 10, 20, 9, tzinfo=UTC))


class TestMatchesKind:
    def test_all_day_needs_date(self):
        assert matches_kind(date(2026, 10, 20), all_day=True)
        assert not matches_kind(datetime(2026, 10, 20, tzinfo=UTC), all_day=True)

    def test_timed_needs_instant(self):
        assert matches_kind(datetime(2026, 10, 20, tzinfo=UTC), all_day=False)
        assert not matches_kind(date(2026, 10, 20), all_day=False)


class TestParseStoredTime:
    def test_date(self):
        assert parse_stored_time(EventDateTime(date="2026-10-20")) == date(2026, 10, 20)

    def test_date_time_with_offset(self):
        value = parse_stored_time(EventDateTime(date_time="2026-10-20T12:00:00+02:00"))

        assert value == datetime(2026, 10, 20, 10, 0, tzinfo=UTC)

    def test_date_time_with_zulu_suffix(self):
        value = parse_stored_time(EventDateTime(date_time="2026-10-20T10:00:00Z"))

        assert value == datetime(2026, 10, 20, 10, 0, tzinfo=UTC)

    def test_naive_date_time_is_utc(self):
        value = parse_stored_time(EventDateTime(date_time="2026-10-20T10:00:00"))

        assert value.tzinfo is not None

    @pytest.mark.parametrize(
        "stored",
        [
            EventDateTime(date="20/10/2026"),
            EventDateTime(date_time="tomorrow at ten"),
            EventDateTime(),
        ],
    )
    def test_malformed(self, stored):
        with pytest.raises(MalformedTimestampError):
            parse_stored_time(stored)


def test_to_instant():
    assert to_instant(date(2026, 10, 20)) == datetime(2026, 10, 20, tzinfo=UTC)
    assert to_instant(datetime(2026, 10, 20, 8)) == datetime(2026, 10, 20, 8, tzinfo=UTC)

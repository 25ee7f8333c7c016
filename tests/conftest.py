"""Shared fixtures for webcal-mirror tests."""

from datetime import UTC, date, datetime, timedelta

import pytest

from webcal_mirror.config import FeedConfig
from webcal_mirror.identity import ownership_tag
from webcal_mirror.models import (
    KEY_PROPERTY,
    OWNER_PROPERTY,
    DestinationEvent,
    SourceEvent,
)

NOW = datetime(2026, 10, 18, 12, 0, tzinfo=UTC)
FEED_URL = "https://example.com/club/calendar.ics"
TOMORROW_10 = NOW + timedelta(hours=22)


def _default_length(start):
    return timedelta(hours=1) if isinstance(start, datetime) else timedelta(days=1)


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def feed():
    return FeedConfig(url=FEED_URL, name="club", color_id="5")


@pytest.fixture
def source_event():
    """Factory for normalized feed events, tomorrow 10:00-11:00 by default."""

    def make(uid="a", start=None, end=None, summary="Standup", **kwargs):
        start = start or TOMORROW_10
        is_all_day = kwargs.pop("is_all_day", not isinstance(start, datetime))
        if end is None:
            end = start + _default_length(start)
        return SourceEvent(
            uid=uid,
            start=start,
            end=end,
            summary=summary,
            is_all_day=is_all_day,
            **kwargs,
        )

    return make


def _time_body(value):
    if isinstance(value, datetime):
        return {"dateTime": value.isoformat()}
    if isinstance(value, date):
        return {"date": value.isoformat()}
    return value


@pytest.fixture
def google_event():
    """Factory for Calendar API event resources owned by the test feed."""

    def make(
        event_id="d1",
        key="a",
        start=None,
        end=None,
        summary="Standup",
        status="confirmed",
        color_id="5",
        **extra,
    ):
        start = start or TOMORROW_10
        end = end or start + _default_length(start)
        event = {
            "id": event_id,
            "summary": summary,
            "start": _time_body(start),
            "end": _time_body(end),
            "status": status,
            "colorId": color_id,
            "extendedProperties": {
                "private": {OWNER_PROPERTY: ownership_tag(FEED_URL), KEY_PROPERTY: key}
            },
        }
        event.update(extra)
        return event

    return make


@pytest.fixture
def destination_event(google_event):
    def make(**kwargs):
        return DestinationEvent.from_google_event(google_event(**kwargs))

    return make

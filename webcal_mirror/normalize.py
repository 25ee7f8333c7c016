"""Normalization of raw feed events into comparable source events."""

from collections.abc import Iterable
from datetime import UTC, datetime, time, tzinfo

from .models import EventTime, RawEvent, SourceEvent


def _clean(value: str | None) -> str:
    # feeds frequently indent folded text
    return (value or "").strip()


def is_all_day(raw: RawEvent) -> bool:
    return raw.start_is_date or raw.end_is_date


def _as_date(value: EventTime) -> EventTime:
    # some parsers end an all-day event one unit before midnight
    if isinstance(value, datetime):
        return value.date()
    return value


def _as_instant(value: EventTime, default_tz: tzinfo) -> datetime:
    if not isinstance(value, datetime):
        value = datetime.combine(value, time.min)
    if value.tzinfo is None:
        value = value.replace(tzinfo=default_tz)
    return value.replace(microsecond=0)


def normalize(raw: RawEvent, default_tz: tzinfo = UTC) -> SourceEvent:
    """Build a SourceEvent from a raw feed event.

    Floating (timezone-less) date-times are read in ``default_tz``.
    """
    all_day = is_all_day(raw)
    if all_day:
        start = _as_date(raw.start)
        end = _as_date(raw.end)
    else:
        start = _as_instant(raw.start, default_tz)
        end = _as_instant(raw.end, default_tz)

    return SourceEvent(
        uid=_clean(raw.uid),
        url=_clean(raw.url),
        summary=_clean(raw.summary),
        location=_clean(raw.location),
        description=_clean(raw.description),
        start=start,
        end=end,
        is_all_day=all_day,
    )


def normalize_all(
    raws: Iterable[RawEvent], default_tz: tzinfo = UTC
) -> list[SourceEvent]:
    """Normalize a batch of raw events, keeping feed order."""
    return [normalize(raw, default_tz) for raw in raws]

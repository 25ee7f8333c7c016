"""Comparison of event timestamps that may be dates or date-times."""

from datetime import UTC, date, datetime, time

from .models import EventDateTime, EventTime


class MalformedTimestampError(ValueError):
    """Raised when a stored destination timestamp cannot be parsed."""


def is_date_only(value: EventTime) -> bool:
    return not isinstance(value, datetime)


def truncate_to_second(value: datetime) -> datetime:
    return value.replace(microsecond=0)


def to_instant(value: EventTime) -> datetime:
    """Return an aware instant. Dates map to midnight UTC, naive values to UTC."""
    if not isinstance(value, datetime):
        return datetime.combine(value, time.min, tzinfo=UTC)
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def equivalent(a: EventTime, b: EventTime) -> bool:
    """Whether two timestamps are the same for diffing purposes.

    Dates compare as dates. Anything involving an instant compares at second
    precision, so sub-second jitter between representations is ignored.
    """
    if is_date_only(a) and is_date_only(b):
        return a == b
    return truncate_to_second(to_instant(a)) == truncate_to_second(to_instant(b))


def matches_kind(value: EventTime, all_day: bool) -> bool:
    """Whether a stored value uses the representation ``all_day`` calls for."""
    return is_date_only(value) == all_day


def parse_stored_time(stored: EventDateTime) -> EventTime:
    """Parse a destination start/end into a date or an aware datetime."""
    if stored.date:
        try:
            return date.fromisoformat(stored.date)
        except ValueError as e:
            raise MalformedTimestampError(
                f"Unable to parse date {stored.date!r}: {e}"
            ) from e

    if stored.date_time:
        try:
            return to_instant(
                datetime.fromisoformat(stored.date_time.replace("Z", "+00:00"))
            )
        except ValueError as e:
            raise MalformedTimestampError(
                f"Unable to parse date time {stored.date_time!r}: {e}"
            ) from e

    raise MalformedTimestampError("Stored event time has neither date nor dateTime")

"""Event models shared by the feed reader, the reconciler and the store."""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any

# A calendar date for all-day events, an aware instant for timed ones
EventTime = date | datetime

# Private extended properties written on every mirrored event
OWNER_PROPERTY = "webcal_mirror_feed"
KEY_PROPERTY = "webcal_mirror_key"

STATUS_CONFIRMED = "confirmed"
STATUS_CANCELLED = "cancelled"


@dataclass
class RawEvent:
    """An event as read from the feed, before normalization."""

    uid: str
    start: EventTime
    end: EventTime
    summary: str = ""
    location: str = ""
    description: str = ""
    url: str = ""
    start_is_date: bool = False  # DTSTART carried VALUE=DATE
    end_is_date: bool = False  # DTEND carried VALUE=DATE


@dataclass(frozen=True)
class SourceEvent:
    """A normalized feed event, ready to be reconciled."""

    uid: str
    start: EventTime
    end: EventTime
    is_all_day: bool
    summary: str = ""
    location: str = ""
    description: str = ""
    url: str = ""


def event_time_body(
    value: EventTime, all_day: bool, null_other: bool = False
) -> dict[str, Any]:
    """Serialize a start/end value the way the Calendar API stores it.

    With ``null_other`` the unused representation is sent as null so a patch
    switching between all-day and timed actually drops the old field.
    """
    if all_day:
        day = value.date() if isinstance(value, datetime) else value
        body: dict[str, Any] = {"date": day.isoformat()}
        if null_other:
            body["dateTime"] = None
        return body

    body = {"dateTime": value.isoformat()}
    if null_other:
        body["date"] = None
    return body


@dataclass
class EventDateTime:
    """Start or end of a destination event, exactly as the store returned it."""

    date: str = ""
    date_time: str = ""
    time_zone: str = ""

    @classmethod
    def from_google(cls, data: dict[str, Any] | None) -> "EventDateTime":
        data = data or {}
        return cls(
            date=data.get("date") or "",
            date_time=data.get("dateTime") or "",
            time_zone=data.get("timeZone") or "",
        )


@dataclass
class DestinationEvent:
    """An event previously mirrored into the destination calendar."""

    event_id: str
    external_key: str | None
    start: EventDateTime = field(default_factory=EventDateTime)
    end: EventDateTime = field(default_factory=EventDateTime)
    summary: str = ""
    location: str = ""
    description: str = ""
    color_id: str = ""
    status: str = ""
    original_event: dict[str, Any] | None = None

    @classmethod
    def from_google_event(cls, event: dict[str, Any]) -> "DestinationEvent":
        """Create a DestinationEvent from a Google Calendar API event resource."""
        private = event.get("extendedProperties", {}).get("private", {})

        return cls(
            event_id=event["id"],
            external_key=private.get(KEY_PROPERTY),
            start=EventDateTime.from_google(event.get("start")),
            end=EventDateTime.from_google(event.get("end")),
            summary=event.get("summary", ""),
            location=event.get("location", ""),
            description=event.get("description", ""),
            color_id=event.get("colorId", ""),
            status=event.get("status", ""),
            original_event=event,
        )


@dataclass(frozen=True)
class NewEvent:
    """Payload for an event to be created in the destination calendar."""

    external_key: str
    owner_tag: str
    start: EventTime
    end: EventTime
    all_day: bool
    summary: str = ""
    location: str = ""
    description: str = ""
    color_id: str = ""
    status: str = STATUS_CONFIRMED

    def to_google_body(self) -> dict[str, Any]:
        """Build the request body for ``events.insert``."""
        body: dict[str, Any] = {
            "summary": self.summary,
            "location": self.location,
            "description": self.description,
            "start": event_time_body(self.start, self.all_day),
            "end": event_time_body(self.end, self.all_day),
            "status": self.status,
            "extendedProperties": {
                "private": {
                    OWNER_PROPERTY: self.owner_tag,
                    KEY_PROPERTY: self.external_key,
                }
            },
        }
        if self.color_id:
            body["colorId"] = self.color_id
        return body


@dataclass
class EventPatch:
    """Field-level changes for one destination event.

    A field left as None is omitted from the patch. Text fields that must be
    emptied are listed in ``cleared`` instead, because the API treats an
    omitted field and an explicitly cleared one differently.
    """

    event_id: str
    all_day: bool = False
    summary: str | None = None
    location: str | None = None
    description: str | None = None
    start: EventTime | None = None
    end: EventTime | None = None
    color_id: str | None = None
    status: str | None = None
    cleared: list[str] = field(default_factory=list)

    def set_text(self, name: str, value: str):
        """Set a clearable text field (location or description)."""
        if value:
            setattr(self, name, value)
        else:
            self.cleared.append(name)

    def changed_fields(self) -> list[str]:
        changed = [
            name
            for name in (
                "summary",
                "location",
                "description",
                "start",
                "end",
                "color_id",
                "status",
            )
            if getattr(self, name) is not None
        ]
        return changed + [name for name in self.cleared if name not in changed]

    def to_google_body(self) -> dict[str, Any]:
        """Build the request body for ``events.patch``."""
        body: dict[str, Any] = {}
        if self.summary is not None:
            body["summary"] = self.summary
        if self.location is not None:
            body["location"] = self.location
        if self.description is not None:
            body["description"] = self.description
        for name in self.cleared:
            body[name] = ""
        if self.start is not None:
            body["start"] = event_time_body(self.start, self.all_day, null_other=True)
        if self.end is not None:
            body["end"] = event_time_body(self.end, self.all_day, null_other=True)
        if self.color_id is not None:
            body["colorId"] = self.color_id
        if self.status is not None:
            body["status"] = self.status
        return body

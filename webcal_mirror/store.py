"""Google Calendar destination store."""

import logging
from datetime import datetime
from typing import Any

from googleapiclient.discovery import build

from .models import OWNER_PROPERTY, DestinationEvent, EventPatch, NewEvent

PAGE_SIZE = 250


class GoogleCalendarStore:
    """Reads and mutates mirrored events in one Google Calendar."""

    def __init__(self, service: Any, calendar_id: str = "primary"):
        self.service = service
        self.calendar_id = calendar_id
        self.logger = logging.getLogger(__name__)

    @classmethod
    def from_credentials(
        cls, credentials: Any, calendar_id: str = "primary"
    ) -> "GoogleCalendarStore":
        """Build the Calendar API service for ``credentials``."""
        service = build("calendar", "v3", credentials=credentials, cache_discovery=False)
        return cls(service, calendar_id)

    def list_owned_events(
        self,
        owner_tag: str,
        time_min: datetime | None = None,
        show_deleted: bool = True,
    ) -> list[DestinationEvent]:
        """List every event carrying ``owner_tag``, following pagination.

        Cancelled events are included by default so the reconciler can tell
        an already-deleted event from a missing one.
        """
        params: dict[str, Any] = {
            "calendarId": self.calendar_id,
            "privateExtendedProperty": f"{OWNER_PROPERTY}={owner_tag}",
            "showDeleted": show_deleted,
            "maxResults": PAGE_SIZE,
        }
        if time_min is not None:
            params["timeMin"] = time_min.isoformat()

        events: list[DestinationEvent] = []
        page_token = None
        while True:
            result = (
                self.service.events().list(pageToken=page_token, **params).execute()
            )
            events.extend(
                DestinationEvent.from_google_event(item)
                for item in result.get("items", [])
            )
            page_token = result.get("nextPageToken")
            if not page_token:
                break

        self.logger.info(
            f"📅 Found {len(events)} mirrored events in calendar {self.calendar_id}"
        )
        return events

    def create_event(self, event: NewEvent) -> dict[str, Any]:
        return (
            self.service.events()
            .insert(calendarId=self.calendar_id, body=event.to_google_body())
            .execute()
        )

    def patch_event(self, patch: EventPatch) -> dict[str, Any]:
        return (
            self.service.events()
            .patch(
                calendarId=self.calendar_id,
                eventId=patch.event_id,
                body=patch.to_google_body(),
            )
            .execute()
        )

    def delete_event(self, event_id: str):
        self.service.events().delete(
            calendarId=self.calendar_id, eventId=event_id
        ).execute()

"""Download and parse iCalendar feeds."""

import logging
import re
from datetime import date, datetime, timedelta
from typing import Any

import requests
from icalendar import Calendar

from .models import RawEvent

logger = logging.getLogger(__name__)

# Some feeds emit DTSTAMP values the parser rejects; only the date part is kept
DTSTAMP_FIX = re.compile(r"^(DTSTAMP:.*)T(.*)$", re.MULTILINE)


class FeedError(Exception):
    """Raised when a feed cannot be downloaded or parsed."""


def feed_http_url(url: str) -> str:
    """Map webcal:// URLs to the https:// URL that serves them."""
    if url.lower().startswith("webcal://"):
        return "https://" + url[len("webcal://") :]
    return url


def fetch_feed(url: str, timeout: int = 30) -> str:
    """Download a feed and return its text."""
    try:
        response = requests.get(feed_http_url(url), timeout=timeout)
        response.raise_for_status()
    except requests.RequestException as e:
        raise FeedError(f"Failed to download feed {url}: {e}") from e

    response.encoding = "utf-8"
    return response.text


def repair_feed_text(text: str) -> str:
    return DTSTAMP_FIX.sub(r"\1", text)


def _is_date_value(prop: Any) -> bool:
    if prop.params.get("VALUE", "").upper() == "DATE":
        return True
    return isinstance(prop.dt, date) and not isinstance(prop.dt, datetime)


def _text(component: Any, name: str) -> str:
    value = component.get(name)
    return str(value) if value is not None else ""


def _event_from_component(component: Any) -> RawEvent | None:
    dtstart = component.get("DTSTART")
    if dtstart is None:
        logger.warning(f"Skipping event {_text(component, 'UID')!r} without DTSTART")
        return None

    start = dtstart.dt
    start_is_date = _is_date_value(dtstart)

    dtend = component.get("DTEND")
    duration = component.get("DURATION")
    if dtend is not None:
        end = dtend.dt
        end_is_date = _is_date_value(dtend)
    elif duration is not None:
        end = start + duration.dt
        end_is_date = start_is_date
    else:
        end = start + timedelta(days=1) if start_is_date else start
        end_is_date = start_is_date

    return RawEvent(
        uid=_text(component, "UID"),
        url=_text(component, "URL"),
        summary=_text(component, "SUMMARY"),
        location=_text(component, "LOCATION"),
        description=_text(component, "DESCRIPTION"),
        start=start,
        end=end,
        start_is_date=start_is_date,
        end_is_date=end_is_date,
    )


def parse_feed(text: str) -> list[RawEvent]:
    """Parse iCalendar text into raw events, in feed order."""
    try:
        calendar = Calendar.from_ical(text)
    except ValueError as e:
        raise FeedError(f"Failed to parse feed: {e}") from e

    events = []
    for component in calendar.walk("VEVENT"):
        if getattr(component, "errors", None):
            logger.debug(f"Ignoring malformed properties: {component.errors}")
        event = _event_from_component(component)
        if event is not None:
            events.append(event)
    return events


def read_feed(url: str, timeout: int = 30) -> list[RawEvent]:
    """Download, repair and parse the feed at ``url``."""
    logger.info(f"📥 Fetching feed {url}")
    events = parse_feed(repair_feed_text(fetch_feed(url, timeout=timeout)))
    logger.info(f"📅 Found {len(events)} events in feed {url}")
    return events

"""Reconciliation of feed events against their mirrored destination copies."""

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import UTC, datetime

from .config import FeedConfig
from .identity import check_id_format, ownership_tag, resolve_identity
from .models import (
    STATUS_CANCELLED,
    STATUS_CONFIRMED,
    DestinationEvent,
    EventDateTime,
    EventPatch,
    EventTime,
    NewEvent,
    SourceEvent,
)
from .timecompare import equivalent, matches_kind, parse_stored_time, to_instant

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReconciliationPlan:
    """Creates, updates and deletes converging one calendar on its feed.

    The apply step must run them in that order.
    """

    creates: tuple[NewEvent, ...] = ()
    updates: tuple[EventPatch, ...] = ()
    deletes: tuple[str, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not (self.creates or self.updates or self.deletes)

    def summary(self) -> str:
        return (
            f"{len(self.creates)} to create, {len(self.updates)} to update, "
            f"{len(self.deletes)} to delete"
        )


def _index_by_key(
    destination_events: Iterable[DestinationEvent],
) -> tuple[dict[str, DestinationEvent], list[DestinationEvent]]:
    """Map external keys to destination events.

    When several events share a key, a live one is preferred over a cancelled
    one and the rest are returned as orphans.
    """
    by_key: dict[str, DestinationEvent] = {}
    orphans: list[DestinationEvent] = []

    for event in destination_events:
        if not event.external_key:
            logger.debug(f"Ignoring destination event {event.event_id} without key")
            continue

        current = by_key.get(event.external_key)
        if current is None:
            by_key[event.external_key] = event
        elif current.status == STATUS_CANCELLED and event.status != STATUS_CANCELLED:
            by_key[event.external_key] = event
            orphans.append(current)
        else:
            orphans.append(event)

    return by_key, orphans


def build_new_event(feed: FeedConfig, event: SourceEvent, key: str) -> NewEvent:
    """Full create payload for a feed event with no destination copy yet."""
    return NewEvent(
        external_key=key,
        owner_tag=ownership_tag(feed.url),
        summary=event.summary,
        location=event.location,
        description=event.description,
        start=event.start,
        end=event.end,
        all_day=event.is_all_day,
        color_id=feed.color_id,
    )


def _time_changed(stored: EventDateTime, value: EventTime, all_day: bool) -> bool:
    current = parse_stored_time(stored)
    return not equivalent(current, value) or not matches_kind(current, all_day)


def diff_event(
    feed: FeedConfig, event: SourceEvent, existing: DestinationEvent
) -> EventPatch:
    """Compute the patch bringing ``existing`` in line with ``event``."""
    patch = EventPatch(event_id=existing.event_id, all_day=event.is_all_day)

    if event.summary != existing.summary:
        patch.summary = event.summary
    if _time_changed(existing.start, event.start, event.is_all_day):
        patch.start = event.start
    if _time_changed(existing.end, event.end, event.is_all_day):
        patch.end = event.end
    if event.description != existing.description:
        patch.set_text("description", event.description)
    if event.location != existing.location:
        patch.set_text("location", event.location)
    if feed.color_id and feed.color_id != existing.color_id:
        patch.color_id = feed.color_id
    if existing.status != STATUS_CONFIRMED:
        # self-heal events cancelled by hand or by an earlier run
        patch.status = STATUS_CONFIRMED

    return patch


def reconcile(
    feed: FeedConfig,
    source_events: Iterable[SourceEvent],
    destination_events: Iterable[DestinationEvent],
    now: datetime | None = None,
) -> ReconciliationPlan:
    """Diff a feed's events against the events previously mirrored from it.

    Args:
        feed: Feed configuration (identity format, color, url)
        source_events: Normalized feed events, in feed order
        destination_events: Destination events owned by this feed
        now: Diff time; defaults to the current time

    Returns:
        The ReconciliationPlan for this feed

    Raises:
        UnknownIdentityFormatError: The feed's id_format is not supported
        MalformedTimestampError: A destination event has an unparseable time
    """
    check_id_format(feed.id_format)
    now = now or datetime.now(UTC)

    by_key, orphans = _index_by_key(destination_events)
    seen: set[str] = set()
    creates: list[NewEvent] = []
    updates: list[EventPatch] = []

    for event in source_events:
        if to_instant(event.start) < now:
            continue

        key = resolve_identity(feed.id_format, event)
        if not key:
            logger.warning(f"Event {event.summary!r} has no ID, not processing")
            continue
        if key in seen:
            logger.warning(f"ID {key} is a duplicate, not processing")
            continue
        seen.add(key)

        existing = by_key.pop(key, None)
        if existing is None:
            creates.append(build_new_event(feed, event, key))
            continue

        patch = diff_event(feed, event, existing)
        if patch.changed_fields():
            logger.debug(
                f"Event {existing.event_id} changed: {', '.join(patch.changed_fields())}"
            )
            updates.append(patch)

    deletes: list[str] = []
    for existing in list(by_key.values()) + orphans:
        if existing.status == STATUS_CANCELLED:
            continue

        start = to_instant(parse_stored_time(existing.start))
        if now < start:
            deletes.append(existing.event_id)
        else:
            logger.info(
                f"Not deleting event {existing.summary!r} because it already started"
            )

    return ReconciliationPlan(
        creates=tuple(creates), updates=tuple(updates), deletes=tuple(deletes)
    )

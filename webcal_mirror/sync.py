"""Feed synchronization: read, reconcile and apply, one feed at a time."""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

from googleapiclient.errors import HttpError

from .auth import GoogleAuthenticator
from .config import Config, FeedConfig
from .feed import read_feed
from .identity import check_id_format, ownership_tag
from .models import RawEvent
from .normalize import normalize_all
from .reconcile import ReconciliationPlan, reconcile
from .store import GoogleCalendarStore

HTTP_CONFLICT = 409


@dataclass
class SyncResult:
    """Outcome of one feed's run."""

    feed: str
    created: int = 0
    updated: int = 0
    deleted: int = 0
    conflicts: int = 0
    dry_run: bool = False
    error: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.error is None


class FeedSynchronizer:
    """Mirrors configured feeds into Google Calendar."""

    def __init__(
        self,
        config: Config,
        service: Any = None,
        feed_reader: Callable[..., list[RawEvent]] = read_feed,
    ):
        self.config = config
        self.logger = logging.getLogger(__name__)
        self.feed_reader = feed_reader
        self._service = service
        self._stores: dict[str, GoogleCalendarStore] = {}

    def _get_service(self) -> Any:
        if self._service is None:
            credentials = GoogleAuthenticator(self.config.account).authenticate(
                interactive=False
            )
            self._service = GoogleCalendarStore.from_credentials(credentials).service
            self.logger.info(f"✅ Initialized Calendar API service for {self.config.account}")
        return self._service

    def get_store(self, calendar_id: str) -> GoogleCalendarStore:
        """Store for ``calendar_id``, sharing one API service across calendars."""
        if calendar_id not in self._stores:
            self._stores[calendar_id] = GoogleCalendarStore(
                self._get_service(), calendar_id
            )
        return self._stores[calendar_id]

    def plan_feed(
        self, feed: FeedConfig, now: datetime | None = None
    ) -> tuple[GoogleCalendarStore, ReconciliationPlan]:
        """Read a feed and its mirrored events and compute the plan."""
        check_id_format(feed.id_format)
        now = now or datetime.now(UTC)

        raw_events = self.feed_reader(feed.url, timeout=self.config.request_timeout)
        source_events = normalize_all(raw_events, feed.tzinfo())

        store = self.get_store(feed.calendar_id)
        existing = store.list_owned_events(ownership_tag(feed.url), time_min=now)

        plan = reconcile(feed, source_events, existing, now=now)
        self.logger.info(f"🔍 {feed.label}: {plan.summary()}")
        return store, plan

    def apply_plan(
        self, store: GoogleCalendarStore, plan: ReconciliationPlan, result: SyncResult
    ):
        """Apply a plan in create, update, delete order.

        A create rejected with 409 means the event already exists and is
        counted as converged. Any other API error propagates.
        """
        for event in plan.creates:
            try:
                store.create_event(event)
                result.created += 1
            except HttpError as e:
                if e.resp.status != HTTP_CONFLICT:
                    raise
                self.logger.info(f"Event already existed: {event.summary!r}: {e}")
                result.conflicts += 1

        for patch in plan.updates:
            store.patch_event(patch)
            result.updated += 1

        for event_id in plan.deletes:
            store.delete_event(event_id)
            result.deleted += 1

    def sync_feed(self, feed: FeedConfig, dry_run: bool = False) -> SyncResult:
        """Synchronize one feed. Fatal errors propagate to the caller."""
        self.logger.info(f"🔄 Starting on feed {feed.label}")
        result = SyncResult(feed=feed.label, dry_run=dry_run)

        store, plan = self.plan_feed(feed)
        if dry_run:
            self._log_plan(feed, plan)
            result.created = len(plan.creates)
            result.updated = len(plan.updates)
            result.deleted = len(plan.deletes)
            return result

        self.apply_plan(store, plan, result)
        self.logger.info(
            f"✅ Finished feed {feed.label}: {result.created} created, "
            f"{result.updated} updated, {result.deleted} deleted"
        )
        return result

    def sync_all(
        self, feeds: list[FeedConfig] | None = None, dry_run: bool = False
    ) -> list[SyncResult]:
        """Synchronize feeds independently; one failing feed does not stop the rest."""
        if feeds is None:
            feeds = self.config.get_enabled_feeds()

        results = []
        for feed in feeds:
            try:
                results.append(self.sync_feed(feed, dry_run=dry_run))
            except Exception as e:
                self.logger.error(f"❌ Sync failed for feed {feed.label}: {e}")
                results.append(SyncResult(feed=feed.label, dry_run=dry_run, error=str(e)))
        return results

    def _log_plan(self, feed: FeedConfig, plan: ReconciliationPlan):
        for event in plan.creates:
            self.logger.info(f"DRY RUN {feed.label}: would create {event.summary!r}")
        for patch in plan.updates:
            self.logger.info(
                f"DRY RUN {feed.label}: would update {patch.event_id} "
                f"({', '.join(patch.changed_fields())})"
            )
        for event_id in plan.deletes:
            self.logger.info(f"DRY RUN {feed.label}: would delete {event_id}")

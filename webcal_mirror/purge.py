"""Removal of every event mirrored from a feed."""

import argparse
import logging

from .config import Config, FeedConfig
from .identity import ownership_tag
from .store import GoogleCalendarStore
from .sync import FeedSynchronizer

logger = logging.getLogger(__name__)


def purge_feed(
    store: GoogleCalendarStore, feed: FeedConfig, dry_run: bool = False
) -> int:
    """Delete all events owned by ``feed``, past ones included.

    Returns the number of events deleted (or that would be, on a dry run).
    """
    events = store.list_owned_events(ownership_tag(feed.url), show_deleted=False)
    print(f"   📋 Found {len(events)} events from {feed.label}")

    count = 0
    for event in events:
        if dry_run:
            print(f"      🔍 Would delete: {event.summary}")
        else:
            store.delete_event(event.event_id)
            print(f"      🗑️  Deleted: {event.summary}")
        count += 1

    logger.info(f"Purged {count} events from feed {feed.label} (dry_run={dry_run})")
    return count


def handle_purge_command(
    args: argparse.Namespace, config: Config, synchronizer: FeedSynchronizer
) -> int:
    """Purge the feeds named on the command line, or all of them with --all."""
    if not args.all and not args.feeds:
        print("❌ SAFETY ERROR: No purge target specified!")
        print("💡 Name the feeds to purge, or use --all for every configured feed")
        return 1

    if args.all:
        feeds = list(config.feeds)
    else:
        feeds = []
        for name in args.feeds:
            feed = config.get_feed(name)
            if not feed:
                print(f"❌ Feed '{name}' not found")
                return 1
            feeds.append(feed)

    if args.dry_run:
        print("🔍 DRY RUN MODE - No events will be deleted")

    total = 0
    failed = False
    for feed in feeds:
        print(f"\n🧹 Purging feed: {feed.label} ({feed.calendar_id})")
        try:
            total += purge_feed(
                synchronizer.get_store(feed.calendar_id), feed, dry_run=args.dry_run
            )
        except Exception as e:
            print(f"   ❌ Error purging {feed.label}: {e}")
            failed = True

    if args.dry_run:
        print(f"\n🔍 DRY RUN COMPLETE - Would delete {total} events")
    else:
        print(f"\n✅ PURGE COMPLETE - Deleted {total} events")
    return 1 if failed else 0

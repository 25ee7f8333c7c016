#!/usr/bin/env python3
"""Command-line interface for webcal-mirror."""

import argparse
import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

import yaml

from webcal_mirror import __version__
from webcal_mirror.auth import (
    GoogleAuthenticator,
    create_oauth2_config_file,
    load_oauth2_config,
)
from webcal_mirror.config import (
    Config,
    create_example_config,
    ensure_directories,
    get_config_dir,
    get_credentials_dir,
    get_default_config_path,
)
from webcal_mirror.purge import handle_purge_command
from webcal_mirror.sync import FeedSynchronizer

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def setup_logging(log_level: str = "INFO", log_file: str | None = None):
    """Configure the root logger for console and optional rotating file output."""
    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))

    formatter = logging.Formatter(LOG_FORMAT)
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_file, maxBytes=10 * 1024 * 1024, backupCount=5, encoding="utf-8"
        )
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="webcal-mirror - mirror iCalendar feeds into Google Calendar",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  webcal-mirror init                 # Create configuration structure
  webcal-mirror auth --setup         # Create the OAuth2 client config template
  webcal-mirror auth                 # Authenticate the configured account
  webcal-mirror sync                 # Mirror all enabled feeds
  webcal-mirror sync --dry-run       # Show the plan without changing anything
  webcal-mirror sync climbing        # Mirror one feed by name or url
  webcal-mirror sync --list          # List configured feeds
  webcal-mirror purge climbing       # Delete every event mirrored from a feed
  webcal-mirror purge --all          # Delete events of all configured feeds
  webcal-mirror config               # Show and validate configuration
        """,
    )

    parser.add_argument(
        "--version", action="version", version=f"webcal-mirror {__version__}"
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=get_default_config_path(),
        help=f"Path to configuration file (default: {get_default_config_path()})",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    sync_parser = subparsers.add_parser("sync", help="Mirror feeds")
    sync_parser.add_argument(
        "feeds", nargs="*", help="Feed names or urls (default: all enabled feeds)"
    )
    sync_parser.add_argument(
        "--list", action="store_true", help="List configured feeds instead of syncing"
    )
    sync_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Compute and show the plan without modifying the calendar",
    )

    purge_parser = subparsers.add_parser(
        "purge", help="Delete all events mirrored from feeds"
    )
    purge_parser.add_argument("feeds", nargs="*", help="Feed names or urls to purge")
    purge_parser.add_argument(
        "--all", action="store_true", help="Purge every configured feed"
    )
    purge_parser.add_argument(
        "--dry-run", action="store_true", help="Show what would be purged"
    )

    auth_parser = subparsers.add_parser("auth", help="Authenticate with Google")
    auth_parser.add_argument(
        "--setup",
        action="store_true",
        help="Create the OAuth2 client configuration template",
    )

    config_parser = subparsers.add_parser("config", help="Show current configuration")
    config_parser.add_argument(
        "--example", action="store_true", help="Show example configuration"
    )

    init_parser = subparsers.add_parser(
        "init", help="Create configuration directories and a starter config"
    )
    init_parser.add_argument(
        "--force", action="store_true", help="Overwrite existing configuration"
    )

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    handlers = {
        "sync": handle_sync_command,
        "purge": handle_purge_cli,
        "auth": handle_auth_command,
        "config": handle_config_command,
        "init": handle_init_command,
    }
    return handlers[args.command](args)


def _load_config(args) -> Config | None:
    try:
        config = Config.from_file(args.config)
    except FileNotFoundError:
        print(f"❌ Configuration file not found: {args.config}")
        print("💡 Use 'webcal-mirror init' to create a new configuration")
        return None
    except (OSError, TypeError, ValueError, yaml.YAMLError) as e:
        print(f"❌ Error loading configuration: {e}")
        return None

    setup_logging(config.log_level, config.log_file)
    return config


def handle_sync_command(args) -> int:
    """Handle the sync command."""
    config = _load_config(args)
    if config is None:
        return 1

    if args.list:
        print("🔄 Configured Feeds:")
        print("=" * 50)
        if not config.feeds:
            print("  No feeds configured")
        for feed in config.feeds:
            status = "✅ enabled" if feed.enabled else "❌ disabled"
            print(f"  • {feed.label} → {feed.calendar_id} - {status}")
        return 0

    if args.feeds:
        feeds = []
        for name in args.feeds:
            feed = config.get_feed(name)
            if not feed:
                print(f"❌ Feed '{name}' not found")
                return 1
            feeds.append(feed)
    else:
        feeds = config.get_enabled_feeds()
        if not feeds:
            print("❌ No enabled feeds found")
            return 1

    if args.dry_run:
        print("🔍 DRY RUN MODE - No calendars will be modified")
    print(f"🚀 Mirroring {len(feeds)} feed(s)...")

    synchronizer = FeedSynchronizer(config)
    results = synchronizer.sync_all(feeds, dry_run=args.dry_run)

    for result in results:
        if not result.succeeded:
            print(f"  ❌ {result.feed}: {result.error}")
            continue
        verb = "would be" if result.dry_run else "were"
        print(
            f"  ✅ {result.feed}: {result.created} created, {result.updated} updated, "
            f"{result.deleted} deleted ({verb} applied)"
        )

    return 0 if all(result.succeeded for result in results) else 1


def handle_purge_cli(args) -> int:
    """Handle the purge command."""
    config = _load_config(args)
    if config is None:
        return 1
    return handle_purge_command(args, config, FeedSynchronizer(config))


def handle_auth_command(args) -> int:
    """Handle the auth command."""
    if args.setup:
        print("🔧 Setting up OAuth2 configuration...")
        path = create_oauth2_config_file()
        print(f"✅ OAuth2 config file created at: {path}")
        print("\n💡 Next steps:")
        print("   1. Enable the Google Calendar API in the Google Cloud Console")
        print("   2. Create an OAuth 2.0 client of type 'Desktop app'")
        print("   3. Put its client_id and client_secret in the file above")
        print("   4. Run 'webcal-mirror auth'")
        return 0

    oauth2_config = load_oauth2_config()
    if not oauth2_config:
        print("❌ OAuth2 configuration not found")
        print("💡 Run 'webcal-mirror auth --setup' to create the configuration file")
        return 1

    config = _load_config(args)
    if config is None:
        return 1

    try:
        GoogleAuthenticator(config.account, oauth2_config).authenticate()
    except Exception as e:
        print(f"❌ Failed to authenticate {config.account}: {e}")
        return 1

    print(f"✅ Successfully authenticated {config.account}")
    print("💡 You can now run 'webcal-mirror sync'")
    return 0


def handle_config_command(args) -> int:
    """Handle the config command."""
    if args.example:
        print("📋 Example Configuration:")
        print("=" * 50)
        print(create_example_config())
        return 0

    config = _load_config(args)
    if config is None:
        return 1

    print("⚙️ Current Configuration:")
    print("=" * 50)
    print(f"👤 Account: {config.account}")
    print(f"\n📋 Feeds ({len(config.feeds)}):")
    for feed in config.feeds:
        status = "✅ enabled" if feed.enabled else "❌ disabled"
        print(f"  • {feed.label} - {status}")
        print(f"    └─ url: {feed.url}")
        print(f"    └─ calendar: {feed.calendar_id}, timezone: {feed.timezone}")
        if feed.color_id:
            print(f"    └─ color: {feed.color_id}")
        print(f"    └─ id format: {feed.id_format or 'uid'}")

    print(f"\n📝 Log Level: {config.log_level}")
    if config.log_file:
        print(f"📄 Log File: {config.log_file}")

    errors = config.validate()
    if errors:
        print(f"\n⚠️  Configuration Issues ({len(errors)}):")
        for error in errors:
            print(f"  • {error}")
        return 1

    print("\n✅ Configuration is valid!")
    return 0


def handle_init_command(args) -> int:
    """Handle the init command."""
    ensure_directories()
    config_path = get_default_config_path()

    if config_path.exists() and not args.force:
        print(f"⚠️  Configuration already exists at: {config_path}")
        print("   Use --force to overwrite existing configuration")
        return 1

    with open(config_path, "w", encoding="utf-8") as f:
        f.write(create_example_config())

    print(f"✅ Configuration initialized at: {config_path}")
    print(f"📁 Credentials directory: {get_credentials_dir()}")
    print(f"📁 Config directory: {get_config_dir()}")
    print("\n💡 Next steps:")
    print("   1. Edit the configuration file with your feeds")
    print("   2. Run 'webcal-mirror auth' to authenticate with Google")
    print("   3. Run 'webcal-mirror sync' to start mirroring")
    return 0


if __name__ == "__main__":
    sys.exit(main())

"""Configuration management for the webcal-mirror service."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import yaml
from platformdirs import user_config_dir, user_data_dir

from .identity import ID_FORMATS

APP_NAME = "webcal-mirror"


@dataclass
class FeedConfig:
    """Configuration for one mirrored feed."""

    url: str  # iCalendar feed URL (http, https or webcal)
    name: str = ""  # Optional short name used on the command line
    color_id: str = ""  # Google Calendar color ID forced on mirrored events
    id_format: str = ""  # "" keys events by UID, "url" by a digest of their URL
    calendar_id: str = "primary"  # Destination Google Calendar ID
    timezone: str = "UTC"  # Zone for floating date-times in the feed
    enabled: bool = True

    @property
    def label(self) -> str:
        return self.name or self.url

    def tzinfo(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)


@dataclass
class Config:
    """Main configuration for webcal-mirror."""

    feeds: list[FeedConfig] = field(default_factory=list)
    account: str = "default"  # Name of the stored Google credentials
    log_level: str = "INFO"
    log_file: str | None = None
    request_timeout: int = 30  # Seconds allowed for a feed download

    @classmethod
    def from_file(cls, config_path: Path) -> "Config":
        """Load configuration from YAML file."""
        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(config_path, encoding="utf-8") as f:
            data = yaml.safe_load(f)

        return cls.from_dict(data or {})

    @classmethod
    def from_dict(cls, data: dict[str, Any] | list[Any]) -> "Config":
        """Create configuration from a dictionary.

        A bare list is accepted as the feed list, for configs written before
        the top-level settings existed.
        """
        if isinstance(data, list):
            data = {"feeds": data}

        config = cls()
        for feed_data in data.get("feeds") or []:
            config.feeds.append(FeedConfig(**feed_data))

        if "account" in data:
            config.account = data["account"]
        if "log_level" in data:
            config.log_level = data["log_level"]
        if "log_file" in data:
            config.log_file = data["log_file"]
        if "request_timeout" in data:
            config.request_timeout = int(data["request_timeout"])

        return config

    def validate(self) -> list[str]:
        """Validate configuration and return list of errors."""
        errors = []
        seen_urls: set[str] = set()
        seen_names: set[str] = set()

        for index, feed in enumerate(self.feeds, start=1):
            where = f"Feed #{index} ({feed.label})"
            if not feed.url:
                errors.append(f"Feed #{index} must have a url")
            elif feed.url in seen_urls:
                errors.append(f"{where} duplicates another feed url")
            seen_urls.add(feed.url)

            if feed.name:
                if feed.name in seen_names:
                    errors.append(f"{where} duplicates another feed name")
                seen_names.add(feed.name)

            if feed.id_format not in ID_FORMATS:
                errors.append(f"{where} has unknown id_format {feed.id_format!r}")

            try:
                feed.tzinfo()
            except (ZoneInfoNotFoundError, ValueError):
                errors.append(f"{where} has unknown timezone {feed.timezone!r}")

            if not feed.calendar_id:
                errors.append(f"{where} must have a calendar_id")

        return errors

    def get_feed(self, name_or_url: str) -> FeedConfig | None:
        """Get a feed by name or url."""
        for feed in self.feeds:
            if name_or_url in (feed.name, feed.url):
                return feed
        return None

    def get_enabled_feeds(self) -> list[FeedConfig]:
        return [feed for feed in self.feeds if feed.enabled]


def create_example_config() -> str:
    """Create an example configuration file."""
    return """# webcal-mirror configuration example

# Name of the stored Google credentials (see 'webcal-mirror auth')
account: "default"

feeds:
  - name: "climbing"
    url: "https://example.com/club/calendar.ics"
    color_id: "5"
    # "" keys events by their UID, "url" by a digest of their URL
    id_format: ""
    calendar_id: "primary"
    timezone: "Europe/Berlin"

  - name: "bookings"
    url: "webcal://bookings.example.org/feed/1234"
    color_id: "9"
    id_format: "url"
    enabled: false

# Logging configuration
log_level: "INFO"
log_file: "./logs/webcal-mirror.log"

# Seconds allowed for each feed download
request_timeout: 30
"""


def get_config_dir() -> Path:
    """Get the standard configuration directory."""
    xdg_config = os.environ.get("XDG_CONFIG_HOME")
    if xdg_config:
        return Path(xdg_config) / APP_NAME
    return Path(user_config_dir(APP_NAME))


def get_credentials_dir() -> Path:
    """Get the standard credentials directory."""
    xdg_data = os.environ.get("XDG_DATA_HOME")
    if xdg_data:
        return Path(xdg_data) / APP_NAME / "credentials"
    return Path(user_data_dir(APP_NAME)) / "credentials"


def get_default_config_path() -> Path:
    return get_config_dir() / "config.yaml"


def get_credentials_path(account_name: str) -> Path:
    """Get the credentials file path for a specific account."""
    return get_credentials_dir() / f"{account_name}.json"


def get_oauth2_config_path() -> Path:
    return get_credentials_dir() / "oauth2_config.yaml"


def ensure_directories():
    """Ensure that the necessary directories exist."""
    get_config_dir().mkdir(parents=True, exist_ok=True)
    get_credentials_dir().mkdir(parents=True, exist_ok=True)

"""Stable identities for feed events and ownership tags for feeds."""

import hashlib

from .models import SourceEvent

ID_FORMAT_UID = ""
ID_FORMAT_URL = "url"
ID_FORMATS = (ID_FORMAT_UID, ID_FORMAT_URL)


class UnknownIdentityFormatError(ValueError):
    """Raised when a feed is configured with an id_format we do not know."""


def _digest(value: str) -> str:
    return hashlib.sha256(value.encode("utf-8")).hexdigest()


def check_id_format(id_format: str) -> None:
    """Fail fast on an unsupported id_format, before any event is processed."""
    if id_format not in ID_FORMATS:
        raise UnknownIdentityFormatError(f"unknown id format {id_format!r}")


def resolve_identity(id_format: str, event: SourceEvent) -> str:
    """Return the key correlating a feed event with its mirrored copy.

    Some feeds reuse UIDs across distinct bookable instances; for those the
    per-event URL is the more stable identity, so ``id_format: url`` keys
    events by a SHA-256 digest of it.
    """
    check_id_format(id_format)
    if id_format == ID_FORMAT_URL:
        return _digest(event.url)
    return event.uid


def ownership_tag(feed_url: str) -> str:
    """Private tag marking every event created from ``feed_url``."""
    return _digest(feed_url)

"""General utility helpers shared across modules."""

from __future__ import annotations

import re
from datetime import datetime, timezone

_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def iso_timestamp(value: datetime) -> str:
    """Format ``value`` as a UTC ISO-8601 string with millisecond precision.

    Naive datetimes are assumed to already be UTC. The ``Z`` suffix matches
    what browsers and most GPS tooling emit.
    """

    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    text = value.astimezone(timezone.utc).isoformat(timespec="milliseconds")
    return text.replace("+00:00", "Z")


def display_time(value: datetime) -> str:
    """Human readable capture time (local wall clock, ``HH:MM:SS``)."""

    return value.astimezone().strftime("%H:%M:%S")


def parse_iso_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 string, accepting a trailing ``Z`` for UTC.

    Raises:
        ValueError: If ``value`` is not a valid timestamp.
    """

    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def escape_xml(text: str) -> str:
    """Escape special XML characters."""
    return (
        text.replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
        .replace("'", "&apos;")
    )


def safe_filename(name: str, default: str = "stage") -> str:
    """Turn a route or stage name into a filesystem-safe base name.

    ``Day1/Route2/Stage3`` becomes ``Day1-Route2-Stage3``.
    """

    cleaned = _UNSAFE_FILENAME_CHARS.sub("-", name.strip()).strip("-.")
    return cleaned or default


def interval_label(seconds: float) -> str:
    """Sampling cadence label written into exports (``20`` -> ``20_seconds``)."""

    return f"{seconds:g}_seconds"

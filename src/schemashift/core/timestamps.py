"""
Timestamp utilities.

Migration versions are local wall-clock stamps (``YYYYMMDDHHMMSS``) so that
file names sort in creation order; bookkeeping timestamps are UTC.

STDLIB ONLY.
"""

from datetime import UTC, datetime

VERSION_FORMAT = "%Y%m%d%H%M%S"
DISPLAY_FORMAT = "%Y-%m-%d %H:%M:%S"


def utc_now() -> datetime:
    """Get current UTC datetime."""
    return datetime.now(UTC)


def version_stamp(now: datetime | None = None) -> str:
    """Format ``now`` (default: local time) as a 14-digit migration version."""
    return (now or datetime.now()).strftime(VERSION_FORMAT)


def format_display(dt: datetime | None) -> str:
    """Render a timestamp for tables, ``-`` when unset."""
    if dt is None:
        return "-"
    return dt.strftime(DISPLAY_FORMAT)

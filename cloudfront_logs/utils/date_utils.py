"""
Date and time utility functions
"""

import time
from datetime import datetime, timedelta, timezone
from typing import Optional

ISO_FORMAT = "%Y-%m-%dT%H:%M:%SZ"
HOUR_KEY_FORMAT = "%Y-%m-%d-%H"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def parse_minutes(value: str) -> int:
    """Validate a minute count given on the command line."""
    if not value.isdigit() or int(value) <= 0:
        raise ValueError("Minutes must be a positive integer")
    return int(value)


def window_start(minutes: int, now: Optional[datetime] = None) -> datetime:
    """Start of a window reaching `minutes` back from now (UTC)."""
    if now is None:
        now = utc_now()
    return now - timedelta(minutes=minutes)


def hour_key(moment: datetime) -> str:
    """Hour-granularity key (YYYY-MM-DD-HH) used in CloudFront object names."""
    return moment.astimezone(timezone.utc).strftime(HOUR_KEY_FORMAT)


def format_utc(moment: datetime) -> str:
    """Zero-padded ISO-8601 UTC representation, e.g. 2025-09-14T10:05:00Z."""
    return moment.astimezone(timezone.utc).strftime(ISO_FORMAT)


def to_local_time(moment: datetime, tz=None) -> str:
    """
    Convert a UTC instant to HH:MM:SS in a target timezone.

    Args:
        moment: Aware datetime
        tz: Target tzinfo (default: the machine's local timezone)
    """
    return moment.astimezone(tz).strftime("%H:%M:%S")


def local_timezone_name(tz=None) -> str:
    """Abbreviated name of the target (or local) timezone, e.g. EDT."""
    if tz is not None:
        return datetime.now(tz).strftime("%Z")
    return time.strftime("%Z")

"""
Cache coverage planning - decides whether a query can be served from cache
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional, Union

from .store import CacheBounds

LABEL_CACHED = "cached"
LABEL_SMART_CACHE = "smart cache"
LABEL_FRESH = "fresh data"


@dataclass(frozen=True)
class UseCacheAsIs:
    """Cache bounds contain the requested start; no fetch needed."""

    label = LABEL_CACHED
    needs_fetch = False
    merge_with_cache = False


@dataclass(frozen=True)
class ExtendCache:
    """Cache exists but does not cover the request; fetch and merge."""

    start: datetime
    end: datetime

    label = LABEL_SMART_CACHE
    needs_fetch = True
    merge_with_cache = True


@dataclass(frozen=True)
class FetchFresh:
    """Ignore the cache for reading; fetch the whole window."""

    start: datetime
    end: datetime

    label = LABEL_FRESH
    needs_fetch = True
    merge_with_cache = False


CoverageDecision = Union[UseCacheAsIs, ExtendCache, FetchFresh]


def plan(requested_start: datetime, bounds: Optional[CacheBounds],
         force_fresh: bool = False, force_cache: bool = False,
         now: Optional[datetime] = None) -> CoverageDecision:
    """
    Decide how to serve a query starting at requested_start.

    Coverage is a bounds check only: a start inside [oldest, newest] is
    considered covered even if the cache has gaps.

    Args:
        requested_start: Start of the requested window (aware datetime)
        bounds: Current cache bounds, None for a missing or empty cache
        force_fresh: Bypass the cache for reading (wins over force_cache)
        force_cache: Serve from a non-empty cache without a coverage check
        now: End of the window (defaults to the current UTC time)

    Returns:
        UseCacheAsIs, ExtendCache or FetchFresh
    """
    if now is None:
        now = datetime.now(timezone.utc)

    if force_fresh or bounds is None:
        return FetchFresh(requested_start, now)

    if force_cache:
        return UseCacheAsIs()

    if requested_start < bounds.oldest or requested_start > bounds.newest:
        return ExtendCache(requested_start, now)

    return UseCacheAsIs()

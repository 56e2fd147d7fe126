"""
Query pipeline: coverage planning, fetching, cache merge and filtering
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, List, Optional

from ..cache.merger import merge
from ..cache.planner import CoverageDecision, plan
from ..cache.store import CacheStore
from ..parse.log_record import LogRecord, parse_log_line
from ..sync.base import DEFAULT_MAX_WORKERS, BaseFetcher, FetchResult
from ..utils.date_utils import hour_key, utc_now, window_start
from .filters import filter_records


@dataclass
class QueryOptions:
    """Inputs of one query invocation."""

    endpoints: List[str]
    minutes: int
    ip: Optional[str] = None
    use_cache: bool = False
    force_fresh: bool = False


@dataclass
class QueryResult:
    """Records selected for a query plus how they were obtained."""

    decision: CoverageDecision
    start: datetime
    records: List[LogRecord] = field(default_factory=list)
    fetch: Optional[FetchResult] = None
    objects_found: int = 0

    @property
    def cache_mode(self) -> str:
        return self.decision.label


def _parse_all(lines: List[str]) -> List[LogRecord]:
    records = []
    for line in lines:
        record = parse_log_line(line)
        if record is not None:
            records.append(record)
    return records


def run_query(options: QueryOptions, store: CacheStore, fetcher: BaseFetcher,
              now: Optional[datetime] = None, max_workers: int = DEFAULT_MAX_WORKERS,
              on_progress: Optional[Callable[[int, int], None]] = None) -> QueryResult:
    """
    Answer a query, fetching only what the cache does not cover.

    Args:
        options: Query inputs
        store: Cache for the queried environment
        fetcher: Source of raw log objects
        now: End of the window (default: current UTC time)
        max_workers: Concurrent downloads
        on_progress: Progress callback forwarded to the fetcher

    Returns:
        QueryResult; an empty result when no log objects exist for the window

    Raises:
        CacheError: if an existing cache cannot be read or written
        FetchError: if the log source cannot be listed
    """
    if now is None:
        now = utc_now()
    start = window_start(options.minutes, now)

    cached_lines: List[str] = []
    bounds = None
    if not options.force_fresh and not store.is_empty():
        cached_lines = store.load()
        bounds = store.bounds(cached_lines)

    decision = plan(start, bounds, force_fresh=options.force_fresh,
                    force_cache=options.use_cache, now=now)
    result = QueryResult(decision=decision, start=start)

    if not decision.needs_fetch:
        lines = cached_lines
    else:
        object_ids = fetcher.list_objects(hour_key(start))
        result.objects_found = len(object_ids)
        if not object_ids:
            return result

        result.fetch = fetcher.fetch_all(object_ids, max_workers=max_workers,
                                         on_progress=on_progress)
        # Fresh data replaces the cache instead of extending it
        existing = cached_lines if decision.merge_with_cache else []
        lines = merge(existing, result.fetch.lines)
        if result.fetch.downloaded:
            store.write(lines)

    result.records = filter_records(_parse_all(lines), options.endpoints, ip=options.ip,
                                    since=start)
    return result

"""
Endpoint / IP filtering of parsed log records
"""

import re
from datetime import datetime
from typing import Iterable, List, Optional

from ..parse.log_record import LogRecord


def parse_endpoints(value: str) -> List[str]:
    """Split comma-joined endpoint input ("/api,/auth") into patterns."""
    return [part.strip() for part in value.split(',') if part.strip()]


def build_endpoint_pattern(endpoints: Iterable[str]) -> re.Pattern:
    """
    Compile endpoint patterns into one OR-ed regular expression.

    Patterns match anywhere in the path, so "/api" also matches "/api/v2/users".

    Raises:
        ValueError: if no pattern is given or a pattern is not a valid regex
    """
    endpoints = [e for e in endpoints if e]
    if not endpoints:
        raise ValueError("At least one endpoint pattern is required")
    try:
        return re.compile("|".join(f"(?:{e})" for e in endpoints))
    except re.error as e:
        raise ValueError(f"Invalid endpoint pattern: {e}") from e


def filter_records(records: Iterable[LogRecord], endpoints: Iterable[str],
                   ip: Optional[str] = None, since: Optional[datetime] = None,
                   presorted: bool = True) -> List[LogRecord]:
    """
    Select records for a query.

    Args:
        records: Parsed records
        endpoints: Endpoint patterns, OR-ed
        ip: Exact client IP to trace (IP mode)
        since: Drop records older than this instant
        presorted: False when records come straight from a fetch and may
            be out of order; they are then stably sorted by timestamp

    Returns:
        Matching records in ascending timestamp order
    """
    pattern = build_endpoint_pattern(endpoints)

    selected = []
    for record in records:
        # IP equality first: cheapest test
        if ip is not None and record.client_ip != ip:
            continue
        if since is not None and record.timestamp < since:
            continue
        if not pattern.search(record.uri_stem):
            continue
        selected.append(record)

    if not presorted:
        selected.sort(key=lambda record: record.timestamp)
    return selected
